"""
Pydantic schemas for journal entries.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, StrictStr


class JournalEntryInput(BaseModel):
    # Anything else the client sends (including a `user_id`) is dropped.
    model_config = ConfigDict(extra="ignore")

    title: StrictStr
    body: StrictStr
    mood: int
    date: StrictStr


class JournalEntryRecord(JournalEntryInput):
    """
    Row written to the store; `user_id` always comes from the principal.
    """

    user_id: str
