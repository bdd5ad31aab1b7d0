"""
Auth models.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Principal(BaseModel):
    """
    The authenticated caller of one request.
    """

    id: str = Field(..., min_length=1)
    email: str | None = None
    role: str = "authenticated"
    # JWT claims forwarded to Postgres for row-level security.
    claims: dict[str, Any] = Field(default_factory=dict)
