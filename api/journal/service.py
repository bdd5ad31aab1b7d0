"""
Journal business logic.

Scope:
- parse and validate a submitted entry
- enforce one entry per user and date
- write the entry owned by the authenticated caller
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from . import repository, schemas

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "body", "mood", "date")
MOOD_MIN = 1
MOOD_MAX = 5

MISSING_FIELDS_MESSAGE = "Missing required fields"
MOOD_RANGE_MESSAGE = f"Mood must be between {MOOD_MIN} and {MOOD_MAX}"
CONFLICT_MESSAGE = "Entry already exists for this date"


class JournalError(RuntimeError):
    status_code = 400


class EntryValidationError(JournalError):
    pass


class EntryConflictError(JournalError):
    status_code = 409


class EntryStoreError(JournalError):
    pass


def decode_body(raw_body: bytes) -> str:
    """
    Decode a request body the way a browser reads text: a leading UTF-8 BOM
    is dropped and undecodable bytes become U+FFFD.
    """
    return raw_body.decode("utf-8-sig", errors="replace")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Unexpected token {name} in JSON")


def parse_payload(raw_body: str) -> Any:
    """
    Parse a request body as strict JSON (no NaN or Infinity). Malformed JSON
    is not a validation error: the decoder's exception propagates unchanged.
    """
    return json.loads(raw_body, parse_constant=_reject_constant)


def _is_blank(value: Any) -> bool:
    # Falsy JSON values: null, false, "", 0. Whitespace-only text counts as present.
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (int, float)):
        return value == 0
    return False


def _mood_in_range(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return MOOD_MIN <= value <= MOOD_MAX


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "entry"
    return f"Invalid journal entry: {field}: {first.get('msg', 'invalid value')}"


def validate_entry(payload: Any) -> schemas.JournalEntryInput:
    if not isinstance(payload, dict):
        raise EntryValidationError(MISSING_FIELDS_MESSAGE)

    if any(_is_blank(payload.get(field)) for field in REQUIRED_FIELDS):
        raise EntryValidationError(MISSING_FIELDS_MESSAGE)

    if not _mood_in_range(payload["mood"]):
        raise EntryValidationError(MOOD_RANGE_MESSAGE)

    try:
        return schemas.JournalEntryInput.model_validate(payload)
    except ValidationError as exc:
        raise EntryValidationError(_describe(exc)) from exc


async def create_entry(
    payload: Any,
    *,
    user_id: str,
    store: repository.RecordStore,
) -> dict[str, Any]:
    """
    Validate `payload` and store it as `user_id`'s entry for its date.

    The existence check is a fast path only; two concurrent requests can both
    pass it, and the table's unique constraint on (user_id, date) decides.
    """
    entry = validate_entry(payload)

    try:
        existing = await store.find_entries(user_id=user_id, date=entry.date)
    except repository.StoreError as exc:
        logger.warning("journal_lookup_rejected user_id=%s date=%s code=%s", user_id, entry.date, exc.code)
        raise EntryStoreError(str(exc)) from exc

    if existing:
        logger.info("journal_entry_conflict user_id=%s date=%s", user_id, entry.date)
        raise EntryConflictError(CONFLICT_MESSAGE)

    record = schemas.JournalEntryRecord(user_id=user_id, **entry.model_dump())
    try:
        row = await store.insert_entry(record.model_dump())
    except repository.StoreError as exc:
        if exc.is_unique_violation:
            logger.info("journal_entry_conflict user_id=%s date=%s source=constraint", user_id, entry.date)
            raise EntryConflictError(CONFLICT_MESSAGE) from exc
        logger.warning("journal_insert_rejected user_id=%s date=%s code=%s", user_id, entry.date, exc.code)
        raise EntryStoreError(str(exc)) from exc

    logger.info("journal_entry_created user_id=%s date=%s entry_id=%s", user_id, entry.date, row.get("id"))
    return row
