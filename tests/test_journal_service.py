"""Tests for journal validation and the create flow, without HTTP."""

import json

import pytest

from journal import service
from journal.repository import StoreError

from conftest import USER_ID

ENTRY = {"title": "Day 1", "body": "Felt ok", "mood": 3, "date": "2024-01-01"}


class TestParsePayload:
    def test_parses_object(self):
        assert service.parse_payload(json.dumps(ENTRY)) == ENTRY

    def test_malformed_json_propagates_decoder_error(self):
        with pytest.raises(json.JSONDecodeError):
            service.parse_payload("{")

    def test_nan_is_rejected(self):
        with pytest.raises(ValueError, match="Unexpected token NaN"):
            service.parse_payload('{"mood": NaN}')


class TestDecodeBody:
    def test_strips_byte_order_mark(self):
        assert service.decode_body(b"\xef\xbb\xbf{}") == "{}"

    def test_replaces_invalid_bytes(self):
        assert service.decode_body(b"a\xffb") == "a�b"

    def test_keeps_multibyte_text(self):
        assert service.decode_body("日記 🌸".encode("utf-8")) == "日記 🌸"


class TestValidateEntry:
    def test_returns_typed_entry(self):
        entry = service.validate_entry(ENTRY)
        assert entry.title == "Day 1"
        assert entry.mood == 3

    def test_integral_float_mood_is_normalized(self):
        entry = service.validate_entry({**ENTRY, "mood": 4.0})
        assert entry.mood == 4
        assert isinstance(entry.mood, int)

    def test_whitespace_title_counts_as_present(self):
        assert service.validate_entry({**ENTRY, "title": "  "}).title == "  "

    def test_mood_zero_is_reported_as_missing(self):
        with pytest.raises(service.EntryValidationError, match="Missing required fields"):
            service.validate_entry({**ENTRY, "mood": 0})

    def test_none_payload(self):
        with pytest.raises(service.EntryValidationError, match="Missing required fields"):
            service.validate_entry(None)

    def test_validation_errors_are_400(self):
        with pytest.raises(service.EntryValidationError) as exc_info:
            service.validate_entry({**ENTRY, "mood": 9})
        assert exc_info.value.status_code == 400


class TestCreateEntry:
    @pytest.mark.anyio
    async def test_writes_record_owned_by_user(self, store):
        row = await service.create_entry(ENTRY, user_id=USER_ID, store=store)

        assert row["user_id"] == USER_ID
        assert store.inserts == [{"user_id": USER_ID, **ENTRY}]

    @pytest.mark.anyio
    async def test_lookup_before_insert(self, store):
        store.rows.append({"id": 7, "user_id": USER_ID, **ENTRY})

        with pytest.raises(service.EntryConflictError) as exc_info:
            await service.create_entry(ENTRY, user_id=USER_ID, store=store)

        assert exc_info.value.status_code == 409
        assert store.inserts == []

    @pytest.mark.anyio
    async def test_lookup_rejection_is_store_error(self, store):
        async def rejected(*, user_id, date):
            raise StoreError("permission denied for table journal_entries", code="42501")

        store.find_entries = rejected

        with pytest.raises(service.EntryStoreError, match="permission denied"):
            await service.create_entry(ENTRY, user_id=USER_ID, store=store)
        assert store.inserts == []

    @pytest.mark.anyio
    async def test_insert_rejection_keeps_message(self, store):
        store.insert_error = StoreError("new row violates row-level security policy", code="42501")

        with pytest.raises(service.EntryStoreError) as exc_info:
            await service.create_entry(ENTRY, user_id=USER_ID, store=store)

        assert str(exc_info.value) == "new row violates row-level security policy"
        assert exc_info.value.status_code == 400

    @pytest.mark.anyio
    async def test_unique_violation_is_conflict(self, store):
        store.insert_error = StoreError("duplicate key value", code="23505")

        with pytest.raises(service.EntryConflictError, match="Entry already exists for this date"):
            await service.create_entry(ENTRY, user_id=USER_ID, store=store)
