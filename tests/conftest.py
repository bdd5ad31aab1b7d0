"""Shared fixtures: in-memory collaborators wired into the FastAPI app."""

from itertools import count

import pytest
from fastapi.testclient import TestClient

from auth import dependencies as auth_dependencies
from auth.schemas import Principal
from auth.security import AuthSecurityError
from journal import dependencies as journal_dependencies
from journal.repository import StoreError, UNIQUE_VIOLATION
from main import app

VALID_TOKEN = "valid-token"
USER_ID = "8c5a3c1e-2f43-4a57-9a53-3f1c0d6f0b11"


class FakeVerifier:
    def __init__(self, tokens):
        self.tokens = tokens
        self.seen = []

    async def verify(self, access_token):
        self.seen.append(access_token)
        principal = self.tokens.get(access_token)
        if principal is None:
            raise AuthSecurityError("Invalid access token.")
        return principal


class InMemoryStore:
    """Mimics the journal table including its (user_id, date) unique constraint."""

    def __init__(self):
        self.rows = []
        self.queries = []
        self.inserts = []
        self.insert_error = None
        self.skip_lookup = False
        self._ids = count(1)

    async def find_entries(self, *, user_id, date):
        self.queries.append((user_id, date))
        if self.skip_lookup:
            return []
        return [
            {"id": row["id"]}
            for row in self.rows
            if row["user_id"] == user_id and row["date"] == date
        ]

    async def insert_entry(self, record):
        self.inserts.append(record)
        if self.insert_error is not None:
            raise self.insert_error
        if any(r["user_id"] == record["user_id"] and r["date"] == record["date"] for r in self.rows):
            raise StoreError(
                'duplicate key value violates unique constraint "journal_entries_user_id_date_key"',
                code=UNIQUE_VIOLATION,
            )
        row = {"id": next(self._ids), **record, "created_at": "2024-01-01T08:00:00+00:00"}
        self.rows.append(row)
        return row


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def principal():
    return Principal(id=USER_ID, email="writer@example.com")


@pytest.fixture
def verifier(principal):
    return FakeVerifier({VALID_TOKEN: principal})


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def store_calls():
    return []


@pytest.fixture
def client(verifier, store, store_calls):
    def store_for(principal, access_token):
        store_calls.append((principal, access_token))
        return store

    app.dependency_overrides[auth_dependencies.get_identity_verifier_factory] = lambda: (lambda: verifier)
    app.dependency_overrides[journal_dependencies.get_record_store_factory] = lambda: store_for
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {VALID_TOKEN}"}
