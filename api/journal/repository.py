"""
Journal entry persistence.

Two stores with the same shape:
- RestRecordStore: Supabase PostgREST over HTTP (JOURNAL_STORE=rest, default)
- PostgresRecordStore: direct asyncpg (JOURNAL_STORE=postgres)

Both are built per request from the caller's credential, so the database's
row-level security sees the caller rather than a privileged service account.
"""

from __future__ import annotations

from typing import Any, Protocol

import asyncpg

from auth.schemas import Principal
from core import config, db, supabase

UNIQUE_VIOLATION = "23505"


class StoreError(RuntimeError):
    """The store answered and rejected the operation."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code

    @property
    def is_unique_violation(self) -> bool:
        return self.code == UNIQUE_VIOLATION


class RecordStore(Protocol):
    """Interface for reading and writing journal entry rows."""

    async def find_entries(self, *, user_id: str, date: str) -> list[dict[str, Any]]:
        """Return the entries (at least their ids) for one user and date."""
        ...

    async def insert_entry(self, record: dict[str, Any]) -> dict[str, Any]:
        """Insert one entry and return the stored row."""
        ...


class RestRecordStore:
    def __init__(
        self,
        access_token: str,
        *,
        base_url: str | None = None,
        anon_key: str | None = None,
        table: str | None = None,
        timeout_s: float | None = None,
        transport: Any = None,
    ) -> None:
        self.access_token = access_token
        self.base_url = config.supabase_url() if base_url is None else base_url
        self.anon_key = config.supabase_anon_key() if anon_key is None else anon_key
        self.table = table or config.journal_table()
        self.timeout_s = config.supabase_timeout_s() if timeout_s is None else timeout_s
        self.transport = transport

    def _connection(self) -> dict[str, Any]:
        return {
            "base_url": self.base_url,
            "anon_key": self.anon_key,
            "access_token": self.access_token,
            "table": self.table,
            "timeout_s": self.timeout_s,
            "transport": self.transport,
        }

    async def find_entries(self, *, user_id: str, date: str) -> list[dict[str, Any]]:
        try:
            return await supabase.select_rows(
                columns="id",
                filters={"user_id": user_id, "date": date},
                **self._connection(),
            )
        except supabase.SupabaseError as exc:
            if exc.status_code is None:
                raise
            raise StoreError(str(exc), code=exc.code) from exc

    async def insert_entry(self, record: dict[str, Any]) -> dict[str, Any]:
        try:
            return await supabase.insert_row(row=record, **self._connection())
        except supabase.SupabaseError as exc:
            if exc.status_code is None:
                raise
            raise StoreError(str(exc), code=exc.code) from exc


class PostgresRecordStore:
    def __init__(
        self,
        claims: dict[str, Any],
        *,
        role: str | None = None,
        table: str | None = None,
    ) -> None:
        self.claims = claims
        self.role = role or config.db_role()
        self.table = table or config.journal_table()

    async def find_entries(self, *, user_id: str, date: str) -> list[dict[str, Any]]:
        try:
            async with db.claims_scoped(self.claims, role=self.role) as conn:
                return await db.fetch_all(
                    conn,
                    f"""
                    SELECT id
                    FROM {self.table}
                    WHERE user_id = $1::uuid
                      AND date = $2::text::date
                    """,
                    user_id,
                    date,
                )
        except asyncpg.PostgresError as exc:
            raise StoreError(str(exc), code=exc.sqlstate) from exc

    async def insert_entry(self, record: dict[str, Any]) -> dict[str, Any]:
        try:
            async with db.claims_scoped(self.claims, role=self.role) as conn:
                row = await db.fetch_one(
                    conn,
                    f"""
                    INSERT INTO {self.table} (user_id, title, body, mood, date)
                    VALUES ($1::uuid, $2, $3, $4, $5::text::date)
                    RETURNING *
                    """,
                    record["user_id"],
                    record["title"],
                    record["body"],
                    record["mood"],
                    record["date"],
                )
        except asyncpg.PostgresError as exc:
            raise StoreError(str(exc), code=exc.sqlstate) from exc

        if row is None:
            raise StoreError("Insert returned no row.")
        return row


def record_store_for(principal: Principal, access_token: str) -> RecordStore:
    if config.store_backend() == "postgres":
        claims = dict(principal.claims)
        claims.setdefault("sub", principal.id)
        claims.setdefault("role", principal.role)
        return PostgresRecordStore(claims)
    return RestRecordStore(access_token)
