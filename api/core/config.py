"""
Environment-backed settings.

Values are read on every call (not cached at import time) so a process picks
up the environment it was started with and tests can patch it freely.
"""

from __future__ import annotations

import os
import re

AUTH_MODES = ("remote", "local")
STORE_BACKENDS = ("rest", "postgres")

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def supabase_url() -> str:
    return _env("SUPABASE_URL")


def supabase_anon_key() -> str:
    return _env("SUPABASE_ANON_KEY")


def supabase_jwt_secret() -> str:
    return _env("SUPABASE_JWT_SECRET")


def supabase_jwt_audience() -> str:
    return _env("SUPABASE_JWT_AUDIENCE", "authenticated")


def supabase_timeout_s() -> float:
    return _env_float("SUPABASE_TIMEOUT_S", 10.0)


def auth_mode() -> str:
    mode = _env("AUTH_MODE", "remote").lower()
    if mode not in AUTH_MODES:
        raise RuntimeError(f"AUTH_MODE must be one of {', '.join(AUTH_MODES)} (got {mode!r}).")
    return mode


def store_backend() -> str:
    backend = _env("JOURNAL_STORE", "rest").lower()
    if backend not in STORE_BACKENDS:
        raise RuntimeError(
            f"JOURNAL_STORE must be one of {', '.join(STORE_BACKENDS)} (got {backend!r})."
        )
    return backend


def journal_table() -> str:
    # Interpolated into SQL by the Postgres store, so only plain identifiers.
    table = _env("JOURNAL_TABLE", "journal_entries")
    if not _IDENTIFIER_RE.match(table):
        raise RuntimeError(f"JOURNAL_TABLE is not a valid table name: {table!r}")
    return table


def db_role() -> str:
    return _env("DB_ROLE", "authenticated")


def log_level() -> str:
    return _env("LOG_LEVEL", "INFO").upper()
