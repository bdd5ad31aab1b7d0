"""
Supabase HTTP client helpers.

Used endpoints:
- GET  /auth/v1/user          -> {"id": "...", "email": "...", "role": "..."}
- GET  /rest/v1/<table>?...   -> [{...}, ...]
- POST /rest/v1/<table>       -> {...}  (single row, Prefer: return=representation)

Every call carries the project's anon key plus the caller's own access token,
so Supabase applies row-level security as that caller.
"""

from __future__ import annotations

from typing import Any

import httpx

# Supabase failures are explicit and separable from transport errors.
class SupabaseError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


def _normalize_base_url(base_url: str) -> str:
    base_url = (base_url or "").strip()
    if not base_url:
        raise SupabaseError("SUPABASE_URL is empty.")
    return base_url.rstrip("/")


def _headers(*, anon_key: str, access_token: str) -> dict[str, str]:
    headers = {"apikey": anon_key}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    return headers


def _error_message(resp: httpx.Response) -> tuple[str, str | None]:
    """
    Pull (message, code) out of an auth or PostgREST error body.
    """
    try:
        data = resp.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        for key in ("message", "msg", "error_description", "error"):
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                code = data.get("code")
                return value.strip(), str(code) if code is not None else None

    # Avoid dumping huge bodies; include a small snippet.
    return f"Supabase request failed: {resp.status_code} {resp.text[:500]}", None


async def get_user(
    *,
    base_url: str,
    anon_key: str,
    access_token: str,
    timeout_s: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """
    Resolve an access token to its Supabase user.
    """
    base_url = _normalize_base_url(base_url)

    async with httpx.AsyncClient(base_url=base_url, timeout=timeout_s, transport=transport) as client:
        resp = await client.get(
            "/auth/v1/user",
            headers=_headers(anon_key=anon_key, access_token=access_token),
        )

    if resp.status_code != 200:
        message, code = _error_message(resp)
        raise SupabaseError(message, status_code=resp.status_code, code=code)

    data = resp.json()
    if not isinstance(data, dict) or not data.get("id"):
        raise SupabaseError("Supabase returned no user.", status_code=resp.status_code)
    return data


async def select_rows(
    *,
    base_url: str,
    anon_key: str,
    access_token: str,
    table: str,
    columns: str = "*",
    filters: dict[str, str] | None = None,
    timeout_s: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[dict[str, Any]]:
    """
    Select rows where every `filters` column equals the given value.
    """
    base_url = _normalize_base_url(base_url)
    params = {"select": columns}
    for column, value in (filters or {}).items():
        params[column] = f"eq.{value}"

    async with httpx.AsyncClient(base_url=base_url, timeout=timeout_s, transport=transport) as client:
        resp = await client.get(
            f"/rest/v1/{table}",
            params=params,
            headers=_headers(anon_key=anon_key, access_token=access_token),
        )

    if resp.status_code != 200:
        message, code = _error_message(resp)
        raise SupabaseError(message, status_code=resp.status_code, code=code)

    data = resp.json()
    if not isinstance(data, list):
        raise SupabaseError("Supabase returned a non-list select result.", status_code=resp.status_code)
    return data


async def insert_row(
    *,
    base_url: str,
    anon_key: str,
    access_token: str,
    table: str,
    row: dict[str, Any],
    timeout_s: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """
    Insert one row and return it as stored (ids and defaults filled in).
    """
    base_url = _normalize_base_url(base_url)
    headers = _headers(anon_key=anon_key, access_token=access_token)
    headers["Prefer"] = "return=representation"
    # Ask PostgREST for a single object instead of a one-element array.
    headers["Accept"] = "application/vnd.pgrst.object+json"

    async with httpx.AsyncClient(base_url=base_url, timeout=timeout_s, transport=transport) as client:
        resp = await client.post(f"/rest/v1/{table}", json=row, headers=headers)

    if resp.status_code not in (200, 201):
        message, code = _error_message(resp)
        raise SupabaseError(message, status_code=resp.status_code, code=code)

    data = resp.json()
    if isinstance(data, list):
        data = data[0] if len(data) == 1 else None
    if not isinstance(data, dict):
        raise SupabaseError("Supabase returned no inserted row.", status_code=resp.status_code)
    return data
