"""
Auth security helpers.

Local verification of Supabase access tokens (HS256, signed with the project's
JWT secret). Used when AUTH_MODE=local instead of asking Supabase Auth.
"""

from __future__ import annotations

from typing import Any

import jwt

from core import config

JWT_ALGORITHMS = ["HS256"]


class AuthSecurityError(RuntimeError):
    pass


def extract_bearer_token(authorization: str | None) -> str:
    """
    Return the credential part of an Authorization header.

    Missing or malformed headers yield an empty string; rejecting it is left
    to the identity verifier.
    """
    raw = (authorization or "").strip()
    if not raw:
        return ""

    parts = raw.split(" ", 1)
    if len(parts) == 2 and parts[0].strip().lower() == "bearer":
        return parts[1].strip()
    return raw


def decode_access_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    secret = config.supabase_jwt_secret()
    if not secret:
        raise RuntimeError("SUPABASE_JWT_SECRET is not set.")

    try:
        payload = jwt.decode(
            raw,
            secret,
            algorithms=JWT_ALGORITHMS,
            audience=config.supabase_jwt_audience(),
            options={"require": ["exp", "sub"]},
        )
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    subject = str(payload.get("sub") or "").strip()
    if not subject:
        raise AuthSecurityError("Access token has no subject.")

    return payload
