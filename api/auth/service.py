"""
Auth business logic: resolve a bearer credential to a Principal.
"""

from __future__ import annotations

from typing import Any, Protocol

from core import config, supabase

from . import schemas, security


class IdentityVerifier(Protocol):
    """Interface for turning a caller's credential into a Principal."""

    async def verify(self, access_token: str) -> schemas.Principal:
        """Return the principal or raise AuthSecurityError."""
        ...


def _principal_from_user(user: dict[str, Any]) -> schemas.Principal:
    user_id = str(user.get("id") or "").strip()
    if not user_id:
        raise security.AuthSecurityError("User has no id.")
    role = str(user.get("role") or "").strip() or "authenticated"
    email = user.get("email")
    return schemas.Principal(
        id=user_id,
        email=str(email) if email else None,
        role=role,
        claims={"sub": user_id, "role": role, "email": email},
    )


def _principal_from_claims(claims: dict[str, Any]) -> schemas.Principal:
    email = claims.get("email")
    return schemas.Principal(
        id=str(claims["sub"]).strip(),
        email=str(email) if email else None,
        role=str(claims.get("role") or "").strip() or "authenticated",
        claims=claims,
    )


class SupabaseIdentityVerifier:
    """Asks Supabase Auth who owns the token (AUTH_MODE=remote)."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        anon_key: str | None = None,
        timeout_s: float | None = None,
        transport: Any = None,
    ) -> None:
        self.base_url = config.supabase_url() if base_url is None else base_url
        self.anon_key = config.supabase_anon_key() if anon_key is None else anon_key
        self.timeout_s = config.supabase_timeout_s() if timeout_s is None else timeout_s
        self.transport = transport

    async def verify(self, access_token: str) -> schemas.Principal:
        if not (access_token or "").strip():
            raise security.AuthSecurityError("Missing access token.")

        try:
            user = await supabase.get_user(
                base_url=self.base_url,
                anon_key=self.anon_key,
                access_token=access_token,
                timeout_s=self.timeout_s,
                transport=self.transport,
            )
        except supabase.SupabaseError as exc:
            # Only an answer from Supabase is a verdict on the token;
            # configuration problems surface as unexpected errors.
            if exc.status_code is None:
                raise
            raise security.AuthSecurityError(str(exc)) from exc

        return _principal_from_user(user)


class JwtIdentityVerifier:
    """Verifies the token signature locally (AUTH_MODE=local)."""

    async def verify(self, access_token: str) -> schemas.Principal:
        claims = security.decode_access_token(access_token)
        return _principal_from_claims(claims)


def identity_verifier() -> IdentityVerifier:
    if config.auth_mode() == "local":
        return JwtIdentityVerifier()
    return SupabaseIdentityVerifier()
