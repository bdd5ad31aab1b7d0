"""
Auth dependencies for FastAPI routes.

These hand out collaborator factories rather than verified users: building or
calling a verifier may fail, and the route has to turn those failures into
responses itself.
"""

from __future__ import annotations

from typing import Callable

from . import service

VerifierFactory = Callable[[], service.IdentityVerifier]


async def get_identity_verifier_factory() -> VerifierFactory:
    return service.identity_verifier
