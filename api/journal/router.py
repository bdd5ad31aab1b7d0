"""
Journal entry endpoint.

One handler answers every path and method: OPTIONS is the CORS preflight,
anything else is an attempt to create today's entry. Every outcome, including
unexpected failures, leaves as a JSON response.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from auth import dependencies as auth_dependencies
from auth import security

from . import dependencies, service

logger = logging.getLogger(__name__)

router = APIRouter()

JSON_CONTENT_TYPE = "application/json; charset=utf-8"

CORS_HEADERS = {
    "Content-Type": JSON_CONTENT_TYPE,
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

# Unexpected failures get the bare minimum, without the allowed-headers list.
FAILURE_HEADERS = {
    "Content-Type": JSON_CONTENT_TYPE,
    "Access-Control-Allow-Origin": "*",
}

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _json(status_code: int, content: dict[str, Any], *, headers: dict[str, str] = CORS_HEADERS) -> JSONResponse:
    # JSONResponse writes UTF-8 without \u escapes, so entry text leaves as sent.
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content), headers=headers)


def _error_message(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


@router.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
async def handle_journal_request(
    request: Request,
    verifier_factory: auth_dependencies.VerifierFactory = Depends(auth_dependencies.get_identity_verifier_factory),
    store_factory: dependencies.StoreFactory = Depends(dependencies.get_record_store_factory),
) -> Response:
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)

    try:
        access_token = security.extract_bearer_token(request.headers.get("authorization"))
        verifier = verifier_factory()
        try:
            principal = await verifier.verify(access_token)
        except security.AuthSecurityError as exc:
            logger.info("journal_unauthorized reason=%s", exc)
            return _json(401, {"error": "Unauthorized"})
        if principal is None:
            return _json(401, {"error": "Unauthorized"})

        raw_body = service.decode_body(await request.body())
        payload = service.parse_payload(raw_body)

        store = store_factory(principal, access_token)
        row = await service.create_entry(payload, user_id=principal.id, store=store)
        return _json(200, {"data": row})
    except service.JournalError as exc:
        return _json(exc.status_code, {"error": str(exc)})
    except Exception as exc:
        logger.exception("journal_request_failed method=%s path=%s", request.method, request.url.path)
        return _json(500, {"error": _error_message(exc)}, headers=FAILURE_HEADERS)
