"""Problem+JSON utilities and global exception handlers.

Defines the RFC7807 media type and handler callables that produce
application/problem+json responses.
"""

from __future__ import annotations

import logging
from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.logic.problem_factory import (
    problem_internal_error,
    problem_request_invalid,
    problem_schema_invalid,
)
from app.logic.validation import SchemaValidationError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def _problem_response(problem: dict, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        jsonable_encoder(problem),
        status_code=int(problem.get("status", 500)),
        media_type=PROBLEM_MEDIA_TYPE,
        headers=headers or None,
    )


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    status_code = int(getattr(exc, "status_code", 500) or 500)
    if isinstance(exc.detail, dict):
        detail = {"status": status_code, **exc.detail}
    else:
        detail = {"title": "Error", "status": status_code, "detail": str(exc.detail or "")}
    headers = {str(k): str(v) for k, v in (exc.headers or {}).items()}
    return _problem_response(detail, headers)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    logger.info("request_validation_failed path=%s errors=%d", request.url.path, len(exc.errors()))
    return _problem_response(problem_request_invalid(list(exc.errors())))


async def handle_schema_validation_error(request: Request, exc: SchemaValidationError) -> JSONResponse:  # noqa: D401
    return _problem_response(problem_schema_invalid(exc.report))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error path=%s", request.url.path, exc_info=True)
    return _problem_response(problem_internal_error())


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_schema_validation_error",
    "handle_unexpected_error",
]
