"""Centralised construction of problem+json payloads.

Route modules and exception handlers build error bodies here instead of
embedding titles, statuses and codes inline.
"""

from __future__ import annotations

from typing import Any, Dict, List
import logging

from app.models.validation import ValidationReport


logger = logging.getLogger(__name__)

SCHEMA_INVALID = {"code": "SCHEMA_INVALID", "status": 422}
REQUEST_INVALID = {"code": "REQUEST_INVALID", "status": 422}
INTERNAL_ERROR = {"code": "INTERNAL_ERROR", "status": 500}


def _logged(problem: Dict[str, Any]) -> Dict[str, Any]:
    logger.info("error_handler.handle code=%s status=%s", problem.get("code"), problem.get("status"))
    return problem


def problem_schema_invalid(report: ValidationReport) -> Dict[str, Any]:
    """Return a 422 problem carrying the full validation report."""
    return _logged(
        {
            "title": "Schema Invalid",
            "status": SCHEMA_INVALID["status"],
            "detail": report.errors[0] if report.errors else "schema is invalid",
            "code": SCHEMA_INVALID["code"],
            "errors": list(report.errors),
            "warnings": list(report.warnings),
            "questionErrors": {k: list(v) for k, v in report.question_errors.items()},
        }
    )


def problem_request_invalid(errors: List[Any]) -> Dict[str, Any]:
    """Return a 422 problem for a request body that failed model validation."""
    return _logged(
        {
            "title": "Invalid Request",
            "status": REQUEST_INVALID["status"],
            "detail": "Request validation failed",
            "code": REQUEST_INVALID["code"],
            "errors": errors,
        }
    )


def problem_internal_error() -> Dict[str, Any]:
    return _logged(
        {
            "title": "Internal Server Error",
            "status": INTERNAL_ERROR["status"],
            "code": INTERNAL_ERROR["code"],
        }
    )


__all__ = [
    "INTERNAL_ERROR",
    "REQUEST_INVALID",
    "SCHEMA_INVALID",
    "problem_internal_error",
    "problem_request_invalid",
    "problem_schema_invalid",
]
