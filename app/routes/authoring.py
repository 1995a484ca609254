"""Authoring routes: schema and test document validation.

Validation outcomes are returned as a 200 report in every case, including
invalid documents, so an editor can render every problem at once.
"""

from __future__ import annotations

from typing import Any
import logging

from fastapi import APIRouter, Body

from app.logic.schema_validation import validate_schema, validate_test_data
from app.models.validation import ValidationReport


router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/schemas/validate",
    summary="Validate a question schema",
    operation_id="validateSchema",
    tags=["Authoring"],
    response_model=ValidationReport,
)
def validate_schema_document(schema: Any = Body(...)) -> ValidationReport:
    report = validate_schema(schema)
    logger.info("authoring_schema_validated valid=%s errors=%d", report.valid, len(report.errors))
    return report


@router.post(
    "/tests/validate",
    summary="Validate a full test document (title, schema, scoring and risk rules)",
    operation_id="validateTestDocument",
    tags=["Authoring"],
    response_model=ValidationReport,
)
def validate_test_document(test: Any = Body(...)) -> ValidationReport:
    report = validate_test_data(test)
    logger.info("authoring_test_validated valid=%s errors=%d", report.valid, len(report.errors))
    return report
