"""Respondent-facing visibility route.

Called on every answer change: returns the visible question ids in display
order and the next unanswered one. The schema is validated (cycle check
included) before evaluation; an invalid schema yields a 422 problem.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter

from app.logic.schema_validation import validated_schema
from app.logic.visibility_rules import answer_change_delta, next_question, visible_questions
from app.models.payloads import VisibilityRequest
from app.models.response_types import VisibilityView


router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/visibility",
    summary="Compute visible questions for an answer map",
    operation_id="computeVisibility",
    tags=["Visibility"],
    response_model=VisibilityView,
)
def compute_visibility(payload: VisibilityRequest) -> VisibilityView:
    # SchemaValidationError propagates to the problem+json handler
    schema = validated_schema(payload.question_schema)
    shown = visible_questions(schema, payload.answers)
    upcoming = next_question(schema, payload.answers)
    delta = None
    if payload.previous_answers is not None:
        delta = answer_change_delta(schema, payload.previous_answers, payload.answers)
    logger.info(
        "visibility_computed questions=%d visible=%d next=%s",
        len(schema.questions),
        len(shown),
        upcoming.id if upcoming else None,
    )
    return VisibilityView(
        visible=[q.id for q in shown],
        next_question_id=upcoming.id if upcoming else None,
        visibility_delta=delta,
    )
