"""Submission-time scoring route."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from app.logic.risk import summarize_risk
from app.logic.scoring import compute_score
from app.models.payloads import ScoringRequest, ScoringResponse


router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/scoring",
    summary="Score a completed answer map",
    operation_id="computeScore",
    tags=["Scoring"],
    response_model=ScoringResponse,
)
def score_attempt(payload: ScoringRequest) -> ScoringResponse:
    result = compute_score(payload.scoring_rules, payload.risk_rules, payload.answers)
    return ScoringResponse(
        result=result,
        risk_help_text=summarize_risk(payload.risk_rules, result.risk_flags),
    )
