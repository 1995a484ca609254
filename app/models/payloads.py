"""Request payload models for the HTTP adapter.

Schema and rule documents stay loosely typed at this boundary: the engine
validates their content and reports problems as data rather than letting
request parsing reject them.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.scoring import ScoreResult


class VisibilityRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_schema: Any = Field(alias="schema")
    answers: Dict[str, Any] = Field(default_factory=dict)
    # When present, the response includes the delta caused by the latest change
    previous_answers: Optional[Dict[str, Any]] = Field(default=None, alias="previousAnswers")


class ScoringRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    scoring_rules: Optional[Dict[str, Any]] = Field(default=None, alias="scoringRules")
    risk_rules: Optional[Dict[str, Any]] = Field(default=None, alias="riskRules")
    answers: Dict[str, Any] = Field(default_factory=dict)


class ScoringResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    result: ScoreResult
    risk_help_text: Optional[str] = Field(default=None, alias="riskHelpText")


__all__ = ["ScoringRequest", "ScoringResponse", "VisibilityRequest"]
