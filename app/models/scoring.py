"""Pydantic models for scoring results.

Field names are snake_case in Python and serialize with the camelCase keys
stored on result documents (``riskFlags``, ``answeredCount``...).
"""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class RiskFlag(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    help_text: str = Field(default="", alias="helpText")
    question_ids: List[str] = Field(default_factory=list, alias="questionIds")


class CategoryResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    score: float = 0.0
    raw_score: float = Field(default=0.0, alias="rawScore")
    multiplier: float = 1.0
    band: str = ""
    band_description: str = Field(default="", alias="bandDescription")
    items: List[str] = Field(default_factory=list)
    answered_count: int = Field(default=0, alias="answeredCount")
    total_items: int = Field(default=0, alias="totalItems")


class ScoreResult(BaseModel):
    """Result of one completed attempt."""

    model_config = ConfigDict(populate_by_name=True)

    score: float = 0.0
    band: str = ""
    band_description: str = Field(default="", alias="bandDescription")
    subscales: Dict[str, float] = Field(default_factory=dict)
    risk_flags: Dict[str, RiskFlag] = Field(default_factory=dict, alias="riskFlags")
    answered_count: int = Field(default=0, alias="answeredCount")
    total_items: int = Field(default=0, alias="totalItems")
    categories: Dict[str, CategoryResult] = Field(default_factory=dict)


__all__ = ["CategoryResult", "RiskFlag", "ScoreResult"]
