"""Pydantic models for validation output."""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class CycleReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_cycle: bool = Field(default=False, alias="hasCycle")
    cycles: List[List[str]] = Field(default_factory=list)


class ValidationReport(BaseModel):
    """Outcome of a validation pass.

    ``valid`` always equals ``not errors``. ``question_errors`` maps a question
    id to the messages attributable to it, for highlighting in an editor.
    """

    model_config = ConfigDict(populate_by_name=True)

    valid: bool = True
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    question_errors: Dict[str, List[str]] = Field(default_factory=dict, alias="questionErrors")


__all__ = ["CycleReport", "ValidationReport"]
