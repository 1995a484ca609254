"""Pydantic models for visibility response bodies."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class VisibilityDelta(BaseModel):
    now_visible: List[str] = Field(default_factory=list)
    now_hidden: List[str] = Field(default_factory=list)
    suppressed_answers: List[str] = Field(default_factory=list)


class VisibilityView(BaseModel):
    """Visible questions for one answer-map state, in display order."""

    visible: List[str]
    next_question_id: Optional[str] = None
    visibility_delta: Optional[VisibilityDelta] = None


__all__ = ["VisibilityDelta", "VisibilityView"]
