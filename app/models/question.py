"""Question and schema models."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.logic.condition_normalizer import SHOW_IF_KEYS, normalize_condition
from app.models.conditions import Condition


class QuestionType:
    RADIO = "radio"
    CHECKBOX = "checkbox"
    LIKERT = "likert"
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"


VALID_QUESTION_TYPES: Tuple[str, ...] = (
    QuestionType.RADIO,
    QuestionType.CHECKBOX,
    QuestionType.TEXT,
    QuestionType.TEXTAREA,
    QuestionType.NUMERIC,
    QuestionType.BOOLEAN,
    QuestionType.LIKERT,
)
CHOICE_QUESTION_TYPES = frozenset({QuestionType.RADIO, QuestionType.CHECKBOX, QuestionType.LIKERT})
TEXT_QUESTION_TYPES = frozenset({QuestionType.TEXT, QuestionType.TEXTAREA})
DEFAULT_QUESTION_TYPE = QuestionType.RADIO


class QuestionOption(BaseModel):
    value: Any
    label: str


class Question(BaseModel):
    """A single authored question.

    Accepts the authored camelCase keys (``isCritical``, ``helpText``,
    ``maxLength``, ``showIf``/``show_if``) as well as snake_case names. The
    visibility condition is normalized on the way in.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    text: str
    type: str = DEFAULT_QUESTION_TYPE
    required: bool = True
    is_critical: bool = Field(default=False, alias="isCritical")
    help_text: Optional[str] = Field(default=None, alias="helpText")
    order: Optional[float] = None
    options: List[QuestionOption] = Field(default_factory=list)
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    max_length: Optional[float] = Field(default=None, alias="maxLength")
    rows: Optional[float] = None
    show_if: Optional[Condition] = None

    @model_validator(mode="before")
    @classmethod
    def _from_authored(cls, data: Any) -> Any:
        """Normalize ``showIf`` and drop loosely-typed fields the validator only warns about."""
        if not isinstance(data, dict):
            return data
        raw = None
        for key in SHOW_IF_KEYS:
            if data.get(key) is not None:
                raw = data[key]
                break
        cleaned = {k: v for k, v in data.items() if k not in SHOW_IF_KEYS}
        cleaned["show_if"] = normalize_condition(raw)

        for key in ("order", "min", "max", "step", "maxLength", "max_length", "rows"):
            if key in cleaned and not _is_number(cleaned[key]):
                cleaned.pop(key)
        for key, default in (("required", True), ("isCritical", False), ("is_critical", False)):
            if key in cleaned and not isinstance(cleaned[key], bool):
                cleaned[key] = default
        for key in ("helpText", "help_text"):
            if key in cleaned and not isinstance(cleaned[key], str):
                cleaned.pop(key)
        options = cleaned.get("options")
        if options is not None:
            if isinstance(options, list):
                cleaned["options"] = [
                    o for o in options if isinstance(o, dict) and isinstance(o.get("label"), str)
                ]
            else:
                cleaned.pop("options")
        if cleaned.get("type") is None:
            cleaned.pop("type", None)
        return cleaned


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ValidatedSchema(BaseModel):
    """A question set that passed validation, including the cycle check.

    Only ``app.logic.schema_validation.validated_schema`` builds these;
    visibility helpers that walk a whole schema accept nothing else.
    """

    model_config = ConfigDict(frozen=True)

    questions: Tuple[Question, ...]
    dependencies: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)

    @property
    def question_ids(self) -> List[str]:
        return [q.id for q in self.questions]

    def get_question(self, question_id: str) -> Optional[Question]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None


__all__ = [
    "CHOICE_QUESTION_TYPES",
    "DEFAULT_QUESTION_TYPE",
    "TEXT_QUESTION_TYPES",
    "VALID_QUESTION_TYPES",
    "Question",
    "QuestionOption",
    "QuestionType",
    "ValidatedSchema",
]
