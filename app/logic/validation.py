"""Engine exceptions and answer-map coercion.

Validation of authored content is returned as data (see
``app.logic.schema_validation``); the exceptions here are for callers that
need a hard precondition, such as building a ``ValidatedSchema``.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, TYPE_CHECKING
import logging

if TYPE_CHECKING:  # pragma: no cover
    from app.models.validation import ValidationReport


logger = logging.getLogger(__name__)


class AssessmentEngineError(ValueError):
    pass


class SchemaValidationError(AssessmentEngineError):
    """Raised when a schema is required to be valid but is not."""

    def __init__(self, report: "ValidationReport") -> None:
        self.report = report
        first = report.errors[0] if report.errors else "schema is invalid"
        super().__init__(first)


def coerce_answer_map(answers: Any) -> Dict[str, Any]:
    """Return a plain ``{question_id: raw_value}`` dict for any input.

    Non-mapping input yields an empty map; keys are stringified. Values are
    left untouched: numeric coercion happens where values are consumed.
    """
    if answers is None:
        return {}
    if not isinstance(answers, Mapping):
        logger.warning("answer_map_ignored type=%s", type(answers).__name__)
        return {}
    return {str(k): v for k, v in answers.items()}


__all__ = ["AssessmentEngineError", "SchemaValidationError", "coerce_answer_map"]
