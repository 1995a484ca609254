"""Visibility rule evaluation for conditionally shown questions.

Centralizes the comparison semantics shared by ``showIf`` conditions and risk
triggers, and the per-question / per-schema visibility computations run each
time a respondent's answer map changes. Everything here is pure: the same
``(question, answers)`` pair always yields the same result.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional
import logging

from app.logic.condition_normalizer import question_condition
from app.logic.safe_number import is_answered, maybe_number
from app.logic.visibility_delta import compute_visibility_delta
from app.models.conditions import (
    AndCondition,
    Condition,
    ConditionOperator,
    NotCondition,
    OrCondition,
    SimpleCondition,
)
from app.models.question import Question, ValidatedSchema
from app.models.response_types import VisibilityDelta

logger = logging.getLogger(__name__)


def _canon(tok: object) -> str:
    """Canonical string form used for non-numeric equality."""
    if isinstance(tok, bool):
        return "true" if tok else "false"
    if tok is None:
        return ""
    return str(tok).strip().lower()


def loosely_equal(answer: Any, expected: Any) -> bool:
    """Numeric-aware equality between a recorded answer and a configured value.

    - Multi-select answers (lists) match when any selected value matches.
    - When both sides read as numbers they are compared numerically, so
      ``"3"`` equals ``3``.
    - Otherwise both sides are compared as case-insensitive strings, with
      booleans canonicalized to ``true``/``false``.
    """
    if isinstance(answer, (list, tuple, set)):
        return any(loosely_equal(item, expected) for item in answer)
    a_num, e_num = maybe_number(answer), maybe_number(expected)
    if a_num is not None and e_num is not None:
        return a_num == e_num
    return _canon(answer) == _canon(expected)


def _compare_ordered(answer: Any, operator: str, threshold: Any) -> bool:
    a_num, t_num = maybe_number(answer), maybe_number(threshold)
    if a_num is None or t_num is None:
        return False
    if operator == ConditionOperator.GTE:
        return a_num >= t_num
    if operator == ConditionOperator.LTE:
        return a_num <= t_num
    if operator == ConditionOperator.GT:
        return a_num > t_num
    return a_num < t_num


def compare_answer(answer: Any, operator: Optional[str], value: Any) -> bool:
    """Apply one comparison operator to an answered value."""
    if operator == ConditionOperator.EQUALS:
        return loosely_equal(answer, value)
    if operator == ConditionOperator.NOT_EQUALS:
        return not loosely_equal(answer, value)
    if operator in (ConditionOperator.GTE, ConditionOperator.LTE, ConditionOperator.GT, ConditionOperator.LT):
        return _compare_ordered(answer, operator, value)
    if operator == ConditionOperator.IN:
        allowed = value if isinstance(value, (list, tuple, set)) else [value]
        return any(loosely_equal(answer, candidate) for candidate in allowed)
    if operator == ConditionOperator.CONTAINS:
        needle = _canon(value)
        if isinstance(answer, (list, tuple, set)):
            return any(needle in _canon(item) for item in answer)
        return needle in _canon(answer)
    # Node names a question but no comparison
    return False


def evaluate_condition(condition: Optional[Condition], answers: Mapping[str, Any]) -> bool:
    """Evaluate a normalized condition tree against an answer map.

    A Simple node whose dependency has not been answered evaluates to False;
    And/Or short-circuit left to right.
    """
    if condition is None:
        return True
    if isinstance(condition, SimpleCondition):
        answer = answers.get(condition.question_id)
        if not is_answered(answer):
            return False
        return compare_answer(answer, condition.operator, condition.value)
    if isinstance(condition, AndCondition):
        return all(evaluate_condition(child, answers) for child in condition.children)
    if isinstance(condition, OrCondition):
        return any(evaluate_condition(child, answers) for child in condition.children)
    if isinstance(condition, NotCondition):
        return not evaluate_condition(condition.child, answers)
    logger.warning("condition_unknown_kind type=%s", type(condition).__name__)
    return False


def is_visible(question: Any, answers: Any) -> bool:
    """Return True if ``question`` should be shown given the current answers.

    Accepts a ``Question`` or a raw authored mapping. A question without a
    visibility condition is always visible.
    """
    answer_map = answers if isinstance(answers, Mapping) else {}
    return evaluate_condition(question_condition(question), answer_map)


def visible_question_ids(schema: ValidatedSchema, answers: Any) -> List[str]:
    """Ids of the currently visible questions, in schema order."""
    return [q.id for q in schema.questions if is_visible(q, answers)]


def visible_questions(schema: ValidatedSchema, answers: Any) -> List[Question]:
    """Visible questions in display order (``order`` first, then authoring position)."""
    indexed = [(pos, q) for pos, q in enumerate(schema.questions) if is_visible(q, answers)]
    indexed.sort(key=lambda item: (item[1].order is None, item[1].order or 0, item[0]))
    return [q for _pos, q in indexed]


def next_question(schema: ValidatedSchema, answers: Any) -> Optional[Question]:
    """First visible question, in display order, that has no answer yet."""
    answer_map = answers if isinstance(answers, Mapping) else {}
    for question in visible_questions(schema, answer_map):
        if not is_answered(answer_map.get(question.id)):
            return question
    return None


def answer_change_delta(schema: ValidatedSchema, before: Any, after: Any) -> VisibilityDelta:
    """Visibility delta caused by moving from answer map ``before`` to ``after``."""
    after_map = after if isinstance(after, Mapping) else {}
    delta = compute_visibility_delta(
        visible_question_ids(schema, before),
        visible_question_ids(schema, after_map),
        after_map,
    )
    if delta.now_visible or delta.now_hidden:
        logger.info(
            "visibility_delta now_visible=%s now_hidden=%s suppressed=%s",
            delta.now_visible,
            delta.now_hidden,
            delta.suppressed_answers,
        )
    return delta


__all__ = [
    "answer_change_delta",
    "compare_answer",
    "evaluate_condition",
    "is_visible",
    "loosely_equal",
    "next_question",
    "visible_question_ids",
    "visible_questions",
]
