"""Normalization of authored visibility conditions.

Authored schemas carry conditions in several shapes: ``showIf`` or
``show_if`` on the question, ``questionId`` or ``question`` on a node, and
plain lists of conditions in place of an explicit ``and``. This module is the
only place that knows about those variants; everything downstream works on the
``Condition`` union from ``app.models.conditions``.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional
import logging

from app.models.conditions import (
    CONDITION_OPERATORS,
    AndCondition,
    Condition,
    NotCondition,
    OrCondition,
    SimpleCondition,
)


logger = logging.getLogger(__name__)

SHOW_IF_KEYS = ("showIf", "show_if")
QUESTION_REF_KEYS = ("questionId", "question")


def raw_show_if(question: Any) -> Any:
    """Return the raw visibility condition attached to a question, if any.

    Accepts a mapping (authored JSON) and returns None for anything else.
    """
    if not isinstance(question, Mapping):
        return None
    for key in SHOW_IF_KEYS:
        value = question.get(key)
        if value is not None:
            return value
    return None


def raw_question_ref(node: Any) -> Optional[str]:
    """Return the question id named by a raw condition node, or None."""
    if not isinstance(node, Mapping):
        return None
    for key in QUESTION_REF_KEYS:
        value = node.get(key)
        if value:
            return str(value)
    return None


def _operator_of(node: Mapping) -> tuple[Optional[str], Any]:
    for op in CONDITION_OPERATORS:
        if op in node:
            return op, node[op]
    return None, None


def normalize_condition(raw: Any) -> Optional[Condition]:
    """Map a raw condition onto the ``Condition`` union.

    Returns None when the input expresses no constraint (absent, empty, or only
    nodes without a question reference). Never raises.
    """
    if raw is None:
        return None
    if isinstance(raw, (SimpleCondition, AndCondition, OrCondition, NotCondition)):
        return raw
    if isinstance(raw, (list, tuple)):
        return _connective(AndCondition, raw)
    if not isinstance(raw, Mapping):
        logger.debug("condition_normalize_ignored type=%s", type(raw).__name__)
        return None

    if isinstance(raw.get("and"), (list, tuple)):
        return _connective(AndCondition, raw["and"])
    if isinstance(raw.get("or"), (list, tuple)):
        return _connective(OrCondition, raw["or"])
    if raw.get("not") is not None:
        child = normalize_condition(raw["not"])
        return NotCondition(child=child) if child is not None else None

    qid = raw_question_ref(raw)
    if qid is None:
        return None
    op, value = _operator_of(raw)
    return SimpleCondition(question_id=qid, operator=op, value=value)


def _connective(cls, items) -> Optional[Condition]:  # type: ignore[no-untyped-def]
    children = tuple(c for c in (normalize_condition(i) for i in items) if c is not None)
    if not children:
        return None
    return cls(children=children)


def question_condition(question: Any) -> Optional[Condition]:
    """Normalized visibility condition of a raw question mapping or model."""
    existing = getattr(question, "show_if", None)
    if existing is not None and not isinstance(question, Mapping):
        return existing
    return normalize_condition(raw_show_if(question))


__all__ = [
    "QUESTION_REF_KEYS",
    "SHOW_IF_KEYS",
    "normalize_condition",
    "question_condition",
    "raw_question_ref",
    "raw_show_if",
]
