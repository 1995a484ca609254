"""Visibility condition types.

A condition is a small expression tree attached to a question (``showIf``).
Every accepted input shape is mapped onto this closed union by
``app.logic.condition_normalizer`` before any graph or evaluation code runs.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict


class ConditionOperator:
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GTE = "gte"
    LTE = "lte"
    GT = "gt"
    LT = "lt"
    IN = "in"
    CONTAINS = "contains"


# Precedence when a raw node carries more than one operator key
CONDITION_OPERATORS: Tuple[str, ...] = (
    ConditionOperator.EQUALS,
    ConditionOperator.NOT_EQUALS,
    ConditionOperator.GTE,
    ConditionOperator.LTE,
    ConditionOperator.GT,
    ConditionOperator.LT,
    ConditionOperator.IN,
    ConditionOperator.CONTAINS,
)


class SimpleCondition(BaseModel):
    """Compare the answer recorded for ``question_id`` against ``value``.

    ``operator`` is None when the authored node named a question but no
    comparison; such a node never matches.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["simple"] = "simple"
    question_id: str
    operator: Optional[str] = None
    value: Any = None


class AndCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["and"] = "and"
    children: Tuple["Condition", ...]


class OrCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["or"] = "or"
    children: Tuple["Condition", ...]


class NotCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["not"] = "not"
    child: "Condition"


Condition = Union[SimpleCondition, AndCondition, OrCondition, NotCondition]

AndCondition.model_rebuild()
OrCondition.model_rebuild()
NotCondition.model_rebuild()


def referenced_question_ids(condition: Optional[Condition]) -> list[str]:
    """Return every question id referenced by ``condition`` in first-seen order."""
    out: list[str] = []
    seen: set[str] = set()
    stack: list[Condition] = [condition] if condition is not None else []
    while stack:
        node = stack.pop()
        if isinstance(node, SimpleCondition):
            if node.question_id not in seen:
                seen.add(node.question_id)
                out.append(node.question_id)
        elif isinstance(node, (AndCondition, OrCondition)):
            # Reverse so children are visited left to right
            stack.extend(reversed(node.children))
        elif isinstance(node, NotCondition):
            stack.append(node.child)
    return out


__all__ = [
    "CONDITION_OPERATORS",
    "AndCondition",
    "Condition",
    "ConditionOperator",
    "NotCondition",
    "OrCondition",
    "SimpleCondition",
    "referenced_question_ids",
]
