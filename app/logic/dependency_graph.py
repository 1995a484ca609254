"""Dependency graph over conditionally shown questions.

Nodes are question ids; ``A -> B`` when A's visibility condition references B.
No validation happens here: dangling references are kept as edges so the
validator and cycle detector can decide what to do with them.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from app.logic.condition_normalizer import question_condition
from app.models.conditions import referenced_question_ids


DependencyGraph = Dict[str, Tuple[str, ...]]


def _question_id(question: Any) -> Optional[str]:
    if isinstance(question, Mapping):
        qid = question.get("id")
    else:
        qid = getattr(question, "id", None)
    if isinstance(qid, str) and qid.strip():
        return qid
    return None


def question_dependencies(question: Any) -> Tuple[str, ...]:
    """Ids referenced by a question's visibility condition, de-duplicated in order."""
    return tuple(referenced_question_ids(question_condition(question)))


def build_graph(questions: Iterable[Any]) -> DependencyGraph:
    """Build the dependency graph in schema order.

    Accepts raw question mappings or ``Question`` models. Entries without a
    usable string id are skipped; a repeated id keeps its first dependency set.
    """
    graph: DependencyGraph = {}
    if not isinstance(questions, (list, tuple)):
        return graph
    for question in questions:
        qid = _question_id(question)
        if qid is None or qid in graph:
            continue
        graph[qid] = question_dependencies(question)
    return graph


__all__ = ["DependencyGraph", "build_graph", "question_dependencies"]
