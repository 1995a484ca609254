"""Cycle detection over the visibility dependency graph.

Depth-first traversal from every unvisited node in graph (schema) order,
tracking the current path. An edge into a node already on the path closes a
cycle, reported as the path slice from that node to the current one. Every
cycle closed by such a back edge is reported so the validator can name each
offending chain. Nodes are expanded once, so a cycle that only closes through
an already finished node is not listed separately.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Sequence, Tuple
import logging

from app.models.validation import CycleReport


logger = logging.getLogger(__name__)

CYCLE_ARROW = " → "

_DONE = object()


def _rotation_key(cycle: Sequence[str]) -> Tuple[str, ...]:
    pivot = min(range(len(cycle)), key=lambda i: cycle[i])
    return tuple(cycle[pivot:]) + tuple(cycle[:pivot])


def find_cycles(graph: Mapping[str, Iterable[str]]) -> CycleReport:
    """Report every distinct cycle closed by a back edge in ``graph``.

    Edges pointing at ids that are not graph nodes are ignored (dangling
    references are the validator's concern). A self-loop is a one-node cycle.
    Traversal is iterative so long dependency chains cannot exhaust the stack.
    """
    adjacency: Dict[str, Tuple[str, ...]] = {str(k): tuple(v or ()) for k, v in graph.items()}
    visited: set[str] = set()
    on_path: Dict[str, int] = {}
    path: List[str] = []
    cycles: List[List[str]] = []
    seen_keys: set[Tuple[str, ...]] = set()

    for start in adjacency:
        if start in visited:
            continue
        visited.add(start)
        on_path[start] = 0
        path.append(start)
        stack = [(start, iter(adjacency[start]))]
        while stack:
            node, edges = stack[-1]
            nxt = next(edges, _DONE)
            if nxt is _DONE:
                stack.pop()
                path.pop()
                on_path.pop(node, None)
                continue
            if nxt not in adjacency:
                continue
            if nxt in on_path:
                cycle = path[on_path[nxt]:]
                key = _rotation_key(cycle)
                if key not in seen_keys:
                    seen_keys.add(key)
                    cycles.append(list(cycle))
                continue
            if nxt in visited:
                continue
            visited.add(nxt)
            on_path[nxt] = len(path)
            path.append(nxt)
            stack.append((nxt, iter(adjacency[nxt])))

    if cycles:
        logger.info("dependency_cycles_found count=%d", len(cycles))
    return CycleReport(has_cycle=bool(cycles), cycles=cycles)


def format_cycle(cycle: Sequence[str]) -> str:
    """Render a cycle closed on its first node, e.g. ``q1 → q3 → q1``."""
    if not cycle:
        return ""
    return CYCLE_ARROW.join([*cycle, cycle[0]])


__all__ = ["CYCLE_ARROW", "find_cycles", "format_cycle"]
