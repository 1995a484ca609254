"""Helpers to compute visibility deltas and suppressed answers.

Exposes a single function that computes now_visible, now_hidden, and the list
of suppressed answers for one answer change.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from app.logic.safe_number import is_answered
from app.models.response_types import VisibilityDelta


def compute_visibility_delta(
    pre_visible: Iterable[str],
    post_visible: Iterable[str],
    answers: Mapping[str, Any],
) -> VisibilityDelta:
    """Compute visibility delta and suppressed answers.

    - now_visible: questions newly visible (in post but not in pre)
    - now_hidden: questions newly hidden (in pre but not in post)
    - suppressed_answers: subset of now_hidden that still hold an answer

    Both lists keep the order of the input sequences, which callers pass in
    schema order.
    """
    pre = [str(qid) for qid in pre_visible if qid]
    post = [str(qid) for qid in post_visible if qid]
    pre_set, post_set = set(pre), set(post)

    now_visible = [qid for qid in post if qid not in pre_set]
    now_hidden = [qid for qid in pre if qid not in post_set]
    suppressed = [qid for qid in now_hidden if is_answered(answers.get(qid))]
    return VisibilityDelta(now_visible=now_visible, now_hidden=now_hidden, suppressed_answers=suppressed)


__all__ = ["compute_visibility_delta"]
