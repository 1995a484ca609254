"""Numeric coercion for answer and rule values.

Answers arrive untyped. Scoring folds them through ``safe_number`` so a missing
or malformed value contributes 0 instead of raising or producing NaN; the
branching evaluator uses ``maybe_number`` where "not a number" must stay
distinguishable from zero.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional
import math


def maybe_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None when it is not numeric.

    - None and empty/whitespace-only strings are not numeric.
    - Booleans count as 1/0.
    - Strings are parsed after trimming; NaN and infinities are rejected.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    elif not isinstance(value, (int, float, Decimal)):
        return None
    try:
        n = float(value)
    except (ValueError, OverflowError):
        return None
    return n if math.isfinite(n) else None


def safe_number(value: Any) -> float:
    """Return ``value`` as a finite float, clamping anything else to 0."""
    n = maybe_number(value)
    return 0.0 if n is None else n


def is_answered(value: Any) -> bool:
    """An answer counts as given unless it is None, an empty string or an empty multi-select."""
    if isinstance(value, (list, tuple, set)):
        return bool(value)
    return value is not None and value != ""


__all__ = ["is_answered", "maybe_number", "safe_number"]
