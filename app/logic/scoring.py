"""Scoring engine.

Folds a completed answer map through a test's scoring rules::

    {
      "type": "sum" | "weighted_sum",
      "items": ["q1", "q2", "q3"],
      "weights": {"q1": 2, "q2": 1},
      "subscales": {"A": ["q1", "q2"], "B": ["q3"]},
      "bands": [{"min": 0, "max": 5, "label": "Low"}, {"min": 6, "max": 10, "label": "Moderate"}],
      "categories": {
        "Depression": {"items": ["q1", "q2"], "multiplier": 2,
                       "bands": [{"min": 0, "max": 9, "label": "Normal"}]}
      }
    }

Every value read from the answers goes through ``safe_number``; malformed
input degrades to 0 or ``""`` and never raises.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Tuple
import logging
import math

from app.logic.risk import evaluate_risk
from app.logic.safe_number import is_answered, safe_number
from app.logic.validation import coerce_answer_map
from app.models.scoring import CategoryResult, ScoreResult


logger = logging.getLogger(__name__)

SCORE_SUM = "sum"
SCORE_WEIGHTED_SUM = "weighted_sum"


def _id_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value if isinstance(item, (str, int, float)) and not isinstance(item, bool)]


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def resolve_items(rules: Mapping[str, Any], answers: Mapping[str, Any]) -> List[str]:
    """Item ids to score: the explicit ``items`` list, else every answered key."""
    if isinstance(rules.get("items"), (list, tuple)):
        return _id_list(rules["items"])
    return list(answers.keys())


def resolve_scoring_type(rules: Mapping[str, Any]) -> str:
    return SCORE_WEIGHTED_SUM if rules.get("type") == SCORE_WEIGHTED_SUM else SCORE_SUM


def _finite(total: float) -> float:
    # Finite terms can still overflow to inf, or to nan when signs mix
    return total if math.isfinite(total) else 0.0


def total_score(score_type: str, items: List[str], answers: Mapping[str, Any], weights: Mapping[str, Any]) -> float:
    total = 0.0
    for item in items:
        value = safe_number(answers.get(item))
        if score_type == SCORE_WEIGHTED_SUM:
            weight = weights.get(item)
            value *= safe_number(1 if weight is None else weight)
        total += value
    return _finite(total)


def subscale_scores(subscales: Any, answers: Mapping[str, Any]) -> Dict[str, float]:
    """Unweighted sum per subscale; weights never apply here."""
    return {
        str(name): _finite(sum((safe_number(answers.get(item)) for item in _id_list(items)), 0.0))
        for name, items in _mapping(subscales).items()
    }


def select_band(bands: Any, score: float) -> Tuple[str, str]:
    """Return ``(label, description)`` of the first band whose inclusive range holds ``score``.

    Bands without numeric bounds are skipped; no match yields ``("", "")``.
    """
    if not isinstance(bands, (list, tuple)):
        return "", ""
    for band in bands:
        if not isinstance(band, Mapping):
            continue
        lo, hi = band.get("min"), band.get("max")
        if not (_is_number(lo) and _is_number(hi)):
            continue
        if lo <= score <= hi:
            label, description = band.get("label"), band.get("description")
            return (
                label if isinstance(label, str) else "",
                description if isinstance(description, str) else "",
            )
    return "", ""


def category_scores(categories: Any, answers: Mapping[str, Any]) -> Dict[str, CategoryResult]:
    out: Dict[str, CategoryResult] = {}
    for name, config in _mapping(categories).items():
        config = _mapping(config)
        items = _id_list(config.get("items"))
        raw = _finite(sum((safe_number(answers.get(item)) for item in items), 0.0))
        multiplier = safe_number(config.get("multiplier")) or 1.0
        score = _finite(raw * multiplier)
        band, description = select_band(config.get("bands"), score)
        out[str(name)] = CategoryResult(
            score=score,
            raw_score=raw,
            multiplier=multiplier,
            band=band,
            band_description=description,
            items=items,
            answered_count=sum(1 for item in items if is_answered(answers.get(item))),
            total_items=len(items),
        )
    return out


def compute_score(scoring_rules: Any, risk_rules: Any, answers: Any) -> ScoreResult:
    """Compute score, band, subscales, categories and risk flags for an answer map.

    - ``items`` defaults to every key of ``answers`` when omitted.
    - ``weighted_sum`` multiplies each item by its weight (missing weight = 1).
    - The first band whose inclusive ``[min, max]`` contains the score wins.
    - Risk flags are evaluated against the full answer map, independently of
      the score.
    """
    rules = _mapping(scoring_rules)
    answer_map = coerce_answer_map(answers)

    score_type = resolve_scoring_type(rules)
    items = resolve_items(rules, answer_map)
    score = total_score(score_type, items, answer_map, _mapping(rules.get("weights")))
    band, band_description = select_band(rules.get("bands"), score)

    result = ScoreResult(
        score=score,
        band=band,
        band_description=band_description,
        subscales=subscale_scores(rules.get("subscales"), answer_map),
        risk_flags=evaluate_risk(risk_rules, answer_map),
        answered_count=sum(1 for item in items if is_answered(answer_map.get(item))),
        total_items=len(items),
        categories=category_scores(rules.get("categories"), answer_map),
    )
    logger.info(
        "score_computed type=%s items=%d score=%s band=%r risk_flags=%d",
        score_type,
        len(items),
        score,
        band,
        len(result.risk_flags),
    )
    return result


__all__ = [
    "SCORE_SUM",
    "SCORE_WEIGHTED_SUM",
    "category_scores",
    "compute_score",
    "resolve_items",
    "resolve_scoring_type",
    "select_band",
    "subscale_scores",
    "total_score",
]
