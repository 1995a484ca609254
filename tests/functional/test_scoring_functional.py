"""Functional tests for the scoring engine."""

from __future__ import annotations

import math
from typing import Any

import pytest

from app.logic.scoring import compute_score, select_band

BANDS = [
    {"min": 0, "max": 3, "label": "Low", "description": "Minimal symptoms"},
    {"min": 4, "max": 6, "label": "High"},
]


def test_sum_with_band() -> None:
    rules = {"type": "sum", "items": ["q1", "q2"], "bands": BANDS}
    result = compute_score(rules, None, {"q1": 2, "q2": 1})
    assert result.score == 3
    assert result.band == "Low"
    assert result.band_description == "Minimal symptoms"
    assert result.risk_flags == {}


def test_weighted_sum() -> None:
    rules = {"type": "weighted_sum", "items": ["q1", "q2"], "weights": {"q1": 2, "q2": 1}}
    assert compute_score(rules, {}, {"q1": 3, "q2": 4}).score == 10


def test_weighted_sum_missing_weight_counts_as_one() -> None:
    rules = {"type": "weighted_sum", "items": ["q1", "q2"], "weights": {"q1": 3}}
    assert compute_score(rules, {}, {"q1": 1, "q2": 4}).score == 7


def test_weights_are_ignored_in_sum_mode() -> None:
    rules = {"items": ["q1", "q2"], "weights": {"q1": 10}}
    assert compute_score(rules, {}, {"q1": 1, "q2": 1}).score == 2


@pytest.mark.parametrize("bad", ["not-a-number", None, "", [1], {"v": 1}, float("nan"), float("inf"), "1e999"])
def test_garbage_answers_count_as_zero(bad: Any) -> None:
    result = compute_score({"items": ["q1", "q2"]}, {}, {"q1": bad, "q2": 2})
    assert result.score == 2
    assert math.isfinite(result.score)


def test_numeric_strings_and_booleans_are_coerced() -> None:
    result = compute_score({"items": ["a", "b", "c"]}, {}, {"a": " 2.5 ", "b": True, "c": "3"})
    assert result.score == 6.5


def test_items_default_to_every_answer() -> None:
    result = compute_score({}, {}, {"q1": 1, "q2": 2, "q3": "x"})
    assert result.score == 3
    assert result.total_items == 3
    assert result.answered_count == 3


def test_answered_count_ignores_missing_and_empty_answers() -> None:
    result = compute_score({"items": ["q1", "q2", "q3"]}, {}, {"q1": 0, "q2": ""})
    assert result.answered_count == 1
    assert result.total_items == 3


def test_subscales_are_unweighted_and_independent_of_items() -> None:
    rules = {
        "type": "weighted_sum",
        "items": ["q1", "q2", "q3"],
        "weights": {"q1": 2, "q2": 2, "q3": 2},
        "subscales": {"A": ["q1", "q2"], "B": ["q4"]},
    }
    result = compute_score(rules, {}, {"q1": 1, "q2": 2, "q3": 3, "q4": 5})
    assert result.score == 12
    assert result.subscales == {"A": 3, "B": 5}


def test_band_boundaries_are_inclusive() -> None:
    assert select_band(BANDS, 3) == ("Low", "Minimal symptoms")
    assert select_band(BANDS, 4) == ("High", "")
    assert select_band(BANDS, 6) == ("High", "")


def test_unmatched_and_malformed_bands_yield_empty_label() -> None:
    assert select_band(BANDS, 3.5) == ("", "")
    assert select_band(BANDS, -1) == ("", "")
    assert select_band("bands", 1) == ("", "")
    assert select_band([{"min": "0", "max": 9, "label": "Text bounds"}, {"min": 0, "max": 9, "label": "OK"}], 1) == ("OK", "")


def test_first_overlapping_band_wins() -> None:
    bands = [{"min": 0, "max": 10, "label": "Wide"}, {"min": 5, "max": 6, "label": "Narrow"}]
    assert select_band(bands, 5)[0] == "Wide"


def test_categories_apply_multiplier_and_bands() -> None:
    rules = {
        "items": ["d1", "d2", "a1"],
        "categories": {
            "Depression": {
                "items": ["d1", "d2"],
                "multiplier": 2,
                "bands": [{"min": 0, "max": 9, "label": "Normal"}, {"min": 10, "max": 13, "label": "Mild"}],
            },
            "Anxiety": {"items": ["a1", "a2"]},
        },
    }
    result = compute_score(rules, {}, {"d1": 3, "d2": 2, "a1": 1})
    depression = result.categories["Depression"]
    assert depression.raw_score == 5
    assert depression.score == 10
    assert depression.band == "Mild"
    assert depression.answered_count == 2

    anxiety = result.categories["Anxiety"]
    assert anxiety.multiplier == 1
    assert anxiety.score == 1
    assert anxiety.band == ""
    assert anxiety.total_items == 2
    assert anxiety.answered_count == 1


def test_result_serializes_with_camel_case_keys() -> None:
    rules = {"items": ["q1"], "bands": BANDS}
    risk = {"self_harm": {"questionId": "q1", "gte": 1, "helpText": "Call 112"}}
    payload = compute_score(rules, risk, {"q1": 2}).model_dump(by_alias=True)
    assert payload["riskFlags"] == {"self_harm": {"helpText": "Call 112", "questionIds": ["q1"]}}
    assert payload["bandDescription"] == "Minimal symptoms"
    assert payload["answeredCount"] == 1
    assert payload["totalItems"] == 1


@pytest.mark.parametrize(
    "rules, answers",
    [
        (None, None),
        ("sum", {"q1": 1}),
        ({"items": "q1", "bands": "x", "subscales": ["A"], "categories": 3}, {"q1": 1}),
        ({"items": [None, True, {"a": 1}], "weights": [1], "type": "weighted_sum"}, [("q1", 1)]),
        ({"categories": {"C": None, "D": {"items": None, "multiplier": "zz"}}}, {}),
    ],
)
def test_garbage_rule_documents_never_raise(rules: Any, answers: Any) -> None:
    result = compute_score(rules, {"triggers": "nope"}, answers)
    assert math.isfinite(result.score)
    assert isinstance(result.band, str)
    assert result.risk_flags == {}


@pytest.mark.parametrize(
    "rules, answers",
    [
        ({"items": ["q1", "q2"]}, {"q1": 1e308, "q2": "1e308"}),
        ({"type": "weighted_sum", "items": ["q1", "q2"], "weights": {"q1": 10, "q2": 10}}, {"q1": 1e308, "q2": -1e308}),
    ],
)
def test_overflowing_totals_clamp_to_zero(rules: Any, answers: Any) -> None:
    result = compute_score(rules, {}, answers)
    assert result.score == 0
    assert result.band == ""


def test_overflowing_subscales_and_categories_clamp_to_zero() -> None:
    rules = {
        "items": ["q1"],
        "subscales": {"A": ["q1", "q2"]},
        "categories": {"Big": {"items": ["q1"], "multiplier": 1e308}},
    }
    result = compute_score(rules, {}, {"q1": 1e308, "q2": 1e308})
    assert result.subscales == {"A": 0}
    assert result.categories["Big"].raw_score == 1e308
    assert result.categories["Big"].score == 0


def test_empty_multi_select_is_not_counted_as_answered() -> None:
    result = compute_score({"items": ["q1", "q2"]}, {}, {"q1": [], "q2": ["a"]})
    assert result.answered_count == 1
