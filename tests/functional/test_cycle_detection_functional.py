"""Functional tests for the dependency graph builder and cycle detector."""

from __future__ import annotations

import pytest

from app.logic.cycle_detection import find_cycles, format_cycle
from app.logic.dependency_graph import build_graph, question_dependencies
from app.models.question import Question

from schema_builders import radio


# -----------------------------
# Graph building
# -----------------------------


def test_graph_has_one_node_per_question_in_schema_order() -> None:
    graph = build_graph(
        [
            radio("q1"),
            radio("q2", showIf={"questionId": "q1", "equals": 1}),
            radio("q3", show_if=[{"question": "q1", "equals": 1}, {"questionId": "q2", "in": [0, 1]}]),
        ]
    )
    assert list(graph) == ["q1", "q2", "q3"]
    assert graph == {"q1": (), "q2": ("q1",), "q3": ("q1", "q2")}


def test_graph_keeps_dangling_edges_and_deduplicates_references() -> None:
    question = radio(
        "q2",
        show_if={"or": [{"questionId": "ghost", "equals": 1}, {"not": {"questionId": "ghost", "equals": 2}}]},
    )
    assert question_dependencies(question) == ("ghost",)
    assert build_graph([question]) == {"q2": ("ghost",)}


def test_graph_accepts_question_models() -> None:
    models = [Question.model_validate(radio("a")), Question.model_validate(radio("b", show_if={"questionId": "a", "gte": 1}))]
    assert build_graph(models) == {"a": (), "b": ("a",)}


@pytest.mark.parametrize("questions", [None, "q1", {"id": "q1"}, 42])
def test_graph_of_non_list_is_empty(questions) -> None:
    assert build_graph(questions) == {}


def test_graph_skips_unusable_ids_and_keeps_first_duplicate() -> None:
    graph = build_graph(
        [
            {"id": "", "text": "blank"},
            {"id": 3, "text": "number"},
            "not a question",
            radio("q1", show_if={"questionId": "q9", "equals": 1}),
            radio("q1", show_if={"questionId": "q8", "equals": 1}),
        ]
    )
    assert graph == {"q1": ("q9",)}


# -----------------------------
# Cycle detection
# -----------------------------


def test_acyclic_graph_has_no_cycles() -> None:
    report = find_cycles({"q1": (), "q2": ("q1",), "q3": ("q1", "q2")})
    assert report.has_cycle is False
    assert report.cycles == []


def test_self_loop_is_a_one_node_cycle() -> None:
    report = find_cycles({"q1": ("q1",)})
    assert report.has_cycle is True
    assert report.cycles == [["q1"]]


def test_two_node_cycle_is_reported_once() -> None:
    report = find_cycles({"q1": ("q2",), "q2": ("q1",)})
    assert report.cycles == [["q1", "q2"]]


def test_cycle_reached_from_an_acyclic_prefix_starts_at_the_closing_node() -> None:
    report = find_cycles({"q0": ("q1",), "q1": ("q2",), "q2": ("q3",), "q3": ("q1",)})
    assert report.cycles == [["q1", "q2", "q3"]]


def test_every_distinct_cycle_is_reported() -> None:
    report = find_cycles({"q1": ("q2",), "q2": ("q1", "q3"), "q3": ("q2",)})
    assert report.cycles == [["q1", "q2"], ["q2", "q3"]]


def test_dangling_edges_are_ignored() -> None:
    report = find_cycles({"q1": ("ghost",), "q2": ("q1", "other")})
    assert report.has_cycle is False


def test_long_chain_does_not_exhaust_the_stack() -> None:
    size = 5000
    graph = {f"q{i}": (f"q{i + 1}",) for i in range(size)}
    graph[f"q{size}"] = ()
    assert find_cycles(graph).has_cycle is False

    graph[f"q{size}"] = ("q0",)
    report = find_cycles(graph)
    assert len(report.cycles) == 1
    assert len(report.cycles[0]) == size + 1


def test_detection_is_deterministic() -> None:
    graph = {"a": ("b", "c"), "b": ("a",), "c": ("c",)}
    assert find_cycles(graph) == find_cycles(graph)
    assert find_cycles(graph).cycles == [["a", "b"], ["c"]]


def test_format_cycle_closes_on_first_node() -> None:
    assert format_cycle(["q1", "q3"]) == "q1 → q3 → q1"
    assert format_cycle(["q1"]) == "q1 → q1"
    assert format_cycle([]) == ""


def test_cycle_closing_through_a_finished_node_is_not_listed_again() -> None:
    # q1 -> q3 -> q1 is only reachable after q3 was finished via q2
    report = find_cycles({"q1": ("q2", "q3"), "q2": ("q3",), "q3": ("q1",)})
    assert report.has_cycle is True
    assert report.cycles == [["q1", "q2", "q3"]]
