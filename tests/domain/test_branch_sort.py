from __future__ import annotations

from domain.models import NextNode
from domain.services.branch_sort import (
    closest_common_descendant_sort,
    find_node_with_closest_common_descendant,
    get_path,
    get_sorted_next_nodes,
)
from domain.services.build_step_graph import build_step_graph
from tests.helpers.workflow_fixtures import make_fork, make_step, reconverging_fork_steps


def test_get_path_follows_single_children_to_sink() -> None:
    graph = build_step_graph(reconverging_fork_steps(), "W")

    assert get_path("a1", graph.nodes) == ["a1", "a2", "j"]
    assert get_path("b1", graph.nodes) == ["b1", "j"]
    assert get_path("j", graph.nodes) == ["j"]


def test_primary_branch_comes_first_regardless_of_input_order() -> None:
    steps = [
        make_fork("f", 1, ["B", "A"], primary="A"),
        make_step("A", 2, ["j"]),
        make_step("B", 2, ["j"]),
        make_step("j", 3),
    ]
    graph = build_step_graph(steps, "W")

    sorted_ids = get_sorted_next_nodes(graph.nodes["f"].next_nodes, graph.nodes)

    assert sorted_ids == ["A", "B"]


def test_first_successor_is_primary_when_none_is_marked() -> None:
    steps = [
        make_fork("f", 1, ["B", "A"]),
        make_step("A", 2),
        make_step("B", 2),
    ]
    graph = build_step_graph(steps, "W")

    assert get_sorted_next_nodes(graph.nodes["f"].next_nodes, graph.nodes) == ["B", "A"]


def test_single_successor_is_returned_unchanged() -> None:
    assert get_sorted_next_nodes([NextNode(id="x", is_primary=True)], {}) == ["x"]
    assert get_sorted_next_nodes([], {}) == []


def test_branches_are_ordered_by_earliest_reconvergence() -> None:
    paths = {
        "p": ["p", "p2", "m1", "m2", "end"],
        "late": ["late", "m2", "end"],
        "early": ["early", "m1", "m2", "end"],
    }

    sorted_ids = closest_common_descendant_sort("p", ["late", "early"], paths)

    assert sorted_ids == ["p", "early", "late"]


def test_each_branch_is_compared_with_the_previous_one() -> None:
    paths = {
        "p": ["p", "x", "end"],
        "b": ["b", "x", "end"],
        "c": ["c", "y", "b2", "end"],
        "d": ["d", "x", "end"],
    }

    sorted_ids = closest_common_descendant_sort("p", ["c", "b", "d"], paths)

    # "b" and "d" both meet the primary path at "x"; "b" wins on list order,
    # then "d" meets "b" at "x" before "c" rejoins at "end".
    assert sorted_ids == ["p", "b", "d", "c"]


def test_fallback_takes_first_candidate_without_common_descendant() -> None:
    paths = {"p": ["p", "q"], "a": ["a"], "b": ["b"]}

    assert find_node_with_closest_common_descendant(paths["p"], ["b", "a"], paths) == "b"
    assert closest_common_descendant_sort("p", ["b", "a"], paths) == ["p", "b", "a"]


def test_candidate_head_on_primary_path_is_not_a_match() -> None:
    paths = {"p": ["p", "a", "z"], "a": ["a", "z"], "c": ["c", "z"]}

    # "a" sits on the primary path only at its own head (index 0), so it only
    # matches through "z" at index 1, tying with "c"; list order decides.
    assert find_node_with_closest_common_descendant(paths["p"], ["c", "a"], paths) == "c"
