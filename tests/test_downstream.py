# -*- coding: utf-8 -*-
"""下游影响分析：遍历、环、深度限制与复杂度估算。"""
import pytest

from src.anchors import (
    CausalGraph,
    CausalLink,
    TimelineEvent,
    analyze_causal_impact,
    count_downstream_events,
    estimate_branch_complexity,
    get_affected_characters,
    get_downstream_events,
)


def _graph(*edges):
    return CausalGraph.from_links(CausalLink(source=s, target=t) for s, t in edges)


def test_counts_all_reachable_events_excluding_start():
    graph = _graph(("a", "b"), ("b", "c"), ("a", "d"), ("d", "c"))
    assert count_downstream_events("a", graph) == 3
    assert set(get_downstream_events(graph, "a")) == {"b", "c", "d"}


def test_cycle_through_start_terminates_and_excludes_start():
    graph = _graph(("a", "b"), ("b", "c"), ("c", "a"))
    assert count_downstream_events("a", graph) == 2
    assert "a" not in get_downstream_events(graph, "a")


def test_self_loop_is_not_counted():
    graph = _graph(("a", "a"), ("a", "b"))
    assert get_downstream_events(graph, "a") == ["b"]


def test_missing_node_has_no_downstream():
    graph = _graph(("a", "b"))
    assert count_downstream_events("zzz", graph) == 0
    assert count_downstream_events("b", graph) == 0


def test_depth_bound_limits_hops():
    graph = _graph(("a", "b"), ("b", "c"), ("c", "d"))
    assert get_downstream_events(graph, "a", max_depth=1) == ["b"]
    assert count_downstream_events("a", graph, depth=2) == 2
    assert count_downstream_events("a", graph, depth=0) == 0
    assert count_downstream_events("a", graph) == 3


def test_affected_characters_come_from_downstream_events_only():
    graph = _graph(("a", "b"), ("b", "c"))
    index = {"a": ["hero"], "b": ["rival", "mentor"], "c": ["rival", "villain"]}
    assert get_affected_characters("a", graph, index) == ["rival", "mentor", "villain"]
    assert get_affected_characters("c", graph, index) == []


@pytest.mark.parametrize(
    "downstream,characters,level",
    [
        (0, 0, "simple"),
        (3, 0, "simple"),
        (4, 0, "moderate"),
        (4, 1, "moderate"),
        (5, 1, "complex"),
        (50, 50, "complex"),
    ],
)
def test_branch_complexity_levels(downstream, characters, level):
    assert estimate_branch_complexity(downstream, characters).level == level


def test_branch_complexity_score_is_capped():
    result = estimate_branch_complexity(100, 100)
    assert result.score == pytest.approx(1.0)


def test_causal_impact_uses_full_character_index():
    events = [TimelineEvent(id="a", characters=["hero"])]
    graph = _graph(("a", "b"), ("b", "c"))
    index = {"a": ["hero"], "b": ["x"], "c": ["y"]}
    (impact,) = analyze_causal_impact(events, graph, index)
    assert impact.downstream_count == 2
    assert impact.affected_characters == ["x", "y"]
    assert impact.impact_score == pytest.approx(0.5 * 2 / 5 + 0.5 * 2 / 3)
