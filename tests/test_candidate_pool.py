# -*- coding: utf-8 -*-
"""锚点候选池：过滤顺序、多样性约束、打分排序与截断。"""
import pytest

from src.anchors import (
    CandidatePoolConfig,
    CausalGraph,
    CausalLink,
    Character,
    DiversityConfig,
    TimelineEvent,
    apply_diversity_constraints,
    build_candidate_pool,
    calculate_character_involvement,
    filter_by_major_characters,
    filter_by_significance,
)

HERO = Character(id="hero", name="Hero", importance="major")
RIVAL = Character(id="rival", name="Rival", importance="major")
SIDEKICK = Character(id="sidekick", name="Sidekick", importance="supporting")


def _event(event_id, page, chapter=1, significance="major", characters=("hero",)):
    return TimelineEvent(
        id=event_id,
        description=event_id,
        characters=list(characters),
        significance=significance,
        chapter_number=chapter,
        page_number=page,
    )


def _open_config(**overrides):
    values = dict(min_causal_impact=0.0, diversity=DiversityConfig(min_distance=0, max_per_chapter=100))
    values.update(overrides)
    return CandidatePoolConfig(**values)


def test_close_events_keep_only_the_first():
    events = [_event("e1", 5), _event("e2", 6)]
    config = _open_config(diversity=DiversityConfig(min_distance=10, max_per_chapter=3))
    pool = build_candidate_pool(events, [HERO], CausalGraph(), config)
    assert [c.event.id for c in pool] == ["e1"]


def test_empty_input_yields_empty_pool():
    assert build_candidate_pool([], [], CausalGraph()) == []


def test_default_config_drops_events_without_causal_impact():
    events = [_event("e1", 1)]
    assert build_candidate_pool(events, [HERO], CausalGraph()) == []


def test_pool_is_bounded_and_sorted_by_score():
    events = [_event(f"e{i}", page=i * 20, chapter=i) for i in range(10)]
    links = []
    # 每个事件都影响其后所有事件，e9 没有下游
    for i in range(10):
        for j in range(i + 1, 10):
            links.append(CausalLink(source=f"e{i}", target=f"e{j}"))
    graph = CausalGraph.from_links(links)
    pool = build_candidate_pool(events, [HERO], graph, _open_config(max_candidates=4))
    assert len(pool) == 4
    scores = [c.score for c in pool]
    assert scores == sorted(scores, reverse=True)
    assert pool[0].event.id == "e0"


def test_equal_scores_keep_event_order():
    events = [_event("b", 1), _event("a", 50), _event("c", 100)]
    pool = build_candidate_pool(events, [HERO], CausalGraph(), _open_config())
    assert [c.event.id for c in pool] == ["b", "a", "c"]


def test_score_combines_involvement_and_impact():
    events = [_event("a", 1, characters=("hero", "rival"))]
    graph = CausalGraph.from_links(
        [CausalLink(source="a", target="b"), CausalLink(source="b", target="c")]
    )
    all_events = events + [_event("b", 500, characters=("sidekick",)), _event("c", 900, significance="minor")]
    pool = build_candidate_pool(all_events, [HERO, RIVAL, SIDEKICK], graph, _open_config())
    top = next(c for c in pool if c.event.id == "a")
    expected_impact = 0.5 * 2 / 5 + 0.5 * 2 / 3
    assert top.character_involvement == pytest.approx(1.0)
    assert top.causal_impact == pytest.approx(expected_impact)
    assert top.score == pytest.approx(0.4 * 1.0 + 0.6 * expected_impact)


def test_diversity_respects_distance_and_chapter_limit():
    events = [_event(f"e{i}", page=i * 3, chapter=i // 10) for i in range(60)]
    config = DiversityConfig(min_distance=7, max_per_chapter=2)
    selected = apply_diversity_constraints(events, config)
    for i, a in enumerate(selected):
        for b in selected[i + 1:]:
            assert abs(a.page_number - b.page_number) >= 7
    per_chapter = {}
    for e in selected:
        per_chapter[e.chapter_number] = per_chapter.get(e.chapter_number, 0) + 1
    assert max(per_chapter.values()) <= 2


def test_missing_chapter_counts_as_chapter_zero():
    events = [
        TimelineEvent(id="a", page_number=0, chapter_number=None),
        TimelineEvent(id="b", page_number=50, chapter_number=0),
    ]
    selected = apply_diversity_constraints(events, DiversityConfig(min_distance=0, max_per_chapter=1))
    assert [e.id for e in selected] == ["a"]


def test_diversity_runs_after_significance_filter():
    # minor 事件先被剔除，因此不会挡住离它很近的 major 事件
    events = [_event("minor", 5, significance="minor"), _event("major", 6)]
    config = _open_config(diversity=DiversityConfig(min_distance=10, max_per_chapter=3))
    pool = build_candidate_pool(events, [HERO], CausalGraph(), config)
    assert [c.event.id for c in pool] == ["major"]


def test_significance_filter_is_ordinal():
    events = [
        _event("a", 1, significance="minor"),
        _event("b", 2, significance="moderate"),
        _event("c", 3, significance="major"),
        _event("d", 4, significance="critical"),
    ]
    assert [e.id for e in filter_by_significance(events, "major")] == ["c", "d"]
    assert [e.id for e in filter_by_significance(events, "minor")] == ["a", "b", "c", "d"]


def test_major_character_filter_ignores_supporting_characters():
    events = [_event("a", 1, characters=("sidekick",)), _event("b", 2, characters=("hero", "sidekick"))]
    kept = filter_by_major_characters(events, [HERO, SIDEKICK], min_major_characters=1)
    assert [e.id for e in kept] == ["b"]


def test_character_involvement_is_relative_to_half_the_major_cast():
    cast = [Character(id=f"m{i}", importance="major") for i in range(4)]
    assert calculate_character_involvement(_event("a", 1, characters=("m0",)), cast) == pytest.approx(0.5)
    assert calculate_character_involvement(_event("b", 1, characters=("m0", "m1", "m2")), cast) == 1
    assert calculate_character_involvement(_event("c", 1, characters=("x",)), cast) == 0


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("ANCHOR_MAX_CANDIDATES", "5")
    monkeypatch.setenv("ANCHOR_MIN_DISTANCE", "2")
    monkeypatch.setenv("ANCHOR_MIN_SIGNIFICANCE", "critical")
    config = CandidatePoolConfig.from_env()
    assert config.max_candidates == 5
    assert config.diversity.min_distance == 2
    assert config.diversity.max_per_chapter == 3
    assert config.min_significance == "critical"
