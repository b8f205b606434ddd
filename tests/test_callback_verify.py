# -*- coding: utf-8 -*-
"""伏笔校验：标记提取、配对检查、重复检测与得分。"""
from src.continuity import (
    Chapter,
    find_resolvable_callbacks,
    format_callback_report,
    get_callback_suggestions,
    plant_callback,
    resolve_callback,
    verify_callbacks,
)


def _chapters(*summaries):
    return [Chapter(id=f"ch{i + 1}", order=i + 1, summary=s) for i, s in enumerate(summaries)]


def test_planted_and_paid_off_ring_scores_full_marks():
    result = verify_callbacks(_chapters("Foreshadows: the ring", "Payoff: the ring returns"))
    assert result.score == 100
    assert result.unresolved_callbacks == []
    assert result.unplanted_payoffs == []
    assert [c.type for c in result.callbacks] == ["foreshadowing", "payoff"]
    assert result.callbacks[0].description == "the ring"
    assert result.callbacks[1].description == "the ring returns"


def test_no_callbacks_scores_100():
    result = verify_callbacks(_chapters("A quiet day", ""))
    assert result.callbacks == []
    assert result.score == 100


def test_foreshadowing_without_payoff_is_unresolved():
    result = verify_callbacks(_chapters("Foreshadows: dragon eggs", "The heroes travel north"))
    assert [c.description for c in result.unresolved_callbacks] == ["dragon eggs"]
    assert result.unresolved_callbacks[0].status == "unresolved"
    assert result.score == 0


def test_payoff_in_same_chapter_does_not_resolve():
    result = verify_callbacks(_chapters("Foreshadows: storm clouds. Payoff: storm breaks"))
    assert len(result.unresolved_callbacks) == 1
    assert result.unplanted_payoffs == []
    assert result.score == 50


def test_payoff_without_foreshadowing_is_unplanted():
    result = verify_callbacks(_chapters("Payoff: dragon awakens"))
    assert [c.description for c in result.unplanted_payoffs] == ["dragon awakens"]


def test_markers_are_case_insensitive_and_stop_at_punctuation():
    result = verify_callbacks(_chapters("FORESHADOW: a broken sword, and more. ECHO: the lullaby"))
    assert [(c.type, c.description) for c in result.callbacks] == [
        ("foreshadowing", "a broken sword"),
        ("echo", "the lullaby"),
    ]
    assert result.callbacks[1].status == "resolved"


def test_duplicates_by_type_and_description():
    result = verify_callbacks(_chapters("Echoes: the old song", "Echoes: the old song"))
    assert len(result.duplicates) == 1
    assert result.duplicates[0].source_chapter_id == "ch2"


def test_resolve_callback_returns_copy():
    cb = plant_callback("the locked door", "ch1", "context")
    resolved = resolve_callback(cb, "ch5", "the door opens")
    assert cb.status == "planted"
    assert resolved.status == "resolved"
    assert resolved.target_chapter_id == "ch5"


def test_find_resolvable_callbacks_by_leading_keywords():
    door = plant_callback("locked door upstairs", "ch1", "")
    ring = plant_callback("the ring", "ch1", "")
    resolvable = find_resolvable_callbacks([door, ring], "They finally open the DOOR.")
    assert resolvable == [door, ring]
    assert find_resolvable_callbacks([door], "Nothing here") == []


def test_callback_suggestions_for_current_chapter():
    chapters = _chapters("Foreshadows: dragon eggs", "They rest")
    current = Chapter(id="ch3", summary="A dragon hatches")
    suggestions = get_callback_suggestions(chapters, current)
    assert suggestions == ['Consider resolving: "dragon eggs" (planted in chapter ch1)']


def test_report_lists_problems():
    result = verify_callbacks(_chapters("Foreshadows: dragon eggs", "Payoff: wolves attack"))
    report = format_callback_report(result)
    assert "## Callback Verification Report" in report
    assert "### Unplanted Payoffs" in report
    assert "### Unresolved Callbacks" in report
    assert f"Score: {result.score}%" in report
