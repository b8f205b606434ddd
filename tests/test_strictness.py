# -*- coding: utf-8 -*-
"""严格度：判定顺序、各等级规则集与基于历史的升降级。"""
import pytest

from src.continuity import (
    ContinuityIssue,
    StrictnessContext,
    adjust_strictness_based_on_history,
    determine_strictness,
    format_strictness,
    get_config_for_level,
    get_strictness_description,
    should_enforce,
)


def _issues(errors=0, warnings=0):
    return (
        [ContinuityIssue(type="plot", severity="error") for _ in range(errors)]
        + [ContinuityIssue(type="plot", severity="warning") for _ in range(warnings)]
    )


def test_user_preference_wins():
    ctx = StrictnessContext(chapter_count=1, story_phase="climax", user_preference="strict")
    assert determine_strictness(ctx).level == "strict"


def test_early_chapters_are_lenient_even_at_climax():
    ctx = StrictnessContext(chapter_count=4, story_phase="climax")
    assert determine_strictness(ctx).level == "lenient"


def test_climax_is_strict_after_setup():
    ctx = StrictnessContext(chapter_count=5, story_phase="climax", complexity="complex")
    assert determine_strictness(ctx).level == "strict"


@pytest.mark.parametrize("complexity", ["simple", "moderate", "complex"])
def test_default_is_moderate(complexity):
    ctx = StrictnessContext(chapter_count=8, story_phase="rising", complexity=complexity)
    assert determine_strictness(ctx).level == "moderate"


def test_complex_story_is_moderate_after_earlier_rules():
    assert determine_strictness(StrictnessContext(chapter_count=9, complexity="complex")).level == "moderate"
    assert determine_strictness(StrictnessContext(chapter_count=2, complexity="complex")).level == "lenient"
    assert determine_strictness(
        StrictnessContext(chapter_count=9, story_phase="climax", complexity="complex")
    ).level == "strict"


def test_rule_sets_per_level():
    strict = get_config_for_level("strict")
    moderate = get_config_for_level("moderate")
    lenient = get_config_for_level("lenient")

    assert all(strict.rules.model_dump().values())
    assert (strict.thresholds.max_warnings, strict.thresholds.max_errors, strict.thresholds.auto_fix) == (0, 0, False)

    assert sum(moderate.rules.model_dump().values()) == 4
    assert not moderate.rules.world_state_validation
    assert not moderate.rules.knowledge_callbacks
    assert (moderate.thresholds.max_warnings, moderate.thresholds.max_errors, moderate.thresholds.auto_fix) == (3, 1, True)

    assert [k for k, v in lenient.rules.model_dump().items() if v] == ["character_continuity"]
    assert (lenient.thresholds.max_warnings, lenient.thresholds.max_errors, lenient.thresholds.auto_fix) == (10, 5, True)


def test_many_errors_escalate_one_level():
    assert adjust_strictness_based_on_history("lenient", _issues(errors=4)) == "moderate"
    assert adjust_strictness_based_on_history("moderate", _issues(errors=4)) == "strict"
    assert adjust_strictness_based_on_history("strict", _issues(errors=4)) == "strict"
    assert adjust_strictness_based_on_history("lenient", _issues(errors=3)) == "lenient"


def test_many_warnings_relax_strict_only():
    assert adjust_strictness_based_on_history("strict", _issues(warnings=6)) == "moderate"
    assert adjust_strictness_based_on_history("strict", _issues(warnings=5)) == "strict"
    assert adjust_strictness_based_on_history("moderate", _issues(warnings=20)) == "moderate"


def test_should_enforce_and_formatting():
    config = get_config_for_level("moderate")
    assert should_enforce(config, "timeline_consistency")
    assert not should_enforce(config, "knowledge_callbacks")
    assert not should_enforce(config, "no_such_rule")
    text = format_strictness(config)
    assert text.startswith("Level: MODERATE")
    assert "Max Warnings: 3" in text
    assert "Zero tolerance" in get_strictness_description("strict")
