# -*- coding: utf-8 -*-
"""
上下文相关的校验严格度：按用户偏好、章节数、故事阶段、复杂度决定启用哪些连续性规则与容忍阈值。
"""
import logging
from typing import Iterable, Literal, Optional

from pydantic import BaseModel, Field

from .models import StoryPhase

logger = logging.getLogger(__name__)

StrictnessLevel = Literal["strict", "moderate", "lenient"]
StoryComplexity = Literal["simple", "moderate", "complex"]

ERROR_ESCALATION_THRESHOLD = 3
WARNING_RELAXATION_THRESHOLD = 5


class StrictnessContext(BaseModel):
    story_phase: StoryPhase = Field(default="setup")
    chapter_count: int = Field(default=0, ge=0)
    has_user_edits: bool = False
    complexity: StoryComplexity = Field(default="moderate")
    user_preference: Optional[StrictnessLevel] = Field(default=None, description="用户显式指定时优先生效")


class StrictnessRules(BaseModel):
    """六类连续性检查的开关。"""
    character_continuity: bool = True
    timeline_consistency: bool = True
    plot_thread_tracking: bool = True
    world_state_validation: bool = True
    knowledge_callbacks: bool = True
    relationship_consistency: bool = True


class StrictnessThresholds(BaseModel):
    max_warnings: int = 0
    max_errors: int = 0
    auto_fix: bool = False


class StrictnessConfig(BaseModel):
    level: StrictnessLevel
    rules: StrictnessRules
    thresholds: StrictnessThresholds


def get_config_for_level(level: StrictnessLevel) -> StrictnessConfig:
    """严格度等级对应的固定规则集与阈值；每次返回新对象。"""
    if level == "strict":
        return StrictnessConfig(
            level="strict",
            rules=StrictnessRules(),
            thresholds=StrictnessThresholds(max_warnings=0, max_errors=0, auto_fix=False),
        )
    if level == "moderate":
        return StrictnessConfig(
            level="moderate",
            rules=StrictnessRules(world_state_validation=False, knowledge_callbacks=False),
            thresholds=StrictnessThresholds(max_warnings=3, max_errors=1, auto_fix=True),
        )
    return StrictnessConfig(
        level="lenient",
        rules=StrictnessRules(
            timeline_consistency=False,
            plot_thread_tracking=False,
            world_state_validation=False,
            knowledge_callbacks=False,
            relationship_consistency=False,
        ),
        thresholds=StrictnessThresholds(max_warnings=10, max_errors=5, auto_fix=True),
    )


def determine_strictness(context: StrictnessContext) -> StrictnessConfig:
    """
    依次判断，先命中者生效：
    用户偏好 → 前 5 章宽松 → 高潮阶段严格 → 复杂故事适中 → 默认适中。
    """
    if context.user_preference:
        level = context.user_preference
    elif context.chapter_count < 5:
        level = "lenient"
    elif context.story_phase == "climax":
        level = "strict"
    elif context.complexity == "complex":
        level = "moderate"
    else:
        level = "moderate"
    logger.debug("严格度: phase=%s chapters=%d -> %s", context.story_phase, context.chapter_count, level)
    return get_config_for_level(level)


def get_strictness_description(level: StrictnessLevel) -> str:
    descriptions = {
        "strict": "All continuity rules enforced. Zero tolerance for inconsistencies.",
        "moderate": "Major continuity enforced. Minor issues flagged as warnings.",
        "lenient": "Critical errors only. Allows creative flexibility.",
    }
    return descriptions[level]


def adjust_strictness_based_on_history(
    current_level: StrictnessLevel,
    recent_issues: Iterable,
) -> StrictnessLevel:
    """
    按近期问题调整等级：错误超过 3 个时升一级（宽松→适中→严格），
    严格等级下警告超过 5 个时降为适中。recent_issues 的元素需有 severity 属性（error/warning/info）。
    """
    issues = list(recent_issues)
    error_count = sum(1 for i in issues if i.severity == "error")
    warning_count = sum(1 for i in issues if i.severity == "warning")

    if error_count > ERROR_ESCALATION_THRESHOLD:
        if current_level == "lenient":
            return "moderate"
        if current_level == "moderate":
            return "strict"

    if current_level == "strict" and warning_count > WARNING_RELAXATION_THRESHOLD:
        logger.info("严格模式下警告过多（%d），降为 moderate", warning_count)
        return "moderate"

    return current_level


def should_enforce(config: StrictnessConfig, rule: str) -> bool:
    """rule 为 StrictnessRules 的字段名；未知规则视为不启用。"""
    return bool(getattr(config.rules, rule, False))


def format_strictness(config: StrictnessConfig) -> str:
    parts = [f"Level: {config.level.upper()}", "", "Enabled Rules:"]
    for rule, enabled in config.rules.model_dump().items():
        parts.append(f"  {'✓' if enabled else '✗'} {rule}")
    parts.extend([
        "",
        "Thresholds:",
        f"  Max Warnings: {config.thresholds.max_warnings}",
        f"  Max Errors: {config.thresholds.max_errors}",
        f"  Auto-fix: {'Yes' if config.thresholds.auto_fix else 'No'}",
    ])
    return "\n".join(parts)
