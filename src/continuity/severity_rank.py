# -*- coding: utf-8 -*-
"""
连续性问题严重度定级：按问题类别匹配规则，再按叙事上下文逐条检查调整条件（先命中者生效）。
类别无匹配规则时，退回校验器原始等级的固定映射，因此总能给出一个等级。
"""
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from .models import ContinuityIssue, RankedIssue, SeverityContext, SeverityLevel

# 由低到高
SEVERITY_ORDER: List[str] = ["info", "low", "medium", "high", "critical"]

_GRADE_TO_SEVERITY: Dict[str, str] = {
    "error": "high",
    "warning": "medium",
    "info": "low",
}


class SeverityCondition(BaseModel):
    when: Callable[[ContinuityIssue, SeverityContext], bool]
    adjust_to: SeverityLevel


class SeverityRule(BaseModel):
    id: str
    name: str
    description: str = ""
    default_severity: SeverityLevel
    conditions: List[SeverityCondition] = Field(default_factory=list)


SEVERITY_RULES: List[SeverityRule] = [
    SeverityRule(
        id="character-death",
        name="Character Death Continuity",
        description="Deceased character appearing in new scenes",
        default_severity="critical",
        conditions=[
            SeverityCondition(when=lambda issue, ctx: ctx.story_phase == "climax", adjust_to="critical"),
            SeverityCondition(when=lambda issue, ctx: ctx.previous_similar_issues > 2, adjust_to="high"),
        ],
    ),
    SeverityRule(
        id="timeline",
        name="Timeline Consistency",
        description="Events occurring out of chronological order",
        default_severity="high",
        conditions=[
            SeverityCondition(when=lambda issue, ctx: ctx.chapter_count < 3, adjust_to="medium"),
            SeverityCondition(when=lambda issue, ctx: ctx.story_phase == "climax", adjust_to="critical"),
        ],
    ),
    SeverityRule(
        id="knowledge",
        name="Knowledge Consistency",
        description="Character knows information they shouldn't",
        default_severity="medium",
        conditions=[
            SeverityCondition(when=lambda issue, ctx: ctx.previous_similar_issues > 3, adjust_to="high"),
        ],
    ),
    SeverityRule(
        id="plot-thread",
        name="Plot Thread Continuity",
        description="Plot thread state changes without explanation",
        default_severity="medium",
        conditions=[
            SeverityCondition(when=lambda issue, ctx: ctx.story_phase == "climax", adjust_to="high"),
        ],
    ),
    SeverityRule(
        id="world-state",
        name="World State Consistency",
        description="Contradictions in established world state",
        default_severity="medium",
        conditions=[
            SeverityCondition(when=lambda issue, ctx: ctx.chapter_count > 10, adjust_to="high"),
        ],
    ),
]

_RULES_BY_ID: Dict[str, SeverityRule] = {r.id: r for r in SEVERITY_RULES}

_SEVERITY_COLORS: Dict[str, str] = {
    "critical": "#dc2626",
    "high": "#ea580c",
    "medium": "#ca8a04",
    "low": "#16a34a",
    "info": "#2563eb",
}


def _rule_id_for(issue: ContinuityIssue) -> Optional[str]:
    """问题类别 -> 规则 id；角色类只有「已死亡角色」问题有专门规则。"""
    if issue.type == "character":
        return "character-death" if "Deceased" in issue.description else None
    return {
        "timeline": "timeline",
        "knowledge": "knowledge",
        "plot": "plot-thread",
        "world": "world-state",
    }.get(issue.type)


def map_default_severity(grade: str) -> SeverityLevel:
    return _GRADE_TO_SEVERITY.get(grade, "low")


def calculate_severity(issue: ContinuityIssue, context: SeverityContext) -> SeverityLevel:
    rule = _RULES_BY_ID.get(_rule_id_for(issue) or "")
    if rule is None:
        return map_default_severity(issue.severity)
    for condition in rule.conditions:
        if condition.when(issue, context):
            return condition.adjust_to
    return rule.default_severity


def compare_severity(a: SeverityLevel, b: SeverityLevel) -> int:
    """a 比 b 严重时为正，相同为 0。"""
    return SEVERITY_ORDER.index(a) - SEVERITY_ORDER.index(b)


def is_above_threshold(severity: SeverityLevel, threshold: SeverityLevel) -> bool:
    return compare_severity(severity, threshold) > 0


def filter_by_severity(
    issues: List[ContinuityIssue],
    min_severity: SeverityLevel,
    context: SeverityContext,
) -> List[ContinuityIssue]:
    """保留定级不低于 min_severity 的问题，保持输入顺序。"""
    return [
        issue for issue in issues
        if compare_severity(calculate_severity(issue, context), min_severity) >= 0
    ]


def rank_by_severity(issues: List[ContinuityIssue], context: SeverityContext) -> List[RankedIssue]:
    """按严重度降序排列；同级保持输入顺序。"""
    ranked = [RankedIssue(issue=issue, severity=calculate_severity(issue, context)) for issue in issues]
    ranked.sort(key=lambda r: SEVERITY_ORDER.index(r.severity), reverse=True)
    return ranked


def get_severity_summary(issues: List[ContinuityIssue], context: SeverityContext) -> Dict[str, int]:
    summary = {level: 0 for level in reversed(SEVERITY_ORDER)}
    for issue in issues:
        summary[calculate_severity(issue, context)] += 1
    return summary


def get_severity_color(severity: SeverityLevel) -> str:
    return _SEVERITY_COLORS[severity]


def format_severity(severity: SeverityLevel) -> str:
    return f"[{severity.upper()}]"
