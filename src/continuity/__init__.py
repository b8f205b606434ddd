# -*- coding: utf-8 -*-
"""
连续性模块：角色知识台账、伏笔回收校验、上下文严格度与问题严重度排序。
"""
from .models import (
    Callback,
    CallbackVerificationResult,
    Chapter,
    CharacterKnowledge,
    ContinuityIssue,
    DialogueKnowledgeCheck,
    IssueLocation,
    KnowledgeEntry,
    RankedIssue,
    SeverityContext,
)
from .character_knowledge import (
    CharacterKnowledgeStore,
    create_knowledge_store_from_chapters,
    extract_facts_from_text,
)
from .callback_verify import (
    extract_callbacks,
    find_resolvable_callbacks,
    format_callback_report,
    get_callback_suggestions,
    plant_callback,
    resolve_callback,
    verify_callbacks,
)
from .strictness import (
    StrictnessConfig,
    StrictnessContext,
    StrictnessRules,
    StrictnessThresholds,
    adjust_strictness_based_on_history,
    determine_strictness,
    format_strictness,
    get_config_for_level,
    get_strictness_description,
    should_enforce,
)
from .severity_rank import (
    SEVERITY_ORDER,
    SEVERITY_RULES,
    calculate_severity,
    compare_severity,
    filter_by_severity,
    format_severity,
    get_severity_color,
    get_severity_summary,
    is_above_threshold,
    rank_by_severity,
)

__all__ = [
    "Callback",
    "CallbackVerificationResult",
    "Chapter",
    "CharacterKnowledge",
    "ContinuityIssue",
    "DialogueKnowledgeCheck",
    "IssueLocation",
    "KnowledgeEntry",
    "RankedIssue",
    "SeverityContext",
    "CharacterKnowledgeStore",
    "create_knowledge_store_from_chapters",
    "extract_facts_from_text",
    "extract_callbacks",
    "find_resolvable_callbacks",
    "format_callback_report",
    "get_callback_suggestions",
    "plant_callback",
    "resolve_callback",
    "verify_callbacks",
    "StrictnessConfig",
    "StrictnessContext",
    "StrictnessRules",
    "StrictnessThresholds",
    "adjust_strictness_based_on_history",
    "determine_strictness",
    "format_strictness",
    "get_config_for_level",
    "get_strictness_description",
    "should_enforce",
    "SEVERITY_ORDER",
    "SEVERITY_RULES",
    "calculate_severity",
    "compare_severity",
    "filter_by_severity",
    "format_severity",
    "get_severity_color",
    "get_severity_summary",
    "is_above_threshold",
    "rank_by_severity",
]
