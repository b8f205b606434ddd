# -*- coding: utf-8 -*-
"""
锚点模块：在因果图上挑选少量、分散、影响大的剧情分支点候选。
包含下游影响分析、候选过滤与候选池构建。
"""
from .models import (
    AnchorCandidate,
    BranchComplexity,
    CausalGraph,
    CausalImpact,
    CausalLink,
    CausalNode,
    Character,
    TimelineEvent,
)
from .downstream import (
    characters_in_events,
    count_downstream_events,
    estimate_branch_complexity,
    get_affected_characters,
    get_downstream_events,
)
from .causal import analyze_causal_impact, build_event_character_index, calculate_impact_score
from .filtering import (
    SIGNIFICANCE_ORDER,
    SIGNIFICANCE_WEIGHTS,
    DiversityConfig,
    apply_diversity_constraints,
    calculate_character_involvement,
    filter_by_major_characters,
    filter_by_significance,
    meets_significance_threshold,
)
from .pool import DEFAULT_POOL_CONFIG, CandidatePoolConfig, build_candidate_pool

__all__ = [
    "AnchorCandidate",
    "BranchComplexity",
    "CausalGraph",
    "CausalImpact",
    "CausalLink",
    "CausalNode",
    "Character",
    "TimelineEvent",
    "characters_in_events",
    "count_downstream_events",
    "estimate_branch_complexity",
    "get_affected_characters",
    "get_downstream_events",
    "analyze_causal_impact",
    "build_event_character_index",
    "calculate_impact_score",
    "SIGNIFICANCE_ORDER",
    "SIGNIFICANCE_WEIGHTS",
    "DiversityConfig",
    "apply_diversity_constraints",
    "calculate_character_involvement",
    "filter_by_major_characters",
    "filter_by_significance",
    "meets_significance_threshold",
    "DEFAULT_POOL_CONFIG",
    "CandidatePoolConfig",
    "build_candidate_pool",
]
