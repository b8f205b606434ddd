# -*- coding: utf-8 -*-
"""
锚点候选池：对时间线事件依次过滤再打分，产出数量有限、分布分散、按分数排序的分支点候选。

过滤顺序固定：重要度 → 主要角色 → 分布多样性 → 因果影响下限。
多样性在前两步的结果上计算，所以最终页距只在合格事件之间保证。
"""
import logging
import os
from typing import List, Optional

from pydantic import BaseModel, Field

from .causal import analyze_causal_impact, build_event_character_index
from .filtering import (
    DiversityConfig,
    apply_diversity_constraints,
    calculate_character_involvement,
    filter_by_major_characters,
    filter_by_significance,
)
from .models import AnchorCandidate, CausalGraph, Character, SignificanceLevel, TimelineEvent

logger = logging.getLogger(__name__)

CHARACTER_WEIGHT = 0.4
CAUSAL_WEIGHT = 0.6


class CandidatePoolConfig(BaseModel):
    """候选池配置；默认值与 DEFAULT_POOL_CONFIG 一致。"""
    min_significance: SignificanceLevel = Field(default="moderate")
    min_major_characters: int = Field(default=1, ge=0)
    min_causal_impact: float = Field(default=0.3, ge=0.0, le=1.0)
    diversity: DiversityConfig = Field(default_factory=DiversityConfig)
    max_candidates: int = Field(default=20, ge=0)

    @classmethod
    def from_env(cls) -> "CandidatePoolConfig":
        """从环境变量读取覆盖值（ANCHOR_*），未设置的项使用默认值。"""
        base = cls()
        return cls(
            min_significance=os.getenv("ANCHOR_MIN_SIGNIFICANCE") or base.min_significance,
            min_major_characters=int(os.getenv("ANCHOR_MIN_MAJOR_CHARACTERS", base.min_major_characters)),
            min_causal_impact=float(os.getenv("ANCHOR_MIN_CAUSAL_IMPACT", base.min_causal_impact)),
            diversity=DiversityConfig(
                min_distance=int(os.getenv("ANCHOR_MIN_DISTANCE", base.diversity.min_distance)),
                max_per_chapter=int(os.getenv("ANCHOR_MAX_PER_CHAPTER", base.diversity.max_per_chapter)),
            ),
            max_candidates=int(os.getenv("ANCHOR_MAX_CANDIDATES", base.max_candidates)),
        )


DEFAULT_POOL_CONFIG = CandidatePoolConfig()


def build_candidate_pool(
    events: List[TimelineEvent],
    characters: List[Character],
    causal_graph: CausalGraph,
    config: Optional[CandidatePoolConfig] = None,
) -> List[AnchorCandidate]:
    """
    构建锚点候选池（纯函数，不抛异常）。
    空输入或过严配置返回空列表；结果最多 max_candidates 条，分数降序，同分保持事件原顺序。
    """
    cfg = config or DEFAULT_POOL_CONFIG

    filtered = filter_by_significance(events, cfg.min_significance)
    filtered = filter_by_major_characters(filtered, characters, cfg.min_major_characters)
    filtered = apply_diversity_constraints(filtered, cfg.diversity)

    # 角色查找表用全量事件：下游事件可能已被前面的过滤器剔除
    impacts = analyze_causal_impact(filtered, causal_graph, build_event_character_index(events))

    candidates: List[AnchorCandidate] = []
    for event, impact in zip(filtered, impacts):
        if impact.impact_score < cfg.min_causal_impact:
            continue
        involvement = calculate_character_involvement(event, characters)
        candidates.append(
            AnchorCandidate(
                event=event,
                character_involvement=involvement,
                causal_impact=impact.impact_score,
                score=CHARACTER_WEIGHT * involvement + CAUSAL_WEIGHT * impact.impact_score,
            )
        )

    candidates.sort(key=lambda c: c.score, reverse=True)
    result = candidates[: cfg.max_candidates]
    logger.info(
        "候选池: 输入 %d 个事件，过滤后 %d 个，达到因果下限 %d 个，输出 %d 个",
        len(events), len(filtered), len(candidates), len(result),
    )
    return result
