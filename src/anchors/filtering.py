# -*- coding: utf-8 -*-
"""
候选事件过滤：重要度 → 主要角色参与 → 分布多样性。
各过滤器均保持输入顺序，只做删减。
"""
from typing import Dict, List

from pydantic import BaseModel, Field

from .models import Character, SignificanceLevel, TimelineEvent

SIGNIFICANCE_ORDER: List[str] = ["minor", "moderate", "major", "critical"]

SIGNIFICANCE_WEIGHTS: Dict[str, int] = {
    "minor": 1,
    "moderate": 2,
    "major": 4,
    "critical": 8,
}


class DiversityConfig(BaseModel):
    """分布约束：候选之间的最小页距与单章上限。"""
    min_distance: int = Field(default=10, ge=0, description="两个候选之间至少相隔的页数")
    max_per_chapter: int = Field(default=3, ge=0, description="每章最多保留的候选数")


def _significance_rank(level: str) -> int:
    return SIGNIFICANCE_ORDER.index(level) if level in SIGNIFICANCE_ORDER else -1


def meets_significance_threshold(event: TimelineEvent, threshold: SignificanceLevel) -> bool:
    return _significance_rank(event.significance) >= _significance_rank(threshold)


def filter_by_significance(
    events: List[TimelineEvent],
    min_level: SignificanceLevel = "moderate",
) -> List[TimelineEvent]:
    """保留重要度不低于 min_level 的事件（minor < moderate < major < critical）。"""
    return [e for e in events if meets_significance_threshold(e, min_level)]


def major_character_ids(characters: List[Character]) -> set:
    return {c.id for c in characters if c.importance == "major"}


def filter_by_major_characters(
    events: List[TimelineEvent],
    characters: List[Character],
    min_major_characters: int = 1,
) -> List[TimelineEvent]:
    """保留至少有 min_major_characters 个主要角色参与的事件。"""
    major_ids = major_character_ids(characters)
    return [
        e for e in events
        if sum(1 for cid in e.characters if cid in major_ids) >= min_major_characters
    ]


def calculate_character_involvement(event: TimelineEvent, characters: List[Character]) -> float:
    """
    角色参与度：事件中主要角色数 / max(主要角色总数的一半, 1)，封顶 1。
    主要角色达到全体主要角色的一半即视为满参与。
    """
    major_ids = major_character_ids(characters)
    major_count = sum(1 for cid in event.characters if cid in major_ids)
    return min(major_count / max(len(major_ids) * 0.5, 1), 1)


def apply_diversity_constraints(
    events: List[TimelineEvent],
    config: DiversityConfig,
) -> List[TimelineEvent]:
    """
    按原顺序贪心挑选：与已选事件页距都不小于 min_distance，且所在章未满 max_per_chapter。
    章节号缺省的事件归入第 0 章。
    """
    selected: List[TimelineEvent] = []
    chapter_counts: Dict[int, int] = {}
    for event in events:
        if any(abs(s.page_number - event.page_number) < config.min_distance for s in selected):
            continue
        chapter = event.chapter_number or 0
        count = chapter_counts.get(chapter, 0)
        if count >= config.max_per_chapter:
            continue
        selected.append(event)
        chapter_counts[chapter] = count + 1
    return selected
