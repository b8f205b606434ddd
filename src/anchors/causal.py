# -*- coding: utf-8 -*-
"""因果影响评分：供候选池按「改动此事件会波及多少后续剧情」打分。"""
from typing import Dict, List, Optional

from .downstream import characters_in_events, get_downstream_events
from .models import CausalGraph, CausalImpact, TimelineEvent


def build_event_character_index(events: List[TimelineEvent]) -> Dict[str, List[str]]:
    """事件 id -> 参与角色 id 列表。"""
    return {e.id: list(e.characters) for e in events}


def calculate_impact_score(downstream_count: int, affected_character_count: int) -> float:
    """下游 5 个事件、波及 3 个角色即各自封顶，两项各占一半。"""
    return min(downstream_count / 5, 1) * 0.5 + min(affected_character_count / 3, 1) * 0.5


def analyze_causal_impact(
    events: List[TimelineEvent],
    causal_graph: CausalGraph,
    event_characters: Optional[Dict[str, List[str]]] = None,
) -> List[CausalImpact]:
    """
    逐个事件计算因果影响。
    :param event_characters: 角色查找表；缺省时只用 events 自身构建，
        调用方应传入全量事件的索引，否则被过滤掉的下游事件中的角色不会计入
    """
    index = event_characters if event_characters is not None else build_event_character_index(events)
    impacts: List[CausalImpact] = []
    for event in events:
        downstream = get_downstream_events(causal_graph, event.id)
        affected = characters_in_events(downstream, index)
        impacts.append(
            CausalImpact(
                event_id=event.id,
                downstream_count=len(downstream),
                affected_characters=affected,
                impact_score=calculate_impact_score(len(downstream), len(affected)),
            )
        )
    return impacts
