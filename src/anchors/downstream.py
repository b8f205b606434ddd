# -*- coding: utf-8 -*-
"""
下游影响分析：从某事件出发沿因果出边逐层遍历，统计可达的下游事件与受影响角色。
图中可能有环，遍历以 visited 集合去重保证终止；不在图中的事件视为没有出边。
"""
import logging
from typing import Dict, List, Optional

from .models import BranchComplexity, CausalGraph

logger = logging.getLogger(__name__)


def get_downstream_events(
    graph: CausalGraph,
    event_id: str,
    max_depth: Optional[int] = None,
) -> List[str]:
    """
    返回从 event_id 可达的下游事件 id（按首次到达顺序，不含起点自身）。
    :param max_depth: 最大跳数，None 表示不限；1 表示只取直接下游
    """
    visited = {event_id}
    reached: List[str] = []
    current_layer = [event_id]
    depth = 0
    while current_layer:
        if max_depth is not None and depth >= max_depth:
            break
        next_layer: List[str] = []
        for node_id in current_layer:
            for target in graph.outgoing_targets(node_id):
                if target in visited:
                    continue
                visited.add(target)
                reached.append(target)
                next_layer.append(target)
        current_layer = next_layer
        depth += 1
    return reached


def count_downstream_events(
    event_id: str,
    graph: CausalGraph,
    depth: Optional[int] = None,
) -> int:
    """下游事件数量；环经过起点时起点也不计入。"""
    return len(get_downstream_events(graph, event_id, max_depth=depth))


def characters_in_events(
    event_ids: List[str],
    event_characters: Dict[str, List[str]],
) -> List[str]:
    """一组事件中出现过的角色 id 并集（按首次出现顺序）。"""
    affected: List[str] = []
    seen = set()
    for event_id in event_ids:
        for char_id in event_characters.get(event_id, []):
            if char_id not in seen:
                seen.add(char_id)
                affected.append(char_id)
    return affected


def get_affected_characters(
    event_id: str,
    graph: CausalGraph,
    event_characters: Dict[str, List[str]],
    depth: Optional[int] = None,
) -> List[str]:
    """所有下游事件中出现过的角色 id（起点事件自身的角色不计入）。"""
    return characters_in_events(get_downstream_events(graph, event_id, max_depth=depth), event_characters)


def estimate_branch_complexity(
    downstream_count: int,
    affected_character_count: int,
) -> BranchComplexity:
    """按下游事件数与受影响角色数估算分支改写的复杂度。"""
    score = min(downstream_count / 10, 0.5) + min(affected_character_count / 5, 0.5)
    if score >= 0.7:
        level = "complex"
    elif score >= 0.4:
        level = "moderate"
    else:
        level = "simple"
    logger.debug(
        "分支复杂度: downstream=%d characters=%d -> %s (%.2f)",
        downstream_count, affected_character_count, level, score,
    )
    return BranchComplexity(level=level, score=score)
