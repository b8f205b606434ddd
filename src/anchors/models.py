# -*- coding: utf-8 -*-
"""时间线事件、角色、因果图与锚点候选的 Pydantic 模型。"""
from typing import Dict, Iterable, List, Literal, Optional

from pydantic import BaseModel, Field

SignificanceLevel = Literal["minor", "moderate", "major", "critical"]
CharacterImportance = Literal["major", "supporting", "minor"]
CausalLinkType = Literal["causes", "enables", "prevents", "influences"]


class TimelineEvent(BaseModel):
    """上游解析出的时间线事件；产出后不再修改。"""
    id: str = Field(..., description="事件唯一 id")
    description: str = Field(default="")
    characters: List[str] = Field(default_factory=list, description="参与角色 id 列表")
    significance: SignificanceLevel = Field(default="moderate")
    chapter_number: Optional[int] = Field(default=None, description="所在章节号，缺省按 0 计")
    page_number: int = Field(default=0, description="所在页码")


class Character(BaseModel):
    """角色；importance 为 major 的角色参与「主要角色」过滤与参与度计算。"""
    id: str
    name: str = Field(default="")
    importance: CharacterImportance = Field(default="supporting")


class CausalLink(BaseModel):
    """因果边：source 事件影响 target 事件。"""
    source: str = Field(default="", description="起点事件 id")
    target: str = Field(..., description="终点事件 id")
    type: CausalLinkType = Field(default="causes")
    strength: float = Field(default=1.0, ge=0.0, le=1.0)
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)


class CausalNode(BaseModel):
    event_id: str
    outgoing: List[CausalLink] = Field(default_factory=list)


class CausalGraph(BaseModel):
    """
    因果图：事件 id -> 节点（含出边列表）。
    由上游分析提供，本模块只读；允许存在环。
    """
    nodes: Dict[str, CausalNode] = Field(default_factory=dict)

    @classmethod
    def from_links(cls, links: Iterable[CausalLink]) -> "CausalGraph":
        """按边列表构建图，起点与终点都会登记为节点。"""
        nodes: Dict[str, CausalNode] = {}
        for link in links:
            nodes.setdefault(link.source, CausalNode(event_id=link.source)).outgoing.append(link)
            nodes.setdefault(link.target, CausalNode(event_id=link.target))
        return cls(nodes=nodes)

    def outgoing_targets(self, event_id: str) -> List[str]:
        """事件的直接下游 id；图中没有该事件时返回空列表。"""
        node = self.nodes.get(event_id)
        if node is None:
            return []
        return [link.target for link in node.outgoing]


class CausalImpact(BaseModel):
    """单个事件的因果影响评估。"""
    event_id: str
    downstream_count: int = 0
    affected_characters: List[str] = Field(default_factory=list)
    impact_score: float = 0.0


class BranchComplexity(BaseModel):
    level: Literal["simple", "moderate", "complex"] = "simple"
    score: float = 0.0


class AnchorCandidate(BaseModel):
    """锚点候选：每次构建候选池时重新计算。"""
    event: TimelineEvent
    character_involvement: float = Field(default=0.0, ge=0.0, le=1.0)
    causal_impact: float = Field(default=0.0, ge=0.0, le=1.0)
    score: float = Field(default=0.0, description="0.4 * 角色参与度 + 0.6 * 因果影响")
