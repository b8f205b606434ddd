# -*- coding: utf-8 -*-
"""改写会话与版本树的 Pydantic 模型。"""
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class RefinementIteration(BaseModel):
    """一次改写迭代：用户指令 + 改写前后正文 + 是否被采纳。"""
    id: str
    number: int = Field(default=0, description="会话内迭代序号")
    instruction: str = Field(default="", description="本次改写指令，作为版本描述")
    previous_content: str = ""
    new_content: str = ""
    timestamp: datetime = Field(default_factory=_utcnow)
    user_approved: bool = False


class RefinementSession(BaseModel):
    id: str
    chapter_id: str = ""
    iterations: List[RefinementIteration] = Field(default_factory=list)
    status: Literal["active", "paused", "completed", "abandoned"] = "active"


class VersionMetadata(BaseModel):
    timestamp: datetime = Field(default_factory=_utcnow)
    description: str = ""
    author: Literal["user", "ai"] = "ai"
    approved: bool = False


class VersionNode(BaseModel):
    """版本节点：除根外恰有一个父节点，子节点按加入顺序记录，第一个子节点为主线。"""
    id: str
    session_id: str = ""
    iteration_number: int = 0
    content: str = ""
    parent_id: Optional[str] = None
    children: List[str] = Field(default_factory=list)
    metadata: VersionMetadata = Field(default_factory=VersionMetadata)


class VersionTree(BaseModel):
    """
    版本树：节点按 id 存放，父子关系只用 id 表示。
    节点只增不删；current_node_id 总指向树中已有节点。
    唯一例外是空会话建出的空树：root_id 与 current_node_id 均为空串，nodes 为空。
    """
    root_id: str = ""
    nodes: Dict[str, VersionNode] = Field(default_factory=dict)
    current_node_id: str = ""


class VersionComparison(BaseModel):
    node_a: VersionNode
    node_b: VersionNode
    common_ancestor: Optional[VersionNode] = None
    diverged_at: Optional[datetime] = None


class VersionStats(BaseModel):
    total_versions: int = 0
    total_branches: int = 0
    max_depth: int = 0
    approved_versions: int = 0
