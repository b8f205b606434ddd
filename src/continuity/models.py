# -*- coding: utf-8 -*-
"""
连续性校验相关 Pydantic 模型：章节、角色知识条目、伏笔回收、连续性问题与严重度上下文。
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

StoryPhase = Literal["setup", "rising", "climax", "falling"]
IssueType = Literal["character", "plot", "world", "timeline", "knowledge"]
IssueGrade = Literal["error", "warning", "info"]
SeverityLevel = Literal["critical", "high", "medium", "low", "info"]


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


# ---------- 章节（上游生成/持久化模块提供） ----------


class Chapter(BaseModel):
    """续写章节记录。"""
    id: str = Field(..., description="章节 id")
    order: int = Field(default=0, description="分支内章节序号")
    title: str = Field(default="")
    summary: str = Field(default="", description="章节摘要，伏笔标记从这里提取")
    content: str = Field(default="", description="正文（markdown）")
    scenes: List[Dict[str, Any]] = Field(default_factory=list)
    characters: List[str] = Field(default_factory=list, description="出场角色 id")
    word_count: int = Field(default=0)


# ---------- 角色知识 ----------


KnowledgeSource = Literal["observed", "told", "inferred", "assumed"]
KnowledgeConfidence = Literal["certain", "likely", "uncertain"]


class KnowledgeEntry(BaseModel):
    """角色掌握的一条信息；同一时刻只归属一个角色的一个分桶。"""
    id: str
    character_id: str
    fact: str
    source: KnowledgeSource = Field(default="observed")
    source_chapter_id: Optional[str] = None
    confidence: KnowledgeConfidence = Field(default="certain")
    timestamp: datetime = Field(default_factory=_utcnow)
    revealed_in_chapter: Optional[str] = None


class CharacterKnowledge(BaseModel):
    """单个角色的三个互斥分桶：已知事实 / 信念（可能有误）/ 未公开的秘密。"""
    character_id: str
    character_name: str = ""
    known_facts: Dict[str, KnowledgeEntry] = Field(default_factory=dict)
    beliefs: Dict[str, KnowledgeEntry] = Field(default_factory=dict)
    secrets: Dict[str, KnowledgeEntry] = Field(default_factory=dict)


class DialogueKnowledgeCheck(BaseModel):
    valid: bool = False
    unknown_references: List[str] = Field(default_factory=list)


# ---------- 伏笔 / 回收 ----------


CallbackType = Literal["foreshadowing", "payoff", "reference", "echo", "callback"]
CallbackStatus = Literal["planted", "resolved", "unresolved"]


class Callback(BaseModel):
    """跨章节叙事呼应：伏笔、回收、回响等。"""
    id: str
    type: CallbackType
    source_chapter_id: str
    source_context: str = ""
    target_chapter_id: Optional[str] = None
    target_context: Optional[str] = None
    description: str = ""
    status: CallbackStatus = "planted"


class CallbackVerificationResult(BaseModel):
    callbacks: List[Callback] = Field(default_factory=list)
    unplanted_payoffs: List[Callback] = Field(default_factory=list)
    unresolved_callbacks: List[Callback] = Field(default_factory=list)
    duplicates: List[Callback] = Field(default_factory=list)
    score: int = Field(default=100, ge=0, le=100)


# ---------- 连续性问题与严重度 ----------


class IssueLocation(BaseModel):
    chapter_id: Optional[str] = None
    scene_index: Optional[int] = None
    context: str = ""


class ContinuityIssue(BaseModel):
    """由外部校验器产出的连续性问题，本模块只负责定级与排序。"""
    id: str = ""
    type: IssueType
    severity: IssueGrade = Field(default="warning", description="校验器给出的原始等级")
    description: str = ""
    location: IssueLocation = Field(default_factory=IssueLocation)
    suggestion: str = ""
    auto_fixable: bool = False


class SeverityContext(BaseModel):
    """严重度调整所依据的叙事上下文。"""
    chapter_count: int = Field(default=0, ge=0)
    story_phase: StoryPhase = Field(default="setup")
    has_user_override: bool = False
    previous_similar_issues: int = Field(default=0, ge=0)


class RankedIssue(BaseModel):
    issue: ContinuityIssue
    severity: SeverityLevel
