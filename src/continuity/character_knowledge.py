# -*- coding: utf-8 -*-
"""
角色知识库：逐角色记录「已知事实 / 信念 / 秘密」，用于检查台词是否引用了角色尚不该知道的信息。

状态流转：未知 → 已知 | 信念 | 秘密；信念 → 已知 | 秘密；秘密 → 已知（只能经 reveal_secret）。
已知事实不会退回秘密或信念，同一事实在同一角色下最多出现在一个分桶中。
单写者使用：每个故事持有独立实例，不做并发保护。
"""
import logging
import re
import uuid
from typing import Any, Dict, List, Optional

from .models import (
    Chapter,
    CharacterKnowledge,
    DialogueKnowledgeCheck,
    KnowledgeConfidence,
    KnowledgeEntry,
    KnowledgeSource,
)

logger = logging.getLogger(__name__)

REDACTED = "[REDACTED]"
MAX_FACTS_PER_CHAPTER = 10

# 简化事实抽取：「X is/did/was/has/said Y」
_FACT_PATTERN = re.compile(r"\b(\w+)\s+(is|did|was|has|said)\s+([^.,]+)", re.IGNORECASE)

# 分桶优先级：高优先级分桶中的事实不会被写入低优先级分桶
_BUCKET_RANK = {"beliefs": 1, "secrets": 2, "known_facts": 3}


def _new_entry_id() -> str:
    return f"k-{uuid.uuid4().hex[:12]}"


class CharacterKnowledgeStore:
    """全体角色的知识台账；角色在首次被引用时惰性创建。"""

    def __init__(self) -> None:
        self._knowledge: Dict[str, CharacterKnowledge] = {}

    # ---------- 角色 ----------

    def initialize_character(self, character_id: str, character_name: str) -> CharacterKnowledge:
        """创建空分桶；已存在时会被覆盖，调用方需自行判断。"""
        record = CharacterKnowledge(character_id=character_id, character_name=character_name)
        self._knowledge[character_id] = record
        return record

    def has_character(self, character_id: str) -> bool:
        return character_id in self._knowledge

    def tracked_character_ids(self) -> List[str]:
        return list(self._knowledge)

    def _ensure_character(self, character_id: str) -> CharacterKnowledge:
        record = self._knowledge.get(character_id)
        if record is None:
            record = self.initialize_character(character_id, character_id)
        return record

    # ---------- 写入 ----------

    def _current_bucket(self, record: CharacterKnowledge, fact: str) -> Optional[str]:
        for name in ("known_facts", "secrets", "beliefs"):
            if fact in getattr(record, name):
                return name
        return None

    def _place(self, record: CharacterKnowledge, bucket: str, entry: KnowledgeEntry) -> KnowledgeEntry:
        current = self._current_bucket(record, entry.fact)
        if current is not None and _BUCKET_RANK[current] > _BUCKET_RANK[bucket]:
            logger.debug(
                "角色 %s 的事实已在 %s 中，忽略写入 %s: %s",
                record.character_id, current, bucket, entry.fact,
            )
            return getattr(record, current)[entry.fact]
        if current is not None:
            getattr(record, current).pop(entry.fact)
        getattr(record, bucket)[entry.fact] = entry
        return entry

    def add_knowledge(
        self,
        character_id: str,
        fact: str,
        source: KnowledgeSource = "observed",
        source_chapter_id: Optional[str] = None,
        confidence: KnowledgeConfidence = "certain",
        is_secret: bool = False,
    ) -> KnowledgeEntry:
        """
        记录角色获知一条事实；is_secret 为 True 时记入秘密分桶。
        事实若已是该角色的已知事实（或写入已知时已是秘密），返回既有条目而不改动分桶。
        """
        record = self._ensure_character(character_id)
        entry = KnowledgeEntry(
            id=_new_entry_id(),
            character_id=character_id,
            fact=fact,
            source=source,
            source_chapter_id=source_chapter_id,
            confidence=confidence,
        )
        if not is_secret and fact in record.secrets:
            # 秘密只能经 reveal_secret 变为已知
            return record.secrets[fact]
        return self._place(record, "secrets" if is_secret else "known_facts", entry)

    def add_belief(
        self,
        character_id: str,
        fact: str,
        source: KnowledgeSource = "assumed",
        source_chapter_id: Optional[str] = None,
        confidence: KnowledgeConfidence = "uncertain",
    ) -> KnowledgeEntry:
        """记录角色自以为知道（可能有误）的信息。"""
        record = self._ensure_character(character_id)
        entry = KnowledgeEntry(
            id=_new_entry_id(),
            character_id=character_id,
            fact=fact,
            source=source,
            source_chapter_id=source_chapter_id,
            confidence=confidence,
        )
        return self._place(record, "beliefs", entry)

    def reveal_secret(self, character_id: str, fact: str, revealed_in_chapter: str) -> bool:
        """把秘密移入已知事实并记录揭示章节；不是已登记的秘密时返回 False。"""
        record = self._knowledge.get(character_id)
        if record is None:
            return False
        secret = record.secrets.pop(fact, None)
        if secret is None:
            return False
        record.known_facts[fact] = secret.model_copy(update={"revealed_in_chapter": revealed_in_chapter})
        logger.info("角色 %s 的秘密在章节 %s 揭示: %s", character_id, revealed_in_chapter, fact)
        return True

    def share_knowledge(
        self,
        from_character_id: str,
        to_character_id: str,
        fact: str,
        chapter_id: str,
    ) -> bool:
        """把已知事实以「被告知」的方式复制给另一角色，置信度沿用原条目。"""
        source_record = self._knowledge.get(from_character_id)
        if source_record is None:
            return False
        fact_entry = source_record.known_facts.get(fact)
        if fact_entry is None:
            return False
        self.add_knowledge(
            to_character_id,
            fact,
            source="told",
            source_chapter_id=chapter_id,
            confidence=fact_entry.confidence,
        )
        return True

    # ---------- 查询 ----------

    def get_known_facts(self, character_id: str) -> List[KnowledgeEntry]:
        record = self._knowledge.get(character_id)
        return list(record.known_facts.values()) if record else []

    def get_beliefs(self, character_id: str) -> List[KnowledgeEntry]:
        record = self._knowledge.get(character_id)
        return list(record.beliefs.values()) if record else []

    def get_secrets(self, character_id: str) -> List[KnowledgeEntry]:
        record = self._knowledge.get(character_id)
        return list(record.secrets.values()) if record else []

    def knows(self, character_id: str, fact: str) -> bool:
        """已知事实或信念中有该事实即为 True；未揭示的秘密不算。"""
        record = self._knowledge.get(character_id)
        if record is None:
            return False
        return fact in record.known_facts or fact in record.beliefs

    def get_shared_knowledge(self, character_ids: List[str]) -> List[str]:
        """给定角色全部知道的事实；任一角色未登记时结果为空。"""
        if not character_ids:
            return []
        fact_sets = []
        for char_id in character_ids:
            record = self._knowledge.get(char_id)
            if record is None:
                return []
            fact_sets.append(record.known_facts)
        first, rest = fact_sets[0], fact_sets[1:]
        return [fact for fact in first if all(fact in other for other in rest)]

    def get_unique_knowledge(self, character_id: str) -> List[str]:
        """只有该角色知道、其他已登记角色都不知道的事实。"""
        record = self._knowledge.get(character_id)
        if record is None:
            return []
        others = [r for cid, r in self._knowledge.items() if cid != character_id]
        return [
            fact for fact in record.known_facts
            if not any(fact in other.known_facts for other in others)
        ]

    def get_knowledge_timeline(self, character_id: str) -> List[KnowledgeEntry]:
        """已知事实按获知时间排序。"""
        return sorted(self.get_known_facts(character_id), key=lambda e: e.timestamp)

    def validate_dialogue_knowledge(self, character_id: str, dialogue: str) -> DialogueKnowledgeCheck:
        """
        启发式台词检查：其他角色的已知事实若（不区分大小写）出现在台词中，
        而说话角色的已知事实里没有它，则记为越界引用。
        仅做子串匹配，误报漏报都在预期内。未登记的角色返回 valid=False。
        """
        record = self._knowledge.get(character_id)
        if record is None:
            return DialogueKnowledgeCheck(valid=False, unknown_references=[])
        text = dialogue.lower()
        unknown: List[str] = []
        for other_id, other in self._knowledge.items():
            if other_id == character_id:
                continue
            for fact in other.known_facts:
                if fact in record.known_facts or fact in unknown:
                    continue
                if fact.lower() in text:
                    unknown.append(fact)
        if unknown:
            logger.debug("角色 %s 的台词引用了未知信息: %s", character_id, unknown)
        return DialogueKnowledgeCheck(valid=not unknown, unknown_references=unknown)

    # ---------- 导出 ----------

    def export_character_knowledge(self, character_id: str) -> Dict[str, Any]:
        """导出单个角色的知识快照，秘密的事实文本被遮蔽。"""
        record = self._knowledge.get(character_id)
        if record is None:
            return {}
        return {
            "character_id": record.character_id,
            "character_name": record.character_name,
            "known_facts": [e.model_dump(mode="json") for e in record.known_facts.values()],
            "beliefs": [e.model_dump(mode="json") for e in record.beliefs.values()],
            "secrets": [
                e.model_copy(update={"fact": REDACTED}).model_dump(mode="json")
                for e in record.secrets.values()
            ],
        }


def extract_facts_from_text(text: str) -> List[str]:
    """从摘要中抽取简化事实句，最多 MAX_FACTS_PER_CHAPTER 条。"""
    facts = [m.group(0).strip() for m in _FACT_PATTERN.finditer(text or "")]
    return facts[:MAX_FACTS_PER_CHAPTER]


def create_knowledge_store_from_chapters(chapters: List[Chapter]) -> CharacterKnowledgeStore:
    """按章节顺序建库：章节摘要中的事实记为该章所有出场角色「亲眼所见」。"""
    store = CharacterKnowledgeStore()
    for chapter in chapters:
        for char_id in chapter.characters:
            if not store.has_character(char_id):
                store.initialize_character(char_id, char_id)
        for fact in extract_facts_from_text(chapter.summary):
            for char_id in chapter.characters:
                store.add_knowledge(char_id, fact, source="observed", source_chapter_id=chapter.id)
    return store
