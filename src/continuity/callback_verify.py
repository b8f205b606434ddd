# -*- coding: utf-8 -*-
"""
跨章节伏笔校验：从章节摘要中提取「Foreshadows: / Payoff: / Echoes:」标记，
检查伏笔是否被回收、回收是否有伏笔、是否有重复标记。
每次校验都从章节文本重新提取，不做持久化。
"""
import logging
import re
import uuid
from typing import List, Tuple

from .models import Callback, CallbackVerificationResult, Chapter

logger = logging.getLogger(__name__)

# (标记正则, 回调类型, 提取后的初始状态)；描述截止到下一个逗号或句号
_MARKERS: List[Tuple[re.Pattern, str, str]] = [
    (re.compile(r"foreshadows?:\s*([^.,]+)", re.IGNORECASE), "foreshadowing", "planted"),
    (re.compile(r"payoff:\s*([^.,]+)", re.IGNORECASE), "payoff", "resolved"),
    (re.compile(r"echoes?:\s*([^.,]+)", re.IGNORECASE), "echo", "resolved"),
]


def _callback_id(chapter_id: str) -> str:
    return f"cb-{chapter_id}-{uuid.uuid4().hex[:9]}"


def _words(text: str) -> List[str]:
    return re.findall(r"\w+", (text or "").lower())


def _first_word(text: str) -> str:
    words = _words(text)
    return words[0] if words else ""


def _shares_first_word(probe: Callback, other: Callback) -> bool:
    """probe 描述的首个词是否出现在 other 的描述中（不区分大小写，按词比较）。"""
    first = _first_word(probe.description)
    return bool(first) and first in _words(other.description)


def extract_callbacks(chapters: List[Chapter]) -> List[Callback]:
    """按章节顺序、标记类型顺序提取回调记录。"""
    callbacks: List[Callback] = []
    for chapter in chapters:
        summary = chapter.summary or ""
        for pattern, cb_type, status in _MARKERS:
            for match in pattern.finditer(summary):
                description = match.group(1).strip()
                if not description:
                    continue
                callbacks.append(
                    Callback(
                        id=_callback_id(chapter.id),
                        type=cb_type,
                        source_chapter_id=chapter.id,
                        source_context=summary,
                        description=description,
                        status=status,
                    )
                )
    return callbacks


def verify_callbacks(chapters: List[Chapter]) -> CallbackVerificationResult:
    """
    校验伏笔配对：
    - 回收（payoff）找不到首词相同的伏笔 → 未埋伏笔的回收
    - 伏笔找不到「其他章节」中首词相同的回收 → 未回收伏笔，状态记为 unresolved
    - (类型, 描述) 重复出现 → 重复
    得分 = round(100 * 已回收数 / 总数)，没有任何回调时为 100。
    """
    callbacks = extract_callbacks(chapters)
    foreshadowing = [c for c in callbacks if c.type == "foreshadowing"]
    payoffs = [c for c in callbacks if c.type == "payoff"]

    unplanted = [p for p in payoffs if not any(_shares_first_word(p, f) for f in foreshadowing)]

    unresolved: List[Callback] = []
    for cb in foreshadowing:
        has_payoff = any(
            p.source_chapter_id != cb.source_chapter_id and _shares_first_word(cb, p)
            for p in payoffs
        )
        cb.status = "resolved" if has_payoff else "unresolved"
        if not has_payoff:
            unresolved.append(cb)

    duplicates: List[Callback] = []
    seen = set()
    for cb in callbacks:
        key = (cb.type, cb.description)
        if key in seen:
            duplicates.append(cb)
        seen.add(key)

    total = len(callbacks)
    resolved = sum(1 for c in callbacks if c.status == "resolved")
    score = round(100 * resolved / total) if total else 100
    logger.debug(
        "伏笔校验: 共 %d 条，已回收 %d，未回收 %d，无伏笔回收 %d，重复 %d",
        total, resolved, len(unresolved), len(unplanted), len(duplicates),
    )
    return CallbackVerificationResult(
        callbacks=callbacks,
        unplanted_payoffs=unplanted,
        unresolved_callbacks=unresolved,
        duplicates=duplicates,
        score=score,
    )


def plant_callback(description: str, chapter_id: str, context: str) -> Callback:
    """埋下一个待回收的伏笔。"""
    return Callback(
        id=_callback_id(chapter_id),
        type="foreshadowing",
        source_chapter_id=chapter_id,
        source_context=context,
        description=description,
        status="planted",
    )


def resolve_callback(callback: Callback, payoff_chapter_id: str, payoff_context: str) -> Callback:
    """返回已回收的副本，原对象不变。"""
    return callback.model_copy(
        update={
            "target_chapter_id": payoff_chapter_id,
            "target_context": payoff_context,
            "status": "resolved",
        }
    )


def find_resolvable_callbacks(unresolved: List[Callback], chapter_text: str) -> List[Callback]:
    """描述前三个词中任一出现在当前章节文本里的未回收伏笔。"""
    text = (chapter_text or "").lower()
    resolvable = []
    for cb in unresolved:
        keywords = [w for w in cb.description.lower().split(" ")[:3] if w]
        if any(kw in text for kw in keywords):
            resolvable.append(cb)
    return resolvable


def get_callback_suggestions(chapters: List[Chapter], current_chapter: Chapter) -> List[str]:
    """给当前章节的回收建议：前文未回收、且与本章摘要相关的伏笔。"""
    result = verify_callbacks(chapters)
    return [
        f'Consider resolving: "{cb.description}" (planted in chapter {cb.source_chapter_id})'
        for cb in find_resolvable_callbacks(result.unresolved_callbacks, current_chapter.summary)
    ]


def format_callback_report(result: CallbackVerificationResult) -> str:
    """生成 markdown 格式的校验报告。"""
    resolved = sum(1 for c in result.callbacks if c.status == "resolved")
    parts = [
        "## Callback Verification Report",
        "",
        f"Total Callbacks: {len(result.callbacks)}",
        f"Resolved: {resolved}",
        f"Score: {result.score}%",
        "",
    ]
    if result.unplanted_payoffs:
        parts.append("### Unplanted Payoffs")
        for payoff in result.unplanted_payoffs:
            parts.append(f'- "{payoff.description}" in chapter {payoff.source_chapter_id}')
        parts.append("")
    if result.unresolved_callbacks:
        parts.append("### Unresolved Callbacks")
        for cb in result.unresolved_callbacks:
            parts.append(f'- "{cb.description}" from chapter {cb.source_chapter_id}')
        parts.append("")
    if result.duplicates:
        parts.append("### Duplicate Callbacks")
        parts.append(f"{len(result.duplicates)} duplicate callbacks found")
    return "\n".join(parts)
