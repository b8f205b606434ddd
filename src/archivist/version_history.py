# -*- coding: utf-8 -*-
"""
分支版本历史：把改写会话整理成版本树，支持从任意版本分叉、回溯路径、列出分支与比较版本。
所有函数不修改传入的树，需要变更时返回新树。
"""
import logging
import uuid
from pathlib import Path
from typing import List, Literal, Optional

from .models import (
    RefinementSession,
    VersionComparison,
    VersionMetadata,
    VersionNode,
    VersionStats,
    VersionTree,
)

logger = logging.getLogger(__name__)

MergeResolution = Literal["source", "target", "manual"]


class VersionNodeNotFoundError(KeyError):
    """版本树中不存在指定节点。"""
    pass


class MergeNotSupportedError(NotImplementedError):
    """版本内容合并尚未支持。"""
    pass


def _require_node(tree: VersionTree, node_id: str) -> VersionNode:
    node = tree.nodes.get(node_id)
    if node is None:
        raise VersionNodeNotFoundError(f"Node {node_id} not found")
    return node


def create_version_tree(session: RefinementSession) -> VersionTree:
    """
    按迭代顺序建树：第一个迭代为根；之后每个迭代挂在最近一个已采纳节点下，
    尚无已采纳节点时挂在根下。未采纳的迭代成为叶子，不作为后续迭代的父节点。
    当前节点取最后一个「已采纳或无子节点」的节点。
    迭代 id 重复时跳过后出现的那个并记警告，节点 id 不会被覆盖。
    空会话得到空树，此时 root_id 与 current_node_id 均为空串，是「当前节点必在树中」的唯一例外。
    """
    tree = VersionTree()
    parent_id: Optional[str] = None
    for iteration in session.iterations:
        node_id = f"node-{iteration.id}"
        if node_id in tree.nodes:
            logger.warning("会话 %s 中迭代 id 重复: %s，已跳过", session.id, iteration.id)
            continue
        node = VersionNode(
            id=node_id,
            session_id=session.id,
            iteration_number=iteration.number,
            content=iteration.new_content,
            parent_id=parent_id,
            metadata=VersionMetadata(
                timestamp=iteration.timestamp,
                description=iteration.instruction,
                author="ai",
                approved=iteration.user_approved,
            ),
        )
        tree.nodes[node.id] = node
        if parent_id is None:
            tree.root_id = node.id
        else:
            tree.nodes[parent_id].children.append(node.id)

        if iteration.user_approved or parent_id is None:
            parent_id = node.id

    tree.current_node_id = tree.root_id
    for node_id, node in tree.nodes.items():
        if node.metadata.approved or not node.children:
            tree.current_node_id = node_id
    return tree


def branch_from_node(
    tree: VersionTree,
    from_node_id: str,
    new_content: str,
    description: str,
) -> VersionTree:
    """
    在 from_node_id 下新建子版本，返回当前节点指向新版本的树副本。
    父节点不存在时抛 VersionNodeNotFoundError。
    """
    parent = _require_node(tree, from_node_id)
    new_node = VersionNode(
        id=f"node-branch-{uuid.uuid4().hex[:12]}",
        session_id=parent.session_id,
        iteration_number=parent.iteration_number + 1,
        content=new_content,
        parent_id=from_node_id,
        metadata=VersionMetadata(description=description, author="user", approved=True),
    )
    new_tree = tree.model_copy(deep=True)
    new_tree.nodes[new_node.id] = new_node
    new_tree.nodes[from_node_id].children.append(new_node.id)
    new_tree.current_node_id = new_node.id
    logger.info("从版本 %s 分叉出 %s", from_node_id, new_node.id)
    return new_tree


def get_version_path(tree: VersionTree, node_id: Optional[str] = None) -> List[VersionNode]:
    """
    从根到目标节点（含两端）的路径；默认目标为当前节点，节点不存在时为空列表。
    父链回到已走过的节点时停止，外部加载的树含环也能终止。
    """
    path: List[VersionNode] = []
    seen = set()
    current = tree.nodes.get(node_id or tree.current_node_id)
    while current is not None and current.id not in seen:
        seen.add(current.id)
        path.append(current)
        current = tree.nodes.get(current.parent_id) if current.parent_id else None
    path.reverse()
    return path


def _main_line(tree: VersionTree, start_id: str) -> List[VersionNode]:
    """从 start_id 起一直沿第一个子节点走到叶子；遇到走过的节点即停。"""
    branch: List[VersionNode] = []
    seen = set()
    current = tree.nodes.get(start_id)
    while current is not None and current.id not in seen:
        seen.add(current.id)
        branch.append(current)
        if not current.children:
            break
        current = tree.nodes.get(current.children[0])
    return branch


def get_branches(tree: VersionTree, from_node_id: Optional[str] = None) -> List[List[VersionNode]]:
    """
    给定节点（默认根）的每个子节点各取一条主线。
    只沿第一个子节点向下，不枚举整棵子树。
    """
    start = tree.nodes.get(from_node_id or tree.root_id)
    if start is None:
        return []
    return [_main_line(tree, child_id) for child_id in start.children]


def compare_versions(tree: VersionTree, node_a_id: str, node_b_id: str) -> VersionComparison:
    """逐位比较两条根路径，最后一个相同的节点即最深公共祖先。"""
    node_a = _require_node(tree, node_a_id)
    node_b = _require_node(tree, node_b_id)
    common: Optional[VersionNode] = None
    for a, b in zip(get_version_path(tree, node_a_id), get_version_path(tree, node_b_id)):
        if a.id != b.id:
            break
        common = a
    return VersionComparison(
        node_a=node_a,
        node_b=node_b,
        common_ancestor=common,
        diverged_at=common.metadata.timestamp if common else None,
    )


def get_version_stats(tree: VersionTree) -> VersionStats:
    total_branches = 0
    max_depth = 0
    approved = 0
    for node in tree.nodes.values():
        if len(node.children) > 1:
            total_branches += len(node.children) - 1
        if node.metadata.approved:
            approved += 1
        max_depth = max(max_depth, len(get_version_path(tree, node.id)))
    return VersionStats(
        total_versions=len(tree.nodes),
        total_branches=total_branches,
        max_depth=max_depth,
        approved_versions=approved,
    )


def find_version_by_description(tree: VersionTree, search_term: str) -> List[VersionNode]:
    term = search_term.lower()
    return [n for n in tree.nodes.values() if term in n.metadata.description.lower()]


def merge_branches(
    tree: VersionTree,
    source_node_id: str,
    target_node_id: str,
    resolution: MergeResolution = "source",
) -> VersionTree:
    """
    只在源节点描述上标注合并去向，不合并正文。
    resolution 为 manual 时需要真正的内容合并，抛 MergeNotSupportedError。
    """
    if resolution == "manual":
        raise MergeNotSupportedError("content merge between versions is not yet supported")
    new_tree = tree.model_copy(deep=True)
    source = new_tree.nodes.get(source_node_id)
    if source is None:
        return new_tree
    source.metadata.description = f"{source.metadata.description} (merged into {target_node_id})"
    logger.warning("版本 %s 仅标注合并到 %s，正文未合并", source_node_id, target_node_id)
    return new_tree


def export_version_tree(tree: VersionTree) -> dict:
    """导出为节点列表 + 根/当前指针，供外部持久化或渲染。"""
    return {
        "root_id": tree.root_id,
        "current_node_id": tree.current_node_id,
        "nodes": [node.model_dump(mode="json") for node in tree.nodes.values()],
    }


def save_version_tree(tree: VersionTree, path: Path) -> None:
    """将版本树写入 JSON 文件。"""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(tree.model_dump_json(indent=2), encoding="utf-8")


def load_version_tree(path: Path) -> Optional[VersionTree]:
    """从 JSON 文件加载版本树，文件不存在时返回 None。"""
    p = Path(path)
    if not p.is_file():
        return None
    return VersionTree.model_validate_json(p.read_text(encoding="utf-8"))
