# -*- coding: utf-8 -*-
"""档案员：改写草稿的分支版本历史。"""
from .models import (
    RefinementIteration,
    RefinementSession,
    VersionComparison,
    VersionMetadata,
    VersionNode,
    VersionStats,
    VersionTree,
)
from .version_history import (
    MergeNotSupportedError,
    VersionNodeNotFoundError,
    branch_from_node,
    compare_versions,
    create_version_tree,
    export_version_tree,
    find_version_by_description,
    get_branches,
    get_version_path,
    get_version_stats,
    load_version_tree,
    merge_branches,
    save_version_tree,
)

__all__ = [
    "RefinementIteration",
    "RefinementSession",
    "VersionComparison",
    "VersionMetadata",
    "VersionNode",
    "VersionStats",
    "VersionTree",
    "MergeNotSupportedError",
    "VersionNodeNotFoundError",
    "branch_from_node",
    "compare_versions",
    "create_version_tree",
    "export_version_tree",
    "find_version_by_description",
    "get_branches",
    "get_version_path",
    "get_version_stats",
    "load_version_tree",
    "merge_branches",
    "save_version_tree",
]
