# -*- coding: utf-8 -*-
"""

用法示例：
  # 锚点候选：从时间线事件、角色与因果边中挑选分支点候选
  python main.py anchors --input data/story.json
  python main.py anchors --input data/story.json --max 5

  # 伏笔校验：检查章节摘要中的 Foreshadows:/Payoff:/Echoes: 标记
  python main.py callbacks --input data/chapters.json

  # 连续性问题定级：按故事阶段与章节数决定严格度，并对问题排序
  python main.py continuity --input data/issues.json --chapters 12 --phase climax --min-severity medium

  # 版本历史：把改写会话整理成版本树
  python main.py history --input data/session.json --out data/version_tree.json
"""
import argparse
import json
import os
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

STRICTNESS_LEVELS = ["strict", "moderate", "lenient"]
SEVERITY_LEVELS = ["critical", "high", "medium", "low", "info"]


def _load_json(path_str: str, log):
    path = Path(path_str)
    if not path.is_file():
        log.error("未找到输入文件: %s", path)
        return None
    return json.loads(path.read_text(encoding="utf-8"))


def cmd_anchors(args):
    """锚点候选：重要度 → 主要角色 → 分布多样性 → 因果影响 → 打分排序。"""
    from src.anchors import (
        CandidatePoolConfig,
        CausalGraph,
        CausalLink,
        Character,
        TimelineEvent,
        build_candidate_pool,
    )
    from src.utils import get_logger

    log = get_logger()
    data = _load_json(args.input, log)
    if data is None:
        return
    events = [TimelineEvent.model_validate(e) for e in data.get("events") or []]
    characters = [Character.model_validate(c) for c in data.get("characters") or []]
    graph = CausalGraph.from_links(CausalLink.model_validate(l) for l in data.get("causal_links") or [])
    config = CandidatePoolConfig.from_env()
    if args.max is not None:
        config = config.model_copy(update={"max_candidates": args.max})

    candidates = build_candidate_pool(events, characters, graph, config)
    log.info("共 %s 个事件，选出 %s 个锚点候选", len(events), len(candidates))
    print(json.dumps([c.model_dump(mode="json") for c in candidates], ensure_ascii=False, indent=2))


def cmd_callbacks(args):
    """伏笔校验并输出 markdown 报告。"""
    from src.continuity import Chapter, format_callback_report, verify_callbacks
    from src.utils import get_logger

    log = get_logger()
    data = _load_json(args.input, log)
    if data is None:
        return
    chapters = [Chapter.model_validate(c) for c in data.get("chapters") or []]
    result = verify_callbacks(chapters)
    log.info("伏笔校验得分: %s", result.score)
    print(format_callback_report(result))


def cmd_continuity(args):
    """严格度判定 + 问题定级排序。"""
    from src.continuity import (
        ContinuityIssue,
        SeverityContext,
        StrictnessContext,
        determine_strictness,
        filter_by_severity,
        format_strictness,
        rank_by_severity,
    )
    from src.utils import get_logger

    log = get_logger()
    data = _load_json(args.input, log)
    if data is None:
        return
    issues = [ContinuityIssue.model_validate(i) for i in data.get("issues") or []]
    preference = args.strictness or os.getenv("CONTINUITY_STRICTNESS") or None
    if preference not in (None, *STRICTNESS_LEVELS):
        log.warning("CONTINUITY_STRICTNESS=%s 无效，按上下文判定严格度", preference)
        preference = None
    strictness = determine_strictness(
        StrictnessContext(
            story_phase=args.phase,
            chapter_count=args.chapters,
            complexity=args.complexity,
            user_preference=preference,
        )
    )
    print(format_strictness(strictness))
    print("")

    context = SeverityContext(
        chapter_count=args.chapters,
        story_phase=args.phase,
        has_user_override=bool(preference),
    )
    if args.min_severity:
        issues = filter_by_severity(issues, args.min_severity, context)
    ranked = rank_by_severity(issues, context)
    log.info("共 %s 个问题参与排序", len(ranked))
    for r in ranked:
        print(f"[{r.severity.upper()}] {r.issue.type}: {r.issue.description}")


def cmd_history(args):
    """改写会话 → 版本树，输出统计，可选保存。"""
    from src.archivist import RefinementSession, create_version_tree, get_version_stats, save_version_tree
    from src.utils import get_logger

    log = get_logger()
    data = _load_json(args.input, log)
    if data is None:
        return
    session = RefinementSession.model_validate(data)
    tree = create_version_tree(session)
    stats = get_version_stats(tree)
    log.info(
        "版本树: %s 个版本, %s 个分叉, 最大深度 %s, 已采纳 %s",
        stats.total_versions, stats.total_branches, stats.max_depth, stats.approved_versions,
    )
    if args.out:
        save_version_tree(tree, Path(args.out))
        log.info("版本树已保存至 %s", args.out)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Novel-Branch: 分支锚点、连续性校验与版本历史")
    sub = parser.add_subparsers(dest="command", required=True)

    # anchors
    p_anchors = sub.add_parser("anchors", help="从时间线事件与因果图中挑选分支锚点候选")
    p_anchors.add_argument("--input", required=True, help="JSON：events / characters / causal_links")
    p_anchors.add_argument("--max", type=int, default=None, help="最多输出 N 个候选（覆盖 ANCHOR_MAX_CANDIDATES）")
    p_anchors.set_defaults(func=cmd_anchors)

    # callbacks
    p_callbacks = sub.add_parser("callbacks", help="伏笔/回收配对校验")
    p_callbacks.add_argument("--input", required=True, help="JSON：chapters")
    p_callbacks.set_defaults(func=cmd_callbacks)

    # continuity
    p_cont = sub.add_parser("continuity", help="按叙事上下文决定严格度并对连续性问题定级排序")
    p_cont.add_argument("--input", required=True, help="JSON：issues")
    p_cont.add_argument("--chapters", type=int, default=0, help="当前章节数")
    p_cont.add_argument("--phase", default="setup", choices=["setup", "rising", "climax", "falling"])
    p_cont.add_argument("--complexity", default="moderate", choices=["simple", "moderate", "complex"])
    p_cont.add_argument(
        "--strictness", default=None, choices=STRICTNESS_LEVELS,
        help="用户指定严格度（默认读 CONTINUITY_STRICTNESS）",
    )
    p_cont.add_argument(
        "--min-severity", default=None, choices=SEVERITY_LEVELS,
        help="只输出不低于该等级的问题",
    )
    p_cont.set_defaults(func=cmd_continuity)

    # history
    p_history = sub.add_parser("history", help="把改写会话整理成分支版本树")
    p_history.add_argument("--input", required=True, help="JSON：RefinementSession")
    p_history.add_argument("--out", default="", help="将版本树写入该文件")
    p_history.set_defaults(func=cmd_history)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
