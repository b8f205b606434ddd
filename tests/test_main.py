# -*- coding: utf-8 -*-
"""命令行：参数取值校验与 continuity 子命令。"""
import json

import pytest

from main import build_parser, main


@pytest.mark.parametrize(
    "argv",
    [
        ["continuity", "--input", "x.json", "--min-severity", "bogus"],
        ["continuity", "--input", "x.json", "--strictness", "extreme"],
        ["continuity", "--input", "x.json", "--phase", "epilogue"],
    ],
)
def test_invalid_choices_are_rejected(argv):
    with pytest.raises(SystemExit):
        build_parser().parse_args(argv)


def test_valid_choices_parse():
    args = build_parser().parse_args(
        ["continuity", "--input", "x.json", "--min-severity", "medium", "--strictness", "lenient"]
    )
    assert args.min_severity == "medium"
    assert args.strictness == "lenient"


def test_continuity_ignores_invalid_env_strictness(tmp_path, monkeypatch, capsys):
    path = tmp_path / "issues.json"
    path.write_text(
        json.dumps({"issues": [
            {"id": "t1", "type": "timeline", "severity": "warning", "description": "out of order"},
            {"id": "c1", "type": "character", "severity": "info", "description": "minor slip"},
        ]}),
        encoding="utf-8",
    )
    monkeypatch.setenv("CONTINUITY_STRICTNESS", "extreme")

    main(["continuity", "--input", str(path), "--chapters", "8", "--phase", "rising", "--min-severity", "medium"])

    out = capsys.readouterr().out
    assert "Level: MODERATE" in out
    assert "[HIGH] timeline: out of order" in out
    assert "minor slip" not in out
