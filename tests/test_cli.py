"""Command-line interface tests."""

from pathlib import Path

import pytest

from skillforge.cli import build_parser, main

DEPLOY_SKILL = """---
name: deployer
description: Deploy the application to staging or production
metadata:
  skillforge:
    tags: [ops]
    keywords: [deploy, release]
---
Run the deployment checklist before shipping.
"""


@pytest.fixture
def skills_dir(tmp_path: Path) -> Path:
    skill_dir = tmp_path / "deployer"
    skill_dir.mkdir()
    (skill_dir / "SKILL.md").write_text(DEPLOY_SKILL, encoding="utf-8")
    return tmp_path


def test_run_executes_directory_skill(skills_dir: Path, capsys) -> None:
    exit_code = main(["run", "--no-builtins", "--dir", str(skills_dir), "deploy", "the", "app"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "[1 skills loaded | engine: direct (returns instructions)]" in output
    assert "Skill: deployer" in output
    assert "Run the deployment checklist" in output


def test_run_without_match_lists_skills(skills_dir: Path, capsys) -> None:
    exit_code = main(["run", "--no-builtins", "--dir", str(skills_dir), "zzz qqq"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "No matching skill found for this input." in output
    assert "  - deployer:" in output


def test_list_shows_tags(skills_dir: Path, capsys) -> None:
    exit_code = main(["list", "--dir", str(skills_dir)])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "deployer" in output
    assert "[ops]" in output
    assert "timestamp" in output


def test_info_shows_skill_details(skills_dir: Path, capsys) -> None:
    exit_code = main(["info", "--dir", str(skills_dir), "--engine", "codex", "deployer"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "Engine:      codex" in output
    assert "Keywords:    deploy, release" in output


def test_info_unknown_skill_fails(capsys) -> None:
    exit_code = main(["info", "--no-builtins", "ghost"])

    assert exit_code == 1
    assert 'Skill "ghost" not found.' in capsys.readouterr().out


def test_missing_directory_fails(tmp_path: Path, capsys) -> None:
    exit_code = main(["list", "--dir", str(tmp_path / "missing")])

    assert exit_code == 1
    assert "Failed to load skills from" in capsys.readouterr().out


def test_serve_with_missing_directory_fails(tmp_path: Path, capsys) -> None:
    exit_code = main(["serve", "--dir", str(tmp_path / "missing")])

    assert exit_code == 1
    assert "Failed to load skills from" in capsys.readouterr().out


def test_parser_rejects_unknown_engine_and_bad_port() -> None:
    parser = build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["run", "--engine", "gpt", "hello"])
    with pytest.raises(SystemExit):
        parser.parse_args(["serve", "--port", "70000"])
