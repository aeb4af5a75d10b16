"""Tests for the git diff runner helpers."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from modelfinder.file_resolver.vcs import (
    CommandResult,
    SubprocessRunner,
    format_command,
    parse_changed_files,
)


def test_parse_changed_files_strips_and_drops_blank_lines():
    stdout = "app/models/user.rb\n\n  app/models/post.rb  \n\n"
    assert parse_changed_files(stdout) == {"app/models/user.rb", "app/models/post.rb"}


def test_parse_changed_files_empty():
    assert parse_changed_files("") == set()


def test_format_command_quotes_arguments():
    assert format_command(["git", "diff", "--name-only", "main...HEAD"]) == (
        "git diff --name-only main...HEAD"
    )
    assert format_command(["git", "log", "a b"]) == "git log 'a b'"


def test_command_result_ok():
    assert CommandResult(0, "", "").ok
    assert not CommandResult(1, "", "boom").ok


def test_subprocess_runner_missing_executable(tmp_path: Path):
    result = SubprocessRunner().run(["definitely-not-a-real-command-xyz"], tmp_path)
    assert result.exit_code == 127
    assert result.stdout == ""
    assert result.stderr


def test_subprocess_runner_missing_cwd(tmp_path: Path):
    result = SubprocessRunner().run(["git", "--version"], tmp_path / "missing")
    assert not result.ok


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
def test_subprocess_runner_captures_output(tmp_path: Path):
    result = SubprocessRunner().run(["git", "--version"], tmp_path)
    assert result.ok
    assert result.stdout.startswith("git version")


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
def test_subprocess_runner_captures_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    result = SubprocessRunner().run(["git", "diff", "--name-only", "main...HEAD"], tmp_path)
    assert result.exit_code != 0
    assert "not a git repository" in result.stderr.lower()
