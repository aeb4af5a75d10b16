"""
Integration tests for `skip_unchanged_files` against a real git repository.

Layout built for each test:
  main:            app/models/user.rb, app/models/post.rb
  feature-branch:  user.rb modified, comment.rb and product.rb added
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from modelfinder.file_resolver import FileResolver, FileResolverConfig, ListDiagnostics, ModelFile

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _git(repo: Path, *args: str) -> str:
    proc = subprocess.run(
        [
            "git",
            "-c",
            "user.email=test@example.com",
            "-c",
            "user.name=Test User",
            "-c",
            "commit.gpgsign=false",
            *args,
        ],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return proc.stdout.strip()


def _write_model(models: Path, name: str, content: str | None = None) -> None:
    class_name = name.split(".")[0].capitalize()
    (models / name).write_text(content or f"# Dummy model: {name}\nclass {class_name}; end\n")


@pytest.fixture
def repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    repo = tmp_path / "project"
    models = repo / "app" / "models"
    models.mkdir(parents=True)

    _git(repo, "init", "-q")
    _git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(repo, "commit", "-q", "--allow-empty", "-m", "Initial commit")

    _write_model(models, "user.rb")
    _write_model(models, "post.rb")
    _git(repo, "add", "app/models/user.rb", "app/models/post.rb")
    _git(repo, "commit", "-q", "-m", "Add user.rb and post.rb")

    _git(repo, "checkout", "-q", "-b", "feature-branch")
    _write_model(models, "user.rb", "# Modified User model\nclass User; end\n")
    _git(repo, "add", "app/models/user.rb")
    _write_model(models, "comment.rb")
    _git(repo, "add", "app/models/comment.rb")
    _git(repo, "commit", "-q", "-m", "Add comment.rb")
    _write_model(models, "product.rb")
    _git(repo, "add", "app/models/product.rb")
    _git(repo, "commit", "-q", "-m", "Add product.rb")
    return repo


def _normalize(repo: Path, model_files: list[ModelFile]) -> list[str]:
    base = repo.resolve()
    return sorted(mf.full_path.relative_to(base).as_posix() for mf in model_files)


def test_only_modified_and_new_files(repo: Path):
    diagnostics = ListDiagnostics()
    config = FileResolverConfig(
        model_dir=["app/models"], root_dir=str(repo), skip_unchanged_files=True
    )

    result = FileResolver(config, diagnostics=diagnostics).resolve()
    assert _normalize(repo, result) == [
        "app/models/comment.rb",
        "app/models/product.rb",
        "app/models/user.rb",
    ]
    assert diagnostics.messages == []


def test_all_files_when_not_skipping(repo: Path):
    config = FileResolverConfig(model_dir=["app/models"], root_dir=str(repo))

    result = FileResolver(config, diagnostics=ListDiagnostics()).resolve()
    assert _normalize(repo, result) == [
        "app/models/comment.rb",
        "app/models/post.rb",
        "app/models/product.rb",
        "app/models/user.rb",
    ]


def test_root_defaults_to_cwd(repo: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(repo)
    config = FileResolverConfig(skip_unchanged_files=True)

    result = FileResolver(config, diagnostics=ListDiagnostics()).resolve()
    assert "app/models/post.rb" not in _normalize(repo, result)
    assert len(result) == 3


def test_explicit_unchanged_file_is_filtered(repo: Path):
    diagnostics = ListDiagnostics()
    config = FileResolverConfig(root_dir=str(repo), skip_unchanged_files=True)

    result = FileResolver(config, diagnostics=diagnostics).resolve(["app/models/post.rb"])
    assert result == []
    assert diagnostics.messages == [
        "INFO: No model files found that changed based on 'git diff main...HEAD'."
    ]


def test_missing_base_ref_falls_back(repo: Path):
    diagnostics = ListDiagnostics()
    config = FileResolverConfig(
        root_dir=str(repo), skip_unchanged_files=True, base_ref="no-such-branch"
    )

    result = FileResolver(config, diagnostics=diagnostics).resolve()
    assert len(result) == 4
    assert len(diagnostics.messages) == 1
    assert "git diff --name-only no-such-branch...HEAD" in diagnostics.messages[0]
    assert "\n" not in diagnostics.messages[0]


def test_not_a_repository_falls_back(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    models = tmp_path / "app" / "models"
    models.mkdir(parents=True)
    _write_model(models, "user.rb")
    diagnostics = ListDiagnostics()
    config = FileResolverConfig(root_dir=str(tmp_path), skip_unchanged_files=True)

    result = FileResolver(config, diagnostics=diagnostics).resolve()
    assert result == [ModelFile(str(models.resolve()), "user.rb")]
    assert diagnostics.messages[0].startswith("WARNING: Failed to get git diff.")
