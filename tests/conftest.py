"""Shared fixtures for cargobake tests."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Callable, List

import pytest


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


@pytest.fixture
def git_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate git from the user's configuration and surrounding repos."""
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")


@pytest.fixture
def git(git_env) -> Callable[..., str]:
    """Run git in a directory and return stripped stdout."""

    def _run(cwd: Path, *args: str) -> str:
        cmd: List[str] = ["git", *args]
        res = subprocess.run(cmd, cwd=str(cwd), capture_output=True, text=True, check=True)
        return res.stdout.strip()

    return _run


@pytest.fixture
def git_repo(tmp_path: Path, git) -> Path:
    """A repository on ``master`` with one commit."""
    repo = tmp_path / "project"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/master")
    (repo / "README").write_text("hello\n", encoding="utf-8")
    git(repo, "add", "README")
    git(repo, "commit", "-q", "-m", "initial")
    return repo
