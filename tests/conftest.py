"""Shared fixtures: throwaway git repositories in pytest's tmp_path."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Callable

import pytest


def git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout


@pytest.fixture
def make_repo() -> Callable[[Path], Path]:
    """Create a git repository with one commit on branch `main`."""
    if shutil.which("git") is None:
        pytest.skip("git is required for repository tests")

    def _make(path: Path) -> Path:
        path.mkdir(parents=True, exist_ok=True)
        git(path, "init", "-q")
        git(path, "symbolic-ref", "HEAD", "refs/heads/main")
        git(path, "config", "user.email", "tests@example.com")
        git(path, "config", "user.name", "Tests")
        git(path, "config", "commit.gpgsign", "false")
        (path / "README.md").write_text("hello\n", encoding="utf-8")
        git(path, "add", "-A")
        git(path, "commit", "-q", "-m", "initial")
        return path

    return _make


@pytest.fixture
def fake_repo() -> Callable[[Path], Path]:
    """Create a directory that merely looks like a repository (has a .git dir)."""

    def _make(path: Path) -> Path:
        (path / ".git").mkdir(parents=True)
        return path

    return _make
