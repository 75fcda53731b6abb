"""
Find git repositories below a directory.

The walk is depth-first and visits the entries of each directory in name
order. A directory that turns out to be a repository is reported and not
descended into, so submodules and other nested repositories never show up
on their own.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

GIT_DIR = ".git"
DEFAULT_DEPTH = 3

# Never reported and never descended into. Dot-directories are skipped too.
SKIP_DIRS = frozenset({"node_modules", "vendor", "__pycache__"})


@dataclass
class DirListing:
    """Subdirectories of one directory, or the error that prevented listing it."""

    path: Path
    entries: List[Path] = field(default_factory=list)
    error: Optional[OSError] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def is_git_repo(path: Path) -> bool:
    """
    Detect if a directory is a git repository by checking for a .git entry.

    A `.git` file (worktrees, submodules) counts as well as a directory.
    """
    return (path / GIT_DIR).exists()


def is_skipped(name: str) -> bool:
    return name.startswith(".") or name in SKIP_DIRS


def list_subdirectories(path: Path) -> DirListing:
    """
    Return the real subdirectories of `path`, sorted by name.

    Symlinks are not followed. A directory that cannot be read yields a
    listing with `error` set rather than raising.
    """
    try:
        with os.scandir(path) as it:
            names = sorted(entry.name for entry in it if entry.is_dir(follow_symlinks=False))
    except OSError as exc:
        return DirListing(path=path, error=exc)
    return DirListing(path=path, entries=[path / name for name in names])


def find_git_repos(root: Path, max_depth: int = DEFAULT_DEPTH, current_depth: int = 0) -> List[Path]:
    """
    Collect repository roots under `root`.

    `root` is depth 0. Its children are examined; a child that is not a
    repository is searched at `current_depth + 1`, and the search stops
    once the depth exceeds `max_depth`. Unreadable directories count as
    empty.
    """
    repos: List[Path] = []
    if current_depth > max_depth:
        return repos

    listing = list_subdirectories(root)
    if listing.failed:
        logging.debug("Skipping unreadable directory %s: %s", listing.path, listing.error)
        return repos

    for entry in listing.entries:
        if is_skipped(entry.name):
            continue
        if is_git_repo(entry):
            logging.debug("Found git repo: %s", entry)
            repos.append(entry)
        else:
            repos.extend(find_git_repos(entry, max_depth, current_depth + 1))

    return repos
