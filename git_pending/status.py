"""
Collect the pending-work status of a single repository.

Status lines follow `git status --porcelain`: the first column is the
index state and the second the worktree state, so one line can count as
both staged and modified.
"""

from __future__ import annotations

import concurrent.futures as cf
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from git_pending.git import first_success, run_git, supports_show_current

DETACHED_HEAD = "detached HEAD"

STAGED_CODES = "MADRC"
MODIFIED_CODES = "MD"
UNTRACKED_PREFIX = "??"
CONFLICT_PREFIXES = ("UU", "AA", "DD")

STATUS_QUERY = ["status", "--porcelain"]
STASH_QUERY = ["stash", "list"]
AHEAD_QUERIES = (
    ["rev-list", "--count", "@{u}..HEAD"],
    ["status", "--porcelain=v2", "--branch"],
)

_AHEAD_HEADER_RE = re.compile(r"^# branch\.ab \+(\d+) -\d+$", re.MULTILINE)


@dataclass(frozen=True)
class StatusCounts:
    staged: int = 0
    modified: int = 0
    untracked: int = 0
    conflicts: int = 0
    changes: int = 0


@dataclass(frozen=True)
class RepoStatus:
    """Pending work in one repository at scan time."""

    path: Path
    branch: str = DETACHED_HEAD
    staged: int = 0
    modified: int = 0
    untracked: int = 0
    conflicts: int = 0
    changes: int = 0
    unpushed: int = 0
    stashes: int = 0
    error: Optional[str] = None

    @property
    def has_changes(self) -> bool:
        if self.error is not None:
            return False
        return any(
            count > 0
            for count in (
                self.staged,
                self.modified,
                self.untracked,
                self.conflicts,
                self.changes,
                self.unpushed,
                self.stashes,
            )
        )

    @classmethod
    def failed(cls, path: Path, error: str) -> "RepoStatus":
        return cls(path=path, error=error)

    def to_dict(self) -> dict:
        return {
            "path": str(self.path),
            "branch": self.branch,
            "staged": self.staged,
            "modified": self.modified,
            "untracked": self.untracked,
            "conflicts": self.conflicts,
            "unpushed": self.unpushed,
            "stashes": self.stashes,
            "has_changes": self.has_changes,
            "error": self.error,
        }


def classify_status_lines(lines: Iterable[str]) -> StatusCounts:
    """Count porcelain status lines per category. Blank lines are ignored."""
    staged = modified = untracked = conflicts = changes = 0
    for line in lines:
        if not line.strip():
            continue
        changes += 1
        if line[0] in STAGED_CODES:
            staged += 1
        if len(line) > 1 and line[1] in MODIFIED_CODES:
            modified += 1
        if line.startswith(UNTRACKED_PREFIX):
            untracked += 1
        if line.startswith(CONFLICT_PREFIXES):
            conflicts += 1
    return StatusCounts(
        staged=staged,
        modified=modified,
        untracked=untracked,
        conflicts=conflicts,
        changes=changes,
    )


def get_branch(repo: Path, timeout: Optional[float] = None) -> str:
    """Current branch name, or DETACHED_HEAD when there is none or git fails."""
    if supports_show_current():
        args = ["branch", "--show-current"]
    else:
        args = ["symbolic-ref", "--short", "-q", "HEAD"]
    result = run_git(args, repo, timeout=timeout)
    if not result.ok:
        return DETACHED_HEAD
    return result.stdout.strip() or DETACHED_HEAD


def parse_ahead_count(output: str) -> int:
    """
    Read an ahead count from either `rev-list --count` output or the
    `# branch.ab +N -M` header of `status --porcelain=v2 --branch`.
    Anything else counts as 0.
    """
    text = output.strip()
    if text.isdigit():
        return int(text)
    match = _AHEAD_HEADER_RE.search(text)
    if match:
        return int(match.group(1))
    return 0


def get_unpushed_count(repo: Path, timeout: Optional[float] = None) -> int:
    """
    Commits on HEAD that the upstream does not have.

    0 when no upstream is configured, so "nothing ahead" and "no upstream"
    look the same.
    """
    result = first_success(AHEAD_QUERIES, repo, timeout=timeout)
    if result is None:
        logging.debug("No upstream ahead count for %s", repo)
        return 0
    return parse_ahead_count(result.stdout)


def get_stash_count(repo: Path, timeout: Optional[float] = None) -> int:
    result = run_git(STASH_QUERY, repo, timeout=timeout)
    if not result.ok:
        return 0
    return sum(1 for line in result.stdout.splitlines() if line.strip())


def collect_status(repo: Path, timeout: Optional[float] = None) -> RepoStatus:
    """
    Query git for the status of `repo`.

    Only a failing `git status` turns the record into an error record; the
    branch, ahead and stash lookups fall back to defaults.
    """
    result = run_git(STATUS_QUERY, repo, timeout=timeout)
    if not result.ok:
        msg = result.error_message()
        logging.warning("Error inspecting %s: %s", repo, msg)
        return RepoStatus.failed(repo, msg)

    lines: List[str] = [line for line in result.stdout.splitlines() if line.strip()]
    counts = classify_status_lines(lines)

    return RepoStatus(
        path=repo,
        branch=get_branch(repo, timeout=timeout),
        staged=counts.staged,
        modified=counts.modified,
        untracked=counts.untracked,
        conflicts=counts.conflicts,
        changes=counts.changes,
        unpushed=get_unpushed_count(repo, timeout=timeout),
        stashes=get_stash_count(repo, timeout=timeout),
    )


def collect_all(repos: List[Path], jobs: int = 1, timeout: Optional[float] = None) -> List[RepoStatus]:
    """
    Collect every repository's status, in the order given.

    With `jobs > 1` repositories are inspected on a thread pool; results
    still come back in input order.
    """
    if jobs <= 1 or len(repos) <= 1:
        return [collect_status(repo, timeout=timeout) for repo in repos]

    with cf.ThreadPoolExecutor(max_workers=jobs) as ex:
        return list(ex.map(lambda repo: collect_status(repo, timeout=timeout), repos))
