"""
Thin wrapper around the `git` command line.

Every query runs with the repository as its working directory and never
raises: launch failures and timeouts come back as a failed `GitResult`.
"""

from __future__ import annotations

import functools
import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from packaging.version import InvalidVersion, Version

# `git branch --show-current` first shipped in this release.
SHOW_CURRENT_MIN_VERSION = Version("2.22")

# Return codes used for failures that never reached git itself.
EXIT_NOT_FOUND = 127
EXIT_TIMEOUT = 124


@dataclass(frozen=True)
class GitResult:
    args: List[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def error_message(self) -> str:
        """Best human-readable reason for a failed command."""
        return self.stderr.strip() or self.stdout.strip() or f"git exited with status {self.returncode}"


def run_git(args: Sequence[str], cwd: Optional[Path] = None, timeout: Optional[float] = None) -> GitResult:
    """
    Run `git <args>` in `cwd` and return its result.

    Output is decoded as UTF-8 with undecodable bytes replaced, since
    file names, branch names and stash messages may use any encoding.

    Always catches OSError (git not installed, cwd vanished) and
    TimeoutExpired and reports them as a failed result.
    """
    cmd = ["git", *args]
    logging.debug("Running command: %s (cwd=%s)", " ".join(cmd), cwd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd is not None else None,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logging.debug("Command timed out after %ss: %s", timeout, " ".join(cmd))
        return GitResult(cmd, EXIT_TIMEOUT, "", f"timed out after {timeout}s: {' '.join(cmd)}")
    except OSError as exc:
        logging.debug("Command could not be started: %s (%s)", " ".join(cmd), exc)
        return GitResult(cmd, EXIT_NOT_FOUND, "", f"could not run git: {exc}")

    if proc.returncode != 0:
        logging.debug("Command failed (%s): %s", proc.returncode, " ".join(cmd))
        logging.debug("Failed stderr: %s", proc.stderr.strip())
    return GitResult(cmd, proc.returncode, proc.stdout, proc.stderr)


def first_success(
    queries: Iterable[Sequence[str]],
    cwd: Path,
    timeout: Optional[float] = None,
) -> Optional[GitResult]:
    """Run each query in order and return the first one that succeeds, or None."""
    for args in queries:
        result = run_git(args, cwd, timeout=timeout)
        if result.ok:
            return result
    return None


def parse_git_version(text: str) -> Optional[Version]:
    """
    Parse `git --version` output such as
    "git version 2.39.2" or "git version 2.41.0.windows.1".
    """
    match = re.search(r"(\d+(?:\.\d+){0,2})", text)
    if match is None:
        return None
    try:
        return Version(match.group(1))
    except InvalidVersion:
        return None


@functools.lru_cache(maxsize=None)
def git_version() -> Optional[Version]:
    """Version of the git on PATH, looked up once per process."""
    result = run_git(["--version"])
    if not result.ok:
        return None
    version = parse_git_version(result.stdout)
    logging.debug("Detected git version: %s", version)
    return version


def supports_show_current() -> bool:
    """True unless git is known to predate `git branch --show-current`."""
    version = git_version()
    if version is None:
        # Unknown version: assume a current git.
        return True
    return version >= SHOW_CURRENT_MIN_VERSION
