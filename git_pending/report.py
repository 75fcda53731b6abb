"""
Render scan results and tally the summary.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from git_pending.colors import paint
from git_pending.status import RepoStatus


@dataclass(frozen=True)
class ScanSummary:
    total: int
    with_changes: int
    clean: int
    errors: int = 0


def relative_name(path: Path, root: Path) -> str:
    return os.path.relpath(path, root)


def format_parts(status: RepoStatus, use_color: bool = False) -> List[str]:
    """Non-zero counters of a dirty repository, e.g. "+1 staged"."""
    parts: List[str] = []
    if status.staged > 0:
        parts.append(paint(f"+{status.staged} staged", "green", use_color))
    if status.modified > 0:
        parts.append(paint(f"~{status.modified} modified", "yellow", use_color))
    if status.untracked > 0:
        parts.append(paint(f"?{status.untracked} untracked", "cyan", use_color))
    if status.conflicts > 0:
        parts.append(paint(f"!{status.conflicts} conflicts", "red", use_color))
    if status.unpushed > 0:
        parts.append(paint(f"↑{status.unpushed} unpushed", "blue", use_color))
    if status.stashes > 0:
        parts.append(paint(f"⚑{status.stashes} stashed", "yellow", use_color))
    return parts


def format_status(
    status: RepoStatus,
    root: Path,
    show_all: bool = False,
    use_color: bool = False,
) -> Optional[str]:
    """
    Render one repository.

    Error records are always rendered. Clean repositories are rendered only
    when `show_all` is set; otherwise None is returned.
    """
    name = relative_name(status.path, root)
    branch = paint(f"[{status.branch}]", "bold", use_color)

    if status.error is not None:
        return f"{paint('✗', 'red', use_color)} {name}: {paint(f'Error - {status.error}', 'red', use_color)}"

    if not status.has_changes:
        if not show_all:
            return None
        return f"{paint('✓', 'green', use_color)} {name} {branch} - clean"

    parts = format_parts(status, use_color)
    header = f"{paint('●', 'red', use_color)} {name} {branch}"
    if not parts:
        # Status lines git reported that fit none of the counters.
        parts = [paint(f"{status.changes} changed", "yellow", use_color)]
    return f"{header}\n    {' | '.join(parts)}"


def format_report(
    statuses: Iterable[RepoStatus],
    root: Path,
    show_all: bool = False,
    use_color: bool = False,
) -> str:
    blocks = [format_status(status, root, show_all, use_color) for status in statuses]
    return "\n\n".join(block for block in blocks if block is not None)


def summarize(statuses: Iterable[RepoStatus]) -> ScanSummary:
    total = with_changes = errors = 0
    for status in statuses:
        total += 1
        if status.error is not None:
            errors += 1
        elif status.has_changes:
            with_changes += 1
    return ScanSummary(
        total=total,
        with_changes=with_changes,
        clean=total - with_changes - errors,
        errors=errors,
    )


def format_summary(summary: ScanSummary, use_color: bool = False) -> str:
    lines = [
        f"\n{paint('Summary:', 'bold', use_color)}",
        f"  Total repositories scanned: {summary.total}",
        f"  Repositories with changes: {paint(str(summary.with_changes), 'yellow', use_color)}",
        f"  Clean repositories: {paint(str(summary.clean), 'green', use_color)}",
    ]
    if summary.errors:
        lines.append(f"  Repositories with errors: {paint(str(summary.errors), 'red', use_color)}")
    return "\n".join(lines) + "\n"


def exit_code(summary: ScanSummary) -> int:
    """1 when any repository has pending work, else 0."""
    return 1 if summary.with_changes > 0 else 0


def report_to_json(root: Path, statuses: Iterable[RepoStatus], summary: ScanSummary) -> str:
    data = {
        "root": str(root),
        "repositories": [status.to_dict() for status in statuses],
        "summary": asdict(summary),
    }
    return json.dumps(data, indent=2)
