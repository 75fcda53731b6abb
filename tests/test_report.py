from __future__ import annotations

import json
from pathlib import Path

from git_pending.colors import COLORS, paint
from git_pending.report import (
    ScanSummary,
    exit_code,
    format_report,
    format_status,
    format_summary,
    report_to_json,
    summarize,
)
from git_pending.status import RepoStatus

ROOT = Path("/work")


def test_summary_of_fifteen_with_two_dirty() -> None:
    statuses = [RepoStatus(path=ROOT / f"clean{i}", branch="main") for i in range(13)]
    statuses += [
        RepoStatus(path=ROOT / "dirty1", untracked=2),
        RepoStatus(path=ROOT / "dirty2", stashes=1),
    ]

    summary = summarize(statuses)

    assert summary == ScanSummary(total=15, with_changes=2, clean=13, errors=0)
    assert exit_code(summary) == 1


def test_summary_of_nothing() -> None:
    summary = summarize([])

    assert summary == ScanSummary(total=0, with_changes=0, clean=0)
    assert exit_code(summary) == 0


def test_errors_are_neither_clean_nor_dirty() -> None:
    summary = summarize([RepoStatus(path=ROOT / "a"), RepoStatus.failed(ROOT / "b", "bad")])

    assert summary == ScanSummary(total=2, with_changes=0, clean=1, errors=1)
    assert exit_code(summary) == 0


def test_dirty_repository_lists_every_nonzero_counter() -> None:
    status = RepoStatus(
        path=ROOT / "projects" / "app",
        branch="main",
        staged=1,
        modified=2,
        untracked=3,
        conflicts=4,
        unpushed=5,
        stashes=6,
    )

    assert format_status(status, ROOT) == (
        "● projects/app [main]\n"
        "    +1 staged | ~2 modified | ?3 untracked | !4 conflicts | ↑5 unpushed | ⚑6 stashed"
    )


def test_zero_counters_are_omitted() -> None:
    status = RepoStatus(path=ROOT / "app", branch="dev", unpushed=2)

    assert format_status(status, ROOT) == "● app [dev]\n    ↑2 unpushed"


def test_clean_repository_hidden_unless_all() -> None:
    status = RepoStatus(path=ROOT / "app", branch="main")

    assert format_status(status, ROOT) is None
    assert format_status(status, ROOT, show_all=True) == "✓ app [main] - clean"


def test_error_always_rendered() -> None:
    status = RepoStatus.failed(ROOT / "broken", "fatal: bad object HEAD")

    expected = "✗ broken: Error - fatal: bad object HEAD"
    assert format_status(status, ROOT) == expected
    assert format_status(status, ROOT, show_all=True) == expected


def test_uncategorised_changes_still_rendered() -> None:
    status = RepoStatus(path=ROOT / "app", branch="main", changes=1)

    assert format_status(status, ROOT) == "● app [main]\n    1 changed"


def test_colored_output_wraps_markers() -> None:
    status = RepoStatus(path=ROOT / "app", branch="main", staged=1)

    text = format_status(status, ROOT, use_color=True)

    assert text is not None
    assert text.startswith(f"{COLORS['red']}●{COLORS['reset']} app ")
    assert paint("+1 staged", "green") in text


def test_report_blocks_are_separated_by_blank_lines() -> None:
    statuses = [
        RepoStatus(path=ROOT / "a", branch="main", modified=1),
        RepoStatus(path=ROOT / "b", branch="main"),
        RepoStatus.failed(ROOT / "c", "oops"),
    ]

    assert format_report(statuses, ROOT) == "● a [main]\n    ~1 modified\n\n✗ c: Error - oops"
    assert format_report(statuses, ROOT, show_all=True).count("\n\n") == 2


def test_summary_text() -> None:
    text = format_summary(ScanSummary(total=3, with_changes=1, clean=2))

    assert "Total repositories scanned: 3" in text
    assert "Repositories with changes: 1" in text
    assert "Clean repositories: 2" in text
    assert "errors" not in text

    assert "Repositories with errors: 1" in format_summary(ScanSummary(total=1, with_changes=0, clean=0, errors=1))


def test_json_report_includes_every_repository() -> None:
    statuses = [RepoStatus(path=ROOT / "a", branch="main"), RepoStatus(path=ROOT / "b", branch="x", staged=1)]
    summary = summarize(statuses)

    data = json.loads(report_to_json(ROOT, statuses, summary))

    assert data["root"] == str(ROOT)
    assert [repo["path"] for repo in data["repositories"]] == [str(ROOT / "a"), str(ROOT / "b")]
    assert data["repositories"][1]["has_changes"] is True
    assert data["summary"] == {"total": 2, "with_changes": 1, "clean": 1, "errors": 0}
