from __future__ import annotations

"""
Unit tests for the Usage Engine.

Drives complete invocations over real temporary trees, measuring logical
sizes so expected totals are exact on any filesystem.
"""

import io
import os
from pathlib import Path

import pytest

from allocdu.core.pipeline.engine import run_usage
from allocdu.core.pipeline.sinks import (
    KIND_DIRECTORY,
    KIND_DIVIDER,
    KIND_FILE,
    KIND_TOTAL,
    CollectingSink,
    ConsoleSink,
    ReportRecord,
)
from allocdu.domain.usage_models import UsageOptions


# -----------------------------------------------------------------------------
# Reference Scenarios
# -----------------------------------------------------------------------------

def test_show_files_report(sample_tree: Path, logical_probe) -> None:
    """TC-01: Files, subdirectory, divider and total in post-order."""
    root = str(sample_tree)
    sink = CollectingSink()

    result = run_usage([root], UsageOptions(show_files=True), sink, probe=logical_probe)

    assert sink.records == [
        ReportRecord(KIND_FILE, os.path.join(root, "a.txt"), 1024),
        ReportRecord(KIND_FILE, os.path.join(root, "sub", "b.txt"), 2048),
        ReportRecord(KIND_DIRECTORY, os.path.join(root, "sub"), 2048),
        ReportRecord(KIND_DIVIDER),
        ReportRecord(KIND_TOTAL, root, 3072),
    ]
    assert result.ok
    assert result.targets[0].total == 3072
    assert result.targets[0].printed_any


def test_summary_exact_console_output(sample_tree: Path, logical_probe) -> None:
    """TC-02: Summary mode prints only the total line, without a divider."""
    root = str(sample_tree)
    out = io.StringIO()
    sink = ConsoleSink(out, exact=True, color=False)

    run_usage([root], UsageOptions(summary_only=True, exact_bytes=True), sink, probe=logical_probe)

    assert out.getvalue() == f"        3072  {root}\n"


def test_default_console_output(sample_tree: Path, logical_probe) -> None:
    """TC-03: Default mode lists subdirectories, then divider and total."""
    root = str(sample_tree)
    out = io.StringIO()

    run_usage([root], UsageOptions(), ConsoleSink(out, color=False), probe=logical_probe)

    assert out.getvalue().splitlines() == [
        f"        2 KB  {os.path.join(root, 'sub')}",
        "------------",
        f"        3 KB  {root}",
    ]


def test_empty_directory_prints_total_only(tmp_path: Path, logical_probe) -> None:
    """TC-04: Nothing printed during the walk means no divider."""
    empty = tmp_path / "empty"
    empty.mkdir()
    sink = CollectingSink()

    run_usage([str(empty)], UsageOptions(show_files=True), sink, probe=logical_probe)

    assert sink.records == [ReportRecord(KIND_TOTAL, str(empty), 0)]


# -----------------------------------------------------------------------------
# Target Handling
# -----------------------------------------------------------------------------

def test_missing_target_does_not_stop_the_run(sample_tree: Path, tmp_path: Path, logical_probe) -> None:
    """TC-05: A missing target writes one error line; later targets still run."""
    missing = str(tmp_path / "does_not_exist")
    err = io.StringIO()
    sink = CollectingSink()

    result = run_usage(
        [missing, str(sample_tree)],
        UsageOptions(summary_only=True),
        sink,
        probe=logical_probe,
        err_stream=err,
    )

    assert err.getvalue() == f"du: cannot access '{missing}': No such directory\n"
    assert sink.records == [ReportRecord(KIND_TOTAL, str(sample_tree), 3072)]
    assert not result.ok
    assert [t.ok for t in result.targets] == [False, True]
    assert result.grand_total == 3072


def test_file_target_is_rejected(sample_tree: Path, logical_probe) -> None:
    """TC-06: A regular file given as target is not a directory."""
    file_target = str(sample_tree / "a.txt")
    err = io.StringIO()

    result = run_usage([file_target], UsageOptions(), CollectingSink(), probe=logical_probe, err_stream=err)

    assert "No such directory" in err.getvalue()
    assert result.targets[0].error.startswith("du: cannot access")


def test_no_targets_means_current_directory(
        sample_tree: Path, logical_probe, monkeypatch: pytest.MonkeyPatch
) -> None:
    """TC-07: An empty target list scans the working directory."""
    monkeypatch.chdir(sample_tree)
    sink = CollectingSink()

    result = run_usage([], UsageOptions(summary_only=True), sink, probe=logical_probe)

    assert result.targets[0].total == 3072
    assert sink.records[-1].kind == KIND_TOTAL


def test_targets_are_processed_in_order(sample_tree: Path, logical_probe) -> None:
    """TC-08: Totals appear in argument order, each closing its target."""
    sub = str(sample_tree / "sub")
    sink = CollectingSink()

    run_usage([sub, str(sample_tree)], UsageOptions(summary_only=True), sink, probe=logical_probe)

    assert [(r.path, r.size) for r in sink.records] == [(sub, 2048), (str(sample_tree), 3072)]


def test_repeated_runs_are_identical(sample_tree: Path, logical_probe) -> None:
    """TC-09: Two invocations over an unchanged tree give the same report."""
    first, second = CollectingSink(), CollectingSink()
    opts = UsageOptions(show_files=True)

    run_usage([str(sample_tree)], opts, first, probe=logical_probe)
    run_usage([str(sample_tree)], opts, second, probe=logical_probe)

    assert first.records == second.records


# -----------------------------------------------------------------------------
# Deduplication Scope
# -----------------------------------------------------------------------------

@pytest.fixture
def linked_targets(tmp_path: Path) -> tuple:
    """Two sibling targets holding hard links to the same 4 KB file."""
    if not hasattr(os, "link"):
        pytest.skip("Hard links not supported on this platform")
    left = tmp_path / "left"
    right = tmp_path / "right"
    left.mkdir()
    right.mkdir()
    (left / "data.bin").write_bytes(b"x" * 4096)
    try:
        os.link(left / "data.bin", right / "data.bin")
        os.link(left / "data.bin", left / "alias.bin")
    except OSError:
        pytest.skip("Filesystem refuses hard links")
    return str(left), str(right)


def test_track_counts_links_once_within_target(linked_targets, logical_probe) -> None:
    """TC-10: Two links inside one target count a single time."""
    left, _ = linked_targets
    result = run_usage([left], UsageOptions(track_identity=True), CollectingSink(), probe=logical_probe)

    assert result.targets[0].total == 4096
    assert result.targets[0].stats.duplicates == 1


def test_without_track_links_count_per_path(linked_targets, logical_probe) -> None:
    """TC-11: Without tracking every path contributes its size."""
    left, _ = linked_targets
    result = run_usage([left], UsageOptions(), CollectingSink(), probe=logical_probe)

    assert result.targets[0].total == 8192


def test_target_scope_resets_between_targets(linked_targets, logical_probe) -> None:
    """TC-12: Each target is deduplicated on its own by default."""
    left, right = linked_targets
    result = run_usage(
        [left, right],
        UsageOptions(track_identity=True, identity_scope="target"),
        CollectingSink(),
        probe=logical_probe,
    )

    assert [t.total for t in result.targets] == [4096, 4096]


def test_run_scope_shares_identities_across_targets(linked_targets, logical_probe) -> None:
    """TC-13: In 'run' scope a file already counted under a previous target is skipped."""
    left, right = linked_targets
    result = run_usage(
        [left, right],
        UsageOptions(track_identity=True, identity_scope="run"),
        CollectingSink(),
        probe=logical_probe,
    )

    assert [t.total for t in result.targets] == [4096, 0]
