from __future__ import annotations

"""
Usage Engine.

Top-level driver of an invocation. For every target it checks that the
directory exists, opens the dedup scope, runs the walker, and closes the
target's report with the divider and the grand-total line. A missing target
is reported on the error stream and never stops the remaining ones.
"""

import logging
import os
import sys
from typing import List, Optional, TextIO

from allocdu.core.analysis.usage_walker import UsageWalker
from allocdu.core.pipeline.sinks import ReportSink
from allocdu.core.probe import StorageProbe, get_default_probe
from allocdu.core.services.identity import IdentityTracker
from allocdu.domain.constants import TARGET_ERROR_FMT
from allocdu.domain.usage_models import (
    DirectoryEntry,
    TargetReport,
    UsageOptions,
    UsageRunResult,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def run_usage(
        targets: List[str],
        options: UsageOptions,
        sink: ReportSink,
        *,
        probe: Optional[StorageProbe] = None,
        err_stream: Optional[TextIO] = None,
) -> UsageRunResult:
    """
    Compute and report the disk usage of each target, in order.

    Args:
        targets: Directories to scan. An empty list scans the current
                 working directory.
        options: Behavior switches.
        sink: Receiver of the report lines.
        probe: Size/identity provider; the platform probe when omitted.
        err_stream: Stream for target-level errors; stderr when omitted.

    Returns:
        UsageRunResult: One report per target.
    """
    if probe is None:
        probe = get_default_probe(follow_symlinks=options.follow_symlinks)
    if not targets:
        targets = [os.getcwd()]

    result = UsageRunResult()
    run_tracker = IdentityTracker()

    for target in targets:
        if not os.path.isdir(target):
            result.targets.append(_report_missing(target, err_stream))
            continue

        # 'run' scope keeps one tracker; 'target' scope starts clean per target
        tracker = run_tracker if options.identity_scope == "run" else IdentityTracker()
        result.targets.append(_process_target(target, options, sink, probe, tracker))

    return result


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _process_target(
        target: str,
        options: UsageOptions,
        sink: ReportSink,
        probe: StorageProbe,
        tracker: IdentityTracker,
) -> TargetReport:
    """Walk one existing target and emit its closing lines."""
    logger.info(f"Scanning: {target}")

    walker = UsageWalker(
        probe,
        sink,
        show_files=options.show_files,
        summary_only=options.summary_only,
        track_identity=options.track_identity,
        tracker=tracker,
    )
    total = walker.walk(target)
    printed_any = walker.emitted > 0

    if printed_any:
        sink.on_divider()
    sink.on_total(DirectoryEntry(target, total))

    stats = walker.stats
    if stats.unreadable_dirs or stats.skipped:
        logger.info(
            f"'{target}': {stats.unreadable_dirs} unreadable directories and "
            f"{stats.skipped} unreadable files were counted as zero"
        )

    return TargetReport(
        path=target,
        ok=True,
        total=total,
        printed_any=printed_any,
        stats=stats,
    )


def _report_missing(target: str, err_stream: Optional[TextIO]) -> TargetReport:
    """Write the target-level error line and return a failed report."""
    message = TARGET_ERROR_FMT.format(path=target)
    stream = err_stream if err_stream is not None else sys.stderr
    stream.write(message + "\n")
    stream.flush()
    logger.debug(f"Target skipped: {target}")
    return TargetReport(path=target, ok=False, error=message)
