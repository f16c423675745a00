from __future__ import annotations

"""
Usage Walker.

Recursive traversal engine. Visits a directory depth-first, sums the
allocated size of its files and subtrees, and hands each report line to the
sink as soon as it is known, so output is streamed in post-order: a
directory is reported only after everything below it.

Failures are contained per entry: an unreadable file or directory adds zero
and the walk carries on with its siblings.
"""

import logging
from typing import Optional

from allocdu.core.probe import StorageProbe
from allocdu.core.pipeline.sinks import ReportSink
from allocdu.core.services.identity import IdentityTracker
from allocdu.domain.usage_models import DirectoryEntry, FileEntry, WalkStats

logger = logging.getLogger(__name__)


class UsageWalker:
    """
    Depth-first, post-order disk usage accumulator.

    Args:
        probe: Size/identity/enumeration provider.
        sink: Receiver of the emitted lines.
        show_files: Emit a line per counted file.
        summary_only: Emit nothing; only the total is returned.
        track_identity: Count each storage identity once.
        tracker: Dedup scope; a private one is created when omitted.
    """

    def __init__(
            self,
            probe: StorageProbe,
            sink: ReportSink,
            *,
            show_files: bool = False,
            summary_only: bool = False,
            track_identity: bool = False,
            tracker: Optional[IdentityTracker] = None,
    ):
        self.probe = probe
        self.sink = sink
        self.show_files = show_files
        self.summary_only = summary_only
        self.track_identity = track_identity
        self.tracker = tracker if tracker is not None else IdentityTracker()
        self.emitted = 0
        self.stats = WalkStats()

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def walk(self, path: str) -> int:
        """
        Compute the allocated total of a directory tree.

        Resets the emitted-line counter and the statistics; the identity
        tracker is left alone so the caller controls the dedup scope.

        Args:
            path: Root directory of the walk.

        Returns:
            int: Allocated bytes of every counted file below path.
        """
        self.emitted = 0
        self.stats = WalkStats()
        total = self._visit(path)
        logger.debug(
            f"Walk of '{path}' finished: {total} bytes, {self.stats.files} files, "
            f"{self.stats.skipped} skipped, {self.stats.duplicates} duplicates, "
            f"{self.stats.unreadable_dirs} unreadable directories"
        )
        return total

    # -------------------------------------------------------------------------
    # RECURSION
    # -------------------------------------------------------------------------

    def _visit(self, directory: str) -> int:
        self.stats.directories += 1
        try:
            files, subdirs = self.probe.list_directory(directory)
        except OSError as e:
            self.stats.unreadable_dirs += 1
            logger.debug(f"Cannot enumerate '{directory}': {e}")
            return 0

        total = 0

        # 1. Direct files
        for file_path in files:
            total += self._count_file(file_path)

        # 2. Subtrees, reported after their own content (post-order)
        for sub in subdirs:
            sub_total = self._visit(sub)
            total += sub_total
            if not self.summary_only:
                self._emit_directory(DirectoryEntry(sub, sub_total))

        return total

    def _count_file(self, path: str) -> int:
        try:
            size = self.probe.allocated_size(path)
        except OSError as e:
            self.stats.skipped += 1
            logger.debug(f"Skipping '{path}': {e}")
            return 0

        if self.track_identity and not self._is_first_sighting(path):
            self.stats.duplicates += 1
            return 0

        self.stats.files += 1
        if self.show_files and not self.summary_only:
            self.sink.on_file(FileEntry(path, size))
            self.emitted += 1
        return size

    def _is_first_sighting(self, path: str) -> bool:
        try:
            key = self.probe.identity(path)
        except OSError as e:
            # Unknown identity: over-count rather than drop the file
            self.stats.identity_failures += 1
            logger.debug(f"Identity unavailable for '{path}', counting it: {e}")
            return True
        return self.tracker.observe(key)

    def _emit_directory(self, entry: DirectoryEntry) -> None:
        self.sink.on_directory(entry)
        self.emitted += 1
