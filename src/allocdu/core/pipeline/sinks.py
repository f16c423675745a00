from __future__ import annotations

"""
Report Sinks.

Receive the entries produced by the traversal. The console sink renders and
flushes each line as soon as it is produced; the collecting sink keeps
structured records for the JSON report and for tests.
"""

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, TextIO

from allocdu.core.analysis.report_formatter import divider, format_line
from allocdu.domain.usage_models import DirectoryEntry, FileEntry

KIND_FILE = "file"
KIND_DIRECTORY = "directory"
KIND_DIVIDER = "divider"
KIND_TOTAL = "total"


class ReportSink(ABC):
    """Destination of the report, called in emission order."""

    @abstractmethod
    def on_file(self, entry: FileEntry) -> None:
        """A counted file, emitted when show-files mode is on."""

    @abstractmethod
    def on_directory(self, entry: DirectoryEntry) -> None:
        """A subdirectory, emitted after its whole subtree was processed."""

    @abstractmethod
    def on_divider(self) -> None:
        """Separator printed before a total when other lines were printed."""

    @abstractmethod
    def on_total(self, entry: DirectoryEntry) -> None:
        """Grand total of a top-level target."""


class ConsoleSink(ReportSink):
    """
    Streams formatted lines to a text stream.

    Args:
        stream: Destination, stdout when omitted.
        exact: Print raw byte counts.
        color: Colorize the size column.
    """

    def __init__(self, stream: Optional[TextIO] = None, *, exact: bool = False, color: bool = True):
        self._stream = stream
        self.exact = exact
        self.color = color

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so pytest's capsys replacement of sys.stdout is honored
        return self._stream if self._stream is not None else sys.stdout

    def on_file(self, entry: FileEntry) -> None:
        self._write(format_line(entry.size, entry.path, exact=self.exact, color=self.color))

    def on_directory(self, entry: DirectoryEntry) -> None:
        self._write(format_line(entry.total, entry.path, exact=self.exact, color=self.color))

    def on_divider(self) -> None:
        self._write(divider())

    def on_total(self, entry: DirectoryEntry) -> None:
        self._write(format_line(entry.total, entry.path, exact=self.exact, color=self.color))

    def _write(self, line: str) -> None:
        stream = self.stream
        stream.write(line + "\n")
        stream.flush()


@dataclass(frozen=True)
class ReportRecord:
    """One emitted report item."""
    kind: str
    path: str = ""
    size: int = 0


class CollectingSink(ReportSink):
    """Keeps every emitted item in memory, in order."""

    def __init__(self) -> None:
        self.records: List[ReportRecord] = []

    def on_file(self, entry: FileEntry) -> None:
        self.records.append(ReportRecord(KIND_FILE, entry.path, entry.size))

    def on_directory(self, entry: DirectoryEntry) -> None:
        self.records.append(ReportRecord(KIND_DIRECTORY, entry.path, entry.total))

    def on_divider(self) -> None:
        self.records.append(ReportRecord(KIND_DIVIDER))

    def on_total(self, entry: DirectoryEntry) -> None:
        self.records.append(ReportRecord(KIND_TOTAL, entry.path, entry.total))

    def take(self) -> List[ReportRecord]:
        """Return the records collected so far and start a new batch."""
        records, self.records = self.records, []
        return records

    def kinds(self) -> List[str]:
        return [r.kind for r in self.records]
