from __future__ import annotations

"""
Unit tests for the Report Sinks.
"""

import io

import pytest

from allocdu.core.pipeline.sinks import (
    KIND_DIRECTORY,
    KIND_DIVIDER,
    KIND_FILE,
    KIND_TOTAL,
    CollectingSink,
    ConsoleSink,
)
from allocdu.domain.constants import ANSI_RESET
from allocdu.domain.usage_models import DirectoryEntry, FileEntry


def test_console_sink_writes_one_line_per_event() -> None:
    """TC-01: Each callback renders exactly one newline-terminated line."""
    out = io.StringIO()
    sink = ConsoleSink(out, color=False)

    sink.on_file(FileEntry("d/f", 1024))
    sink.on_directory(DirectoryEntry("d", 2048))
    sink.on_divider()
    sink.on_total(DirectoryEntry(".", 2048))

    assert out.getvalue() == (
        "        1 KB  d/f\n"
        "        2 KB  d\n"
        "------------\n"
        "        2 KB  .\n"
    )


def test_console_sink_exact_and_color() -> None:
    """TC-02: Exact mode and color are applied per line."""
    out = io.StringIO()
    ConsoleSink(out, exact=True, color=True).on_total(DirectoryEntry("x", 10))

    line = out.getvalue()
    assert "          10" + ANSI_RESET + "  x\n" in line
    assert line.startswith("\x1b[")


def test_console_sink_defaults_to_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    """TC-03: Without an explicit stream the sink writes to sys.stdout."""
    ConsoleSink(color=False).on_divider()
    assert capsys.readouterr().out == "------------\n"


def test_collecting_sink_records_in_order() -> None:
    """TC-04: Records keep the emission order and kind."""
    sink = CollectingSink()
    sink.on_file(FileEntry("a", 1))
    sink.on_directory(DirectoryEntry("b", 2))
    sink.on_divider()
    sink.on_total(DirectoryEntry("c", 3))

    assert sink.kinds() == [KIND_FILE, KIND_DIRECTORY, KIND_DIVIDER, KIND_TOTAL]
    assert sink.records[3].size == 3


def test_collecting_sink_take_starts_new_batch() -> None:
    """TC-05: take() hands over the records and empties the sink."""
    sink = CollectingSink()
    sink.on_total(DirectoryEntry("c", 3))

    batch = sink.take()

    assert len(batch) == 1
    assert sink.records == []
