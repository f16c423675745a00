from __future__ import annotations

"""
Console Preparation.

Makes the standard streams able to carry the report: UTF-8 encoding for
non-ASCII paths and, on Windows, virtual terminal processing so that the
ANSI color sequences of the size column are rendered instead of printed.
"""

import logging
import sys
from typing import Any

logger = logging.getLogger(__name__)

STD_OUTPUT_HANDLE = -11
ENABLE_VIRTUAL_TERMINAL_PROCESSING = 0x0004


def reconfigure_utf8_streams() -> None:
    """Switch stdout/stderr to UTF-8 on Windows consoles."""
    if sys.platform != "win32":
        return
    for stream in (sys.stdout, sys.stderr):
        if hasattr(stream, "reconfigure"):
            stream.reconfigure(encoding="utf-8")


def enable_virtual_terminal() -> bool:
    """
    Enable ANSI escape processing on the Windows console attached to stdout.

    Returns:
        bool: True if the console accepts ANSI sequences (always True on
              non-Windows platforms).
    """
    if sys.platform != "win32":
        return True

    import ctypes
    from ctypes import wintypes

    kernel32: Any = ctypes.windll.kernel32
    handle = kernel32.GetStdHandle(STD_OUTPUT_HANDLE)
    mode = wintypes.DWORD()
    if not kernel32.GetConsoleMode(handle, ctypes.byref(mode)):
        # Redirected output: no console to configure
        logger.debug("stdout is not a console; virtual terminal mode unchanged")
        return False

    ok = bool(kernel32.SetConsoleMode(handle, mode.value | ENABLE_VIRTUAL_TERMINAL_PROCESSING))
    if not ok:
        logger.debug("SetConsoleMode refused virtual terminal processing")
    return ok


def prepare_console() -> bool:
    """Apply every console adjustment needed before the report starts."""
    reconfigure_utf8_streams()
    return enable_virtual_terminal()
