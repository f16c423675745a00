from __future__ import annotations

"""
Domain Constants.

Centralizes the report layout, the size unit ladder, the color tiers of the
size column and the configuration schema version.
"""

from typing import Final, Tuple

CURRENT_CONFIG_VERSION: Final[str] = "1.0.0"
PROG_NAME: Final[str] = "du"

# Report layout
SIZE_FIELD_WIDTH: Final[int] = 12
DIVIDER_CHAR: Final[str] = "-"
PATH_GAP: Final[str] = "  "

# Human-readable scaling (powers of 1024, capped at TB)
SIZE_UNITS: Final[Tuple[str, ...]] = ("B", "KB", "MB", "GB", "TB")
UNIT_STEP: Final[int] = 1024

# ANSI sequences for the size column, evaluated largest threshold first
ANSI_RESET: Final[str] = "\x1b[0m"
COLOR_TIERS: Final[Tuple[Tuple[int, str], ...]] = (
    (1 << 40, "\x1b[91m"),        # >= 1 TB   bright red
    (100 << 30, "\x1b[31m"),      # >= 100 GB red
    (10 << 30, "\x1b[35m"),       # >= 10 GB  magenta
    (1 << 30, "\x1b[38;5;208m"),  # >= 1 GB   orange
    (100 << 20, "\x1b[32m"),      # >= 100 MB green
    (10 << 20, "\x1b[36m"),       # >= 10 MB  cyan
    (1 << 20, "\x1b[34m"),        # >= 1 MB   blue
)
COLOR_SMALL: Final[str] = "\x1b[2m"  # < 1 MB dim

# Accepted values of the choice settings
IDENTITY_SCOPES: Final[Tuple[str, ...]] = ("target", "run")
COLOR_MODES: Final[Tuple[str, ...]] = ("always", "auto", "never")

# Fixed error line for inaccessible targets (parsed by scripts, not translated)
TARGET_ERROR_FMT: Final[str] = "du: cannot access '{path}': No such directory"
