from __future__ import annotations

"""
Report Formatter.

Turns (size, path) pairs into the fixed-width lines of the usage report:
size scaling through binary units, per-line color tiers for the size column,
and the divider printed before a target's total.
"""

import os
from typing import Mapping, Optional, TextIO

from allocdu.domain.constants import (
    ANSI_RESET,
    COLOR_SMALL,
    COLOR_TIERS,
    DIVIDER_CHAR,
    PATH_GAP,
    SIZE_FIELD_WIDTH,
    SIZE_UNITS,
    UNIT_STEP,
)

# -----------------------------------------------------------------------------
# SIZE RENDERING
# -----------------------------------------------------------------------------

def unit_tier(num_bytes: int) -> int:
    """
    Index in SIZE_UNITS of the unit used to display a byte count.

    Scaling stops at the last unit (TB) however large the value is.
    """
    tier = 0
    last = len(SIZE_UNITS) - 1
    while tier < last and num_bytes >= UNIT_STEP ** (tier + 1):
        tier += 1
    return tier


def format_size(num_bytes: int, exact: bool = False) -> str:
    """
    Render a byte count as a right-justified, fixed-width field.

    Args:
        num_bytes: Allocated bytes.
        exact: Print the raw integer instead of a scaled value.

    Returns:
        str: e.g. '        3072' (exact) or '        3 KB', '   1,023 B',
             '     1.18 MB'.
    """
    if exact:
        return str(num_bytes).rjust(SIZE_FIELD_WIDTH)

    tier = unit_tier(num_bytes)
    value = num_bytes / (UNIT_STEP ** tier)
    return f"{_compact_number(value)} {SIZE_UNITS[tier]}".rjust(SIZE_FIELD_WIDTH)


def _compact_number(value: float) -> str:
    """Thousands separators, at most two decimals, no trailing zeros."""
    text = f"{value:,.2f}"
    return text.rstrip("0").rstrip(".")

# -----------------------------------------------------------------------------
# COLOR TIERS
# -----------------------------------------------------------------------------

def color_for(num_bytes: int) -> str:
    """Return the ANSI sequence of the first tier whose threshold is reached."""
    for threshold, code in COLOR_TIERS:
        if num_bytes >= threshold:
            return code
    return COLOR_SMALL


def should_use_color(
        mode: str,
        stream: Optional[TextIO] = None,
        environ: Optional[Mapping[str, str]] = None,
) -> bool:
    """
    Decide whether the report is colorized.

    Args:
        mode: 'always', 'never' or 'auto'.
        stream: Output stream inspected in 'auto' mode.
        environ: Environment inspected for NO_COLOR in 'auto' mode.
    """
    if mode == "always":
        return True
    if mode == "never":
        return False

    env = os.environ if environ is None else environ
    if env.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())

# -----------------------------------------------------------------------------
# LINE RENDERING
# -----------------------------------------------------------------------------

def format_line(num_bytes: int, path: str, *, exact: bool = False, color: bool = True) -> str:
    """
    Build one report line: '<color><size><reset>  <path>'.

    The color is chosen from this line's own size and the reset always
    follows the size field, so the path is never colorized.
    """
    field = format_size(num_bytes, exact=exact)
    if color:
        field = f"{color_for(num_bytes)}{field}{ANSI_RESET}"
    return f"{field}{PATH_GAP}{path}"


def divider() -> str:
    """Row of dashes as wide as the size column."""
    return DIVIDER_CHAR * SIZE_FIELD_WIDTH
