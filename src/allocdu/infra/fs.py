from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform path resolution for persistent application data and
normalization of user-supplied target paths. Acts as an abstraction over the
'os' module so that Windows and Unix-like systems behave uniformly.
"""

import os
from typing import List, Optional

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "allocdu"
UNIX_APP_DIR_NAME = ".allocdu"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir(create: bool = True) -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Standards:
    - Windows: %LOCALAPPDATA%/allocdu
    - Linux/Mac: ~/.allocdu

    Args:
        create: Create the directory hierarchy if it does not exist.

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    # Posix fallback (Linux/Mac)
    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    if create:
        try:
            os.makedirs(path, exist_ok=True)
        except OSError:
            pass

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string, expanding '~' and environment variables.

    The result keeps the caller's relative/absolute form so that report lines
    show paths the way the user typed them. Reverts to fallback if the input
    is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized path.
    """
    p = (path or "").strip()
    if not p:
        return fallback
    return os.path.expandvars(os.path.expanduser(p))


def resolve_targets(raw_targets: Optional[List[str]]) -> List[str]:
    """
    Turn the positional arguments into the list of directories to scan.

    An empty list means the current working directory.
    """
    cwd = os.getcwd()
    targets = [normalize_path(t, cwd) for t in (raw_targets or []) if t is not None]
    return targets or [cwd]
