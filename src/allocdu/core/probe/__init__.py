from __future__ import annotations

import sys

from .base import ProbeError, StorageProbe
from .posix import PosixStorageProbe


def get_default_probe(follow_symlinks: bool = False) -> StorageProbe:
    """Return the probe implementation for the running platform."""
    if sys.platform == "win32":
        from .windows import WindowsStorageProbe
        return WindowsStorageProbe(follow_symlinks=follow_symlinks)
    return PosixStorageProbe(follow_symlinks=follow_symlinks)


__all__ = [
    "ProbeError",
    "StorageProbe",
    "PosixStorageProbe",
    "get_default_probe",
]
