from __future__ import annotations

"""
POSIX Storage Probe.

Allocated size comes from st_blocks, which already reflects sparse regions
and transparent compression on filesystems that support them.
"""

from allocdu.core.probe.base import POSIX_BLOCK_UNIT, StorageProbe


class PosixStorageProbe(StorageProbe):
    """Probe backed by stat(2)."""

    def allocated_size(self, path: str) -> int:
        st = self._stat(path)
        blocks = getattr(st, "st_blocks", None)
        if blocks is None:
            # Platforms without st_blocks: logical size is the best estimate
            return int(st.st_size)
        return int(blocks) * POSIX_BLOCK_UNIT
