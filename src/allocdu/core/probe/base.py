from __future__ import annotations

"""
Storage Probe Interface.

Abstracts the two questions the traversal asks the operating system about a
file: how many bytes does the filesystem really allocate for it, and which
storage object backs it. Also owns directory enumeration so the traversal
can run against an in-memory double.
"""

import errno
import os
import stat
from abc import ABC, abstractmethod
from typing import List, Tuple

from allocdu.domain.usage_models import StorageIdentity

# st_blocks is always expressed in 512-byte units, whatever the fs block size
POSIX_BLOCK_UNIT: int = 512


class ProbeError(OSError):
    """Raised when a path cannot be measured (special file, vanished, denied)."""


class StorageProbe(ABC):
    """
    Abstract base class for platform-specific size and identity queries.

    Attributes:
        follow_symlinks: Resolve symbolic links instead of measuring the
                         link itself.
    """

    def __init__(self, follow_symlinks: bool = False):
        self.follow_symlinks = follow_symlinks

    @abstractmethod
    def allocated_size(self, path: str) -> int:
        """
        Return the bytes allocated on disk for the file content.

        Args:
            path: File to measure.

        Returns:
            int: Allocated bytes (may be below the logical length).

        Raises:
            OSError: The file is inaccessible, vanished or not a regular file.
        """

    def identity(self, path: str) -> StorageIdentity:
        """
        Return the storage identity of a file.

        The file is opened for reading only for the duration of the query.

        Raises:
            OSError: The file could not be opened or queried.
        """
        if not self.follow_symlinks and os.path.islink(path):
            st = os.lstat(path)
            return StorageIdentity(st.st_dev, st.st_ino)

        with open(path, "rb", buffering=0) as fh:
            st = os.fstat(fh.fileno())
        return StorageIdentity(st.st_dev, st.st_ino)

    def list_directory(self, path: str) -> Tuple[List[str], List[str]]:
        """
        Enumerate the direct children of a directory.

        Symlinked directories are listed as files unless symlinks are
        followed.

        Returns:
            Tuple[List[str], List[str]]: (file paths, subdirectory paths),
                                         each sorted by name.

        Raises:
            OSError: The directory cannot be enumerated.
        """
        files: List[Tuple[str, str]] = []
        dirs: List[Tuple[str, str]] = []
        with os.scandir(path) as it:
            for entry in it:
                try:
                    is_dir = entry.is_dir(follow_symlinks=self.follow_symlinks)
                except OSError:
                    is_dir = False
                (dirs if is_dir else files).append((entry.name, entry.path))
        files.sort()
        dirs.sort()
        return [p for _, p in files], [p for _, p in dirs]

    def _stat(self, path: str) -> os.stat_result:
        """Stat a path and reject anything that has no file content."""
        st = os.stat(path, follow_symlinks=self.follow_symlinks)
        if not (stat.S_ISREG(st.st_mode) or stat.S_ISLNK(st.st_mode)):
            raise ProbeError(errno.EINVAL, "Not a regular file", path)
        return st
