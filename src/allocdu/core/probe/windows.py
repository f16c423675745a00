from __future__ import annotations

"""
Windows Storage Probe.

Allocated size is read with GetCompressedFileSizeW, which reports the bytes
an NTFS-compressed or sparse file really occupies. Identity is read from a
handle opened with full sharing (read, write and delete) so that probing
never blocks other processes that are using or removing the file.
"""

import ctypes
import os
from ctypes import wintypes
from typing import Any, Optional

from allocdu.core.probe.base import StorageProbe
from allocdu.domain.usage_models import StorageIdentity

INVALID_FILE_SIZE = 0xFFFFFFFF
NO_ERROR = 0

GENERIC_READ = 0x80000000
FILE_SHARE_READ = 0x00000001
FILE_SHARE_WRITE = 0x00000002
FILE_SHARE_DELETE = 0x00000004
OPEN_EXISTING = 3
FILE_ATTRIBUTE_NORMAL = 0x00000080
FILE_FLAG_BACKUP_SEMANTICS = 0x02000000
FILE_FLAG_OPEN_REPARSE_POINT = 0x00200000
INVALID_HANDLE_VALUE = wintypes.HANDLE(-1).value


class BY_HANDLE_FILE_INFORMATION(ctypes.Structure):
    _fields_ = [
        ("dwFileAttributes", wintypes.DWORD),
        ("ftCreationTime", wintypes.FILETIME),
        ("ftLastAccessTime", wintypes.FILETIME),
        ("ftLastWriteTime", wintypes.FILETIME),
        ("dwVolumeSerialNumber", wintypes.DWORD),
        ("nFileSizeHigh", wintypes.DWORD),
        ("nFileSizeLow", wintypes.DWORD),
        ("nNumberOfLinks", wintypes.DWORD),
        ("nFileIndexHigh", wintypes.DWORD),
        ("nFileIndexLow", wintypes.DWORD),
    ]


_kernel32: Optional[Any] = None


def _load_kernel32() -> Any:
    """Bind the kernel32 entry points once, with explicit signatures."""
    global _kernel32
    if _kernel32 is not None:
        return _kernel32

    k32: Any = ctypes.WinDLL("kernel32", use_last_error=True)

    k32.GetCompressedFileSizeW.argtypes = [wintypes.LPCWSTR, ctypes.POINTER(wintypes.DWORD)]
    k32.GetCompressedFileSizeW.restype = wintypes.DWORD

    k32.CreateFileW.argtypes = [
        wintypes.LPCWSTR, wintypes.DWORD, wintypes.DWORD, wintypes.LPVOID,
        wintypes.DWORD, wintypes.DWORD, wintypes.HANDLE,
    ]
    k32.CreateFileW.restype = wintypes.HANDLE

    k32.GetFileInformationByHandle.argtypes = [
        wintypes.HANDLE, ctypes.POINTER(BY_HANDLE_FILE_INFORMATION),
    ]
    k32.GetFileInformationByHandle.restype = wintypes.BOOL

    k32.CloseHandle.argtypes = [wintypes.HANDLE]
    k32.CloseHandle.restype = wintypes.BOOL

    _kernel32 = k32
    return k32


class WindowsStorageProbe(StorageProbe):
    """Probe backed by the Win32 file APIs."""

    def allocated_size(self, path: str) -> int:
        st = self._stat(path)
        if not self.follow_symlinks and os.path.islink(path):
            # GetCompressedFileSizeW would measure the link target
            return int(st.st_size)
        k32 = _load_kernel32()
        high = wintypes.DWORD(0)
        ctypes.set_last_error(NO_ERROR)
        low = k32.GetCompressedFileSizeW(path, ctypes.byref(high))
        if low == INVALID_FILE_SIZE:
            # 0xFFFFFFFF is also a legal low word; only GetLastError tells them apart
            err = ctypes.get_last_error()
            if err != NO_ERROR:
                raise ctypes.WinError(err)
        return (high.value << 32) | low

    def identity(self, path: str) -> StorageIdentity:
        k32 = _load_kernel32()
        flags = FILE_ATTRIBUTE_NORMAL | FILE_FLAG_BACKUP_SEMANTICS
        if not self.follow_symlinks:
            flags |= FILE_FLAG_OPEN_REPARSE_POINT

        handle = k32.CreateFileW(
            path,
            GENERIC_READ,
            FILE_SHARE_READ | FILE_SHARE_WRITE | FILE_SHARE_DELETE,
            None,
            OPEN_EXISTING,
            flags,
            None,
        )
        if handle == INVALID_HANDLE_VALUE or handle is None:
            raise ctypes.WinError(ctypes.get_last_error())

        try:
            info = BY_HANDLE_FILE_INFORMATION()
            if not k32.GetFileInformationByHandle(handle, ctypes.byref(info)):
                raise ctypes.WinError(ctypes.get_last_error())
        finally:
            k32.CloseHandle(handle)

        index = (info.nFileIndexHigh << 32) | info.nFileIndexLow
        return StorageIdentity(info.dwVolumeSerialNumber, index)
