from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Isolation of the persisted preferences file and the logging subsystem.
3. Storage probe doubles: one measuring logical sizes of real files, one
   serving a fully in-memory directory tree.
"""

import logging
import os
import sys
import zlib
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from allocdu.core.probe import StorageProbe  # noqa: E402
from allocdu.domain.usage_models import StorageIdentity  # noqa: E402
from allocdu.infra.logging import shutdown_logging  # noqa: E402


# -----------------------------------------------------------------------------
# Probe Doubles
# -----------------------------------------------------------------------------
class LogicalSizeProbe(StorageProbe):
    """
    Real filesystem probe that reports logical file length as allocated size.

    Makes byte-exact assertions possible regardless of the filesystem block
    size of the machine running the tests.
    """

    def allocated_size(self, path: str) -> int:
        return int(self._stat(path).st_size)


class MemoryProbe(StorageProbe):
    """
    In-memory directory tree served through the StorageProbe interface.

    The tree is a nested dict: a value is either a dict (directory) or an int
    (file size). Paths are joined with '/'.
    """

    def __init__(
            self,
            tree: Dict[str, Any],
            identities: Optional[Dict[str, StorageIdentity]] = None,
            unreadable_files: Iterable[str] = (),
            locked_files: Iterable[str] = (),
            denied_dirs: Iterable[str] = (),
    ):
        super().__init__(follow_symlinks=False)
        self.tree = tree
        self.identities = identities or {}
        self.unreadable_files = set(unreadable_files)
        self.locked_files = set(locked_files)
        self.denied_dirs = set(denied_dirs)
        self.size_calls: List[str] = []
        self.identity_calls: List[str] = []

    def _node(self, path: str) -> Any:
        node: Any = {"root": self.tree}
        for part in path.split("/"):
            if not isinstance(node, dict) or part not in node:
                raise FileNotFoundError(2, "No such file or directory", path)
            node = node[part]
        return node

    def list_directory(self, path: str) -> Tuple[List[str], List[str]]:
        if path in self.denied_dirs:
            raise PermissionError(13, "Permission denied", path)
        node = self._node(path)
        if not isinstance(node, dict):
            raise NotADirectoryError(20, "Not a directory", path)
        files = sorted(f"{path}/{k}" for k, v in node.items() if not isinstance(v, dict))
        dirs = sorted(f"{path}/{k}" for k, v in node.items() if isinstance(v, dict))
        return files, dirs

    def allocated_size(self, path: str) -> int:
        self.size_calls.append(path)
        if path in self.unreadable_files:
            raise PermissionError(13, "Permission denied", path)
        return int(self._node(path))

    def identity(self, path: str) -> StorageIdentity:
        self.identity_calls.append(path)
        if path in self.locked_files:
            raise PermissionError(13, "Sharing violation", path)
        return self.identities.get(path, StorageIdentity(1, zlib.crc32(path.encode("utf-8"))))


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the preferences file at a private temp location for every test."""
    config_dir = tmp_path_factory.mktemp("allocdu_home")
    config_file = config_dir / "config.json"
    monkeypatch.setattr("allocdu.domain.config.CONFIG_FILE", str(config_file))
    return config_file


@pytest.fixture(autouse=True)
def reset_logging() -> Iterable[None]:
    """Detach the application's log handlers after each test."""
    yield
    shutdown_logging()
    logging.getLogger().setLevel(logging.WARNING)


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """
    Create the reference tree.

    Structure:
    /root
      a.txt      (1024 bytes)
      /sub
        b.txt    (2048 bytes)
    """
    root = tmp_path / "root"
    root.mkdir()
    (root / "a.txt").write_bytes(b"a" * 1024)
    sub = root / "sub"
    sub.mkdir()
    (sub / "b.txt").write_bytes(b"b" * 2048)
    return root


@pytest.fixture
def logical_probe() -> LogicalSizeProbe:
    return LogicalSizeProbe()


@pytest.fixture
def memory_probe_factory():
    """Build MemoryProbe instances from nested dict trees."""
    return MemoryProbe


@pytest.fixture
def use_logical_probe(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make the engine measure logical sizes when no probe is injected."""
    monkeypatch.setattr(
        "allocdu.core.pipeline.engine.get_default_probe",
        lambda follow_symlinks=False: LogicalSizeProbe(follow_symlinks=follow_symlinks),
    )
