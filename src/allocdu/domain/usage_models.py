from __future__ import annotations

"""
Disk Usage Domain Data Models.

Defines the entries produced by the traversal, the storage identity key used
for hard-link deduplication, and the result objects handed from the usage
engine to the interface layer.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple

from allocdu.domain.constants import COLOR_MODES, IDENTITY_SCOPES

# -----------------------------------------------------------------------------
# TRAVERSAL ENTRIES
# -----------------------------------------------------------------------------

class StorageIdentity(NamedTuple):
    """
    Key of the storage object behind a path.

    Attributes:
        volume: Device (POSIX st_dev) or volume serial number (Windows).
        index: Inode (POSIX st_ino) or file index (Windows).
    """
    volume: int
    index: int


@dataclass(frozen=True)
class FileEntry:
    """A file and the bytes the filesystem allocates for it."""
    path: str
    size: int


@dataclass(frozen=True)
class DirectoryEntry:
    """A directory and the allocated total of its whole subtree."""
    path: str
    total: int


@dataclass
class WalkStats:
    """
    Counters collected while walking one target.

    Attributes:
        files: Files whose size was added to a total.
        skipped: Files whose allocated size could not be read.
        duplicates: Files suppressed because their identity was already seen.
        identity_failures: Files counted although their identity was unknown.
        directories: Directories visited, the target included.
        unreadable_dirs: Directories that could not be enumerated.
    """
    files: int = 0
    skipped: int = 0
    duplicates: int = 0
    identity_failures: int = 0
    directories: int = 0
    unreadable_dirs: int = 0

# -----------------------------------------------------------------------------
# RUN OPTIONS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class UsageOptions:
    """
    Behavior switches of one invocation.

    Attributes:
        show_files: Emit a line for every counted file.
        summary_only: Suppress every line except the per-target total.
        exact_bytes: Print raw byte counts instead of scaled units.
        track_identity: Count storage objects reachable by several paths once.
        identity_scope: 'target' resets the dedup set for each target,
                        'run' shares it across the whole invocation.
        follow_symlinks: Resolve symlinks when probing and descend into
                         symlinked directories.
        color: 'always', 'auto' or 'never'.
    """
    show_files: bool = False
    summary_only: bool = False
    exact_bytes: bool = False
    track_identity: bool = False
    identity_scope: str = "target"
    follow_symlinks: bool = False
    color: str = "always"

    def __post_init__(self) -> None:
        if self.identity_scope not in IDENTITY_SCOPES:
            raise ValueError(f"Unknown identity scope: {self.identity_scope!r}")
        if self.color not in COLOR_MODES:
            raise ValueError(f"Unknown color mode: {self.color!r}")

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "UsageOptions":
        """Build options from a validated configuration dictionary."""
        return cls(
            show_files=bool(cfg.get("show_files", False)),
            summary_only=bool(cfg.get("summary_only", False)),
            exact_bytes=bool(cfg.get("exact_bytes", False)),
            track_identity=bool(cfg.get("track_identity", False)),
            identity_scope=str(cfg.get("identity_scope", "target")),
            follow_symlinks=bool(cfg.get("follow_symlinks", False)),
            color=str(cfg.get("color", "always")),
        )

# -----------------------------------------------------------------------------
# RESULTS
# -----------------------------------------------------------------------------

@dataclass
class TargetReport:
    """
    Outcome of one top-level target.

    Attributes:
        path: Target as given by the caller.
        ok: False when the target could not be accessed.
        error: Message written to the error stream, if any.
        total: Allocated bytes of the whole target.
        printed_any: Whether any per-entry line was emitted.
        stats: Traversal counters.
    """
    path: str
    ok: bool = True
    error: str = ""
    total: int = 0
    printed_any: bool = False
    stats: WalkStats = field(default_factory=WalkStats)


@dataclass
class UsageRunResult:
    """Reports of every target of one invocation, in argument order."""
    targets: List[TargetReport] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(t.ok for t in self.targets)

    @property
    def grand_total(self) -> int:
        return sum(t.total for t in self.targets if t.ok)
