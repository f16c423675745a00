from __future__ import annotations

"""
Storage Identity Tracking Service.

Remembers which storage objects were already counted within one dedup scope,
so a file reachable through several hard links contributes its size once.
"""

from typing import Iterator, Set

from allocdu.domain.usage_models import StorageIdentity


class IdentityTracker:
    """
    Set of storage identities seen in the current scope.

    The traversal is sequential, so check-and-insert needs no locking. A
    parallel walker would have to serialize calls to observe().
    """

    def __init__(self) -> None:
        self._seen: Set[StorageIdentity] = set()

    def observe(self, key: StorageIdentity) -> bool:
        """
        Record a key and report whether it is new.

        Args:
            key: Identity of the file being counted.

        Returns:
            bool: True the first time a key is observed, False afterwards.
        """
        if key in self._seen:
            return False
        self._seen.add(key)
        return True

    def reset(self) -> None:
        """Start a fresh scope."""
        self._seen.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def __iter__(self) -> Iterator[StorageIdentity]:
        return iter(self._seen)
