from __future__ import annotations

"""
Unit tests for the Identity Tracker.
"""

from allocdu.core.services.identity import IdentityTracker
from allocdu.domain.usage_models import StorageIdentity


def test_observe_reports_first_sighting_only() -> None:
    """TC-01: observe() is True once per key."""
    tracker = IdentityTracker()
    key = StorageIdentity(1, 100)

    assert tracker.observe(key) is True
    assert tracker.observe(key) is False
    assert tracker.observe(StorageIdentity(1, 100)) is False


def test_volume_is_part_of_the_key() -> None:
    """TC-02: The same index on another volume is a different object."""
    tracker = IdentityTracker()
    assert tracker.observe(StorageIdentity(1, 5))
    assert tracker.observe(StorageIdentity(2, 5))
    assert len(tracker) == 2


def test_reset_starts_a_new_scope() -> None:
    """TC-03: After reset every key is new again."""
    tracker = IdentityTracker()
    key = StorageIdentity(3, 9)
    tracker.observe(key)

    tracker.reset()

    assert key not in tracker
    assert tracker.observe(key) is True
    assert list(tracker) == [key]
