"""Collection and notification aggregates.

All functions are pure: their result depends only on the snapshot and
arguments passed in.
"""

from __future__ import annotations

from typing import Any

from pyvdesk.exceptions import InvalidArgumentError
from pyvdesk.models import Notification
from pyvdesk.state.snapshot import StoreSnapshot


def check_count(name: str, value: Any) -> int:
    """Validate a non-negative integer slice size."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise InvalidArgumentError(f"{name} must not be negative, got {value}")
    return value


def counts_by_collection(snapshot: StoreSnapshot) -> dict[str, int]:
    """Number of records in every registered collection, zeros included."""
    return {str(name): len(records) for name, records in snapshot.collections.items()}


def recent_notifications(snapshot: StoreSnapshot, n: int) -> tuple[Notification, ...]:
    """The *n* most recent notifications (the whole log when it is shorter)."""
    return snapshot.notifications[: check_count("n", n)]


def unread_notification_count(snapshot: StoreSnapshot) -> int:
    return sum(1 for entry in snapshot.notifications if not entry.read)
