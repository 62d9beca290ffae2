"""State/store layer.

This package is the single source of truth for dashboard records and
notifications. Mutations go through :class:`DomainStore`; readers work
from immutable :class:`StoreSnapshot`s.
"""

from pyvdesk.state.events import ALL_SCOPE, NOTIFICATIONS_SCOPE, ChangeAction, CollectionId, StoreChange
from pyvdesk.state.snapshot import StoreSnapshot
from pyvdesk.state.store import DEFAULT_COLLECTIONS, DomainStore, Listener

__all__ = [
    "ALL_SCOPE",
    "ChangeAction",
    "CollectionId",
    "DEFAULT_COLLECTIONS",
    "DomainStore",
    "Listener",
    "NOTIFICATIONS_SCOPE",
    "StoreChange",
    "StoreSnapshot",
]
