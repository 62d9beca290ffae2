"""Immutable point-in-time view of the store."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from pyvdesk.exceptions import NotFoundError
from pyvdesk.models import Notification, Record


def _freeze(collections: Mapping[str, tuple[Record, ...]]) -> Mapping[str, tuple[Record, ...]]:
    return MappingProxyType(dict(collections))


@dataclass(frozen=True, slots=True)
class StoreSnapshot:
    """All collections and the notification log at one store version.

    Collections are tuples of frozen records, so a snapshot can be shared
    freely between readers. The store never mutates a snapshot; each
    mutation produces a new one.
    """

    collections: Mapping[str, tuple[Record, ...]] = field(default_factory=lambda: MappingProxyType({}))
    notifications: tuple[Notification, ...] = ()
    """Most recent first."""
    version: int = 0

    @classmethod
    def empty(cls, collection_ids: tuple[str, ...]) -> StoreSnapshot:
        return cls(collections=_freeze({name: () for name in collection_ids}))

    @property
    def collection_names(self) -> tuple[str, ...]:
        return tuple(self.collections)

    def collection(self, name: str) -> tuple[Record, ...]:
        try:
            return self.collections[name]
        except KeyError:
            raise NotFoundError(f"Unknown collection: {name}", scope=name) from None

    def get(self, name: str, key: str) -> Record | None:
        """Return the record with *key*, or ``None`` when it is not present."""
        for record in self.collection(name):
            if record.key == key:
                return record
        return None

    def with_collection(self, name: str, records: tuple[Record, ...]) -> StoreSnapshot:
        collections = dict(self.collections)
        collections[name] = records
        return replace(self, collections=_freeze(collections), version=self.version + 1)

    def with_notifications(self, notifications: tuple[Notification, ...]) -> StoreSnapshot:
        return replace(self, notifications=notifications, version=self.version + 1)
