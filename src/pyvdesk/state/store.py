"""Observable in-memory domain store.

This is the only component allowed to change records or the
notification log. Everything else reads :class:`StoreSnapshot`s.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import replace
from types import MappingProxyType
from typing import Any

from pyvdesk.config import StoreConfig
from pyvdesk.exceptions import DuplicateKeyError, InvalidArgumentError, NotFoundError
from pyvdesk.models import Fine, Notification, Record, User, Vehicle, Violation
from pyvdesk.persistence import JsonFilePersistence, StoreData, StoreLoader, StoreSaver
from pyvdesk.state.events import ALL_SCOPE, NOTIFICATIONS_SCOPE, ChangeAction, CollectionId, StoreChange
from pyvdesk.state.policy import index_of, merge_record, trim_log
from pyvdesk.state.snapshot import StoreSnapshot

_logger = logging.getLogger(__name__)

Listener = Callable[[StoreChange], None]

DEFAULT_COLLECTIONS: Mapping[str, type[Record]] = {
    CollectionId.USERS: User,
    CollectionId.VIOLATIONS: Violation,
    CollectionId.VEHICLES: Vehicle,
    CollectionId.FINES: Fine,
}


class DomainStore:
    """Owner of all record collections and the notification log.

    Every mutation either applies completely or raises before anything
    is visible. A successful mutation replaces the current snapshot and
    notifies listeners synchronously, before the call returns.

    Usage::

        store = DomainStore(StoreConfig(notification_cap=20))
        unsubscribe = store.subscribe(print)
        store.add_record("users", {"id": "u1", "username": "supervisor1"})
    """

    def __init__(
        self,
        config: StoreConfig | None = None,
        *,
        collections: Mapping[str, type[Record]] | None = None,
        saver: StoreSaver | None = None,
    ) -> None:
        self._config = config or StoreConfig()
        self._models: dict[str, type[Record]] = dict(collections if collections is not None else DEFAULT_COLLECTIONS)
        if not self._models:
            raise InvalidArgumentError("a store needs at least one collection")
        if NOTIFICATIONS_SCOPE in self._models or ALL_SCOPE in self._models:
            raise InvalidArgumentError("collection ids 'notifications' and '*' are reserved")
        self._saver = saver
        self._state = StoreSnapshot.empty(tuple(self._models))
        self._listeners: list[Listener] = []
        self._pending: list[StoreChange] = []
        self._dispatching = False
        self._batch_depth = 0
        self._save_deferred = False

    @classmethod
    def open(cls, config: StoreConfig | None = None) -> DomainStore:
        """Create a store wired to the JSON file named by ``config.data_path``.

        Without a data path the store is purely in memory.
        """
        config = config or StoreConfig.from_env()
        if config.data_path is None:
            return cls(config)
        persistence = JsonFilePersistence(config.data_path)
        store = cls(config, saver=persistence)
        store.load(persistence)
        return store

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def collection_ids(self) -> tuple[str, ...]:
        return tuple(self._models)

    @property
    def version(self) -> int:
        return self._state.version

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def snapshot(self) -> StoreSnapshot:
        """Current snapshot. Later mutations never change it."""
        return self._state

    def model_for(self, collection_id: str) -> type[Record]:
        try:
            return self._models[collection_id]
        except KeyError:
            raise NotFoundError(f"Unknown collection: {collection_id}", scope=collection_id) from None

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for change events; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    # ------------------------------------------------------------------
    # Record mutations
    # ------------------------------------------------------------------

    def add_record(self, collection_id: str, record: Record | Mapping[str, Any]) -> Record:
        """Append *record* to a collection.

        Raises
        ------
        DuplicateKeyError
            A record with the same key already exists.
        NotFoundError
            The collection is not registered.
        """
        model_cls = self.model_for(collection_id)
        item = self._coerce(model_cls, record)
        records = self._state.collection(collection_id)
        if index_of(records, item.key) >= 0:
            raise DuplicateKeyError(
                f"{collection_id} already contains {item.key!r}",
                collection=collection_id,
                key=item.key,
            )
        state = self._state.with_collection(collection_id, (*records, item))
        self._publish(state, collection_id, ChangeAction.ADDED, item.key)
        return item

    def update_record(self, collection_id: str, key: str, patch: Mapping[str, Any]) -> Record:
        """Replace the record with *key* by a merged copy."""
        self.model_for(collection_id)
        records = self._state.collection(collection_id)
        index = index_of(records, key)
        if index < 0:
            raise NotFoundError(f"{collection_id} has no record {key!r}", scope=collection_id, key=key)
        updated = merge_record(records[index], patch)
        state = self._state.with_collection(collection_id, (*records[:index], updated, *records[index + 1 :]))
        self._publish(state, collection_id, ChangeAction.UPDATED, key)
        return updated

    def remove_record(self, collection_id: str, key: str) -> Record:
        """Remove and return the record with *key*."""
        self.model_for(collection_id)
        records = self._state.collection(collection_id)
        index = index_of(records, key)
        if index < 0:
            raise NotFoundError(f"{collection_id} has no record {key!r}", scope=collection_id, key=key)
        removed = records[index]
        state = self._state.with_collection(collection_id, (*records[:index], *records[index + 1 :]))
        self._publish(state, collection_id, ChangeAction.REMOVED, key)
        return removed

    # ------------------------------------------------------------------
    # Notification log
    # ------------------------------------------------------------------

    def push_notification(self, notification: Notification | Mapping[str, Any]) -> Notification:
        """Prepend *notification*, evicting the oldest entries beyond the cap."""
        if isinstance(notification, Notification):
            item = notification
        elif isinstance(notification, Mapping):
            item = Notification.model_validate(dict(notification))
        else:
            raise InvalidArgumentError(f"expected a Notification, got {type(notification).__name__}")
        log = trim_log((item, *self._state.notifications), self._config.notification_cap)
        evicted = len(self._state.notifications) + 1 - len(log)
        if evicted:
            _logger.debug("Evicted %d notification(s) over cap %d", evicted, self._config.notification_cap)
        state = self._state.with_notifications(log)
        self._publish(state, NOTIFICATIONS_SCOPE, ChangeAction.PUSHED, item.id)
        return item

    def mark_notification_read(self, notification_id: str) -> Notification:
        """Flag one notification as read. Already-read entries emit nothing."""
        log = self._state.notifications
        for index, entry in enumerate(log):
            if entry.id == notification_id:
                break
        else:
            raise NotFoundError(
                f"No notification {notification_id!r}",
                scope=NOTIFICATIONS_SCOPE,
                key=notification_id,
            )
        if entry.read:
            return entry
        marked = entry.model_copy(update={"read": True})
        state = self._state.with_notifications((*log[:index], marked, *log[index + 1 :]))
        self._publish(state, NOTIFICATIONS_SCOPE, ChangeAction.READ, notification_id)
        return marked

    def mark_all_notifications_read(self) -> int:
        """Flag every unread notification as read; returns how many changed."""
        log = self._state.notifications
        unread = sum(1 for entry in log if not entry.read)
        if not unread:
            return 0
        marked = tuple(entry if entry.read else entry.model_copy(update={"read": True}) for entry in log)
        state = self._state.with_notifications(marked)
        self._publish(state, NOTIFICATIONS_SCOPE, ChangeAction.READ)
        return unread

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self, loader: StoreLoader) -> bool:
        """Replace all state with what *loader* provides.

        Loader failures are logged and leave the store unchanged; the
        return value tells whether anything was loaded. Invalid loaded
        data (duplicate keys, failed validation) raises before the
        current state is replaced.
        """
        try:
            data = loader.load()
        except Exception:
            _logger.warning("Store loader failed; keeping current state", exc_info=True)
            return False
        state = self._build_state(data)
        self._publish(state, ALL_SCOPE, ChangeAction.LOADED, save=False)
        _logger.debug(
            "Loaded store: %s, %d notification(s)",
            {name: len(records) for name, records in state.collections.items()},
            len(state.notifications),
        )
        return True

    def reset(self) -> None:
        """Clear every collection and the notification log."""
        state = replace(StoreSnapshot.empty(tuple(self._models)), version=self._state.version + 1)
        self._publish(state, ALL_SCOPE, ChangeAction.RESET)

    @contextlib.contextmanager
    def batch(self) -> Iterator[DomainStore]:
        """Group mutations so the saver runs once when the outermost batch exits.

        Mutations inside the block still apply and notify immediately.
        """
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self._save_deferred:
                self._save_deferred = False
                self._save()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _coerce(model_cls: type[Record], record: Record | Mapping[str, Any]) -> Record:
        if isinstance(record, model_cls):
            return record
        if isinstance(record, Record):
            raise InvalidArgumentError(f"expected {model_cls.__name__}, got {type(record).__name__}")
        if isinstance(record, Mapping):
            return model_cls.model_validate(dict(record))
        raise InvalidArgumentError(f"expected {model_cls.__name__} or a mapping, got {type(record).__name__}")

    def _build_state(self, data: StoreData) -> StoreSnapshot:
        collections: dict[str, tuple[Record, ...]] = {}
        for name, model_cls in self._models.items():
            items: list[Record] = []
            seen: set[str] = set()
            for raw in data.collections.get(name, []):
                item = model_cls.model_validate(raw)
                if item.key in seen:
                    raise DuplicateKeyError(f"loaded {name} contains {item.key!r} twice", collection=name, key=item.key)
                seen.add(item.key)
                items.append(item)
            collections[name] = tuple(items)
        unknown = set(data.collections) - set(self._models)
        if unknown:
            _logger.warning("Ignoring unregistered collection(s) in loaded data: %s", sorted(unknown))
        notifications = tuple(Notification.model_validate(raw) for raw in data.notifications)
        state = StoreSnapshot.empty(tuple(self._models))
        return replace(
            state,
            collections=MappingProxyType(collections),
            notifications=trim_log(notifications, self._config.notification_cap),
            version=self._state.version + 1,
        )

    def _publish(
        self,
        state: StoreSnapshot,
        scope: str,
        action: ChangeAction,
        key: str | None = None,
        *,
        save: bool = True,
    ) -> None:
        self._state = state
        change = StoreChange(scope=scope, action=action, key=key, version=state.version)
        _logger.debug("Store change: %s %s key=%s v%d", change.scope, change.action, change.key, change.version)
        self._dispatch(change)
        if save:
            if self._batch_depth:
                self._save_deferred = True
            else:
                self._save()

    def _dispatch(self, change: StoreChange) -> None:
        # A listener that mutates the store queues its change behind the
        # one being delivered, so every listener sees changes in order.
        self._pending.append(change)
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pending:
                current = self._pending.pop(0)
                for listener in list(self._listeners):
                    try:
                        listener(current)
                    except Exception:
                        _logger.warning("Store listener failed for %s change", current.scope, exc_info=True)
        finally:
            self._dispatching = False

    def _save(self) -> None:
        if self._saver is None or not self._config.autosave:
            return
        try:
            self._saver.save(self._state)
        except Exception:
            _logger.warning("Store saver failed; in-memory state is unaffected", exc_info=True)
