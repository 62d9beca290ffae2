"""Bridge store changes to coalesced view recomputation.

A :class:`ViewBinding` re-runs one derived view for one consumer. Store
changes only mark the binding dirty; the recomputation runs on the next
event-loop tick, so a burst of synchronous mutations costs a single
delivery.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from enum import StrEnum
from typing import Any, Generic, TypeVar

from pyvdesk.exceptions import BindingStateError
from pyvdesk.state.events import StoreChange
from pyvdesk.state.snapshot import StoreSnapshot
from pyvdesk.state.store import DomainStore

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class BindingState(StrEnum):
    UNSUBSCRIBED = "unsubscribed"
    SUBSCRIBED = "subscribed"


class ViewBinding(Generic[T]):
    """Deliver ``compute(snapshot)`` to ``deliver`` whenever the store changes.

    Every delivery is a full replacement of the previous result, never
    a diff. Bindings are single-use: after :meth:`unsubscribe`, create a
    new binding to resume deliveries.

    Usage::

        binding = ViewBinding(store, counts_by_collection, render_counts)
        binding.subscribe()          # delivers the current counts
        store.add_record(...)        # schedules one recomputation
        store.add_record(...)        # coalesced with the previous one
        await asyncio.sleep(0)       # delivery happens here
        binding.unsubscribe()

    Parameters
    ----------
    store
        Store to observe.
    compute
        Derived view run against each snapshot.
    deliver
        Consumer callback receiving each result.
    loop
        Event loop used to defer recomputation. Defaults to the running
        loop at :meth:`subscribe` time.
    scopes
        Only recompute for changes touching these scopes (collection ids
        or ``"notifications"``). ``None`` reacts to every change.
    """

    def __init__(
        self,
        store: DomainStore,
        compute: Callable[[StoreSnapshot], T],
        deliver: Callable[[T], None],
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        scopes: Iterable[str] | None = None,
    ) -> None:
        self._store = store
        self._compute = compute
        self._deliver = deliver
        self._loop = loop
        self._scopes = frozenset(scopes) if scopes is not None else None
        self._state = BindingState.UNSUBSCRIBED
        self._used = False
        self._unsubscribe_store: Callable[[], None] | None = None
        self._handle: asyncio.Handle | None = None
        self._deliveries = 0
        self._last_version: int | None = None

    @property
    def state(self) -> BindingState:
        return self._state

    @property
    def is_subscribed(self) -> bool:
        return self._state == BindingState.SUBSCRIBED

    @property
    def has_pending(self) -> bool:
        """Whether a recomputation is scheduled but has not run yet."""
        return self._handle is not None

    @property
    def deliveries(self) -> int:
        return self._deliveries

    @property
    def last_version(self) -> int | None:
        """Store version of the most recent delivery."""
        return self._last_version

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def subscribe(self) -> T:
        """Start observing the store and deliver the current view immediately.

        Returns the initial result. Raises :class:`BindingStateError` when
        the binding is already subscribed or was used before, or when no
        event loop is available.
        """
        if self._used:
            raise BindingStateError("binding was already subscribed once; create a new binding")
        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError:
                raise BindingStateError("no running event loop; pass loop= or subscribe from a coroutine") from None

        snapshot = self._store.snapshot()
        result = self._compute(snapshot)
        self._used = True
        self._state = BindingState.SUBSCRIBED
        self._unsubscribe_store = self._store.subscribe(self._on_change)
        self._emit(result, snapshot.version)
        return result

    def unsubscribe(self) -> None:
        """Stop observing the store and drop any pending delivery."""
        if self._state != BindingState.SUBSCRIBED:
            return
        self._cancel_pending()
        if self._unsubscribe_store is not None:
            self._unsubscribe_store()
            self._unsubscribe_store = None
        self._state = BindingState.UNSUBSCRIBED
        _logger.debug("Binding unsubscribed after %d deliveries", self._deliveries)

    def flush(self) -> bool:
        """Run a pending recomputation now. Returns whether one ran."""
        if self._handle is None or not self.is_subscribed:
            return False
        self._cancel_pending()
        self._recompute()
        return True

    def __enter__(self) -> ViewBinding[T]:
        self.subscribe()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.unsubscribe()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _on_change(self, change: StoreChange) -> None:
        if not self.is_subscribed:
            return
        if self._scopes is not None and not any(change.touches(scope) for scope in self._scopes):
            return
        if self._handle is not None:
            return
        if self._loop is not None:
            self._handle = self._loop.call_soon(self._run_scheduled)

    def _run_scheduled(self) -> None:
        self._handle = None
        if not self.is_subscribed:
            return
        try:
            self._recompute()
        except Exception:
            _logger.warning("View recomputation failed", exc_info=True)

    def _recompute(self) -> None:
        snapshot = self._store.snapshot()
        self._emit(self._compute(snapshot), snapshot.version)

    def _emit(self, result: T, version: int) -> None:
        self._deliveries += 1
        self._last_version = version
        try:
            self._deliver(result)
        except Exception:
            _logger.warning("View consumer failed for store v%d", version, exc_info=True)

    def _cancel_pending(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
