from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from pyvdesk.config import StoreConfig
from pyvdesk.exceptions import DuplicateKeyError, InvalidArgumentError, NotFoundError
from pyvdesk.models import Notification, NotificationCategory, User, Violation
from pyvdesk.persistence import MemoryPersistence, StoreData
from pyvdesk.state.events import ALL_SCOPE, NOTIFICATIONS_SCOPE, ChangeAction, StoreChange
from pyvdesk.state.store import DomainStore
from pyvdesk.views import counts_by_collection, recent_notifications


def _dt() -> datetime:
    return datetime(2025, 1, 20, 8, 30, tzinfo=UTC)


def _violation(key: str, **overrides: object) -> dict[str, object]:
    data: dict[str, object] = {
        "id": key,
        "plateNumber": "GH-1234-20",
        "offense": "Speeding",
        "dateTime": "2025-01-20T08:30:00Z",
    }
    data.update(overrides)
    return data


def test_add_then_remove_counts() -> None:
    store = DomainStore()

    store.add_record("users", {"id": "u1", "username": "supervisor1"})
    store.add_record("users", {"id": "u2", "username": "officer1"})
    store.remove_record("users", "u1")

    counts = counts_by_collection(store.snapshot())
    assert counts["users"] == 1
    assert counts == {"users": 1, "violations": 0, "vehicles": 0, "fines": 0}


def test_duplicate_key_rejected_and_store_unchanged() -> None:
    store = DomainStore()
    changes: list[StoreChange] = []
    store.add_record("users", {"id": "u1", "username": "supervisor1"})
    store.subscribe(changes.append)
    before = store.snapshot()

    with pytest.raises(DuplicateKeyError) as excinfo:
        store.add_record("users", User(id="u1", username="someone-else"))

    assert excinfo.value.collection == "users"
    assert excinfo.value.key == "u1"
    assert store.snapshot() is before
    assert len(store.snapshot().collection("users")) == 1
    assert changes == []


def test_update_replaces_with_merged_copy() -> None:
    store = DomainStore()
    original = store.add_record("violations", _violation("1"))
    held = store.snapshot()

    updated = store.update_record("violations", "1", {"status": "accepted", "reviewedBy": "Martin Mensah"})

    assert isinstance(updated, Violation)
    assert updated.status == "accepted"
    assert updated.reviewed_by == "Martin Mensah"
    assert updated.plate_number == "GH-1234-20"
    # Earlier snapshots and records are untouched.
    assert held.get("violations", "1") is original
    assert original.status == "pending"
    assert store.snapshot().get("violations", "1") == updated


def test_update_keeps_position() -> None:
    store = DomainStore()
    for key in ("1", "2", "3"):
        store.add_record("violations", _violation(key))

    store.update_record("violations", "2", {"offense": "Illegal Parking"})

    keys = [record.key for record in store.snapshot().collection("violations")]
    assert keys == ["1", "2", "3"]


def test_update_rejects_unknown_field_and_key_change() -> None:
    store = DomainStore()
    store.add_record("violations", _violation("1"))
    version = store.version

    with pytest.raises(InvalidArgumentError):
        store.update_record("violations", "1", {"colour": "red"})
    with pytest.raises(InvalidArgumentError):
        store.update_record("violations", "1", {"id": "2"})
    with pytest.raises(ValidationError):
        store.update_record("violations", "1", {"fineAmount": -5})

    assert store.version == version


def test_missing_key_and_collection_raise_not_found() -> None:
    store = DomainStore()

    with pytest.raises(NotFoundError):
        store.update_record("users", "nobody", {"name": "x"})
    with pytest.raises(NotFoundError):
        store.remove_record("users", "nobody")
    with pytest.raises(NotFoundError) as excinfo:
        store.add_record("drivers", {"id": "d1"})
    assert excinfo.value.scope == "drivers"


def test_wrong_record_type_rejected() -> None:
    store = DomainStore()

    with pytest.raises(InvalidArgumentError):
        store.add_record("violations", User(id="u1", username="supervisor1"))


def test_notification_cap_evicts_oldest() -> None:
    store = DomainStore(StoreConfig(notification_cap=2))

    for title in ("A", "B", "C"):
        store.push_notification(Notification(title=title, created_at=_dt()))

    titles = [entry.title for entry in recent_notifications(store.snapshot(), 2)]
    assert titles == ["C", "B"]
    assert len(store.snapshot().notifications) == 2


def test_notification_log_reverse_insertion_order() -> None:
    cap = 5
    store = DomainStore(StoreConfig(notification_cap=cap))
    titles = [f"n{i}" for i in range(12)]
    for title in titles:
        store.push_notification({"title": title, "category": "warning"})

    log = recent_notifications(store.snapshot(), cap)
    assert [entry.title for entry in log] == list(reversed(titles))[:cap]
    assert all(entry.category == NotificationCategory.WARNING for entry in log)


def test_mutations_notify_listeners_synchronously() -> None:
    store = DomainStore()
    seen: list[tuple[str, ChangeAction, str | None, int]] = []

    def listener(change: StoreChange) -> None:
        # The new state is already visible while listeners run.
        assert store.version == change.version
        seen.append((change.scope, change.action, change.key, change.version))

    store.subscribe(listener)
    store.add_record("users", {"id": "u1", "username": "supervisor1"})
    store.update_record("users", "u1", {"name": "Martin Mensah"})
    pushed = store.push_notification(Notification(title="hello"))
    store.remove_record("users", "u1")

    assert seen == [
        ("users", ChangeAction.ADDED, "u1", 1),
        ("users", ChangeAction.UPDATED, "u1", 2),
        (NOTIFICATIONS_SCOPE, ChangeAction.PUSHED, pushed.id, 3),
        ("users", ChangeAction.REMOVED, "u1", 4),
    ]


def test_unsubscribed_listener_is_not_called() -> None:
    store = DomainStore()
    seen: list[StoreChange] = []
    unsubscribe = store.subscribe(seen.append)

    unsubscribe()
    unsubscribe()
    store.add_record("users", {"id": "u1", "username": "supervisor1"})

    assert seen == []
    assert store.listener_count == 0


def test_failing_listener_does_not_block_others_or_roll_back() -> None:
    store = DomainStore()
    seen: list[StoreChange] = []

    def broken(change: StoreChange) -> None:
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(seen.append)
    store.add_record("users", {"id": "u1", "username": "supervisor1"})

    assert len(seen) == 1
    assert len(store.snapshot().collection("users")) == 1


def test_listener_mutation_is_delivered_after_current_change() -> None:
    store = DomainStore()
    order: list[tuple[str, str | None]] = []

    def first(change: StoreChange) -> None:
        order.append(("first", change.key))
        if change.key == "u1":
            store.add_record("users", {"id": "u2", "username": "officer1"})

    def second(change: StoreChange) -> None:
        order.append(("second", change.key))

    store.subscribe(first)
    store.subscribe(second)
    store.add_record("users", {"id": "u1", "username": "supervisor1"})

    assert order == [("first", "u1"), ("second", "u1"), ("first", "u2"), ("second", "u2")]


def test_listener_mutation_applies_before_its_change_is_delivered() -> None:
    store = DomainStore()
    delivered: list[str | None] = []
    inside: dict[str, object] = {}

    def listener(change: StoreChange) -> None:
        delivered.append(change.key)
        if change.key == "u1":
            store.add_record("users", {"id": "u2", "username": "officer1"})
            inside["delivered"] = list(delivered)
            inside["visible"] = store.snapshot().get("users", "u2") is not None

    store.subscribe(listener)
    store.add_record("users", {"id": "u1", "username": "supervisor1"})

    assert inside == {"delivered": ["u1"], "visible": True}
    assert delivered == ["u1", "u2"]


def test_mark_notifications_read() -> None:
    store = DomainStore()
    first = store.push_notification(Notification(title="one"))
    store.push_notification(Notification(title="two"))
    changes: list[StoreChange] = []
    store.subscribe(changes.append)

    marked = store.mark_notification_read(first.id)
    again = store.mark_notification_read(first.id)

    assert marked.read is True
    assert again is marked
    assert len(changes) == 1
    assert store.mark_all_notifications_read() == 1
    assert store.mark_all_notifications_read() == 0
    assert all(entry.read for entry in store.snapshot().notifications)
    with pytest.raises(NotFoundError):
        store.mark_notification_read("missing")


def test_reset_clears_everything() -> None:
    store = DomainStore()
    changes: list[StoreChange] = []
    store.add_record("users", {"id": "u1", "username": "supervisor1"})
    store.push_notification(Notification(title="hello"))
    store.subscribe(changes.append)

    store.reset()

    snapshot = store.snapshot()
    assert counts_by_collection(snapshot) == {"users": 0, "violations": 0, "vehicles": 0, "fines": 0}
    assert snapshot.notifications == ()
    assert [change.scope for change in changes] == [ALL_SCOPE]
    assert changes[0].action == ChangeAction.RESET


def test_custom_collections() -> None:
    store = DomainStore(collections={"officers": User})

    store.add_record("officers", {"id": "OFC001", "username": "sjohnson"})

    assert counts_by_collection(store.snapshot()) == {"officers": 1}
    with pytest.raises(InvalidArgumentError):
        DomainStore(collections={"notifications": User})


def test_saver_called_after_mutations_and_once_per_batch() -> None:
    saver = MemoryPersistence()
    store = DomainStore(saver=saver)

    store.add_record("users", {"id": "u1", "username": "supervisor1"})
    assert saver.saves == 1

    with store.batch():
        store.add_record("users", {"id": "u2", "username": "officer1"})
        store.push_notification(Notification(title="hello"))
        assert saver.saves == 1
    assert saver.saves == 2
    assert [row["id"] for row in saver.data.collections["users"]] == ["u1", "u2"]


def test_failing_saver_does_not_affect_state() -> None:
    class _BrokenSaver:
        def save(self, snapshot: object) -> None:
            raise OSError("disk full")

    store = DomainStore(saver=_BrokenSaver())
    store.add_record("users", {"id": "u1", "username": "supervisor1"})

    assert store.snapshot().get("users", "u1") is not None


def test_autosave_disabled() -> None:
    saver = MemoryPersistence()
    store = DomainStore(StoreConfig(autosave=False), saver=saver)

    store.add_record("users", {"id": "u1", "username": "supervisor1"})

    assert saver.saves == 0


def test_load_replaces_state() -> None:
    data = StoreData(
        collections={
            "users": [{"id": "u1", "username": "supervisor1"}],
            "violations": [_violation("1"), _violation("2")],
            "unknown": [{"id": "x"}],
        },
        notifications=[{"id": "n1", "title": "System maintenance", "category": "info", "read": True}],
    )
    store = DomainStore()
    changes: list[StoreChange] = []
    store.subscribe(changes.append)

    assert store.load(MemoryPersistence(data)) is True

    counts = counts_by_collection(store.snapshot())
    assert counts == {"users": 1, "violations": 2, "vehicles": 0, "fines": 0}
    assert store.snapshot().notifications[0].read is True
    assert [(change.scope, change.action) for change in changes] == [(ALL_SCOPE, ChangeAction.LOADED)]


def test_failing_loader_keeps_state() -> None:
    class _BrokenLoader:
        def load(self) -> StoreData:
            raise OSError("unreachable")

    store = DomainStore()
    store.add_record("users", {"id": "u1", "username": "supervisor1"})
    before = store.snapshot()

    assert store.load(_BrokenLoader()) is False
    assert store.snapshot() is before


def test_load_with_duplicate_keys_raises_without_change() -> None:
    data = StoreData(collections={"users": [{"id": "u1", "username": "a"}, {"id": "u1", "username": "b"}]})
    store = DomainStore()
    before = store.snapshot()

    with pytest.raises(DuplicateKeyError):
        store.load(MemoryPersistence(data))

    assert store.snapshot() is before
