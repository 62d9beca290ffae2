"""Violation review and fine payment workflow.

Helpers that combine a record mutation with the notification the
supervisor dashboard raises for it. Each helper runs inside one store
batch, so bindings see the record change and the notification together.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, cast

from pyvdesk.exceptions import InvalidArgumentError, NotFoundError
from pyvdesk.models import (
    Fine,
    Notification,
    NotificationCategory,
    NotificationSource,
    PaymentStatus,
    Violation,
    ViolationStatus,
)
from pyvdesk.state.events import CollectionId
from pyvdesk.state.store import DomainStore

_logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "No reason provided"


def _pending_violation(store: DomainStore, violation_id: str) -> Violation:
    record = store.snapshot().get(CollectionId.VIOLATIONS, violation_id)
    if not isinstance(record, Violation):
        raise NotFoundError(f"No violation {violation_id!r}", scope=CollectionId.VIOLATIONS, key=violation_id)
    if not record.is_pending:
        raise InvalidArgumentError(f"violation {violation_id!r} was already {record.status}")
    return record


def _as_submission(violation: Violation | Mapping[str, Any]) -> Violation:
    if isinstance(violation, Mapping):
        violation = Violation.model_validate(dict(violation))
    if not isinstance(violation, Violation):
        raise InvalidArgumentError(f"expected a Violation or a mapping, got {type(violation).__name__}")
    # New submissions always enter the review queue.
    return violation.model_copy(
        update={
            "status": ViolationStatus.PENDING,
            "reviewed_by": None,
            "reviewed_at": None,
            "rejection_reason": None,
        }
    )


def submit_violation(store: DomainStore, violation: Violation | Mapping[str, Any]) -> Violation:
    """Record a newly captured violation as pending and notify supervisors.

    Any review outcome carried by the submission is discarded.
    """
    submission = _as_submission(violation)
    with store.batch():
        added = cast(Violation, store.add_record(CollectionId.VIOLATIONS, submission))
        captured_by = added.captured_by or "an unknown officer"
        store.push_notification(
            Notification(
                title=f"New violation submitted by {captured_by}",
                category=NotificationCategory.INFO,
                source=NotificationSource.POLICE,
                violation_id=added.id,
            )
        )
    _logger.debug("Submitted violation %s (%s)", added.id, added.plate_number)
    return added


def accept_violation(
    store: DomainStore,
    violation_id: str,
    reviewer: str,
    *,
    now: datetime | None = None,
) -> Violation:
    """Accept a pending violation on behalf of *reviewer*."""
    violation = _pending_violation(store, violation_id)
    reviewed_at = now or datetime.now(UTC)
    with store.batch():
        updated = cast(
            Violation,
            store.update_record(
                CollectionId.VIOLATIONS,
                violation.id,
                {"status": ViolationStatus.ACCEPTED, "reviewed_by": reviewer, "reviewed_at": reviewed_at},
            ),
        )
        store.push_notification(
            Notification(
                title=f"Violation {violation.plate_number} accepted by {reviewer}",
                category=NotificationCategory.SUCCESS,
                source=NotificationSource.SUPERVISOR,
                created_at=reviewed_at,
                violation_id=violation.id,
            )
        )
    return updated


def reject_violation(
    store: DomainStore,
    violation_id: str,
    reviewer: str,
    reason: str | None = None,
    *,
    now: datetime | None = None,
) -> Violation:
    """Reject a pending violation; the reason defaults to ``"No reason provided"``."""
    violation = _pending_violation(store, violation_id)
    reviewed_at = now or datetime.now(UTC)
    with store.batch():
        updated = cast(
            Violation,
            store.update_record(
                CollectionId.VIOLATIONS,
                violation.id,
                {
                    "status": ViolationStatus.REJECTED,
                    "reviewed_by": reviewer,
                    "reviewed_at": reviewed_at,
                    "rejection_reason": reason or DEFAULT_REJECTION_REASON,
                },
            ),
        )
        store.push_notification(
            Notification(
                title=f"Violation {violation.plate_number} rejected by {reviewer}",
                category=NotificationCategory.WARNING,
                source=NotificationSource.SUPERVISOR,
                created_at=reviewed_at,
                violation_id=violation.id,
            )
        )
    return updated


def _fine(store: DomainStore, fine_id: str) -> Fine:
    record = store.snapshot().get(CollectionId.FINES, fine_id)
    if not isinstance(record, Fine):
        raise NotFoundError(f"No fine {fine_id!r}", scope=CollectionId.FINES, key=fine_id)
    return record


def pay_fine(
    store: DomainStore,
    fine_id: str,
    *,
    payment_method: str = "cash",
    notes: str | None = None,
    now: datetime | None = None,
) -> Fine:
    """Mark a fine as paid.

    Raises :class:`InvalidArgumentError` when the fine is already paid.
    """
    fine = _fine(store, fine_id)
    if fine.payment_status == PaymentStatus.PAID:
        raise InvalidArgumentError(f"fine {fine_id!r} is already marked as paid")
    paid_at = now or datetime.now(UTC)
    with store.batch():
        updated = cast(
            Fine,
            store.update_record(
                CollectionId.FINES,
                fine.id,
                {
                    "payment_status": PaymentStatus.PAID,
                    "payment_method": payment_method,
                    "notes": notes,
                    "paid_at": paid_at,
                },
            ),
        )
        store.push_notification(
            Notification(
                title=f"Fine {fine.id} for {fine.license_plate} paid ({payment_method})",
                category=NotificationCategory.SUCCESS,
                source=NotificationSource.DVLA,
                created_at=paid_at,
                violation_id=fine.violation_id,
            )
        )
    _logger.debug("Fine %s paid via %s", fine.id, payment_method)
    return updated


def clear_fine(store: DomainStore, fine_id: str, *, now: datetime | None = None) -> Fine:
    """Flag a fine as cleared. A fine that is already cleared is returned unchanged."""
    fine = _fine(store, fine_id)
    if fine.marked_as_cleared:
        return fine
    with store.batch():
        updated = cast(Fine, store.update_record(CollectionId.FINES, fine.id, {"marked_as_cleared": True}))
        store.push_notification(
            Notification(
                title=f"Fine {fine.id} for {fine.license_plate} cleared",
                category=NotificationCategory.INFO,
                source=NotificationSource.DVLA,
                created_at=now or datetime.now(UTC),
                violation_id=fine.violation_id,
            )
        )
    return updated
