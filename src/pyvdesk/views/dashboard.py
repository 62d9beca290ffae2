"""Supervisor dashboard views.

Each function derives one dashboard panel from a snapshot. Time-based
views take ``now``/``day`` explicitly so results stay reproducible.
"""

from __future__ import annotations

import math
from datetime import UTC, date, datetime, timedelta
from enum import StrEnum
from typing import TypeVar

from pydantic import BaseModel, ConfigDict

from pyvdesk.config import StoreConfig
from pyvdesk.models import (
    Fine,
    Notification,
    NotificationSource,
    PaymentStatus,
    RegistrationStatus,
    Vehicle,
    Violation,
    ViolationStatus,
)
from pyvdesk.models._base import parse_timestamp
from pyvdesk.state.events import CollectionId
from pyvdesk.state.snapshot import StoreSnapshot
from pyvdesk.views.aggregates import check_count, counts_by_collection, recent_notifications, unread_notification_count

_DAY = timedelta(days=1)

_R = TypeVar("_R")

# Statuses that still lead to a payment deadline.
_DEADLINE_STATUSES = frozenset({ViolationStatus.PENDING, ViolationStatus.ACCEPTED})


class DeadlinePriority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def deadline_priority(days_left: int) -> DeadlinePriority:
    if days_left <= 7:
        return DeadlinePriority.HIGH
    if days_left <= 14:
        return DeadlinePriority.MEDIUM
    return DeadlinePriority.LOW


class _View(BaseModel):
    model_config = ConfigDict(frozen=True)


class ReviewStats(_View):
    """Review outcome counts for one day's violations."""

    total: int = 0
    accepted: int = 0
    rejected: int = 0
    pending: int = 0


class FineStats(_View):
    """Fine counts and amounts by payment status."""

    total_fines: int = 0
    paid_fines: int = 0
    unpaid_fines: int = 0
    total_amount: float = 0.0
    paid_amount: float = 0.0
    unpaid_amount: float = 0.0
    new_today: int = 0
    collection_rate: float = 0.0
    """Percentage of fines paid, rounded to two decimals."""


class VehicleStats(_View):
    """Registered vehicles by status, and active vehicles by body type."""

    total_vehicles: int = 0
    active_vehicles: int = 0
    expired_vehicles: int = 0
    suspended_vehicles: int = 0
    by_type: dict[str, int] = {}


class ActivityItem(_View):
    id: str
    title: str
    description: str
    timestamp: datetime
    source: NotificationSource
    status: ViolationStatus
    plate_number: str


class Deadline(_View):
    id: str
    title: str
    description: str
    due_date: datetime
    days_left: int
    amount: float
    priority: DeadlinePriority


class DashboardSummary(_View):
    """Everything the supervisor dashboard shows, computed from one snapshot."""

    version: int
    counts: dict[str, int]
    review: ReviewStats
    fines: FineStats
    vehicles: VehicleStats
    pending_approvals: tuple[Violation, ...]
    recent_activity: tuple[ActivityItem, ...]
    upcoming_deadlines: tuple[Deadline, ...]
    notifications: tuple[Notification, ...]
    unread_notifications: int


def _records(snapshot: StoreSnapshot, collection_id: CollectionId, model_cls: type[_R]) -> tuple[_R, ...]:
    records = snapshot.collections.get(collection_id, ())
    return tuple(record for record in records if isinstance(record, model_cls))


def _violations(snapshot: StoreSnapshot) -> tuple[Violation, ...]:
    return _records(snapshot, CollectionId.VIOLATIONS, Violation)


def _newest_first(violations: tuple[Violation, ...]) -> list[Violation]:
    return sorted(violations, key=lambda v: v.date_time, reverse=True)


def _utc_day(value: date | datetime) -> date:
    # datetime is a date subclass; compare calendar days in UTC.
    if isinstance(value, datetime):
        return parse_timestamp(value).astimezone(UTC).date()
    return value


def review_stats(snapshot: StoreSnapshot, day: date | datetime) -> ReviewStats:
    """Count violations captured on *day* (UTC) by review status.

    A ``datetime`` is reduced to its UTC calendar day.
    """
    day = _utc_day(day)
    todays = [v for v in _violations(snapshot) if v.date_time.astimezone(UTC).date() == day]
    return ReviewStats(
        total=len(todays),
        accepted=sum(1 for v in todays if v.status == ViolationStatus.ACCEPTED),
        rejected=sum(1 for v in todays if v.status == ViolationStatus.REJECTED),
        pending=sum(1 for v in todays if v.status == ViolationStatus.PENDING),
    )


def fine_stats(snapshot: StoreSnapshot, day: date | datetime | None = None) -> FineStats:
    """Overview of fines by payment status.

    ``new_today`` counts fines issued on *day* (UTC) and stays 0 when no
    day is given. Partial and overdue fines count towards the totals only.
    """
    fines = _records(snapshot, CollectionId.FINES, Fine)
    paid = [f for f in fines if f.payment_status == PaymentStatus.PAID]
    unpaid = [f for f in fines if f.payment_status == PaymentStatus.UNPAID]
    new_today = 0
    if day is not None:
        today = _utc_day(day)
        new_today = sum(1 for f in fines if f.issued_at.astimezone(UTC).date() == today)
    return FineStats(
        total_fines=len(fines),
        paid_fines=len(paid),
        unpaid_fines=len(unpaid),
        total_amount=sum(f.amount for f in fines),
        paid_amount=sum(f.amount for f in paid),
        unpaid_amount=sum(f.amount for f in unpaid),
        new_today=new_today,
        collection_rate=round(len(paid) / len(fines) * 100, 2) if fines else 0.0,
    )


def vehicle_stats(snapshot: StoreSnapshot) -> VehicleStats:
    """Overview of registered vehicles by status and active vehicles by type."""
    vehicles = _records(snapshot, CollectionId.VEHICLES, Vehicle)
    by_type: dict[str, int] = {}
    for v in vehicles:
        if v.status != RegistrationStatus.ACTIVE:
            continue
        kind = v.vehicle_type.strip().lower() or "other"
        by_type[kind] = by_type.get(kind, 0) + 1
    return VehicleStats(
        total_vehicles=len(vehicles),
        active_vehicles=sum(1 for v in vehicles if v.status == RegistrationStatus.ACTIVE),
        expired_vehicles=sum(1 for v in vehicles if v.status == RegistrationStatus.EXPIRED),
        suspended_vehicles=sum(1 for v in vehicles if v.status == RegistrationStatus.SUSPENDED),
        by_type=by_type,
    )


def pending_approvals(snapshot: StoreSnapshot, limit: int = 5) -> tuple[Violation, ...]:
    """Pending violations awaiting review, newest first."""
    limit = check_count("limit", limit)
    pending = tuple(v for v in _violations(snapshot) if v.is_pending)
    return tuple(_newest_first(pending)[:limit])


def recent_activity(snapshot: StoreSnapshot, limit: int = 8) -> tuple[ActivityItem, ...]:
    """Latest violations from every system as activity feed items."""
    limit = check_count("limit", limit)
    return tuple(
        ActivityItem(
            id=v.id,
            title=f"{v.offense} - {v.plate_number}",
            description=f"{v.description or 'Traffic violation'} at {v.location}",
            timestamp=v.date_time,
            source=NotificationSource.POLICE if v.officer_id else NotificationSource.SYSTEM,
            status=v.status,
            plate_number=v.plate_number,
        )
        for v in _newest_first(_violations(snapshot))[:limit]
    )


def upcoming_deadlines(
    snapshot: StoreSnapshot,
    now: datetime,
    *,
    window_days: int = 30,
    limit: int = 5,
) -> tuple[Deadline, ...]:
    """Fine payment deadlines still ahead of *now*, most urgent first.

    A violation's fine falls due *window_days* after it was captured.
    Rejected violations have no deadline.
    """
    limit = check_count("limit", limit)
    current = parse_timestamp(now)
    deadlines: list[Deadline] = []
    for v in _violations(snapshot):
        if v.status not in _DEADLINE_STATUSES:
            continue
        due = v.date_time + window_days * _DAY
        days_left = math.ceil((due - current) / _DAY)
        if days_left <= 0:
            continue
        deadlines.append(
            Deadline(
                id=v.id,
                title=f"Payment Due - {v.plate_number}",
                description=f"{v.offense} fine payment",
                due_date=due,
                days_left=days_left,
                amount=v.fine_amount,
                priority=deadline_priority(days_left),
            )
        )
    deadlines.sort(key=lambda d: d.days_left)
    return tuple(deadlines[:limit])


def dashboard_summary(snapshot: StoreSnapshot, now: datetime, config: StoreConfig | None = None) -> DashboardSummary:
    """Compute every dashboard panel from *snapshot* using the limits in *config*."""
    config = config or StoreConfig()
    current = parse_timestamp(now)
    return DashboardSummary(
        version=snapshot.version,
        counts=counts_by_collection(snapshot),
        review=review_stats(snapshot, current),
        fines=fine_stats(snapshot, current),
        vehicles=vehicle_stats(snapshot),
        pending_approvals=pending_approvals(snapshot, config.pending_approvals_limit),
        recent_activity=recent_activity(snapshot, config.recent_activity_limit),
        upcoming_deadlines=upcoming_deadlines(
            snapshot,
            current,
            window_days=config.deadline_window_days,
            limit=config.deadline_limit,
        ),
        notifications=recent_notifications(snapshot, config.recent_notifications_limit),
        unread_notifications=unread_notification_count(snapshot),
    )
