"""Derived views over store snapshots.

Views hold no state of their own; they are safe to call from any number
of readers because snapshots are immutable.
"""

from pyvdesk.views.aggregates import counts_by_collection, recent_notifications, unread_notification_count
from pyvdesk.views.dashboard import (
    ActivityItem,
    DashboardSummary,
    Deadline,
    DeadlinePriority,
    FineStats,
    ReviewStats,
    VehicleStats,
    dashboard_summary,
    deadline_priority,
    fine_stats,
    pending_approvals,
    recent_activity,
    review_stats,
    upcoming_deadlines,
    vehicle_stats,
)

__all__ = [
    "ActivityItem",
    "DashboardSummary",
    "Deadline",
    "DeadlinePriority",
    "FineStats",
    "ReviewStats",
    "VehicleStats",
    "counts_by_collection",
    "dashboard_summary",
    "deadline_priority",
    "fine_stats",
    "pending_approvals",
    "recent_activity",
    "recent_notifications",
    "review_stats",
    "unread_notification_count",
    "upcoming_deadlines",
    "vehicle_stats",
]
