"""Data models for dashboard records and notifications."""

from pyvdesk.models._base import OptionalTimestamp, Record, Timestamp, VdeskBaseModel, parse_timestamp
from pyvdesk.models.fine import Fine, PaymentStatus
from pyvdesk.models.notification import Notification, NotificationCategory, NotificationSource
from pyvdesk.models.user import User, UserRole
from pyvdesk.models.vehicle import RegistrationStatus, Vehicle
from pyvdesk.models.violation import DEFAULT_FINE_AMOUNT, Violation, ViolationStatus

__all__ = [
    "DEFAULT_FINE_AMOUNT",
    "Fine",
    "Notification",
    "NotificationCategory",
    "NotificationSource",
    "OptionalTimestamp",
    "PaymentStatus",
    "Record",
    "RegistrationStatus",
    "Timestamp",
    "User",
    "UserRole",
    "VdeskBaseModel",
    "Vehicle",
    "Violation",
    "ViolationStatus",
    "parse_timestamp",
]
