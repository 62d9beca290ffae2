"""Dashboard notification model."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import Field

from pyvdesk.models._base import Timestamp, VdeskBaseModel


class NotificationCategory(StrEnum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    INFO = "info"


class NotificationSource(StrEnum):
    """System that raised the notification."""

    POLICE = "Police"
    DVLA = "DVLA"
    SUPERVISOR = "Supervisor"
    SYSTEM = "System"


class Notification(VdeskBaseModel):
    """An entry in the bounded notification log."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    title: str
    category: NotificationCategory = NotificationCategory.INFO
    source: NotificationSource = NotificationSource.SYSTEM
    created_at: Timestamp = Field(default_factory=lambda: datetime.now(UTC))
    read: bool = False
    violation_id: str | None = None
    """Violation the notification refers to, if any."""
