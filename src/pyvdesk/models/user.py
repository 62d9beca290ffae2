"""Dashboard user model."""

from __future__ import annotations

from enum import StrEnum

from pyvdesk.models._base import OptionalTimestamp, Record


class UserRole(StrEnum):
    SUPERVISOR = "supervisor"
    POLICE = "police"
    DVLA = "dvla"
    ADMIN = "admin"


class User(Record):
    """An account that can sign in to one of the dashboards."""

    username: str
    name: str = ""
    """Display name (e.g. ``"Martin Mensah"``)."""
    email: str = ""
    phone: str | None = None
    role: UserRole = UserRole.POLICE
    badge_number: str | None = None
    """Police badge number; only set for officers."""
    department: str | None = None
    is_active: bool = True
    created_at: OptionalTimestamp = None
