"""Traffic violation model."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from pyvdesk.models._base import OptionalTimestamp, Record, Timestamp

#: Fine charged when the capturing officer did not enter an amount.
DEFAULT_FINE_AMOUNT: float = 100.0


class ViolationStatus(StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Violation(Record):
    """A violation captured in the field and awaiting (or past) supervisor review.

    ``reviewed_by``/``reviewed_at`` are only populated once a supervisor
    has accepted or rejected the violation.
    """

    plate_number: str
    """Ghana plate number (e.g. ``"GH-1234-20"``)."""
    offense: str
    description: str = ""
    location: str = "Location not specified"
    captured_by: str = ""
    """Name of the capturing officer."""
    officer_id: str | None = None
    date_time: Timestamp
    """When the violation was captured."""
    status: ViolationStatus = ViolationStatus.PENDING
    fine_amount: float = Field(default=DEFAULT_FINE_AMOUNT, ge=0)
    image_url: str | None = None
    reviewed_by: str | None = None
    reviewed_at: OptionalTimestamp = None
    rejection_reason: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == ViolationStatus.PENDING
