"""Fine model."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from pyvdesk.models._base import OptionalTimestamp, Record, Timestamp


class PaymentStatus(StrEnum):
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"


class Fine(Record):
    """A fine issued against a vehicle, usually for an accepted violation."""

    license_plate: str
    amount: float = Field(ge=0)
    offense_description: str = ""
    offense_location: str = ""
    violation_id: str | None = None
    """Violation the fine was raised for, if any."""
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    payment_method: str | None = None
    """How the fine was settled (e.g. ``"cash"``, ``"mobile_money"``)."""
    marked_as_cleared: bool = False
    notes: str | None = None
    issued_at: Timestamp
    due_at: OptionalTimestamp = None
    paid_at: OptionalTimestamp = None

    @property
    def is_settled(self) -> bool:
        return self.payment_status == PaymentStatus.PAID
