"""Tests for record model parsing with VdeskBaseModel."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from pyvdesk.models import (
    DEFAULT_FINE_AMOUNT,
    Fine,
    Notification,
    NotificationCategory,
    NotificationSource,
    PaymentStatus,
    User,
    UserRole,
    Vehicle,
    Violation,
    ViolationStatus,
    parse_timestamp,
)

# ------------------------------------------------------------------
# Timestamps
# ------------------------------------------------------------------


class TestParseTimestamp:
    def test_iso_with_z(self) -> None:
        assert parse_timestamp("2025-01-20T08:30:00Z") == datetime(2025, 1, 20, 8, 30, tzinfo=UTC)

    def test_naive_assumed_utc(self) -> None:
        parsed = parse_timestamp(datetime(2025, 1, 20, 8, 30))
        assert parsed is not None
        assert parsed.tzinfo is UTC

    def test_offset_preserved(self) -> None:
        parsed = parse_timestamp("2025-01-20T10:30:00+02:00")
        assert parsed == datetime(2025, 1, 20, 8, 30, tzinfo=UTC)
        assert parsed is not None
        assert parsed.utcoffset() == timedelta(hours=2)

    def test_epoch_seconds_and_millis(self) -> None:
        expected = datetime(2025, 1, 20, 8, 30, tzinfo=UTC)
        seconds = int(expected.timestamp())
        assert parse_timestamp(seconds) == expected
        assert parse_timestamp(seconds * 1000) == expected

    def test_none(self) -> None:
        assert parse_timestamp(None) is None

    def test_invalid(self) -> None:
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")


# ------------------------------------------------------------------
# Records
# ------------------------------------------------------------------


class TestViolation:
    def test_parse_camel_case_payload(self) -> None:
        v = Violation.model_validate(
            {
                "id": "1",
                "plateNumber": "GH-1234-20",
                "offense": "Speeding",
                "description": "Vehicle exceeded speed limit by 20km/h in a school zone",
                "capturedBy": "Officer Sarah Johnson",
                "officerId": "OFC001",
                "dateTime": "2025-01-20T08:30:00Z",
                "status": "pending",
                "location": "Independence Avenue, Accra",
            }
        )
        assert v.key == "1"
        assert v.plate_number == "GH-1234-20"
        assert v.captured_by == "Officer Sarah Johnson"
        assert v.date_time == datetime(2025, 1, 20, 8, 30, tzinfo=UTC)
        assert v.status == ViolationStatus.PENDING
        assert v.is_pending
        assert v.fine_amount == DEFAULT_FINE_AMOUNT

    def test_placeholders_fall_back_to_defaults(self) -> None:
        v = Violation.model_validate(
            {
                "id": "2",
                "plateNumber": "AS-5678-21",
                "offense": "Illegal Parking",
                "dateTime": "2025-01-20T14:15:00Z",
                "location": "--",
                "imageUrl": "",
                "fineAmount": float("nan"),
            }
        )
        assert v.location == "Location not specified"
        assert v.image_url is None
        assert v.fine_amount == DEFAULT_FINE_AMOUNT

    def test_numeric_id_coerced(self) -> None:
        v = Violation(id=42, plate_number="X", offense="Y", date_time="2025-01-20T08:30:00Z")  # type: ignore[arg-type]
        assert v.id == "42"

    def test_blank_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Violation(id="   ", plate_number="X", offense="Y", date_time="2025-01-20T08:30:00Z")

    def test_frozen(self) -> None:
        v = Violation(id="1", plate_number="X", offense="Y", date_time="2025-01-20T08:30:00Z")
        with pytest.raises(ValidationError):
            v.status = ViolationStatus.ACCEPTED  # type: ignore[misc]

    def test_unknown_status_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Violation(id="1", plate_number="X", offense="Y", date_time="2025-01-20T08:30:00Z", status="approved")


class TestOtherRecords:
    def test_user_defaults(self) -> None:
        user = User.model_validate({"id": "1", "username": "supervisor1", "role": "supervisor"})
        assert user.role == UserRole.SUPERVISOR
        assert user.is_active is True
        assert user.badge_number is None

    def test_vehicle(self) -> None:
        vehicle = Vehicle.model_validate(
            {
                "id": "v1",
                "licensePlate": "GR-1234-21",
                "manufacturer": "Toyota",
                "yearOfManufacture": 2019,
                "registrationExpiry": "2026-03-01T00:00:00Z",
            }
        )
        assert vehicle.year_of_manufacture == 2019
        assert vehicle.registration_expiry == datetime(2026, 3, 1, tzinfo=UTC)

    def test_fine(self) -> None:
        fine = Fine.model_validate(
            {
                "id": "f1",
                "licensePlate": "GR-1234-21",
                "amount": 250,
                "paymentStatus": "paid",
                "issuedAt": datetime(2025, 1, 21, tzinfo=timezone.utc),
            }
        )
        assert fine.payment_status == PaymentStatus.PAID
        assert fine.is_settled

    def test_fine_negative_amount_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Fine(id="f1", license_plate="X", amount=-1, issued_at="2025-01-21T00:00:00Z")


class TestNotification:
    def test_defaults(self) -> None:
        n = Notification(title="System maintenance scheduled")
        assert n.id
        assert n.category == NotificationCategory.INFO
        assert n.source == NotificationSource.SYSTEM
        assert n.read is False
        assert n.created_at.tzinfo is not None

    def test_ids_unique(self) -> None:
        assert Notification(title="a").id != Notification(title="b").id

    def test_parse_payload(self) -> None:
        n = Notification.model_validate(
            {
                "id": "1",
                "title": "New violation submitted by Officer Sarah Johnson",
                "category": "success",
                "source": "Police",
                "createdAt": "2025-01-20T08:35:00Z",
                "violationId": "1",
            }
        )
        assert n.source == NotificationSource.POLICE
        assert n.violation_id == "1"

    def test_unknown_category_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Notification(title="x", category="debug")
