"""Registered vehicle model."""

from __future__ import annotations

from enum import StrEnum

from pyvdesk.models._base import OptionalTimestamp, Record


class RegistrationStatus(StrEnum):
    ACTIVE = "active"
    EXPIRED = "expired"
    SUSPENDED = "suspended"


class Vehicle(Record):
    """A vehicle held in the DVLA register."""

    license_plate: str
    manufacturer: str = ""
    """Manufacturer (e.g. ``"Toyota"``)."""
    model: str = ""
    vehicle_type: str = ""
    """Body type (e.g. ``"Saloon"``, ``"Bus"``)."""
    year_of_manufacture: int | None = None
    color: str = ""
    owner_name: str = ""
    registration_expiry: OptionalTimestamp = None
    status: RegistrationStatus = RegistrationStatus.ACTIVE
