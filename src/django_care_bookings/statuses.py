"""Booking status and eligibility values.

Statuses are persisted as a JSON tuple ``{"name", "label", "color"}``.
The tuple is decoded once into a :class:`StatusValue` at the boundary
(model accessors, request parsing); everything past that point works
with the enum and the lookup tables below.
"""

import json
from dataclasses import dataclass

from django.db import models

from .exceptions import InvalidStatusError, MalformedStatusError


class BookingStatus(models.TextChoices):
    """Lifecycle status of a booking."""

    ENQUIRY = "enquiry", "Enquiry"
    PENDING_APPROVAL = "pending_approval", "Pending Approval"
    READY_TO_PROCESS = "ready_to_process", "Ready to Process"
    IN_PROGRESS = "in_progress", "In Progress"
    ON_HOLD = "on_hold", "On Hold"
    BOOKING_AMENDED = "booking_amended", "Amendment Requested"
    BOOKING_CONFIRMED = "booking_confirmed", "Booking Confirmed"
    BOOKING_CANCELLED = "booking_cancelled", "Booking Cancelled"
    GUEST_CANCELLED = "guest_cancelled", "Guest Cancelled"


class EligibilityStatus(models.TextChoices):
    """Eligibility axis, independent of the lifecycle status."""

    PENDING_ELIGIBILITY = "pending_eligibility", "Pending Eligibility"
    ELIGIBLE = "eligible", "Eligible"
    INELIGIBLE = "ineligible", "Not Eligible"


class BookingType(models.TextChoices):
    """Kind of guest a booking belongs to."""

    ENQUIRY = "Enquiry", "Enquiry"
    FIRST_TIME_GUEST = "First-Time Guest", "First-Time Guest"
    RETURNING_GUEST = "Returning Guest", "Returning Guest"


STATUS_COLORS = {
    BookingStatus.ENQUIRY: "gray",
    BookingStatus.PENDING_APPROVAL: "amber",
    BookingStatus.READY_TO_PROCESS: "fuchsia",
    BookingStatus.IN_PROGRESS: "sky",
    BookingStatus.ON_HOLD: "slate",
    BookingStatus.BOOKING_AMENDED: "orange",
    BookingStatus.BOOKING_CONFIRMED: "green",
    BookingStatus.BOOKING_CANCELLED: "red",
    BookingStatus.GUEST_CANCELLED: "rose",
}

ELIGIBILITY_COLORS = {
    EligibilityStatus.PENDING_ELIGIBILITY: "amber",
    EligibilityStatus.ELIGIBLE: "green",
    EligibilityStatus.INELIGIBLE: "red",
}

# Names written to the status log for staff-driven transitions.
STATUS_LOG_ALIASES = {
    BookingStatus.BOOKING_CONFIRMED: "confirmed",
    BookingStatus.BOOKING_CANCELLED: "canceled",
    BookingStatus.GUEST_CANCELLED: "guest_canceled",
}


@dataclass(frozen=True)
class StatusValue:
    """Decoded status tuple.

    Attributes:
        name: Machine name (a BookingStatus or EligibilityStatus value)
        label: Human-readable label
        color: Display colour
    """

    name: str
    label: str
    color: str

    def to_dict(self) -> dict:
        return {"name": self.name, "label": self.label, "color": self.color}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, raw) -> "StatusValue":
        """Decode a stored status tuple.

        Accepts the JSON string form or an already decoded dict.

        Raises:
            MalformedStatusError: If the value is not a JSON object with a name
        """
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except ValueError as e:
                raise MalformedStatusError(f"Stored status is not valid JSON: {e}") from e

        if not isinstance(raw, dict) or not raw.get("name"):
            raise MalformedStatusError(f"Stored status has no name: {raw!r}")

        return cls(
            name=raw["name"],
            label=raw.get("label", ""),
            color=raw.get("color", ""),
        )


def booking_status(name: str) -> StatusValue:
    """Build the canonical status tuple for a lifecycle status name.

    Raises:
        InvalidStatusError: If the name is not a known BookingStatus
    """
    try:
        status = BookingStatus(name)
    except ValueError:
        raise InvalidStatusError(f"Unknown booking status '{name}'")
    return StatusValue(status.value, status.label, STATUS_COLORS[status])


def eligibility_status(name: str) -> StatusValue:
    """Build the canonical status tuple for an eligibility name.

    Raises:
        InvalidStatusError: If the name is not a known EligibilityStatus
    """
    try:
        status = EligibilityStatus(name)
    except ValueError:
        raise InvalidStatusError(f"Unknown eligibility status '{name}'")
    return StatusValue(status.value, status.label, ELIGIBILITY_COLORS[status])


def status_log_name(name: str) -> str:
    """Return the status-log entry name for a lifecycle status."""
    try:
        return STATUS_LOG_ALIASES.get(BookingStatus(name), name)
    except ValueError:
        return name
