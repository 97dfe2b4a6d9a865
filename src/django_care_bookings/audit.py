"""Booking audit trail.

Usage:
    from django_care_bookings.audit import record_booking_event

    record_booking_event(booking, "status_changed", actor=request.user,
                         old_value={"status": "enquiry"},
                         new_value={"status": "booking_confirmed"})
"""

import logging

from .models import BookingAuditEntry

logger = logging.getLogger(__name__)


def _get_actor_display(actor):
    if not actor:
        return ""
    if getattr(actor, "email", None):
        return actor.email
    if getattr(actor, "username", None):
        return actor.username
    return str(actor)


def record_booking_event(
    booking,
    action: str,
    actor=None,
    description: str = "",
    old_value=None,
    new_value=None,
) -> BookingAuditEntry:
    """Append an audit entry for a booking.

    Args:
        booking: The booking acted on
        action: Action type (status_changed, eligibility_changed, amendment_approved, ...)
        actor: User who performed the action (None for system actions)
        description: Human-readable summary
        old_value: Value before the action
        new_value: Value after the action

    Returns:
        The created BookingAuditEntry
    """
    is_user = actor is not None and getattr(actor, "is_authenticated", False)
    entry = BookingAuditEntry.objects.create(
        booking=booking,
        actor=actor if is_user else None,
        actor_display=_get_actor_display(actor),
        action=action,
        description=description,
        old_value=old_value,
        new_value=new_value,
    )
    logger.debug("Audit %s on booking %s by %s", action, booking.pk, entry.actor_display or "system")
    return entry
