"""Staff-driven status and eligibility changes."""

import logging

from django.db import transaction

from .audit import record_booking_event
from .conf import info_email
from .dispatch import GENERATE_PDF_EXPORT, SEND_TEMPLATED_EMAIL, dispatch_task
from .email_triggers import booking_email_context
from .emails import (
    BOOKING_APPROVED,
    BOOKING_CONFIRMED,
    BOOKING_CONFIRMED_ADMIN,
    BOOKING_DECLINED,
    GUEST_CANCELLATION_REQUEST,
    GUEST_CANCELLATION_REQUEST_ADMIN,
)
from .models import Booking, Guest
from .notifications import generate_status_change_notifications
from .statuses import (
    BookingStatus,
    BookingType,
    EligibilityStatus,
    StatusValue,
    booking_status,
    eligibility_status,
    status_log_name,
)

logger = logging.getLogger(__name__)

# Wording used in status change notifications.
NOTIFICATION_WORDING = {
    BookingStatus.BOOKING_CONFIRMED: "confirmed",
    BookingStatus.BOOKING_CANCELLED: "cancelled",
    BookingStatus.GUEST_CANCELLED: "cancelled",
    BookingStatus.ON_HOLD: "on hold",
    BookingStatus.IN_PROGRESS: "in progress",
    BookingStatus.READY_TO_PROCESS: "ready to process",
    BookingStatus.PENDING_APPROVAL: "pending approval",
    BookingStatus.BOOKING_AMENDED: "amended",
}

# Statuses that leave a named entry in the status log when set by staff.
LOGGED_STATUSES = {
    BookingStatus.BOOKING_CONFIRMED,
    BookingStatus.BOOKING_CANCELLED,
    BookingStatus.GUEST_CANCELLED,
    BookingStatus.ON_HOLD,
}


def _queue_email(to: str, template_key: str, context: dict) -> None:
    dispatch_task(SEND_TEMPLATED_EMAIL, {"recipient": to, "template_key": template_key, "context": context})


def _notify(booking: Booking, wording: str) -> None:
    try:
        generate_status_change_notifications(booking, wording)
    except Exception:
        logger.exception("Status change notification failed for booking %s", booking.pk)


def change_status(booking: Booking, status: StatusValue, actor=None) -> Booking:
    """Set a booking's lifecycle status on behalf of staff.

    Args:
        booking: The booking to update
        status: Requested status (only its name is trusted)
        actor: Staff user making the change

    Returns:
        The updated booking

    Raises:
        InvalidStatusError: If the status name is unknown
    """
    new_status = booking_status(status.name)
    name = BookingStatus(new_status.name)

    with transaction.atomic():
        locked = Booking.objects.select_for_update().select_related("guest").get(pk=booking.pk)
        old_name = locked.status_name

        if name in LOGGED_STATUSES:
            locked.log_status(status_log_name(name))
        if name == BookingStatus.BOOKING_CONFIRMED:
            # A new confirmation re-arms the one-shot confirmation emails.
            triggered = locked.metainfo.get("triggered_emails")
            if isinstance(triggered, dict):
                locked.metainfo["triggered_emails"] = {**triggered, "on_booking_confirmed": False}

        locked.set_status(new_status)
        locked.save(update_fields=["status", "status_name", "status_logs", "metainfo", "updated_at"])

        record_booking_event(
            locked,
            "status_changed",
            actor=actor,
            description=f"Status changed to {new_status.label}",
            old_value={"status": old_name},
            new_value={"status": new_status.name},
        )

    guest = locked.guest
    context = booking_email_context(locked)
    admin_context = {**context, "guest_name": guest.full_name}

    if name == BookingStatus.BOOKING_CONFIRMED:
        dispatch_task(GENERATE_PDF_EXPORT, {"booking_id": locked.pk})
        _queue_email(guest.email, BOOKING_CONFIRMED, {**context, "guest_name": guest.first_name})
        _queue_email(info_email(), BOOKING_CONFIRMED_ADMIN, admin_context)
    elif name == BookingStatus.GUEST_CANCELLED:
        _queue_email(guest.email, GUEST_CANCELLATION_REQUEST, {**context, "guest_name": guest.first_name})
        _queue_email(info_email(), GUEST_CANCELLATION_REQUEST_ADMIN, admin_context)

    if name != BookingStatus.ENQUIRY:
        _notify(locked, NOTIFICATION_WORDING.get(name, new_status.label.lower()))

    logger.info("Booking %s status %s -> %s", locked.pk, old_name, new_status.name)
    booking.refresh_from_db()
    return locked


def change_eligibility(booking: Booking, eligibility: StatusValue, actor=None) -> Booking:
    """Set a booking's eligibility on behalf of staff.

    Eligible bookings become First-Time Guest bookings and their guest is
    activated. Ineligible bookings are cancelled and their guest
    deactivated.

    Raises:
        InvalidStatusError: If the eligibility name is unknown
    """
    new_eligibility = eligibility_status(eligibility.name)
    name = EligibilityStatus(new_eligibility.name)

    with transaction.atomic():
        locked = Booking.objects.select_for_update().select_related("guest").get(pk=booking.pk)
        old_name = locked.eligibility_name
        update_fields = ["eligibility", "eligibility_name", "updated_at"]

        if name == EligibilityStatus.ELIGIBLE:
            locked.type = BookingType.FIRST_TIME_GUEST
            locked.log_status(EligibilityStatus.ELIGIBLE)
            update_fields += ["type", "status_logs"]
            Guest.objects.filter(pk=locked.guest_id, active=False).update(active=True)
        elif name == EligibilityStatus.INELIGIBLE:
            locked.set_status(booking_status(BookingStatus.BOOKING_CANCELLED))
            locked.log_status(status_log_name(BookingStatus.BOOKING_CANCELLED))
            update_fields += ["status", "status_name", "status_logs"]
            Guest.objects.filter(pk=locked.guest_id).update(active=False)

        locked.set_eligibility(new_eligibility)
        locked.save(update_fields=update_fields)

        record_booking_event(
            locked,
            "eligibility_changed",
            actor=actor,
            description=f"Eligibility changed to {new_eligibility.label}",
            old_value={"eligibility": old_name},
            new_value={"eligibility": new_eligibility.name},
        )

    guest = locked.guest
    if name == EligibilityStatus.ELIGIBLE:
        _queue_email(
            guest.email,
            BOOKING_APPROVED,
            {"guest_name": guest.first_name, "booking_id": locked.reference_id or str(locked.uuid)},
        )
        _notify(locked, "eligible")
    elif name == EligibilityStatus.INELIGIBLE:
        _queue_email(guest.email, BOOKING_DECLINED, {"guest_name": guest.first_name})
        _notify(locked, "ineligible")

    logger.info("Booking %s eligibility %s -> %s", locked.pk, old_name, new_eligibility.name)
    booking.refresh_from_db()
    return locked
