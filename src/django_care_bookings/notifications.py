"""In-app notification dispatch.

Notifications are generated from NotificationLibrary entries. Ones that
are due are written immediately; ones scheduled in the future are handed
to the task queue with a countdown.
"""

import logging
from datetime import datetime, timedelta

from django.contrib.auth import get_user_model
from django.contrib.contenttypes.models import ContentType
from django.db import transaction
from django.utils import timezone

from .conf import app_url
from .dispatch import DISPATCH_NOTIFICATION, dispatch_task
from .models import AlertType, Booking, Guest, Notification, NotificationLibrary

logger = logging.getLogger(__name__)

STATUS_CHANGE_LIBRARY = "Booking Status Change"


def _find_notifyee(email: str):
    User = get_user_model()
    user = User.objects.filter(email__iexact=email).first()
    if user is not None:
        return user
    return Guest.objects.filter(email__iexact=email).first()


def dispatch_notification(notification_to: str, message: str, link: str | None = None) -> Notification | None:
    """Write a notification for the staff user or guest with this email.

    Staff users take precedence over guests. Unknown addresses are logged
    and nothing is written.
    """
    notifyee = _find_notifyee(notification_to) if notification_to else None
    if notifyee is None:
        logger.error(
            "Notification recipient not found, notification_to must be a user or guest email: %r",
            notification_to,
        )
        return None

    notification = Notification.objects.create(
        message=message,
        link=link,
        notifyee_content_type=ContentType.objects.get_for_model(notifyee),
        notifyee_id=str(notifyee.pk),
    )
    logger.info("Notification sent to %s", notification_to)
    return notification


def notification_handler(
    notification_to: str,
    message: str,
    link: str | None,
    dispatch_date: datetime,
) -> Notification | None:
    """Dispatch now if due, otherwise defer to the queue.

    Returns:
        The notification when written immediately, None when deferred
    """
    now = timezone.now()
    if dispatch_date > now:
        countdown = int((dispatch_date - now).total_seconds())
        dispatch_task(
            DISPATCH_NOTIFICATION,
            {"notification_to": notification_to, "message": message, "link": link},
            countdown=countdown,
        )
        return None
    return dispatch_notification(notification_to, message, link)


def booking_link(booking: Booking) -> str:
    return f"{app_url()}/bookings/{booking.uuid}"


def generate_notifications(booking: Booking) -> int:
    """Apply every enabled notification library entry to a booking.

    Sets ``metainfo["notifications"]`` so the defaults are generated once.

    Returns:
        Number of notifications handled (immediate or deferred)
    """
    guest_name = booking.guest.full_name
    arrival_date = (
        booking.preferred_arrival_date.strftime("%d/%m/%Y") if booking.preferred_arrival_date else "-"
    )
    link = booking_link(booking)
    now = timezone.now()

    libraries = NotificationLibrary.objects.filter(enabled=True).exclude(name=STATUS_CHANGE_LIBRARY)
    count = 0
    for library in libraries:
        message = library.notification.replace("[guest_name]", guest_name)
        message = message.replace("[arrival_date]", arrival_date)
        message = message.replace("[booking_id]", booking.reference_id or "")
        notification_handler(
            notification_to=library.notification_to,
            message=message,
            link=link,
            dispatch_date=now + timedelta(days=library.date_factor),
        )
        count += 1

    with transaction.atomic():
        locked = Booking.objects.select_for_update().get(pk=booking.pk)
        locked.metainfo = {**(locked.metainfo or {}), "notifications": True}
        locked.save(update_fields=["metainfo", "updated_at"])
    booking.metainfo = locked.metainfo
    return count


def status_change_message(template: str, booking: Booking, status_label: str, alert_type: str) -> str:
    message = template
    if alert_type == AlertType.ADMIN:
        message = message.replace("[guest_name]", booking.guest.full_name)
    message = message.replace("[booking_id]", booking.reference_id or "")

    if status_label == "ready to process":
        return message.replace("[has been] [status]", "has been received and is awaiting processing")
    if status_label == "pending approval":
        return message.replace("[has been]", "has been marked").replace("[status]", status_label)
    return message.replace("[has been]", "has been").replace("[status]", status_label)


def generate_status_change_notifications(booking: Booking, status_label: str) -> int:
    """Notify staff (admin entries) and the guest (guest entries) of a status change.

    Args:
        booking: The booking whose status changed
        status_label: Lower-case wording of the new status, e.g. "ready to process"
    """
    link = booking_link(booking)
    now = timezone.now()
    count = 0

    for library in NotificationLibrary.objects.filter(enabled=True, name=STATUS_CHANGE_LIBRARY):
        is_admin = library.alert_type == AlertType.ADMIN
        notification_handler(
            notification_to=library.notification_to if is_admin else booking.guest.email,
            message=status_change_message(library.notification, booking, status_label, library.alert_type),
            link=link if is_admin else None,
            dispatch_date=now + timedelta(days=library.date_factor),
        )
        count += 1
    return count
