"""Celery tasks for booking background work.

Every background job is a ``{type, payload}`` message handled by
:func:`run_booking_task`. One-shot email handlers check and then set
their ``metainfo`` flag under a row lock, so redelivered messages do not
send twice.
"""

import logging

from celery import Task, shared_task
from django.db import DatabaseError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from . import dispatch
from .conf import pdf_export_debounce
from .email_triggers import (
    booking_email_context,
    trigger_email_per_question,
    trigger_emails,
    trigger_emails_on_booking_confirmed,
    trigger_emails_on_submit,
)
from .emails import BOOKING_AMENDED, BOOKING_AMENDED_ADMIN, send_templated_email
from .models import Booking
from .notifications import dispatch_notification
from .pdf_export import export_booking_pdf
from .recipients import RecipientsCache
from .statuses import BookingStatus

logger = logging.getLogger(__name__)


class BookingTask(Task):
    """Task base holding per-worker collaborators."""

    _recipients = None

    @property
    def recipients(self) -> RecipientsCache:
        if self._recipients is None:
            self._recipients = RecipientsCache()
        return self._recipients


def _get_booking(payload: dict) -> Booking | None:
    booking = Booking.objects.select_related("guest").filter(pk=payload.get("booking_id")).first()
    if booking is None:
        logger.warning("Booking %r not found for background task", payload.get("booking_id"))
    return booking


def _run_once(payload: dict, flag_path: tuple, send) -> dict:
    """Run ``send(booking)`` unless the metainfo flag is already set.

    The flag is set only when ``send`` reports success.
    """
    booking = _get_booking(payload)
    if booking is None:
        return {"success": False, "message": "Booking not found"}

    with transaction.atomic():
        booking = Booking.objects.select_for_update().select_related("guest").get(pk=booking.pk)
        metainfo = booking.metainfo or {}

        if len(flag_path) == 1:
            already = bool(metainfo.get(flag_path[0]))
        else:
            parent = metainfo.get(flag_path[0])
            already = isinstance(parent, dict) and bool(parent.get(flag_path[1]))
        if already:
            return {"success": False, "message": "Emails already triggered"}

        if not send(booking):
            logger.error("Triggering %s failed for booking %s", ".".join(flag_path), booking.pk)
            return {"success": False, "message": "Error triggering emails"}

        if len(flag_path) == 1:
            metainfo[flag_path[0]] = True
        else:
            parent = metainfo.get(flag_path[0])
            parent = dict(parent) if isinstance(parent, dict) else {}
            parent[flag_path[1]] = True
            metainfo[flag_path[0]] = parent
        booking.metainfo = metainfo
        booking.save(update_fields=["metainfo", "updated_at"])

    return {"success": True}


def handle_trigger_emails(task, payload: dict) -> dict:
    return _run_once(payload, ("triggered_emails",), trigger_emails)


def handle_trigger_emails_on_submit(task, payload: dict) -> dict:
    return _run_once(payload, ("triggered_emails", "on_submit"), trigger_emails_on_submit)


def handle_trigger_emails_on_booking_confirmed(task, payload: dict) -> dict:
    return _run_once(payload, ("triggered_emails", "on_booking_confirmed"), trigger_emails_on_booking_confirmed)


def handle_trigger_email_per_question(task, payload: dict) -> dict:
    booking = _get_booking(payload)
    if booking is None:
        return {"success": False, "message": "Booking not found"}
    sent = trigger_email_per_question(booking, payload.get("question", ""), payload.get("answer"))
    return {"success": True, "sent": sent}


def handle_send_amendment_email(task, payload: dict) -> dict:
    """Tell the guest and staff that a confirmed booking was amended."""
    booking = _get_booking(payload)
    if booking is None:
        return {"success": False, "message": "Booking not found"}
    if booking.status_name != BookingStatus.BOOKING_AMENDED:
        logger.info("Booking %s no longer amended, amendment email skipped", booking.pk)
        return {"success": False, "message": "Booking is not amended"}

    context = booking_email_context(booking)
    sent = int(send_templated_email(booking.guest.email, BOOKING_AMENDED, context).sent)
    for address in task.recipients.admin_recipients():
        sent += int(send_templated_email(address, BOOKING_AMENDED_ADMIN, context).sent)
    return {"success": True, "sent": sent}


def handle_generate_pdf_export(task, payload: dict) -> dict:
    booking = _get_booking(payload)
    if booking is None:
        return {"success": False, "message": "Booking not found"}

    exported_at = parse_datetime((booking.metainfo or {}).get("pdf_exported_at") or "")
    if exported_at and (timezone.now() - exported_at).total_seconds() <= pdf_export_debounce():
        return {"success": False, "message": "PDF already exported, try again in some time"}

    stored = export_booking_pdf(booking)
    with transaction.atomic():
        locked = Booking.objects.select_for_update().get(pk=booking.pk)
        locked.metainfo = {
            **(locked.metainfo or {}),
            "pdf_export": True,
            "pdf_exported_at": timezone.now().isoformat(),
        }
        locked.save(update_fields=["metainfo", "updated_at"])
    return {"success": True, "file": stored}


def handle_dispatch_notification(task, payload: dict) -> dict:
    notification = dispatch_notification(
        payload.get("notification_to", ""),
        payload.get("message", ""),
        payload.get("link"),
    )
    return {"success": notification is not None}


def handle_send_templated_email(task, payload: dict) -> dict:
    result = send_templated_email(
        payload.get("recipient", ""),
        payload.get("template_key", ""),
        payload.get("context") or {},
    )
    return {"success": result.sent, "reason": result.reason}


TASK_HANDLERS = {
    dispatch.TRIGGER_EMAILS: handle_trigger_emails,
    dispatch.TRIGGER_EMAILS_ON_SUBMIT: handle_trigger_emails_on_submit,
    dispatch.TRIGGER_EMAILS_ON_BOOKING_CONFIRMED: handle_trigger_emails_on_booking_confirmed,
    dispatch.TRIGGER_EMAIL_PER_QUESTION: handle_trigger_email_per_question,
    dispatch.SEND_AMENDMENT_EMAIL: handle_send_amendment_email,
    dispatch.GENERATE_PDF_EXPORT: handle_generate_pdf_export,
    dispatch.DISPATCH_NOTIFICATION: handle_dispatch_notification,
    dispatch.SEND_TEMPLATED_EMAIL: handle_send_templated_email,
}


@shared_task(
    bind=True,
    base=BookingTask,
    name="care_bookings.run_booking_task",
    autoretry_for=(DatabaseError,),
    retry_backoff=True,
    max_retries=5,
)
def run_booking_task(self, task_type: str, payload: dict) -> dict:
    """Run one booking background job."""
    handler = TASK_HANDLERS.get(task_type)
    if handler is None:
        logger.warning("Unknown booking task type %r ignored", task_type)
        return {"success": False, "message": f"Unknown task type {task_type}"}

    logger.info("Running background task: %s", task_type)
    return handler(self, payload or {})
