"""Booking submission reconciliation.

``reconcile_submission`` is the entry point the booking form posts to:
it stores the submitted answers, decides whether the booking is
complete, records amendments for the dirty changes of a complete booking, moves
the booking's status and queues the follow-up notifications and emails.
"""

import logging
from dataclasses import dataclass

from django.db import transaction

from . import question_keys
from .amendments import ADMIN_ORIGIN, record_amendment
from .changes import Change, all_submitted
from .completeness import is_booking_complete
from .dispatch import (
    GENERATE_PDF_EXPORT,
    SEND_AMENDMENT_EMAIL,
    TRIGGER_EMAILS,
    TRIGGER_EMAILS_ON_BOOKING_CONFIRMED,
    TRIGGER_EMAILS_ON_SUBMIT,
    dispatch_task,
)
from .equipment import apply_equipment_changes
from .models import Booking
from .notifications import generate_notifications, generate_status_change_notifications
from .qa_store import save_batch
from .statuses import BookingStatus, BookingType, booking_status

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of a submission.

    Attributes:
        amended: Whether any answer was recorded as an amendment or any
            equipment link changed
        complete: Whether the booking is complete after the submission
        status: Status name after the submission
    """

    amended: bool
    complete: bool
    status: str


def _modified_by(booking: Booking, actor) -> str:
    if actor is not None:
        return getattr(actor, "email", None) or getattr(actor, "username", None) or str(actor)
    return booking.guest.full_name


def _has_course(booking: Booking) -> bool:
    return bool(question_keys.answer_by_key(booking.qa_pairs(), question_keys.COURSE_SELECTION))


def _queue_one_shot_triggers(booking: Booking) -> None:
    metainfo = booking.metainfo or {}

    if not metainfo.get("notifications"):
        try:
            generate_notifications(booking)
        except Exception:
            logger.exception("Generating notifications failed for booking %s", booking.pk)

    triggered = metainfo.get("triggered_emails")
    payload = {"booking_id": booking.pk}
    if isinstance(triggered, dict):
        if not triggered.get("on_submit"):
            dispatch_task(TRIGGER_EMAILS_ON_SUBMIT, payload)
        if not triggered.get("on_booking_confirmed") and booking.status_name == BookingStatus.BOOKING_CONFIRMED:
            dispatch_task(TRIGGER_EMAILS_ON_BOOKING_CONFIRMED, payload)
    elif not triggered:
        dispatch_task(TRIGGER_EMAILS, payload)


def reconcile_submission(
    booking: Booking,
    changes: list[Change],
    flags: dict | None = None,
    equipment_changes: list[dict] | None = None,
    actor=None,
) -> ReconcileResult:
    """Apply a submitted batch of answers to a booking.

    Args:
        booking: The booking being edited
        changes: Parsed answer changes
        flags: Submission flags; ``{"origin": "admin"}`` marks staff edits
        equipment_changes: Equipment choices per category
        actor: User submitting (None for guests)

    Returns:
        ReconcileResult

    Raises:
        QaBatchWriteError: If the answers could not be stored (nothing persists)
        MalformedStatusError: If the booking's stored status is corrupt
    """
    flags = flags or {}
    origin = flags.get("origin")
    modified_by = _modified_by(booking, actor)

    saved = save_batch(booking, changes)
    equipment_changed = apply_equipment_changes(booking, equipment_changes, modified_by=modified_by)

    complete = is_booking_complete(booking)
    if not (complete and (booking.complete or all_submitted(changes))):
        logger.info("Booking %s not complete, skipping status reconciliation", booking.pk)
        return ReconcileResult(amended=equipment_changed, complete=booking.complete, status=booking.status_name)

    amended = False
    send_amendment_email = False
    ready_to_process = False

    with transaction.atomic():
        locked = Booking.objects.select_for_update().select_related("guest").get(pk=booking.pk)
        prior_status = locked.get_status().name
        update_fields = []

        if not locked.complete:
            locked.complete = True
            update_fields.append("complete")

        for change, qa_pair in saved:
            if change.is_dirty:
                record_amendment(locked, change, qa_pair, origin=origin, modified_by=modified_by)
                amended = True

        if amended and origin != ADMIN_ORIGIN:
            send_amendment_email = prior_status == BookingStatus.BOOKING_CONFIRMED
            locked.set_status(booking_status(BookingStatus.BOOKING_AMENDED))
            locked.log_status(BookingStatus.BOOKING_AMENDED)
            update_fields += ["status", "status_name", "status_logs"]
        elif (
            prior_status == BookingStatus.PENDING_APPROVAL
            and locked.type == BookingType.RETURNING_GUEST
            and not _has_course(locked)
            and locked.status_name != BookingStatus.READY_TO_PROCESS
        ):
            ready_to_process = True
            locked.set_status(booking_status(BookingStatus.READY_TO_PROCESS))
            locked.log_status(BookingStatus.READY_TO_PROCESS)
            update_fields += ["status", "status_name", "status_logs"]

        if update_fields:
            locked.save(update_fields=update_fields + ["updated_at"])

    if locked.status_name != prior_status:
        logger.info("Booking %s status %s -> %s", locked.pk, prior_status, locked.status_name)

    # Side effects below run after the commit; failures are logged only.
    if send_amendment_email:
        dispatch_task(SEND_AMENDMENT_EMAIL, {"booking_id": locked.pk})

    if ready_to_process:
        try:
            generate_status_change_notifications(locked, "ready to process")
        except Exception:
            logger.exception("Status change notification failed for booking %s", locked.pk)

    _queue_one_shot_triggers(locked)
    dispatch_task(GENERATE_PDF_EXPORT, {"booking_id": locked.pk})

    booking.refresh_from_db()
    return ReconcileResult(amended=amended or equipment_changed, complete=True, status=locked.status_name)
