"""Fire-and-forget submission of booking background tasks.

Tasks are ``{type, payload}`` messages handled by
:func:`django_care_bookings.tasks.run_booking_task`. Delivery, retries
and backoff are the queue's concern; a failed submission is logged and
reported to the caller as ``False`` but never raised.
"""

import logging

logger = logging.getLogger(__name__)

TRIGGER_EMAILS = "triggerEmails"
TRIGGER_EMAILS_ON_SUBMIT = "triggerEmailsOnSubmit"
TRIGGER_EMAILS_ON_BOOKING_CONFIRMED = "triggerEmailsOnBookingConfirmed"
TRIGGER_EMAIL_PER_QUESTION = "triggerEmailPerQuestion"
SEND_AMENDMENT_EMAIL = "sendAmendmentEmail"
GENERATE_PDF_EXPORT = "generatePDFExport"
DISPATCH_NOTIFICATION = "dispatchNotification"
SEND_TEMPLATED_EMAIL = "sendTemplatedEmail"


def _submit(task_type: str, payload: dict, countdown: int | None) -> None:
    from .tasks import run_booking_task

    run_booking_task.apply_async(args=[task_type, payload], countdown=countdown)


def dispatch_task(task_type: str, payload: dict, countdown: int | None = None) -> bool:
    """Queue a background task.

    Args:
        task_type: One of the task type constants in this module
        payload: JSON-serialisable task arguments
        countdown: Seconds to wait before the task becomes due

    Returns:
        True if the queue accepted the task
    """
    try:
        _submit(task_type, payload, countdown)
    except Exception as e:
        logger.exception("Failed to queue task %s: %s", task_type, e)
        return False

    logger.debug("Queued task %s payload=%s countdown=%s", task_type, payload, countdown)
    return True
