"""Email trigger rules.

An EmailTrigger sends its template when a booking's answers match the
trigger questions. ``triggerEmails*`` tasks evaluate the rules for a
whole booking; approving an amendment evaluates them for one question.
"""

import logging

from . import question_keys
from .completeness import is_booking_complete
from .conf import app_url
from .emails import send_templated_email
from .models import Booking, EmailTrigger, TriggerType

logger = logging.getLogger(__name__)

# Templates sent when staff confirm the booking rather than on submission.
ON_CONFIRMED_TEMPLATES = {"internal-recipient-new-booking"}


def booking_email_context(booking: Booking) -> dict:
    """Merge data shared by booking emails."""
    qa_pairs = list(booking.qa_pairs())
    guest = booking.guest
    return {
        "guest_name": guest.full_name,
        "guest_first_name": guest.first_name,
        "guest_email": guest.email,
        "booking_id": booking.reference_id or str(booking.uuid),
        "booking_link": f"{app_url()}/bookings/{booking.uuid}",
        "arrival_date": (
            booking.preferred_arrival_date.strftime("%d-%m-%Y") if booking.preferred_arrival_date else "-"
        ),
        "departure_date": (
            booking.preferred_departure_date.strftime("%d-%m-%Y") if booking.preferred_departure_date else "-"
        ),
        "funding_source": question_keys.answer_by_key(qa_pairs, question_keys.FUNDING_SOURCE) or "-",
        "answers": {qa.question: qa.answer for qa in qa_pairs},
    }


def _answers(booking: Booking) -> dict:
    return {qa.question: qa.answer for qa in booking.qa_pairs()}


def _is_satisfied(trigger: EmailTrigger, answers: dict) -> bool:
    if not trigger.trigger_questions:
        return True
    return any(
        question in answers and trigger.matches(question, answers[question])
        for question in {item.get("question") for item in trigger.trigger_questions}
    )


def _recipient(trigger: EmailTrigger, answers: dict) -> str:
    # External triggers mail the address given in the first answered trigger question.
    if trigger.trigger_type == TriggerType.EXTERNAL:
        for item in trigger.trigger_questions:
            answer = answers.get(item.get("question"))
            if answer and "@" in answer:
                return answer
    return trigger.recipient


def send_trigger_email(booking: Booking, trigger: EmailTrigger, answers: dict | None = None) -> bool:
    answers = _answers(booking) if answers is None else answers
    recipient = _recipient(trigger, answers)
    if not recipient:
        logger.warning("Email trigger %s has no recipient for booking %s", trigger.pk, booking.pk)
        return False
    result = send_templated_email(recipient, trigger.email_template, booking_email_context(booking))
    return result.sent


def _send_matching(booking: Booking, triggers) -> int:
    answers = _answers(booking)
    sent = 0
    for trigger in triggers:
        if _is_satisfied(trigger, answers) and send_trigger_email(booking, trigger, answers):
            sent += 1
    return sent


def trigger_emails(booking: Booking) -> bool:
    """Send every enabled trigger with a configured recipient.

    Returns:
        False when the booking is not complete (nothing is sent)
    """
    if not is_booking_complete(booking):
        return False
    triggers = EmailTrigger.objects.filter(enabled=True).exclude(recipient="")
    logger.info("Triggered %d email(s) for booking %s", _send_matching(booking, triggers), booking.pk)
    return True


def trigger_emails_on_submit(booking: Booking) -> bool:
    if not is_booking_complete(booking):
        return False
    triggers = EmailTrigger.objects.filter(enabled=True).exclude(email_template__in=ON_CONFIRMED_TEMPLATES)
    logger.info("Triggered %d submit email(s) for booking %s", _send_matching(booking, triggers), booking.pk)
    return True


def trigger_emails_on_booking_confirmed(booking: Booking) -> bool:
    if not is_booking_complete(booking):
        return False
    triggers = EmailTrigger.objects.filter(enabled=True, email_template__in=ON_CONFIRMED_TEMPLATES)
    logger.info("Triggered %d confirmation email(s) for booking %s", _send_matching(booking, triggers), booking.pk)
    return True


def triggers_for_question(question: str) -> list[EmailTrigger]:
    """Enabled triggers whose question set contains ``question``."""
    return [t for t in EmailTrigger.objects.filter(enabled=True) if t.has_question(question)]


def trigger_email_per_question(booking: Booking, question: str, answer) -> int:
    """Send every enabled trigger matching one question's answer.

    Returns:
        Number of emails sent
    """
    answers = _answers(booking)
    sent = 0
    for trigger in triggers_for_question(question):
        if trigger.matches(question, answer) and send_trigger_email(booking, trigger, answers):
            sent += 1
    return sent
