"""Booking completeness evaluation."""

import logging

from . import question_keys
from .models import Booking, Question, QuestionType

logger = logging.getLogger(__name__)


def _is_required(question: Question, answers_by_question: dict, ndis_funded: bool) -> bool:
    if question.question_type == QuestionType.EQUIPMENT or not question.required:
        return False
    if question.second_booking_only or question.ndis_only:
        return False
    if (
        ndis_funded
        and question.question_type == QuestionType.RADIO
        and question.question_key == question_keys.ACCOMMODATION_PACKAGE_FULL
    ):
        return False

    dependencies = list(question.dependencies.all())
    if not dependencies:
        return True

    # Conditional question: required only once one of its triggers is answered.
    return any(
        answers_by_question.get(dependency.dependence_id)
        and answers_by_question[dependency.dependence_id] == dependency.answer
        for dependency in dependencies
    )


def required_questions(booking: Booking) -> list[Question]:
    """Template questions that must be answered given the current answers."""
    if booking.template_id is None:
        return []

    qa_pairs = list(booking.qa_pairs())
    answers_by_question = {
        qa.template_question_id: qa.answer for qa in qa_pairs if qa.template_question_id
    }
    ndis_funded = question_keys.is_ndis_funded(qa_pairs)

    questions = Question.objects.filter(template_id=booking.template_id).prefetch_related("dependencies")
    return [q for q in questions if _is_required(q, answers_by_question, ndis_funded)]


def is_booking_complete(booking: Booking) -> bool:
    """Whether every required template question has a non-empty answer.

    Read-only; evaluates the booking's current sections and answers.
    """
    answered = {
        qa.template_question_id
        for qa in booking.qa_pairs()
        if qa.template_question_id and qa.answer
    }
    missing = [q for q in required_questions(booking) if q.pk not in answered]

    if missing:
        logger.debug(
            "Booking %s incomplete, %d required question(s) unanswered: %s",
            booking.pk,
            len(missing),
            ", ".join(q.question[:40] for q in missing),
        )
        return False
    return True
