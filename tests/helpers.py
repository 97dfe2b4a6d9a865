"""Helpers for building answer payloads in tests."""

from django_care_bookings.models import QaPair


def section_for(booking, question):
    return booking.sections.get(label=question.section_label)


def answer(booking, question, value):
    """Store an answer directly, bypassing the reconciler."""
    return QaPair.objects.create(
        section=section_for(booking, question),
        template_question=question,
        question=question.question,
        question_type=question.question_type,
        answer=value,
    )


def payload(booking, question, value, **extra):
    """Build a submitted change the way the booking form posts it."""
    data = {
        "question": question.question,
        "question_type": question.question_type,
        "question_id": question.pk,
        "section_id": section_for(booking, question).pk,
        "answer": value,
    }
    data.update(extra)
    return data


def complete_payload(booking, questions):
    """Answers to every unconditionally required question."""
    return [
        payload(booking, questions["name"], "Alice Smith"),
        payload(booking, questions["funding"], "Private"),
        payload(booking, questions["check_in"], "2025-03-01"),
        payload(booking, questions["diet"], "No"),
    ]
