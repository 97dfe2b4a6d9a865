"""Pytest configuration for django-care-bookings tests."""

from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def queued():
    """Capture background tasks instead of sending them to the broker."""
    calls = []

    def record(task_type, payload, countdown):
        calls.append({"type": task_type, "payload": payload, "countdown": countdown})

    with patch("django_care_bookings.dispatch._submit", side_effect=record):
        yield calls


@pytest.fixture
def guest(db):
    """Create a test Guest."""
    from django_care_bookings.models import Guest

    return Guest.objects.create(
        first_name="Alice",
        last_name="Smith",
        email="alice@example.com",
    )


@pytest.fixture
def staff_user(db):
    """Create a staff user."""
    from django.contrib.auth import get_user_model

    User = get_user_model()
    return User.objects.create_user(
        username="jane",
        email="jane@example.com",
        password="testpass123",
        is_staff=True,
    )


@pytest.fixture
def template(db):
    """Create an empty booking template."""
    from django_care_bookings.models import BookingTemplate

    return BookingTemplate.objects.create(name="Stay Request")


@pytest.fixture
def questions(template):
    """Create the template questions, keyed by short name."""
    from django_care_bookings import question_keys
    from django_care_bookings.models import Question, QuestionDependency, QuestionType

    def make(order, section_label, question, question_type, required=True, **extra):
        return Question.objects.create(
            template=template,
            order=order,
            section_label=section_label,
            question=question,
            question_type=question_type,
            required=required,
            **extra,
        )

    q = {
        "name": make(1, "Personal", "Full name", QuestionType.TEXT, question_key="full-name"),
        "funding": make(
            2, "Personal", "How will your stay be funded?", QuestionType.RADIO,
            question_key=question_keys.FUNDING_SOURCE,
            options=[{"label": "Private", "value": "Private"}, {"label": "NDIS", "value": "NDIS"}],
        ),
        "check_in": make(
            3, "Stay", "Check-in date", QuestionType.DATE, question_key=question_keys.CHECK_IN_DATE
        ),
        "diet": make(4, "Stay", "Do you have dietary requirements?", QuestionType.RADIO),
        "diet_details": make(5, "Stay", "Please describe your dietary requirements", QuestionType.TEXTAREA),
        "interests": make(6, "Stay", "Which activities interest you?", QuestionType.CHECKBOX, required=False),
    }
    QuestionDependency.objects.create(question=q["diet_details"], dependence=q["diet"], answer="Yes")
    return q


@pytest.fixture
def booking(guest, template, questions):
    """Create a booking with one section per template section."""
    from django_care_bookings.bookings import create_booking

    return create_booking(guest, template)


@pytest.fixture
def completed_booking(booking, questions, queued):
    """A booking whose required questions were all submitted."""
    from django_care_bookings.changes import parse_changes
    from django_care_bookings.reconciler import reconcile_submission
    from tests.helpers import complete_payload

    reconcile_submission(booking, parse_changes(complete_payload(booking, questions)))
    queued.clear()
    return booking


@pytest.fixture
def confirmed_booking(completed_booking):
    """A completed booking that staff have confirmed."""
    from django_care_bookings.statuses import BookingStatus, booking_status

    completed_booking.set_status(booking_status(BookingStatus.BOOKING_CONFIRMED))
    completed_booking.save()
    return completed_booking


@pytest.fixture
def equipment(db):
    """Create equipment in an independent and a group category."""
    from django_care_bookings.models import Equipment, EquipmentType

    return {
        "shower_chair": Equipment.objects.create(
            name="Shower chair", category="mobility", equipment_type=EquipmentType.INDEPENDENT
        ),
        "commode": Equipment.objects.create(
            name="Commode chair", category="mobility", equipment_type=EquipmentType.INDEPENDENT
        ),
        "sling": Equipment.objects.create(
            name="Hoist sling", category="bedroom", equipment_type=EquipmentType.GROUP
        ),
        "bed_rail": Equipment.objects.create(
            name="Bed rail", category="bedroom", equipment_type=EquipmentType.GROUP
        ),
    }
