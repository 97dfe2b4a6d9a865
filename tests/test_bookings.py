"""Tests for booking creation, references and the audit trail."""

import pytest

from django_care_bookings.audit import record_booking_event
from django_care_bookings.bookings import create_booking
from django_care_bookings.models import BookingAuditEntry, Section
from django_care_bookings.references import next_reference_id
from django_care_bookings.statuses import BookingStatus, BookingType, EligibilityStatus


@pytest.mark.django_db
class TestNextReferenceId:
    """Tests for next_reference_id()."""

    def test_sequential_from_start(self):
        assert [next_reference_id() for _ in range(3)] == ["100001", "100002", "100003"]

    def test_scopes_are_independent(self):
        next_reference_id()
        next_reference_id()

        assert next_reference_id("enquiry") == "100001"

    def test_start_is_configurable(self, settings):
        settings.CARE_BOOKINGS_REFERENCE_START = 5000

        assert next_reference_id() == "5001"


@pytest.mark.django_db
class TestCreateBooking:
    """Tests for create_booking()."""

    def test_defaults(self, guest):
        booking = create_booking(guest)

        assert booking.reference_id == "100001"
        assert booking.type == BookingType.ENQUIRY
        assert booking.status_name == BookingStatus.ENQUIRY
        assert booking.eligibility_name == EligibilityStatus.PENDING_ELIGIBILITY
        assert booking.complete is False
        assert booking.metainfo["notifications"] is False
        assert [entry["status"] for entry in booking.status_logs] == ["enquiry"]

    def test_sections_follow_template(self, booking):
        assert list(booking.sections.values_list("label", "order")) == [("Personal", 0), ("Stay", 1)]

    def test_no_template_no_sections(self, guest):
        booking = create_booking(guest)

        assert not Section.objects.filter(booking=booking).exists()

    def test_booking_type(self, guest, template, questions):
        booking = create_booking(guest, template, booking_type=BookingType.RETURNING_GUEST)

        assert booking.type == BookingType.RETURNING_GUEST

    def test_soft_delete(self, booking):
        from django_care_bookings.models import Booking

        booking.delete()

        assert not Booking.objects.filter(pk=booking.pk).exists()
        assert Booking.all_objects.filter(pk=booking.pk).exists()


@pytest.mark.django_db
class TestBookingAudit:
    """Tests for the booking audit trail."""

    def test_system_event_has_no_actor(self, booking):
        entry = record_booking_event(booking, "status_changed", description="Automatic")

        assert entry.actor is None
        assert entry.actor_display == ""

    def test_entries_are_immutable(self, booking, staff_user):
        entry = record_booking_event(booking, "status_changed", actor=staff_user)

        entry.description = "rewritten"
        with pytest.raises(ValueError):
            entry.save()
        with pytest.raises(ValueError):
            entry.delete()

        assert BookingAuditEntry.objects.get(pk=entry.pk).description == ""
