"""Tests for the booking summary export."""

from unittest.mock import patch

import pytest
from django.core.files.storage import default_storage

from django_care_bookings.pdf_export import BookingSummaryPrintService, export_booking_pdf


@pytest.mark.django_db
class TestBookingSummaryPrintService:
    """Tests for BookingSummaryPrintService."""

    def test_html_lists_sections_and_answers(self, completed_booking):
        html = BookingSummaryPrintService(completed_booking).render_html()

        assert f"Booking {completed_booking.reference_id}" in html
        assert "Personal" in html
        assert "Full name" in html
        assert "Alice Smith" in html
        assert "2025-03-01" in html

    def test_context_carries_statuses(self, completed_booking):
        context = BookingSummaryPrintService(completed_booking).get_context()

        assert context["status"].name == "enquiry"
        assert context["eligibility"].name == "pending_eligibility"
        assert [section["label"] for section in context["sections"]] == ["Personal", "Stay"]

    def test_filename(self, booking):
        assert BookingSummaryPrintService(booking).get_filename() == f"booking-exports/booking-{booking.uuid}.pdf"


@pytest.mark.django_db
class TestExportBookingPdf:
    """Tests for export_booking_pdf()."""

    def test_stores_pdf(self, booking):
        with patch.object(BookingSummaryPrintService, "render_pdf", return_value=b"%PDF-1.4 first"):
            name = export_booking_pdf(booking)

        assert name == f"booking-exports/booking-{booking.uuid}.pdf"
        with default_storage.open(name) as stored:
            assert stored.read() == b"%PDF-1.4 first"

    def test_replaces_previous_export(self, booking):
        with patch.object(BookingSummaryPrintService, "render_pdf", return_value=b"%PDF-1.4 first"):
            export_booking_pdf(booking)
        with patch.object(BookingSummaryPrintService, "render_pdf", return_value=b"%PDF-1.4 second"):
            name = export_booking_pdf(booking)

        assert name == f"booking-exports/booking-{booking.uuid}.pdf"
        with default_storage.open(name) as stored:
            assert stored.read() == b"%PDF-1.4 second"
