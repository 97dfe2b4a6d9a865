"""Booking summary PDF export.

Renders the booking's sections and answers to HTML with a Django
template and converts the HTML to PDF with WeasyPrint. The PDF is
stored under ``booking-exports/`` in the default storage.
"""

import io
import logging

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.template.loader import render_to_string
from django.utils import timezone

from .models import Booking, QaPair

logger = logging.getLogger(__name__)

EXPORT_DIR = "booking-exports"


class BookingSummaryPrintService:
    """Render a booking summary to HTML and PDF."""

    TEMPLATE = "care_bookings/booking_summary.html"

    def __init__(self, booking: Booking):
        self.booking = booking

    def get_context(self) -> dict:
        booking = self.booking
        sections = []
        for section in booking.sections.all():
            answers = QaPair.objects.filter(section=section).order_by("pk")
            sections.append({"label": section.label, "qa_pairs": list(answers)})

        return {
            "booking": booking,
            "reference_id": booking.reference_id or str(booking.uuid),
            "guest": booking.guest,
            "status": booking.get_status(),
            "eligibility": booking.get_eligibility(),
            "sections": sections,
            "generated_at": timezone.now(),
        }

    def render_html(self) -> str:
        return render_to_string(self.TEMPLATE, self.get_context())

    def render_pdf(self) -> bytes:
        """Render the summary to PDF bytes."""
        # Imported here to keep WeasyPrint's start-up cost off module import.
        from weasyprint import HTML

        pdf_buffer = io.BytesIO()
        HTML(string=self.render_html()).write_pdf(pdf_buffer)
        return pdf_buffer.getvalue()

    def get_filename(self) -> str:
        return f"{EXPORT_DIR}/booking-{self.booking.uuid}.pdf"


def export_booking_pdf(booking: Booking) -> str:
    """Render and store the booking's summary PDF, replacing any previous one.

    Returns:
        Storage name of the stored PDF
    """
    service = BookingSummaryPrintService(booking)
    name = service.get_filename()
    content = service.render_pdf()

    if default_storage.exists(name):
        default_storage.delete(name)
    stored = default_storage.save(name, ContentFile(content))
    logger.info("Exported booking %s summary to %s (%d bytes)", booking.pk, stored, len(content))
    return stored
