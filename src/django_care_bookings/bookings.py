"""Booking creation."""

import logging

from django.db import transaction

from .models import Booking, BookingTemplate, Guest, Question, Section
from .references import next_reference_id
from .statuses import BookingStatus, BookingType

logger = logging.getLogger(__name__)


def create_booking(
    guest: Guest,
    template: BookingTemplate | None = None,
    booking_type: str = BookingType.ENQUIRY,
    **fields,
) -> Booking:
    """Create a booking with a reference id and one section per template section.

    Args:
        guest: Owner of the booking
        template: Questionnaire the booking is filled against
        booking_type: Enquiry, First-Time Guest or Returning Guest
        **fields: Extra Booking fields (preferred dates, ...)

    Returns:
        The created Booking, its status log starting with its initial status
    """
    with transaction.atomic():
        booking = Booking(
            guest=guest,
            template=template,
            type=booking_type,
            reference_id=next_reference_id(),
            **fields,
        )
        booking.log_status(booking.status_name or BookingStatus.ENQUIRY)
        booking.save()

        if template is not None:
            labels = []
            for label in Question.objects.filter(template=template).values_list("section_label", flat=True):
                if label not in labels:
                    labels.append(label)
            Section.objects.bulk_create(
                Section(booking=booking, label=label, order=order) for order, label in enumerate(labels)
            )

    logger.info("Created booking %s for guest %s", booking.reference_id, guest.pk)
    return booking
