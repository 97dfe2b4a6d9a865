"""Human-readable booking reference allocation."""

from django.db import transaction

from .conf import reference_start
from .models import ReferenceCounter

BOOKING_SCOPE = "booking"


def next_reference_id(scope: str = BOOKING_SCOPE) -> str:
    """Allocate the next reference id atomically.

    Uses select_for_update() so concurrent bookings never share a
    reference. The first allocation for a scope returns
    ``CARE_BOOKINGS_REFERENCE_START + 1``.

    Returns:
        The reference as a string, e.g. "100001"
    """
    with transaction.atomic():
        counter = ReferenceCounter.objects.select_for_update().filter(scope=scope).first()
        if counter is None:
            counter = ReferenceCounter.objects.create(scope=scope, current_value=reference_start())
            counter = ReferenceCounter.objects.select_for_update().get(pk=counter.pk)

        counter.current_value += 1
        counter.save(update_fields=["current_value"])
        return str(counter.current_value)
