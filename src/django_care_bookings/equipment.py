"""Equipment reconciliation for booking submissions.

Equipment answers do not go through the question/answer store. Each
change names a category and the equipment offered in it::

    {"category": "mobility", "isDirty": true,
     "equipments": [{"id": 3, "name": "Shower chair", "type": "independent", "value": true}]}

Independent equipment is one choice per category (selecting another
swaps the link); group equipment is a set of on/off items.
"""

import logging

from django.db import transaction

from .amendments import record_equipment_amendment
from .models import Booking, BookingEquipment, Equipment, EquipmentType

logger = logging.getLogger(__name__)

ACKNOWLEDGEMENT_CATEGORY = "acknowledgement"


def _log(booking, should_log, **kwargs):
    if should_log:
        record_equipment_amendment(booking, **kwargs)


def _apply_independent(booking, category, item, existing, should_log, modified_by) -> bool:
    equipment_id = item.get("id")
    current = next(
        (link for link in existing if link.equipment.equipment_type == EquipmentType.INDEPENDENT),
        None,
    )

    if item.get("value"):
        if current is None:
            BookingEquipment.objects.get_or_create(booking=booking, equipment_id=equipment_id)
            _log(
                booking, should_log,
                change_key=category, question="Equipment Added", answer=item.get("name", ""),
                old_answer="", equipment_id=equipment_id, modified_by=modified_by,
            )
            return True
        if current.equipment_id != equipment_id:
            _log(
                booking, should_log,
                change_key=category, question="Equipment Changed", answer=item.get("name", ""),
                old_answer=current.equipment.name, equipment_id=equipment_id,
                old_equipment_id=current.equipment_id, modified_by=modified_by,
            )
            current.equipment_id = equipment_id
            current.save(update_fields=["equipment"])
            return True
        return False

    if current is not None and current.equipment_id == equipment_id:
        _log(
            booking, should_log,
            change_key=category, question="Equipment Removed", answer="",
            old_answer=current.equipment.name, old_equipment_id=current.equipment_id,
            modified_by=modified_by,
        )
        current.delete()
        return True
    return False


def _apply_group(booking, category, item, existing, should_log, modified_by) -> bool:
    equipment_id = item.get("id")
    link = next((link for link in existing if link.equipment_id == equipment_id), None)

    if link is not None and not item.get("value"):
        _log(
            booking, should_log,
            change_key=f"{category}:{equipment_id}", question="Equipment Removed", answer="",
            old_answer=link.equipment.name, old_equipment_id=equipment_id, modified_by=modified_by,
        )
        link.delete()
        return True
    if link is None and item.get("value"):
        BookingEquipment.objects.get_or_create(booking=booking, equipment_id=equipment_id)
        _log(
            booking, should_log,
            change_key=f"{category}:{equipment_id}", question="Equipment Added",
            answer=item.get("name", ""), old_answer="", equipment_id=equipment_id,
            modified_by=modified_by,
        )
        return True
    return False


def apply_equipment_changes(
    booking: Booking,
    changes: list[dict] | None,
    was_complete: bool | None = None,
    modified_by: str | None = None,
) -> bool:
    """Reconcile a booking's equipment links with submitted choices.

    Dirty changes on an already complete booking are recorded as
    equipment amendments.

    Args:
        booking: The booking to update
        changes: Equipment changes per category
        was_complete: Completion state before this submission (defaults to booking.complete)
        modified_by: Display name recorded on amendments

    Returns:
        True if any equipment link was added, swapped or removed
    """
    if not changes:
        return False
    complete = booking.complete if was_complete is None else was_complete
    changed = False

    with transaction.atomic():
        for change in changes:
            category = change.get("category")
            if not category or category == ACKNOWLEDGEMENT_CATEGORY:
                continue

            should_log = bool(change.get("isDirty")) and complete
            for item in change.get("equipments") or []:
                if not Equipment.objects.filter(pk=item.get("id")).exists():
                    logger.warning("Unknown equipment %r in category %s", item.get("id"), category)
                    continue
                existing = list(
                    BookingEquipment.objects.filter(booking=booking, equipment__category=category)
                    .select_related("equipment")
                )
                if item.get("type") == EquipmentType.GROUP:
                    applied = _apply_group(booking, category, item, existing, should_log, modified_by)
                else:
                    applied = _apply_independent(booking, category, item, existing, should_log, modified_by)
                changed = changed or applied

    return changed
