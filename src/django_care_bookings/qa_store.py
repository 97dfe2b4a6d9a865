"""Question/answer batch persistence.

All writes of a batch happen in one transaction: either every change is
applied or none is. Uploaded files of deleted answers are removed from
storage after the commit.
"""

import logging

from django.core.files.storage import default_storage
from django.db import DatabaseError, transaction

from .changes import Change
from .exceptions import QaBatchWriteError
from .models import Booking, QaPair, Question, QuestionType, Section

logger = logging.getLogger(__name__)


def _delete_uploaded_file(path: str) -> None:
    try:
        default_storage.delete(path)
    except Exception as e:
        logger.warning("Could not delete uploaded file %s: %s", path, e)


def _template_question_id(booking: Booking, change: Change) -> int | None:
    if change.question_id:
        return change.question_id
    if booking.template_id is None:
        return None
    return (
        Question.objects.filter(template_id=booking.template_id, question=change.question)
        .values_list("pk", flat=True)
        .first()
    )


def _apply_change(booking: Booking, change: Change, section_ids: set) -> QaPair | None:
    if change.section_id not in section_ids:
        raise QaBatchWriteError(
            f"Section {change.section_id} does not belong to booking {booking.pk}"
        )

    if change.delete:
        qa_pair = QaPair.objects.filter(section_id=change.section_id, question=change.question).first()
        if qa_pair is not None:
            if qa_pair.question_type == QuestionType.FILE_UPLOAD and qa_pair.answer:
                # Files go only once the whole batch has committed.
                path = qa_pair.answer
                transaction.on_commit(lambda: _delete_uploaded_file(path))
            qa_pair.delete()
        return None

    answer = change.stored_answer

    if change.id is not None:
        qa_pair = QaPair.objects.filter(pk=change.id, section_id=change.section_id).first()
        if qa_pair is not None:
            qa_pair.answer = answer
            qa_pair.save(update_fields=["answer", "updated_at"])
            return qa_pair

    qa_pair, created = QaPair.objects.get_or_create(
        section_id=change.section_id,
        question=change.question,
        defaults={
            "answer": answer,
            "question_type": change.question_type,
            "template_question_id": _template_question_id(booking, change),
        },
    )
    if not created:
        qa_pair.answer = answer
        qa_pair.save(update_fields=["answer", "updated_at"])
    return qa_pair


def save_batch(booking: Booking, changes: list[Change]) -> list[tuple[Change, QaPair | None]]:
    """Apply a batch of answer changes to a booking.

    Equipment changes are skipped; they are reconciled separately.
    Deleted answers yield ``None`` in the result.

    Args:
        booking: The booking the sections belong to
        changes: Parsed changes

    Returns:
        ``(change, qa_pair)`` for every applied change, in order

    Raises:
        QaBatchWriteError: If any write fails; nothing from the batch persists
    """
    section_ids = set(Section.objects.filter(booking=booking).values_list("pk", flat=True))
    results = []

    try:
        with transaction.atomic():
            for change in changes:
                if change.is_equipment:
                    continue
                results.append((change, _apply_change(booking, change, section_ids)))
    except QaBatchWriteError:
        logger.warning("QA batch for booking %s rejected", booking.pk)
        raise
    except (DatabaseError, ValueError) as e:
        logger.exception("QA batch for booking %s rolled back", booking.pk)
        raise QaBatchWriteError(str(e)) from e

    return results
