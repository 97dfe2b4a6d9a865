"""Amendment log services.

An amendment records one change made to a booking after it was
complete. Guest amendments wait for staff approval; staff amendments
are recorded already approved. Approval keeps the new answer, rejection
restores the old one and removes the log.
"""

import json
import logging
from typing import Any

from django.db import IntegrityError, transaction
from django.utils import timezone

from . import conf
from .audit import record_booking_event
from .changes import Change, normalize_answer
from .dispatch import TRIGGER_EMAIL_PER_QUESTION, dispatch_task
from .email_triggers import triggers_for_question
from .exceptions import AmendmentAlreadyResolvedError, AmendmentNotFoundError
from .log_data import EquipmentLogData, LogKind, QaPairLogData, QaPairSnapshot
from .models import (
    AmendmentLog,
    Booking,
    BookingEquipment,
    Equipment,
    QaPair,
    Question,
    QuestionType,
)

logger = logging.getLogger(__name__)

ADMIN_ORIGIN = "admin"

SCALAR_TYPES = {
    QuestionType.TEXT,
    QuestionType.DATE,
    QuestionType.DATE_RANGE,
    QuestionType.PHONE_NUMBER,
    QuestionType.EMAIL,
    QuestionType.YEAR,
}


def _now_iso() -> str:
    return timezone.now().isoformat()


def _approve_envelope(payload: QaPairLogData, approved_by: str) -> None:
    payload.approved = True
    payload.approved_by = approved_by
    payload.approval_date = _now_iso()


def _save_log(booking: Booking, kind: str, change_key: str, payload: QaPairLogData) -> AmendmentLog:
    """Merge into the pending log for ``change_key`` or create one.

    A merge keeps the originally captured old answer; only the new
    answer and modification stamps move forward.
    """
    existing = (
        AmendmentLog.objects.select_for_update()
        .filter(booking=booking, kind=kind, change_key=change_key, approved=False)
        .first()
    )
    if existing is None:
        log = AmendmentLog(booking=booking, kind=kind, change_key=change_key)
        log.set_payload(payload)
        try:
            with transaction.atomic():
                log.save()
            return log
        except IntegrityError:
            # Lost a race with a concurrent submission; merge into its row.
            existing = AmendmentLog.objects.select_for_update().get(
                booking=booking, change_key=change_key, approved=False
            )

    previous = existing.payload
    payload.qa_pair.oldAnswer = previous.qa_pair.oldAnswer
    if isinstance(payload, EquipmentLogData) and isinstance(previous, EquipmentLogData):
        payload.oldAnswerId = previous.oldAnswerId
    payload.extra = {**previous.extra, **payload.extra}
    existing.set_payload(payload)
    existing.save(update_fields=["data", "approved", "updated_at"])
    return existing


def record_amendment(
    booking: Booking,
    change: Change,
    qa_pair: QaPair | None = None,
    origin: str | None = None,
    modified_by: str | None = None,
) -> AmendmentLog:
    """Record a dirty answer change on a complete booking.

    Args:
        booking: Booking the change belongs to (locked by the caller)
        change: The submitted change
        qa_pair: The stored answer after the change, if it still exists
        origin: "admin" for staff edits, which are recorded pre-approved
        modified_by: Display name of whoever made the change

    Returns:
        The created or merged AmendmentLog
    """
    snapshot = QaPairSnapshot(
        id=change.id if change.id is not None else (qa_pair.pk if qa_pair is not None else None),
        sectionLabel=change.section_label or (qa_pair.section.label if qa_pair is not None else None),
        question=change.question,
        answer=change.answer,
        question_type=change.question_type,
        oldAnswer=change.old_answer if change.old_answer is not None else "",
    )
    payload = QaPairLogData(
        qa_pair=snapshot,
        modifiedBy=modified_by,
        modifiedDate=_now_iso(),
    )
    if origin == ADMIN_ORIGIN:
        _approve_envelope(payload, ADMIN_ORIGIN)

    log = _save_log(booking, LogKind.QA_PAIR, change.key.identity, payload)
    logger.info(
        "Amendment %s recorded for booking %s question=%r approved=%s",
        log.pk,
        booking.pk,
        change.question,
        log.approved,
    )
    return log


def record_equipment_amendment(
    booking: Booking,
    change_key: str,
    question: str,
    answer: str,
    old_answer: str,
    equipment_id: int | None = None,
    old_equipment_id: int | None = None,
    modified_by: str | None = None,
) -> AmendmentLog:
    """Record an equipment swap, addition or removal on a completed booking."""
    payload = EquipmentLogData(
        id=equipment_id,
        oldAnswerId=old_equipment_id,
        qa_pair=QaPairSnapshot(
            question=question,
            answer=answer,
            question_type=QuestionType.EQUIPMENT,
            oldAnswer=old_answer,
        ),
        modifiedBy=modified_by,
        modifiedDate=_now_iso(),
    )
    return _save_log(booking, LogKind.EQUIPMENT, f"equipment:{change_key}", payload)


# =============================================================================
# Approval
# =============================================================================


def _get_pending(log_id) -> AmendmentLog:
    log = AmendmentLog.objects.select_for_update().select_related("booking").filter(pk=log_id).first()
    if log is None:
        raise AmendmentNotFoundError(f"Amendment log {log_id} not found")
    if log.approved:
        raise AmendmentAlreadyResolvedError(f"Amendment log {log_id} is already approved")
    return log


def approve_amendment(log_id, fields: dict | None = None, actor=None) -> AmendmentLog:
    """Approve a pending amendment.

    Provided fields are merged into the stored data. The stored answer
    already holds the new value, so nothing else is written. Email
    triggers watching the question are queued.

    Args:
        log_id: AmendmentLog primary key
        fields: Staff-provided fields (approved_by, approval_date, ...)
        actor: User approving the change

    Raises:
        AmendmentNotFoundError: If the log does not exist
        AmendmentAlreadyResolvedError: If the log is already approved
    """
    fields = dict(fields or {})

    with transaction.atomic():
        log = _get_pending(log_id)
        data = {**log.data, **fields, "approved": True}
        if not data.get("approved_by"):
            data["approved_by"] = getattr(actor, "email", None) or getattr(actor, "username", None) or ADMIN_ORIGIN
        if not data.get("approval_date"):
            data["approval_date"] = _now_iso()
        log.data = data
        log.approved = True
        log.save(update_fields=["data", "approved", "updated_at"])

        record_booking_event(
            log.booking,
            "amendment_approved",
            actor=actor,
            description=f"Approved change to '{data.get('qa_pair', {}).get('question', '')}'",
            new_value=data.get("qa_pair"),
        )

    snapshot = log.payload.qa_pair
    if log.kind == LogKind.QA_PAIR and triggers_for_question(snapshot.question):
        dispatch_task(
            TRIGGER_EMAIL_PER_QUESTION,
            {
                "booking_id": log.booking_id,
                "question": snapshot.question,
                "answer": normalize_answer(snapshot.answer),
            },
        )

    logger.info("Amendment %s approved by %s", log.pk, data["approved_by"])
    return log


# =============================================================================
# Rejection
# =============================================================================


def coerce_old_answer(question_type: str, old_answer: Any) -> str:
    """Turn a logged old answer back into its stored form.

    Scalar types come back as strings, radio/select values are reduced
    to their ``value`` (or ``name``), checkbox answers stay JSON arrays.
    Anything that cannot be coerced falls back to ``str``.
    """
    if old_answer is None or old_answer == "":
        return ""

    try:
        if question_type in SCALAR_TYPES:
            return normalize_answer(old_answer)

        if question_type in (QuestionType.RADIO, QuestionType.SELECT):
            parsed = old_answer
            if isinstance(old_answer, str):
                try:
                    parsed = json.loads(old_answer)
                except ValueError:
                    return old_answer
            if isinstance(parsed, dict):
                reduced = parsed.get("value") or parsed.get("name")
                if reduced:
                    return normalize_answer(reduced)
            return old_answer if isinstance(old_answer, str) else normalize_answer(old_answer)

        if question_type == QuestionType.CHECKBOX:
            if isinstance(old_answer, str):
                parsed = json.loads(old_answer)
                return old_answer if isinstance(parsed, list) else normalize_answer(parsed)
            return normalize_answer(old_answer)

        return normalize_answer(old_answer)
    except (TypeError, ValueError) as e:
        logger.warning("Could not coerce old answer for %s: %s", question_type, e)
        return str(old_answer)


def _find_qa_pair(booking: Booking, snapshot: QaPairSnapshot) -> QaPair | None:
    qa_pairs = QaPair.objects.filter(section__booking=booking)
    if snapshot.id is not None:
        qa_pair = qa_pairs.filter(pk=snapshot.id).first()
        if qa_pair is not None:
            return qa_pair
    return qa_pairs.filter(question__iexact=snapshot.question).first()


def _clear_dependents(booking: Booking, qa_pair: QaPair) -> int:
    if qa_pair.template_question_id is None:
        return 0
    dependent_ids = Question.objects.filter(
        dependencies__dependence_id=qa_pair.template_question_id
    ).values_list("pk", flat=True)
    deleted, _ = QaPair.objects.filter(
        section__booking=booking,
        template_question_id__in=list(dependent_ids),
    ).delete()
    return deleted


def _revert_answer(booking: Booking, payload: QaPairLogData) -> None:
    snapshot = payload.qa_pair
    qa_pair = _find_qa_pair(booking, snapshot)
    if qa_pair is None:
        logger.warning("No answer to revert for booking %s question=%r", booking.pk, snapshot.question)
        return

    qa_pair.answer = coerce_old_answer(snapshot.question_type, snapshot.oldAnswer)
    qa_pair.save(update_fields=["answer", "updated_at"])

    if conf.cascade_dependents_on_reject():
        cleared = _clear_dependents(booking, qa_pair)
        if cleared:
            logger.info("Cleared %d dependent answer(s) of %r", cleared, snapshot.question)


def _revert_equipment(booking: Booking, payload: EquipmentLogData) -> None:
    old_id = payload.oldAnswerId
    if old_id is None and payload.qa_pair.oldAnswer:
        old_id = (
            Equipment.objects.filter(name=payload.qa_pair.oldAnswer).values_list("pk", flat=True).first()
        )
    new_id = payload.id

    link = None
    if new_id is not None:
        link = BookingEquipment.objects.filter(booking=booking, equipment_id=new_id).first()

    if old_id is None:
        if link is not None:
            link.delete()
        return

    if link is not None:
        if BookingEquipment.objects.filter(booking=booking, equipment_id=old_id).exists():
            link.delete()
        else:
            link.equipment_id = old_id
            link.save(update_fields=["equipment"])
        return

    BookingEquipment.objects.get_or_create(booking=booking, equipment_id=old_id)


def reject_amendment(log_id, actor=None) -> None:
    """Revert a pending amendment and delete its log.

    Raises:
        AmendmentNotFoundError: If the log does not exist
        AmendmentAlreadyResolvedError: If the log is already approved
    """
    with transaction.atomic():
        log = _get_pending(log_id)
        payload = log.payload
        booking = log.booking

        if log.kind == LogKind.EQUIPMENT:
            _revert_equipment(booking, payload)
        elif log.kind == LogKind.QA_PAIR:
            _revert_answer(booking, payload)
        else:
            raise ValueError(f"Unhandled amendment log kind '{log.kind}'")

        record_booking_event(
            booking,
            "amendment_rejected",
            actor=actor,
            description=f"Reverted change to '{payload.qa_pair.question}'",
            old_value=payload.qa_pair.to_dict(),
        )
        log.delete()

    logger.info("Amendment %s rejected and reverted", log_id)
