"""Typed payloads stored in ``AmendmentLog.data``.

Each log kind has its own payload class sharing the approval envelope.
``parse_log_data`` is the single place a stored blob is turned back
into one of these classes.
"""

from dataclasses import dataclass, field, asdict
from typing import Any

from django.db import models


class LogKind(models.TextChoices):
    """Kinds of amendment log entries."""

    QA_PAIR = "qa_pair", "Question/Answer"
    EQUIPMENT = "equipment", "Equipment"


@dataclass
class QaPairSnapshot:
    """Before/after state of one answer."""

    question: str
    answer: Any
    question_type: str
    oldAnswer: Any = ""
    id: int | None = None
    sectionLabel: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "QaPairSnapshot":
        return cls(
            question=data.get("question", ""),
            answer=data.get("answer", ""),
            question_type=data.get("question_type", ""),
            oldAnswer=data.get("oldAnswer", ""),
            id=data.get("id"),
            sectionLabel=data.get("sectionLabel"),
        )


@dataclass
class ApprovalEnvelope:
    approved: bool = False
    approved_by: str | None = None
    approval_date: str | None = None
    modifiedBy: str | None = None
    modifiedDate: str | None = None


@dataclass
class QaPairLogData(ApprovalEnvelope):
    """Payload of a ``qa_pair`` amendment."""

    qa_pair: QaPairSnapshot = field(default_factory=lambda: QaPairSnapshot("", "", ""))
    extra: dict = field(default_factory=dict)

    kind = LogKind.QA_PAIR

    def to_dict(self) -> dict:
        data = dict(self.extra)
        data.update({
            "approved": self.approved,
            "approved_by": self.approved_by,
            "approval_date": self.approval_date,
            "qa_pair": self.qa_pair.to_dict(),
            "modifiedBy": self.modifiedBy,
            "modifiedDate": self.modifiedDate,
        })
        return data


@dataclass
class EquipmentLogData(QaPairLogData):
    """Payload of an ``equipment`` amendment.

    ``id`` is the newly linked equipment and ``oldAnswerId`` the one it
    replaced (either may be missing for additions and removals).
    """

    id: int | None = None
    oldAnswerId: int | None = None

    kind = LogKind.EQUIPMENT

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["id"] = self.id
        data["oldAnswerId"] = self.oldAnswerId
        return data


_ENVELOPE_KEYS = {"approved", "approved_by", "approval_date", "qa_pair", "modifiedBy", "modifiedDate"}


def parse_log_data(kind: str, data: dict) -> QaPairLogData:
    """Decode a stored payload into the class for its kind.

    Raises:
        ValueError: If the kind is not known
    """
    data = data or {}
    common = {
        "approved": bool(data.get("approved", False)),
        "approved_by": data.get("approved_by"),
        "approval_date": data.get("approval_date"),
        "modifiedBy": data.get("modifiedBy"),
        "modifiedDate": data.get("modifiedDate"),
        "qa_pair": QaPairSnapshot.from_dict(data.get("qa_pair") or {}),
    }

    if kind == LogKind.QA_PAIR:
        extra = {k: v for k, v in data.items() if k not in _ENVELOPE_KEYS}
        return QaPairLogData(extra=extra, **common)
    if kind == LogKind.EQUIPMENT:
        extra = {k: v for k, v in data.items() if k not in _ENVELOPE_KEYS | {"id", "oldAnswerId"}}
        return EquipmentLogData(
            id=data.get("id"),
            oldAnswerId=data.get("oldAnswerId"),
            extra=extra,
            **common,
        )
    raise ValueError(f"Unknown amendment log kind '{kind}'")
