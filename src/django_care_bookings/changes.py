"""Submitted answer changes and their identity keys.

A change arrives from the booking form as a dict::

    {"question", "section_id", "answer", "question_type",
     "id"?, "dirty"?, "oldAnswer"?, "delete"?, "submit"?}

``Change.from_payload`` resolves it once into a typed object whose
``key`` identifies the amended question: by QaPair id when the answer
already existed, otherwise by question text and type.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Union

from .models import QuestionType


@dataclass(frozen=True)
class ById:
    id: int

    @property
    def identity(self) -> str:
        return f"id:{self.id}"


@dataclass(frozen=True)
class ByQuestionText:
    text: str
    question_type: str

    @property
    def identity(self) -> str:
        return f"text:{self.question_type}:{self.text}"


ChangeKey = Union[ById, ByQuestionText]


def normalize_answer(value: Any) -> str:
    """Render an answer the way it is stored.

    Lists and dicts become compact JSON, None becomes an empty string,
    everything else is stringified.
    """
    if value is None:
        return ""
    if isinstance(value, (list, dict)):
        return json.dumps(value, separators=(",", ":"))
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass
class Change:
    """One submitted answer."""

    question: str
    section_id: int | None
    answer: Any
    question_type: str
    id: int | None = None
    dirty: bool = False
    old_answer: Any = None
    delete: bool = False
    submit: bool | None = None
    question_id: int | None = None
    section_label: str | None = None
    raw: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_payload(cls, data: dict) -> "Change":
        raw_id = data.get("id")
        raw_section = data.get("section_id")
        return cls(
            question=data.get("question", ""),
            section_id=int(raw_section) if raw_section not in (None, "") else None,
            answer=data.get("answer"),
            question_type=data.get("question_type") or QuestionType.TEXT,
            id=int(raw_id) if raw_id not in (None, "") else None,
            dirty=data.get("dirty") is True,
            old_answer=data.get("oldAnswer"),
            delete=bool(data.get("delete", False)),
            submit=data["submit"] if "submit" in data else None,
            question_id=data.get("question_id"),
            section_label=data.get("sectionLabel"),
            raw=data,
        )

    @property
    def key(self) -> ChangeKey:
        if self.id is not None:
            return ById(self.id)
        return ByQuestionText(self.question, self.question_type)

    @property
    def is_equipment(self) -> bool:
        return self.question_type == QuestionType.EQUIPMENT

    @property
    def stored_answer(self) -> str:
        return normalize_answer(self.answer)

    @property
    def is_dirty(self) -> bool:
        """Flagged dirty by the form and actually different from the old answer."""
        if not self.dirty:
            return False
        return normalize_answer(self.answer) != normalize_answer(self.old_answer)


def parse_changes(payload: list[dict] | None) -> list[Change]:
    return [Change.from_payload(item) for item in (payload or [])]


def all_submitted(changes: list[Change]) -> bool:
    """True unless some change carries a falsy ``submit`` flag."""
    return all(change.submit for change in changes if change.submit is not None)
