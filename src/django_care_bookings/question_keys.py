"""Stable keys of the questions the booking workflow reads answers from.

Keys are the slugified question text, so an answer can be found through
its template question's ``question_key`` or, for answers without a
template link, by slugifying the stored question text.
"""

from django.utils.text import slugify

CHECK_IN_DATE = "check-in-date"
CHECK_OUT_DATE = "check-out-date"
FUNDING_SOURCE = "how-will-your-stay-be-funded"
COURSE_SELECTION = "which-course"
ACCOMMODATION_PACKAGE_FULL = (
    "please-select-your-accommodation-and-assistance-package-below-by-selecting-a-package-type-you-are"
)
ACCOMMODATION_PACKAGE_COURSES = "accommodation-package-options-for-sargood-courses-are"

NDIS_FUNDER_MARKERS = ("NDIS", "NDIA")


def key_of(qa_pair) -> str:
    question = getattr(qa_pair, "template_question", None)
    if question is not None and question.question_key:
        return question.question_key
    return slugify(qa_pair.question)


def find_by_key(qa_pairs, key: str):
    for qa_pair in qa_pairs:
        if key_of(qa_pair) == key:
            return qa_pair
    return None


def answer_by_key(qa_pairs, key: str) -> str | None:
    qa_pair = find_by_key(qa_pairs, key)
    return qa_pair.answer if qa_pair is not None else None


def is_ndis_funded(qa_pairs) -> bool:
    answer = answer_by_key(qa_pairs, FUNDING_SOURCE) or ""
    return any(marker in answer for marker in NDIS_FUNDER_MARKERS)
