"""
Submitted answer schemas.

The UI hands over loosely shaped payloads: a bare option string, an object
such as {"selected": "B"} or {"answer": "photosynthesis"}, a list of
selected options, or nothing at all. normalize_answer() is the single
adapter that turns any of these into a typed answer keyed by question type,
so grading never has to reach into nested fields.

Malformed payloads normalize to an empty answer (value None), which grades
as incorrect.
"""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel

from .module import QuestionType


class ChoiceAnswer(BaseModel):
    """single_choice and true_false: one selected option."""
    kind: Literal["choice"] = "choice"
    value: Optional[str] = None


class MultiChoiceAnswer(BaseModel):
    """multiple_choice: a set of selected options (order irrelevant)."""
    kind: Literal["multi_choice"] = "multi_choice"
    values: Optional[frozenset[str]] = None


class TextAnswer(BaseModel):
    """short_answer: free text."""
    kind: Literal["text"] = "text"
    value: Optional[str] = None


class OpenAnswer(BaseModel):
    """Any other question type: the raw response, graded on presence only."""
    kind: Literal["open"] = "open"
    value: Any = None


NormalizedAnswer = Union[ChoiceAnswer, MultiChoiceAnswer, TextAnswer, OpenAnswer]

NORMALIZED_TYPES = (ChoiceAnswer, MultiChoiceAnswer, TextAnswer, OpenAnswer)


def _unwrap(raw: Any, *fields: str) -> Any:
    """Pull the answer out of a compound UI object, first non-empty field wins."""
    if isinstance(raw, dict):
        for field in fields:
            if raw.get(field):
                return raw[field]
        return None
    return raw


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return None


def normalize_answer(question_type: QuestionType, raw: Any) -> NormalizedAnswer:
    """
    Normalize a raw UI submission for a question type.

    Args:
        question_type: Type of the question being answered
        raw: Whatever the UI submitted (may be None or wrongly shaped)

    Returns:
        The typed answer; never raises
    """
    if isinstance(raw, NORMALIZED_TYPES):
        return raw

    if question_type in (QuestionType.SINGLE_CHOICE, QuestionType.TRUE_FALSE):
        return ChoiceAnswer(value=_as_text(_unwrap(raw, "selected", "answer")))

    if question_type == QuestionType.MULTIPLE_CHOICE:
        value = _unwrap(raw, "selected", "answer")
        if isinstance(value, (list, tuple, set, frozenset)):
            items = [_as_text(item) for item in value]
            if all(item is not None for item in items):
                return MultiChoiceAnswer(values=frozenset(items))
        return MultiChoiceAnswer()

    if question_type == QuestionType.SHORT_ANSWER:
        return TextAnswer(value=_as_text(_unwrap(raw, "answer", "selected")))

    # A wrapper with no filled field is an unanswered question
    return OpenAnswer(value=_unwrap(raw, "selected", "answer"))
