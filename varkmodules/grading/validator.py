"""
AnswerValidator - Grade a single question against its answer key.

Grading rules by question type:
- single_choice / true_false: exact match with the key
- multiple_choice: same set of options as the key, order irrelevant
- short_answer: match after trimming whitespace and lower-casing
- anything else: full credit if answered at all

A question with no key configured always earns full credit. This is a
permissive default so that authors can publish open-ended questions without
inventing a key; it is not a scoring loophole.

Grading never raises: absent or wrongly shaped answers simply earn nothing.
"""

from dataclasses import dataclass
from typing import Any

from varkmodules.schemas import (
    AssessmentQuestion,
    ChoiceAnswer,
    MultiChoiceAnswer,
    QuestionType,
    TextAnswer,
    normalize_answer,
)


@dataclass(frozen=True)
class Grade:
    """Outcome of grading one question."""
    is_correct: bool
    earned_points: int


def _award(question: AssessmentQuestion, is_correct: bool) -> Grade:
    # No partial credit within a question
    return Grade(is_correct=is_correct, earned_points=question.points if is_correct else 0)


def grade(question: AssessmentQuestion, submitted: Any) -> Grade:
    """
    Grade a learner's answer to one question.

    Args:
        question: Question with type, key and point weight
        submitted: Raw UI submission or an already normalized answer

    Returns:
        Grade with correctness and points earned (0 or question.points)
    """
    if not question.has_answer_key:
        return _award(question, True)

    answer = normalize_answer(question.type, submitted)
    key = question.correct_answer

    if question.type in (QuestionType.SINGLE_CHOICE, QuestionType.TRUE_FALSE):
        if not isinstance(answer, ChoiceAnswer) or answer.value is None:
            return _award(question, False)
        return _award(question, answer.value == key)

    if question.type == QuestionType.MULTIPLE_CHOICE:
        if not isinstance(answer, MultiChoiceAnswer) or answer.values is None:
            return _award(question, False)
        if not isinstance(key, list):
            return _award(question, False)
        return _award(question, answer.values == frozenset(key))

    if question.type == QuestionType.SHORT_ANSWER:
        if not isinstance(answer, TextAnswer) or answer.value is None:
            return _award(question, False)
        if not isinstance(key, str):
            return _award(question, False)
        return _award(question, answer.value.strip().lower() == key.strip().lower())

    if isinstance(answer, MultiChoiceAnswer):
        return _award(question, bool(answer.values))
    return _award(question, bool(answer.value))


class AnswerValidator:
    """Object wrapper around grade() for callers that inject a validator."""

    def grade(self, question: AssessmentQuestion, submitted: Any) -> Grade:
        return grade(question, submitted)
