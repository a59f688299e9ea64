"""
VARK Modules Grading - Answer validation and assessment scoring.

This module provides:
- grade / AnswerValidator: grade one question against its key
- score / AssessmentScorer: aggregate a section submission into a result
"""

from .validator import (
    Grade,
    AnswerValidator,
    grade,
)

from .scorer import (
    AssessmentScorer,
    score,
    answer_key,
    lookup_answer,
    percentage_of,
)

__all__ = [
    # Validator
    "Grade",
    "AnswerValidator",
    "grade",
    # Scorer
    "AssessmentScorer",
    "score",
    "answer_key",
    "lookup_answer",
    "percentage_of",
]
