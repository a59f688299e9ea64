"""
AssessmentScorer - Aggregate graded questions into an assessment result.

Answers arrive keyed by question position. The UI stores them under
"question_<index>"; plain integer or string indices are accepted too.
Scoring is pure: the same questions and answers always give the same result.
"""

from typing import Any, Mapping, Optional, Sequence

from varkmodules.config import PASSING_SCORE
from varkmodules.schemas import AssessmentQuestion, AssessmentResult, GradedAnswer

from .validator import grade


def answer_key(index: int) -> str:
    """UI key under which the answer to question `index` is stored."""
    return f"question_{index}"


def lookup_answer(answers: Mapping[Any, Any], index: int) -> Any:
    """Find the submission for a question position, None if unanswered."""
    for key in (index, str(index), answer_key(index)):
        if key in answers:
            return answers[key]
    return None


def percentage_of(earned: int, possible: int) -> float:
    """earned / possible as a percentage, 0 when nothing was possible."""
    if possible <= 0:
        return 0.0
    return earned * 100 / possible


def score(
    questions: Sequence[AssessmentQuestion],
    answers: Optional[Mapping[Any, Any]] = None,
    section_id: Optional[str] = None,
    passing_score: float = PASSING_SCORE,
) -> AssessmentResult:
    """
    Score one assessment submission.

    Args:
        questions: Questions in presentation order
        answers: Submissions keyed by question position
        section_id: Section the submission belongs to (kept on the result)
        passing_score: Pass threshold in percent

    Returns:
        AssessmentResult with per-question report and totals
    """
    answers = answers or {}
    graded = []
    for index, question in enumerate(questions):
        submitted = lookup_answer(answers, index)
        outcome = grade(question, submitted)
        graded.append(GradedAnswer(
            question_id=question.id,
            question_number=index + 1,
            question=question.question,
            user_answer=submitted,
            correct_answer=question.correct_answer,
            explanation=question.explanation,
            is_correct=outcome.is_correct,
            earned_points=outcome.earned_points,
        ))

    total_earned = sum(g.earned_points for g in graded)
    total_possible = sum(q.points for q in questions)
    percentage = percentage_of(total_earned, total_possible)

    return AssessmentResult(
        section_id=section_id,
        results=graded,
        total_earned=total_earned,
        total_possible=total_possible,
        percentage=percentage,
        correct_count=sum(1 for g in graded if g.is_correct),
        total_questions=len(questions),
        passed=percentage >= passing_score,
    )


class AssessmentScorer:
    """Scorer bound to a pass threshold."""

    def __init__(self, passing_score: float = PASSING_SCORE):
        self.passing_score = passing_score

    def score(
        self,
        questions: Sequence[AssessmentQuestion],
        answers: Optional[Mapping[Any, Any]] = None,
        section_id: Optional[str] = None,
    ) -> AssessmentResult:
        return score(questions, answers, section_id=section_id, passing_score=self.passing_score)
