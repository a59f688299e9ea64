"""
Assessment and completion result schemas.

Defines Pydantic models derived by the scoring engine:
- Graded answers and per-section assessment results
- Badge tiers and badges
- The module completion outcome
"""

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field


class GradedAnswer(BaseModel):
    question_id: str
    question_number: int        # 1-based, for display
    question: str = ""
    user_answer: Any = None
    correct_answer: Optional[Union[list[str], str]] = None
    explanation: Optional[str] = None
    is_correct: bool
    earned_points: int          # 0 or the question's full weight


class AssessmentResult(BaseModel):
    section_id: Optional[str] = None
    results: list[GradedAnswer] = []
    total_earned: int = 0
    total_possible: int = 0
    percentage: float = 0.0     # 0 when nothing was possible
    correct_count: int = 0
    total_questions: int = 0
    passed: bool = False

    @property
    def is_perfect(self) -> bool:
        return self.total_possible > 0 and self.percentage == 100


class BadgeTier(str, Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"


class Badge(BaseModel):
    tier: BadgeTier
    badge_type: str             # perfect_score, high_scorer, completion
    name: str
    description: str
    icon: str
    criteria_met: dict[str, Any] = {}


class ModuleCompletionOutcome(BaseModel):
    module_id: str
    learner_id: str
    final_score: int = Field(..., ge=0, le=100)
    time_spent_minutes: int = Field(default=0, ge=0)
    pre_test_score: Optional[float] = None
    post_test_score: Optional[float] = None
    sections_completed: int
    total_sections: int
    perfect_sections: int = 0
    passed: bool
    badge: Badge

    @property
    def improvement(self) -> Optional[float]:
        """Post-test minus pre-test, when both were taken."""
        if self.pre_test_score is None or self.post_test_score is None:
            return None
        return self.post_test_score - self.pre_test_score
