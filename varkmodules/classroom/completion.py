"""
ModuleCompletionCoordinator - Detect module completion and compute the outcome.

When every section is complete the coordinator:
- averages all assessment percentages into a final score
- picks out pre-test and post-test scores
- counts perfect (100%) sections
- assigns a badge tier
- returns the records to persist, the badge to award and the teacher
  notification to send, as commands for an outer executor

It fires at most once per session and performs no I/O.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Mapping, Optional

from varkmodules.auth import LearnerContext
from varkmodules.config import PASSING_SCORE
from varkmodules.schemas import (
    AssessmentResult,
    AwardBadge,
    Badge,
    BadgeAward,
    BadgeTier,
    CompletionDecision,
    CompletionRecord,
    Module,
    ModuleCompletionOutcome,
    NotifyTeacher,
    PersistCompletion,
    PRE_TEST_PREFIX,
    POST_TEST_PREFIX,
    SectionProgress,
    TeacherNotification,
)

from .progress import SectionProgressTracker


logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (32.5 -> 33)."""
    return int(math.floor(value + 0.5))


# -----------------------------------------------------------------------------
# Outcome calculations
# -----------------------------------------------------------------------------

def find_test_score(results: Mapping[str, AssessmentResult], marker: str) -> Optional[float]:
    """Percentage of the first result whose section key contains `marker`."""
    for section_key, result in results.items():
        if marker in section_key:
            return result.percentage
    return None


def compute_final_score(results: Mapping[str, AssessmentResult]) -> int:
    """
    Mean of every assessment percentage in the session.

    Falls back to the post-test percentage, then to 0, when there are no
    results to average.
    """
    percentages = [result.percentage for result in results.values()]
    if percentages:
        return round_half_up(sum(percentages) / len(percentages))
    post_test = find_test_score(results, POST_TEST_PREFIX)
    return round_half_up(post_test) if post_test is not None else 0


def count_perfect_sections(results: Mapping[str, AssessmentResult]) -> int:
    return sum(1 for result in results.values() if result.percentage == 100)


def assign_badge(
    final_score: int,
    module_title: str,
    perfect_sections: int = 0,
    improvement: Optional[float] = None,
) -> Badge:
    """Badge for a final score; tiers are checked from the top down."""
    if final_score >= 100:
        return Badge(
            tier=BadgeTier.PLATINUM,
            badge_type="perfect_score",
            name="Perfect Mastery",
            description=f"Achieved perfect score on {module_title}!",
            icon="💎",
            criteria_met={"score": final_score, "perfect_sections": perfect_sections},
        )
    if final_score >= 90:
        criteria = {"score": final_score}
        if improvement is not None:
            criteria["improvement"] = improvement
        return Badge(
            tier=BadgeTier.GOLD,
            badge_type="high_scorer",
            name=f"{module_title} Master",
            description=f"Scored {final_score}% on {module_title}!",
            icon="🏆",
            criteria_met=criteria,
        )
    if final_score >= 80:
        return Badge(
            tier=BadgeTier.SILVER,
            badge_type="high_scorer",
            name="Excellence Achieved",
            description=f"Great work on {module_title}!",
            icon="🥈",
            criteria_met={"score": final_score},
        )
    return Badge(
        tier=BadgeTier.BRONZE,
        badge_type="completion",
        name="Module Completed",
        description=f"Finished {module_title}",
        icon="✅",
        criteria_met={"completed": True},
    )


def notification_priority(final_score: int, passing_score: float = PASSING_SCORE) -> str:
    return "high" if final_score < passing_score else "normal"


# -----------------------------------------------------------------------------
# Coordinator
# -----------------------------------------------------------------------------

class ModuleCompletionCoordinator:
    """
    Single-fire completion detector for one module session.

    The caller executes the returned commands; see classroom.effects.
    """

    def __init__(
        self,
        module: Module,
        passing_score: float = PASSING_SCORE,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.module = module
        self.passing_score = passing_score
        self.clock = clock
        self._fired = False

    @property
    def has_fired(self) -> bool:
        return self._fired

    def mark_fired(self):
        """Suppress completion, e.g. when it was already persisted earlier."""
        self._fired = True

    def check_and_complete(
        self,
        progress: SectionProgress | SectionProgressTracker,
        assessment_results: Mapping[str, AssessmentResult],
        elapsed: timedelta,
        learner: LearnerContext,
    ) -> Optional[CompletionDecision]:
        """
        Complete the module if every section is done.

        Args:
            progress: Current section progress
            assessment_results: Results keyed by section id
            elapsed: Time since the module was opened
            learner: Learner finishing the module

        Returns:
            CompletionDecision on the first call that finds the module
            complete, None otherwise
        """
        if self._fired:
            return None

        if isinstance(progress, SectionProgressTracker):
            progress = progress.snapshot()

        total = self.module.total_sections
        completed = sum(1 for section_id in self.module.section_ids if progress.is_complete(section_id))
        if total == 0 or completed < total:
            return None

        self._fired = True
        outcome = self.compute_outcome(assessment_results, elapsed, learner)
        commands = self.build_commands(outcome, learner)

        logger.info(
            f"Module {self.module.id} completed by {learner.user_id}: "
            f"score={outcome.final_score} badge={outcome.badge.tier.value}"
        )
        return CompletionDecision(outcome=outcome, commands=commands)

    def compute_outcome(
        self,
        assessment_results: Mapping[str, AssessmentResult],
        elapsed: timedelta,
        learner: LearnerContext,
    ) -> ModuleCompletionOutcome:
        final_score = compute_final_score(assessment_results)
        pre_test = find_test_score(assessment_results, PRE_TEST_PREFIX)
        post_test = find_test_score(assessment_results, POST_TEST_PREFIX)
        perfect = count_perfect_sections(assessment_results)

        improvement = None
        if pre_test is not None and post_test is not None:
            improvement = post_test - pre_test

        minutes = max(0, round_half_up(elapsed.total_seconds() / 60))

        return ModuleCompletionOutcome(
            module_id=self.module.id,
            learner_id=learner.user_id,
            final_score=min(max(final_score, 0), 100),
            time_spent_minutes=minutes,
            pre_test_score=pre_test,
            post_test_score=post_test,
            sections_completed=self.module.total_sections,
            total_sections=self.module.total_sections,
            perfect_sections=perfect,
            passed=final_score >= self.passing_score,
            badge=assign_badge(final_score, self.module.title, perfect, improvement),
        )

    def build_commands(self, outcome: ModuleCompletionOutcome, learner: LearnerContext) -> list:
        now = self.clock()
        badge = outcome.badge
        commands = [
            PersistCompletion(record=CompletionRecord(
                student_id=learner.user_id,
                module_id=self.module.id,
                final_score=outcome.final_score,
                time_spent_minutes=outcome.time_spent_minutes,
                pre_test_score=outcome.pre_test_score,
                post_test_score=outcome.post_test_score,
                sections_completed=outcome.sections_completed,
                perfect_sections=outcome.perfect_sections,
                completion_date=now,
            )),
            AwardBadge(record=BadgeAward(
                student_id=learner.user_id,
                module_id=self.module.id,
                badge_type=badge.badge_type,
                badge_name=badge.name,
                badge_description=badge.description,
                badge_icon=badge.icon,
                badge_rarity=badge.tier,
                criteria_met=badge.criteria_met,
                earned_date=now,
            )),
        ]

        if self.module.created_by:
            commands.append(NotifyTeacher(
                recipient_id=self.module.created_by,
                notification=TeacherNotification(
                    title="Student Completed Module",
                    message=(
                        f'{learner.display_name} completed "{self.module.title}" '
                        f"with a score of {outcome.final_score}%"
                    ),
                    student_id=learner.user_id,
                    module_id=self.module.id,
                    priority=notification_priority(outcome.final_score, self.passing_score),
                ),
            ))
        return commands
