"""
Completion side-effect schemas.

The completion coordinator does no I/O. It returns the computed outcome
together with a list of commands describing the records to write; an outer
executor (classroom.effects) carries them out and can retry them
independently.
"""

from datetime import datetime
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel

from .results import BadgeTier, ModuleCompletionOutcome


COMPLETIONS_TABLE = "module_completions"
BADGES_TABLE = "student_badges"
NOTIFICATIONS_TABLE = "teacher_notifications"
SUBMISSIONS_TABLE = "student_module_submissions"
PROGRESS_TABLE = "vark_module_progress"


# -----------------------------------------------------------------------------
# Records
# -----------------------------------------------------------------------------

class CompletionRecord(BaseModel):
    student_id: str
    module_id: str
    final_score: int
    time_spent_minutes: int
    pre_test_score: Optional[float] = None
    post_test_score: Optional[float] = None
    sections_completed: int
    perfect_sections: int
    completion_date: datetime


class BadgeAward(BaseModel):
    student_id: str
    module_id: str
    badge_type: str
    badge_name: str
    badge_description: str
    badge_icon: str
    badge_rarity: BadgeTier
    criteria_met: dict[str, Any] = {}
    earned_date: datetime


class TeacherNotification(BaseModel):
    type: str = "module_completion"
    title: str
    message: str
    student_id: Optional[str] = None
    module_id: Optional[str] = None
    priority: Literal["low", "normal", "high", "urgent"] = "normal"


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

class PersistCompletion(BaseModel):
    kind: Literal["persist_completion"] = "persist_completion"
    table: str = COMPLETIONS_TABLE
    conflict_key: tuple[str, ...] = ("student_id", "module_id")
    record: CompletionRecord


class AwardBadge(BaseModel):
    kind: Literal["award_badge"] = "award_badge"
    table: str = BADGES_TABLE
    record: BadgeAward


class NotifyTeacher(BaseModel):
    kind: Literal["notify_teacher"] = "notify_teacher"
    recipient_id: str
    notification: TeacherNotification


CompletionCommand = Union[PersistCompletion, AwardBadge, NotifyTeacher]


class CompletionDecision(BaseModel):
    """What the coordinator decided when a module completed."""
    outcome: ModuleCompletionOutcome
    commands: list[CompletionCommand] = []
