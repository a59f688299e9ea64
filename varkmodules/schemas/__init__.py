"""
VARK Modules Schemas - Pydantic models for the module engine.

This module exports all schema classes for:
- Module: sections, assessment questions, modules
- Answers: normalized learner submissions
- Results: graded answers, assessment results, badges, completion outcome
- Progress: section progress snapshots and persisted progress
- Completion: completion records and side-effect commands
"""

# Module schemas
from .module import (
    SectionType,
    QuestionType,
    LearningStyle,
    AssessmentQuestion,
    Section,
    Module,
    PRE_TEST_SECTION_ID,
    POST_TEST_SECTION_ID,
    PRE_TEST_PREFIX,
    POST_TEST_PREFIX,
)

# Answer schemas
from .answers import (
    ChoiceAnswer,
    MultiChoiceAnswer,
    TextAnswer,
    OpenAnswer,
    NormalizedAnswer,
    normalize_answer,
)

# Result schemas
from .results import (
    GradedAnswer,
    AssessmentResult,
    BadgeTier,
    Badge,
    ModuleCompletionOutcome,
)

# Progress schemas
from .progress import (
    ModuleStatus,
    SectionProgress,
    ModuleProgressRecord,
)

# Completion schemas
from .completion import (
    CompletionRecord,
    BadgeAward,
    TeacherNotification,
    PersistCompletion,
    AwardBadge,
    NotifyTeacher,
    CompletionCommand,
    CompletionDecision,
    COMPLETIONS_TABLE,
    BADGES_TABLE,
    NOTIFICATIONS_TABLE,
    SUBMISSIONS_TABLE,
    PROGRESS_TABLE,
)

__all__ = [
    # Module
    'SectionType',
    'QuestionType',
    'LearningStyle',
    'AssessmentQuestion',
    'Section',
    'Module',
    'PRE_TEST_SECTION_ID',
    'POST_TEST_SECTION_ID',
    'PRE_TEST_PREFIX',
    'POST_TEST_PREFIX',
    # Answers
    'ChoiceAnswer',
    'MultiChoiceAnswer',
    'TextAnswer',
    'OpenAnswer',
    'NormalizedAnswer',
    'normalize_answer',
    # Results
    'GradedAnswer',
    'AssessmentResult',
    'BadgeTier',
    'Badge',
    'ModuleCompletionOutcome',
    # Progress
    'ModuleStatus',
    'SectionProgress',
    'ModuleProgressRecord',
    # Completion
    'CompletionRecord',
    'BadgeAward',
    'TeacherNotification',
    'PersistCompletion',
    'AwardBadge',
    'NotifyTeacher',
    'CompletionCommand',
    'CompletionDecision',
    'COMPLETIONS_TABLE',
    'BADGES_TABLE',
    'NOTIFICATIONS_TABLE',
    'SUBMISSIONS_TABLE',
    'PROGRESS_TABLE',
]
