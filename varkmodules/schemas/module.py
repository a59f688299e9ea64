"""
Module content schemas for VARK modules.

Defines Pydantic models for authored content:
- Sections and their content types
- Assessment questions (the module's answer key bank)
- Modules as ordered sequences of sections

All of these are read-only from the learner's point of view.
"""

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator


# Reserved section ids that select a slice of the question bank by id prefix
PRE_TEST_SECTION_ID = "pre-test-section"
POST_TEST_SECTION_ID = "post-test-section"
PRE_TEST_PREFIX = "pre-test"
POST_TEST_PREFIX = "post-test"


class SectionType(str, Enum):
    TEXT = "text"
    VIDEO = "video"
    AUDIO = "audio"
    READ_ALOUD = "read_aloud"
    INTERACTIVE = "interactive"
    ACTIVITY = "activity"
    ASSESSMENT = "assessment"
    QUICK_CHECK = "quick_check"
    HIGHLIGHT = "highlight"
    TABLE = "table"
    DIAGRAM = "diagram"


class QuestionType(str, Enum):
    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value):
        # audio, visual, matching, ... have no deterministic key
        return cls.OTHER


class LearningStyle(str, Enum):
    EVERYONE = "everyone"
    VISUAL = "visual"
    AUDITORY = "auditory"
    READING_WRITING = "reading_writing"
    KINESTHETIC = "kinesthetic"


def _key_to_str(value: Any) -> str:
    """Authored keys may come from YAML as booleans or numbers."""
    if isinstance(value, bool):
        return "True" if value else "False"
    return str(value)


# -----------------------------------------------------------------------------
# Questions
# -----------------------------------------------------------------------------

class AssessmentQuestion(BaseModel):
    id: str
    type: QuestionType = QuestionType.OTHER
    question: str = ""
    options: list[str] = []
    correct_answer: Optional[Union[list[str], str]] = None
    points: int = Field(default=1, ge=1)
    explanation: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def unknown_type_is_other(cls, v):
        if isinstance(v, QuestionType):
            return v
        return QuestionType(v) if v is not None else QuestionType.OTHER

    @field_validator("options", mode="before")
    @classmethod
    def options_as_strings(cls, v):
        if v is None:
            return []
        return [_key_to_str(item) for item in v]

    @field_validator("correct_answer", mode="before")
    @classmethod
    def key_as_strings(cls, v):
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (list, tuple, set, frozenset)):
            return [_key_to_str(item) for item in v]
        return _key_to_str(v)

    @field_validator("points", mode="before")
    @classmethod
    def default_points(cls, v):
        # A missing or zero weight counts as one point
        return v or 1

    @property
    def has_answer_key(self) -> bool:
        """False when no key is configured (empty list still counts as a key)."""
        return self.correct_answer is not None and self.correct_answer != ""


# -----------------------------------------------------------------------------
# Sections
# -----------------------------------------------------------------------------

class Section(BaseModel):
    """
    One page of content within a module.

    content_data is the type-specific payload (HTML for text sections,
    media URLs for video/audio, activity definitions, ...). The engine
    treats it as opaque.
    """
    id: str
    title: str = ""
    content_type: SectionType = SectionType.TEXT
    content_data: dict[str, Any] = {}
    is_required: bool = True
    position: int = 0
    learning_style_tags: list[LearningStyle] = []

    @property
    def is_assessment(self) -> bool:
        return self.content_type == SectionType.ASSESSMENT

    @property
    def is_pre_test(self) -> bool:
        return self.id == PRE_TEST_SECTION_ID

    @property
    def is_post_test(self) -> bool:
        return self.id == POST_TEST_SECTION_ID


# -----------------------------------------------------------------------------
# Module
# -----------------------------------------------------------------------------

class Module(BaseModel):
    id: str
    title: str
    description: str = ""
    created_by: Optional[str] = None  # authoring teacher, receives notifications
    sections: list[Section] = []
    assessment_questions: list[AssessmentQuestion] = []

    @property
    def section_ids(self) -> list[str]:
        return [section.id for section in self.sections]

    @property
    def total_sections(self) -> int:
        return len(self.sections)

    def get_section(self, section_id: str) -> Optional[Section]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def sections_for_style(self, style: LearningStyle) -> list[Section]:
        """Sections tagged for a learning style (untagged sections suit everyone)."""
        return [
            section for section in self.sections
            if not section.learning_style_tags
            or style in section.learning_style_tags
            or LearningStyle.EVERYONE in section.learning_style_tags
        ]

    def questions_for_section(self, section: Section) -> list[AssessmentQuestion]:
        """
        Select the questions an assessment section presents.

        The pre-test and post-test sections take the questions whose ids
        start with "pre-test" / "post-test"; any other assessment section
        presents the whole bank. Non-assessment sections present none.
        """
        if not section.is_assessment:
            return []
        if section.is_pre_test:
            return [q for q in self.assessment_questions if q.id.startswith(PRE_TEST_PREFIX)]
        if section.is_post_test:
            return [q for q in self.assessment_questions if q.id.startswith(POST_TEST_PREFIX)]
        return list(self.assessment_questions)
