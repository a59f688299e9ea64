"""
Progress tracking schemas for VARK modules.

Defines Pydantic models for learner progress including:
- Per-section completion snapshots
- Persisted module progress records
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, computed_field


class ModuleStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class SectionProgress(BaseModel):
    """Snapshot of section id -> completed flag for one module."""
    completed: dict[str, bool] = {}

    @computed_field
    @property
    def completed_count(self) -> int:
        return sum(1 for done in self.completed.values() if done)

    @computed_field
    @property
    def total_sections(self) -> int:
        return len(self.completed)

    @property
    def all_complete(self) -> bool:
        return self.total_sections > 0 and self.completed_count == self.total_sections

    def is_complete(self, section_id: str) -> bool:
        return self.completed.get(section_id, False)

    def completed_section_ids(self) -> list[str]:
        return [section_id for section_id, done in self.completed.items() if done]


class ModuleProgressRecord(BaseModel):
    """Progress row persisted per learner and module, used to resume."""
    student_id: str
    module_id: str
    status: ModuleStatus = ModuleStatus.NOT_STARTED
    progress_percentage: int = 0
    completed_sections: list[str] = []
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    last_accessed_at: Optional[datetime] = None
