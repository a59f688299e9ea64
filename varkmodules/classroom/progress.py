"""
SectionProgressTracker - Track which sections of a module are complete.

Holds the in-session mapping of section id -> completed flag:
- Seeded from the module's sections, optionally resumed from a snapshot
- Flags only ever flip from False to True
- Listeners are told about every completion event
"""

import logging
from typing import Callable, Iterable, Mapping, Optional

from varkmodules.schemas import SectionProgress


logger = logging.getLogger(__name__)

# (section_id, newly_completed) -> None
ProgressListener = Callable[[str, bool], None]


class SectionProgressTracker:
    """
    Track section completion for one learner working through one module.

    Completion is monotonic within a session: nothing resets a completed
    section, so completion_count() never decreases.
    """

    def __init__(
        self,
        section_ids: Iterable[str],
        prior_progress: Optional[Mapping[str, bool]] = None,
    ):
        """
        Initialize the tracker.

        Args:
            section_ids: Ids of every section in the module
            prior_progress: Saved flags from an earlier visit; True entries
                are kept, unknown ids are dropped
        """
        prior = prior_progress or {}
        self._completed: dict[str, bool] = {
            section_id: bool(prior.get(section_id, False))
            for section_id in section_ids
        }
        self._listeners: list[ProgressListener] = []

    @classmethod
    def initialize(
        cls,
        section_ids: Iterable[str],
        prior_progress: Optional[Mapping[str, bool]] = None,
    ) -> "SectionProgressTracker":
        return cls(section_ids, prior_progress)

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def add_listener(self, listener: ProgressListener):
        """Register a callback invoked on every mark_complete() call."""
        self._listeners.append(listener)

    def _notify(self, section_id: str, newly_completed: bool):
        for listener in self._listeners:
            try:
                listener(section_id, newly_completed)
            except Exception:
                logger.exception(f"Progress listener failed for section {section_id}")

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def mark_complete(self, section_id: str) -> SectionProgress:
        """
        Mark a section complete.

        Idempotent on state. Listeners still run when the section was already
        complete (with newly_completed=False), so downstream callbacks are
        at-most-once only per state change, not per call.
        """
        if section_id not in self._completed:
            logger.warning(f"Ignoring completion for unknown section: {section_id}")
            return self.snapshot()

        newly_completed = not self._completed[section_id]
        self._completed[section_id] = True
        self._notify(section_id, newly_completed)
        return self.snapshot()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_complete(self, section_id: str) -> bool:
        return self._completed.get(section_id, False)

    def completion_count(self) -> int:
        return sum(1 for done in self._completed.values() if done)

    @property
    def total_sections(self) -> int:
        return len(self._completed)

    def all_complete(self) -> bool:
        return self.total_sections > 0 and self.completion_count() == self.total_sections

    def completion_percent(self) -> float:
        """Share of sections completed, 0-100, for the progress bar."""
        if self.total_sections == 0:
            return 0.0
        return round(self.completion_count() / self.total_sections * 100, 1)

    def completed_section_ids(self) -> list[str]:
        return [section_id for section_id, done in self._completed.items() if done]

    def snapshot(self) -> SectionProgress:
        """Immutable copy of the current flags."""
        return SectionProgress(completed=dict(self._completed))
