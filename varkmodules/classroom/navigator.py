"""
Navigator - Section sequencing and forward-navigation gating.

Provides:
- NavigationGate: decide whether the learner may leave the current section
- SectionNavigator: current position, next/previous/jump within a module

The gate is advisory and stateless; callers re-evaluate it after every
submission or completion instead of caching its answer.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from varkmodules.schemas import Module, Section, SectionProgress

from .progress import SectionProgressTracker


SUBMIT_ASSESSMENT_FIRST = "Please submit the assessment first."
COMPLETE_SECTION_FIRST = "Please complete this section first."


class NavigationAction(str, Enum):
    """What "advance" means at the current position."""
    NEXT = "next"       # move to the following section
    FINISH = "finish"   # last section: finish the module


@dataclass(frozen=True)
class NavigationDecision:
    allowed: bool
    reason: str
    action: NavigationAction = NavigationAction.NEXT


class NavigationGate:
    """
    Two guards, evaluated in order:

    1. An assessment section must have been submitted this session.
    2. The section must be marked complete.
    """

    def can_advance(
        self,
        section: Section,
        progress: SectionProgress | SectionProgressTracker,
        has_submitted_assessment: bool,
        is_last: bool = False,
    ) -> NavigationDecision:
        action = NavigationAction.FINISH if is_last else NavigationAction.NEXT

        if section.is_assessment and not has_submitted_assessment:
            return NavigationDecision(False, SUBMIT_ASSESSMENT_FIRST, action)

        if not progress.is_complete(section.id):
            return NavigationDecision(False, COMPLETE_SECTION_FIRST, action)

        return NavigationDecision(True, "", action)


def can_advance(
    section: Section,
    progress: SectionProgress | SectionProgressTracker,
    has_submitted_assessment: bool,
    is_last: bool = False,
) -> NavigationDecision:
    """Module-level shortcut for NavigationGate().can_advance()."""
    return NavigationGate().can_advance(section, progress, has_submitted_assessment, is_last)


class SectionNavigator:
    """
    Move through a module's sections in order.

    Backward moves and jumps are always allowed; forward moves go through
    the NavigationGate.
    """

    def __init__(self, module: Module, gate: Optional[NavigationGate] = None, start_index: int = 0):
        self.module = module
        self.gate = gate or NavigationGate()
        self._index = 0
        self.jump_to(start_index)

    @property
    def total_sections(self) -> int:
        return self.module.total_sections

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_section(self) -> Optional[Section]:
        if not self.module.sections:
            return None
        return self.module.sections[self._index]

    @property
    def is_first(self) -> bool:
        return self._index == 0

    @property
    def is_last(self) -> bool:
        return self._index >= self.total_sections - 1

    def get_position(self) -> tuple[int, int]:
        """Current position as (1-based index, total)."""
        if not self.module.sections:
            return (0, 0)
        return (self._index + 1, self.total_sections)

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def check_advance(
        self,
        progress: SectionProgress | SectionProgressTracker,
        has_submitted_assessment: bool,
    ) -> NavigationDecision:
        section = self.current_section
        if section is None:
            return NavigationDecision(False, "This module has no sections.", NavigationAction.FINISH)
        return self.gate.can_advance(section, progress, has_submitted_assessment, self.is_last)

    def advance(
        self,
        progress: SectionProgress | SectionProgressTracker,
        has_submitted_assessment: bool,
    ) -> NavigationDecision:
        """
        Move forward if the gate allows it.

        On the last section a permitted advance leaves the position unchanged
        and returns a FINISH decision for the caller to act on.
        """
        decision = self.check_advance(progress, has_submitted_assessment)
        if decision.allowed and decision.action == NavigationAction.NEXT:
            self._index += 1
        return decision

    def go_back(self) -> bool:
        """Move to the previous section. Returns False on the first section."""
        if self.is_first:
            return False
        self._index -= 1
        return True

    def jump_to(self, index: int) -> bool:
        """Jump to a section by position (out-of-range indices are ignored)."""
        if not 0 <= index < max(self.total_sections, 1):
            return False
        self._index = index
        return True
