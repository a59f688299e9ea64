"""
Section progress and navigation tests.
"""

import pytest

from varkmodules.classroom import (
    COMPLETE_SECTION_FIRST,
    SUBMIT_ASSESSMENT_FIRST,
    NavigationAction,
    SectionNavigator,
    SectionProgressTracker,
    can_advance,
)
from varkmodules.schemas import Module, Section


class TestSectionProgressTracker:
    """Test section completion tracking."""

    def test_initialize_all_incomplete(self):
        tracker = SectionProgressTracker.initialize(["a", "b", "c"])
        assert tracker.completion_count() == 0
        assert tracker.total_sections == 3
        assert not tracker.all_complete()

    def test_prior_progress_is_kept(self):
        tracker = SectionProgressTracker.initialize(["a", "b"], {"a": True, "b": False, "zzz": True})
        assert tracker.is_complete("a")
        assert not tracker.is_complete("b")
        assert tracker.total_sections == 2
        assert tracker.completed_section_ids() == ["a"]

    def test_mark_complete(self):
        tracker = SectionProgressTracker(["a", "b"])
        snapshot = tracker.mark_complete("a")
        assert snapshot.is_complete("a")
        assert tracker.completion_count() == 1
        assert tracker.completion_percent() == 50.0

    def test_mark_complete_is_idempotent(self):
        tracker = SectionProgressTracker(["a", "b"])
        tracker.mark_complete("a")
        tracker.mark_complete("a")
        assert tracker.completion_count() == 1

    def test_count_never_decreases(self):
        tracker = SectionProgressTracker(["a", "b", "c"])
        counts = []
        for section_id in ["b", "b", "a", "unknown", "c", "a"]:
            tracker.mark_complete(section_id)
            counts.append(tracker.completion_count())
        assert counts == sorted(counts)
        assert 0 <= counts[-1] <= tracker.total_sections
        assert tracker.all_complete()

    def test_unknown_section_ignored(self, caplog):
        tracker = SectionProgressTracker(["a"])
        tracker.mark_complete("nope")
        assert tracker.completion_count() == 0
        assert not tracker.is_complete("nope")
        assert "unknown section" in caplog.text

    def test_listener_called_on_every_mark(self):
        tracker = SectionProgressTracker(["a", "b"])
        events = []
        tracker.add_listener(lambda section_id, new: events.append((section_id, new)))
        tracker.mark_complete("a")
        tracker.mark_complete("a")
        assert events == [("a", True), ("a", False)]

    def test_failing_listener_does_not_block_others(self):
        tracker = SectionProgressTracker(["a"])
        events = []

        def broken(section_id, new):
            raise RuntimeError("boom")

        tracker.add_listener(broken)
        tracker.add_listener(lambda section_id, new: events.append(section_id))
        tracker.mark_complete("a")
        assert events == ["a"]
        assert tracker.is_complete("a")

    def test_empty_module(self):
        tracker = SectionProgressTracker([])
        assert tracker.completion_percent() == 0.0
        assert not tracker.all_complete()

    def test_snapshot_is_a_copy(self):
        tracker = SectionProgressTracker(["a"])
        snapshot = tracker.snapshot()
        tracker.mark_complete("a")
        assert not snapshot.is_complete("a")


class TestNavigationGate:
    """Test forward-navigation guards."""

    @pytest.fixture
    def module(self):
        return Module(id="m", title="M", sections=[
            Section(id="intro", content_type="text"),
            Section(id="quiz", content_type="assessment"),
            Section(id="lab", content_type="activity"),
        ])

    def test_assessment_blocks_until_submitted(self, module):
        tracker = SectionProgressTracker(module.section_ids)
        quiz = module.get_section("quiz")

        decision = can_advance(quiz, tracker, has_submitted_assessment=False)
        assert not decision.allowed
        assert decision.reason == SUBMIT_ASSESSMENT_FIRST

        tracker.mark_complete("quiz")
        decision = can_advance(quiz, tracker, has_submitted_assessment=True)
        assert decision.allowed
        assert decision.reason == ""

    def test_submission_checked_before_completion(self, module):
        tracker = SectionProgressTracker(module.section_ids, {"quiz": True})
        decision = can_advance(module.get_section("quiz"), tracker, has_submitted_assessment=False)
        assert decision.reason == SUBMIT_ASSESSMENT_FIRST

    def test_incomplete_section_blocks(self, module):
        tracker = SectionProgressTracker(module.section_ids)
        decision = can_advance(module.get_section("intro"), tracker, has_submitted_assessment=False)
        assert not decision.allowed
        assert decision.reason == COMPLETE_SECTION_FIRST

    def test_accepts_snapshot(self, module):
        tracker = SectionProgressTracker(module.section_ids)
        tracker.mark_complete("intro")
        assert can_advance(module.get_section("intro"), tracker.snapshot(), False).allowed

    def test_last_section_finishes(self, module):
        tracker = SectionProgressTracker(module.section_ids)
        decision = can_advance(module.get_section("lab"), tracker, False, is_last=True)
        assert decision.action == NavigationAction.FINISH
        assert not decision.allowed


class TestSectionNavigator:
    """Test section sequencing."""

    @pytest.fixture
    def module(self):
        return Module(id="m", title="M", sections=[
            Section(id="intro", content_type="text"),
            Section(id="quiz", content_type="assessment"),
            Section(id="lab", content_type="activity"),
        ])

    def test_walk_through(self, module):
        navigator = SectionNavigator(module)
        tracker = SectionProgressTracker(module.section_ids)

        assert navigator.get_position() == (1, 3)
        assert not navigator.advance(tracker, False).allowed
        assert navigator.current_index == 0

        tracker.mark_complete("intro")
        assert navigator.advance(tracker, False).allowed
        assert navigator.current_section.id == "quiz"

        assert navigator.advance(tracker, False).reason == SUBMIT_ASSESSMENT_FIRST
        tracker.mark_complete("quiz")
        navigator.advance(tracker, True)
        assert navigator.is_last

        tracker.mark_complete("lab")
        decision = navigator.advance(tracker, False)
        assert decision.allowed
        assert decision.action == NavigationAction.FINISH
        assert navigator.current_index == 2

    def test_go_back(self, module):
        navigator = SectionNavigator(module, start_index=1)
        assert navigator.go_back()
        assert navigator.is_first
        assert not navigator.go_back()

    def test_jump_to(self, module):
        navigator = SectionNavigator(module)
        assert navigator.jump_to(2)
        assert navigator.current_section.id == "lab"
        assert not navigator.jump_to(3)
        assert not navigator.jump_to(-1)
        assert navigator.current_index == 2

    def test_empty_module(self):
        navigator = SectionNavigator(Module(id="m", title="Empty"))
        assert navigator.current_section is None
        assert navigator.get_position() == (0, 0)
        assert not navigator.check_advance(SectionProgressTracker([]), False).allowed
