"""
Completion side-effect, scheduler and store tests.
"""

import threading
from datetime import datetime, timedelta

import pytest

from varkmodules.classroom import (
    CompletionEffects,
    CompletionScheduler,
    ModuleCompletionCoordinator,
    SectionProgressTracker,
    SQLiteStore,
    StoreNotifier,
)
from varkmodules.errors import NotificationError, PersistenceError
from varkmodules.schemas import (
    BADGES_TABLE,
    COMPLETIONS_TABLE,
    NOTIFICATIONS_TABLE,
    AssessmentResult,
)


@pytest.fixture
def commands(module, learner, clock):
    tracker = SectionProgressTracker(module.section_ids, {sid: True for sid in module.section_ids})
    results = {"post-test-section": AssessmentResult(percentage=85.0, total_possible=4, total_earned=3)}
    decision = ModuleCompletionCoordinator(module, clock=clock).check_and_complete(
        tracker, results, timedelta(minutes=7), learner
    )
    return decision.commands


class TestSQLiteStore:
    """Test the reference persistence service."""

    def test_upsert_replaces(self, store):
        store.upsert(COMPLETIONS_TABLE, {"student_id": "s", "module_id": "m", "final_score": 50},
                     ("student_id", "module_id"))
        store.upsert(COMPLETIONS_TABLE, {"student_id": "s", "module_id": "m", "final_score": 80},
                     ("student_id", "module_id"))
        rows = store.select(COMPLETIONS_TABLE)
        assert len(rows) == 1
        assert rows[0]["final_score"] == 80

    def test_upsert_missing_conflict_field(self, store):
        with pytest.raises(PersistenceError):
            store.upsert(COMPLETIONS_TABLE, {"student_id": "s"}, ("student_id", "module_id"))

    def test_insert_appends(self, store):
        first = store.insert(BADGES_TABLE, {"student_id": "s", "badge_name": "a"})
        store.insert(BADGES_TABLE, {"student_id": "s", "badge_name": "b"})
        assert first["id"]
        assert [r["badge_name"] for r in store.select(BADGES_TABLE)] == ["a", "b"]

    def test_select_filters(self, store):
        store.insert(BADGES_TABLE, {"student_id": "s1"})
        store.insert(BADGES_TABLE, {"student_id": "s2"})
        assert store.count(BADGES_TABLE, {"student_id": "s2"}) == 1
        assert store.get(BADGES_TABLE, {"student_id": "s3"}) is None

    def test_select_filters_on_several_fields(self, store):
        store.insert(NOTIFICATIONS_TABLE, {"teacher_id": "t1", "is_read": False, "priority": "high"})
        store.insert(NOTIFICATIONS_TABLE, {"teacher_id": "t1", "is_read": True, "priority": "high"})
        store.insert(NOTIFICATIONS_TABLE, {"teacher_id": "t2", "is_read": False, "priority": None})
        assert store.count(NOTIFICATIONS_TABLE, {"teacher_id": "t1", "is_read": False}) == 1
        assert store.count(NOTIFICATIONS_TABLE, {"is_read": True}) == 1
        assert store.get(NOTIFICATIONS_TABLE, {"priority": None})["teacher_id"] == "t2"
        assert store.count(NOTIFICATIONS_TABLE, {"teacher_id": "t3"}) == 0

    def test_tables_are_separate(self, store):
        store.insert(BADGES_TABLE, {"student_id": "s"})
        assert store.select(NOTIFICATIONS_TABLE) == []

    def test_datetimes_serialized(self, store):
        store.insert(BADGES_TABLE, {"earned_date": datetime(2024, 1, 2, 3, 4, 5)})
        assert store.select(BADGES_TABLE)[0]["earned_date"] == "2024-01-02 03:04:05"

    def test_persists_across_instances(self, tmp_path):
        SQLiteStore(tmp_path / "a.db").insert(BADGES_TABLE, {"student_id": "s"})
        assert SQLiteStore(tmp_path / "a.db").count(BADGES_TABLE) == 1


class TestCompletionEffects:
    """Test execution of completion commands."""

    def test_all_commands_succeed(self, store, commands):
        report = CompletionEffects(store, StoreNotifier(store)).execute(commands)

        assert report.ok
        assert report.succeeded == ["persist_completion", "award_badge", "notify_teacher"]
        completion = store.get(COMPLETIONS_TABLE, {"student_id": "student-1"})
        assert completion["final_score"] == 85
        badge = store.get(BADGES_TABLE, {"student_id": "student-1"})
        assert badge["badge_rarity"] == "silver"
        notification = store.get(NOTIFICATIONS_TABLE, {"teacher_id": "teacher-1"})
        assert notification["is_read"] is False
        assert notification["priority"] == "normal"

    def test_failure_does_not_stop_other_commands(self, store, flaky_store, commands):
        flaky = flaky_store
        flaky.failing_tables.add(COMPLETIONS_TABLE)
        report = CompletionEffects(flaky, StoreNotifier(flaky)).execute(commands)

        assert not report.ok
        assert report.warnings == ["Failed to save completion. Please try again."]
        assert report.succeeded == ["award_badge", "notify_teacher"]
        assert store.count(BADGES_TABLE) == 1

    def test_failed_commands_can_be_retried(self, store, flaky_store, commands):
        flaky = flaky_store
        flaky.failing_tables.add(BADGES_TABLE)
        effects = CompletionEffects(flaky, StoreNotifier(flaky))
        report = effects.execute(commands)
        assert [c.kind for c in report.failed_commands] == ["award_badge"]

        flaky.failing_tables.clear()
        retry = effects.execute(report.failed_commands)
        assert retry.ok
        assert store.count(BADGES_TABLE) == 1

    def test_notifier_wraps_store_errors(self, flaky_store):
        flaky_store.failing_tables.add(NOTIFICATIONS_TABLE)
        notifier = StoreNotifier(flaky_store)
        with pytest.raises(NotificationError):
            notifier.notify("teacher-1", {"title": "t"})

    def test_notification_failure_warning(self, flaky_store, commands):
        flaky = flaky_store
        flaky.failing_tables.add(NOTIFICATIONS_TABLE)
        report = CompletionEffects(flaky, StoreNotifier(flaky)).execute(commands)
        assert report.warnings == ["Your teacher could not be notified. Please try again."]


class TestCompletionScheduler:
    """Test the completion debounce."""

    def test_run_pending(self):
        scheduler = CompletionScheduler(delay_seconds=60)
        calls = []
        scheduler.schedule(lambda: calls.append(1))
        assert scheduler.pending
        assert scheduler.run_pending()
        assert calls == [1]
        assert not scheduler.pending
        assert not scheduler.run_pending()

    def test_cancel(self):
        scheduler = CompletionScheduler(delay_seconds=60)
        calls = []
        scheduler.schedule(lambda: calls.append(1))
        assert scheduler.cancel()
        assert not scheduler.run_pending()
        assert calls == []
        assert not scheduler.cancel()

    def test_reschedule_replaces(self):
        scheduler = CompletionScheduler(delay_seconds=60)
        calls = []
        scheduler.schedule(lambda: calls.append("first"))
        scheduler.schedule(lambda: calls.append("second"))
        scheduler.run_pending()
        assert calls == ["second"]

    def test_poll_waits_for_deadline(self, clock):
        scheduler = CompletionScheduler(delay_seconds=1, clock=clock)
        calls = []
        scheduler.schedule(lambda: calls.append(threading.current_thread()))
        assert scheduler.seconds_remaining() == 1.0

        clock.advance(milliseconds=500)
        assert not scheduler.poll()
        assert calls == []

        clock.advance(milliseconds=500)
        assert scheduler.poll()
        assert calls == [threading.current_thread()]
        assert not scheduler.pending
        assert scheduler.seconds_remaining() is None

    def test_reschedule_moves_deadline(self, clock):
        scheduler = CompletionScheduler(delay_seconds=1, clock=clock)
        calls = []
        scheduler.schedule(lambda: calls.append(1))
        clock.advance(milliseconds=800)
        scheduler.schedule(lambda: calls.append(2))
        clock.advance(milliseconds=800)
        assert not scheduler.poll()
        clock.advance(milliseconds=200)
        assert scheduler.poll()
        assert calls == [2]
