"""Shared fixtures for the VARK module engine tests."""

from datetime import datetime, timedelta

import pytest

from varkmodules.auth import LearnerContext
from varkmodules.classroom import CompletionScheduler, SQLiteStore
from varkmodules.config import EngineConfig
from varkmodules.errors import PersistenceError
from varkmodules.schemas import Module


class FakeClock:
    """Deterministic time source that only moves when told to."""

    def __init__(self, start: datetime = datetime(2024, 5, 1, 9, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


def build_module(**overrides) -> Module:
    """Pre-test, lesson text, activity and post-test, two questions per test."""
    data = {
        "id": "mod-water-cycle",
        "title": "Water Cycle",
        "description": "Evaporation, condensation and precipitation.",
        "created_by": "teacher-1",
        "sections": [
            {"id": "pre-test-section", "title": "Pre-Test", "content_type": "assessment"},
            {"id": "lesson", "title": "Lesson", "content_type": "text",
             "content_data": {"text": "<p>Water moves.</p>"}},
            {"id": "lab", "title": "Lab", "content_type": "activity"},
            {"id": "post-test-section", "title": "Post-Test", "content_type": "assessment"},
        ],
        "assessment_questions": [
            {"id": "pre-test-1", "type": "single_choice", "question": "Rain is a form of?",
             "options": ["Evaporation", "Precipitation"], "correct_answer": "Precipitation"},
            {"id": "pre-test-2", "type": "true_false", "question": "Clouds are water vapour.",
             "options": ["True", "False"], "correct_answer": "False"},
            {"id": "post-test-1", "type": "short_answer", "question": "Vapour to liquid is called?",
             "correct_answer": "Condensation"},
            {"id": "post-test-2", "type": "multiple_choice", "question": "Which are stages?",
             "options": ["Evaporation", "Condensation", "Combustion"],
             "correct_answer": ["Evaporation", "Condensation"]},
        ],
    }
    data.update(overrides)
    return Module.model_validate(data)


@pytest.fixture
def module() -> Module:
    return build_module()


@pytest.fixture
def learner() -> LearnerContext:
    return LearnerContext(user_id="student-1", name="Ana Reyes")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(tmp_path) -> SQLiteStore:
    return SQLiteStore(tmp_path / "vark.db")


@pytest.fixture
def config(tmp_path) -> EngineConfig:
    return EngineConfig(db_path=tmp_path / "vark.db", completion_delay_seconds=60)


@pytest.fixture
def scheduler():
    # Long delay: tests run the pending check explicitly
    scheduler = CompletionScheduler(delay_seconds=60)
    yield scheduler
    scheduler.cancel()


@pytest.fixture
def make_module():
    return build_module


class FlakyStore:
    """Store double that fails writes to the listed tables."""

    def __init__(self, store, failing_tables=()):
        self.store = store
        self.failing_tables = set(failing_tables)

    def _check(self, table):
        if table in self.failing_tables:
            raise PersistenceError(f"{table} unavailable")

    def upsert(self, table, record, conflict_key):
        self._check(table)
        return self.store.upsert(table, record, conflict_key)

    def insert(self, table, record):
        self._check(table)
        return self.store.insert(table, record)

    def get(self, table, match):
        return self.store.get(table, match)

    def select(self, table, match=None):
        return self.store.select(table, match)


@pytest.fixture
def flaky_store(store) -> FlakyStore:
    return FlakyStore(store)
