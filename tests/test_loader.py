"""
Module loading, configuration and learner identity tests.
"""

import json
import os
import threading
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from varkmodules.auth import EnvironmentSessionProvider, LearnerContext, Role, resolve_learner
from varkmodules.classroom import ModuleLoader, load_module_file
from varkmodules.config import PASSING_SCORE, EngineConfig, load_config
from varkmodules.errors import CollaboratorError, ModuleLoadError
from varkmodules.schemas import QuestionType, SectionType


SAMPLE_MODULES_DIR = Path(__file__).parent.parent / "data" / "modules"

MODULE_DATA = {
    "id": "mod-fractions",
    "title": "Fractions",
    "sections": [
        {"id": "intro", "content_type": "text", "content_data": {"text": "<p>Parts of a whole.</p>"}},
        {"id": "post-test-section", "content_type": "assessment"},
    ],
    "assessment_questions": [
        {"id": "post-test-1", "type": "true_false", "question": "1/2 > 1/3", "correct_answer": True},
    ],
}


class TestModuleLoader:
    """Test reading module definitions from disk."""

    @pytest.fixture
    def modules_dir(self, tmp_path):
        directory = tmp_path / "modules"
        directory.mkdir()
        (directory / "fractions.yaml").write_text(yaml.safe_dump(MODULE_DATA), encoding="utf-8")
        other = dict(MODULE_DATA, id="mod-decimals", title="Decimals")
        (directory / "decimals.json").write_text(json.dumps(other), encoding="utf-8")
        (directory / "notes.txt").write_text("not a module", encoding="utf-8")
        return directory

    def test_load_yaml(self, modules_dir):
        module = load_module_file(modules_dir / "fractions.yaml")
        assert module.id == "mod-fractions"
        assert module.assessment_questions[0].correct_answer == "True"

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_module_file(tmp_path / "missing.yaml")

    def test_load_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("id: [unclosed", encoding="utf-8")
        with pytest.raises(ModuleLoadError):
            load_module_file(path)

    def test_load_invalid_module(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"id": "x"}), encoding="utf-8")
        with pytest.raises(ModuleLoadError):
            load_module_file(path)

    def test_load_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ModuleLoadError):
            load_module_file(path)

    def test_list_modules(self, modules_dir):
        summaries = ModuleLoader(modules_dir).list_modules()
        assert [s.id for s in summaries] == ["mod-decimals", "mod-fractions"]
        assert summaries[1].section_count == 2
        assert summaries[1].question_count == 1
        assert summaries[1].path == modules_dir / "fractions.yaml"

    def test_invalid_files_skipped(self, modules_dir):
        (modules_dir / "zz_broken.json").write_text("{", encoding="utf-8")
        loader = ModuleLoader(modules_dir)
        assert len(loader.get_all_modules()) == 2

    def test_get_module(self, modules_dir):
        loader = ModuleLoader(modules_dir)
        assert loader.get_module("mod-decimals").title == "Decimals"
        assert loader.get_module("mod-unknown") is None

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ModuleLoader(tmp_path / "nope")

    def test_bundled_sample_module(self):
        module = ModuleLoader(SAMPLE_MODULES_DIR).get_module("mod-photosynthesis")
        assert module is not None
        assert {s.content_type for s in module.sections} == set(SectionType)
        assert {q.type for q in module.assessment_questions} == set(QuestionType)


class TestConfig:
    """Test environment-driven configuration."""

    def test_defaults(self):
        config = load_config(env={})
        assert config.passing_score == PASSING_SCORE
        assert config.completion_delay_seconds == 1.0
        assert not config.preview_mode

    def test_environment_values(self, tmp_path):
        config = load_config(env={
            "VARK_DB_PATH": str(tmp_path / "x.db"),
            "VARK_MODULES_DIR": str(tmp_path),
            "VARK_PASSING_SCORE": "75",
            "VARK_COMPLETION_DELAY": "0.5",
            "VARK_AUTH_TIMEOUT": "3",
            "VARK_PREVIEW_MODE": "Yes",
        })
        assert config.db_path == tmp_path / "x.db"
        assert config.modules_dir == tmp_path
        assert config.passing_score == 75
        assert config.completion_delay_seconds == 0.5
        assert config.auth_timeout_seconds == 3
        assert config.preview_mode

    def test_preview_mode_false_values(self):
        assert not load_config(env={"VARK_PREVIEW_MODE": "0"}).preview_mode

    def test_invalid_values_rejected(self):
        with pytest.raises(ValidationError):
            load_config(env={"VARK_PASSING_SCORE": "150"})
        with pytest.raises(ValidationError):
            EngineConfig(auth_timeout_seconds=0)

    def test_dotenv_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("VARK_PASSING_SCORE", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("VARK_PASSING_SCORE=70\n", encoding="utf-8")
        try:
            config = load_config(dotenv_path=env_file)
        finally:
            os.environ.pop("VARK_PASSING_SCORE", None)
        assert config.passing_score == 70


class TestLearnerResolution:
    """Test session provider lookup."""

    def test_environment_provider(self):
        provider = EnvironmentSessionProvider({
            "VARK_LEARNER_ID": "student-9",
            "VARK_LEARNER_NAME": "Kai",
            "VARK_LEARNER_ROLE": "teacher",
        })
        learner = resolve_learner(provider)
        assert learner.user_id == "student-9"
        assert learner.display_name == "Kai"
        assert learner.role == Role.TEACHER

    def test_no_session(self):
        assert resolve_learner(EnvironmentSessionProvider({})) is None

    def test_display_name_falls_back_to_id(self):
        assert LearnerContext(user_id="s1").display_name == "s1"

    def test_timeout_means_signed_out(self):
        release = threading.Event()

        class HangingProvider:
            def get_current_user(self):
                release.wait(timeout=5)
                return LearnerContext(user_id="late")

        try:
            assert resolve_learner(HangingProvider(), timeout=0.05) is None
        finally:
            release.set()

    def test_provider_failure_means_signed_out(self):
        class BrokenProvider:
            def get_current_user(self):
                raise CollaboratorError("auth service down")

        assert resolve_learner(BrokenProvider()) is None

    def test_invalid_role_means_signed_out(self):
        provider = EnvironmentSessionProvider({"VARK_LEARNER_ID": "u1", "VARK_LEARNER_ROLE": "Student"})
        assert resolve_learner(provider) is None

    def test_unexpected_provider_error_means_signed_out(self):
        class UnreachableProvider:
            def get_current_user(self):
                raise ConnectionError("no route to auth host")

        assert resolve_learner(UnreachableProvider()) is None
