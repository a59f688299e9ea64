"""
ModuleSession - One learner working through one module.

Combines the engine components into the learner-facing flow:
- draft answers and assessment submission (grading + scoring)
- section completion (SectionProgressTracker)
- gated navigation (SectionNavigator / NavigationGate)
- debounced completion (CompletionScheduler -> ModuleCompletionCoordinator)
- execution of completion side effects (CompletionEffects)

Learner work is saved to the persistence service as it happens, and a
previously saved progress snapshot and saved submissions are used to resume.
Collaborator failures never interrupt the learner; they are logged and
collected in `warnings`.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from varkmodules.auth import LearnerContext
from varkmodules.config import EngineConfig
from varkmodules.errors import PersistenceError
from varkmodules.grading import AssessmentScorer, answer_key
from varkmodules.schemas import (
    AssessmentResult,
    COMPLETIONS_TABLE,
    Module,
    ModuleCompletionOutcome,
    ModuleProgressRecord,
    ModuleStatus,
    PROGRESS_TABLE,
    Section,
    SUBMISSIONS_TABLE,
)

from .completion import ModuleCompletionCoordinator
from .effects import CompletionEffects, EffectReport, Notifier, StoreNotifier
from .navigator import NavigationAction, NavigationDecision, SectionNavigator
from .progress import SectionProgressTracker
from .scheduler import CompletionScheduler
from .store import PersistenceService, to_record


logger = logging.getLogger(__name__)


@dataclass
class CompletionResult:
    """Completion outcome plus what happened to its side effects."""
    outcome: ModuleCompletionOutcome
    report: EffectReport = field(default_factory=EffectReport)

    @property
    def warnings(self) -> list[str]:
        return self.report.warnings


CompletionListener = Callable[[CompletionResult], None]


class ModuleSession:
    """
    In-memory session state for a learner and a module.

    Without a learner, or in preview mode, the session grades and navigates
    normally but never persists anything and never completes the module.
    """

    def __init__(
        self,
        module: Module,
        learner: Optional[LearnerContext],
        store: Optional[PersistenceService] = None,
        notifier: Optional[Notifier] = None,
        config: Optional[EngineConfig] = None,
        prior_progress: Optional[Mapping[str, bool]] = None,
        scheduler: Optional[CompletionScheduler] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Open a module session.

        Args:
            module: Module to deliver (read-only)
            learner: Signed-in learner, or None
            store: Persistence service for learner records
            notifier: Teacher notification sink (default: write to store)
            config: Engine configuration
            prior_progress: Section flags to resume from; merged with any
                snapshot found in the store
            scheduler: Debounce for the completion check
            clock: Time source
        """
        self.module = module
        self.learner = learner
        self.config = config or EngineConfig()
        self.clock = clock
        self.store = store
        self.preview = self.config.preview_mode or learner is None

        self.started_at = clock()
        self.answers: dict[str, dict[str, Any]] = {}
        self.results: dict[str, AssessmentResult] = {}
        self.submitted: set[str] = set()
        self.warnings: list[str] = []
        self.completion: Optional[CompletionResult] = None
        self.closed = False
        self._completion_listeners: list[CompletionListener] = []

        self.scorer = AssessmentScorer(self.config.passing_score)
        self.navigator = SectionNavigator(module)
        self.coordinator = ModuleCompletionCoordinator(
            module, passing_score=self.config.passing_score, clock=clock
        )
        self.scheduler = scheduler or CompletionScheduler(self.config.completion_delay_seconds, clock=clock)
        self.effects = None
        if store is not None:
            self.effects = CompletionEffects(store, notifier or StoreNotifier(store))

        self._load_saved_submissions()
        restored = self._load_saved_progress()
        merged = {**restored, **{k: v for k, v in (prior_progress or {}).items() if v}}
        self.tracker = SectionProgressTracker.initialize(module.section_ids, merged)
        self.tracker.add_listener(self._on_section_completed)

        if self._completion_already_saved():
            self.coordinator.mark_fired()
        self._schedule_completion_if_ready()

    # -------------------------------------------------------------------------
    # Persistence helpers
    # -------------------------------------------------------------------------

    @property
    def persists(self) -> bool:
        return not self.preview and self.store is not None

    def _learner_key(self) -> dict:
        return {"student_id": self.learner.user_id, "module_id": self.module.id}

    def _warn(self, message: str):
        self.warnings.append(message)

    def _load_saved_progress(self) -> dict[str, bool]:
        if not self.persists:
            return {}
        try:
            record = self.store.get(PROGRESS_TABLE, self._learner_key())
        except PersistenceError as e:
            logger.warning(f"Could not load saved progress for {self.module.id}: {e}")
            self._warn("Failed to load your saved progress.")
            return {}
        if not record:
            return {}
        return {section_id: True for section_id in record.get("completed_sections", [])}

    def _load_saved_submissions(self):
        """Restore submitted sections and their results from earlier visits."""
        if not self.persists:
            return
        try:
            records = self.store.select(SUBMISSIONS_TABLE, self._learner_key())
        except PersistenceError as e:
            logger.warning(f"Could not load saved submissions for {self.module.id}: {e}")
            self._warn("Failed to load your saved answers.")
            return
        for record in records:
            section_id = record.get("section_id")
            if self.module.get_section(section_id) is None:
                continue
            self.submitted.add(section_id)
            answers = (record.get("submission_data") or {}).get("answers")
            if answers:
                self.answers[section_id] = dict(answers)
            if record.get("assessment_results"):
                self.results[section_id] = AssessmentResult.model_validate(record["assessment_results"])

    def _completion_already_saved(self) -> bool:
        if not self.persists:
            return False
        try:
            return self.store.get(COMPLETIONS_TABLE, self._learner_key()) is not None
        except PersistenceError as e:
            logger.warning(f"Could not check saved completion for {self.module.id}: {e}")
            return False

    def _save_progress(self):
        all_done = self.tracker.all_complete()
        now = self.clock()
        record = ModuleProgressRecord(
            **self._learner_key(),
            status=ModuleStatus.COMPLETED if all_done else ModuleStatus.IN_PROGRESS,
            progress_percentage=round(self.tracker.completion_percent()),
            completed_sections=self.tracker.completed_section_ids(),
            started_at=self.started_at,
            completed_at=now if all_done else None,
            last_accessed_at=now,
        )
        try:
            self.store.upsert(PROGRESS_TABLE, to_record(record), ("student_id", "module_id"))
        except PersistenceError as e:
            logger.error(f"Failed to save progress for {self.module.id}: {e}")
            self._warn("Failed to save your progress.")

    def _save_submission(self, section: Section, answers: Mapping[str, Any], result: Optional[AssessmentResult]):
        record = {
            **self._learner_key(),
            "section_id": section.id,
            "section_title": section.title,
            "section_type": section.content_type.value,
            "submission_data": {"answers": dict(answers)},
            "assessment_results": to_record(result) if result else None,
            "submission_status": "submitted",
            "submitted_at": self.clock().isoformat(),
        }
        try:
            self.store.upsert(SUBMISSIONS_TABLE, record, ("student_id", "module_id", "section_id"))
        except PersistenceError as e:
            logger.error(f"Failed to save submission for {section.id}: {e}")
            self._warn("Failed to save your answers.")

    # -------------------------------------------------------------------------
    # Answers and submission
    # -------------------------------------------------------------------------

    def set_answer(self, section_id: str, question_index: int, value: Any):
        """Record a draft answer for a question in an assessment section."""
        self.answers.setdefault(section_id, {})[answer_key(question_index)] = value

    def has_submitted(self, section_id: str) -> bool:
        return section_id in self.submitted

    def submit_assessment(
        self,
        section_id: str,
        answers: Optional[Mapping[Any, Any]] = None,
    ) -> Optional[AssessmentResult]:
        """
        Submit an assessment section and mark it complete.

        Args:
            section_id: Section being submitted
            answers: Answers keyed by question position (default: the
                drafts recorded with set_answer)

        Returns:
            The AssessmentResult, or None when the section is unknown or
            presents no questions
        """
        section = self.module.get_section(section_id)
        if section is None:
            logger.warning(f"Ignoring submission for unknown section: {section_id}")
            return None

        if answers is not None:
            self.answers[section_id] = dict(answers)
        submitted_answers = self.answers.get(section_id, {})

        result = None
        questions = self.module.questions_for_section(section)
        if questions:
            result = self.scorer.score(questions, submitted_answers, section_id=section_id)
            self.results[section_id] = result
            logger.info(
                f"Assessment {section_id}: {result.total_earned}/{result.total_possible} "
                f"({result.percentage:.1f}%) passed={result.passed}"
            )

        self.submitted.add(section_id)
        if self.persists:
            self._save_submission(section, submitted_answers, result)
        self.tracker.mark_complete(section_id)
        return result

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    def mark_complete(self, section_id: str):
        """Manual "mark as complete" for a non-assessment section."""
        self.tracker.mark_complete(section_id)

    def is_complete(self, section_id: str) -> bool:
        return self.tracker.is_complete(section_id)

    def progress_percent(self) -> float:
        return self.tracker.completion_percent()

    def add_completion_listener(self, listener: CompletionListener):
        self._completion_listeners.append(listener)

    def _on_section_completed(self, section_id: str, newly_completed: bool):
        if newly_completed and self.persists:
            self._save_progress()
        self._schedule_completion_if_ready()

    def _schedule_completion_if_ready(self):
        if self.preview or self.closed or self.coordinator.has_fired:
            return
        if self.tracker.all_complete():
            self.scheduler.schedule(self.check_completion)

    def poll(self) -> bool:
        """Run the completion check if its delay has elapsed. Call once per UI turn."""
        return self.scheduler.poll()

    def check_completion(self) -> Optional[CompletionResult]:
        """
        Run the completion coordinator and execute its side effects.

        Returns:
            The CompletionResult when this call completed the module
        """
        if self.preview or self.closed:
            return None

        decision = self.coordinator.check_and_complete(
            self.tracker,
            self.results,
            self.clock() - self.started_at,
            self.learner,
        )
        if decision is None:
            return None

        report = EffectReport()
        if self.effects is not None:
            report = self.effects.execute(decision.commands)
        self.completion = CompletionResult(outcome=decision.outcome, report=report)
        self.warnings.extend(report.warnings)

        for listener in self._completion_listeners:
            listener(self.completion)
        return self.completion

    def retry_failed_effects(self) -> Optional[EffectReport]:
        """Re-run completion side effects that failed; None if nothing to retry."""
        if self.completion is None or self.effects is None or self.completion.report.ok:
            return None
        retry = self.effects.execute(self.completion.report.failed_commands)
        succeeded = self.completion.report.succeeded + retry.succeeded
        self.completion.report = EffectReport(succeeded=succeeded, failures=retry.failures)
        return self.completion.report

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    @property
    def current_section(self) -> Optional[Section]:
        return self.navigator.current_section

    @property
    def current_index(self) -> int:
        return self.navigator.current_index

    def can_advance(self) -> NavigationDecision:
        section = self.current_section
        submitted = section is not None and self.has_submitted(section.id)
        return self.navigator.check_advance(self.tracker, submitted)

    def advance(self) -> NavigationDecision:
        """
        Move to the next section, or finish the module from the last one.

        Finishing runs a pending completion check immediately.
        """
        section = self.current_section
        submitted = section is not None and self.has_submitted(section.id)
        decision = self.navigator.advance(self.tracker, submitted)
        if decision.allowed and decision.action == NavigationAction.FINISH:
            self.scheduler.run_pending()
        return decision

    def go_back(self) -> bool:
        return self.navigator.go_back()

    def jump_to(self, index: int) -> bool:
        return self.navigator.jump_to(index)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self):
        """End the session; a pending completion check is cancelled, not run."""
        self.closed = True
        self.scheduler.cancel()
