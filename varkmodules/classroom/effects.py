"""
Completion side effects - Execute the commands the coordinator returns.

Each command (persist completion, award badge, notify teacher) runs
independently: one failing does not stop the others. Failures are logged
and reported as user-facing warnings, and the failed commands are kept so
the learner can retry them.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

from varkmodules.errors import CollaboratorError, NotificationError, PersistenceError
from varkmodules.schemas import (
    AwardBadge,
    CompletionCommand,
    NotifyTeacher,
    NOTIFICATIONS_TABLE,
    PersistCompletion,
)

from .store import PersistenceService, to_record


logger = logging.getLogger(__name__)

WARNINGS = {
    "persist_completion": "Failed to save completion. Please try again.",
    "award_badge": "Failed to award your badge. Please try again.",
    "notify_teacher": "Your teacher could not be notified. Please try again.",
}


class Notifier(Protocol):
    def notify(self, recipient_id: str, message: Mapping[str, Any]) -> None:
        ...


class StoreNotifier:
    """Deliver teacher notifications by writing them to the store."""

    def __init__(self, store: PersistenceService, table: str = NOTIFICATIONS_TABLE):
        self.store = store
        self.table = table

    def notify(self, recipient_id: str, message: Mapping[str, Any]) -> None:
        record = {**to_record(message), "teacher_id": recipient_id, "is_read": False}
        try:
            self.store.insert(self.table, record)
        except PersistenceError as e:
            raise NotificationError(f"Failed to create notification for {recipient_id}") from e


@dataclass
class EffectFailure:
    command: CompletionCommand
    error: str

    @property
    def warning(self) -> str:
        return WARNINGS.get(self.command.kind, "Something went wrong. Please try again.")


@dataclass
class EffectReport:
    succeeded: list[str] = field(default_factory=list)
    failures: list[EffectFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def warnings(self) -> list[str]:
        return [failure.warning for failure in self.failures]

    @property
    def failed_commands(self) -> list[CompletionCommand]:
        return [failure.command for failure in self.failures]


class CompletionEffects:
    """Run completion commands against the persistence and notification services."""

    def __init__(self, store: PersistenceService, notifier: Notifier):
        self.store = store
        self.notifier = notifier

    def run(self, command: CompletionCommand):
        if isinstance(command, PersistCompletion):
            self.store.upsert(command.table, to_record(command.record), command.conflict_key)
        elif isinstance(command, AwardBadge):
            self.store.insert(command.table, to_record(command.record))
        elif isinstance(command, NotifyTeacher):
            self.notifier.notify(command.recipient_id, to_record(command.notification))
        else:
            raise ValueError(f"Unknown completion command: {command!r}")

    def execute(self, commands: list[CompletionCommand]) -> EffectReport:
        """
        Run every command, collecting failures instead of stopping.

        Returns:
            EffectReport listing succeeded command kinds and failures
        """
        report = EffectReport()
        for command in commands:
            try:
                self.run(command)
            except CollaboratorError as e:
                logger.error(f"Completion effect {command.kind} failed: {e}")
                report.failures.append(EffectFailure(command=command, error=str(e)))
            else:
                report.succeeded.append(command.kind)
        return report
