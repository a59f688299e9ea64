"""
CompletionScheduler - Cancellable debounce before the completion check.

The completion check runs a short delay after the last section is marked
complete, so that state updates from the same interaction settle first.
Scheduling again replaces a pending check; cancel() drops it (used when
the session closes).

The scheduler owns no thread. It records a deadline, and the owner calls
poll() from its own loop (each app rerun); the callback runs on the
polling thread once the deadline has passed.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from varkmodules.config import COMPLETION_DELAY_SECONDS


logger = logging.getLogger(__name__)


class CompletionScheduler:
    def __init__(
        self,
        delay_seconds: float = COMPLETION_DELAY_SECONDS,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.delay_seconds = delay_seconds
        self.clock = clock
        self.due_at: Optional[datetime] = None
        self._callback: Optional[Callable[[], None]] = None

    @property
    def pending(self) -> bool:
        return self._callback is not None

    def seconds_remaining(self) -> Optional[float]:
        """Seconds until the pending check is due (0 if overdue), None if idle."""
        if self.due_at is None:
            return None
        return max(0.0, (self.due_at - self.clock()).total_seconds())

    def schedule(self, callback: Callable[[], None]):
        """Run `callback` once the delay has passed, replacing any pending run."""
        self._callback = callback
        self.due_at = self.clock() + timedelta(seconds=self.delay_seconds)

    def cancel(self) -> bool:
        """Drop the pending run. Returns True if one was pending."""
        was_pending = self._callback is not None
        self._callback = None
        self.due_at = None
        if was_pending:
            logger.debug("Cancelled pending completion check")
        return was_pending

    def poll(self) -> bool:
        """Run the pending callback if its deadline has passed. Returns True if it ran."""
        if self.due_at is None or self.clock() < self.due_at:
            return False
        return self.run_pending()

    def run_pending(self) -> bool:
        """Run the pending callback now instead of waiting. Returns True if it ran."""
        callback, self._callback = self._callback, None
        self.due_at = None
        if callback is None:
            return False
        callback()
        return True
