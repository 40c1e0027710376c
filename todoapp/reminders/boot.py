from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Callable

from todoapp.domain.clock import as_utc, utcnow

from .ports import TodoStore
from .scheduler import ReminderScheduler
from .work import BackgroundWork, PendingResult

logger = logging.getLogger(__name__)


class RestartEvent(StrEnum):
    BOOT_COMPLETED = "boot_completed"
    PACKAGE_REPLACED = "package_replaced"
    PROCESS_STARTED = "process_started"


@dataclass(frozen=True)
class SweepSummary:
    attempted: int
    succeeded: int


class BootRecoverySweep:
    """
    Re-registers every outstanding reminder after a restart.

    Timers live only in memory, so after a restart the database is the only
    record of which reminders should still fire. Running the sweep twice is
    harmless: timer keys are per todo and re-registration replaces.
    """

    def __init__(
        self,
        store: TodoStore,
        scheduler: ReminderScheduler,
        work: BackgroundWork,
        *,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._work = work
        self._now = now

    def on_restart(self, event: RestartEvent | str) -> PendingResult | None:
        try:
            event = RestartEvent(event)
        except ValueError:
            logger.debug("Ignoring unrelated lifecycle event %r", event)
            return None
        logger.info("Restart signal %s; rescheduling reminders", event.value)
        return self._work.go_async("boot-sweep", self.run)

    def run(self) -> SweepSummary:
        try:
            todos = self._store.list_todos()
        except Exception:
            logger.exception("Failed to fetch todos for rescheduling")
            return SweepSummary(attempted=0, succeeded=0)

        now = self._now()
        pending = [
            todo
            for todo in todos
            if not todo.is_completed
            and todo.reminder_at is not None
            and as_utc(todo.reminder_at) > now
        ]
        logger.info("Found %d todos with future reminders", len(pending))

        succeeded = 0
        for todo in pending:
            try:
                if self._scheduler.schedule_reminder(todo):
                    succeeded += 1
                else:
                    logger.warning("Reminder for todo %s was not rescheduled", todo.id)
            except Exception:
                logger.exception("Failed to reschedule reminder for todo %s", todo.id)

        logger.info("Rescheduled %d/%d reminders", succeeded, len(pending))
        return SweepSummary(attempted=len(pending), succeeded=succeeded)
