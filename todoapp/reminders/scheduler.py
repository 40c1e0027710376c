from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable

from todoapp.domain.clock import as_utc, utcnow
from todoapp.domain.entities import TodoEntity

from .keys import ReminderPayload, timer_key
from .ports import PermissionGate, TimerRegistry

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """Keeps exactly one timer per todo with a future reminder, and none otherwise."""

    def __init__(
        self,
        timers: TimerRegistry,
        permissions: PermissionGate,
        *,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        self._timers = timers
        self._permissions = permissions
        self._now = now

    def can_schedule_exact(self) -> bool:
        try:
            return bool(self._permissions.can_schedule_exact_timers())
        except Exception:
            logger.exception("exact timer capability check failed; assuming unavailable")
            return False

    def schedule_reminder(self, todo: TodoEntity) -> bool:
        reminder_at = as_utc(todo.reminder_at)
        if reminder_at is None:
            logger.debug("Todo %s has no reminder; nothing to schedule", todo.id)
            return False
        if reminder_at <= self._now():
            logger.info("Todo %s reminder %s is not in the future; skipped", todo.id, reminder_at)
            return False

        try:
            payload = ReminderPayload.from_todo(todo).to_dict()
            key = timer_key(payload["todo_id"])
            if self.can_schedule_exact():
                self._timers.register_exact(key, reminder_at, payload)
                logger.info("Exact timer scheduled for todo %s at %s", todo.id, reminder_at)
            else:
                self._timers.register_approximate(key, reminder_at, payload)
                logger.warning(
                    "Approximate timer scheduled for todo %s at %s; delivery may be delayed",
                    todo.id,
                    reminder_at,
                )
        except Exception:
            logger.exception("Failed to schedule reminder for todo %s", todo.id)
            return False
        return True

    def cancel_reminder(self, todo_id: int) -> bool:
        try:
            removed = self._timers.cancel(timer_key(todo_id))
        except Exception:
            logger.exception("Failed to cancel reminder for todo %s", todo_id)
            return False
        logger.debug("Reminder for todo %s cancelled (existed=%s)", todo_id, removed)
        return True

    def update_reminder(self, todo: TodoEntity) -> bool:
        """Cancel any timer for the todo, then schedule again when a reminder is set."""
        if todo.id is not None:
            self.cancel_reminder(todo.id)
        if todo.reminder_at is None:
            logger.debug("Reminder removed for todo %s", todo.id)
            return False
        return self.schedule_reminder(todo)

    def schedule_reminders(self, todos: Iterable[TodoEntity]) -> int:
        todos = list(todos)
        scheduled = 0
        for todo in todos:
            try:
                if self.schedule_reminder(todo):
                    scheduled += 1
            except Exception:
                logger.exception("Failed to schedule reminder for todo %s", getattr(todo, "id", None))
        logger.info("Scheduled %d/%d reminders", scheduled, len(todos))
        return scheduled

    def cancel_reminders(self, todo_ids: Iterable[int]) -> int:
        todo_ids = list(todo_ids)
        cancelled = 0
        for todo_id in todo_ids:
            try:
                if self.cancel_reminder(todo_id):
                    cancelled += 1
            except Exception:
                logger.exception("Failed to cancel reminder for todo %s", todo_id)
        logger.info("Cancelled %d/%d reminders", cancelled, len(todo_ids))
        return cancelled

    def describe(self) -> str:
        exact = self.can_schedule_exact()
        lines = [
            "Reminder scheduler:",
            f"- exact timers available: {'yes' if exact else 'no'}",
        ]
        if not exact:
            lines.append("- reminders are batched and may be delayed")
        return "\n".join(lines)
