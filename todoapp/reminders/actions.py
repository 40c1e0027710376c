from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any, Callable, Mapping

from todoapp.domain.clock import utcnow

from .keys import parse_todo_id
from .ports import NotificationPresenter, TodoStore, UserMessenger
from .scheduler import ReminderScheduler
from .work import BackgroundWork, PendingResult

logger = logging.getLogger(__name__)

EXTRA_TODO_ID = "todo_id"


class ActionKind(StrEnum):
    COMPLETE = "complete"
    SNOOZE = "snooze"


class ActionOutcome(StrEnum):
    COMPLETED = "completed"
    SNOOZED = "snoozed"
    STALE = "stale"
    FAILED = "failed"


@dataclass(frozen=True)
class ReminderAction:
    kind: ActionKind
    todo_id: int


def parse_action(name: Any, extras: Mapping[str, Any] | None) -> ReminderAction | None:
    """Build an action from a notification button press; None if it cannot be trusted."""
    try:
        kind = ActionKind(str(name).strip().lower())
    except ValueError:
        return None
    todo_id = parse_todo_id((extras or {}).get(EXTRA_TODO_ID))
    if todo_id is None:
        return None
    return ReminderAction(kind=kind, todo_id=todo_id)


class ActionDispatcher:
    def __init__(
        self,
        store: TodoStore,
        scheduler: ReminderScheduler,
        presenter: NotificationPresenter,
        messenger: UserMessenger,
        work: BackgroundWork,
        *,
        snooze_minutes: int = 15,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._presenter = presenter
        self._messenger = messenger
        self._work = work
        self._snooze = timedelta(minutes=snooze_minutes)
        self._snooze_minutes = snooze_minutes
        self._now = now

    def receive(self, name: Any, extras: Mapping[str, Any] | None) -> PendingResult | None:
        action = parse_action(name, extras)
        if action is None:
            logger.error("Rejected notification action %r with extras %r", name, extras)
            return None
        logger.info("Action %s received for todo %s", action.kind.value, action.todo_id)
        return self._work.go_async(f"action-{action.kind.value}", self.dispatch, action)

    def dispatch(self, action: ReminderAction) -> ActionOutcome:
        try:
            if action.kind is ActionKind.COMPLETE:
                return self._complete(action.todo_id)
            return self._snooze_todo(action.todo_id)
        except Exception:
            logger.exception("Unexpected failure handling %s for todo %s", action.kind.value, action.todo_id)
            return ActionOutcome.FAILED

    def _complete(self, todo_id: int) -> ActionOutcome:
        try:
            updated = self._store.mark_complete(todo_id)
        except Exception:
            logger.exception("Failed to complete todo %s", todo_id)
            self._notify("Failed to complete todo")
            return ActionOutcome.FAILED

        if not updated:
            logger.info("Todo %s no longer exists; dismissing stale alert", todo_id)
            self._scheduler.cancel_reminder(todo_id)
            self._presenter.dismiss(todo_id)
            return ActionOutcome.STALE

        # The completion write lands first so a timer firing now finds it completed.
        self._scheduler.cancel_reminder(todo_id)
        self._presenter.dismiss(todo_id)
        self._notify("Todo completed")
        logger.info("Todo %s marked as complete from notification", todo_id)
        return ActionOutcome.COMPLETED

    def _snooze_todo(self, todo_id: int) -> ActionOutcome:
        try:
            todo = self._store.get_todo(todo_id)
        except Exception:
            logger.exception("Failed to read todo %s for snooze", todo_id)
            self._notify("Failed to snooze reminder")
            return ActionOutcome.FAILED

        if todo is None or todo.is_completed:
            logger.info("Todo %s is completed or missing; dismissing stale alert", todo_id)
            self._presenter.dismiss(todo_id)
            return ActionOutcome.STALE

        snoozed = replace(todo, reminder_at=self._now() + self._snooze)
        try:
            stored = self._store.update_todo(snoozed)
        except Exception:
            logger.exception("Failed to update todo %s for snooze", todo_id)
            self._notify("Failed to snooze reminder")
            return ActionOutcome.FAILED

        if stored is None:
            logger.info("Todo %s disappeared while snoozing; dismissing stale alert", todo_id)
            self._presenter.dismiss(todo_id)
            return ActionOutcome.STALE

        self._scheduler.update_reminder(stored)
        self._presenter.dismiss(todo_id)
        self._notify(f"Reminder snoozed for {self._snooze_minutes} minutes")
        logger.info("Todo %s snoozed until %s", todo_id, snoozed.reminder_at)
        return ActionOutcome.SNOOZED

    def _notify(self, text: str) -> None:
        try:
            self._messenger.show_message(text)
        except Exception:
            logger.exception("Failed to show message %r", text)
