from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any

from .keys import ReminderPayload
from .ports import NotificationPresenter, TodoStore
from .work import BackgroundWork, PendingResult

logger = logging.getLogger(__name__)


class DeliveryOutcome(StrEnum):
    SHOWN = "shown"
    INVALID_PAYLOAD = "invalid_payload"
    SKIPPED_MISSING = "skipped_missing"
    SKIPPED_COMPLETED = "skipped_completed"
    FAILED = "failed"


class ReminderDeliveryHandler:
    """
    Runs when a reminder timer fires.

    The payload snapshot is only trusted for the todo id; whether to notify and
    what to show always come from a fresh store read, so a todo completed or
    deleted after scheduling never produces a notification.
    """

    def __init__(
        self,
        store: TodoStore,
        presenter: NotificationPresenter,
        work: BackgroundWork,
    ) -> None:
        self._store = store
        self._presenter = presenter
        self._work = work

    def on_timer_fired(self, payload: dict[str, Any]) -> PendingResult:
        return self._work.go_async("reminder-delivery", self.deliver, payload)

    def deliver(self, payload: Any) -> DeliveryOutcome:
        snapshot = ReminderPayload.from_dict(payload)
        if snapshot is None:
            logger.error("Reminder fired with malformed payload %r; ignored", payload)
            return DeliveryOutcome.INVALID_PAYLOAD

        todo_id = snapshot.todo_id
        logger.debug("Reminder fired for todo %s (%s)", todo_id, snapshot.title)
        try:
            todo = self._store.get_todo(todo_id)
            if todo is None:
                logger.info("Todo %s was deleted; skipping notification", todo_id)
                return DeliveryOutcome.SKIPPED_MISSING
            if todo.is_completed:
                logger.info("Todo %s is completed; skipping notification", todo_id)
                return DeliveryOutcome.SKIPPED_COMPLETED

            self._presenter.show(todo_id, todo.title, todo.description, todo.priority)
            logger.info("Notification shown for todo %s", todo_id)
            return DeliveryOutcome.SHOWN
        except Exception:
            logger.exception("Reminder delivery failed for todo %s", todo_id)
            return DeliveryOutcome.FAILED
