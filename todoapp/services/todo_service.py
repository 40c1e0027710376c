from __future__ import annotations

import logging
import re
from dataclasses import replace
from datetime import datetime
from typing import Callable

from todoapp.domain.clock import as_utc, utcnow
from todoapp.domain.entities import TodoEntity, TodoStatistics
from todoapp.domain.enums import Priority, SortOption
from todoapp.domain.errors import TodoValidationError
from todoapp.domain.filters import TodoFilters
from todoapp.infra.repository import TodoRepository
from todoapp.reminders.ports import NotificationPresenter, UserMessenger
from todoapp.reminders.scheduler import ReminderScheduler

logger = logging.getLogger(__name__)

APPROXIMATE_ADVISORY = "Exact reminders are unavailable; reminders may arrive a little late"
MAX_SEARCH_LENGTH = 100
_FORBIDDEN_SEARCH_CHARS = re.compile(r"[<>\"';]")

SORT_LABELS = {
    SortOption.CREATED_DESC: "Newest First",
    SortOption.CREATED_ASC: "Oldest First",
    SortOption.PRIORITY: "Priority",
    SortOption.DUE_DATE_ASC: "Due Date",
    SortOption.DUE_DATE_DESC: "Due Date (Latest)",
}


class TodoService:
    def __init__(
        self,
        repo: TodoRepository,
        reminders: ReminderScheduler,
        *,
        messenger: UserMessenger | None = None,
        presenter: NotificationPresenter | None = None,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repo = repo
        self._reminders = reminders
        self._messenger = messenger
        self._presenter = presenter
        self._now = now
        self._advised = False

    def get_todo(self, todo_id: int) -> TodoEntity | None:
        return self._repo.get_todo(todo_id)

    def list_active(self, filters: TodoFilters) -> list[TodoEntity]:
        search = filters.search.strip() if filters.search else None
        return self._repo.list_active(replace(filters, search=search or None))

    def list_completed(self) -> list[TodoEntity]:
        return self._repo.list_completed()

    def create_todo(self, data: dict) -> TodoEntity:
        normalized = self._normalize_data(data)
        self._validate(normalized)
        todo = self._repo.create_todo(normalized)
        if todo.reminder_at is not None:
            self._advise_if_approximate()
            self._reminders.schedule_reminder(todo)
        return todo

    def update_todo(self, todo: TodoEntity) -> TodoEntity | None:
        """Persist an edited todo and re-arm its reminder (cancel + schedule).

        The reminder-before-due rule only applies when the edit touches either
        date, so a snoozed reminder past the due date does not block renames.
        """
        current = self._repo.get_todo(todo.id)
        if current is None:
            return None
        normalized = replace(
            todo,
            title=todo.title.strip(),
            due_at=as_utc(todo.due_at),
            reminder_at=as_utc(todo.reminder_at),
        )
        dates_changed = (normalized.due_at, normalized.reminder_at) != (
            current.due_at,
            current.reminder_at,
        )
        self._validate(
            {
                "title": normalized.title,
                "due_at": normalized.due_at,
                "reminder_at": normalized.reminder_at,
            },
            check_due_in_past=False,
            check_reminder_order=dates_changed,
        )
        stored = self._repo.update_todo(normalized)
        if not stored:
            return None
        if stored.is_completed:
            self._reminders.cancel_reminder(stored.id)
            self._dismiss(stored.id)
        else:
            if stored.reminder_at is not None:
                self._advise_if_approximate()
            self._reminders.update_reminder(stored)
        return stored

    def delete_todo(self, todo_id: int) -> None:
        self._repo.delete_todo(todo_id)
        self._reminders.cancel_reminder(todo_id)
        self._dismiss(todo_id)

    def mark_complete(self, todo_id: int) -> None:
        self._repo.mark_complete(todo_id)
        self._reminders.cancel_reminder(todo_id)
        self._dismiss(todo_id)

    def mark_incomplete(self, todo_id: int) -> TodoEntity | None:
        self._repo.mark_incomplete(todo_id)
        todo = self._repo.get_todo(todo_id)
        if todo and todo.reminder_at is not None:
            self._reminders.schedule_reminder(todo)
        return todo

    def delete_all(self) -> int:
        ids = self._repo.delete_all()
        self._reminders.cancel_reminders(ids)
        for todo_id in ids:
            self._dismiss(todo_id)
        return len(ids)

    def delete_all_completed(self) -> int:
        ids = self._repo.delete_all_completed()
        self._reminders.cancel_reminders(ids)
        for todo_id in ids:
            self._dismiss(todo_id)
        return len(ids)

    def clear_all_reminders(self) -> int:
        todo_ids = [todo.id for todo in self._repo.list_todos() if todo.reminder_at is not None]
        return self._reminders.cancel_reminders(todo_ids)

    def get_statistics(self) -> TodoStatistics:
        counts = self._repo.get_counts()
        total = counts["total"]
        completed = counts["completed"]
        return TodoStatistics(
            total=total,
            completed=completed,
            active=counts["active"],
            completion_rate=(completed * 100) // total if total else 0,
        )

    def can_schedule_exact(self) -> bool:
        return self._reminders.can_schedule_exact()

    @staticmethod
    def validate_search_query(query: str) -> str:
        clean = query.strip()
        if len(clean) > MAX_SEARCH_LENGTH:
            raise TodoValidationError(f"Search query too long (max {MAX_SEARCH_LENGTH} characters)")
        if _FORBIDDEN_SEARCH_CHARS.search(clean):
            raise TodoValidationError("Search query contains invalid characters")
        return clean

    @staticmethod
    def sort_option_label(option: SortOption) -> str:
        return SORT_LABELS[option]

    @staticmethod
    def available_sort_options() -> list[SortOption]:
        return [SortOption.CREATED_DESC, SortOption.PRIORITY, SortOption.DUE_DATE_ASC]

    def _advise_if_approximate(self) -> None:
        if self._advised or self._messenger is None:
            return
        if self._reminders.can_schedule_exact():
            return
        self._advised = True
        self._messenger.show_message(APPROXIMATE_ADVISORY)

    def _dismiss(self, todo_id: int) -> None:
        if self._presenter is None:
            return
        try:
            self._presenter.dismiss(todo_id)
        except Exception:
            logger.exception("Failed to dismiss reminder for todo %s", todo_id)

    def _normalize_data(self, data: dict) -> dict:
        normalized = dict(data)
        normalized["title"] = str(normalized.get("title", "")).strip()
        normalized.setdefault("description", "")
        priority = normalized.get("priority", Priority.MEDIUM)
        if isinstance(priority, str):
            priority = Priority.from_label(priority)
        normalized["priority"] = Priority(priority)
        normalized["due_at"] = as_utc(normalized.get("due_at"))
        normalized["reminder_at"] = as_utc(normalized.get("reminder_at"))
        normalized.setdefault("is_completed", False)
        return normalized

    def _validate(
        self,
        data: dict,
        *,
        check_due_in_past: bool = True,
        check_reminder_order: bool = True,
    ) -> None:
        if not data.get("title"):
            raise TodoValidationError("Title cannot be empty")
        due_at = data.get("due_at")
        if due_at is None:
            raise TodoValidationError("Due date is required")
        if check_due_in_past and due_at < self._now():
            raise TodoValidationError("Due date cannot be in the past")
        reminder_at = data.get("reminder_at")
        if check_reminder_order and reminder_at is not None and reminder_at > due_at:
            raise TodoValidationError("Reminder cannot be after due date")
