from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from todoapp.domain.entities import TodoEntity
from todoapp.domain.enums import Priority

TIMER_KEY_PREFIX = "todo-reminder"
DEFAULT_TITLE = "Todo Reminder"


def timer_key(todo_id: int) -> str:
    return f"{TIMER_KEY_PREFIX}:{int(todo_id)}"


def parse_todo_id(raw: Any) -> int | None:
    """Return a positive todo id, or None when the value is missing or garbled."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, float) and not raw.is_integer():
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw.isdigit():
            return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


@dataclass(frozen=True)
class ReminderPayload:
    """Snapshot carried by a timer; display fallback only, never used to decide firing."""

    todo_id: int
    title: str
    description: str
    priority: Priority

    @classmethod
    def from_todo(cls, todo: TodoEntity) -> ReminderPayload:
        todo_id = parse_todo_id(todo.id)
        if todo_id is None:
            raise ValueError(f"todo has no usable id: {todo.id!r}")
        return cls(
            todo_id=todo_id,
            title=todo.title,
            description=todo.description,
            priority=Priority(todo.priority),
        )

    @classmethod
    def from_dict(cls, raw: Any) -> ReminderPayload | None:
        if not isinstance(raw, dict):
            return None
        todo_id = parse_todo_id(raw.get("todo_id"))
        if todo_id is None:
            return None
        try:
            priority = Priority(int(raw.get("priority", Priority.MEDIUM)))
        except (TypeError, ValueError):
            priority = Priority.MEDIUM
        return cls(
            todo_id=todo_id,
            title=str(raw.get("title") or DEFAULT_TITLE),
            description=str(raw.get("description") or ""),
            priority=priority,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "todo_id": self.todo_id,
            "title": self.title,
            "description": self.description,
            "priority": int(self.priority),
        }
