from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any

from todoapp.domain.entities import TodoEntity
from todoapp.domain.enums import Priority
from todoapp.domain.errors import StoreError

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


class FixedClock:
    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


def make_todo(
    todo_id: int | None = 1,
    *,
    title: str = "Pay rent",
    reminder_at: datetime | None = None,
    is_completed: bool = False,
    priority: Priority = Priority.MEDIUM,
    description: str = "",
) -> TodoEntity:
    return TodoEntity(
        id=todo_id,
        title=title,
        description=description,
        priority=priority,
        due_at=T0 + timedelta(days=2),
        reminder_at=reminder_at,
        is_completed=is_completed,
        created_at=T0 - timedelta(days=1),
        updated_at=T0 - timedelta(days=1),
    )


class FakeStore:
    """In-memory todo store; ``fail_reads`` / ``fail_writes`` simulate I/O errors."""

    def __init__(self, todos: list[TodoEntity] | None = None) -> None:
        self.todos: dict[int, TodoEntity] = {t.id: t for t in todos or []}
        self.fail_reads = False
        self.fail_writes = False
        self.reads = 0
        self.calls: list[str] = []

    def _read(self) -> None:
        self.reads += 1
        if self.fail_reads:
            raise StoreError("disk unavailable")

    def _write(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_writes:
            raise StoreError("disk full")

    def get_todo(self, todo_id: int) -> TodoEntity | None:
        self._read()
        return self.todos.get(todo_id)

    def list_todos(self) -> list[TodoEntity]:
        self._read()
        return list(self.todos.values())

    def update_todo(self, entity: TodoEntity) -> TodoEntity | None:
        self._write("update_todo")
        if entity.id not in self.todos:
            return None
        self.todos[entity.id] = entity
        return entity

    def delete_todo(self, todo_id: int) -> None:
        self._write("delete_todo")
        self.todos.pop(todo_id, None)

    def mark_complete(self, todo_id: int) -> bool:
        return self._set_completed("mark_complete", todo_id, True)

    def mark_incomplete(self, todo_id: int) -> bool:
        return self._set_completed("mark_incomplete", todo_id, False)

    def _set_completed(self, name: str, todo_id: int, value: bool) -> bool:
        self._write(name)
        if todo_id not in self.todos:
            return False
        self.todos[todo_id] = replace(self.todos[todo_id], is_completed=value)
        return True


@dataclass
class RegisteredTimer:
    when: datetime
    payload: dict[str, Any]
    exact: bool


class FakeTimerRegistry:
    def __init__(self) -> None:
        self.timers: dict[str, RegisteredTimer] = {}
        self.cancelled: list[str] = []
        self.failing_keys: set[str] = set()

    def register_exact(self, key: str, when: datetime, payload: dict[str, Any]) -> None:
        self._register(key, when, payload, exact=True)

    def register_approximate(self, key: str, when: datetime, payload: dict[str, Any]) -> None:
        self._register(key, when, payload, exact=False)

    def _register(self, key: str, when: datetime, payload: dict[str, Any], *, exact: bool) -> None:
        if key in self.failing_keys:
            raise RuntimeError(f"registry rejected {key}")
        self.timers[key] = RegisteredTimer(when=when, payload=dict(payload), exact=exact)

    def cancel(self, key: str) -> bool:
        self.cancelled.append(key)
        return self.timers.pop(key, None) is not None

    def fire(self, key: str) -> dict[str, Any]:
        return self.timers.pop(key).payload


class FakePermissionGate:
    def __init__(self, granted: bool = True) -> None:
        self.granted = granted
        self.checks = 0

    def can_schedule_exact_timers(self) -> bool:
        self.checks += 1
        return self.granted


@dataclass
class ShownAlert:
    todo_id: int
    title: str
    description: str
    priority: Priority


@dataclass
class FakePresenter:
    shown: list[ShownAlert] = field(default_factory=list)
    dismissed: list[int] = field(default_factory=list)
    live: dict[int, ShownAlert] = field(default_factory=dict)

    def show(self, todo_id: int, title: str, description: str, priority: Priority) -> None:
        alert = ShownAlert(todo_id, title, description, priority)
        self.shown.append(alert)
        self.live[todo_id] = alert

    def dismiss(self, todo_id: int) -> None:
        self.dismissed.append(todo_id)
        self.live.pop(todo_id, None)


@dataclass
class FakeMessenger:
    messages: list[str] = field(default_factory=list)

    def show_message(self, text: str) -> None:
        self.messages.append(text)
