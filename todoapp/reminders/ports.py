"""
Ports used by the reminder core.

The scheduler, delivery handler, dispatcher and boot sweep depend on these
Protocols only; the composition root wires the SQLAlchemy store, the
APScheduler registry and the Qt presenter in.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol

from todoapp.domain.entities import TodoEntity
from todoapp.domain.enums import Priority


class TodoStore(Protocol):
    def get_todo(self, todo_id: int) -> Optional[TodoEntity]: ...
    def list_todos(self) -> list[TodoEntity]: ...
    def update_todo(self, entity: TodoEntity) -> Optional[TodoEntity]: ...
    def delete_todo(self, todo_id: int) -> None: ...
    def mark_complete(self, todo_id: int) -> bool: ...
    def mark_incomplete(self, todo_id: int) -> bool: ...


class NotificationPresenter(Protocol):
    """At most one live alert per todo id; ``show`` replaces, ``dismiss`` is idempotent."""

    def show(self, todo_id: int, title: str, description: str, priority: Priority) -> None: ...
    def dismiss(self, todo_id: int) -> None: ...


class TimerRegistry(Protocol):
    """One-shot timers keyed by string; registering an existing key replaces it."""

    def register_exact(self, key: str, when: datetime, payload: dict[str, Any]) -> None: ...
    def register_approximate(self, key: str, when: datetime, payload: dict[str, Any]) -> None: ...
    def cancel(self, key: str) -> bool: ...


class PermissionGate(Protocol):
    def can_schedule_exact_timers(self) -> bool: ...


class UserMessenger(Protocol):
    """Transient, non-blocking user-facing message (toast)."""

    def show_message(self, text: str) -> None: ...
