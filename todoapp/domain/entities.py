from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import Priority


@dataclass(frozen=True)
class TodoEntity:
    id: int | None
    title: str
    description: str
    priority: Priority
    due_at: datetime
    reminder_at: Optional[datetime]
    is_completed: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class TodoStatistics:
    total: int
    completed: int
    active: int
    completion_rate: int
