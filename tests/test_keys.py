from __future__ import annotations

import pytest

from todoapp.domain.enums import Priority
from todoapp.reminders.keys import ReminderPayload, parse_todo_id, timer_key

from .fakes import make_todo


def test_timer_key_is_deterministic_per_todo() -> None:
    assert timer_key(7) == timer_key(7) == "todo-reminder:7"
    assert timer_key(7) != timer_key(8)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (5, 5),
        ("12", 12),
        (" 3 ", 3),
        (0, None),
        (-1, None),
        ("x1", None),
        (None, None),
        (True, None),
        (2.0, 2),
        (5.9, None),
    ],
)
def test_parse_todo_id(raw, expected) -> None:
    assert parse_todo_id(raw) == expected


def test_payload_falls_back_for_missing_display_fields() -> None:
    payload = ReminderPayload.from_dict({"todo_id": 4, "priority": "bogus"})

    assert payload == ReminderPayload(
        todo_id=4,
        title="Todo Reminder",
        description="",
        priority=Priority.MEDIUM,
    )


def test_payload_requires_todo_id() -> None:
    with pytest.raises(ValueError):
        ReminderPayload.from_todo(make_todo(None))
