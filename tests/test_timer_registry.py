from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

import pytest

from todoapp.reminders.timers import (
    APSchedulerTimerRegistry,
    ExactTimerPermission,
    coalesce_fire_time,
)

WHEN = datetime(2099, 1, 1, 12, 0, 30, tzinfo=timezone.utc)


@pytest.fixture()
def registry():
    fired: list[dict] = []
    reg = APSchedulerTimerRegistry(fired.append, approximate_window_seconds=60)
    reg.start(paused=True)
    yield reg
    reg.shutdown()


def test_exact_registration_uses_requested_instant(registry) -> None:
    registry.register_exact("todo-reminder:1", WHEN, {"todo_id": 1, "title": "Pay rent"})

    assert registry.scheduled_for("todo-reminder:1") == WHEN
    assert registry.pending_keys() == ["todo-reminder:1"]


def test_same_key_replaces_previous_job(registry) -> None:
    registry.register_exact("todo-reminder:1", WHEN, {"todo_id": 1})
    registry.register_exact("todo-reminder:1", WHEN + timedelta(hours=1), {"todo_id": 1})

    assert registry.pending_keys() == ["todo-reminder:1"]
    assert registry.scheduled_for("todo-reminder:1") == WHEN + timedelta(hours=1)


def test_approximate_registration_is_batched(registry) -> None:
    registry.register_approximate("todo-reminder:2", WHEN, {"todo_id": 2})

    assert registry.scheduled_for("todo-reminder:2") == datetime(2099, 1, 1, 12, 1, tzinfo=timezone.utc)


def test_cancel_unknown_key_is_not_an_error(registry) -> None:
    registry.register_exact("todo-reminder:3", WHEN, {"todo_id": 3})

    assert registry.cancel("todo-reminder:3") is True
    assert registry.cancel("todo-reminder:3") is False
    assert registry.scheduled_for("todo-reminder:3") is None


def test_coalesce_keeps_boundary_times() -> None:
    boundary = datetime(2099, 1, 1, 12, 0, tzinfo=timezone.utc)

    assert coalesce_fire_time(boundary, 60) == boundary
    assert coalesce_fire_time(WHEN, 0) == WHEN


def test_due_timer_invokes_callback_with_payload() -> None:
    received: list[dict] = []
    done = threading.Event()

    def on_fire(payload: dict) -> None:
        received.append(payload)
        done.set()

    reg = APSchedulerTimerRegistry(on_fire)
    reg.start()
    try:
        when = datetime.now(timezone.utc) + timedelta(milliseconds=200)
        reg.register_exact("todo-reminder:4", when, {"todo_id": 4, "title": "Call mom"})

        assert done.wait(5)
        assert received == [{"todo_id": 4, "title": "Call mom"}]
    finally:
        reg.shutdown()


def test_exact_permission_can_be_revoked() -> None:
    permission = ExactTimerPermission()
    assert permission.can_schedule_exact_timers() is True

    permission.revoke()
    assert permission.can_schedule_exact_timers() is False

    permission.grant()
    assert permission.can_schedule_exact_timers() is True
