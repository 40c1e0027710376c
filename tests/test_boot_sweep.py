from __future__ import annotations

from datetime import timedelta

from todoapp.reminders.boot import BootRecoverySweep, RestartEvent, SweepSummary
from todoapp.reminders.keys import timer_key
from todoapp.reminders.work import WorkOutcome

from .fakes import T0, FakeStore, make_todo


def _store() -> FakeStore:
    return FakeStore(
        [
            make_todo(1, title="A", reminder_at=T0 + timedelta(hours=1)),
            make_todo(2, title="B", reminder_at=T0 - timedelta(hours=1)),
            make_todo(3, title="C", reminder_at=None),
            make_todo(4, title="D", reminder_at=T0 + timedelta(hours=1), is_completed=True),
        ]
    )


def test_sweep_reschedules_only_future_active_reminders(scheduler, timers, work, clock) -> None:
    sweep = BootRecoverySweep(_store(), scheduler, work, now=clock)

    summary = sweep.run()

    assert summary == SweepSummary(attempted=1, succeeded=1)
    assert list(timers.timers) == [timer_key(1)]
    assert timers.timers[timer_key(1)].when == T0 + timedelta(hours=1)


def test_repeated_sweeps_keep_one_timer_per_todo(scheduler, timers, work, clock) -> None:
    sweep = BootRecoverySweep(_store(), scheduler, work, now=clock)

    sweep.run()
    sweep.run()

    assert list(timers.timers) == [timer_key(1)]


def test_sweep_counts_failures_and_continues(scheduler, timers, work, clock) -> None:
    store = FakeStore([make_todo(i, reminder_at=T0 + timedelta(hours=i)) for i in (1, 2, 3)])
    timers.failing_keys.add(timer_key(2))

    summary = BootRecoverySweep(store, scheduler, work, now=clock).run()

    assert summary == SweepSummary(attempted=3, succeeded=2)
    assert sorted(timers.timers) == [timer_key(1), timer_key(3)]


def test_sweep_survives_store_failure(scheduler, timers, work, clock) -> None:
    store = _store()
    store.fail_reads = True

    summary = BootRecoverySweep(store, scheduler, work, now=clock).run()

    assert summary == SweepSummary(attempted=0, succeeded=0)
    assert timers.timers == {}


def test_restart_signal_runs_sweep_in_background(scheduler, timers, work, clock) -> None:
    sweep = BootRecoverySweep(_store(), scheduler, work, now=clock)

    pending = sweep.on_restart(RestartEvent.BOOT_COMPLETED)

    assert pending is not None
    assert pending.wait(5)
    assert pending.outcome is WorkOutcome.COMPLETED
    assert pending.result == SweepSummary(attempted=1, succeeded=1)


def test_unrelated_lifecycle_event_is_ignored(scheduler, timers, work, clock) -> None:
    sweep = BootRecoverySweep(_store(), scheduler, work, now=clock)

    assert sweep.on_restart("screen_on") is None
    assert sweep.on_restart("package_replaced") is not None
