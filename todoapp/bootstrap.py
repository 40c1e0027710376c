"""
Composition root.

Builds the store, the reminder core and the use-case layer once and wires
collaborators explicitly; nothing in the core reaches for a global handle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from apscheduler.schedulers.base import BaseScheduler
from sqlalchemy.orm import sessionmaker

from todoapp.config import SETTINGS, Settings
from todoapp.domain.clock import utcnow
from todoapp.infra.repository import TodoRepository
from todoapp.reminders.actions import ActionDispatcher
from todoapp.reminders.boot import BootRecoverySweep
from todoapp.reminders.delivery import ReminderDeliveryHandler
from todoapp.reminders.ports import NotificationPresenter, UserMessenger
from todoapp.reminders.scheduler import ReminderScheduler
from todoapp.reminders.timers import APSchedulerTimerRegistry, ExactTimerPermission
from todoapp.reminders.work import BackgroundWork
from todoapp.services.todo_service import TodoService

logger = logging.getLogger(__name__)


@dataclass
class ReminderSystem:
    store: TodoRepository
    service: TodoService
    scheduler: ReminderScheduler
    timers: APSchedulerTimerRegistry
    permissions: ExactTimerPermission
    work: BackgroundWork
    delivery: ReminderDeliveryHandler
    dispatcher: ActionDispatcher
    sweep: BootRecoverySweep

    def start(self) -> None:
        self.timers.start()
        logger.info("Reminder system started\n%s", self.scheduler.describe())

    def shutdown(self) -> None:
        self.timers.shutdown(wait=False)
        self.work.shutdown(wait=False)
        logger.info("Reminder system stopped")


def build_reminder_system(
    *,
    session_factory: sessionmaker,
    presenter: NotificationPresenter,
    messenger: UserMessenger,
    settings: Settings = SETTINGS,
    timer_backend: BaseScheduler | None = None,
    now: Callable[[], datetime] = utcnow,
) -> ReminderSystem:
    store = TodoRepository(session_factory)
    work = BackgroundWork(
        max_workers=settings.worker_threads,
        window_seconds=settings.work_window_seconds,
    )
    delivery = ReminderDeliveryHandler(store, presenter, work)
    timers = APSchedulerTimerRegistry(
        delivery.on_timer_fired,
        scheduler=timer_backend,
        approximate_window_seconds=settings.approximate_window_seconds,
    )
    permissions = ExactTimerPermission(granted=settings.exact_timers_enabled)
    scheduler = ReminderScheduler(timers, permissions, now=now)
    dispatcher = ActionDispatcher(
        store,
        scheduler,
        presenter,
        messenger,
        work,
        snooze_minutes=settings.snooze_minutes,
        now=now,
    )
    sweep = BootRecoverySweep(store, scheduler, work, now=now)
    service = TodoService(
        store, scheduler, messenger=messenger, presenter=presenter, now=now
    )
    return ReminderSystem(
        store=store,
        service=service,
        scheduler=scheduler,
        timers=timers,
        permissions=permissions,
        work=work,
        delivery=delivery,
        dispatcher=dispatcher,
        sweep=sweep,
    )
