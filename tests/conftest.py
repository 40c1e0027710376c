from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from todoapp.infra.db import Base
from todoapp.infra.repository import TodoRepository
from todoapp.reminders.scheduler import ReminderScheduler
from todoapp.reminders.work import BackgroundWork

from .fakes import FakePermissionGate, FakeTimerRegistry, FixedClock


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def timers() -> FakeTimerRegistry:
    return FakeTimerRegistry()


@pytest.fixture()
def permissions() -> FakePermissionGate:
    return FakePermissionGate()


@pytest.fixture()
def scheduler(timers, permissions, clock) -> ReminderScheduler:
    return ReminderScheduler(timers, permissions, now=clock)


@pytest.fixture()
def work():
    worker = BackgroundWork(max_workers=2, window_seconds=5.0)
    yield worker
    worker.shutdown(wait=True)


@pytest.fixture()
def session_factory():
    """In-memory SQLite shared across sessions through a single connection."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture()
def repo(session_factory) -> TodoRepository:
    return TodoRepository(session_factory)
