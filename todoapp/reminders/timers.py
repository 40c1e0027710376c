from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.date import DateTrigger

logger = logging.getLogger(__name__)


def coalesce_fire_time(when: datetime, window_seconds: int) -> datetime:
    """Round ``when`` up to the next window boundary, like an OS batching inexact alarms."""
    if window_seconds <= 0:
        return when
    bucket = math.ceil(when.timestamp() / window_seconds) * window_seconds
    return datetime.fromtimestamp(bucket, tz=timezone.utc)


class ExactTimerPermission:
    """Revocable capability to register exact timers."""

    def __init__(self, granted: bool = True) -> None:
        self._granted = granted

    def can_schedule_exact_timers(self) -> bool:
        return self._granted

    def grant(self) -> None:
        self._granted = True

    def revoke(self) -> None:
        self._granted = False


class APSchedulerTimerRegistry:
    """
    Timer registry backed by an in-memory APScheduler job store.

    Jobs use the timer key as their id with ``replace_existing=True``, so a
    second registration for the same todo replaces the first. The job store
    does not survive a restart; the boot sweep rebuilds it from the database.
    """

    def __init__(
        self,
        callback: Callable[[dict[str, Any]], Any],
        *,
        scheduler: BaseScheduler | None = None,
        approximate_window_seconds: int = 60,
    ) -> None:
        self._callback = callback
        self._approximate_window = int(approximate_window_seconds)
        self._scheduler = scheduler or BackgroundScheduler(
            timezone=timezone.utc,
            job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": None},
        )

    def start(self, *, paused: bool = False) -> None:
        if not self._scheduler.running:
            self._scheduler.start(paused=paused)

    def shutdown(self, wait: bool = False) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)

    def register_exact(self, key: str, when: datetime, payload: dict[str, Any]) -> None:
        self._add(key, when, payload)

    def register_approximate(self, key: str, when: datetime, payload: dict[str, Any]) -> None:
        self._add(key, coalesce_fire_time(when, self._approximate_window), payload)

    def _add(self, key: str, when: datetime, payload: dict[str, Any]) -> None:
        title = str(payload.get("title", ""))
        self._scheduler.add_job(
            self._callback,
            trigger=DateTrigger(run_date=when, timezone=timezone.utc),
            args=[dict(payload)],
            id=key,
            name=f"reminder:{title[:30]}",
            replace_existing=True,
            misfire_grace_time=None,
        )
        logger.debug("Timer %s registered for %s", key, when.isoformat())

    def cancel(self, key: str) -> bool:
        try:
            self._scheduler.remove_job(key)
        except JobLookupError:
            return False
        return True

    def scheduled_for(self, key: str) -> datetime | None:
        job = self._scheduler.get_job(key)
        return job.trigger.run_date if job else None

    def pending_keys(self) -> list[str]:
        return sorted(job.id for job in self._scheduler.get_jobs())
