"""
Bounded background execution.

Timer fires, notification actions and restart signals all run their store and
scheduler calls off the UI thread. ``go_async`` returns a ``PendingResult``
token that the host keeps alive; the token is finished exactly once, either
when the work settles or when the execution window runs out, whichever is
first. Work still running after the window is logged and abandoned.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from enum import StrEnum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class WorkOutcome(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    ABANDONED = "abandoned"


class PendingResult:
    def __init__(self, name: str) -> None:
        self.name = name
        self.outcome = WorkOutcome.PENDING
        self.result: Any = None
        self.future: Future | None = None
        self._done = threading.Event()
        self._lock = threading.Lock()

    @property
    def finished(self) -> bool:
        return self._done.is_set()

    def finish(self, outcome: WorkOutcome, result: Any = None) -> bool:
        with self._lock:
            if self._done.is_set():
                return False
            self.outcome = outcome
            self.result = result
            self._done.set()
            return True

    def wait(self, timeout: float | None = None) -> bool:
        return self._done.wait(timeout)


class BackgroundWork:
    def __init__(self, *, max_workers: int = 4, window_seconds: float = 10.0) -> None:
        self.window_seconds = max(0.1, float(window_seconds))
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, int(max_workers)),
            thread_name_prefix="reminder-work",
        )

    def go_async(self, name: str, fn: Callable[..., Any], *args: Any) -> PendingResult:
        pending = PendingResult(name)
        watchdog = threading.Timer(self.window_seconds, self._abandon, args=(pending,))
        watchdog.daemon = True

        def _settle(future: Future) -> None:
            watchdog.cancel()
            if future.cancelled():
                pending.finish(WorkOutcome.ABANDONED)
                return
            exc = future.exception()
            if exc is not None:
                logger.error("background work %s failed", name, exc_info=exc)
                pending.finish(WorkOutcome.FAILED)
                return
            pending.finish(WorkOutcome.COMPLETED, future.result())

        watchdog.start()
        try:
            future = self._executor.submit(fn, *args)
        except RuntimeError:
            watchdog.cancel()
            logger.warning("background work %s rejected: executor is shut down", name)
            pending.finish(WorkOutcome.ABANDONED)
            return pending

        pending.future = future
        future.add_done_callback(_settle)
        return pending

    def _abandon(self, pending: PendingResult) -> None:
        if not pending.finish(WorkOutcome.ABANDONED):
            return
        logger.warning(
            "background work %s exceeded %.1fs window; abandoned",
            pending.name,
            self.window_seconds,
        )
        if pending.future is not None:
            pending.future.cancel()

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=True)
