"""Bounded-concurrency scheduler.

Runs an arbitrary number of tasks through an async worker while keeping at
most ``window_size`` of them in flight. The window slides: as soon as one
task completes the next queued task starts.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Protocol, TypeVar

from namevault.services.models import TaskOutcome
from namevault.shared.constants import LogContextKeys, LogOperationNames
from namevault.shared.errors import create_validation_error
from namevault.shared.logging import log_operation_success

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Strong references to tasks left running after their caller was cancelled.
_detached_tasks: set[asyncio.Future[Any]] = set()


class CancelSignal(Protocol):
    """Anything with ``is_set()``: ``asyncio.Event`` or ``threading.Event``."""

    def is_set(self) -> bool: ...


class BoundedScheduler:
    """Sliding-window task runner.

    The scheduler never retries; a worker exception becomes a failed
    outcome. Cancellation is cooperative:

    - once ``cancel_event`` is set no new task starts, in-flight tasks
      finish and unstarted tasks are reported as cancelled outcomes;
    - if the awaiting coroutine itself is cancelled, tasks already in
      flight keep running to completion and the cancellation propagates.

    Attributes:
        window_size: Maximum number of tasks in flight
        max_in_flight: Peak in-flight count observed during the last run

    One instance serves one run at a time; callers running concurrently
    each build their own scheduler.

    Example:
        >>> scheduler = BoundedScheduler(window_size=4)
        >>> outcomes = await scheduler.run(tasks, worker)
        >>> scheduler.max_in_flight <= 4
        True
    """

    def __init__(self, window_size: int) -> None:
        if window_size < 1:
            raise create_validation_error(
                f"window_size must be at least 1, got {window_size}",
                field="window_size",
                operation=LogOperationNames.RUN_BOUNDED,
            )
        self.window_size = window_size
        self.max_in_flight = 0
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    async def run(
        self,
        tasks: Iterable[T],
        worker: Callable[[T], Awaitable[Any]],
        cancel_event: CancelSignal | None = None,
    ) -> list[TaskOutcome]:
        """Run ``worker`` over ``tasks`` with a sliding window.

        Args:
            tasks: Units of work, started in iteration order
            worker: Async callable applied to each task
            cancel_event: Optional cooperative cancellation signal

        Returns:
            One outcome per task, in completion order; cancelled tasks last
        """
        queue: deque[T] = deque(tasks)
        outcomes: list[TaskOutcome] = []
        pending: dict[asyncio.Future[TaskOutcome], T] = {}
        started = time.perf_counter()
        total = len(queue)
        self.max_in_flight = 0

        def cancelled() -> bool:
            return cancel_event is not None and cancel_event.is_set()

        def fill_window() -> None:
            while queue and len(pending) < self.window_size and not cancelled():
                task = queue.popleft()
                future = asyncio.ensure_future(self._invoke(worker, task))
                pending[future] = task
                self._in_flight = len(pending)
                self.max_in_flight = max(self.max_in_flight, self._in_flight)

        try:
            fill_window()
            while pending:
                done, _ = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for future in done:
                    task = pending.pop(future)
                    if future.cancelled():
                        outcomes.append(TaskOutcome(task=task, cancelled=True))
                    else:
                        outcomes.append(future.result())
                self._in_flight = len(pending)
                fill_window()
        except asyncio.CancelledError:
            for future in pending:
                _detached_tasks.add(future)
                future.add_done_callback(_detached_tasks.discard)
            logger.debug(
                "Scheduler cancelled with %d tasks in flight and %d queued",
                len(pending),
                len(queue),
            )
            raise
        finally:
            self._in_flight = len(pending)

        if queue:
            logger.info("Cancellation requested; %d queued tasks not started", len(queue))
            outcomes.extend(TaskOutcome(task=task, cancelled=True) for task in queue)

        log_operation_success(
            logger=logger,
            operation=LogOperationNames.RUN_BOUNDED,
            duration_ms=(time.perf_counter() - started) * 1000,
            result_info={
                "tasks": total,
                "failed": sum(1 for outcome in outcomes if outcome.error is not None),
                "cancelled": len(queue),
                "max_in_flight": self.max_in_flight,
            },
            context={LogContextKeys.WINDOW_SIZE: self.window_size},
        )
        return outcomes

    @staticmethod
    async def _invoke(worker: Callable[[T], Awaitable[Any]], task: T) -> TaskOutcome:
        started = time.perf_counter()
        try:
            records = await worker(task)
        except Exception as e:  # noqa: BLE001
            return TaskOutcome(task=task, error=e, duration=time.perf_counter() - started)
        return TaskOutcome(task=task, records=records, duration=time.perf_counter() - started)


async def run_bounded(
    tasks: Iterable[T],
    worker: Callable[[T], Awaitable[Any]],
    window_size: int,
    cancel_event: CancelSignal | None = None,
) -> list[TaskOutcome]:
    """Run ``worker`` over ``tasks`` with at most ``window_size`` in flight.

    Convenience wrapper around :class:`BoundedScheduler`.
    """
    return await BoundedScheduler(window_size).run(tasks, worker, cancel_event)


__all__ = ["BoundedScheduler", "CancelSignal", "run_bounded"]
