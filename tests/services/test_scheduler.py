"""Tests for the bounded-concurrency scheduler."""

from __future__ import annotations

import asyncio

import pytest

from namevault.services.scheduler import BoundedScheduler, run_bounded
from namevault.shared.errors import DomainError


class Tracker:
    """Worker recording concurrency and completion order."""

    def __init__(self, delays: dict[int, float] | None = None, fail: set[int] | None = None) -> None:
        self.delays = delays or {}
        self.fail = fail or set()
        self.in_flight = 0
        self.peak = 0
        self.started: list[int] = []

    async def __call__(self, task: int) -> int:
        self.started.append(task)
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(task, 0.005))
            if task in self.fail:
                raise ValueError(f"task {task} failed")
            return task * 10
        finally:
            self.in_flight -= 1


class TestBoundedScheduler:
    """Sliding-window behavior."""

    def test_window_below_one_is_rejected(self) -> None:
        with pytest.raises(DomainError):
            BoundedScheduler(0)

    @pytest.mark.asyncio
    async def test_never_exceeds_window(self) -> None:
        # Given
        worker = Tracker()
        scheduler = BoundedScheduler(3)

        # When
        outcomes = await scheduler.run(range(20), worker)

        # Then
        assert len(outcomes) == 20
        assert worker.peak == 3
        assert scheduler.max_in_flight == 3
        assert scheduler.in_flight == 0

    @pytest.mark.asyncio
    async def test_window_slides_on_each_completion(self) -> None:
        # Given: task 0 is slow, the others are fast
        worker = Tracker(delays={0: 0.2})
        scheduler = BoundedScheduler(2)

        # When
        outcomes = await scheduler.run(range(6), worker)

        # Then: fast tasks keep flowing through the second slot
        assert [outcome.task for outcome in outcomes] == [1, 2, 3, 4, 5, 0]

    @pytest.mark.asyncio
    async def test_failures_become_outcomes(self) -> None:
        worker = Tracker(fail={2})

        outcomes = await run_bounded(range(4), worker, window_size=2)

        by_task = {outcome.task: outcome for outcome in outcomes}
        assert isinstance(by_task[2].error, ValueError)
        assert not by_task[2].succeeded
        assert by_task[3].records == 30
        assert sorted(worker.started) == [0, 1, 2, 3]

    @pytest.mark.asyncio
    async def test_empty_input(self) -> None:
        assert await run_bounded([], Tracker(), window_size=1) == []

    @pytest.mark.asyncio
    async def test_cancel_event_stops_new_tasks(self) -> None:
        # Given: the event is set once the first task finishes
        cancel_event = asyncio.Event()

        async def worker(task: int) -> int:
            await asyncio.sleep(0.01)
            cancel_event.set()
            return task

        # When
        outcomes = await run_bounded(range(10), worker, window_size=2, cancel_event=cancel_event)

        # Then
        finished = [outcome for outcome in outcomes if outcome.succeeded]
        cancelled = [outcome for outcome in outcomes if outcome.cancelled]
        assert len(outcomes) == 10
        assert len(finished) == 2
        assert len(cancelled) == 8
        assert all(outcome.error is None for outcome in cancelled)

    @pytest.mark.asyncio
    async def test_caller_cancellation_leaves_in_flight_tasks_running(self) -> None:
        # Given
        finished: list[int] = []

        async def worker(task: int) -> int:
            await asyncio.sleep(0.05)
            finished.append(task)
            return task

        runner = asyncio.ensure_future(run_bounded(range(5), worker, window_size=2))
        await asyncio.sleep(0.01)

        # When
        runner.cancel()
        with pytest.raises(asyncio.CancelledError):
            await runner
        await asyncio.sleep(0.1)

        # Then: the two started tasks completed, the rest never started
        assert sorted(finished) == [0, 1]
