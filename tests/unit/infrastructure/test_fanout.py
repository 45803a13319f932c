"""Tests for gather_bounded."""

import asyncio

import pytest

from verdict_kit.core.errors import VerdictKitError
from verdict_kit.unit.infrastructure.fanout import gather_bounded


class _Tracker:
    def __init__(self) -> None:
        self.in_flight = 0
        self.max_in_flight = 0
        self.cancelled = 0

    def make(self, value: int, delay: float, fail: bool = False):
        async def call() -> int:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                await asyncio.sleep(delay)
                if fail:
                    raise VerdictKitError(f"Failed to produce {value}")
                return value
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
            finally:
                self.in_flight -= 1

        return call


class TestGatherBounded:
    async def test_results_keep_positional_order(self) -> None:
        tracker = _Tracker()
        factories = [tracker.make(i, delay=0.01 * (5 - i)) for i in range(5)]

        assert await gather_bounded(factories, limit=5) == [0, 1, 2, 3, 4]

    async def test_in_flight_never_exceeds_limit(self) -> None:
        tracker = _Tracker()
        factories = [tracker.make(i, delay=0.01) for i in range(10)]

        await gather_bounded(factories, limit=3)

        assert tracker.max_in_flight == 3

    async def test_worker_tasks_are_bounded_by_limit(self) -> None:
        workers: set[asyncio.Task[object] | None] = set()

        def make(value: int):
            async def call() -> int:
                workers.add(asyncio.current_task())
                await asyncio.sleep(0)
                return value

            return call

        results = await gather_bounded([make(i) for i in range(50)], limit=3)

        assert results == list(range(50))
        assert len(workers) == 3

    async def test_first_failure_is_raised_unwrapped(self) -> None:
        tracker = _Tracker()
        factories = [
            tracker.make(0, delay=0.5),
            tracker.make(1, delay=0.0, fail=True),
            tracker.make(2, delay=0.5),
        ]

        with pytest.raises(VerdictKitError, match="produce 1"):
            await gather_bounded(factories, limit=3)

        assert tracker.cancelled == 2

    async def test_empty_input(self) -> None:
        assert await gather_bounded([], limit=1) == []

    async def test_limit_below_one_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            await gather_bounded([], limit=0)
