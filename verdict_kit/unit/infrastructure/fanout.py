"""Bounded, positional, fail-fast fan-out of async calls."""

import asyncio
from collections.abc import Awaitable, Callable, Sequence

from verdict_kit.core.errors import VerdictKitError


async def gather_bounded[T](
    factories: Sequence[Callable[[], Awaitable[T]]], limit: int
) -> list[T]:
    """Run every factory with at most limit calls in flight.

    At most limit worker tasks exist, each pulling the next index from a shared
    iterator, so a large batch never spawns one task per call. Result i is
    always the result of factories[i], whatever order the calls finish in. The
    first failure cancels the calls still running and is re-raised on its own
    rather than wrapped in an exception group.
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")

    results: list[T | None] = [None] * len(factories)
    pending = iter(range(len(factories)))

    async def worker() -> None:
        for index in pending:
            results[index] = await factories[index]()

    try:
        async with asyncio.TaskGroup() as tg:
            for _ in range(min(limit, len(factories))):
                tg.create_task(worker())
    except* VerdictKitError as eg:
        raise eg.exceptions[0]

    return results  # type: ignore[return-value]
