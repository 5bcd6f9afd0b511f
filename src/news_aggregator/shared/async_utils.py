"""
Async Utilities for concurrent source fetching.

Provides:
- Parallel execution with asyncio.TaskGroup, optionally collecting
  per-task exceptions instead of failing fast
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


async def gather_with_errors(
    *coros: Awaitable[T],
    return_exceptions: bool = False,
) -> list[T | Exception]:
    """
    Execute coroutines in parallel using TaskGroup.

    Results keep the order of ``coros``. With ``return_exceptions=True`` a
    failing coroutine yields its exception in its slot and the others run to
    completion; otherwise the first failure cancels the rest.

    Example:
        results = await gather_with_errors(
            adapter.fetch_feed(feed_a),
            adapter.fetch_feed(feed_b),
            return_exceptions=True,
        )
    """
    if not coros:
        return []

    if return_exceptions:
        results: list[T | Exception] = [None] * len(coros)  # type: ignore[list-item]

        async def safe_run(coro: Awaitable[T], index: int) -> None:
            try:
                results[index] = await coro
            except Exception as e:
                results[index] = e

        async with asyncio.TaskGroup() as tg:
            for i, coro in enumerate(coros):
                tg.create_task(safe_run(coro, i))
        return results

    async with asyncio.TaskGroup() as tg:
        tasks = [tg.create_task(coro) for coro in coros]
    return [task.result() for task in tasks]
