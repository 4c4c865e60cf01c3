from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

from media_pipeline.enums import FanOutPolicy
from logger.filtered_logger import LogChannel, debug as log_debug, warning as log_warning


T = TypeVar("T")
R = TypeVar("R")


async def fan_out(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    *,
    policy: FanOutPolicy = FanOutPolicy.FAIL_FAST,
    on_error: Callable[[T, Exception], R] | None = None,
    max_concurrency: int | None = None,
) -> list[R]:
    """Run *worker* on every item concurrently and return results in input order.

    FAIL_FAST re-raises the first failure after cancelling the outstanding items.
    COLLECT_PARTIAL replaces each failed item's result with ``on_error(item, exc)``.
    """
    if policy is FanOutPolicy.COLLECT_PARTIAL and on_error is None:
        raise ValueError("COLLECT_PARTIAL fan-out requires an on_error callback")
    if not items:
        return []

    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def _guarded(item: T) -> R:
        if semaphore is None:
            return await worker(item)
        async with semaphore:
            return await worker(item)

    tasks = [asyncio.ensure_future(_guarded(item)) for item in items]
    log_debug(LogChannel.INFERENCE, f"Fan-out of {len(tasks)} items ({policy.value}, max_concurrency={max_concurrency})")

    if policy is FanOutPolicy.FAIL_FAST:
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    try:
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    results: list[R] = []
    for index, (item, outcome) in enumerate(zip(items, outcomes)):
        if isinstance(outcome, Exception):
            log_warning(LogChannel.INFERENCE, f"Item {index} failed: {type(outcome).__name__}: {outcome}")
            results.append(on_error(item, outcome))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            results.append(outcome)
    return results
