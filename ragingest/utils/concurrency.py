"""Bounded fan-out helper shared by the ingestion pipelines.

Text-file parsing/enrichment and binary post-processing both run one
coroutine per file.  Files share no mutable state, so they can run side by
side; the semaphore only keeps the number of simultaneous LLM and storage
calls under provider rate limits.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

_T = TypeVar("_T")

_DEFAULT_LIMIT = 4


async def throttled_gather(
    coros: list[Awaitable[_T]],
    semaphore: asyncio.Semaphore | None = None,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently, at most ``semaphore`` slots at a time.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    semaphore:
        Concurrency gate.  A fresh ``Semaphore(4)`` is used when omitted.
    return_exceptions:
        Mirrors ``asyncio.gather``: when ``True`` exceptions are returned in
        place of results instead of cancelling the siblings.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input coroutines.
    """
    if semaphore is None:
        semaphore = asyncio.Semaphore(_DEFAULT_LIMIT)

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        async with semaphore:
            return await coro

    tasks = [_wrapped(c) for c in coros]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)
