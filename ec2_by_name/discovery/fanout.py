"""Concurrent fan-out/fan-in of instance-ID lookups.

Two policies are used at different levels of the lookup tree:

* ``gather_fail_fast`` stops at the first failure (per-name and per-address
  lookups). Siblings still pending are cancelled; they are read-only queries.
* ``gather_drain_all`` awaits every branch and reports only the first failure
  (the top-level per-name fan-out).

In both cases branches are consumed in completion order and their results
are merged only by the awaiting coroutine.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Iterable

logger = logging.getLogger(__name__)


async def gather_fail_fast(aws: Iterable[Awaitable[set[str]]]) -> set[str]:
    """Union the results of all awaitables, raising the first error to complete."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    merged: set[str] = set()
    try:
        for next_done in asyncio.as_completed(tasks):
            merged |= await next_done
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
            elif not task.cancelled():
                task.exception()  # mark late failures as retrieved
    return merged


async def gather_drain_all(aws: Iterable[Awaitable[set[str]]]) -> tuple[set[str], Exception | None]:
    """Await every awaitable; return the union of successes and the first error, if any."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    merged: set[str] = set()
    first_error: Exception | None = None
    for next_done in asyncio.as_completed(tasks):
        try:
            merged |= await next_done
        except Exception as exc:
            logger.error("Error finding instances: %s", exc)
            if first_error is None:
                first_error = exc
    return merged, first_error
