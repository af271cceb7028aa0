"""
Helpers for running best-effort work alongside request handling.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, List, Set, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Strong references to detached tasks; the event loop only keeps weak ones
_background_tasks: Set[asyncio.Task] = set()


async def gather_with_errors(*coros: Awaitable[T]) -> List[T | BaseException]:
    """
    Run coroutines concurrently and return every result, exceptions included.

    One failing coroutine never cancels or hides the others.
    """
    results = await asyncio.gather(*coros, return_exceptions=True)
    return list(results)


def run_in_background(coro: Awaitable[None], name: str | None = None) -> asyncio.Task:
    """
    Start a coroutine without waiting for its result.

    Failures are logged from the done callback and never propagate.
    """
    def handle_task(task: asyncio.Task) -> None:
        _background_tasks.discard(task)
        if task.cancelled():
            logger.warning(f"Background task {task.get_name()} was cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                f"Background task {task.get_name()} failed: {exc}",
                exc_info=exc,
            )

    task = asyncio.create_task(coro, name=name)
    _background_tasks.add(task)
    task.add_done_callback(handle_task)
    return task


async def drain_background_tasks(timeout: float) -> None:
    """Wait up to ``timeout`` seconds for detached tasks, then cancel the rest."""
    loop = asyncio.get_running_loop()
    tasks = [t for t in _background_tasks if not t.done() and t.get_loop() is loop]
    if not tasks:
        return
    done, pending = await asyncio.wait(tasks, timeout=timeout)
    for task in pending:
        task.cancel()
    if pending:
        logger.warning(f"Cancelled {len(pending)} background task(s) on shutdown")
