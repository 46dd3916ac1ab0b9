from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)

_running_tasks: dict[str, asyncio.Task[Any]] = {}
_counter = itertools.count(1)


def _on_done(key: str, task: asyncio.Task[Any]) -> None:
    _running_tasks.pop(key, None)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Background task %s crashed: %r", key, exc)


def start_task(name: str, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
    """Create an asyncio task and keep a reference until it finishes.

    Must be called from inside a running event loop.
    """
    key = f"{name}-{next(_counter)}"
    task = asyncio.create_task(coro, name=key)
    _running_tasks[key] = task
    task.add_done_callback(lambda t: _on_done(key, t))
    return task


def pending_count() -> int:
    return sum(1 for t in _running_tasks.values() if not t.done())


async def wait_for_pending(timeout: float | None = None) -> None:
    """Wait for the tasks running right now, e.g. before shutdown."""
    loop = asyncio.get_running_loop()
    tasks = [
        t for t in _running_tasks.values() if not t.done() and t.get_loop() is loop
    ]
    if not tasks:
        return
    _, pending = await asyncio.wait(tasks, timeout=timeout)
    if pending:
        logger.warning("%d background task(s) still running at shutdown", len(pending))
