from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
from typing import Any, Coroutine, TypeVar

T = TypeVar("T")


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async coroutine synchronously.

    Creates a new event loop if none is running.
    If a loop is already running (e.g. a build started from inside an async
    test harness), the coroutine runs in a fresh loop on a background
    thread so this thread can block on it without deadlocking.

    Args:
        coro: The coroutine to run.

    Returns:
        The value returned by *coro*.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        future = pool.submit(asyncio.run, coro)
        return future.result()


async def maybe_await(value: Any) -> Any:
    """Await *value* if it is awaitable, otherwise return it unchanged.

    Preset contributions and indexers may be plain functions or coroutines.
    """
    if inspect.isawaitable(value):
        return await value
    return value
