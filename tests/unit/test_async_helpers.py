from __future__ import annotations

import asyncio

import pytest

from showcase.utils.async_helpers import maybe_await, run_sync

# ---------------------------------------------------------------------------
# run_sync
# ---------------------------------------------------------------------------


def test_run_sync_returns_value() -> None:
    """run_sync executes a coroutine and returns its result."""

    async def _coro() -> int:
        return 42

    assert run_sync(_coro()) == 42


def test_run_sync_propagates_exception() -> None:
    async def _boom() -> None:
        raise ValueError("oops")

    with pytest.raises(ValueError, match="oops"):
        run_sync(_boom())


def test_run_sync_awaits_async_sleep() -> None:
    async def _sleep_and_return() -> str:
        await asyncio.sleep(0)
        return "done"

    assert run_sync(_sleep_and_return()) == "done"


async def test_run_sync_in_running_loop() -> None:
    """Inside a running loop the coroutine runs on a worker thread's own loop."""

    async def _coro() -> str:
        return "from-thread"

    assert run_sync(_coro()) == "from-thread"


# ---------------------------------------------------------------------------
# maybe_await
# ---------------------------------------------------------------------------


async def test_maybe_await_plain_value() -> None:
    value = {"stories": []}
    assert await maybe_await(value) is value


async def test_maybe_await_coroutine() -> None:
    async def _coro() -> list[str]:
        return ["../src"]

    assert await maybe_await(_coro()) == ["../src"]


async def test_maybe_await_future() -> None:
    future: asyncio.Future[int] = asyncio.get_running_loop().create_future()
    future.set_result(7)
    assert await maybe_await(future) == 7
