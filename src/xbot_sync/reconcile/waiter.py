"""Bounded waits around asynchronous collaborator calls.

Every GitHub and Xcode Server call made during a run goes through one
of these helpers, so each call either produces a result within the
operation timeout or ends as a SyncTimeoutError. A timed-out call is
cancelled locally; whatever the remote side already did is not undone.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

from xbot_sync.logging import get_logger

from .exceptions import BackendFailureError, SyncTimeoutError

logger = get_logger(__name__)

T = TypeVar("T")


async def bounded_wait(awaitable: Awaitable[T], timeout: float, message: str) -> T:
    """Await a result for at most ``timeout`` seconds.

    Args:
        awaitable: Coroutine or future producing the result
        timeout: Seconds to wait
        message: Error message used if the wait times out

    Returns:
        The awaited result

    Raises:
        SyncTimeoutError: If the deadline passed first (the awaitable is cancelled)
    """
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except TimeoutError as e:
        raise SyncTimeoutError(message) from e


async def wait_for_callback(
    start: Callable[[Callable[[T], None]], object],
    timeout: float,
    message: str,
) -> T:
    """Adapt a callback-style API to a bounded wait.

    ``start`` is called with a completion callback; the first value passed
    to that callback becomes the result. Completions arriving after the
    deadline are dropped. The callback may be invoked from another thread.

    Usage:
        bots = await wait_for_callback(
            lambda done: legacy_server.fetch_bots(done),
            timeout=10,
            message="Timeout waiting for bots",
        )
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[T] = loop.create_future()

    def _resolve(value: T) -> None:
        if not future.done():
            future.set_result(value)

    def complete(value: T) -> None:
        loop.call_soon_threadsafe(_resolve, value)

    start(complete)
    return await bounded_wait(future, timeout, message)


async def wait_jointly(
    awaitables: Mapping[str, Awaitable[Any]],
    timeout: float,
) -> dict[str, Any]:
    """Run several awaitables concurrently under one shared deadline.

    Args:
        awaitables: Awaitables keyed by the name used in error messages
        timeout: Seconds to wait for all of them

    Returns:
        Results keyed like ``awaitables``

    Raises:
        BackendFailureError: If any awaitable raised (the others are cancelled)
        SyncTimeoutError: Naming every awaitable that had not finished in time
    """
    tasks = {name: asyncio.ensure_future(aw) for name, aw in awaitables.items()}
    _done, pending = await asyncio.wait(
        tasks.values(), timeout=timeout, return_when=asyncio.FIRST_EXCEPTION
    )

    failed = [
        (name, task)
        for name, task in tasks.items()
        if task.done() and not task.cancelled() and task.exception() is not None
    ]

    if pending:
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    if failed:
        name, task = failed[0]
        error = task.exception()
        raise BackendFailureError(f"Unable to fetch {name}: {error}") from error

    if pending:
        missing = [name for name, task in tasks.items() if task in pending]
        raise SyncTimeoutError(f"Timeout waiting for {', '.join(missing)}")

    return {name: task.result() for name, task in tasks.items()}


async def best_effort(
    awaitable: Awaitable[T],
    timeout: float,
    description: str,
) -> T | None:
    """Run a follow-up step whose failure must not end the run.

    Timeouts and collaborator errors are logged at WARNING and
    ``None`` is returned instead.

    Args:
        awaitable: The follow-up call
        timeout: Seconds to wait
        description: What the step does, e.g. "post pending status on abc123"
    """
    try:
        return await bounded_wait(awaitable, timeout, f"Timeout waiting to {description}")
    except Exception as e:
        logger.warning("Best-effort step failed ({}): {}", description, e)
        return None
