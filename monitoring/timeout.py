"""
============================================================================
DATABASE LIVENESS MONITOR - TIMEOUT GUARD
============================================================================
Bounds an awaitable with a deadline.

When the deadline passes first, the caller gets ``OperationTimeoutError``
and stops waiting. The operation itself is NOT cancelled: it keeps
running as a task, and whatever it eventually returns or raises is
discarded. Anything it acquires in the meantime (an open connection,
for instance) is the caller's to release, through the abandoned task
exposed as ``OperationTimeoutError.pending``.
============================================================================
"""

import asyncio
from typing import Awaitable, TypeVar

from exceptions import OperationTimeoutError
from utils.logger import get_logger


logger = get_logger("TimeoutGuard")

T = TypeVar("T")


def _discard_result(task: "asyncio.Future") -> None:
    """Retrieve a late result so asyncio never reports it as unhandled."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug(f"Abandoned operation failed late: {exc!r}")


async def with_timeout(operation: Awaitable[T], timeout_ms: float) -> T:
    """
    Await ``operation`` for at most ``timeout_ms`` milliseconds.

    Args:
        operation: Coroutine, task or future to wait for
        timeout_ms: Budget in milliseconds

    Returns:
        The operation's result, when it completes within the budget

    Raises:
        OperationTimeoutError: If the budget expires first
        Exception: Whatever the operation raises within the budget
    """
    task = asyncio.ensure_future(operation)
    try:
        return await asyncio.wait_for(asyncio.shield(task), timeout_ms / 1000)
    except asyncio.TimeoutError:
        if task.done():
            # Finished in the same loop iteration the deadline fired
            return task.result()
        task.add_done_callback(_discard_result)
        raise OperationTimeoutError(timeout_ms=timeout_ms, pending=task) from None
    except asyncio.CancelledError:
        task.add_done_callback(_discard_result)
        raise
