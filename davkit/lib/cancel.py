"""
Cooperative cancellation of single operations.

The caller hands over an ``asyncio.Event``; setting it aborts the
in-flight request and the operation raises ``asyncio.CancelledError``.
Cancelling the task running the operation works as well, as usual.
"""
import asyncio
import contextlib
from typing import Awaitable
from typing import Optional
from typing import TypeVar

T = TypeVar("T")


class OperationCancelled(asyncio.CancelledError):
    """Raised when the cancel event of an operation was set."""


async def cancellable(aw: Awaitable[T], cancel: Optional[asyncio.Event] = None) -> T:
    """
    Await ``aw``, aborting it as soon as ``cancel`` is set.
    """
    if cancel is None:
        return await aw
    if cancel.is_set():
        if asyncio.iscoroutine(aw):
            aw.close()
        raise OperationCancelled("operation cancelled before it was started")

    task = asyncio.ensure_future(aw)
    waiter = asyncio.ensure_future(cancel.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    if task.cancelled():
        raise OperationCancelled("operation cancelled")
    return task.result()
