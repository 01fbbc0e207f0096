"""Cancellable, deadline-bearing execution context for API operations.

Every API call takes an ``OperationContext`` as its first argument. The
context is checked before any network I/O, and awaiting through ``run()``
bounds the call by the remaining time budget. Cancellation and deadline
expiry surface as ``context``-layer ``LayeredError`` instead of the raw
transport or asyncio exception.

Usage:
    ctx = OperationContext(timeout=300)
    call_ctx = ctx.child(timeout=30)
    result = await call_ctx.run("get_repository_id", client.execute(...))

    # From a signal handler or another task
    ctx.cancel()
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import TypeVar

from gh_demo.libs.exceptions import LayeredError, context_error

T = TypeVar("T")


@dataclass
class OperationContext:
    """Explicit cancellation and deadline carrier.

    Attributes:
        timeout: Seconds from creation until the deadline, None for no deadline
        parent: Context this one was derived from; cancelling the parent cancels this one
    """

    timeout: float | None = None
    parent: OperationContext | None = None
    deadline: float | None = field(default=None, init=False)
    _cancelled: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.timeout is not None:
            self.deadline = time.monotonic() + self.timeout

        if self.parent is not None and self.parent.deadline is not None:
            if self.deadline is None or self.parent.deadline < self.deadline:
                self.deadline = self.parent.deadline

    def child(self, timeout: float | None = None) -> OperationContext:
        """Derive a context bounded by both this context's deadline and ``timeout``."""
        return OperationContext(timeout=timeout, parent=self)

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        if self._cancelled:
            return True
        return self.parent is not None and self.parent.cancelled

    @property
    def deadline_exceeded(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.deadline_exceeded

    def remaining(self) -> float | None:
        """Seconds left before the deadline, None when there is no deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def error(self, operation: str, cause: BaseException | None = None) -> LayeredError:
        return context_error(operation, cancelled=self.cancelled, cause=cause)

    def raise_if_done(self, operation: str) -> None:
        if self.done:
            raise self.error(operation)

    async def run(self, operation: str, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` within this context's time budget.

        Raises:
            LayeredError: context layer, when the context is already done, the deadline
                passes while waiting, or the context is cancelled while waiting
        """
        if self.done:
            # Never start the work
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise self.error(operation)

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._wait_cancelled())
        try:
            finished, _ = await asyncio.wait(
                {task, waiter}, timeout=self.remaining(), return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in finished:
            return task.result()

        task.cancel()
        # The abandoned call's own outcome is not the reported cause
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await task

        raise self.error(operation)

    async def _wait_cancelled(self, interval: float = 0.05) -> None:
        while not self.cancelled:
            await asyncio.sleep(interval)
