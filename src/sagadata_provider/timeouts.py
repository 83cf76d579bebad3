"""Bounded operation contexts (timeout scopes).

Every lifecycle operation derives one OperationContext from its caller's
context and threads it through every remote call and every poll wait. The
context carries a deadline and can be cancelled; both end any awaitable run
through ``OperationContext.run``.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import math
import time
from collections.abc import Awaitable
from typing import Any, TypeVar

from pydantic import BaseModel

from .config import TimeoutParseError, parse_duration
from .errors import OperationCancelledError, OperationTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Timeouts(BaseModel):
    """Per-operation timeout overrides from the resource configuration.

    Each value is a duration string (e.g. ``"30m"``). ``None`` means the
    resource kind's default applies.
    """

    model_config = {"extra": "ignore"}

    create: str | None = None
    read: str | None = None
    update: str | None = None
    delete: str | None = None

    def for_operation(self, operation: str) -> str | None:
        """Return the configured duration for one of create/read/update/delete."""
        return getattr(self, operation)


class OperationContext:
    """A cancellable, deadline-carrying scope for one lifecycle operation.

    Use ``OperationContext.background()`` for an unbounded root and
    ``with_timeout`` to derive bounded children. A child expires no later
    than its parent and is cancelled when its parent is cancelled.

    The context is a context manager; leaving the ``with`` block releases
    it (cancels it and detaches it from its parent).
    """

    def __init__(
        self,
        deadline: float = math.inf,
        *,
        parent: OperationContext | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        if parent is not None:
            deadline = min(deadline, parent.deadline)
        self._deadline = deadline
        self._parent = parent
        self._timeout_seconds = timeout_seconds
        self._children: list[OperationContext] = []
        self._cancelled = False
        self._cancel_event: asyncio.Event | None = None
        self._released = False
        if parent is not None:
            parent._children.append(self)
            if parent.cancelled:
                self.cancel()

    @classmethod
    def background(cls) -> OperationContext:
        """Return a root context without deadline."""
        return cls()

    @property
    def deadline(self) -> float:
        """Deadline on the ``time.monotonic()`` clock (``inf`` when unbounded)."""
        return self._deadline

    @property
    def timeout_seconds(self) -> float | None:
        """The duration this context was derived with, if any."""
        return self._timeout_seconds

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def expired(self) -> bool:
        return time.monotonic() >= self._deadline

    @property
    def done(self) -> bool:
        """True once the context is cancelled or past its deadline."""
        return self._cancelled or self.expired

    def remaining(self) -> float:
        """Seconds left before the deadline (``inf`` when unbounded, never negative)."""
        if math.isinf(self._deadline):
            return math.inf
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self) -> None:
        """Cancel this context and every context derived from it."""
        if self._cancelled:
            return
        self._cancelled = True
        if self._cancel_event is not None:
            self._cancel_event.set()
        for child in list(self._children):
            child.cancel()

    def release(self) -> None:
        """Release the scope. Safe to call more than once."""
        if self._released:
            return
        self._released = True
        self.cancel()
        if self._parent is not None:
            with contextlib.suppress(ValueError):
                self._parent._children.remove(self)

    def check(self, operation: str) -> None:
        """Raise if the context is already cancelled or expired."""
        if self._cancelled:
            raise OperationCancelledError(operation)
        if self.expired:
            raise OperationTimeoutError(operation, self._timeout_seconds)

    async def run(self, awaitable: Awaitable[T], operation: str) -> T:
        """Await ``awaitable`` bounded by this context.

        Args:
            awaitable: Coroutine or future to run.
            operation: Remote call name used in error messages.

        Returns:
            The awaitable's result.

        Raises:
            OperationTimeoutError: If the deadline passes first.
            OperationCancelledError: If the context is cancelled first.
        """
        task = asyncio.ensure_future(awaitable)
        if self.done:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            self.check(operation)

        if self._cancel_event is None:
            self._cancel_event = asyncio.Event()
            if self._cancelled:
                self._cancel_event.set()
        cancel_waiter = asyncio.ensure_future(self._cancel_event.wait())

        remaining = self.remaining()
        try:
            done, _ = await asyncio.wait(
                {task, cancel_waiter},
                timeout=None if math.isinf(remaining) else remaining,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            cancel_waiter.cancel()
            if not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

        if task in done and not task.cancelled():
            return task.result()

        if self._cancelled:
            raise OperationCancelledError(operation)
        raise OperationTimeoutError(operation, self._timeout_seconds)

    def __enter__(self) -> OperationContext:
        return self

    def __exit__(self, *args: Any) -> None:
        self.release()


def with_timeout(
    parent: OperationContext,
    configured: str | None,
    default: str,
) -> OperationContext:
    """Derive a bounded context from ``parent``.

    Args:
        parent: Caller's context.
        configured: Duration string from the resource configuration, or None.
        default: Resource-kind default duration used when nothing is configured.

    Returns:
        A child context; use it as a context manager so it is always released.

    Raises:
        TimeoutParseError: If the duration cannot be parsed.
    """
    raw = configured if configured else default
    try:
        seconds = parse_duration(raw)
    except TimeoutParseError as e:
        raise TimeoutParseError(f"Timeout cannot be parsed: {e}") from e

    logger.debug("Derived operation timeout", extra={"timeout_seconds": seconds})
    return OperationContext(
        time.monotonic() + seconds,
        parent=parent,
        timeout_seconds=seconds,
    )
