"""Poll scheduling between status reads."""

from __future__ import annotations

import asyncio
import logging

from .timeouts import OperationContext

logger = logging.getLogger(__name__)


class PollScheduler:
    """Waits a fixed, provider-wide interval between polling attempts.

    The wait is the only suspension point in the settling and
    disappearance loops besides the remote calls themselves, and it ends
    early when the operation's context expires or is cancelled.
    """

    def __init__(self, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive: {interval_seconds}")
        self._interval_seconds = interval_seconds

    @property
    def interval_seconds(self) -> float:
        return self._interval_seconds

    async def wait(self, ctx: OperationContext, operation: str = "polling") -> None:
        """Sleep for one interval.

        Raises:
            OperationTimeoutError: If the context's deadline passes during the wait.
            OperationCancelledError: If the context is cancelled during the wait.
        """
        await ctx.run(asyncio.sleep(self._interval_seconds), operation)
