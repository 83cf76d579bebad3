"""Error taxonomy for provider operations.

Every failure produced by a remote call or a status classification step is
one of these types. Messages always name the remote call and the resource
kind (for example "create private network") so callers can act on them.
"""

from __future__ import annotations

from typing import Any

# Raw response bodies are truncated in messages to keep logs bounded
MAX_BODY_IN_MESSAGE = 512


class ProviderError(Exception):
    """Base class for all provider operation errors.

    Attributes:
        operation: Human-readable remote call, e.g. "polling private network".
    """

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(f"Unable to {operation}, got error: {message}")


class TransportError(ProviderError):
    """Network or connection level failure while issuing a call.

    Always fatal for the current call. The underlying exception is kept as
    ``cause`` and chained with ``raise ... from``.
    """

    def __init__(self, operation: str, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(operation, f"{type(cause).__name__}: {cause}")


class APIError(ProviderError):
    """The remote API answered with an error status, usually with a structured body."""

    def __init__(
        self,
        operation: str,
        status_code: int,
        message: str,
        code: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.code = code
        self.api_message = message
        detail = f"status {status_code}"
        if code:
            detail += f" ({code})"
        super().__init__(operation, f"{detail}: {message}")

    @property
    def is_not_found(self) -> bool:
        """True if the remote entity does not exist."""
        return self.status_code == 404


class ResourceVanishedError(APIError):
    """The resource disappeared while its creation was being settled."""

    pass


class UnexpectedResponseError(ProviderError):
    """Neither the expected success body nor a structured error body came back.

    Signals a client/server contract mismatch. The raw status and body are
    kept for diagnosis.
    """

    def __init__(self, operation: str, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        shown = body if len(body) <= MAX_BODY_IN_MESSAGE else body[:MAX_BODY_IN_MESSAGE] + "..."
        super().__init__(operation, f"unexpected response with status {status_code}: {shown!r}")


class ResourceErrorStateError(ProviderError):
    """The resource settled into the remote failure status.

    The record describing the failed resource is still valid and must be
    persisted by the caller; it travels with the operation outcome.
    """

    def __init__(self, operation: str, status: str) -> None:
        self.status = status
        super().__init__(operation, f"resource is in error state (status {status!r})")


class OperationInterruptedError(ProviderError):
    """The bounded context ended before the operation completed."""

    pass


class OperationTimeoutError(OperationInterruptedError, TimeoutError):
    """The bounded context's deadline expired."""

    def __init__(self, operation: str, timeout_seconds: float | None = None) -> None:
        self.timeout_seconds = timeout_seconds
        if timeout_seconds is None:
            message = "deadline exceeded"
        else:
            message = f"deadline of {timeout_seconds:g}s exceeded"
        super().__init__(operation, message)


class OperationCancelledError(OperationInterruptedError):
    """The bounded context was cancelled by its owner."""

    def __init__(self, operation: str) -> None:
        super().__init__(operation, "operation cancelled")


class ContractViolationError(ProviderError, ValueError):
    """A caller broke the engine's calling contract (e.g. missing identity).

    Raised immediately instead of being reported as an operation outcome.
    """

    def __init__(self, operation: str, message: str, **details: Any) -> None:
        self.details = details
        super().__init__(operation, message)
