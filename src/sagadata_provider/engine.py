"""Asynchronous provisioning reconciliation engine.

This module drives one decided mutation to completion:

1. Derive a bounded context for the operation (timeout scope)
2. Issue the mutating call and project the immediate result
3. Poll by identity until the resource settles (create) or disappears (delete)
4. Return an OperationOutcome carrying the latest projected record

The loops are plain iterative loops with no attempt cap; the only bound is
the operation's deadline. Every error aborts the operation and is returned
in the outcome together with the last successfully projected record, except
for delete where the record has no meaning once deletion is confirmed.

No retries are performed: a transport failure is fatal for the call that
hit it. Polling re-reads status; it never re-issues mutations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from .errors import (
    APIError,
    ContractViolationError,
    ProviderError,
    ResourceErrorStateError,
    ResourceVanishedError,
    UnexpectedResponseError,
)
from .facade import ApiResult
from .polling import PollScheduler
from .resources import ResourceKind, StatusClass
from .state import DesiredAttributes
from .timeouts import OperationContext, Timeouts, with_timeout

logger = logging.getLogger(__name__)

RemoteT = TypeVar("RemoteT")
RecordT = TypeVar("RecordT")
DesiredT = TypeVar("DesiredT", bound=DesiredAttributes)

# Expected status of an accepted deletion
DELETE_ACCEPTED_STATUS = 204


@dataclass
class OperationOutcome(Generic[RecordT]):
    """Result of one lifecycle operation.

    ``record`` is the most recent successfully projected state and must be
    persisted by the caller even when ``error`` is set. A successful delete
    has no record.
    """

    kind: str
    operation: str
    record: RecordT | None = None
    error: ProviderError | None = None
    reads: int = 0
    start_time: datetime | None = None
    end_time: datetime | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def duration_seconds(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()

    def raise_for_error(self) -> RecordT | None:
        """Return the record, or raise the outcome's error."""
        if self.error is not None:
            raise self.error
        return self.record


def client_error(operation: str, result: ApiResult[Any]) -> ProviderError:
    """Build the error for a response that was not the expected success.

    A 404 is always an APIError, even without a structured body, so callers
    can rely on ``is_not_found`` to drop the resource from state.
    """
    if result.error is not None:
        return APIError(
            operation,
            result.status_code,
            result.error.message,
            code=result.error.code,
        )
    if result.is_not_found:
        return APIError(operation, result.status_code, "resource not found")
    return UnexpectedResponseError(operation, result.status_code, result.raw)


def require_identity(operation: str, identity: str | None) -> str:
    """Return ``identity`` or raise ContractViolationError when it is empty."""
    if not identity:
        raise ContractViolationError(operation, "a non-empty resource identity is required")
    return identity


def finish(outcome: OperationOutcome[RecordT]) -> OperationOutcome[RecordT]:
    """Stamp the end time on ``outcome`` and log it once."""
    outcome.end_time = datetime.now(UTC)
    extra: dict[str, Any] = {
        "kind": outcome.kind,
        "operation": outcome.operation,
        "reads": outcome.reads,
        "duration_seconds": outcome.duration_seconds,
    }
    identity = getattr(outcome.record, "id", None)
    if identity:
        extra["resource_id"] = identity
    status = getattr(outcome.record, "status", None)
    if status:
        extra["status"] = status

    if outcome.error is not None:
        extra["error"] = str(outcome.error)
        extra["error_type"] = type(outcome.error).__name__
        logger.error("Operation failed", extra=extra)
    else:
        logger.info("Operation complete", extra=extra)
    return outcome


class ReconciliationEngine(Generic[RemoteT, RecordT, DesiredT]):
    """Lifecycle engine for one resource kind.

    The engine holds no per-operation state; concurrent operations on
    different identities are independent. Serializing operations on the same
    identity is the caller's responsibility.
    """

    def __init__(
        self,
        kind: ResourceKind[RemoteT, RecordT, DesiredT],
        scheduler: PollScheduler,
    ) -> None:
        self._kind = kind
        self._scheduler = scheduler

    @property
    def kind(self) -> ResourceKind[RemoteT, RecordT, DesiredT]:
        return self._kind

    def _op(self, verb: str) -> str:
        return f"{verb} {self._kind.name}"

    def _scope(
        self, parent: OperationContext, operation: str, timeouts: Timeouts | None
    ) -> OperationContext:
        configured = timeouts.for_operation(operation) if timeouts is not None else None
        return with_timeout(parent, configured, self._kind.default_timeout(operation))

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    async def create(
        self,
        parent: OperationContext,
        desired: DesiredT,
    ) -> OperationOutcome[RecordT]:
        """Create the resource and wait until it settles.

        Args:
            parent: Caller's context; the operation derives its own bounded
                context from it using the configured create timeout.
            desired: Desired attributes from the configuration.

        Returns:
            OperationOutcome with the settled record, or an error and the
            last projected record (None if creation itself failed).

        Raises:
            ContractViolationError: If the desired attributes cannot form a
                create request.
            TimeoutParseError: If the configured timeout cannot be parsed.
        """
        try:
            body = self._kind.build_create(desired)
        except ValidationError as e:
            raise ContractViolationError(self._op("create"), str(e)) from e

        timeouts = desired.timeouts
        outcome: OperationOutcome[RecordT] = OperationOutcome(
            kind=self._kind.name, operation="create", start_time=datetime.now(UTC)
        )

        with self._scope(parent, "create", timeouts) as ctx:
            try:
                await self._create(ctx, body, timeouts, outcome)
            except ProviderError as e:
                outcome.error = e

        return finish(outcome)

    async def _create(
        self,
        ctx: OperationContext,
        body: dict[str, Any],
        timeouts: Timeouts | None,
        outcome: OperationOutcome[RecordT],
    ) -> None:
        operation = self._op("create")
        result = await self._kind.api.create(ctx, operation, body)
        if result.value is None:
            raise client_error(operation, result)

        # Best-known state from here on, even if settling fails or times out
        outcome.record = self._kind.project(result.value, timeouts)
        identity = self._kind.identity_of(result.value)
        logger.info(
            "Created resource, waiting for it to settle",
            extra={"kind": self._kind.name, "resource_id": identity},
        )

        operation = self._op("polling")
        while True:
            await self._scheduler.wait(ctx, operation)

            logger.debug(
                "Polling resource",
                extra={"kind": self._kind.name, "resource_id": identity},
            )
            outcome.reads += 1
            result = await self._kind.api.get(ctx, operation, identity)

            if result.value is None:
                if result.is_not_found:
                    message = result.error.message if result.error else "resource not found"
                    raise ResourceVanishedError(
                        operation, result.status_code, message,
                        code=result.error.code if result.error else None,
                    )
                raise client_error(operation, result)

            outcome.record = self._kind.project(result.value, timeouts)
            status = self._kind.status_of(result.value)

            match self._kind.classify(status):
                case StatusClass.SUCCEEDED:
                    return
                case StatusClass.FAILED:
                    raise ResourceErrorStateError(operation, status)
                case StatusClass.PENDING:
                    continue

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    async def read(
        self,
        parent: OperationContext,
        identity: str,
        timeouts: Timeouts | None = None,
    ) -> OperationOutcome[RecordT]:
        """Read the resource by identity.

        A 404 comes back as an APIError with ``is_not_found`` set so the
        caller can drop the resource from its state.
        """
        identity = require_identity(self._op("read"), identity)
        outcome: OperationOutcome[RecordT] = OperationOutcome(
            kind=self._kind.name, operation="read", start_time=datetime.now(UTC)
        )

        with self._scope(parent, "read", timeouts) as ctx:
            operation = self._op("read")
            try:
                outcome.reads += 1
                result = await self._kind.api.get(ctx, operation, identity)
                if result.value is None:
                    raise client_error(operation, result)
                outcome.record = self._kind.project(result.value, timeouts)
            except ProviderError as e:
                outcome.error = e

        return finish(outcome)

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    async def update(
        self,
        parent: OperationContext,
        identity: str,
        desired: DesiredT,
    ) -> OperationOutcome[RecordT]:
        """Apply a partial update.

        Only attributes explicitly present and known in ``desired`` are sent,
        so the remote side keeps every other value unchanged.
        """
        identity = require_identity(self._op("update"), identity)
        try:
            body = self._kind.build_update(desired)
        except ValidationError as e:
            raise ContractViolationError(self._op("update"), str(e)) from e

        timeouts = desired.timeouts
        outcome: OperationOutcome[RecordT] = OperationOutcome(
            kind=self._kind.name, operation="update", start_time=datetime.now(UTC)
        )

        with self._scope(parent, "update", timeouts) as ctx:
            operation = self._op("update")
            try:
                result = await self._kind.api.update(ctx, operation, identity, body)
                if result.value is None:
                    raise client_error(operation, result)
                outcome.record = self._kind.project(result.value, timeouts)
            except ProviderError as e:
                outcome.error = e

        return finish(outcome)

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    async def delete(
        self,
        parent: OperationContext,
        identity: str,
        timeouts: Timeouts | None = None,
    ) -> OperationOutcome[RecordT]:
        """Delete the resource and wait until reads return 404."""
        identity = require_identity(self._op("delete"), identity)
        outcome: OperationOutcome[RecordT] = OperationOutcome(
            kind=self._kind.name, operation="delete", start_time=datetime.now(UTC)
        )

        with self._scope(parent, "delete", timeouts) as ctx:
            try:
                await self._delete(ctx, identity, outcome)
            except ProviderError as e:
                outcome.error = e

        return finish(outcome)

    async def _delete(
        self,
        ctx: OperationContext,
        identity: str,
        outcome: OperationOutcome[RecordT],
    ) -> None:
        operation = self._op("delete")
        result = await self._kind.api.delete(ctx, operation, identity)
        if result.status_code != DELETE_ACCEPTED_STATUS:
            raise client_error(operation, result)

        logger.info(
            "Deletion accepted, waiting for resource to disappear",
            extra={"kind": self._kind.name, "resource_id": identity},
        )

        operation = self._op("polling")
        while True:
            await self._scheduler.wait(ctx, operation)

            logger.debug(
                "Polling resource",
                extra={"kind": self._kind.name, "resource_id": identity},
            )
            outcome.reads += 1
            result = await self._kind.api.get(ctx, operation, identity)

            if result.is_not_found:
                return
            if result.value is None:
                raise client_error(operation, result)
