"""Remote client facade: typed, async per-kind operations.

Each call returns an ``ApiResult`` that holds either the typed success body
or the typed error body, together with the HTTP status code. Transport
failures raise ``TransportError``; an expired or cancelled context raises
the context's interruption error.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

from azure.core.exceptions import AzureError
from pydantic import BaseModel, ValidationError

from .client import HttpResult, path_for
from .errors import TransportError
from .models import (
    ErrorBody,
    KubernetesCluster,
    KubernetesClusterCredentials,
    PrivateNetwork,
)
from .timeouts import OperationContext

logger = logging.getLogger(__name__)

T = TypeVar("T")
ModelT = TypeVar("ModelT", bound=BaseModel)


class HttpClient(Protocol):
    """What the facade needs from the low-level client."""

    def request(
        self, method: str, path: str, body: dict[str, Any] | None = None
    ) -> HttpResult: ...


@dataclass(frozen=True)
class ApiResult(Generic[T]):
    """Result of one remote call.

    Exactly one of ``value`` and ``error`` is set when the response matched
    the API contract; both are None for an unexpected response.
    """

    status_code: int
    value: T | None = None
    error: ErrorBody | None = None
    raw: str = ""

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


def _parse(model: type[ModelT], payload: Any, envelope: str | None) -> ModelT | None:
    """Validate ``payload`` (optionally unwrapped from ``envelope``) into ``model``."""
    if envelope is not None:
        if not isinstance(payload, dict) or envelope not in payload:
            return None
        payload = payload[envelope]
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.warning(
            "Response body does not match model",
            extra={"model": model.__name__, "error_count": e.error_count()},
        )
        return None


def _parse_error(payload: Any) -> ErrorBody | None:
    if not isinstance(payload, dict):
        return None
    try:
        return ErrorBody.model_validate(payload)
    except ValidationError:
        return None


class RemoteApi:
    """Shared plumbing for the per-kind facades."""

    def __init__(self, client: HttpClient) -> None:
        self._client = client

    async def _send(
        self,
        ctx: OperationContext,
        operation: str,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> HttpResult:
        ctx.check(operation)
        loop = asyncio.get_running_loop()
        call = functools.partial(self._client.request, method, path, body)
        try:
            return await ctx.run(loop.run_in_executor(None, call), operation)
        except AzureError as e:
            raise TransportError(operation, e) from e

    async def _call(
        self,
        ctx: OperationContext,
        operation: str,
        method: str,
        path: str,
        *,
        expected_status: int,
        model: type[ModelT] | None = None,
        envelope: str | None = None,
        body: dict[str, Any] | None = None,
    ) -> ApiResult[ModelT]:
        result = await self._send(ctx, operation, method, path, body)

        if result.status_code == expected_status:
            if model is None:
                return ApiResult(status_code=result.status_code, raw=result.text)
            value = _parse(model, result.payload, envelope)
            if value is not None:
                return ApiResult(status_code=result.status_code, value=value, raw=result.text)
            return ApiResult(status_code=result.status_code, raw=result.text)

        return ApiResult(
            status_code=result.status_code,
            error=_parse_error(result.payload),
            raw=result.text,
        )


class PrivateNetworkApi(RemoteApi):
    """Private network operations."""

    COLLECTION = "private-networks"
    ENVELOPE = "private_network"

    async def create(
        self, ctx: OperationContext, operation: str, body: dict[str, Any]
    ) -> ApiResult[PrivateNetwork]:
        return await self._call(
            ctx, operation, "POST", path_for(self.COLLECTION),
            expected_status=201, model=PrivateNetwork, envelope=self.ENVELOPE, body=body,
        )

    async def get(
        self, ctx: OperationContext, operation: str, identity: str
    ) -> ApiResult[PrivateNetwork]:
        return await self._call(
            ctx, operation, "GET", path_for(self.COLLECTION, identity),
            expected_status=200, model=PrivateNetwork, envelope=self.ENVELOPE,
        )

    async def update(
        self, ctx: OperationContext, operation: str, identity: str, body: dict[str, Any]
    ) -> ApiResult[PrivateNetwork]:
        return await self._call(
            ctx, operation, "PATCH", path_for(self.COLLECTION, identity),
            expected_status=200, model=PrivateNetwork, envelope=self.ENVELOPE, body=body,
        )

    async def delete(
        self, ctx: OperationContext, operation: str, identity: str
    ) -> ApiResult[None]:
        return await self._call(
            ctx, operation, "DELETE", path_for(self.COLLECTION, identity),
            expected_status=204,
        )


class KubernetesClusterApi(RemoteApi):
    """Kubernetes cluster operations, including the credentials sub-resource."""

    COLLECTION = "kubernetes-clusters"
    ENVELOPE = "cluster"

    async def create(
        self, ctx: OperationContext, operation: str, body: dict[str, Any]
    ) -> ApiResult[KubernetesCluster]:
        return await self._call(
            ctx, operation, "POST", path_for(self.COLLECTION),
            expected_status=201, model=KubernetesCluster, envelope=self.ENVELOPE, body=body,
        )

    async def get(
        self, ctx: OperationContext, operation: str, identity: str
    ) -> ApiResult[KubernetesCluster]:
        return await self._call(
            ctx, operation, "GET", path_for(self.COLLECTION, identity),
            expected_status=200, model=KubernetesCluster, envelope=self.ENVELOPE,
        )

    async def update(
        self, ctx: OperationContext, operation: str, identity: str, body: dict[str, Any]
    ) -> ApiResult[KubernetesCluster]:
        return await self._call(
            ctx, operation, "PATCH", path_for(self.COLLECTION, identity),
            expected_status=200, model=KubernetesCluster, envelope=self.ENVELOPE, body=body,
        )

    async def delete(
        self, ctx: OperationContext, operation: str, identity: str
    ) -> ApiResult[None]:
        return await self._call(
            ctx, operation, "DELETE", path_for(self.COLLECTION, identity),
            expected_status=204,
        )

    async def get_credentials(
        self, ctx: OperationContext, operation: str, identity: str
    ) -> ApiResult[KubernetesClusterCredentials]:
        return await self._call(
            ctx, operation, "GET", path_for(self.COLLECTION, identity, "credentials"),
            expected_status=200, model=KubernetesClusterCredentials,
        )
