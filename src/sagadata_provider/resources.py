"""Resource kinds: the static knowledge the engine needs per kind.

A ResourceKind bundles the remote operations, request builders, projection
and terminal-status classification for one kind of remote entity. The
engine is written once against this capability and instantiated per kind.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Protocol, TypeVar

from .facade import ApiResult, KubernetesClusterApi, PrivateNetworkApi
from .models import (
    CreateKubernetesClusterRequest,
    CreatePrivateNetworkRequest,
    KubernetesClusterStatus,
    PrivateNetworkStatus,
    UpdateKubernetesClusterRequest,
    UpdatePrivateNetworkRequest,
)
from .projection import project_kubernetes_cluster, project_private_network
from .state import (
    DesiredAttributes,
    KubernetesClusterConfig,
    PrivateNetworkConfig,
)
from .timeouts import OperationContext, Timeouts

RemoteT = TypeVar("RemoteT")
RecordT = TypeVar("RecordT")
DesiredT = TypeVar("DesiredT", bound=DesiredAttributes)


class StatusClass(str, Enum):
    """Classification of a remote status value."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PENDING = "pending"


class KindApi(Protocol[RemoteT]):
    """Remote operations every resource kind supports."""

    async def create(
        self, ctx: OperationContext, operation: str, body: dict[str, Any]
    ) -> ApiResult[RemoteT]: ...

    async def get(
        self, ctx: OperationContext, operation: str, identity: str
    ) -> ApiResult[RemoteT]: ...

    async def update(
        self, ctx: OperationContext, operation: str, identity: str, body: dict[str, Any]
    ) -> ApiResult[RemoteT]: ...

    async def delete(
        self, ctx: OperationContext, operation: str, identity: str
    ) -> ApiResult[None]: ...


@dataclass(frozen=True)
class ResourceKind(Generic[RemoteT, RecordT, DesiredT]):
    """Capability object describing one resource kind.

    Attributes:
        name: Human-readable kind name used in messages ("private network").
        api: Remote operations for this kind.
        success_statuses: Remote statuses meaning "settled successfully".
        failure_statuses: Remote statuses meaning "settled in failure".
        project: Remote body (+ configured timeouts) to local record.
        build_create: Desired attributes to create-request body.
        build_update: Desired attributes to partial update body.
        identity_of: Extracts the identity from a remote body.
        status_of: Extracts the status string from a remote body.
        default_timeouts: Default duration per operation.
    """

    name: str
    api: KindApi[RemoteT]
    success_statuses: frozenset[str]
    failure_statuses: frozenset[str]
    project: Callable[[RemoteT, Timeouts | None], RecordT]
    build_create: Callable[[DesiredT], dict[str, Any]]
    build_update: Callable[[DesiredT], dict[str, Any]]
    identity_of: Callable[[RemoteT], str]
    status_of: Callable[[RemoteT], str]
    default_timeouts: dict[str, str] = field(default_factory=dict)

    def classify(self, status: str) -> StatusClass:
        """Classify a remote status. Unknown values are treated as transient."""
        if status in self.success_statuses:
            return StatusClass.SUCCEEDED
        if status in self.failure_statuses:
            return StatusClass.FAILED
        return StatusClass.PENDING

    def default_timeout(self, operation: str) -> str:
        return self.default_timeouts[operation]


# =============================================================================
# Private networks
# =============================================================================

PRIVATE_NETWORK_TIMEOUTS = {"create": "20m", "read": "5m", "update": "20m", "delete": "20m"}


def build_private_network_create(desired: PrivateNetworkConfig) -> dict[str, Any]:
    request = CreatePrivateNetworkRequest(
        name=desired.name or "",
        region=desired.region or "",
        **desired.known_values("description", "cidr_v4", "cidr_v6"),
    )
    return request.to_body()


def build_private_network_update(desired: PrivateNetworkConfig) -> dict[str, Any]:
    request = UpdatePrivateNetworkRequest(**desired.known_values("name", "description"))
    return request.to_body()


def private_network_kind(api: PrivateNetworkApi) -> ResourceKind:
    return ResourceKind(
        name="private network",
        api=api,
        success_statuses=frozenset({PrivateNetworkStatus.CREATED.value}),
        failure_statuses=frozenset({PrivateNetworkStatus.ERROR.value}),
        project=project_private_network,
        build_create=build_private_network_create,
        build_update=build_private_network_update,
        identity_of=lambda network: network.id,
        status_of=lambda network: network.status,
        default_timeouts=PRIVATE_NETWORK_TIMEOUTS,
    )


# =============================================================================
# Kubernetes clusters
# =============================================================================

KUBERNETES_CLUSTER_TIMEOUTS = {"create": "45m", "read": "5m", "update": "20m", "delete": "45m"}


def build_kubernetes_cluster_create(desired: KubernetesClusterConfig) -> dict[str, Any]:
    # Identity is assigned by the API; the configured name is sent as the name.
    request = CreateKubernetesClusterRequest(
        name=desired.name or "",
        **desired.known_values("network"),
    )
    return request.to_body()


def build_kubernetes_cluster_update(desired: KubernetesClusterConfig) -> dict[str, Any]:
    request = UpdateKubernetesClusterRequest(**desired.known_values("network"))
    return request.to_body()


def kubernetes_cluster_kind(api: KubernetesClusterApi) -> ResourceKind:
    return ResourceKind(
        name="kubernetes cluster",
        api=api,
        success_statuses=frozenset({KubernetesClusterStatus.ACTIVE.value}),
        failure_statuses=frozenset({KubernetesClusterStatus.ERROR.value}),
        project=project_kubernetes_cluster,
        build_create=build_kubernetes_cluster_create,
        build_update=build_kubernetes_cluster_update,
        identity_of=lambda cluster: cluster.id,
        status_of=lambda cluster: cluster.status,
        default_timeouts=KUBERNETES_CLUSTER_TIMEOUTS,
    )
