"""Projection of remote API bodies onto local resource records.

Pure functions: no I/O, no logging. Optional remote fields that are present
map to their value; absent ones map to None and are never defaulted.
"""

from __future__ import annotations

from datetime import UTC, datetime

from .models import KubernetesCluster, KubernetesClusterCredentials, PrivateNetwork
from .state import (
    KubernetesClusterDataSourceRecord,
    KubernetesClusterRecord,
    PrivateNetworkRecord,
)
from .timeouts import Timeouts


def format_timestamp(value: datetime) -> str:
    """Format a timestamp as RFC 3339 with second precision.

    UTC is rendered as ``Z``; other offsets are kept numerically. Naive
    datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    text = value.replace(microsecond=0).isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def project_private_network(
    network: PrivateNetwork,
    timeouts: Timeouts | None = None,
) -> PrivateNetworkRecord:
    return PrivateNetworkRecord(
        id=network.id,
        name=network.name,
        region=network.region,
        description=network.description,
        status=network.status,
        created_at=format_timestamp(network.created_at),
        updated_at=format_timestamp(network.updated_at),
        cidr_v4=network.cidr_v4,
        cidr_v6=network.cidr_v6,
        timeouts=timeouts,
    )


def project_kubernetes_cluster(
    cluster: KubernetesCluster,
    timeouts: Timeouts | None = None,
) -> KubernetesClusterRecord:
    return KubernetesClusterRecord(
        id=cluster.id,
        name=cluster.name,
        status=cluster.status,
        created_at=format_timestamp(cluster.created_at),
        updated_at=format_timestamp(cluster.updated_at),
        network=cluster.network,
        timeouts=timeouts,
    )


def project_kubernetes_cluster_data_source(
    cluster: KubernetesCluster,
) -> KubernetesClusterDataSourceRecord:
    """Project cluster details for the data source; credentials start out unset."""
    return KubernetesClusterDataSourceRecord(
        id=cluster.id,
        name=cluster.name,
        status=cluster.status,
        created_at=format_timestamp(cluster.created_at),
        updated_at=format_timestamp(cluster.updated_at),
        network=cluster.network,
    )


def project_cluster_credentials(
    record: KubernetesClusterDataSourceRecord,
    credentials: KubernetesClusterCredentials,
) -> KubernetesClusterDataSourceRecord:
    """Return a copy of ``record`` with the credentials sub-resource applied."""
    return record.model_copy(
        update={
            "kubeconfig": credentials.kubeconfig,
            "join_command": credentials.join_command,
        }
    )
