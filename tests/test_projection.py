"""Tests for projecting remote bodies onto local records."""

from datetime import UTC, datetime, timedelta, timezone

from sagadata_mock import cluster_payload, network_payload

from sagadata_provider.models import (
    KubernetesCluster,
    KubernetesClusterCredentials,
    PrivateNetwork,
)
from sagadata_provider.projection import (
    format_timestamp,
    project_cluster_credentials,
    project_kubernetes_cluster,
    project_kubernetes_cluster_data_source,
    project_private_network,
)
from sagadata_provider.timeouts import Timeouts


class TestFormatTimestamp:
    """Tests for RFC 3339 timestamp rendering."""

    def test_utc_uses_z(self) -> None:
        """Test that UTC renders with a Z suffix."""
        assert format_timestamp(datetime(2024, 5, 1, 10, 0, tzinfo=UTC)) == "2024-05-01T10:00:00Z"

    def test_offset_is_kept(self) -> None:
        """Test that non-UTC offsets are preserved."""
        value = datetime(2024, 5, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))

        assert format_timestamp(value) == "2024-05-01T12:00:00+02:00"

    def test_microseconds_dropped(self) -> None:
        """Test second precision."""
        value = datetime(2024, 5, 1, 10, 0, 0, 123456, tzinfo=UTC)

        assert format_timestamp(value) == "2024-05-01T10:00:00Z"

    def test_naive_is_utc(self) -> None:
        """Test that naive datetimes are treated as UTC."""
        assert format_timestamp(datetime(2024, 5, 1, 10, 0)) == "2024-05-01T10:00:00Z"


class TestProjectPrivateNetwork:
    """Tests for private network projection."""

    def test_projects_every_field(self) -> None:
        """Test that the record mirrors the remote body."""
        network = PrivateNetwork.model_validate(network_payload(status="created"))

        record = project_private_network(network)

        assert record.id == "net-1"
        assert record.region == "no-south-1"
        assert record.status == "created"
        assert record.cidr_v4 == "10.0.0.0/24"
        assert record.created_at == "2024-05-01T10:00:00Z"
        assert record.updated_at == "2024-05-01T10:05:00Z"

    def test_absent_optional_stays_null(self) -> None:
        """Test that an absent optional is not defaulted."""
        network = PrivateNetwork.model_validate(network_payload())

        assert project_private_network(network).cidr_v6 is None

    def test_timeouts_carried_from_configuration(self) -> None:
        """Test that configured timeouts are kept on the record."""
        network = PrivateNetwork.model_validate(network_payload())
        timeouts = Timeouts(create="10m")

        assert project_private_network(network, timeouts).timeouts == timeouts


class TestProjectKubernetesCluster:
    """Tests for cluster projection."""

    def test_projects_cluster(self) -> None:
        """Test cluster projection."""
        cluster = KubernetesCluster.model_validate(cluster_payload(status="active"))

        record = project_kubernetes_cluster(cluster)

        assert record.id == "cluster-1"
        assert record.name == "k8s-1"
        assert record.network == "net-1"
        assert record.status == "active"

    def test_data_source_with_credentials(self) -> None:
        """Test that credentials are applied onto the data source record."""
        cluster = KubernetesCluster.model_validate(cluster_payload(status="active"))
        record = project_kubernetes_cluster_data_source(cluster)

        assert record.kubeconfig is None

        updated = project_cluster_credentials(
            record, KubernetesClusterCredentials(kubeconfig="config")
        )

        assert updated.kubeconfig == "config"
        assert updated.join_command is None
        assert updated.id == "cluster-1"
        assert record.kubeconfig is None
