"""Tests for delete: accept once, then poll until reads return 404."""

import time

import pytest
from azure.core.exceptions import ServiceResponseError
from sagadata_mock import (
    MockSagaDataClient,
    cluster_response,
    empty_response,
    error_response,
    json_response,
    network_response,
)

from sagadata_provider.errors import (
    APIError,
    ContractViolationError,
    OperationTimeoutError,
    TransportError,
    UnexpectedResponseError,
)
from sagadata_provider.provider import Provider
from sagadata_provider.timeouts import OperationContext, Timeouts

NETWORK_PATH = "/private-networks/net-1"
CLUSTER_PATH = "/kubernetes-clusters/cluster-1"


class TestDelete:
    """Tests for ReconciliationEngine.delete()."""

    @pytest.mark.asyncio
    async def test_waits_until_gone(
        self, provider: Provider, mock_client: MockSagaDataClient, ctx: OperationContext
    ) -> None:
        """Test that delete polls through deleting until a 404."""
        mock_client.script("DELETE", NETWORK_PATH, empty_response(204))
        mock_client.script(
            "GET",
            NETWORK_PATH,
            network_response(status="deleting"),
            network_response(status="deleting"),
            error_response(404, "not found"),
        )

        outcome = await provider.private_networks.delete(ctx, "net-1")

        assert outcome.success
        assert outcome.record is None
        assert outcome.reads == 3
        assert mock_client.count("DELETE", NETWORK_PATH) == 1

    @pytest.mark.asyncio
    async def test_cluster_delete(
        self, provider: Provider, mock_client: MockSagaDataClient, ctx: OperationContext
    ) -> None:
        """Test cluster deletion through the same loop."""
        mock_client.script("DELETE", CLUSTER_PATH, empty_response(204))
        mock_client.script(
            "GET",
            CLUSTER_PATH,
            cluster_response(status="deleting"),
            error_response(404, "not found"),
        )

        outcome = await provider.kubernetes_clusters.delete(ctx, "cluster-1")

        assert outcome.success
        assert outcome.reads == 2

    @pytest.mark.asyncio
    async def test_rejected_delete_never_polls(
        self, provider: Provider, mock_client: MockSagaDataClient, ctx: OperationContext
    ) -> None:
        """Test that a refused delete reports the API error without polling."""
        mock_client.script(
            "DELETE", NETWORK_PATH, error_response(409, "network in use", code="conflict")
        )

        outcome = await provider.private_networks.delete(ctx, "net-1")

        assert isinstance(outcome.error, APIError)
        assert outcome.error.code == "conflict"
        assert "delete private network" in str(outcome.error)
        assert mock_client.count("GET", NETWORK_PATH) == 0

    @pytest.mark.asyncio
    async def test_delete_with_200_is_unexpected(
        self, provider: Provider, mock_client: MockSagaDataClient, ctx: OperationContext
    ) -> None:
        """Test that only 204 counts as an accepted deletion."""
        mock_client.script("DELETE", NETWORK_PATH, json_response(200, {"deleted": True}))

        outcome = await provider.private_networks.delete(ctx, "net-1")

        assert isinstance(outcome.error, UnexpectedResponseError)
        assert outcome.error.status_code == 200

    @pytest.mark.asyncio
    async def test_server_error_while_polling(
        self, provider: Provider, mock_client: MockSagaDataClient, ctx: OperationContext
    ) -> None:
        """Test that any non-404 error during the wait is fatal."""
        mock_client.script("DELETE", NETWORK_PATH, empty_response(204))
        mock_client.script("GET", NETWORK_PATH, error_response(500, "internal error"))

        outcome = await provider.private_networks.delete(ctx, "net-1")

        assert isinstance(outcome.error, APIError)
        assert outcome.error.status_code == 500
        assert "polling private network" in str(outcome.error)
        assert outcome.reads == 1

    @pytest.mark.asyncio
    async def test_transport_failure_while_polling(
        self, provider: Provider, mock_client: MockSagaDataClient, ctx: OperationContext
    ) -> None:
        """Test that transport failures are fatal during the wait."""
        mock_client.script("DELETE", NETWORK_PATH, empty_response(204))
        mock_client.script("GET", NETWORK_PATH, ServiceResponseError("read timed out"))

        outcome = await provider.private_networks.delete(ctx, "net-1")

        assert isinstance(outcome.error, TransportError)

    @pytest.mark.asyncio
    async def test_timeout(
        self, provider: Provider, mock_client: MockSagaDataClient, ctx: OperationContext
    ) -> None:
        """Test that the delete timeout bounds the wait."""
        mock_client.script("DELETE", NETWORK_PATH, empty_response(204))
        mock_client.script("GET", NETWORK_PATH, network_response(status="deleting"))

        outcome = await provider.private_networks.delete(
            ctx, "net-1", Timeouts(delete="150ms")
        )

        assert isinstance(outcome.error, OperationTimeoutError)
        assert outcome.reads >= 1

    @pytest.mark.asyncio
    async def test_short_deadline_ends_promptly(
        self, provider: Provider, mock_client: MockSagaDataClient, ctx: OperationContext
    ) -> None:
        """Test that a resource stuck in deleting is abandoned soon after the deadline."""
        mock_client.script("DELETE", NETWORK_PATH, empty_response(204))
        mock_client.script("GET", NETWORK_PATH, network_response(status="deleting"))

        start = time.monotonic()
        outcome = await provider.private_networks.delete(ctx, "net-1", Timeouts(delete="50ms"))
        elapsed = time.monotonic() - start

        assert isinstance(outcome.error, OperationTimeoutError)
        assert outcome.record is None
        assert elapsed < 0.5

    @pytest.mark.asyncio
    async def test_empty_identity_raises(
        self, provider: Provider, mock_client: MockSagaDataClient, ctx: OperationContext
    ) -> None:
        """Test that delete without identity is a contract violation."""
        with pytest.raises(ContractViolationError):
            await provider.private_networks.delete(ctx, "")

        assert mock_client.calls == []
