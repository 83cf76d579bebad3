"""Tests for the low-level HTTP client."""

import json
from unittest.mock import MagicMock, patch

import pytest
from azure.core.exceptions import AzureError, ServiceRequestError

from sagadata_provider.client import HttpResult, SagaDataClient, path_for
from sagadata_provider.config import Config


def _response(status_code: int, body: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.content = body.encode()
    response.text.return_value = body
    return response


class TestPathFor:
    """Tests for API path construction."""

    def test_collection(self) -> None:
        assert path_for("private-networks") == "/private-networks"

    def test_identity_and_suffix(self) -> None:
        assert (
            path_for("kubernetes-clusters", "cluster-1", "credentials")
            == "/kubernetes-clusters/cluster-1/credentials"
        )

    def test_identity_is_quoted(self) -> None:
        """Test that an identity cannot escape its path segment."""
        assert path_for("private-networks", "a/../b") == "/private-networks/a%2F..%2Fb"


class TestHttpResult:
    def test_ok(self) -> None:
        assert HttpResult(status_code=204, text="").ok
        assert not HttpResult(status_code=404, text="").ok


class TestSagaDataClient:
    """Tests for SagaDataClient.request()."""

    @pytest.fixture
    def client(self, config: Config) -> SagaDataClient:
        return SagaDataClient(config)

    def test_decodes_json_body(self, client: SagaDataClient) -> None:
        """Test that a JSON body is decoded into the payload."""
        body = json.dumps({"private_network": {"id": "net-1"}})
        with patch.object(client._client, "send_request", return_value=_response(200, body)):
            result = client.request("GET", "/private-networks/net-1")

        assert result.status_code == 200
        assert result.text == body
        assert result.payload == {"private_network": {"id": "net-1"}}

    def test_empty_body(self, client: SagaDataClient) -> None:
        """Test a response without body (e.g. 204 on delete)."""
        with patch.object(client._client, "send_request", return_value=_response(204)):
            result = client.request("DELETE", "/private-networks/net-1")

        assert result.status_code == 204
        assert result.text == ""
        assert result.payload is None

    def test_non_json_body(self, client: SagaDataClient) -> None:
        """Test that a non-JSON body is kept as text only."""
        with patch.object(
            client._client, "send_request", return_value=_response(502, "<html>bad gateway</html>")
        ):
            result = client.request("GET", "/private-networks/net-1")

        assert result.payload is None
        assert "bad gateway" in result.text

    def test_sends_method_path_and_body(self, client: SagaDataClient, config: Config) -> None:
        """Test the request handed to the pipeline."""
        with patch.object(
            client._client, "send_request", return_value=_response(201, "{}")
        ) as send:
            client.request("POST", "/private-networks", {"name": "net-1"})

        request = send.call_args.args[0]
        assert request.method == "POST"
        assert request.url == "/private-networks"
        assert json.loads(request.content) == {"name": "net-1"}
        assert send.call_args.kwargs["read_timeout"] == config.request_timeout_seconds

    def test_transport_failure_propagates(self, client: SagaDataClient) -> None:
        """Test that transport failures surface as AzureError without retry."""
        with patch.object(
            client._client, "send_request", side_effect=ServiceRequestError("connection refused")
        ) as send:
            with pytest.raises(AzureError):
                client.request("GET", "/private-networks/net-1")

        assert send.call_count == 1
