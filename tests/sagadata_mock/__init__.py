"""Saga Data API Mock for testing.

This module provides an in-memory stand-in for the low-level Saga Data HTTP
client so the facade, engines and provider can be exercised without network
access.

Key Features:
- Scripted responses per (method, path), replayed in order
- Call recording for assertions on request count and bodies
- Transport failure injection (azure-core exceptions)
- Slow responses for timeout and cancellation scenarios
- Payload builders for private networks, clusters and credentials

Usage:
    from sagadata_mock import MockSagaDataClient, network_response

    client = MockSagaDataClient()
    client.script("POST", "/private-networks", network_response(201, status="creating"))
    client.script("GET", "/private-networks/net-1", network_response(200, status="created"))

    provider = Provider(config, client=client)
    outcome = await provider.private_networks.create(ctx, desired)

    assert client.count("GET", "/private-networks/net-1") == 1
"""

from .client import Delay, MockSagaDataClient, RecordedCall
from .payloads import (
    cluster_payload,
    cluster_response,
    credentials_response,
    empty_response,
    error_response,
    json_response,
    network_payload,
    network_response,
)

__all__ = [
    "Delay",
    "MockSagaDataClient",
    "RecordedCall",
    "cluster_payload",
    "cluster_response",
    "credentials_response",
    "empty_response",
    "error_response",
    "json_response",
    "network_payload",
    "network_response",
]
