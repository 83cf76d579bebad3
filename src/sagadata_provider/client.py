"""Low-level Saga Data HTTP client built on the azure-core pipeline.

The client issues exactly one HTTP request per call and returns the raw
status and body. It never retries: the pipeline is assembled without a
retry policy, so a transport failure surfaces immediately as an
``azure.core.exceptions.AzureError``.

Calls are blocking; the facade runs them on the event loop's executor.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from azure.core import PipelineClient
from azure.core.credentials import AzureKeyCredential
from azure.core.pipeline.policies import (
    AzureKeyCredentialPolicy,
    HeadersPolicy,
    UserAgentPolicy,
)
from azure.core.rest import HttpRequest

from .config import USER_AGENT, Config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpResult:
    """Raw outcome of one HTTP exchange."""

    status_code: int
    text: str
    payload: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def path_for(collection: str, identity: str | None = None, *suffix: str) -> str:
    """Build an API path, quoting the identity segment."""
    parts = [collection]
    if identity is not None:
        parts.append(quote(identity, safe=""))
    parts.extend(suffix)
    return "/" + "/".join(parts)


class SagaDataClient:
    """Blocking Saga Data API client.

    Authentication uses the configured bearer token on every request.
    """

    def __init__(self, config: Config, **kwargs: Any) -> None:
        """Initialize the client.

        Args:
            config: Validated provider configuration.
            **kwargs: Passed to ``PipelineClient`` (e.g. ``transport``).
        """
        self._config = config
        policies = [
            HeadersPolicy({"Accept": "application/json"}),
            UserAgentPolicy(user_agent=USER_AGENT),
            AzureKeyCredentialPolicy(
                AzureKeyCredential(config.token),
                "Authorization",
                prefix="Bearer",
            ),
        ]
        self._client = PipelineClient(base_url=config.endpoint, policies=policies, **kwargs)

    def request(self, method: str, path: str, body: dict[str, Any] | None = None) -> HttpResult:
        """Issue one request.

        Args:
            method: HTTP method.
            path: Path relative to the configured endpoint.
            body: Optional JSON body.

        Returns:
            HttpResult with the decoded JSON payload when the body is JSON.

        Raises:
            azure.core.exceptions.AzureError: On transport failure.
        """
        request = HttpRequest(method, path, json=body)

        logger.debug("Sending request", extra={"method": method, "path": path})
        response = self._client.send_request(
            request,
            connection_timeout=self._config.request_timeout_seconds,
            read_timeout=self._config.request_timeout_seconds,
        )

        text = response.text() if response.content else ""
        payload: Any = None
        if text:
            try:
                payload = json.loads(text)
            except ValueError:
                payload = None

        logger.debug(
            "Received response",
            extra={"method": method, "path": path, "status_code": response.status_code},
        )
        return HttpResult(status_code=response.status_code, text=text, payload=payload)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> SagaDataClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
