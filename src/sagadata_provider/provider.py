"""Provider assembly.

The Provider is built once from a Config and owns the low-level client, the
poll scheduler and one reconciliation engine per resource kind. Everything
is passed explicitly; there is no module-level client or settings object.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from .client import SagaDataClient
from .config import Config
from .engine import (
    OperationOutcome,
    ReconciliationEngine,
    client_error,
    finish,
    require_identity,
)
from .errors import ProviderError
from .facade import HttpClient, KubernetesClusterApi, PrivateNetworkApi
from .polling import PollScheduler
from .projection import project_cluster_credentials, project_kubernetes_cluster_data_source
from .resources import kubernetes_cluster_kind, private_network_kind
from .state import (
    KubernetesClusterConfig,
    KubernetesClusterDataSourceRecord,
    KubernetesClusterRecord,
    PrivateNetworkConfig,
    PrivateNetworkRecord,
)
from .timeouts import OperationContext, Timeouts, with_timeout

logger = logging.getLogger(__name__)

# Default read timeout for the cluster data source
DATA_SOURCE_READ_TIMEOUT = "5m"


class Provider:
    """Entry point for callers: one engine per resource kind."""

    def __init__(self, config: Config, client: HttpClient | None = None) -> None:
        """Initialize the provider.

        Args:
            config: Validated provider configuration.
            client: Low-level HTTP client; defaults to a SagaDataClient built
                from ``config``.
        """
        self._config = config
        self._owns_client = client is None
        self._client: HttpClient = client if client is not None else SagaDataClient(config)
        self._scheduler = PollScheduler(config.polling_interval_seconds)

        self._cluster_api = KubernetesClusterApi(self._client)
        self.private_networks: ReconciliationEngine[
            Any, PrivateNetworkRecord, PrivateNetworkConfig
        ] = ReconciliationEngine(
            private_network_kind(PrivateNetworkApi(self._client)), self._scheduler
        )
        self.kubernetes_clusters: ReconciliationEngine[
            Any, KubernetesClusterRecord, KubernetesClusterConfig
        ] = ReconciliationEngine(kubernetes_cluster_kind(self._cluster_api), self._scheduler)

        logger.info(
            "Provider configured",
            extra={
                "endpoint": config.endpoint,
                "polling_interval_seconds": config.polling_interval_seconds,
            },
        )

    @property
    def config(self) -> Config:
        return self._config

    def engine_for(self, kind: str) -> ReconciliationEngine[Any, Any, Any]:
        """Look up an engine by kind key ("private_network", "kubernetes_cluster")."""
        engines: dict[str, ReconciliationEngine[Any, Any, Any]] = {
            "private_network": self.private_networks,
            "kubernetes_cluster": self.kubernetes_clusters,
        }
        try:
            return engines[kind]
        except KeyError as e:
            raise ValueError(f"Unknown resource kind {kind!r}; valid: {sorted(engines)}") from e

    async def read_kubernetes_cluster(
        self,
        parent: OperationContext,
        identity: str,
        timeouts: Timeouts | None = None,
    ) -> OperationOutcome[KubernetesClusterDataSourceRecord]:
        """Read cluster details and credentials (data source).

        The cluster record is projected before the credentials are fetched,
        so a credentials failure still returns the cluster details.
        """
        require_identity("read kubernetes cluster", identity)

        outcome: OperationOutcome[KubernetesClusterDataSourceRecord] = OperationOutcome(
            kind="kubernetes cluster", operation="read", start_time=datetime.now(UTC)
        )
        configured = timeouts.read if timeouts is not None else None

        with with_timeout(parent, configured, DATA_SOURCE_READ_TIMEOUT) as ctx:
            try:
                operation = "read kubernetes cluster"
                outcome.reads += 1
                result = await self._cluster_api.get(ctx, operation, identity)
                if result.value is None:
                    raise client_error(operation, result)
                outcome.record = project_kubernetes_cluster_data_source(result.value)

                operation = "read kubernetes cluster credentials"
                outcome.reads += 1
                creds = await self._cluster_api.get_credentials(ctx, operation, identity)
                if creds.value is None:
                    raise client_error(operation, creds)
                outcome.record = project_cluster_credentials(outcome.record, creds.value)
            except ProviderError as e:
                outcome.error = e

        return finish(outcome)

    def close(self) -> None:
        if self._owns_client and isinstance(self._client, SagaDataClient):
            self._client.close()

    def __enter__(self) -> Provider:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
