"""Local resource records and desired-attribute models.

Records are the persisted view of one remote entity. They are produced by
the projection functions and handed back to the caller, which owns their
storage. Desired-attribute models describe what the configuration asks for;
a field counts as "known" only when it was explicitly set and is not None.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .models import Region
from .timeouts import Timeouts


class ResourceRecord(BaseModel):
    """Fields common to every persisted resource record."""

    model_config = {"extra": "ignore"}

    id: str | None = None
    name: str | None = None
    status: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    # Carried from configuration, never from the remote side
    timeouts: Timeouts | None = None


class PrivateNetworkRecord(ResourceRecord):
    region: str | None = None
    description: str | None = None
    cidr_v4: str | None = None
    cidr_v6: str | None = None


class KubernetesClusterRecord(ResourceRecord):
    network: str | None = None


class KubernetesClusterDataSourceRecord(KubernetesClusterRecord):
    """Cluster details plus its credentials sub-resource."""

    kubeconfig: str | None = None
    join_command: str | None = None


class DesiredAttributes(BaseModel):
    """Base for desired configuration of one resource."""

    model_config = {"extra": "ignore"}

    timeouts: Timeouts = Field(default_factory=Timeouts)

    def is_known(self, field_name: str) -> bool:
        """True if the field was explicitly provided with a non-null value."""
        return field_name in self.model_fields_set and getattr(self, field_name) is not None

    def known_values(self, *field_names: str) -> dict[str, Any]:
        """Return only the requested fields that are known."""
        return {name: getattr(self, name) for name in field_names if self.is_known(name)}


class PrivateNetworkConfig(DesiredAttributes):
    name: str | None = None
    region: Region | None = None
    description: str | None = None
    cidr_v4: str | None = None
    cidr_v6: str | None = None


class KubernetesClusterConfig(DesiredAttributes):
    name: str | None = None
    network: str | None = None
