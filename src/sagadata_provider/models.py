"""Pydantic models for Saga Data API request and response bodies.

These models provide:
1. Typed parsing of API responses (fail loudly on contract mismatches)
2. Request bodies that serialize only the fields that were explicitly set
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, Field, field_validator, model_validator

# =============================================================================
# Status enums
# =============================================================================


class PrivateNetworkStatus(str, Enum):
    """Remote private network statuses."""

    CREATING = "creating"
    CREATED = "created"
    DELETING = "deleting"
    ERROR = "error"


class KubernetesClusterStatus(str, Enum):
    """Remote Kubernetes cluster statuses."""

    CREATING = "creating"
    ACTIVE = "active"
    UPDATING = "updating"
    DELETING = "deleting"
    ERROR = "error"


# =============================================================================
# Regions
# =============================================================================


class Region(str, Enum):
    """Regions the API accepts for new resources."""

    NO_SOUTH_1 = "no-south-1"


# =============================================================================
# Error body
# =============================================================================


class ErrorBody(BaseModel):
    """Structured error returned by the API for non-success responses."""

    model_config = {"extra": "ignore"}

    code: str | None = None
    message: Annotated[str, Field(min_length=1)]


# =============================================================================
# Private networks
# =============================================================================


class PrivateNetwork(BaseModel):
    """Private network as returned by the API."""

    model_config = {"extra": "ignore"}

    id: Annotated[str, Field(min_length=1)]
    name: str
    region: str
    description: str | None = None
    cidr_v4: str | None = None
    cidr_v6: str | None = None
    # Kept as a plain string so new remote statuses do not break parsing
    status: str
    created_at: datetime
    updated_at: datetime


class CreatePrivateNetworkRequest(BaseModel):
    """Body of POST /private-networks."""

    name: Annotated[str, Field(min_length=1)]
    region: Region
    description: str | None = None
    cidr_v4: str | None = None
    cidr_v6: str | None = None

    @field_validator("cidr_v4", "cidr_v6")
    @classmethod
    def validate_cidr(cls, v: str | None) -> str | None:
        if v is not None and "/" not in v:
            raise ValueError("CIDR block must be in CIDR notation (e.g., 10.0.0.0/24)")
        return v

    @model_validator(mode="after")
    def validate_exactly_one_cidr(self) -> CreatePrivateNetworkRequest:
        """A network is either IPv4 or IPv6: exactly one CIDR block must be set."""
        if (self.cidr_v4 is None) == (self.cidr_v6 is None):
            raise ValueError("exactly one of cidr_v4 and cidr_v6 must be set")
        return self

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class UpdatePrivateNetworkRequest(BaseModel):
    """Body of PATCH /private-networks/{id}. Only set fields are sent."""

    name: str | None = None
    description: str | None = None

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


# =============================================================================
# Kubernetes clusters
# =============================================================================


class KubernetesCluster(BaseModel):
    """Kubernetes cluster as returned by the API."""

    model_config = {"extra": "ignore"}

    id: Annotated[str, Field(min_length=1)]
    name: str
    network: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime


class KubernetesClusterCredentials(BaseModel):
    """Credentials sub-resource of a Kubernetes cluster."""

    model_config = {"extra": "ignore"}

    kubeconfig: str
    join_command: str | None = None


class CreateKubernetesClusterRequest(BaseModel):
    """Body of POST /kubernetes-clusters."""

    name: Annotated[str, Field(min_length=1)]
    network: str | None = None

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class UpdateKubernetesClusterRequest(BaseModel):
    """Body of PATCH /kubernetes-clusters/{id}. Only set fields are sent."""

    network: str | None = None

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)
