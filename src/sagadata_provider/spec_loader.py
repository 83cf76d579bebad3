"""Resource file loading with validation.

A resource file declares one managed resource:

    kind: private_network
    id: 3f6c...            # optional; required for read/update/delete
    attributes:
      name: net-1
      region: no-south-1
      cidr_v4: 10.0.0.0/24
      timeouts:
        create: 10m

All file operations enforce a size limit. Validation is performed at the
boundary so the engine only ever sees well-formed desired attributes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from .state import DesiredAttributes, KubernetesClusterConfig, PrivateNetworkConfig

logger = logging.getLogger(__name__)

MAX_RESOURCE_FILE_SIZE_BYTES = 1024 * 1024  # 1MB

KIND_TO_CONFIG: dict[str, type[DesiredAttributes]] = {
    "private_network": PrivateNetworkConfig,
    "kubernetes_cluster": KubernetesClusterConfig,
}


class SpecLoadError(Exception):
    """Raised when resource file loading or validation fails."""

    pass


class ResourceFile(BaseModel):
    """Top-level layout of a resource file."""

    model_config = {"extra": "ignore"}

    kind: str
    id: str | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)


@dataclass(frozen=True)
class ResourceSpec:
    """A validated resource declaration."""

    kind: str
    desired: DesiredAttributes
    id: str | None = None


def get_config_class(kind: str) -> type[DesiredAttributes]:
    """Get the desired-attribute model for a resource kind.

    Raises:
        ValueError: If the kind is not recognized.
    """
    config_class = KIND_TO_CONFIG.get(kind)
    if config_class is None:
        raise ValueError(f"Unknown resource kind '{kind}'. Valid kinds: {sorted(KIND_TO_CONFIG)}")
    return config_class


def _format_validation_error(path: Path, e: ValidationError) -> str:
    errors = []
    for error in e.errors():
        loc = ".".join(str(x) for x in error["loc"])
        errors.append(f"  - {loc}: {error['msg']}")
    return f"Validation failed for {path}:\n" + "\n".join(errors)


def load_resource(path: Path) -> ResourceSpec:
    """Load and validate a resource file.

    Args:
        path: Path to the YAML resource file.

    Returns:
        Validated ResourceSpec. Attributes absent from the file stay unset
        on ``desired`` so partial updates never send them.

    Raises:
        SpecLoadError: If the file cannot be loaded or fails validation.
    """
    if not path.exists():
        raise SpecLoadError(f"Resource file not found: {path}")

    try:
        file_size = path.stat().st_size
    except OSError as e:
        raise SpecLoadError(f"Failed to stat resource file {path}: {e}") from e

    if file_size > MAX_RESOURCE_FILE_SIZE_BYTES:
        raise SpecLoadError(
            f"Resource file exceeds maximum size of {MAX_RESOURCE_FILE_SIZE_BYTES} bytes: {path}"
        )

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SpecLoadError(f"Failed to read resource file {path}: {e}") from e

    try:
        raw_data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SpecLoadError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(raw_data, dict):
        raise SpecLoadError(f"Resource file must contain a YAML mapping: {path}")

    try:
        resource_file = ResourceFile.model_validate(raw_data)
    except ValidationError as e:
        raise SpecLoadError(_format_validation_error(path, e)) from e

    try:
        config_class = get_config_class(resource_file.kind)
    except ValueError as e:
        raise SpecLoadError(str(e)) from e

    try:
        desired = config_class.model_validate(resource_file.attributes)
    except ValidationError as e:
        raise SpecLoadError(_format_validation_error(path, e)) from e

    logger.info("Loaded %s resource from %s", resource_file.kind, path)
    return ResourceSpec(kind=resource_file.kind, id=resource_file.id, desired=desired)
