"""Provider configuration with validation.

Configuration is constructed once at startup and passed explicitly to the
provider and its engines. Nothing in this package reads provider settings
from ambient global state after construction.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

DEFAULT_ENDPOINT = "https://api.sagadata.no/v1"

# Timing defaults (duration strings, see parse_duration)
DEFAULT_POLLING_INTERVAL = "2s"
DEFAULT_REQUEST_TIMEOUT = "60s"

# Upper bound on a single poll interval to catch unit mistakes ("2h" for "2s")
MAX_POLLING_INTERVAL_SECONDS = 300

USER_AGENT = "sagadata-provider-python"

_DURATION_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    pass


class TimeoutParseError(ConfigurationError):
    """Raised when a duration string cannot be parsed."""

    pass


def parse_duration(value: str) -> float:
    """Parse a duration string such as ``"20m"``, ``"1h30m"`` or ``"50ms"``.

    The grammar is a sequence of decimal numbers each followed by a unit
    (``ns``, ``us``, ``ms``, ``s``, ``m``, ``h``), optionally signed.
    ``"0"`` is accepted without a unit.

    Args:
        value: Duration string.

    Returns:
        Duration in seconds.

    Raises:
        TimeoutParseError: If the string is not a valid duration.
    """
    text = value.strip()
    if not text:
        raise TimeoutParseError(f"invalid duration: {value!r}")

    sign = 1.0
    if text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    if text == "0":
        return 0.0

    total = 0.0
    position = 0
    while position < len(text):
        match = _DURATION_PART.match(text, position)
        if match is None:
            raise TimeoutParseError(f"invalid duration: {value!r}")
        number, unit = match.groups()
        total += float(number) * _DURATION_UNITS[unit]
        position = match.end()

    if position == 0:
        raise TimeoutParseError(f"invalid duration: {value!r}")

    return sign * total


@dataclass(frozen=True)
class Config:
    """Provider configuration.

    All fields are validated at construction time. Invalid configurations
    raise ConfigurationError immediately rather than failing mid-operation.
    """

    token: str
    endpoint: str = DEFAULT_ENDPOINT

    # Provider-wide interval shared by every settling/disappearance loop
    polling_interval_seconds: float = 2.0

    # Connection and read timeout for each individual HTTP call
    request_timeout_seconds: float = 60.0

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        errors: list[str] = []

        if not self.token:
            errors.append(
                "SAGADATA_TOKEN is required: set the token value in the configuration "
                "or use the SAGADATA_TOKEN environment variable"
            )

        if not self.endpoint:
            errors.append("SAGADATA_ENDPOINT must not be empty")
        elif not self.endpoint.startswith(("https://", "http://")):
            errors.append(f"SAGADATA_ENDPOINT must be an http(s) URL: {self.endpoint}")

        if self.polling_interval_seconds <= 0:
            errors.append("SAGADATA_POLLING_INTERVAL must be a positive duration")
        elif self.polling_interval_seconds > MAX_POLLING_INTERVAL_SECONDS:
            errors.append(
                f"SAGADATA_POLLING_INTERVAL cannot exceed {MAX_POLLING_INTERVAL_SECONDS} seconds"
            )

        if self.request_timeout_seconds <= 0:
            errors.append("SAGADATA_REQUEST_TIMEOUT must be a positive duration")

        if errors:
            error_msg = "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            raise ConfigurationError(error_msg)

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables.

        Environment Variables:
            SAGADATA_ENDPOINT: API endpoint (default: https://api.sagadata.no/v1)
            SAGADATA_TOKEN: API token (required)
            SAGADATA_POLLING_INTERVAL: Interval between status polls (default: 2s)
            SAGADATA_REQUEST_TIMEOUT: Per-request HTTP timeout (default: 60s)
        """

        def get_duration(key: str, default: str) -> float:
            value = os.environ.get(key) or default
            try:
                return parse_duration(value)
            except TimeoutParseError as e:
                raise ConfigurationError(f"{key} cannot be parsed: {e}") from e

        return cls(
            token=os.environ.get("SAGADATA_TOKEN", ""),
            endpoint=os.environ.get("SAGADATA_ENDPOINT") or DEFAULT_ENDPOINT,
            polling_interval_seconds=get_duration(
                "SAGADATA_POLLING_INTERVAL", DEFAULT_POLLING_INTERVAL
            ),
            request_timeout_seconds=get_duration(
                "SAGADATA_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT
            ),
        )

    def __repr__(self) -> str:
        return (
            f"Config(endpoint={self.endpoint!r}, token='***', "
            f"polling_interval_seconds={self.polling_interval_seconds}, "
            f"request_timeout_seconds={self.request_timeout_seconds})"
        )
