"""Pytest configuration and fixtures."""

import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Add tests to path for sagadata_mock imports
tests_path = Path(__file__).parent
sys.path.insert(0, str(tests_path))

from sagadata_mock import MockSagaDataClient  # noqa: E402

from sagadata_provider.config import Config  # noqa: E402
from sagadata_provider.provider import Provider  # noqa: E402
from sagadata_provider.timeouts import OperationContext  # noqa: E402

# Short interval so settling loops finish quickly
TEST_POLLING_INTERVAL = 0.01


@pytest.fixture
def config() -> Config:
    """Provider configuration pointing at a fake endpoint."""
    return Config(
        token="test-token",
        endpoint="https://api.example.test/v1",
        polling_interval_seconds=TEST_POLLING_INTERVAL,
        request_timeout_seconds=5.0,
    )


@pytest.fixture
def mock_client() -> MockSagaDataClient:
    return MockSagaDataClient()


@pytest.fixture
def provider(config: Config, mock_client: MockSagaDataClient) -> Generator[Provider, None, None]:
    with Provider(config, client=mock_client) as p:
        yield p


@pytest.fixture
def ctx() -> Generator[OperationContext, None, None]:
    """Unbounded root context."""
    with OperationContext.background() as root:
        yield root
