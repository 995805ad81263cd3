"""Pytest configuration and shared fixtures."""

import pytest

# Load environment variables from .env file at test startup
from dotenv import load_dotenv
load_dotenv()

from envelope_client import ClientConfiguration, InMemoryTokenStore
from tests.fixtures.transport import TEST_BASE_URL, TEST_ENCRYPTION_KEY

pytest_plugins = [
    "tests.fixtures.transport",
    "tests.fixtures.sandbox",
]


@pytest.fixture
def configuration() -> ClientConfiguration:
    """A configuration with every identity header and an encryption key set."""
    return ClientConfiguration(
        base_url=TEST_BASE_URL,
        timeout=5.0,
        package_name="com.app.package.development",
        app_version="1.4.0",
        language="en",
        encryption_key=TEST_ENCRYPTION_KEY,
    )


@pytest.fixture
def token_store() -> InMemoryTokenStore:
    """An empty in-memory token store."""
    return InMemoryTokenStore()
