"""Test configuration and shared fixtures.

Provide isolated test settings, application context and client fixtures.
All fixtures ensure tests run without depending on the caller's environment
variables or a local `.env` file.
"""
import os
from typing import Generator
from unittest import mock

import pytest
from fastapi.testclient import TestClient

from pinger.config import Settings
from pinger.core.context import AppContext
from pinger.main import create_app

# ==============================================================================
# CONFIGURATION FIXTURES
# ==============================================================================


def make_settings(**overrides) -> Settings:
    """Build Settings from defaults and ``overrides`` only, ignoring os.environ."""
    with mock.patch.dict(os.environ, {}, clear=True):
        return Settings(_env_file=None, **overrides)


@pytest.fixture
def settings_factory():
    """Provide the environment-independent Settings builder."""
    return make_settings


@pytest.fixture
def mock_settings() -> Settings:
    """Provide isolated test configuration bound to localhost on a free port.

    Returns:
        Settings: Test configuration with short probe interval and timeouts.
    """
    return make_settings(
        interface="127.0.0.1",
        port=0,
        ping_interval="20ms",
        ping_timeout="1s",
        target_host="127.0.0.1",
    )


@pytest.fixture
def context(mock_settings: Settings) -> AppContext:
    """Provide a fresh application context with every readiness check down."""
    return AppContext(settings=mock_settings)


@pytest.fixture
def client(context: AppContext) -> Generator[TestClient, None, None]:
    """Provide HTTP test client bound to an isolated application context.

    Args:
        context: Application context the routes read from.

    Yields:
        TestClient: FastAPI test client.
    """
    with TestClient(create_app(context)) as test_client:
        yield test_client
