"""Root conftest.py for the Tenantry test suite.

Project-wide fixtures keep settings, request context and logging state from
leaking between tests.
"""

import os
from collections.abc import Generator

import pytest
from loguru import logger

from tenantry.core.config import get_settings
from tenantry.core.context import RequestContext
from tenantry.core.error_context import _get_sensitive_fields
from tenantry.core.logging import _state


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None]:
    """Clear cached settings before and after each test."""
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()
    yield
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()


@pytest.fixture(autouse=True)
def clean_request_context() -> Generator[None]:
    """Clear RequestContext before and after each test."""
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture(autouse=True)
def quiet_logging() -> Generator[None]:
    """Keep app creation from installing stdout sinks during tests.

    Tests that need to inspect log output add their own sink.
    """
    logger.remove()
    previous = _state.configured
    _state.configured = True
    yield
    _state.configured = previous
    logger.remove()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove app-specific environment variables that could alter settings.

    Returns:
        pytest.MonkeyPatch: The monkeypatch instance for env manipulation.
    """
    env_prefixes = (
        "APP_",
        "API_",
        "ENVIRONMENT",
        "DEBUG",
        "LOG_CONFIG__",
        "OBSERVABILITY_CONFIG__",
        "DATABASE_CONFIG__",
        "TENANT_CONFIG__",
        "K_SERVICE",
        "AWS_EXECUTION_ENV",
        "PORT",
    )
    for key in list(os.environ):
        if key.startswith(env_prefixes):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
