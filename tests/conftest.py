"""Root conftest.py for the Baton test suite.

This file contains project-wide fixtures and pytest configuration.
"""

import os
from collections.abc import Generator
from typing import Any

import pytest
from loguru import logger

from baton.core.config import get_settings


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that drive a whole App"
    )


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear the settings cache before and after each test to ensure isolation."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove app-specific env vars that might interfere with a test.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        pytest.MonkeyPatch: The monkeypatch instance for env manipulation.
    """
    env_prefixes = ["APP_", "ADDR", "ENVIRONMENT", "DEBUG", "LOG_CONFIG__"]
    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in env_prefixes):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def log_records() -> Generator[list[dict[str, Any]]]:
    """Capture Loguru records emitted during a test.

    Yields:
        list[dict[str, Any]]: Records in emission order.
    """
    records: list[dict[str, Any]] = []
    handler_id = logger.add(
        lambda message: records.append(message.record), level="DEBUG"
    )
    yield records
    logger.remove(handler_id)
