"""Fixtures for integration tests driving a whole App over HTTP."""

from collections.abc import Callable

import pytest
from starlette.testclient import TestClient

from baton.api.app import App, Option
from baton.core.config import Settings


@pytest.fixture
def make_app() -> Callable[..., App]:
    """Build an App from options with settings read from a clean environment."""

    def factory(*options: Option) -> App:
        return App(*options, settings=Settings())

    return factory


@pytest.fixture
def client_for() -> Callable[[App], TestClient]:
    """Wrap an App in a TestClient that returns server errors as responses."""

    def factory(app: App) -> TestClient:
        return TestClient(app, raise_server_exceptions=False)

    return factory
