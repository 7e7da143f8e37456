"""Fixtures for core unit tests."""

import pytest
from pytest_mock import MockerFixture

from baton.core.logging import _LoggingState


@pytest.fixture
def isolated_logging_state(mocker: MockerFixture) -> _LoggingState:
    """Replace the module's logging state with a fresh, unconfigured one."""
    state = _LoggingState()
    mocker.patch("baton.core.logging._state", state)
    return state
