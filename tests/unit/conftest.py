"""Shared fixtures for unit tests."""

from collections.abc import Callable, Sequence
from typing import Any

import pytest
from starlette.requests import Request

from baton.api.app import App
from baton.core.config import Settings
from baton.core.types import Handler, Middleware
from baton.pipeline.context import Context
from baton.pipeline.responses import ok


def _default_handler(ctx: Context) -> Any:  # noqa: ANN401 - returns a Response
    _ = ctx
    return ok({"status": "ok"})


@pytest.fixture
def settings() -> Settings:
    """Provide a Settings object built from a clean environment."""
    return Settings()


@pytest.fixture
def app(settings: Settings) -> App:
    """Provide an App with default hooks."""
    return App(settings=settings)


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Build Starlette requests from a minimal HTTP scope.

    Returns:
        Callable[..., Request]: Factory accepting method, path, query string,
            path params and headers.
    """

    def factory(
        method: str = "GET",
        path: str = "/",
        query_string: bytes = b"",
        path_params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Request:
        scope = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query_string,
            "headers": [
                (k.lower().encode("latin-1"), v.encode("latin-1"))
                for k, v in (headers or {}).items()
            ],
            "path_params": path_params or {},
            "server": ("testserver", 80),
            "client": ("testclient", 50000),
            "scheme": "http",
            "root_path": "",
        }
        return Request(scope)

    return factory


@pytest.fixture
def make_context(app: App, make_request: Callable[..., Request]) -> Callable[..., Context]:
    """Build a Context for the ``app`` fixture.

    Returns:
        Callable[..., Context]: Factory accepting a handler, middleware, a body
            and any ``make_request`` keyword.
    """

    def factory(
        handler: Handler | None = None,
        middlewares: Sequence[Middleware] = (),
        body: bytes = b"",
        **request_kwargs: Any,
    ) -> Context:
        return Context(
            make_request(**request_kwargs),
            handler or _default_handler,
            middlewares,
            app,
            body,
        )

    return factory
