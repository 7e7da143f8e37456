"""Application and route groups: wiring pipelines into the router.

An ``App`` owns the global middleware list, the validator and error renderer
hooks, and a Starlette ``Router``. Registering a route snapshots the
middleware list of the App (or Group) at that moment; middleware added later
only applies to routes registered after it.

Each matching request is served by reading its body, then running the
synchronous pipeline (``Context.next()``) in Starlette's threadpool, and
finally converting the context's response writer into a Starlette response.
The ``App`` itself is an ASGI application, so it can be handed to uvicorn or
to Starlette's ``TestClient``.
"""

from collections.abc import Callable, Sequence
from typing import Any

import uvicorn
from loguru import logger
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.responses import Response as StarletteResponse
from starlette.routing import Router
from starlette.types import Receive, Scope, Send

from baton.api.errors import default_error_renderer
from baton.core.config import Settings, get_settings, parse_addr
from baton.core.constants import (
    HTTP_500_INTERNAL_SERVER_ERROR,
    INTERNAL_SERVER_ERROR_MESSAGE,
)
from baton.core.exceptions import AbortError, PanicError
from baton.core.logging import setup_logging
from baton.core.types import ErrorRenderer, Handler, Middleware, Validator
from baton.pipeline.context import Context

type Option = Callable[["App"], None]
type GroupOption = Callable[["Group"], None]

# Route uvicorn's own loggers through Loguru
UVICORN_LOG_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "default": {
            "class": "baton.core.logging.InterceptHandler",
        },
    },
    "loggers": {
        "uvicorn": {"handlers": ["default"], "level": "INFO", "propagate": False},
        "uvicorn.error": {"handlers": ["default"], "level": "INFO", "propagate": False},
        "uvicorn.access": {
            "handlers": ["default"],
            "level": "INFO",
            "propagate": False,
        },
    },
}


def _accept_all(value: object) -> None:
    """Default validator: every record is valid."""
    _ = value


def with_validator(validator: Validator) -> Option:
    """Use ``validator`` on every bound record.

    The validator rejects a record by raising ``ValueError``.
    """

    def apply(app: "App") -> None:
        app.validator = validator

    return apply


def with_error_handler(renderer: ErrorRenderer) -> Option:
    """Render abort causes and unexpected errors with ``renderer``."""

    def apply(app: "App") -> None:
        app.error_renderer = renderer

    return apply


def with_middleware(middleware: Middleware) -> GroupOption:
    """Add ``middleware`` to a group as it is created."""

    def apply(group: "Group") -> None:
        group.middlewares.append(middleware)

    return apply


class _Routes:
    """Route registration shared by ``App`` and ``Group``.

    Every method registers ``handler`` for ``path`` when given one, and
    otherwise returns a decorator that does.
    """

    middlewares: list[Middleware]

    def _app(self) -> "App":
        raise NotImplementedError

    def use(self, middleware: Middleware) -> None:
        """Append ``middleware`` for routes registered from now on."""
        self.middlewares.append(middleware)

    def get(self, path: str, handler: Handler | None = None) -> Any:  # noqa: ANN401 - handler or decorator
        """Register a GET route."""
        return self._handle(["GET"], path, handler)

    def post(self, path: str, handler: Handler | None = None) -> Any:  # noqa: ANN401 - handler or decorator
        """Register a POST route."""
        return self._handle(["POST"], path, handler)

    def put(self, path: str, handler: Handler | None = None) -> Any:  # noqa: ANN401 - handler or decorator
        """Register a PUT route."""
        return self._handle(["PUT"], path, handler)

    def patch(self, path: str, handler: Handler | None = None) -> Any:  # noqa: ANN401 - handler or decorator
        """Register a PATCH route."""
        return self._handle(["PATCH"], path, handler)

    def delete(self, path: str, handler: Handler | None = None) -> Any:  # noqa: ANN401 - handler or decorator
        """Register a DELETE route."""
        return self._handle(["DELETE"], path, handler)

    def any(self, path: str, handler: Handler | None = None) -> Any:  # noqa: ANN401 - handler or decorator
        """Register a route matching every method."""
        return self._handle(None, path, handler)

    def _handle(
        self, methods: list[str] | None, path: str, handler: Handler | None
    ) -> Any:  # noqa: ANN401 - handler or decorator
        if handler is not None:
            self._app().register(methods, path, handler, tuple(self.middlewares))
            return handler

        def decorator(func: Handler) -> Handler:
            self._app().register(methods, path, func, tuple(self.middlewares))
            return func

        return decorator


class App(_Routes):
    """A Baton application.

    Args:
        *options: ``with_validator`` / ``with_error_handler`` options.
        settings: Settings to use; defaults to ``get_settings()``.
    """

    def __init__(self, *options: Option, settings: Settings | None = None) -> None:
        self.settings = settings if settings is not None else get_settings()
        self.addr = self.settings.addr
        self.validator: Validator = _accept_all
        self.error_renderer: ErrorRenderer = default_error_renderer
        self.middlewares: list[Middleware] = []
        self.router = Router()
        for option in options:
            option(self)

    def _app(self) -> "App":
        return self

    def group(self, *options: GroupOption) -> "Group":
        """Create a group starting from the App's current middleware."""
        return Group(self, *options)

    def register(
        self,
        methods: list[str] | None,
        path: str,
        handler: Handler,
        middlewares: Sequence[Middleware],
    ) -> None:
        """Register ``handler`` with the router behind ``middlewares``.

        Args:
            methods: Allowed methods, or None for any method.
            path: Route path in Starlette syntax, e.g. ``/users/{id}``.
            handler: Terminal handler returning a Response.
            middlewares: Middleware snapshot for this route.
        """
        snapshot = tuple(middlewares)

        async def endpoint(request: Request) -> StarletteResponse:
            body = await request.body()
            return await run_in_threadpool(self._serve, request, body, handler, snapshot)

        self.router.add_route(path, endpoint, methods=methods)
        logger.debug(
            "Registered {} {} with {} middleware",
            ",".join(methods) if methods else "ANY",
            path,
            len(snapshot),
        )

    def _serve(
        self,
        request: Request,
        body: bytes,
        handler: Handler,
        middlewares: tuple[Middleware, ...],
    ) -> StarletteResponse:
        ctx = Context(request, handler, middlewares, self, body)
        try:
            ctx.next()
            if not ctx.writer.committed:
                self._render_missing_response(ctx)
        except (AbortError, Exception):  # noqa: BLE001 - last line of defence when the error renderer fails
            logger.exception("Error renderer failed for {}", request.url.path)
            return PlainTextResponse(
                INTERNAL_SERVER_ERROR_MESSAGE, HTTP_500_INTERNAL_SERVER_ERROR
            )
        return ctx.writer.to_response()

    def _render_missing_response(self, ctx: Context) -> None:
        logger.warning(
            "Pipeline for {} {} finished without a response",
            ctx.request.method,
            ctx.request.url.path,
        )
        ctx.status = HTTP_500_INTERNAL_SERVER_ERROR
        error = RuntimeError(
            "a middleware neither called next() nor aborted the request"
        )
        self.error_renderer(ctx, PanicError(error, location="")).send(ctx.writer)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI entry point; dispatches to the router."""
        await self.router(scope, receive, send)

    def listen(self) -> None:
        """Serve the application on ``addr`` until the process stops.

        Startup failures (e.g. the address is in use) are not swallowed.
        """
        setup_logging(self.settings)
        host, port = parse_addr(self.addr)
        logger.info("Starting {} on http://{}:{}", self.settings.app_name, host, port)
        uvicorn.run(self, host=host, port=port, log_config=UVICORN_LOG_CONFIG)


class Group(_Routes):
    """Routes sharing a middleware prefix on top of the App's middleware.

    Args:
        app: The owning application.
        *options: ``with_middleware`` options.
    """

    def __init__(self, app: App, *options: GroupOption) -> None:
        self.app = app
        self.middlewares: list[Middleware] = list(app.middlewares)
        for option in options:
            option(self)

    def _app(self) -> App:
        return self.app
