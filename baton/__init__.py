"""Baton - a small request pipeline for Starlette's router.

Baton adds three things on top of a path router:

- **Middleware pipeline**: middleware call ``ctx.next()`` to hand the request
  on; the last step is the route handler, which returns a ``Response``
- **Abort protocol**: ``abort(status, cause)`` stops the pipeline from any
  depth and is turned into exactly one error response
- **Request binding**: ``bind_query``, ``bind_path`` and ``bind_body`` build
  typed records from request data and validate them

Example::

    app = App()

    @dataclass
    class Query:
        id: int = field(metadata={"query": "id"})

    @app.get("/")
    def index(ctx: Context) -> Response:
        return ok({"id": bind_query(ctx, Query).id})
"""

from baton.api.app import App, Group, with_error_handler, with_middleware, with_validator
from baton.api.errors import default_error_renderer, json_error_renderer
from baton.core.exceptions import AbortError, PanicError, abort
from baton.pipeline.binding import bind_body, bind_path, bind_query
from baton.pipeline.context import Context
from baton.pipeline.responses import JSONResponse, Response, TextResponse, ok, text

__all__ = [
    "AbortError",
    "App",
    "Context",
    "Group",
    "JSONResponse",
    "PanicError",
    "Response",
    "TextResponse",
    "abort",
    "bind_body",
    "bind_path",
    "bind_query",
    "default_error_renderer",
    "json_error_renderer",
    "ok",
    "text",
    "with_error_handler",
    "with_middleware",
    "with_validator",
]
