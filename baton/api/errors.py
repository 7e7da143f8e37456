"""Error renderers: turning abort causes and unexpected errors into responses.

An error renderer receives the request context, whose ``status`` already
holds the status chosen by the abort or failure, and the cause. Server faults
(status 500 and above) are logged with their traceback and answered with an
opaque message; anything below 500 is a client problem and the cause text is
returned as-is so the client can fix its request.
"""

from loguru import logger

from baton.api.constants import CORRELATION_ID_KEY, REQUEST_ID_KEY
from baton.api.schemas.errors import ErrorResponse
from baton.core.constants import (
    HTTP_500_INTERNAL_SERVER_ERROR,
    INTERNAL_SERVER_ERROR_MESSAGE,
)
from baton.pipeline.context import Context
from baton.pipeline.responses import JSONResponse, Response, TextResponse


def _log_server_error(ctx: Context, cause: BaseException) -> None:
    logger.opt(exception=cause).error(
        "Request failed: {}",
        cause,
        method=ctx.request.method,
        path=ctx.request.url.path,
        status_code=ctx.status,
    )


def default_error_renderer(ctx: Context, cause: BaseException) -> Response:
    """Render a cause as plain text.

    Args:
        ctx: The request context.
        cause: The abort cause or the wrapped unexpected error.

    Returns:
        Response: ``internal server error`` for server faults, the cause text
            otherwise.
    """
    if ctx.status >= HTTP_500_INTERNAL_SERVER_ERROR:
        _log_server_error(ctx, cause)
        return TextResponse(INTERNAL_SERVER_ERROR_MESSAGE, ctx.status)
    return TextResponse(str(cause), ctx.status)


def json_error_renderer(ctx: Context, cause: BaseException) -> Response:
    """Render a cause as an ``ErrorResponse`` JSON document.

    Install with ``App(with_error_handler(json_error_renderer))``.
    The correlation and request IDs are read from the context store, where
    the built-in middleware put them; they are null when those did not run.

    Args:
        ctx: The request context.
        cause: The abort cause or the wrapped unexpected error.

    Returns:
        Response: JSON error body with the context's status.
    """
    message = str(cause)
    if ctx.status >= HTTP_500_INTERNAL_SERVER_ERROR:
        _log_server_error(ctx, cause)
        message = INTERNAL_SERVER_ERROR_MESSAGE

    error_response = ErrorResponse(
        status=ctx.status,
        message=message,
        correlation_id=ctx.get(CORRELATION_ID_KEY),
        request_id=ctx.get(REQUEST_ID_KEY),
    )
    return JSONResponse(error_response.model_dump(mode="json"), ctx.status)
