"""Request context middleware for correlation IDs.

The correlation ID is taken from the ``X-Correlation-ID`` request header or
generated as a UUID4. It is stored on the context under ``"correlation_id"``
for later middleware, the handler and the error renderer, and it is bound to
every Loguru record emitted while the request runs.

It is also echoed back as a response header, including on error responses.
"""

import uuid

from loguru import logger

from baton.api.constants import CORRELATION_ID_HEADER, CORRELATION_ID_KEY
from baton.pipeline.context import Context


def request_context(ctx: Context) -> None:
    """Attach a correlation ID to the request and continue the pipeline.

    Args:
        ctx: The request context.
    """
    correlation_id = ctx.request.headers.get(CORRELATION_ID_HEADER) or str(
        uuid.uuid4()
    )

    ctx.set(CORRELATION_ID_KEY, correlation_id)
    ctx.writer.headers[CORRELATION_ID_HEADER] = correlation_id

    with logger.contextualize(correlation_id=correlation_id):
        ctx.next()
