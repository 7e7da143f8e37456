"""HTTP request/response logging with performance monitoring.

The middleware logs the start and completion of every request with its
duration and the status the pipeline committed, and warns about requests
slower than the configured threshold. Because the pipeline always recovers
aborts and errors into a response, completion is logged for failed requests
too, with their error status.

Features:
- **Structured logging**: request fields are bound to every record
- **Performance tracking**: duration and slow request detection
- **Redaction**: sensitive query parameters are never logged verbatim
- **Exclusion patterns**: configurable path exclusion (e.g., health checks)
"""

import time
import uuid

from loguru import logger

from baton.api.constants import MAX_USER_AGENT_LENGTH, REQUEST_ID_HEADER, REQUEST_ID_KEY
from baton.core.config import LogConfig, get_settings
from baton.core.constants import MILLISECONDS_PER_SECOND
from baton.core.sanitize import sanitize_params
from baton.core.types import Middleware
from baton.pipeline.context import Context


def request_logging(log_config: LogConfig | None = None) -> Middleware:
    """Build a request logging middleware.

    Args:
        log_config: Logging configuration; defaults to the settings' one.

    Returns:
        Middleware: The logging middleware.
    """
    config = log_config if log_config is not None else get_settings().log_config
    excluded_paths = set(config.excluded_paths)

    def middleware(ctx: Context) -> None:
        request = ctx.request
        if request.url.path in excluded_paths:
            ctx.next()
            return

        request_id = request.headers.get(REQUEST_ID_HEADER) or f"req-{uuid.uuid4()}"
        ctx.set(REQUEST_ID_KEY, request_id)
        ctx.writer.headers[REQUEST_ID_HEADER] = request_id

        user_agent = request.headers.get("user-agent", "")[:MAX_USER_AGENT_LENGTH]
        with logger.contextualize(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_host=request.client.host if request.client else "unknown",
            user_agent=user_agent or "unknown",
        ):
            query_params = sanitize_params(
                request.query_params, config.sensitive_fields
            )
            logger.info("Request started", query_params=query_params or None)

            start_time = time.perf_counter()
            try:
                ctx.next()
            except Exception as exc:
                duration_ms = (time.perf_counter() - start_time) * MILLISECONDS_PER_SECOND
                logger.error(
                    "Request failed",
                    duration_ms=round(duration_ms, 2),
                    error_type=type(exc).__name__,
                    error_message=str(exc),
                )
                raise

            duration_ms = (time.perf_counter() - start_time) * MILLISECONDS_PER_SECOND
            logger.info(
                "Request completed",
                status_code=ctx.status,
                duration_ms=round(duration_ms, 2),
                response_size=len(ctx.writer.body),
            )

            if duration_ms > config.slow_request_threshold_ms:
                logger.warning(
                    "Slow request detected",
                    duration_ms=round(duration_ms, 2),
                    threshold_ms=config.slow_request_threshold_ms,
                )

    return middleware
