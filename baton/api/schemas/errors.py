"""Error response schema used by the JSON error renderer.

All timestamp fields include timezone information for proper
internationalization support.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standardized JSON body for aborted or failed requests."""

    status: int = Field(
        ...,
        description="HTTP status code of the response",
        examples=[400, 422, 500],
    )

    message: str = Field(
        ...,
        description="Human-readable error message (opaque for server errors)",
        examples=["id: invalid integer value 'foo'", "internal server error"],
    )

    correlation_id: str | None = Field(
        default=None,
        description="Request correlation ID for tracing and debugging",
        examples=["550e8400-e29b-41d4-a716-446655440000"],
    )

    request_id: str | None = Field(
        default=None,
        description="Request ID set by the request logging middleware",
        examples=["req-660e8400-e29b-41d4-a716-446655440000"],
    )

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Timestamp when the error occurred (with timezone)",
        examples=["2024-06-14T12:00:00+00:00"],
    )
