"""Responses and the status-observing writer they are sent through.

A handler returns a ``Response``; the pipeline calls its ``send()`` with the
request's ``ResponseWriter``. The writer buffers headers and body, and the
first status written to it is recorded on the owning ``Context`` so that
later code (the error renderer in particular) can see what was committed.

JSON bodies are serialised with orjson, which handles dataclasses, datetimes
and UUIDs natively; pydantic models are dumped before serialisation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import orjson
from loguru import logger
from pydantic import BaseModel
from starlette.datastructures import MutableHeaders
from starlette.responses import Response as StarletteResponse

from baton.core.constants import HTTP_200_OK

if TYPE_CHECKING:
    from baton.pipeline.context import Context

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


@runtime_checkable
class Response(Protocol):
    """Anything that can write itself to a ``ResponseWriter``."""

    def send(self, writer: ResponseWriter) -> None:
        """Write status, headers and body to ``writer``."""
        ...


class ResponseWriter:
    """Buffering sink that records the committed status on its context.

    Only the first ``write_header()`` takes effect; later calls are ignored.
    Writing body bytes before any status commits a 200.

    Args:
        context: The context whose ``status`` mirrors this writer's status.
    """

    def __init__(self, context: Context | None = None) -> None:
        self.headers = MutableHeaders()
        self.status = 0
        self._body = bytearray()
        self._context = context

    @property
    def committed(self) -> bool:
        """Whether a status has been written."""
        return self.status != 0

    @property
    def body(self) -> bytes:
        """The body bytes written so far."""
        return bytes(self._body)

    def write_header(self, status: int) -> None:
        """Commit the response status.

        Args:
            status: HTTP status code.
        """
        if self.committed:
            logger.warning(
                "Ignoring status {} written after {} was committed",
                status,
                self.status,
            )
            return
        self.status = status
        if self._context is not None:
            self._context.status = status

    def write(self, data: bytes) -> int:
        """Append ``data`` to the body, committing 200 if no status was set.

        Args:
            data: Body bytes.

        Returns:
            int: Number of bytes written.
        """
        if not self.committed:
            self.write_header(HTTP_200_OK)
        self._body += data
        return len(data)

    def to_response(self) -> StarletteResponse:
        """Build the Starlette response handed back to the router.

        Returns:
            StarletteResponse: Response carrying the buffered status, headers
                and body.
        """
        return StarletteResponse(
            content=self.body,
            status_code=self.status or HTTP_200_OK,
            headers=self.headers,
        )


class JSONResponse:
    """A status and a body serialised as JSON.

    Args:
        body: Any orjson-serialisable value or pydantic model.
        status_code: HTTP status code (defaults to 200).
    """

    media_type = JSON_CONTENT_TYPE

    def __init__(self, body: Any, status_code: int = HTTP_200_OK) -> None:  # noqa: ANN401 - accepts any JSON-serializable content
        self.body = body
        self.status_code = status_code

    def render(self) -> bytes:
        """Render the body as JSON bytes.

        Returns:
            bytes: The JSON-encoded body.
        """
        content = self.body
        if isinstance(content, BaseModel):
            content = content.model_dump(mode="json")
        return orjson.dumps(content, option=orjson.OPT_SORT_KEYS)

    def send(self, writer: ResponseWriter) -> None:
        """Write the JSON response.

        The body is rendered before the status is committed, so a body that
        cannot be serialised fails without touching the writer.

        Args:
            writer: The request's response writer.
        """
        payload = self.render()
        writer.headers["content-type"] = self.media_type
        writer.write_header(self.status_code)
        writer.write(payload)

    def __repr__(self) -> str:
        return f"JSONResponse(status_code={self.status_code}, body={self.body!r})"


class TextResponse:
    """A status and a plain-text body.

    Args:
        body: Text body, encoded as UTF-8.
        status_code: HTTP status code (defaults to 200).
    """

    media_type = TEXT_CONTENT_TYPE

    def __init__(self, body: str, status_code: int = HTTP_200_OK) -> None:
        self.body = body
        self.status_code = status_code

    def send(self, writer: ResponseWriter) -> None:
        """Write the text response.

        Args:
            writer: The request's response writer.
        """
        writer.headers["content-type"] = self.media_type
        writer.write_header(self.status_code)
        writer.write(self.body.encode("utf-8"))

    def __repr__(self) -> str:
        return f"TextResponse(status_code={self.status_code}, body={self.body!r})"


def ok(body: Any) -> JSONResponse:  # noqa: ANN401 - accepts any JSON-serializable content
    """Return a 200 JSON response."""
    return JSONResponse(body)


def text(status_code: int, body: str) -> TextResponse:
    """Return a plain-text response."""
    return TextResponse(body, status_code)
