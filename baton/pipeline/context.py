"""Per-request execution context and the pipeline executor.

A ``Context`` is created for every request that matches a route. It carries
the request, the response writer, the middleware snapshot captured when the
route was registered, and a small locked key/value store that middleware use
to hand data to each other and to the handler.

``Context.next()`` drives the pipeline. Each call either runs the next
middleware or, once the middleware are exhausted, the route handler, and each
call is a recovery boundary: an ``AbortError`` or any other exception raised
below it is turned into exactly one response, after which the context is
marked aborted and further ``next()`` calls do nothing.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from loguru import logger

from baton.core.constants import HTTP_500_INTERNAL_SERVER_ERROR
from baton.core.exceptions import AbortError, PanicError
from baton.pipeline.responses import Response, ResponseWriter

if TYPE_CHECKING:
    from starlette.requests import Request

    from baton.api.app import App
    from baton.core.types import Handler, Middleware


class ReadWriteLock:
    """A lock that admits many readers or a single writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        """Hold the lock for reading."""
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        """Hold the lock exclusively."""
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class Context:
    """State for one request travelling through the pipeline.

    Args:
        request: The incoming Starlette request.
        handler: The route's terminal handler.
        middlewares: Middleware snapshot taken when the route was registered.
        app: The application supplying the validator and error renderer.
        body: The request body, read before the pipeline starts.
    """

    def __init__(
        self,
        request: Request,
        handler: Handler,
        middlewares: Sequence[Middleware],
        app: App,
        body: bytes = b"",
    ) -> None:
        self.request = request
        self.handler = handler
        self.middlewares = tuple(middlewares)
        self.app = app
        self.body = body
        self.status = 0
        self.cursor = 0
        self.aborted = False
        self.writer = ResponseWriter(self)
        self._store: dict[str, Any] = {}
        self._lock = ReadWriteLock()

    def set(self, key: str, value: Any) -> None:  # noqa: ANN401 - the store holds arbitrary values
        """Store ``value`` under ``key`` for later middleware or the handler."""
        with self._lock.write():
            self._store[key] = value

    def get(self, key: str, default: Any = None) -> Any:  # noqa: ANN401 - the store holds arbitrary values
        """Return the value stored under ``key``, or ``default``."""
        with self._lock.read():
            return self._store.get(key, default)

    def next(self) -> None:
        """Run the next middleware, or the handler once middleware run out.

        Does nothing if the context has already been aborted.
        """
        if self.aborted:
            return
        try:
            if self.cursor == len(self.middlewares):
                self._send(self.handler(self))
                return
            cursor = self.cursor
            self.cursor += 1
            self.middlewares[cursor](self)
        except AbortError as exc:
            self.aborted = True
            self._recover_abort(exc)
        except Exception as exc:  # noqa: BLE001 - every fault below a frame is reported as a 500
            self.aborted = True
            self._recover_panic(exc)

    def _send(self, response: Response) -> None:
        if not isinstance(response, Response):
            msg = f"handler returned {type(response).__name__}, expected a Response"
            raise TypeError(msg)
        response.send(self.writer)

    def _recover_abort(self, exc: AbortError) -> None:
        if self.writer.committed:
            logger.warning(
                "Abort with status {} after status {} was committed",
                exc.status,
                self.writer.status,
            )
            return
        self.status = exc.status
        if exc.cause is None:
            self.writer.write_header(exc.status)
            return
        self._send(self.app.error_renderer(self, exc.cause))

    def _recover_panic(self, exc: Exception) -> None:
        panic = PanicError(exc)
        if self.writer.committed:
            logger.opt(exception=exc).error(
                "Unhandled error after status {} was committed: {}",
                self.writer.status,
                panic,
            )
            return
        self.status = HTTP_500_INTERNAL_SERVER_ERROR
        self._send(self.app.error_renderer(self, panic))
