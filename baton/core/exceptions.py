"""Exception hierarchy for the request pipeline.

Baton uses exceptions for exactly one piece of control flow: short-circuiting
the request pipeline. ``abort()`` raises an ``AbortError`` carrying an HTTP
status and an optional cause, and the nearest enclosing ``Context.next()``
frame turns it into a response. Every other exception escaping a handler or
middleware is treated as an unexpected fault and reported as a 500 through a
``PanicError``.

Key components:
- **AbortError / abort()**: the pipeline's non-local exit signal
- **PanicError**: an unexpected exception annotated with where it was raised
- **BindError**: failures of the field binder (parse and unsupported type)
"""

import traceback
from typing import Any, NoReturn


class BatonError(Exception):
    """Base exception class for all Baton exceptions.

    Args:
        message: Human-readable error message
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        """Return a detailed representation of the exception.

        Returns:
            str: A string showing the class name and message
        """
        return f"{self.__class__.__name__}(message='{self.message}')"


class AbortError(BaseException):
    """Signal that stops the pipeline with a status code.

    Raised by ``abort()``; never meant to be caught by application code. Like
    ``KeyboardInterrupt`` it derives from ``BaseException``, so a handler's
    ``except Exception`` does not swallow it. The pipeline records ``status``
    on the context and, when ``cause`` is set, renders it through the
    application's error renderer. Without a cause only the bare status is
    written.

    Args:
        status: HTTP status code to respond with
        cause: The error explaining the abort, if any
    """

    def __init__(self, status: int, cause: BaseException | None = None) -> None:
        self.status = status
        self.cause = cause
        message = f"aborted with status {status}"
        if cause is not None:
            message = f"{message}: {cause}"
        self.message = message
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        """Return a detailed representation of the abort signal.

        Returns:
            str: A string showing the status and cause
        """
        return f"AbortError(status={self.status}, cause={self.cause!r})"


class PanicError(BatonError):
    """An unexpected exception caught at the pipeline boundary.

    The message combines the original exception with a short ``file:line``
    hint pointing at the innermost frame of its traceback.

    Args:
        error: The exception that escaped a handler or middleware
        location: Source location hint; derived from the traceback if omitted
    """

    def __init__(self, error: BaseException, location: str | None = None) -> None:
        self.error = error
        self.location = location if location is not None else error_location(error)
        message = str(error) or type(error).__name__
        if self.location:
            message = f"{message} ({self.location})"
        super().__init__(message)
        self.__cause__ = error


class BindError(BatonError):
    """Base class for failures converting a raw string into a field value.

    Args:
        field: Name of the field being bound
        message: Description of the failure
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)


class ParseError(BindError):
    """Raised when a raw value cannot be parsed into the field's type.

    This is a client input problem.

    Args:
        field: Name of the field being bound
        raw: The raw string that failed to parse
        kind: The scalar kind the value was parsed as
    """

    def __init__(self, field: str, raw: str, kind: str) -> None:
        self.raw = raw
        self.kind = kind
        super().__init__(field, f"{field}: invalid {kind} value {raw!r}")


class UnsupportedTypeError(BindError):
    """Raised when a field's declared type cannot be bound from a string.

    This is a programming error in the record definition, not bad input.

    Args:
        field: Name of the field being bound
        annotation: The field's declared type
    """

    def __init__(self, field: str, annotation: Any) -> None:  # noqa: ANN401 - any type annotation
        self.annotation = annotation
        type_name = getattr(annotation, "__name__", repr(annotation))
        super().__init__(field, f"{field}: unsupported field type {type_name}")


def abort(status: int, cause: BaseException | None = None) -> NoReturn:
    """Stop the request pipeline with ``status``.

    May be called from any depth below a handler or middleware; control
    returns to the nearest enclosing ``Context.next()``.

    Args:
        status: HTTP status code to respond with
        cause: Optional error rendered through the error renderer

    Raises:
        AbortError: Always.
    """
    raise AbortError(status, cause)


def error_location(error: BaseException) -> str:
    """Return ``file:line`` of the innermost frame of an exception's traceback.

    Args:
        error: An exception that has been raised

    Returns:
        str: The location, or an empty string when there is no traceback
    """
    frames = traceback.extract_tb(error.__traceback__)
    if not frames:
        return ""
    frame = frames[-1]
    return f"{frame.filename}:{frame.lineno}"
