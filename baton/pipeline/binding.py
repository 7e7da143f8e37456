"""Declarative binding of request data into typed records.

Query strings and path variables are always strings, so they are bound field
by field: every field of a dataclass is matched to a key (the ``query`` or
``path`` entry of the field's metadata, else the field name), the raw string
is looked up and coerced to the field's declared scalar type. A JSON body
already carries typed values, so ``bind_body`` hands it to pydantic in one
pass instead.

Example::

    @dataclass
    class Page:
        number: int = field(metadata={"query": "page"})
        size: NonNegativeInt = field(metadata={"query": "per_page"})

    page = bind_query(ctx, Page)

Every binder finishes by running the application's validator on the record.
Failures never return to the caller; they abort the pipeline:

- 400 for values that cannot be parsed or a body of the wrong shape
- 422 when the validator raises ``ValueError``
- 500 for record definitions that cannot be bound (unexported or
  non-init fields, unsupported field types, non-dataclass targets)
"""

from __future__ import annotations

import dataclasses
import re
import typing
from collections.abc import Mapping
from enum import Enum
from functools import lru_cache
from typing import TYPE_CHECKING, Annotated, Any, NamedTuple

from annotated_types import Ge
from pydantic import PydanticUserError, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from baton.core.constants import (
    HTTP_400_BAD_REQUEST,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
)
from baton.core.exceptions import ParseError, UnsupportedTypeError, abort

if TYPE_CHECKING:
    from baton.pipeline.context import Context

QUERY_TAG = "query"
PATH_TAG = "path"

_SIGNED_INTEGER = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_INTEGER = re.compile(r"[0-9]+")

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
UINT64_MAX = 2**64 - 1


class ScalarKind(Enum):
    """Field kinds that can be bound from a string."""

    STRING = "string"
    INTEGER = "integer"
    UNSIGNED_INTEGER = "unsigned integer"
    FLOAT = "float"


_INTEGER_FORMATS: dict[ScalarKind, tuple[re.Pattern[str], int, int]] = {
    ScalarKind.INTEGER: (_SIGNED_INTEGER, INT64_MIN, INT64_MAX),
    ScalarKind.UNSIGNED_INTEGER: (_UNSIGNED_INTEGER, 0, UINT64_MAX),
}


class _FieldPlan(NamedTuple):
    name: str
    key: str
    annotation: Any
    kind: ScalarKind


def scalar_kind(name: str, annotation: Any) -> ScalarKind:  # noqa: ANN401 - any type annotation
    """Classify a field annotation.

    ``int`` annotated with ``Ge(0)`` (pydantic's ``NonNegativeInt``) is an
    unsigned integer. ``bool`` is not an integer here.

    Args:
        name: Field name, used in the error.
        annotation: The field's declared type.

    Returns:
        ScalarKind: The field's kind.

    Raises:
        UnsupportedTypeError: If the type is not a supported scalar.
    """
    base, metadata = annotation, ()
    if typing.get_origin(annotation) is Annotated:
        base, *rest = typing.get_args(annotation)
        metadata = tuple(rest)

    if base is str:
        return ScalarKind.STRING
    if base is int:
        if any(isinstance(m, Ge) and m.ge == 0 for m in metadata):
            return ScalarKind.UNSIGNED_INTEGER
        return ScalarKind.INTEGER
    if base is float:
        return ScalarKind.FLOAT
    raise UnsupportedTypeError(name, annotation)


def parse_scalar(name: str, kind: ScalarKind, raw: str) -> str | int | float:
    """Parse ``raw`` as a value of ``kind``.

    Integers are parsed in base 10 with no surrounding whitespace or digit
    separators and must fit in 64 bits; unsigned integers take no sign at all.

    Args:
        name: Field name, used in the error.
        kind: Kind to parse as.
        raw: The raw string.

    Returns:
        str | int | float: The parsed value.

    Raises:
        ParseError: If ``raw`` is not a valid value of ``kind``.
    """
    if kind is ScalarKind.STRING:
        return raw
    if kind in _INTEGER_FORMATS:
        pattern, low, high = _INTEGER_FORMATS[kind]
        if not pattern.fullmatch(raw):
            raise ParseError(name, raw, kind.value)
        try:
            value = int(raw)
        except ValueError as e:  # longer than the interpreter's digit limit
            raise ParseError(name, raw, kind.value) from e
        if not low <= value <= high:
            raise ParseError(name, raw, kind.value)
        return value
    if raw != raw.strip() or "_" in raw:
        raise ParseError(name, raw, kind.value)
    try:
        return float(raw)
    except ValueError as e:
        raise ParseError(name, raw, kind.value) from e


def bind_field(name: str, annotation: Any, raw: str) -> str | int | float:  # noqa: ANN401 - any type annotation
    """Convert one raw string into a value of the field's declared type.

    Raises:
        UnsupportedTypeError: If the annotation is not a supported scalar.
        ParseError: If ``raw`` does not parse.
    """
    return parse_scalar(name, scalar_kind(name, annotation), raw)


@lru_cache(maxsize=256)
def _field_plan(record_type: type, tag: str) -> tuple[_FieldPlan, ...]:
    """Work out how each field of ``record_type`` is bound from ``tag`` data.

    Raises:
        TypeError: If the record cannot be built from string data.
        UnsupportedTypeError: If a field has an unsupported type.
    """
    if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
        msg = f"{tag} record {record_type!r} must be a dataclass"
        raise TypeError(msg)

    fields = dataclasses.fields(record_type)
    for f in fields:
        if f.name.startswith("_"):
            msg = f"{tag} record can not contain unexported field {f.name!r}"
            raise TypeError(msg)
        if not f.init:
            msg = f"{tag} record can not contain non-init field {f.name!r}"
            raise TypeError(msg)

    try:
        hints = typing.get_type_hints(record_type, include_extras=True)
    except NameError as e:
        msg = f"cannot resolve field types of {record_type.__name__}: {e}"
        raise TypeError(msg) from e

    return tuple(
        _FieldPlan(
            name=f.name,
            key=f.metadata.get(tag) or f.name,
            annotation=hints[f.name],
            kind=scalar_kind(f.name, hints[f.name]),
        )
        for f in fields
    )


def _bind_strings[T](
    ctx: Context, record_type: type[T], source: Mapping[str, str], tag: str
) -> T:
    try:
        plan = _field_plan(record_type, tag)
    except (TypeError, UnsupportedTypeError) as e:
        abort(HTTP_500_INTERNAL_SERVER_ERROR, e)

    values: dict[str, Any] = {}
    for field in plan:
        raw = source.get(field.key, "")
        try:
            values[field.name] = parse_scalar(field.name, field.kind, raw)
        except ParseError as e:
            abort(HTTP_400_BAD_REQUEST, e)

    record = record_type(**values)
    _validate(ctx, record)
    return record


def _validate(ctx: Context, value: object) -> None:
    try:
        ctx.app.validator(value)
    except ValueError as e:
        abort(HTTP_422_UNPROCESSABLE_ENTITY, e)


def bind_query[T](ctx: Context, record_type: type[T]) -> T:
    """Build a ``record_type`` from the request's query string.

    A key given more than once binds its first value.

    Args:
        ctx: The request context.
        record_type: A dataclass whose fields are bound by ``query`` key.

    Returns:
        T: The populated, validated record.
    """
    first_values: dict[str, str] = {}
    for key, value in ctx.request.query_params.multi_items():
        first_values.setdefault(key, value)
    return _bind_strings(ctx, record_type, first_values, QUERY_TAG)


def bind_path[T](ctx: Context, record_type: type[T]) -> T:
    """Build a ``record_type`` from the path variables captured by the router.

    Args:
        ctx: The request context.
        record_type: A dataclass whose fields are bound by ``path`` key.

    Returns:
        T: The populated, validated record.
    """
    path_params = {k: str(v) for k, v in ctx.request.path_params.items()}
    return _bind_strings(ctx, record_type, path_params, PATH_TAG)


@lru_cache(maxsize=256)
def _adapter(record_type: Any) -> TypeAdapter[Any]:  # noqa: ANN401 - any record type
    return TypeAdapter(record_type)


def bind_body[T](ctx: Context, record_type: type[T]) -> T:
    """Decode the JSON request body into ``record_type``.

    Decoding is delegated to pydantic, so any type it can validate (a
    dataclass, a model, a ``TypedDict``) can be used and its field names and
    aliases are honoured as pydantic defines them. Validation is strict: a
    JSON string is never converted into a number or a boolean.

    Args:
        ctx: The request context.
        record_type: The type to decode into.

    Returns:
        T: The decoded, validated value.
    """
    try:
        adapter = _adapter(record_type)
    except PydanticUserError as e:
        abort(HTTP_500_INTERNAL_SERVER_ERROR, e)

    try:
        value = adapter.validate_json(ctx.body, strict=True)
    except PydanticValidationError as e:
        abort(HTTP_400_BAD_REQUEST, e)

    _validate(ctx, value)
    return value
