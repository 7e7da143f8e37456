"""Unit tests for baton/pipeline/binding.py."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Annotated

import pytest
from annotated_types import Ge
from pydantic import NonNegativeInt

from baton.api.app import App
from baton.core.exceptions import AbortError, ParseError, UnsupportedTypeError
from baton.pipeline.binding import (
    ScalarKind,
    bind_body,
    bind_field,
    bind_path,
    bind_query,
    parse_scalar,
    scalar_kind,
)
from baton.pipeline.context import Context

type ContextFactory = Callable[..., Context]


@dataclass
class SearchQuery:
    term: str = field(metadata={"query": "q"})
    page: int = field(metadata={"query": "page"})
    limit: NonNegativeInt = field(metadata={"query": "limit"})
    ratio: float = field(metadata={"query": "ratio"})


@dataclass
class UntaggedQuery:
    name: str


@dataclass
class HiddenFieldQuery:
    _secret: str = field(default="", metadata={"query": "secret"})


@dataclass
class NonInitQuery:
    name: str = field(default="", init=False)


@dataclass
class UnsupportedQuery:
    flag: bool = field(metadata={"query": "flag"})


@dataclass
class UserPath:
    user_id: int = field(metadata={"path": "id"})
    slug: str = field(metadata={"path": "slug"})


@dataclass
class NewUser:
    name: str
    age: int


@dataclass
class Product:
    price: float
    count: int


class PlainRecord:
    name: str


def _capture_abort(func: Callable[[], object]) -> AbortError:
    with pytest.raises(AbortError) as exc_info:
        func()
    return exc_info.value


@pytest.mark.unit
class TestScalarKind:
    """Test classification of field annotations."""

    @pytest.mark.parametrize(
        ("annotation", "expected"),
        [
            (str, ScalarKind.STRING),
            (int, ScalarKind.INTEGER),
            (float, ScalarKind.FLOAT),
            (NonNegativeInt, ScalarKind.UNSIGNED_INTEGER),
            (Annotated[int, Ge(0)], ScalarKind.UNSIGNED_INTEGER),
            (Annotated[int, Ge(1)], ScalarKind.INTEGER),
            (Annotated[str, "doc"], ScalarKind.STRING),
        ],
    )
    def test_supported_kinds(self, annotation: object, expected: ScalarKind) -> None:
        """Test that supported annotations map to their kind."""
        assert scalar_kind("field", annotation) is expected

    @pytest.mark.parametrize("annotation", [bool, bytes, list[int], dict, int | None])
    def test_unsupported_kinds(self, annotation: object) -> None:
        """Test that other annotations are rejected."""
        with pytest.raises(UnsupportedTypeError) as exc_info:
            scalar_kind("field", annotation)

        assert exc_info.value.field == "field"
        assert "unsupported field type" in str(exc_info.value)


@pytest.mark.unit
class TestParseScalar:
    """Test parsing raw strings into scalar values."""

    @pytest.mark.parametrize(
        ("kind", "raw", "expected"),
        [
            (ScalarKind.STRING, "", ""),
            (ScalarKind.STRING, " hello ", " hello "),
            (ScalarKind.INTEGER, "42", 42),
            (ScalarKind.INTEGER, "-7", -7),
            (ScalarKind.INTEGER, "+7", 7),
            (ScalarKind.INTEGER, "007", 7),
            (ScalarKind.INTEGER, "9223372036854775807", 2**63 - 1),
            (ScalarKind.INTEGER, "-9223372036854775808", -(2**63)),
            (ScalarKind.UNSIGNED_INTEGER, "18446744073709551615", 2**64 - 1),
            (ScalarKind.UNSIGNED_INTEGER, "0", 0),
            (ScalarKind.UNSIGNED_INTEGER, "18", 18),
            (ScalarKind.FLOAT, "1.5", 1.5),
            (ScalarKind.FLOAT, "-2e3", -2000.0),
            (ScalarKind.FLOAT, "3", 3.0),
        ],
    )
    def test_valid_values(
        self, kind: ScalarKind, raw: str, expected: str | int | float
    ) -> None:
        """Test that well-formed values parse."""
        assert parse_scalar("field", kind, raw) == expected

    @pytest.mark.parametrize(
        ("kind", "raw"),
        [
            (ScalarKind.INTEGER, ""),
            (ScalarKind.INTEGER, "abc"),
            (ScalarKind.INTEGER, "1.0"),
            (ScalarKind.INTEGER, " 1"),
            (ScalarKind.INTEGER, "1_000"),
            (ScalarKind.UNSIGNED_INTEGER, "-1"),
            (ScalarKind.UNSIGNED_INTEGER, "+1"),
            (ScalarKind.INTEGER, "9223372036854775808"),
            (ScalarKind.INTEGER, "-9223372036854775809"),
            (ScalarKind.UNSIGNED_INTEGER, "18446744073709551616"),
            pytest.param(ScalarKind.INTEGER, "9" * 5000, id="integer-too-many-digits"),
            (ScalarKind.FLOAT, ""),
            (ScalarKind.FLOAT, "pi"),
            (ScalarKind.FLOAT, " 1.5"),
            (ScalarKind.FLOAT, "1_0.5"),
        ],
    )
    def test_invalid_values(self, kind: ScalarKind, raw: str) -> None:
        """Test that malformed values raise ParseError."""
        with pytest.raises(ParseError) as exc_info:
            parse_scalar("field", kind, raw)

        assert exc_info.value.raw == raw
        assert exc_info.value.kind == kind.value

    def test_bind_field_combines_classification_and_parsing(self) -> None:
        """Test bind_field on a single annotation."""
        assert bind_field("age", int, "30") == 30
        with pytest.raises(UnsupportedTypeError):
            bind_field("flag", bool, "true")


@pytest.mark.unit
class TestBindQuery:
    """Test binding query strings."""

    def test_binds_tagged_fields(self, make_context: ContextFactory) -> None:
        """Test that tagged fields are read from their query keys."""
        ctx = make_context(query_string=b"q=books&page=-2&limit=10&ratio=0.25")

        query = bind_query(ctx, SearchQuery)

        assert query == SearchQuery(term="books", page=-2, limit=10, ratio=0.25)

    def test_untagged_field_uses_field_name(self, make_context: ContextFactory) -> None:
        """Test that a field without a tag is read by its own name."""
        ctx = make_context(query_string=b"name=alice")

        assert bind_query(ctx, UntaggedQuery).name == "alice"

    def test_missing_string_binds_empty(self, make_context: ContextFactory) -> None:
        """Test that a missing key binds the empty string."""
        ctx = make_context()

        assert bind_query(ctx, UntaggedQuery).name == ""

    def test_repeated_key_binds_first_value(
        self, make_context: ContextFactory
    ) -> None:
        """Test that only the first occurrence of a repeated key is used."""
        ctx = make_context(query_string=b"q=x&page=1&page=x&limit=2&limit=-1&ratio=1")

        query = bind_query(ctx, SearchQuery)

        assert query.page == 1
        assert query.limit == 2

    def test_integer_out_of_range_is_bad_request(
        self, make_context: ContextFactory
    ) -> None:
        """Test that integers beyond 64 bits abort with 400."""
        ctx = make_context(query_string=b"q=x&page=9223372036854775808&limit=1&ratio=1")

        error = _capture_abort(lambda: bind_query(ctx, SearchQuery))

        assert error.status == 400
        assert error.cause.field == "page"

    def test_missing_number_is_bad_request(self, make_context: ContextFactory) -> None:
        """Test that a missing numeric key fails to parse."""
        ctx = make_context(query_string=b"q=x&limit=1&ratio=1")

        error = _capture_abort(lambda: bind_query(ctx, SearchQuery))

        assert error.status == 400
        assert isinstance(error.cause, ParseError)
        assert error.cause.field == "page"

    def test_malformed_number_is_bad_request(
        self, make_context: ContextFactory
    ) -> None:
        """Test that a non-numeric value aborts with 400."""
        ctx = make_context(query_string=b"q=x&page=two&limit=1&ratio=1")

        error = _capture_abort(lambda: bind_query(ctx, SearchQuery))

        assert error.status == 400

    def test_negative_unsigned_is_bad_request(
        self, make_context: ContextFactory
    ) -> None:
        """Test that a sign on an unsigned field aborts with 400."""
        ctx = make_context(query_string=b"q=x&page=1&limit=-1&ratio=1")

        error = _capture_abort(lambda: bind_query(ctx, SearchQuery))

        assert error.status == 400
        assert error.cause.field == "limit"

    def test_unexported_field_is_server_error(
        self, make_context: ContextFactory
    ) -> None:
        """Test that an underscore field is a programming error, whatever the input."""
        ctx = make_context(query_string=b"secret=x")

        error = _capture_abort(lambda: bind_query(ctx, HiddenFieldQuery))

        assert error.status == 500
        assert "unexported field" in str(error.cause)

    def test_non_init_field_is_server_error(self, make_context: ContextFactory) -> None:
        """Test that a field excluded from __init__ cannot be bound."""
        ctx = make_context(query_string=b"name=x")

        error = _capture_abort(lambda: bind_query(ctx, NonInitQuery))

        assert error.status == 500

    def test_unsupported_type_is_server_error(
        self, make_context: ContextFactory
    ) -> None:
        """Test that an unsupported field type aborts with 500 before parsing."""
        ctx = make_context(query_string=b"flag=true")

        error = _capture_abort(lambda: bind_query(ctx, UnsupportedQuery))

        assert error.status == 500
        assert isinstance(error.cause, UnsupportedTypeError)

    def test_non_dataclass_is_server_error(self, make_context: ContextFactory) -> None:
        """Test that the target must be a dataclass."""
        ctx = make_context(query_string=b"name=x")

        error = _capture_abort(lambda: bind_query(ctx, PlainRecord))

        assert error.status == 500
        assert isinstance(error.cause, TypeError)

    def test_validator_rejection_is_unprocessable(
        self, app: App, make_context: ContextFactory
    ) -> None:
        """Test that a ValueError from the validator aborts with 422."""

        def validator(value: object) -> None:
            if isinstance(value, UntaggedQuery) and len(value.name) < 3:
                raise ValueError("name too short")

        app.validator = validator
        ctx = make_context(query_string=b"name=al")

        error = _capture_abort(lambda: bind_query(ctx, UntaggedQuery))

        assert error.status == 422
        assert str(error.cause) == "name too short"

    def test_validator_sees_bound_record(
        self, app: App, make_context: ContextFactory
    ) -> None:
        """Test that the validator receives the populated record."""
        seen: list[object] = []
        app.validator = seen.append
        ctx = make_context(query_string=b"name=alice")

        record = bind_query(ctx, UntaggedQuery)

        assert seen == [record]


@pytest.mark.unit
class TestBindPath:
    """Test binding path variables."""

    def test_binds_path_params(self, make_context: ContextFactory) -> None:
        """Test that path tags select router-captured variables."""
        ctx = make_context(path_params={"id": "12", "slug": "hello"})

        assert bind_path(ctx, UserPath) == UserPath(user_id=12, slug="hello")

    def test_converted_path_params_are_accepted(
        self, make_context: ContextFactory
    ) -> None:
        """Test that values already converted by the router still bind."""
        ctx = make_context(path_params={"id": 12, "slug": "hello"})

        assert bind_path(ctx, UserPath).user_id == 12

    def test_malformed_path_param_is_bad_request(
        self, make_context: ContextFactory
    ) -> None:
        """Test that a non-numeric path variable aborts with 400."""
        ctx = make_context(path_params={"id": "abc", "slug": "hello"})

        error = _capture_abort(lambda: bind_path(ctx, UserPath))

        assert error.status == 400

    def test_query_tags_are_ignored(self, make_context: ContextFactory) -> None:
        """Test that path binding reads path keys, not query keys."""
        ctx = make_context(path_params={"q": "from-path"}, query_string=b"q=from-query")

        error = _capture_abort(lambda: bind_path(ctx, SearchQuery))

        assert error.status == 400


@pytest.mark.unit
class TestBindBody:
    """Test binding JSON bodies."""

    def test_decodes_body(self, make_context: ContextFactory) -> None:
        """Test that a well-formed body decodes into the record."""
        ctx = make_context(method="POST", body=b'{"name": "alice", "age": 30}')

        assert bind_body(ctx, NewUser) == NewUser(name="alice", age=30)

    def test_wrong_type_is_bad_request(self, make_context: ContextFactory) -> None:
        """Test that a field of the wrong JSON type aborts with 400."""
        ctx = make_context(method="POST", body=b'{"name": 1, "age": 30}')

        error = _capture_abort(lambda: bind_body(ctx, NewUser))

        assert error.status == 400
        assert "Input should be a valid string" in str(error.cause)

    def test_string_for_number_is_bad_request(
        self, make_context: ContextFactory
    ) -> None:
        """Test that numeric strings are not converted into numbers."""
        ctx = make_context(method="POST", body=b'{"price": "5", "count": "7"}')

        error = _capture_abort(lambda: bind_body(ctx, Product))

        assert error.status == 400
        assert "Input should be a valid number" in str(error.cause)
        assert "Input should be a valid integer" in str(error.cause)

    def test_integer_for_float_is_accepted(self, make_context: ContextFactory) -> None:
        """Test that a JSON integer still binds into a float field."""
        ctx = make_context(method="POST", body=b'{"price": 5, "count": 7}')

        assert bind_body(ctx, Product) == Product(price=5.0, count=7)

    def test_malformed_json_is_bad_request(self, make_context: ContextFactory) -> None:
        """Test that invalid JSON aborts with 400."""
        ctx = make_context(method="POST", body=b"{not json")

        error = _capture_abort(lambda: bind_body(ctx, NewUser))

        assert error.status == 400

    def test_empty_body_is_bad_request(self, make_context: ContextFactory) -> None:
        """Test that an empty body aborts with 400."""
        ctx = make_context(method="POST")

        error = _capture_abort(lambda: bind_body(ctx, NewUser))

        assert error.status == 400

    def test_validator_rejection_is_unprocessable(
        self, app: App, make_context: ContextFactory
    ) -> None:
        """Test that the validator runs on decoded bodies."""

        def validator(value: object) -> None:
            if isinstance(value, NewUser) and value.age < 18:
                raise ValueError("too young")

        app.validator = validator
        ctx = make_context(method="POST", body=b'{"name": "bob", "age": 12}')

        error = _capture_abort(lambda: bind_body(ctx, NewUser))

        assert error.status == 422
