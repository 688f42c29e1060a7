"""Contract assertions for API responses.

Every function is pure: it returns None when the check passes and raises
ValidationFailedError with expected/actual detail when it fails.

Usage:
    from apiharness.validation import ResponseValidator

    ResponseValidator.validate_status_code(response, 200)
    ResponseValidator.validate_user(response.data)
"""

from collections.abc import Callable
from typing import Any

import httpx
import structlog
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from apiharness.core.exceptions import ValidationFailedError
from apiharness.data.models import Comment, Post, Todo, User

log = structlog.get_logger(__name__)


def _status_of(response: Any) -> int:
    # ApiResponse exposes .status, raw httpx responses .status_code
    if isinstance(response, httpx.Response):
        return response.status_code
    return response.status


def _format_pydantic_errors(error: PydanticValidationError) -> list[str]:
    failures = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        failures.append(f"{location}: {item['msg']}")
    return failures


def parse_as(data: Any, model: Any) -> Any:
    """Validate data against a type and return the parsed value.

    Args:
        data: Decoded JSON value.
        model: Any type pydantic can validate (a model, list[Model], dict, ...).

    Raises:
        ValidationFailedError: Listing every field error.
    """
    try:
        return TypeAdapter(model).validate_python(data)
    except PydanticValidationError as e:
        name = getattr(model, "__name__", str(model))
        raise ValidationFailedError(
            f"Body does not match {name}",
            failures=_format_pydantic_errors(e),
        ) from e


def validate_status_code(response: Any, expected: int) -> None:
    """Require an exact status code."""
    actual = _status_of(response)
    if actual != expected:
        raise ValidationFailedError("Unexpected status code", expected=expected, actual=actual)


def validate_content_type(response: Any, expected_mime: str) -> None:
    """Require the content-type header to start with expected_mime.

    Parameters such as "; charset=utf-8" are ignored.
    """
    actual = response.headers.get("content-type")
    if actual is None or not actual.lower().startswith(expected_mime.lower()):
        raise ValidationFailedError("Unexpected content type", expected=expected_mime, actual=actual)


def validate_response_time(response: Any, max_ms: float) -> None:
    """Require the exchange to have completed within max_ms milliseconds."""
    if response.elapsed_ms > max_ms:
        raise ValidationFailedError(
            "Response too slow",
            expected=f"<= {max_ms} ms",
            actual=f"{response.elapsed_ms:.1f} ms",
        )


def validate_schema(data: Any, model: Any) -> None:
    """Require data to match a pydantic model or type."""
    parse_as(data, model)


def validate_user(data: Any) -> None:
    """Require a user object (id: int, name: str; optional username/email/phone)."""
    validate_schema(data, User)


def validate_post(data: Any) -> None:
    """Require a post object."""
    validate_schema(data, Post)


def validate_comment(data: Any) -> None:
    validate_schema(data, Comment)


def validate_todo(data: Any) -> None:
    validate_schema(data, Todo)


def validate_array_response(
    data: Any,
    min_items: int = 0,
    max_items: int | None = None,
    item_validator: Callable[[Any], None] | None = None,
) -> None:
    """Require a list whose length is within [min_items, max_items].

    Every element is checked with item_validator and all element failures
    are reported together.

    Args:
        data: Decoded response body.
        min_items: Inclusive lower bound.
        max_items: Inclusive upper bound, None for unbounded.
        item_validator: Callable raising ValidationFailedError (or
            AssertionError) for an invalid element. KeyError, TypeError and
            ValueError raised on a malformed element are reported as that
            element's failure; other exceptions propagate.
    """
    if not isinstance(data, list | tuple):
        raise ValidationFailedError(
            "Expected an array", expected="list", actual=type(data).__name__
        )

    length = len(data)
    upper = "inf" if max_items is None else max_items
    if length < min_items or (max_items is not None and length > max_items):
        raise ValidationFailedError(
            "Array length out of bounds",
            expected=f"[{min_items}, {upper}]",
            actual=length,
        )

    if item_validator is None:
        return

    failures = []
    for index, item in enumerate(data):
        try:
            item_validator(item)
        except AssertionError as e:
            # ValidationFailedError is an AssertionError too
            detail = str(e).replace("\n", " ") or type(e).__name__
            failures.append(f"[{index}] {detail}")
        except (KeyError, TypeError, ValueError) as e:
            # A validator tripping over a malformed element, e.g. item["id"] on {}
            detail = f"{type(e).__name__}: {e}".replace("\n", " ")
            failures.append(f"[{index}] {detail}")

    if failures:
        log.debug("array_validation_failed", failed=len(failures), total=length)
        raise ValidationFailedError(
            f"{len(failures)} of {length} items failed validation",
            failures=failures,
        )


class ResponseValidator:
    """Namespace grouping the validation functions.

    Domain-specific validators compose these functions rather than
    subclassing this class.
    """

    validate_status_code = staticmethod(validate_status_code)
    validate_content_type = staticmethod(validate_content_type)
    validate_response_time = staticmethod(validate_response_time)
    validate_schema = staticmethod(validate_schema)
    validate_user = staticmethod(validate_user)
    validate_post = staticmethod(validate_post)
    validate_comment = staticmethod(validate_comment)
    validate_todo = staticmethod(validate_todo)
    validate_array_response = staticmethod(validate_array_response)
