"""Response validation helpers."""

from apiharness.validation.response_validator import (
    ResponseValidator,
    validate_array_response,
    validate_content_type,
    validate_schema,
    validate_status_code,
    validate_user,
)

__all__ = [
    "ResponseValidator",
    "validate_array_response",
    "validate_content_type",
    "validate_schema",
    "validate_status_code",
    "validate_user",
]
