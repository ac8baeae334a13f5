# Response metadata sanitization

from .header_values import (
    MAX_HEADER_VALUE_LENGTH,
    TRUNCATION_MARKER,
    build_sanitized_metadata,
    sanitize_header_value,
)

__all__ = [
    "sanitize_header_value",
    "build_sanitized_metadata",
    "MAX_HEADER_VALUE_LENGTH",
    "TRUNCATION_MARKER",
]
