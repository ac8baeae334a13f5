"""
Sanitization of header-derived values for transport as HTTP response headers.

Separate from HTML escaping: these values never reach the
rendered page, they travel in ``X-Email-*`` response headers, where line breaks
enable header injection and non-ASCII bytes are not portable.
"""

import re
from typing import Optional

from ..models.email_document import ParsedEmail
from ..models.render import SanitizedMetadata

MAX_HEADER_VALUE_LENGTH = 255
TRUNCATION_MARKER = "..."

# CR/LF plus C0 controls, DEL and C1 controls
_CONTROL_RUN = re.compile(r"[\r\n\x00-\x1f\x7f-\x9f]+")
_NON_PRINTABLE_ASCII = re.compile(r"[^\x20-\x7e]")


def sanitize_header_value(value: Optional[str]) -> str:
    """
    Make an arbitrary string safe to send as a response header value.

    Control character runs collapse to a single space, anything outside
    printable ASCII is dropped, and the result is capped at 255 characters
    plus a trailing "..." marker. Absent input yields "".

    The function is total and idempotent.
    """
    if not value:
        return ""

    value = _CONTROL_RUN.sub(" ", str(value)).strip()
    value = _NON_PRINTABLE_ASCII.sub("", value).strip()

    if len(value) > MAX_HEADER_VALUE_LENGTH:
        value = value[:MAX_HEADER_VALUE_LENGTH] + TRUNCATION_MARKER

    return value


def build_sanitized_metadata(parsed: ParsedEmail) -> SanitizedMetadata:
    """
    Derive response metadata from a parsed email.

    Subject and sender are sanitized as-is (absent headers give ""); the
    message id falls back to its "Unknown" placeholder.
    """
    return SanitizedMetadata(
        subject=sanitize_header_value(parsed.subject),
        sender=sanitize_header_value(parsed.sender_text),
        message_id=sanitize_header_value(parsed.message_id_display),
    )
