"""
Email parser for .eml files (RFC5322/MIME format).

This module handles parsing of email files using Python's standard library email module
and produces the immutable ParsedEmail model consumed by the renderer.
"""

from email import policy
from email.message import EmailMessage
from email.parser import BytesParser
from email.utils import getaddresses
from typing import List, Optional, Tuple

import structlog

from ..errors import EmptyContent, MalformedEmail
from ..models.email_document import EmailAddress, ParsedEmail
from .mime_utils import inline_text

logger = structlog.get_logger(__name__)


def parse_eml_bytes(eml_bytes: bytes) -> EmailMessage:
    """
    Parse .eml bytes into an EmailMessage object.

    The standard library parser is lenient and accepts almost any input, so a
    stream is only considered a mail message when at least one header field
    was recognized.

    Args:
        eml_bytes: Raw .eml file bytes

    Returns:
        Parsed EmailMessage object

    Raises:
        MalformedEmail: If bytes are not valid RFC5322 format
    """
    if not isinstance(eml_bytes, (bytes, bytearray)):
        raise MalformedEmail(f"Expected bytes, got {type(eml_bytes).__name__}")
    if not eml_bytes.strip():
        raise MalformedEmail("Email content is empty")

    try:
        msg = BytesParser(policy=policy.default).parsebytes(bytes(eml_bytes))
    except Exception as e:
        raise MalformedEmail(f"Failed to parse .eml file: {e}") from e

    if not msg.keys():
        raise MalformedEmail("Failed to parse .eml file: no header fields found")

    return msg


def _header_value(msg: EmailMessage, name: str):
    """
    Return the parsed header object, or the raw string when the structured
    parser chokes on it.
    """
    try:
        return msg.get(name)
    except Exception:
        for key, value in msg.raw_items():
            if key.lower() == name.lower():
                return value
        return None


def _header_text(msg: EmailMessage, name: str) -> Optional[str]:
    value = _header_value(msg, name)
    if value is None:
        return None
    text = " ".join(str(value).split())
    return text or None


def extract_addresses(msg: EmailMessage, name: str) -> List[EmailAddress]:
    """
    Extract all mailboxes from an address header (From, To, Cc).

    Args:
        msg: Parsed EmailMessage
        name: Header name

    Returns:
        List of EmailAddress (empty when the header is absent)
    """
    header = _header_value(msg, name)
    if header is None:
        return []

    structured = getattr(header, "addresses", None)
    if structured is not None:
        pairs = [(a.display_name, a.addr_spec) for a in structured]
    else:
        pairs = getaddresses([str(header)])

    addresses = []
    for display_name, address in pairs:
        if not display_name and not address:
            continue
        addresses.append(
            EmailAddress(display_name=display_name or "", address=address or "")
        )
    return addresses


def extract_body(msg: EmailMessage) -> Tuple[Optional[str], Optional[str]]:
    """
    Extract HTML and plain text body from email message.

    Attachments and forwarded (message/rfc822) emails are skipped; every
    inline part of a type is part of that body.

    Args:
        msg: Parsed EmailMessage

    Returns:
        Tuple of (html_body, text_body); an entry is None when no part of that
        type exists or it holds only whitespace.
    """
    bodies = []
    for content_type in ("text/html", "text/plain"):
        text = inline_text(msg, content_type)
        bodies.append(text if text.strip() else None)
    return bodies[0], bodies[1]


def parse_email(eml_bytes: bytes) -> ParsedEmail:
    """
    Decode a raw message into a ParsedEmail.

    Args:
        eml_bytes: Raw .eml bytes

    Returns:
        ParsedEmail with headers and at least one body

    Raises:
        MalformedEmail: If the stream is not a mail message
        EmptyContent: If neither an HTML nor a plain-text body is present
    """
    msg = parse_eml_bytes(eml_bytes)

    html_body, text_body = extract_body(msg)
    if html_body is None and text_body is None:
        raise EmptyContent("Email has neither an HTML nor a plain-text body")

    senders = extract_addresses(msg, "From")
    parsed = ParsedEmail(
        message_id=_header_text(msg, "Message-ID"),
        sender=senders[0] if senders else None,
        recipients=extract_addresses(msg, "To"),
        subject=_header_text(msg, "Subject"),
        html_body=html_body,
        text_body=text_body,
        raw_size_bytes=len(eml_bytes),
    )

    logger.debug(
        "Email parsed",
        message_id=parsed.message_id,
        has_html=html_body is not None,
        has_text=text_body is not None,
        recipients=len(parsed.recipients),
        size_bytes=parsed.raw_size_bytes,
    )
    return parsed
