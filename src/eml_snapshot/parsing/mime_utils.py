"""
MIME helpers for locating and decoding renderable body parts.
"""

from email.message import Message
from typing import Iterator

import charset_normalizer
import structlog

logger = structlog.get_logger(__name__)


def is_attachment(part: Message) -> bool:
    """True for parts sent with ``Content-Disposition: attachment``."""
    return part.get_content_disposition() == "attachment"


def inline_parts(msg: Message, content_type: str) -> Iterator[Message]:
    """
    Yield the non-attachment parts of a message with the given MIME type.

    A single-part message is its own only part. Attachment subtrees and
    embedded ``message/*`` parts (forwarded emails) are not entered, so only
    the outer message's own body parts are yielded, in document order. Inside
    multipart/alternative only the last (preferred) alternative that holds a
    matching part is used.
    """
    if not msg.is_multipart():
        if msg.get_content_type() == content_type and not is_attachment(msg):
            yield msg
        return

    children = [
        part
        for part in msg.get_payload()
        if part.get_content_maintype() != "message" and not is_attachment(part)
    ]
    if msg.get_content_subtype() == "alternative":
        for part in reversed(children):
            matches = list(inline_parts(part, content_type))
            if matches:
                yield from matches
                return
        return

    for part in children:
        yield from inline_parts(part, content_type)


def inline_text(msg: Message, content_type: str) -> str:
    """
    Decoded text of every inline part of a type, joined with newlines.

    Some clients (Apple Mail) split the HTML body into several parts around
    inline images; all of them belong to the body.
    """
    texts = [decode_part_text(part) for part in inline_parts(msg, content_type)]
    return "\n".join(text for text in texts if text.strip())


def decode_part_text(part: Message) -> str:
    """
    Decode a leaf part's transfer-encoded payload to text.

    Order of attempts:
    1. The charset declared in Content-Type
    2. charset-normalizer detection, when the declared charset is missing,
       unknown to Python, or does not fit the bytes
    3. UTF-8 with replacement characters

    Returns:
        Decoded text ("" when the part has no payload)
    """
    payload = part.get_payload(decode=True)
    if not payload:
        return ""

    declared = part.get_content_charset()
    if declared:
        try:
            return payload.decode(declared)
        except (UnicodeDecodeError, LookupError):
            logger.debug("Declared charset rejected", charset=declared)

    best = charset_normalizer.from_bytes(payload).best()
    if best is not None:
        logger.debug("Charset detected", declared=declared, detected=best.encoding)
        return str(best)

    return payload.decode("utf-8", errors="replace")
