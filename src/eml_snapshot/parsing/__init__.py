# Email parsing module

from .eml_parser import (
    extract_addresses,
    extract_body,
    parse_email,
    parse_eml_bytes,
)
from .mime_utils import (
    decode_part_text,
    inline_parts,
    inline_text,
    is_attachment,
)

__all__ = [
    "parse_email",
    "parse_eml_bytes",
    "extract_addresses",
    "extract_body",
    "decode_part_text",
    "inline_parts",
    "inline_text",
    "is_attachment",
]
