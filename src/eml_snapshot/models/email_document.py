"""
Parsed email model - structured representation of one decoded message.

This module defines the data structures produced by the parser and consumed by
the document synthesizer and the metadata sanitizer.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

_SPECIALS = set('()<>@,;:\\".[]')

UNKNOWN_SENDER = "Unknown Sender"
UNKNOWN_RECIPIENT = "Unknown Recipient"
NO_SUBJECT = "No Subject"
UNKNOWN_MESSAGE_ID = "Unknown"


class EmailAddress(BaseModel):
    """A single mailbox: optional display name plus address."""

    display_name: str = Field(default="", description="Decoded display name")
    address: str = Field(default="", description="addr-spec, e.g. user@example.com")

    model_config = {"frozen": True}

    @property
    def text(self) -> str:
        """Display form, e.g. ``Jane Doe <jane@example.com>``."""
        if self.display_name and self.address:
            name = self.display_name
            if _SPECIALS.intersection(name):
                name = '"' + name.replace("\\", "\\\\").replace('"', '\\"') + '"'
            return f"{name} <{self.address}>"
        return self.display_name or self.address


class ParsedEmail(BaseModel):
    """
    Immutable result of parsing one RFC822 message.

    Header fields hold the raw (decoded) values and are None when the header
    is absent; the ``*_display`` properties substitute the standard
    placeholders. At least one of ``html_body`` / ``text_body`` is always set.
    """

    message_id: Optional[str] = Field(None, description="Message-ID header")
    sender: Optional[EmailAddress] = Field(None, description="From header")
    recipients: List[EmailAddress] = Field(
        default_factory=list, description="To header, one entry per mailbox"
    )
    subject: Optional[str] = Field(None, description="Decoded Subject header")
    html_body: Optional[str] = Field(None, description="Inline text/html parts of the message itself")
    text_body: Optional[str] = Field(None, description="Inline text/plain parts of the message itself")
    raw_size_bytes: int = Field(default=0, description="Size of the raw message")

    model_config = {"frozen": True}

    @property
    def sender_text(self) -> Optional[str]:
        return self.sender.text if self.sender else None

    @property
    def recipients_text(self) -> Optional[str]:
        if not self.recipients:
            return None
        return ", ".join(r.text for r in self.recipients)

    @property
    def sender_display(self) -> str:
        return self.sender_text or UNKNOWN_SENDER

    @property
    def recipients_display(self) -> str:
        return self.recipients_text or UNKNOWN_RECIPIENT

    @property
    def subject_display(self) -> str:
        return self.subject or NO_SUBJECT

    @property
    def message_id_display(self) -> str:
        return self.message_id or UNKNOWN_MESSAGE_ID
