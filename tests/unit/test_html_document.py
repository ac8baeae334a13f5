"""
Unit tests for HTML document synthesis (html_document.py).

Tests cover:
- Header block contents and defaults
- HTML escaping of hostile header values
- HTML body embedding and plain-text wrapping
- Determinism and self-containment
"""

import pytest

from eml_snapshot.models.email_document import EmailAddress, ParsedEmail
from eml_snapshot.parsing import parse_email
from eml_snapshot.rendering.html_document import build_email_html, escape_html
from tests.fixtures.emails import SAMPLE_EMAILS


class TestEscapeHtml:

    @pytest.mark.unit
    def test_escapes_all_markup_characters(self):
        """All five markup characters are escaped."""
        assert escape_html("&<>\"'") == "&amp;&lt;&gt;&quot;&#x27;"


class TestBuildEmailHtml:
    """Tests for build_email_html() function."""

    @pytest.mark.unit
    def test_header_block(self):
        """The header block shows From, To and Subject."""
        parsed = parse_email(SAMPLE_EMAILS["display_names"])
        document = build_email_html(parsed)

        assert "<strong>Message ID:</strong> &lt;report-q1@example.com&gt;" in document
        assert "<strong>From:</strong> Jane Doe &lt;jane.doe@example.com&gt;" in document
        assert "John Smith &lt;john@example.com&gt;, ops@example.com" in document
        assert "<strong>Subject:</strong> Quarterly report" in document

    @pytest.mark.unit
    def test_defaults_for_missing_headers(self):
        """Missing headers show their placeholders."""
        document = build_email_html(parse_email(SAMPLE_EMAILS["missing_headers"]))

        assert "<strong>From:</strong> Unknown Sender" in document
        assert "<strong>To:</strong> Unknown Recipient" in document
        assert "<strong>Subject:</strong> No Subject" in document
        assert "<strong>Message ID:</strong> Unknown" in document

    @pytest.mark.unit
    def test_hostile_subject_is_escaped(self):
        """Markup in the subject is escaped."""
        document = build_email_html(parse_email(SAMPLE_EMAILS["hostile_headers"]))

        assert "<script>" not in document
        assert "&lt;script&gt;alert(&quot;pwned&quot;)&lt;/script&gt; &amp; &#x27;quotes&#x27;" in document

    @pytest.mark.unit
    def test_hostile_sender_is_escaped(self):
        """Markup in the sender is escaped."""
        document = build_email_html(parse_email(SAMPLE_EMAILS["hostile_headers"]))

        assert "<img src=x" not in document
        assert "&lt;img src=x onerror=alert(1)&gt;" in document

    @pytest.mark.unit
    def test_html_body_embedded_verbatim(self, html_only_eml):
        """An HTML body is embedded as is."""
        document = build_email_html(parse_email(html_only_eml))

        assert "<h1>Your invoice is ready</h1>" in document
        assert "<pre" not in document

    @pytest.mark.unit
    def test_html_body_preferred_over_text(self, multipart_html_eml):
        """The HTML body wins over the text body."""
        document = build_email_html(parse_email(multipart_html_eml))

        assert "<h1>Release notes</h1>" in document
        assert "plain-text fallback" not in document

    @pytest.mark.unit
    def test_text_body_wrapped_and_escaped(self):
        """A text body is escaped inside a pre block."""
        document = build_email_html(parse_email(SAMPLE_EMAILS["hostile_headers"]))

        assert '<pre class="plain-text">' in document
        assert "&lt;b&gt;markup&lt;/b&gt;" in document
        assert "<b>markup</b>" not in document

    @pytest.mark.unit
    def test_text_body_preserves_whitespace(self):
        """Whitespace in a text body is kept."""
        document = build_email_html(parse_email(SAMPLE_EMAILS["excessive_whitespace"]))

        assert "Item      Qty    Price" in document
        assert "white-space: pre-wrap" in document
        assert "overflow-wrap: break-word" in document

    @pytest.mark.unit
    def test_self_contained(self, sample_eml_bytes):
        """The document references no external resources."""
        document = build_email_html(parse_email(sample_eml_bytes))

        assert document.startswith("<!DOCTYPE html>")
        assert '<meta charset="utf-8">' in document
        assert "<link" not in document
        assert "<script" not in document

    @pytest.mark.unit
    def test_deterministic(self):
        """The same email always gives the same document."""
        parsed = ParsedEmail(
            message_id="<id@example.com>",
            sender=EmailAddress(address="a@example.com"),
            subject="Same",
            text_body="Same body",
        )
        assert build_email_html(parsed) == build_email_html(parsed.model_copy())

    @pytest.mark.unit
    def test_braces_in_body_survive(self):
        """Braces in the body are not treated as placeholders."""
        parsed = ParsedEmail(html_body="<p>{not_a_placeholder} {0}</p>")
        assert "<p>{not_a_placeholder} {0}</p>" in build_email_html(parsed)
