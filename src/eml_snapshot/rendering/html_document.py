"""
HTML document synthesis.

Builds the self-contained page the browser renders: a header block with the
message metadata followed by the message body.
"""

import html

from ..models.email_document import ParsedEmail

DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
body {{
    font-family: Arial, sans-serif;
    line-height: 1.5;
    margin: 20px;
}}
.header {{
    margin-bottom: 20px;
    padding: 10px;
    background-color: #f9f9f9;
    border: 1px solid #ddd;
    border-radius: 5px;
}}
.header div {{
    margin: 5px 0;
    word-wrap: break-word;
    overflow-wrap: break-word;
}}
.content {{
    padding-top: 20px;
    border-top: 1px solid #ddd;
    margin-top: 20px;
}}
.plain-text {{
    font-family: monospace;
    white-space: pre-wrap;
    word-wrap: break-word;
    overflow-wrap: break-word;
    margin: 0;
}}
</style>
</head>
<body>
<div class="header">
<div><strong>Message ID:</strong> {message_id}</div>
<div><strong>From:</strong> {sender}</div>
<div><strong>To:</strong> {recipients}</div>
<div><strong>Subject:</strong> {subject}</div>
</div>
<div class="content">
{body}
</div>
</body>
</html>
"""


def escape_html(value: str) -> str:
    """Escape &, <, >, " and ' for safe embedding in markup."""
    return html.escape(value, quote=True)


def render_body(parsed: ParsedEmail) -> str:
    """
    Markup for the message body.

    The HTML body is embedded verbatim; a plain-text body is escaped and
    wrapped so whitespace and line breaks survive and long lines wrap at the
    viewport edge.
    """
    if parsed.html_body is not None:
        return parsed.html_body
    return f'<pre class="plain-text">{escape_html(parsed.text_body or "")}</pre>'


def build_email_html(parsed: ParsedEmail) -> str:
    """
    Build the complete HTML document for a parsed email.

    Args:
        parsed: ParsedEmail from the parser

    Returns:
        HTML document string (deterministic for a given ParsedEmail)
    """
    return DOCUMENT_TEMPLATE.format(
        message_id=escape_html(parsed.message_id_display),
        sender=escape_html(parsed.sender_display),
        recipients=escape_html(parsed.recipients_display),
        subject=escape_html(parsed.subject_display),
        body=render_body(parsed),
    )
