# Document synthesis, browser session and capture

from .browser import CHROMIUM_ARGS, BrowserSession, SessionState
from .capture import capture_document, is_request_allowed, plan_capture
from .html_document import build_email_html, escape_html

__all__ = [
    "BrowserSession",
    "SessionState",
    "CHROMIUM_ARGS",
    "capture_document",
    "is_request_allowed",
    "plan_capture",
    "build_email_html",
    "escape_html",
]
