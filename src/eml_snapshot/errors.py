"""
Error taxonomy for the rendering pipeline.

Every error carries a stable ``error_code`` and the HTTP ``status_code`` the
transport layer should answer with.
"""

from typing import Optional


class EmailRenderError(Exception):
    """Base class for all pipeline errors."""

    error_code = "render_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# Client input errors (4xx, never retried)


class MalformedEmail(EmailRenderError):
    """The byte stream cannot be decoded as a mail message."""

    error_code = "malformed_email"
    status_code = 400


class EmptyContent(EmailRenderError):
    """The message decoded but has neither an HTML nor a plain-text body."""

    error_code = "empty_content"
    status_code = 400


class InvalidPayload(EmailRenderError):
    """The submission envelope (e.g. base64 payload) could not be decoded."""

    error_code = "invalid_payload"
    status_code = 400


class PayloadTooLarge(EmailRenderError):
    error_code = "payload_too_large"
    status_code = 413


# Request-scoped rendering failures


class RenderTimeout(EmailRenderError):
    """Document load did not finish within the load timeout."""

    error_code = "render_timeout"
    status_code = 504


class CaptureFailed(EmailRenderError):
    error_code = "capture_failed"
    status_code = 500


# Admission control and session lifecycle


class RenderCapacityExceeded(EmailRenderError):
    """No render slot became free within the queue timeout."""

    error_code = "render_capacity_exceeded"
    status_code = 503


class SessionUnavailable(EmailRenderError):
    """The browser session is not running (not started yet, or shutting down)."""

    error_code = "session_unavailable"
    status_code = 503


class BrowserLaunchError(EmailRenderError):
    """The browser process could not be launched. Fatal at startup."""

    error_code = "browser_launch_failed"
    status_code = 500


class ProcessingFailed(EmailRenderError):
    """
    Terminal pipeline failure.

    Wraps the error raised by whichever stage failed and takes over its
    error code and status, so the transport layer only has to handle one type.
    """

    error_code = "processing_failed"
    status_code = 500

    def __init__(self, message: str, cause: Optional[BaseException] = None, stage: Optional[str] = None):
        super().__init__(message)
        self.cause = cause
        self.stage = stage
        if isinstance(cause, EmailRenderError):
            self.error_code = cause.error_code
            self.status_code = cause.status_code


class MissingFile(EmailRenderError):
    """The multipart request carried no ``eml_file`` part."""

    error_code = "missing_file"
    status_code = 400
