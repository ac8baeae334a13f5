# Data models for the email rendering pipeline

from .renderer_version import RendererVersion
from .email_document import EmailAddress, ParsedEmail
from .render import CaptureResult, ConversionResult, RenderConfig, SanitizedMetadata
from .api_models import (
    ConvertBase64Request,
    ErrorResponse,
    HealthResponse,
    VersionResponse,
)

__all__ = [
    "RendererVersion",
    "EmailAddress",
    "ParsedEmail",
    "RenderConfig",
    "CaptureResult",
    "SanitizedMetadata",
    "ConversionResult",
    "ConvertBase64Request",
    "ErrorResponse",
    "HealthResponse",
    "VersionResponse",
]
