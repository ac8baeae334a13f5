"""
Version constants for the email rendering pipeline.
"""

from .models.render import VIEWPORT_WIDTH
from .models.renderer_version import RendererVersion

# API Version
API_VERSION = "1.0.0"

# Component versions (update these when implementations change)
PARSER_VERSION = "eml-parser-1.0.0"
SYNTHESIZER_VERSION = "html-doc-1.0.0"
SANITIZER_VERSION = "header-sanitize-1.0.0"
CAPTURE_VERSION = "capture-1.0.0"


def get_current_renderer_version() -> RendererVersion:
    """
    Get current renderer version configuration.

    Returns:
        RendererVersion instance with current versions
    """
    return RendererVersion(
        parser_version=PARSER_VERSION,
        synthesizer_version=SYNTHESIZER_VERSION,
        sanitizer_version=SANITIZER_VERSION,
        capture_version=CAPTURE_VERSION,
        viewport_width=VIEWPORT_WIDTH,
    )
