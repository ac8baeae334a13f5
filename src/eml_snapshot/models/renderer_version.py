"""
Renderer version model.

Tracks the version of every stage that shapes the output image, so a given
image can be traced back to the code that produced it.
"""

from pydantic import BaseModel, Field


class RendererVersion(BaseModel):
    """Immutable version contract for the rendering pipeline."""

    parser_version: str = Field(description="Email parser version", examples=["eml-parser-1.0.0"])
    synthesizer_version: str = Field(
        description="HTML document synthesizer version", examples=["html-doc-1.0.0"]
    )
    sanitizer_version: str = Field(
        description="Header metadata sanitizer version", examples=["header-sanitize-1.0.0"]
    )
    capture_version: str = Field(description="Capture controller version", examples=["capture-1.0.0"])
    viewport_width: int = Field(description="Fixed viewport width", examples=[1024])

    model_config = {"frozen": True}

    def to_repr(self) -> str:
        """Short representation for logging."""
        return f"Renderer-{self.parser_version}-{self.synthesizer_version}-{self.capture_version}"
