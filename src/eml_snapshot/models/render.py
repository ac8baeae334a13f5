"""
Render configuration and capture result models.
"""

from typing import Dict

from pydantic import BaseModel, Field

VIEWPORT_WIDTH = 1024
LOAD_TIMEOUT_MS = 60_000


class RenderConfig(BaseModel):
    """
    Per-process rendering parameters.

    Built once from Settings and passed explicitly into the capture controller;
    never mutated while requests are in flight.
    """

    viewport_width: int = Field(default=VIEWPORT_WIDTH, description="Logical viewport width in pixels")
    max_capture_height: int = Field(gt=0, description="Tallest capture before cropping, in pixels")
    offline_mode: bool = Field(default=False, description="Block all non-local network fetches")
    load_timeout_ms: int = Field(default=LOAD_TIMEOUT_MS, gt=0)
    jpeg_quality: int = Field(default=90, ge=1, le=100)

    model_config = {"frozen": True}


class CaptureResult(BaseModel):
    """JPEG capture of one rendered document plus its geometry."""

    image_bytes: bytes = Field(description="JPEG encoded screenshot")
    width: int = Field(description="Captured width in pixels")
    actual_height: int = Field(description="Measured content height in pixels")
    captured_height: int = Field(description="Height of the returned image in pixels")
    height_truncated: bool = Field(description="Whether the capture was cropped")


class SanitizedMetadata(BaseModel):
    """Header values safe to send as HTTP response headers."""

    subject: str = ""
    sender: str = ""
    message_id: str = ""


class ConversionResult(BaseModel):
    """Successful pipeline output."""

    capture: CaptureResult
    metadata: SanitizedMetadata
    timings_ms: Dict[str, float] = Field(
        default_factory=dict, description="Elapsed time per stage (observability only)"
    )
