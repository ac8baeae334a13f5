"""
API request and response models for FastAPI endpoints.

This module defines the Pydantic models used for API request/response validation.
"""

from pydantic import BaseModel, Field

from .renderer_version import RendererVersion


class ConvertBase64Request(BaseModel):
    """Request model for the encoded-payload conversion endpoint."""

    eml_base64: str = Field(description="Base64 encoded raw .eml bytes")


class ErrorResponse(BaseModel):
    """Structured error payload returned by every failing endpoint."""

    success: bool = Field(default=False)
    error: str = Field(description="Stable error code", examples=["malformed_email"])
    detail: str = Field(description="Human readable message")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service status", examples=["healthy"])
    version: str = Field(description="API version", examples=["1.0.0"])
    uptime_seconds: float = Field(description="Service uptime")
    browser_state: str = Field(description="Browser session state", examples=["running"])
    pages_in_flight: int = Field(description="Pages currently open")


class VersionResponse(BaseModel):
    """Version information response."""

    api_version: str = Field(description="API version")
    renderer_version: RendererVersion = Field(description="Current renderer version")
