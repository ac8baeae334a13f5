"""
Version information endpoint.
"""

from fastapi import APIRouter

from ...models.api_models import VersionResponse
from ...version import API_VERSION, get_current_renderer_version

router = APIRouter()


@router.get("/version", response_model=VersionResponse)
async def get_version() -> VersionResponse:
    """
    Get current API and renderer version information.

    Returns:
        Version information for audit and debugging
    """
    return VersionResponse(
        api_version=API_VERSION,
        renderer_version=get_current_renderer_version(),
    )
