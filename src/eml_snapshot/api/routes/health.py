"""
Health check endpoint for monitoring.
"""

import time

from fastapi import APIRouter, Request

from ...models.api_models import HealthResponse
from ...version import API_VERSION

router = APIRouter()

# Track start time for uptime calculation
_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint for monitoring.

    Reports "degraded" whenever the shared browser session is not running.

    Returns:
        Health status, uptime and browser session state
    """
    session = getattr(request.app.state, "browser_session", None)
    browser_state = session.state.value if session is not None else "not_started"
    running = session is not None and session.is_running

    return HealthResponse(
        status="healthy" if running else "degraded",
        version=API_VERSION,
        uptime_seconds=time.time() - _start_time,
        browser_state=browser_state,
        pages_in_flight=session.pages_in_flight if session is not None else 0,
    )
