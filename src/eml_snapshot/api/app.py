"""
FastAPI application for the email rendering service.

This is the main application that wires the shared browser session, endpoints
and middleware together.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import settings
from ..logging_config import setup_logging
from ..pipeline import build_render_config
from ..rendering.browser import BrowserSession
from ..version import API_VERSION, get_current_renderer_version
from .middleware import (
    setup_error_handling_middleware,
    setup_exception_handlers,
    setup_logging_middleware,
)
from .routes import convert, health, version

# Setup logging on module import
setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Launches the shared browser before the first request is accepted and
    closes it on shutdown (uvicorn runs this on SIGINT/SIGTERM). A launch
    failure propagates and aborts startup.
    """
    render_config = build_render_config(settings)
    session = BrowserSession(
        max_concurrent_pages=settings.max_concurrent_renders,
        queue_timeout_seconds=settings.render_queue_timeout_seconds,
        launch_timeout_ms=settings.browser_launch_timeout_ms,
        shutdown_grace_seconds=settings.shutdown_grace_seconds,
    )

    logger.info(
        "Starting EML Snapshot API",
        version=API_VERSION,
        renderer_version=get_current_renderer_version().to_repr(),
        log_level=settings.log_level,
        max_upload_size_mb=settings.max_upload_size_mb,
        max_capture_height=render_config.max_capture_height,
        offline_mode=render_config.offline_mode,
    )
    await session.start()

    app.state.browser_session = session
    app.state.render_config = render_config
    try:
        yield
    finally:
        logger.info("Shutting down EML Snapshot API")
        await session.shutdown()


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="EML Snapshot",
        description="Render RFC822 email messages to JPEG images with a headless browser",
        version=API_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "X-Email-Subject",
            "X-Email-From",
            "X-Message-ID",
            "X-Height-Truncated",
            "X-Actual-Height",
            "X-Captured-Height",
        ],
    )

    # Custom middleware (order matters - first added = innermost)
    setup_error_handling_middleware(app)
    setup_logging_middleware(app)
    setup_exception_handlers(app)

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(version.router, prefix="/api/v1", tags=["Version"])
    app.include_router(convert.router, tags=["Conversion"])

    return app


# Create app instance
app = create_app()


def main() -> None:
    """
    Entry point for running the API server directly.
    """
    import uvicorn

    uvicorn.run(
        "eml_snapshot.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
