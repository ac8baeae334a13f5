"""
FastAPI middleware and exception handlers for logging and error handling.
"""

import time
from typing import Callable

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from ..errors import EmailRenderError, ProcessingFailed
from ..models.api_models import ErrorResponse

logger = structlog.get_logger(__name__)


def error_response(status_code: int, error: str, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail).model_dump(),
    )


def setup_logging_middleware(app: FastAPI) -> None:
    """
    Setup request/response logging middleware.

    Logs all requests with:
    - Request method, path
    - Response status code
    - Processing time
    """

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)

            process_time = time.time() - start_time
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                process_time_ms=round(process_time * 1000, 2),
            )

            response.headers["X-Process-Time"] = str(process_time)
            return response

        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                process_time_ms=round(process_time * 1000, 2),
                error=str(e),
                exc_info=True,
            )
            raise


def setup_error_handling_middleware(app: FastAPI) -> None:
    """
    Setup global error handling middleware.

    Catches unhandled exceptions and returns consistent error responses.
    """

    @app.middleware("http")
    async def handle_errors(request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(
                "Unhandled exception",
                method=request.method,
                path=request.url.path,
                error=str(e),
                exc_info=True,
            )
            return error_response(
                500,
                "internal_error",
                str(e) if app.debug else "An unexpected error occurred",
            )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Map pipeline errors to structured JSON error responses.

    Client input errors keep their message; server-side failures are logged
    with the underlying cause.
    """

    @app.exception_handler(EmailRenderError)
    async def handle_render_error(request: Request, exc: EmailRenderError) -> JSONResponse:
        cause = exc.cause if isinstance(exc, ProcessingFailed) else None
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            "Conversion request rejected",
            path=request.url.path,
            status_code=exc.status_code,
            error_code=exc.error_code,
            error=exc.message,
            cause=type(cause).__name__ if cause is not None else None,
        )
        return error_response(exc.status_code, exc.error_code, exc.message)
