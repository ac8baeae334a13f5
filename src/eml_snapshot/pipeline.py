"""
Rendering pipeline orchestration.

Sequences parse -> synthesize -> sanitize -> capture for one message and turns
every failure into a single ProcessingFailed error.
"""

from time import perf_counter
from typing import Any, AsyncContextManager, Dict, Optional, Protocol

import structlog

from .config import Settings, settings
from .errors import EmailRenderError, ProcessingFailed
from .models.render import ConversionResult, RenderConfig
from .parsing import parse_email
from .rendering.capture import capture_document
from .rendering.html_document import build_email_html
from .sanitization import build_sanitized_metadata

logger = structlog.get_logger(__name__)


class PageSource(Protocol):
    """Anything that lends out pages, normally a BrowserSession."""

    def open_page(self) -> AsyncContextManager[Any]: ...


def build_render_config(
    config: Optional[Settings] = None,
    max_capture_height: Optional[int] = None,
    offline_mode: Optional[bool] = None,
) -> RenderConfig:
    """
    Build a RenderConfig from settings, with optional per-caller overrides.
    """
    config = config or settings
    return RenderConfig(
        max_capture_height=max_capture_height or config.max_capture_height,
        offline_mode=config.offline_mode if offline_mode is None else offline_mode,
        jpeg_quality=config.jpeg_quality,
    )


def _elapsed_ms(start: float) -> float:
    return round((perf_counter() - start) * 1000, 2)


class EmailRenderPipeline:
    """
    Converts raw .eml bytes into a JPEG capture plus sanitized metadata.

    The page source is injected so the same pipeline runs against the shared
    BrowserSession in the API, a private session in the CLI, or a fake in tests.
    """

    def __init__(self, pages: PageSource, config: RenderConfig):
        self.pages = pages
        self.config = config

    async def convert(self, eml_bytes: bytes) -> ConversionResult:
        """
        Run the full pipeline on one message.

        Args:
            eml_bytes: Raw .eml bytes

        Returns:
            ConversionResult with capture, metadata and per-stage timings

        Raises:
            ProcessingFailed: On any failure; ``cause`` holds the original error
        """
        timings: Dict[str, float] = {}
        total_start = perf_counter()
        stage = "parse"

        try:
            stage_start = perf_counter()
            parsed = parse_email(eml_bytes)
            timings["parse"] = _elapsed_ms(stage_start)

            stage = "synthesize"
            stage_start = perf_counter()
            document = build_email_html(parsed)
            metadata = build_sanitized_metadata(parsed)
            timings["synthesize"] = _elapsed_ms(stage_start)

            stage = "render"
            stage_start = perf_counter()
            async with self.pages.open_page() as page:
                capture = await capture_document(page, document, self.config)
            timings["render"] = _elapsed_ms(stage_start)

        except EmailRenderError as e:
            logger.warning(
                "Email conversion failed",
                stage=stage,
                error_code=e.error_code,
                error=e.message,
                total_ms=_elapsed_ms(total_start),
            )
            raise ProcessingFailed(e.message, cause=e, stage=stage) from e

        except Exception as e:
            logger.error(
                "Email conversion failed unexpectedly",
                stage=stage,
                error=str(e),
                total_ms=_elapsed_ms(total_start),
                exc_info=True,
            )
            raise ProcessingFailed(f"Unexpected error during {stage}: {e}", cause=e, stage=stage) from e

        timings["total"] = _elapsed_ms(total_start)
        logger.info(
            "Email converted",
            message_id=metadata.message_id,
            image_bytes=len(capture.image_bytes),
            actual_height=capture.actual_height,
            captured_height=capture.captured_height,
            height_truncated=capture.height_truncated,
            **{f"{name}_ms": value for name, value in timings.items()},
        )
        return ConversionResult(capture=capture, metadata=metadata, timings_ms=timings)
