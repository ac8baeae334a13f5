"""
Capture controller - renders one synthesized document on a borrowed page.

Steps, in order:
1. Fix the viewport width (auto-height layout)
2. In offline mode, gate every outbound request through is_request_allowed()
3. Load the document, bounded by the load timeout
4. Measure the rendered content
5. Capture the full content, or only its top max_capture_height pixels
6. Encode as JPEG
"""

from typing import Tuple

import structlog
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Route
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..errors import CaptureFailed, RenderTimeout
from ..models.render import CaptureResult, RenderConfig

logger = structlog.get_logger(__name__)

# Playwright rejects a zero-height viewport; 1px lets the document define its height
INITIAL_VIEWPORT_HEIGHT = 1

LOCAL_URL_SCHEMES = ("data:", "about:", "blob:")

MEASURE_CONTENT_JS = """
() => {
    const doc = document.documentElement;
    const body = document.body;
    return {
        width: Math.max(doc.scrollWidth, body ? body.scrollWidth : 0),
        height: Math.max(doc.scrollHeight, body ? body.scrollHeight : 0),
    };
}
"""


def is_request_allowed(url: str, offline_mode: bool) -> bool:
    """
    Decide whether an outbound resource request may proceed.

    Everything is allowed online. Offline, only same-document resources
    (data:, about:, blob: URLs) may load.
    """
    if not offline_mode:
        return True
    return url.lower().startswith(LOCAL_URL_SCHEMES)


def plan_capture(actual_height: int, max_capture_height: int) -> Tuple[int, bool]:
    """
    Return (captured_height, height_truncated) for a measured content height.

    Content taller than the limit is hard-cropped to its top
    max_capture_height pixels; the rest is discarded.
    """
    if actual_height > max_capture_height:
        return max_capture_height, True
    return actual_height, False


async def install_request_gate(page: Page, offline_mode: bool) -> None:
    """Abort every request that is_request_allowed() rejects."""

    async def gate(route: Route) -> None:
        url = route.request.url
        if is_request_allowed(url, offline_mode):
            await route.continue_()
        else:
            logger.debug("Blocked outbound request", url=url[:200])
            await route.abort()

    await page.route("**/*", gate)


async def measure_content(page: Page, viewport_width: int) -> Tuple[int, int]:
    """
    Measure the rendered document.

    Returns:
        (width, height) in CSS pixels; width is capped at the viewport width
    """
    size = await page.evaluate(MEASURE_CONTENT_JS)
    width = min(max(int(size["width"]), 1), viewport_width)
    height = max(int(size["height"]), 1)
    return width, height


async def capture_document(page: Page, document: str, config: RenderConfig) -> CaptureResult:
    """
    Render a document on the given page and capture it as JPEG.

    The caller owns the page and is responsible for closing it.

    Args:
        page: Page borrowed from the BrowserSession
        document: Complete HTML document
        config: Render parameters

    Returns:
        CaptureResult with the JPEG bytes and capture geometry

    Raises:
        RenderTimeout: If the document does not finish loading in time
        CaptureFailed: On any other browser error
    """
    try:
        await page.set_viewport_size(
            {"width": config.viewport_width, "height": INITIAL_VIEWPORT_HEIGHT}
        )

        if config.offline_mode:
            await install_request_gate(page, offline_mode=True)

        wait_until = "load" if config.offline_mode else "networkidle"
        await page.set_content(document, wait_until=wait_until, timeout=config.load_timeout_ms)
    except PlaywrightTimeoutError as e:
        raise RenderTimeout(
            f"Document did not finish loading within {config.load_timeout_ms} ms"
        ) from e
    except PlaywrightError as e:
        raise CaptureFailed(f"Failed to load document: {e}") from e

    try:
        width, actual_height = await measure_content(page, config.viewport_width)
        captured_height, truncated = plan_capture(actual_height, config.max_capture_height)

        image_bytes = await page.screenshot(
            type="jpeg",
            quality=config.jpeg_quality,
            full_page=True,
            clip={"x": 0, "y": 0, "width": width, "height": captured_height},
        )
    except PlaywrightTimeoutError as e:
        raise RenderTimeout(f"Screenshot timed out: {e}") from e
    except PlaywrightError as e:
        raise CaptureFailed(f"Failed to capture screenshot: {e}") from e

    if truncated:
        logger.info(
            "Capture height truncated",
            actual_height=actual_height,
            captured_height=captured_height,
        )

    return CaptureResult(
        image_bytes=image_bytes,
        width=width,
        actual_height=actual_height,
        captured_height=captured_height,
        height_truncated=truncated,
    )
