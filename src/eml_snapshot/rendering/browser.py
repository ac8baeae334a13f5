"""
Shared headless browser session.

One Chromium process is launched at startup and shared by every request. Each
request borrows its own page through ``open_page()``; pages are admitted
through a bounded semaphore so a burst of requests queues (and eventually is
rejected) instead of exhausting the browser process.
"""

import asyncio
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, List, Optional

import structlog
from playwright.async_api import Browser, Page, Playwright, async_playwright

from ..errors import BrowserLaunchError, RenderCapacityExceeded, SessionUnavailable

logger = structlog.get_logger(__name__)

# Flags for running Chromium as an unprivileged user inside a container
CHROMIUM_ARGS: List[str] = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-first-run",
    "--disable-extensions",
    "--font-render-hinting=none",
]


class SessionState(str, Enum):
    NEW = "new"
    RUNNING = "running"
    CLOSING = "closing"
    CLOSED = "closed"


class BrowserSession:
    """
    Lifecycle owner of the shared browser process.

    State only moves forward: new -> running -> closing -> closed. Pages can be
    opened only while running.
    """

    def __init__(
        self,
        max_concurrent_pages: int = 4,
        queue_timeout_seconds: Optional[float] = 30.0,
        launch_timeout_ms: int = 30000,
        shutdown_grace_seconds: float = 10.0,
        launch_args: Optional[List[str]] = None,
    ):
        if max_concurrent_pages < 1:
            raise ValueError("max_concurrent_pages must be at least 1")

        self.max_concurrent_pages = max_concurrent_pages
        self.queue_timeout_seconds = queue_timeout_seconds
        self.launch_timeout_ms = launch_timeout_ms
        self.shutdown_grace_seconds = shutdown_grace_seconds
        self.launch_args = list(launch_args if launch_args is not None else CHROMIUM_ARGS)

        self.state = SessionState.NEW
        self.pages_opened = 0
        self.pages_closed = 0

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._slots = asyncio.Semaphore(max_concurrent_pages)
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def pages_in_flight(self) -> int:
        return self.pages_opened - self.pages_closed

    @property
    def is_running(self) -> bool:
        return self.state is SessionState.RUNNING

    async def start(self) -> None:
        """
        Launch the browser process.

        Calling start() on a session that is already running is a no-op.

        Raises:
            BrowserLaunchError: If Chromium cannot be launched, or the session
                was already shut down
        """
        if self.state is SessionState.RUNNING:
            logger.warning("Browser session already started")
            return
        if self.state is not SessionState.NEW:
            raise BrowserLaunchError(f"Cannot start a browser session in state '{self.state.value}'")

        loop = asyncio.get_running_loop()
        start_time = loop.time()
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=True,
                args=self.launch_args,
                chromium_sandbox=False,
                timeout=self.launch_timeout_ms,
            )
        except Exception as e:
            logger.error("Browser launch failed", error=str(e), exc_info=True)
            await self._stop_playwright()
            raise BrowserLaunchError(f"Failed to launch browser: {e}") from e

        self.state = SessionState.RUNNING
        logger.info(
            "Browser session started",
            launch_time_ms=round((loop.time() - start_time) * 1000, 2),
            max_concurrent_pages=self.max_concurrent_pages,
        )

    async def _acquire_slot(self) -> None:
        if self.queue_timeout_seconds is None:
            await self._slots.acquire()
            return
        try:
            await asyncio.wait_for(self._slots.acquire(), timeout=self.queue_timeout_seconds)
        except asyncio.TimeoutError as e:
            raise RenderCapacityExceeded(
                f"No render slot became available within {self.queue_timeout_seconds}s"
            ) from e

    async def _new_page(self) -> Page:
        return await self._browser.new_page()

    @asynccontextmanager
    async def open_page(self) -> AsyncIterator[Page]:
        """
        Borrow a fresh, isolated page for one request.

        The page is closed and its admission slot returned on every exit
        path, including errors and task cancellation.

        Raises:
            SessionUnavailable: If the session is not running
            RenderCapacityExceeded: If no slot frees up within the queue timeout
        """
        if not self.is_running:
            raise SessionUnavailable(f"Browser session is {self.state.value}")

        await self._acquire_slot()
        # Counted from slot acquisition so shutdown also waits for pages being created
        self.pages_opened += 1
        self._idle.clear()
        try:
            # Shutdown may have begun while this request was queued
            if not self.is_running:
                raise SessionUnavailable(f"Browser session is {self.state.value}")

            page = await self._new_page()
            try:
                yield page
            finally:
                try:
                    await page.close()
                except Exception as e:
                    logger.warning("Failed to close page", error=str(e))
        finally:
            self.pages_closed += 1
            if self.pages_in_flight == 0:
                self._idle.set()
            self._slots.release()

    async def shutdown(self) -> None:
        """
        Close the browser process.

        New pages are refused immediately; in-flight pages get up to
        ``shutdown_grace_seconds`` to finish before the browser is closed
        underneath them. Safe to call more than once.
        """
        if self.state in (SessionState.CLOSING, SessionState.CLOSED):
            return

        previous_state = self.state
        self.state = SessionState.CLOSING
        logger.info("Browser session shutting down", pages_in_flight=self.pages_in_flight)

        if previous_state is SessionState.RUNNING and self.pages_in_flight:
            try:
                await asyncio.wait_for(self._idle.wait(), timeout=self.shutdown_grace_seconds)
            except asyncio.TimeoutError:
                logger.warning(
                    "Closing browser with pages still in flight",
                    pages_in_flight=self.pages_in_flight,
                )

        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as e:
                logger.warning("Browser close failed", error=str(e))
            self._browser = None

        await self._stop_playwright()
        self.state = SessionState.CLOSED
        logger.info(
            "Browser session closed",
            pages_opened=self.pages_opened,
            pages_closed=self.pages_closed,
        )

    async def _stop_playwright(self) -> None:
        if self._playwright is None:
            return
        try:
            await self._playwright.stop()
        except Exception as e:
            logger.warning("Playwright stop failed", error=str(e))
        self._playwright = None
