"""
Browser lifecycle: one shared headless Chromium per process, plus
short-lived visible browsers for debugging
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from playwright.async_api import Browser, Playwright, async_playwright

from .errors import CaptureError

logger = logging.getLogger(__name__)

DEBUG_SLOW_MO = 100  # ms between browser operations


class DebugBrowser:
    """A visible browser owned by a single request, closed when the request ends"""

    def __init__(self, launch_args: Optional[List[str]] = None):
        self.launch_args = launch_args or []
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self) -> Browser:
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=False,
                slow_mo=DEBUG_SLOW_MO,
                args=self.launch_args,
            )
        except Exception:
            await self._playwright.stop()
            self._playwright = None
            raise
        logger.info("Launched visible debug browser")
        return self._browser

    async def __aexit__(self, exc_type, exc, tb):
        try:
            if self._browser:
                await self._browser.close()
        finally:
            if self._playwright:
                await self._playwright.stop()
            self._browser = None
            self._playwright = None
            logger.info("Closed debug browser")


class BrowserManager:
    """Owns the shared headless browser.

    The browser is launched on first use and reused by every headless
    request until close() is called at shutdown.
    """

    def __init__(self, launch_args: Optional[List[str]] = None, allow_debug: bool = False):
        self.launch_args = launch_args or []
        self.allow_debug = allow_debug
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def state(self) -> str:
        if self._closed:
            return "closed"
        if self._browser is not None:
            return "running"
        return "uninitialized"

    def _is_live(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def get_shared(self) -> Browser:
        """Return the shared browser, launching it once if needed"""
        if self._is_live() and not self._closed:
            return self._browser

        async with self._lock:
            if self._closed:
                raise CaptureError("Browser manager has been shut down")
            if not self._is_live():
                if self._browser is not None:
                    logger.warning("Shared browser disconnected, relaunching")
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(
                    headless=True,
                    args=self.launch_args,
                )
                logger.info("Launched shared headless browser")
            return self._browser

    def debug_browser(self) -> DebugBrowser:
        return DebugBrowser(self.launch_args)

    @asynccontextmanager
    async def acquire(self, headless: bool = True) -> AsyncIterator[Browser]:
        """Yield the browser a request should use.

        Headless requests get the shared browser, which is left running.
        Non-headless requests get their own visible browser when debugging is
        allowed, and the shared one otherwise.
        """
        if not headless and self.allow_debug:
            async with self.debug_browser() as browser:
                yield browser
            return

        if not headless:
            logger.warning("Visible browser requested but DEBUG is off, using shared headless browser")
        yield await self.get_shared()

    async def close(self):
        """Close the shared browser and the Playwright driver"""
        async with self._lock:
            self._closed = True
            browser, self._browser = self._browser, None
            playwright, self._playwright = self._playwright, None
            try:
                if browser is not None:
                    await browser.close()
                    logger.info("Shared browser closed")
            finally:
                if playwright is not None:
                    await playwright.stop()
