"""
Screenshot service
Renders a URL or an HTML snippet in Chromium and captures the page or a single element
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from playwright.async_api import Locator, Page
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .browser import BrowserManager
from .documents import build_document
from .errors import CaptureError
from .models import DEFAULT_SELECTOR, HtmlScreenshotRequest, ScreenshotOptions, SelectorLookup
from .utils import image_dimensions

logger = logging.getLogger(__name__)

TRANSPARENT_PAGE_CSS = """
html, body {
    background-color: transparent !important;
    background: transparent !important;
}
"""

# Clears the background of every ancestor between the element and <body>
CLEAR_ANCESTOR_BACKGROUNDS_JS = """
(element) => {
    let node = element.parentElement;
    while (node && node !== document.body && node !== document.documentElement) {
        const style = window.getComputedStyle(node);
        const clearColor = style.backgroundColor === 'transparent' || style.backgroundColor === 'rgba(0, 0, 0, 0)';
        if (!clearColor || style.backgroundImage !== 'none') {
            node.style.setProperty('background', 'transparent', 'important');
        }
        node = node.parentElement;
    }
}
"""

STYLE_SETTLE_MS = 200
CONTENT_SETTLE_MS = 500
DEBUG_PAUSE_MS = 3000


class ScreenshotService:
    """Captures screenshots through a BrowserManager"""

    def __init__(self, browsers: BrowserManager):
        self.browsers = browsers

    @asynccontextmanager
    async def _open_page(self, options: ScreenshotOptions) -> AsyncIterator[Page]:
        """Isolated context and page sized to the requested viewport; always torn down"""
        async with self.browsers.acquire(options.headless) as browser:
            context = await browser.new_context(
                viewport={'width': options.width, 'height': options.height},
                device_scale_factor=options.device_scale_factor,
            )
            page = None
            try:
                page = await context.new_page()
                yield page
            finally:
                try:
                    if page is not None:
                        await page.close()
                finally:
                    await context.close()

    def _screenshot_kwargs(self, options: ScreenshotOptions) -> Dict[str, Any]:
        kwargs = {
            'type': options.image_type,
            'animations': 'disabled',
            'omit_background': options.transparent,
        }
        if options.image_type == 'jpeg':
            kwargs['quality'] = options.quality
        return kwargs

    async def _pause_for_debugging(self, page: Page, options: ScreenshotOptions, target: str):
        if options.headless or not self.browsers.allow_debug:
            return
        logger.info(f"Debug mode: browser is visible, targeting {target}")
        await page.wait_for_timeout(DEBUG_PAUSE_MS)

    async def locate_element(self, page: Page, selector: str, timeout: float) -> SelectorLookup:
        """Wait for the first match of selector to become visible"""
        locator = page.locator(selector).first
        try:
            await locator.wait_for(state='visible', timeout=timeout)
            return SelectorLookup.FOUND
        except PlaywrightTimeoutError:
            pass
        except PlaywrightError as e:
            # Malformed selector
            logger.debug(f"Selector {selector!r} rejected: {e.message}")
            return SelectorLookup.NOT_FOUND

        count = await page.locator(selector).count()
        return SelectorLookup.NOT_VISIBLE if count else SelectorLookup.NOT_FOUND

    async def _capture_element(self, locator: Locator, options: ScreenshotOptions) -> bytes:
        if options.transparent:
            await locator.evaluate(CLEAR_ANCESTOR_BACKGROUNDS_JS)
        return await locator.screenshot(**self._screenshot_kwargs(options))

    async def capture_url(self, url: str, options: ScreenshotOptions) -> bytes:
        """Screenshot a live URL, preferring the configured element over the whole page"""
        async with self._open_page(options) as page:
            await page.goto(url, wait_until=options.wait_until, timeout=options.timeout)

            if options.transparent:
                await page.add_style_tag(content=TRANSPARENT_PAGE_CSS)
                await page.wait_for_timeout(STYLE_SETTLE_MS)

            await self._pause_for_debugging(page, options, options.selector or 'page')

            if options.selector:
                element_bytes = await self._try_element_capture(page, options)
                if element_bytes is not None:
                    self._log_capture('url', options, element_bytes)
                    return element_bytes

            screenshot_bytes = await page.screenshot(full_page=options.full_page, **self._screenshot_kwargs(options))
            self._log_capture('url', options, screenshot_bytes)
            return screenshot_bytes

    async def _try_element_capture(self, page: Page, options: ScreenshotOptions):
        """Element screenshot, or None when the page capture should be used instead"""
        selector = options.selector
        lookup = await self.locate_element(page, selector, options.effective_selector_timeout)
        if lookup is not SelectorLookup.FOUND:
            logger.info(f"Selector {selector!r} {lookup.value}, falling back to page screenshot")
            return None

        try:
            return await self._capture_element(page.locator(selector).first, options)
        except Exception as e:
            logger.info(f"Element capture for {selector!r} failed ({e}), falling back to page screenshot")
            return None

    async def capture_html(self, request: HtmlScreenshotRequest) -> bytes:
        """Screenshot the review card of an inline HTML document"""
        options = request.options
        document = build_document(request.html, request.css, request.state, options.transparent)

        async with self._open_page(options) as page:
            await page.set_content(document, wait_until=options.wait_until, timeout=options.timeout)
            await page.wait_for_timeout(CONTENT_SETTLE_MS)

            element = page.locator(DEFAULT_SELECTOR).first
            try:
                await element.wait_for(state='visible', timeout=options.timeout)
            except PlaywrightTimeoutError as e:
                raise CaptureError(f"{DEFAULT_SELECTOR} did not become visible: {e.message}") from e
            logger.debug(f"Found {DEFAULT_SELECTOR}")

            await self._pause_for_debugging(page, options, DEFAULT_SELECTOR)

            screenshot_bytes = await element.screenshot(**self._screenshot_kwargs(options))
            self._log_capture('html', options, screenshot_bytes)
            return screenshot_bytes

    def _log_capture(self, mode: str, options: ScreenshotOptions, image_bytes: bytes):
        dimensions = image_dimensions(image_bytes)
        size = f"{dimensions[0]}x{dimensions[1]}px" if dimensions else "unknown size"
        logger.info(f"Captured {mode} screenshot: {options.image_type}, {size}, {len(image_bytes)} bytes")
