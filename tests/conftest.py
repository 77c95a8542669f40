"""
Pytest configuration
"""

import os

# Settings are read at import time
os.environ.setdefault("CLERK_SECRET_KEY", "sk_test_screenshot_api")
os.environ.setdefault("DEBUG", "false")

import io
from unittest.mock import AsyncMock, MagicMock

import pytest
from PIL import Image


def make_png(width=40, height=20, mode="RGBA"):
    buffer = io.BytesIO()
    Image.new(mode, (width, height)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return make_png()


class FakeLocator:
    """Stand-in for a Playwright Locator; .first returns itself"""

    def __init__(self, count=1):
        self.wait_for = AsyncMock()
        self.screenshot = AsyncMock(return_value=make_png(300, 200))
        self.evaluate = AsyncMock()
        self.count = AsyncMock(return_value=count)

    @property
    def first(self):
        return self


@pytest.fixture
def fake_page():
    page = MagicMock()
    page.goto = AsyncMock()
    page.set_content = AsyncMock()
    page.add_style_tag = AsyncMock()
    page.wait_for_timeout = AsyncMock()
    page.screenshot = AsyncMock(return_value=make_png(1920, 1080))
    page.close = AsyncMock()
    page.element = FakeLocator()
    page.locator = MagicMock(return_value=page.element)
    return page


@pytest.fixture
def fake_context(fake_page):
    context = MagicMock()
    context.new_page = AsyncMock(return_value=fake_page)
    context.close = AsyncMock()
    return context


@pytest.fixture
def fake_browser(fake_context):
    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=fake_context)
    browser.close = AsyncMock()
    browser.is_connected = MagicMock(return_value=True)
    return browser
