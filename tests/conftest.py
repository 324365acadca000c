"""Shared fakes for Playwright browser, context and page objects."""

import os
import tempfile

# Keep test runs from installing browsers or writing logs into the repo
os.environ.setdefault("PLAYWRIGHT_AUTO_INSTALL", "false")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "pinterest-scraper-test-logs"))

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from pipeline.scraper.browser import BrowserHandle, BrowserProvisioner, BrowserSessionManager
from pipeline.scraper.image_collector import SCROLL_ONE_SCREEN_JS, ImageCollector


def pin(url, width=0, height=0, title="", source="https://www.pinterest.com/pin/1/"):
    """One record as returned by the in-page extraction script."""
    return {"imageUrl": url, "title": title, "sourceUrl": source, "width": width, "height": height}


class FakePage:
    """
    Scripted stand-in for a Playwright page.

    passes: list of record lists, one per extraction call; the last entry is
        repeated once the script runs out.
    """

    def __init__(self, passes=None, goto_error=None, no_images=False, failing_passes=(),
                 title="Fake Title", content="<html><body>fake</body></html>", timeout_on=None):
        self.passes = list(passes or [[]])
        self.goto_error = goto_error
        self.timeout_on = timeout_on
        self.no_images = no_images
        self.failing_passes = set(failing_passes)
        self._title = title
        self._content = content
        self.url = ""
        self.extract_calls = 0
        self.scroll_count = 0
        self.closed = False

    async def goto(self, url, wait_until=None, timeout=None):
        if self.goto_error is not None:
            raise self.goto_error
        if self.timeout_on and self.timeout_on in url:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded")
        self.url = url

    async def wait_for_selector(self, selector, timeout=None):
        if self.no_images:
            raise PlaywrightTimeoutError(f"waiting for {selector} failed")

    async def evaluate(self, script, arg=None):
        if script == SCROLL_ONE_SCREEN_JS:
            self.scroll_count += 1
            return None
        index = self.extract_calls
        self.extract_calls += 1
        if index in self.failing_passes:
            raise PlaywrightError("Execution context was destroyed")
        return self.passes[min(index, len(self.passes) - 1)]

    async def title(self):
        return self._title

    async def content(self):
        return self._content

    async def close(self):
        self.closed = True


class FakeContext:
    def __init__(self, page):
        self.page = page
        self.closed = False

    async def new_page(self):
        return self.page

    async def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self, page_factory):
        self.page_factory = page_factory
        self.contexts = []
        self.context_kwargs = []
        self.closed = False

    async def new_context(self, **kwargs):
        self.context_kwargs.append(kwargs)
        context = FakeContext(self.page_factory())
        self.contexts.append(context)
        return context

    async def close(self):
        self.closed = True


class FakeLauncher:
    """Launcher for BrowserSessionManager that hands out FakeBrowsers."""

    def __init__(self, page_factory):
        self.page_factory = page_factory
        self.browsers = []

    async def __call__(self, session_id):
        browser = FakeBrowser(self.page_factory)
        self.browsers.append(browser)
        return BrowserHandle(session_id=session_id, browser=browser)


def make_sessions(page_factory):
    launcher = FakeLauncher(page_factory)
    sessions = BrowserSessionManager(provisioner=BrowserProvisioner(enabled=False), launcher=launcher)
    return sessions, launcher


@pytest.fixture
def fast_collector():
    return ImageCollector(initial_wait_timeout_ms=10, initial_settle_seconds=0, scroll_sleep=0)
