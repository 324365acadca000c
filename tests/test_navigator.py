"""Tests for page navigation and its timeout bound."""

import asyncio

import pytest

from pipeline.scraper.browser import BrowserHandle
from pipeline.scraper.errors import NavigationError, NavigationTimeout
from pipeline.scraper.navigator import PageContext, PageNavigator

from conftest import FakeBrowser, FakeContext, FakePage


class SlowPage(FakePage):
    """Records the timeout handed to each wait; goto takes `load_seconds`."""

    def __init__(self, load_seconds=0.0, **kwargs):
        super().__init__(**kwargs)
        self.load_seconds = load_seconds
        self.timeouts = []

    async def goto(self, url, wait_until=None, timeout=None):
        self.timeouts.append(("goto", timeout))
        await asyncio.sleep(self.load_seconds)
        await super().goto(url, wait_until=wait_until, timeout=timeout)

    async def wait_for_selector(self, selector, timeout=None):
        self.timeouts.append(("wait_for_selector", timeout))
        await super().wait_for_selector(selector, timeout=timeout)


class BrokenClosePage(FakePage):
    async def close(self):
        raise RuntimeError("target closed")


def handle_for(page):
    return BrowserHandle(session_id="s1", browser=FakeBrowser(lambda: page))


@pytest.mark.asyncio
async def test_selector_wait_gets_only_the_remaining_budget():
    page = SlowPage(load_seconds=0.3)

    page_ctx = await PageNavigator().navigate(handle_for(page), "https://example.com", timeout_ms=1000, wait_for="img")

    assert page.timeouts[0] == ("goto", 1000)
    name, selector_timeout = page.timeouts[1]
    assert name == "wait_for_selector"
    assert 0 < selector_timeout <= 750
    await page_ctx.close()


@pytest.mark.asyncio
async def test_exhausted_budget_times_out_without_selector_wait():
    page = SlowPage(load_seconds=0.1)
    handle = handle_for(page)

    with pytest.raises(NavigationTimeout, match="50ms"):
        await PageNavigator().navigate(handle, "https://example.com", timeout_ms=50, wait_for="img")

    assert [name for name, _ in page.timeouts] == ["goto"]
    assert page.closed
    assert handle.browser.contexts[0].closed


@pytest.mark.asyncio
async def test_plain_navigation_uses_wait_until():
    page = SlowPage()

    page_ctx = await PageNavigator().navigate(handle_for(page), "https://example.com", timeout_ms=1000)

    assert page.timeouts == [("goto", 1000)]
    assert page_ctx.page.url == "https://example.com"


@pytest.mark.asyncio
async def test_selector_timeout_maps_to_navigation_timeout():
    page = SlowPage(no_images=True)

    with pytest.raises(NavigationTimeout):
        await PageNavigator().navigate(handle_for(page), "https://example.com", timeout_ms=1000, wait_for="img")

    assert page.closed


def test_navigation_timeout_is_a_navigation_error():
    assert issubclass(NavigationTimeout, NavigationError)


@pytest.mark.asyncio
async def test_close_errors_do_not_stop_context_close():
    page = BrokenClosePage()
    context = FakeContext(page)

    await PageContext(context, page).close()

    assert context.closed
