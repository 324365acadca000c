"""
Page loading with bounded waits.
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from utils.logger import setup_logger
from config import PAGE_TIMEOUT_MS, USER_AGENT, VIEWPORT
from .browser import BrowserHandle
from .errors import NavigationError, NavigationTimeout

logger = setup_logger(__name__)


class PageContext:
    """A loaded page and the browser context that owns it."""

    def __init__(self, context: Any, page: Any):
        self.context = context
        self.page = page

    async def close(self) -> None:
        try:
            await self.page.close()
        except Exception as e:
            logger.warning(f"Error closing page: {e}")
        try:
            await self.context.close()
        except Exception as e:
            logger.warning(f"Error closing browser context: {e}")

    async def __aenter__(self) -> "PageContext":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


class PageNavigator:
    """Opens a fresh browser context and loads a URL into it.

    With spoof_identity=True the context gets a desktop Chrome user agent and a
    fixed viewport, which Pinterest needs to serve the full grid.
    """

    def __init__(self, user_agent: str = USER_AGENT, viewport: Optional[Dict[str, int]] = None):
        self.user_agent = user_agent
        self.viewport = dict(viewport or VIEWPORT)

    async def navigate(
        self,
        handle: BrowserHandle,
        url: str,
        wait_until: str = "networkidle",
        timeout_ms: int = PAGE_TIMEOUT_MS,
        wait_for: Optional[str] = None,
        spoof_identity: bool = False,
    ) -> PageContext:
        """
        Load `url` and wait for network quiescence or the `wait_for` selector.

        timeout_ms bounds the whole wait: with `wait_for`, the selector wait
        only gets what the page load left over.

        Raises:
            NavigationTimeout: the page did not settle within timeout_ms
            NavigationError: any other load failure
        """
        context_kwargs: Dict[str, Any] = {}
        if spoof_identity:
            context_kwargs = {"user_agent": self.user_agent, "viewport": self.viewport}

        try:
            context = await handle.browser.new_context(**context_kwargs)
            page = await context.new_page()
        except PlaywrightError as e:
            raise NavigationError(f"Could not open page for {url}: {e}") from e

        page_ctx = PageContext(context, page)
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_ms / 1000
        try:
            logger.info(f"Navigating: {url}")
            if wait_for:
                await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
                remaining_ms = int((deadline - loop.time()) * 1000)
                # Playwright reads timeout=0 as no timeout at all
                if remaining_ms <= 0:
                    raise PlaywrightTimeoutError(f"No time left to wait for {wait_for}")
                await page.wait_for_selector(wait_for, timeout=remaining_ms)
            else:
                await page.goto(url, wait_until=wait_until, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            await page_ctx.close()
            raise NavigationTimeout(f"Timed out after {timeout_ms}ms loading {url}") from e
        except PlaywrightError as e:
            await page_ctx.close()
            raise NavigationError(f"Error loading {url}: {e}") from e
        return page_ctx
