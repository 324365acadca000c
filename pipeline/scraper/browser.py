"""
Headless browser lifecycle.
One isolated Playwright + Chromium instance per scrape, a process-wide
one-time Chromium install, and a registry of live sessions so that shutdown
can close anything a caller left behind.
"""
from __future__ import annotations

import asyncio
import sys
import threading
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional

from playwright.async_api import async_playwright

from utils.logger import setup_logger
from config import BROWSER_ARGS, PLAYWRIGHT_AUTO_INSTALL, PLAYWRIGHT_HEADFUL
from .errors import LaunchError

logger = setup_logger(__name__)


@dataclass
class BrowserHandle:
    """A launched browser owned by exactly one scrape."""
    session_id: str
    browser: Any
    playwright: Any = None

    async def close(self) -> None:
        try:
            await self.browser.close()
        finally:
            if self.playwright is not None:
                await self.playwright.stop()


class BrowserProvisioner:
    """Runs `playwright install chromium` at most once.

    Concurrent first callers wait on the same lock instead of starting a
    second install.
    """

    def __init__(self, enabled: bool = PLAYWRIGHT_AUTO_INSTALL, command: Optional[List[str]] = None):
        self.enabled = enabled
        self.command = command or [sys.executable, "-m", "playwright", "install", "chromium"]
        self._done = False
        self._lock: Optional[asyncio.Lock] = None

    @property
    def provisioned(self) -> bool:
        return self._done or not self.enabled

    async def ensure(self) -> None:
        if self.provisioned:
            return
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if self._done:
                return
            await self._install()
            self._done = True

    async def _install(self) -> None:
        logger.info("Installing Chromium for Playwright...")
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
            output, _ = await proc.communicate()
        except OSError as e:
            raise LaunchError(f"Could not run browser install: {e}") from e
        if proc.returncode != 0:
            tail = output.decode("utf-8", errors="replace")[-500:] if output else ""
            raise LaunchError(f"Browser install exited with {proc.returncode}: {tail}")
        logger.info("Chromium installed successfully")


# Shared by every session manager in the process; only reached through acquire()
_PROVISIONER = BrowserProvisioner()

Launcher = Callable[[str], Awaitable[BrowserHandle]]


class BrowserSessionManager:
    """Launches, tracks and disposes headless browsers."""

    def __init__(
        self,
        headless: bool = not PLAYWRIGHT_HEADFUL,
        browser_args: Optional[List[str]] = None,
        provisioner: Optional[BrowserProvisioner] = None,
        launcher: Optional[Launcher] = None,
    ):
        self.headless = headless
        self.browser_args = list(browser_args if browser_args is not None else BROWSER_ARGS)
        self._provisioner = provisioner or _PROVISIONER
        self._launcher = launcher or self._launch_chromium
        self._sessions: Dict[str, BrowserHandle] = {}
        self._registry_lock = threading.Lock()

    @property
    def active_sessions(self) -> int:
        with self._registry_lock:
            return len(self._sessions)

    async def acquire(self) -> BrowserHandle:
        """Provision (first call only) and launch a fresh browser.

        Raises:
            LaunchError: install or launch failed. Never retried here.
        """
        try:
            await self._provisioner.ensure()
        except LaunchError:
            raise
        except Exception as e:
            raise LaunchError(f"Browser provisioning failed: {e}") from e

        session_id = uuid.uuid4().hex[:12]
        try:
            handle = await self._launcher(session_id)
        except LaunchError:
            raise
        except Exception as e:
            raise LaunchError(f"Failed to launch browser: {e}") from e

        with self._registry_lock:
            self._sessions[handle.session_id] = handle
        logger.debug(f"[browser] Launched session {handle.session_id}")
        return handle

    async def release(self, handle: BrowserHandle) -> None:
        with self._registry_lock:
            self._sessions.pop(handle.session_id, None)
        try:
            await handle.close()
            logger.debug(f"[browser] Closed session {handle.session_id}")
        except Exception as e:
            logger.warning(f"[browser] Error closing session {handle.session_id}: {e}")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[BrowserHandle]:
        """Acquire a browser and release it on every exit path."""
        handle = await self.acquire()
        try:
            yield handle
        finally:
            await self.release(handle)

    async def shutdown(self) -> None:
        """Force-close every session that was never released."""
        with self._registry_lock:
            stragglers = list(self._sessions.values())
            self._sessions.clear()
        if not stragglers:
            return
        logger.info(f"[browser] Cleaning up {len(stragglers)} active browser session(s)")
        for handle in stragglers:
            try:
                await handle.close()
            except Exception as e:
                logger.warning(f"[browser] Error disposing session {handle.session_id}: {e}")

    async def _launch_chromium(self, session_id: str) -> BrowserHandle:
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(headless=self.headless, args=self.browser_args)
        except Exception:
            await playwright.stop()
            raise
        return BrowserHandle(session_id=session_id, browser=browser, playwright=playwright)
