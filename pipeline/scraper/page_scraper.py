from typing import Optional

from utils.logger import setup_logger
from config import PAGE_TIMEOUT_MS
from .browser import BrowserSessionManager
from .errors import ScraperError
from .models import PageResult
from .navigator import PageNavigator

logger = setup_logger(__name__)


class PageScraper:
    """Loads any URL in a headless browser and returns its title and HTML."""

    def __init__(
        self,
        sessions: Optional[BrowserSessionManager] = None,
        navigator: Optional[PageNavigator] = None,
        timeout_ms: int = PAGE_TIMEOUT_MS,
    ):
        self.sessions = sessions or BrowserSessionManager()
        self.navigator = navigator or PageNavigator()
        self.timeout_ms = timeout_ms

    async def scrape(self, url: str) -> PageResult:
        logger.info(f"Launching browser for URL: {url}")
        try:
            async with self.sessions.session() as handle:
                async with await self.navigator.navigate(handle, url, timeout_ms=self.timeout_ms) as page_ctx:
                    page = page_ctx.page
                    title = await page.title()
                    content = await page.content()
                    final_url = page.url or url
        except ScraperError as e:
            logger.error(f"Error scraping URL {url}: {e}")
            return PageResult(url=url, success=False, error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error scraping URL {url}")
            return PageResult(url=url, success=False, error=str(e) or type(e).__name__)

        logger.info(f"Successfully scraped {url}")
        return PageResult(
            url=final_url,
            title=title or "",
            content=content or "",
            content_length=len(content or ""),
            success=True,
        )
