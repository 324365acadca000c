from typing import List, Optional
from urllib.parse import quote

from utils.logger import setup_logger
from config import PINTEREST_SEARCH_URL, SEARCH_TIMEOUT_MS
from pipeline.ai_filter.quality_ranker import rank_images
from .browser import BrowserSessionManager
from .errors import ScraperError
from .image_collector import ImageCollector
from .models import QueryResult, RankedImage
from .navigator import PageNavigator
from .utils import ImageDownloader

logger = setup_logger(__name__)


def build_search_url(query: str, base_url: str = PINTEREST_SEARCH_URL) -> str:
    return base_url + quote(query, safe="")


class PinterestScraper:
    """Async Playwright-based Pinterest image search scraper"""

    def __init__(
        self,
        sessions: Optional[BrowserSessionManager] = None,
        navigator: Optional[PageNavigator] = None,
        collector: Optional[ImageCollector] = None,
        downloader: Optional[ImageDownloader] = None,
        search_timeout_ms: int = SEARCH_TIMEOUT_MS,
    ):
        self.sessions = sessions or BrowserSessionManager()
        self.navigator = navigator or PageNavigator()
        self.collector = collector or ImageCollector()
        self.downloader = downloader or ImageDownloader()
        self.search_timeout_ms = search_timeout_ms

    async def scrape(self, query: str, count: int, download: bool = False) -> QueryResult:
        """
        Search Pinterest for `query` and return the best `count` images.

        Never raises: launch, navigation and unexpected errors come back as a
        QueryResult with success=False. Download failures are per image and
        do not fail the query.
        """
        logger.info(f"Scraping Pinterest for query: '{query}'")
        try:
            images = await self._scrape_images(query, count)
        except ScraperError as e:
            logger.error(f"Error scraping Pinterest for '{query}': {e}")
            return QueryResult.failed(query, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error scraping Pinterest for '{query}'")
            return QueryResult.failed(query, str(e) or type(e).__name__)

        if download and images:
            images = await self._download(images, query)

        return QueryResult.ok(query, images)

    async def _download(self, images: List[RankedImage], query: str) -> List[RankedImage]:
        """Swap in local copies; any failure keeps the remote URLs."""
        logger.info(f"Downloading {len(images)} images locally...")
        try:
            return await self.downloader.download_all(images, query)
        except Exception:
            logger.exception(f"Download step failed for '{query}', keeping remote URLs")
            return images

    async def _scrape_images(self, query: str, count: int) -> List[RankedImage]:
        url = build_search_url(query)
        async with self.sessions.session() as handle:
            async with await self.navigator.navigate(
                handle,
                url,
                timeout_ms=self.search_timeout_ms,
                spoof_identity=True,
            ) as page_ctx:
                candidates = await self.collector.collect(page_ctx.page, count)

        logger.info(f"Successfully scraped {len(candidates)} images from Pinterest for '{query}'")
        return rank_images(candidates, count)
