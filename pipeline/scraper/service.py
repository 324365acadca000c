"""
Operations consumed by the API layer.

All three scrape operations are total: they always return a result record
with a success flag and never raise past this boundary.
"""
from typing import Optional, Sequence

from utils.logger import setup_logger
from config import DEFAULT_IMAGE_COUNT
from .browser import BrowserSessionManager
from .collector import BatchOrchestrator
from .image_collector import ImageCollector
from .models import BatchResult, PageResult, QueryResult
from .navigator import PageNavigator
from .page_scraper import PageScraper
from .pinterest_scraper import PinterestScraper
from .utils import ImageDownloader

logger = setup_logger(__name__)


class ScraperService:
    """Wires the scrapers to one shared BrowserSessionManager."""

    def __init__(
        self,
        sessions: Optional[BrowserSessionManager] = None,
        navigator: Optional[PageNavigator] = None,
        collector: Optional[ImageCollector] = None,
        downloader: Optional[ImageDownloader] = None,
    ):
        self.sessions = sessions or BrowserSessionManager()
        navigator = navigator or PageNavigator()
        self.page_scraper = PageScraper(self.sessions, navigator)
        self.pinterest = PinterestScraper(self.sessions, navigator, collector, downloader)
        self.batch = BatchOrchestrator(self.pinterest)

    async def scrape_page(self, url: str) -> PageResult:
        return await self.page_scraper.scrape(url)

    async def scrape_image_search(self, query: str, count: int = DEFAULT_IMAGE_COUNT,
                                  download: bool = False) -> QueryResult:
        try:
            return await self.pinterest.scrape(query, count, download)
        except Exception as e:
            logger.exception(f"Error in Pinterest scraping for '{query}'")
            return QueryResult.failed(query, str(e) or type(e).__name__)

    async def scrape_image_search_batch(self, queries: Sequence[str], count_per_query: int = DEFAULT_IMAGE_COUNT,
                                        download: bool = False) -> BatchResult:
        try:
            return await self.batch.run(queries, count_per_query, download)
        except Exception as e:
            logger.exception("Error in batch Pinterest scraping")
            return BatchResult.failed(str(e) or type(e).__name__)

    async def aclose(self) -> None:
        """Close any browser a scrape failed to release."""
        logger.info("Disposing ScraperService")
        await self.sessions.shutdown()

    async def __aenter__(self) -> "ScraperService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
