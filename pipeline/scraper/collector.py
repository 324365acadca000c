import asyncio
from typing import Optional, Sequence

from utils.logger import setup_logger
from config import MAX_CONCURRENT_SCRAPER
from .errors import BatchUnitFailure, InvalidRequestError
from .models import BatchResult, QueryResult
from .pinterest_scraper import PinterestScraper

logger = setup_logger(__name__)


class BatchOrchestrator:
    """
    Runs one Pinterest scrape per query concurrently.

    Every query is its own asyncio task. A failing query is turned into a
    failed QueryResult at its own boundary; siblings keep running. Results
    come back in submission order.
    """

    def __init__(self, scraper: Optional[PinterestScraper] = None,
                 max_concurrent: int = MAX_CONCURRENT_SCRAPER):
        self.scraper = scraper or PinterestScraper()
        # 0 or less = full fan-out
        self.max_concurrent = max_concurrent

    async def run(self, queries: Sequence[str], count_per_query: int, download: bool = False) -> BatchResult:
        try:
            queries = self._validate(queries, count_per_query)
        except InvalidRequestError as e:
            logger.error(f"Rejected batch before dispatch: {e}")
            return BatchResult.failed(str(e))

        total = len(queries)
        logger.info(f"Starting parallel batch Pinterest scraping for {total} queries")
        semaphore = asyncio.Semaphore(self.max_concurrent) if self.max_concurrent > 0 else None

        async def scrape_query(index: int, query: str) -> QueryResult:
            logger.info(f"Starting query {index + 1}/{total}: '{query}'")
            try:
                if semaphore is None:
                    result = await self.scraper.scrape(query, count_per_query, download)
                else:
                    async with semaphore:
                        result = await self.scraper.scrape(query, count_per_query, download)
            except Exception as e:
                failure = BatchUnitFailure(query, e)
                logger.error(f"Error scraping Pinterest for query '{query}': {failure}")
                return QueryResult.failed(query, str(failure))
            logger.info(f"Completed query {index + 1}/{total}: '{query}' - {result.image_count} images")
            return result

        results = await asyncio.gather(*(scrape_query(i, q) for i, q in enumerate(queries)))

        batch = BatchResult.from_results(list(results))
        logger.info(
            f"Batch scraping completed. {sum(1 for r in batch.results if r.success)}/{total} "
            f"queries succeeded, total images: {batch.total_images}"
        )
        return batch

    @staticmethod
    def _validate(queries: Sequence[str], count_per_query: int) -> list:
        if isinstance(queries, str) or queries is None:
            raise InvalidRequestError("queries must be a sequence of strings")
        queries = list(queries)
        if not all(isinstance(q, str) and q.strip() for q in queries):
            raise InvalidRequestError("every query must be a non-empty string")
        if not isinstance(count_per_query, int) or isinstance(count_per_query, bool) or count_per_query <= 0:
            raise InvalidRequestError("count_per_query must be a positive integer")
        return queries


async def collect_images_for_queries(
    queries: Sequence[str],
    count_per_query: int,
    download: bool = False,
    scraper: Optional[PinterestScraper] = None,
) -> BatchResult:
    """Convenience wrapper: run one batch with a throwaway orchestrator."""
    return await BatchOrchestrator(scraper).run(queries, count_per_query, download)
