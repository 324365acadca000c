"""
Scroll-and-extract loop for Pinterest search result pages.
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, List

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from utils.logger import setup_logger
from config import (
    IMAGE_WAIT_TIMEOUT_MS,
    INITIAL_SETTLE_SECONDS,
    MIN_ACCEPTED_WIDTH,
    MIN_SCROLL_ROUNDS,
    OVERCOLLECT_FACTOR,
    PINTEREST_IMAGE_SELECTOR,
    SCROLL_ROUNDS_DIVISOR,
    SCROLL_ROUNDS_PADDING,
    SCROLL_SLEEP,
)
from pipeline.ai_filter.quality_ranker import canonicalize_url, classify_url, is_acceptable
from .errors import ExtractionError
from .models import ImageCandidate, RankedImage

logger = setup_logger(__name__)

# Reads live DOM attributes only; naturalWidth is 0 until the image decodes
EXTRACT_IMAGES_JS = """
(selector) => {
    const records = [];
    document.querySelectorAll(selector).forEach(img => {
        if (!img.src) {
            return;
        }
        const link = img.closest('a');
        records.push({
            imageUrl: img.src,
            title: img.alt || '',
            sourceUrl: link ? link.href : '',
            width: img.naturalWidth || 0,
            height: img.naturalHeight || 0,
        });
    });
    return records;
}
"""

SCROLL_ONE_SCREEN_JS = "() => window.scrollBy(0, window.innerHeight)"


class ImageCollector:
    """
    Accumulates deduplicated, quality-filtered image candidates from a page
    that lazily loads more results as it is scrolled.

    The loop stops once `count * overcollect_factor` images are held, or after
    max_scroll_attempts(count) scrolls, whichever comes first.
    """

    def __init__(
        self,
        image_selector: str = PINTEREST_IMAGE_SELECTOR,
        initial_wait_timeout_ms: int = IMAGE_WAIT_TIMEOUT_MS,
        initial_settle_seconds: float = INITIAL_SETTLE_SECONDS,
        scroll_sleep: float = SCROLL_SLEEP,
        overcollect_factor: int = OVERCOLLECT_FACTOR,
        min_scroll_rounds: int = MIN_SCROLL_ROUNDS,
        scroll_rounds_divisor: int = SCROLL_ROUNDS_DIVISOR,
        scroll_rounds_padding: int = SCROLL_ROUNDS_PADDING,
        min_accepted_width: int = MIN_ACCEPTED_WIDTH,
    ):
        self.image_selector = image_selector
        self.initial_wait_timeout_ms = initial_wait_timeout_ms
        self.initial_settle_seconds = initial_settle_seconds
        self.scroll_sleep = scroll_sleep
        self.overcollect_factor = overcollect_factor
        self.min_scroll_rounds = min_scroll_rounds
        self.scroll_rounds_divisor = max(scroll_rounds_divisor, 1)
        self.scroll_rounds_padding = scroll_rounds_padding
        self.min_accepted_width = min_accepted_width

    def target_count(self, count: int) -> int:
        return count * self.overcollect_factor

    def max_scroll_attempts(self, count: int) -> int:
        return max(self.min_scroll_rounds, count // self.scroll_rounds_divisor + self.scroll_rounds_padding)

    async def collect(self, page: Any, count: int) -> List[RankedImage]:
        """
        Run the scroll-collect loop against a loaded search page.

        Returns:
            Accepted candidates in extraction order (possibly empty).
            Never raises on zero results.
        """
        if not await self._wait_for_images(page):
            return []

        target = self.target_count(count)
        max_attempts = self.max_scroll_attempts(count)
        accepted: List[RankedImage] = []
        seen = set()
        scroll_attempts = 0

        while len(accepted) < target and scroll_attempts < max_attempts:
            try:
                records = await self._extract(page)
            except ExtractionError as e:
                logger.warning(f"{e}; treating this pass as empty")
                records = []

            logger.debug(f"Extraction pass {scroll_attempts + 1}: {len(records)} image elements")
            for record in records:
                image = self._accept(record, seen)
                if image is not None:
                    accepted.append(image)

            logger.info(f"Collected {len(accepted)}/{target} images after {scroll_attempts} scrolls")

            await self._scroll(page)
            scroll_attempts += 1

        logger.info(f"Scroll-collect finished: {len(accepted)} images, {scroll_attempts} scrolls")
        return accepted

    def _accept(self, record: Dict[str, Any], seen: set) -> RankedImage | None:
        candidate = ImageCandidate.from_record(record)
        url = canonicalize_url(candidate.image_url)
        if not url or url in seen:
            return None

        tier = classify_url(url)
        candidate = candidate.model_copy(update={"image_url": url})
        if not is_acceptable(candidate, tier, self.min_accepted_width):
            logger.debug(f"Skipping low quality image: {candidate.width}x{candidate.height}")
            return None

        seen.add(url)
        return RankedImage(**candidate.model_dump(), quality=tier)

    async def _wait_for_images(self, page: Any) -> bool:
        try:
            await page.wait_for_selector("img", timeout=self.initial_wait_timeout_ms)
        except PlaywrightTimeoutError:
            logger.warning(f"No images appeared within {self.initial_wait_timeout_ms}ms")
            return False
        logger.info("Page loaded, waiting for images to settle...")
        await asyncio.sleep(self.initial_settle_seconds)
        return True

    async def _extract(self, page: Any) -> List[Dict[str, Any]]:
        try:
            records = await page.evaluate(EXTRACT_IMAGES_JS, self.image_selector)
        except PlaywrightError as e:
            raise ExtractionError(f"Image extraction failed: {e}") from e
        if not isinstance(records, list):
            return []
        return records

    async def _scroll(self, page: Any) -> None:
        try:
            await page.evaluate(SCROLL_ONE_SCREEN_JS)
        except PlaywrightError as e:
            logger.debug(f"Scroll failed: {e}")
        await asyncio.sleep(self.scroll_sleep)
