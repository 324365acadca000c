"""
Scraper subpackage for pipeline.
Contains the Playwright-based Pinterest and page scrapers and the batch orchestrator.
"""
from .pinterest_scraper import PinterestScraper
from .collector import BatchOrchestrator, collect_images_for_queries
from .service import ScraperService

__all__ = ["PinterestScraper", "BatchOrchestrator", "collect_images_for_queries", "ScraperService"]
