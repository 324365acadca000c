"""
Pipeline package for the Pinterest image scraper.
Groups input parsing, scraping, ranking and batch orchestration.
"""
from .scraper import PinterestScraper, BatchOrchestrator, ScraperService, collect_images_for_queries
from .ai_filter import rank_images

__all__ = [
    "PinterestScraper",
    "BatchOrchestrator",
    "ScraperService",
    "collect_images_for_queries",
    "rank_images",
]
