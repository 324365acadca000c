"""
Error taxonomy for the scraping pipeline.

Errors are raised inside a scrape and converted into result records
(success=False, error=message) at the per-image and per-query boundaries.
"""


class ScraperError(Exception):
    """Base class for all scraper failures."""


class InvalidRequestError(ScraperError, ValueError):
    """Input rejected before any scrape was dispatched."""


class LaunchError(ScraperError):
    """The headless browser could not be provisioned or started."""


class NavigationError(ScraperError):
    """A page failed to load."""


class NavigationTimeout(NavigationError):
    """A page did not settle within its navigation timeout."""


class ExtractionError(ScraperError):
    """In-page evaluation failed; callers treat it as zero images found."""


class DownloadError(ScraperError):
    """A single image could not be fetched or written."""


class BatchUnitFailure(ScraperError):
    """Unexpected failure inside one batch query."""

    def __init__(self, query: str, cause: BaseException):
        super().__init__(str(cause) or type(cause).__name__)
        self.query = query
        self.cause = cause
