"""
Configuration settings for the Pinterest image scraper.
Contains paths, browser settings, collection tuning and download parameters.

Every value can be overridden through the environment or a .env file
(see .env.example). Never commit .env to version control.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


# ------------------------------------------------------------
# File paths (directories, not individual files)
# ------------------------------------------------------------
IMAGE_DOWNLOAD_DIR = os.getenv("IMAGE_DOWNLOAD_DIR", "data/downloaded_images")
LOG_DIR = os.getenv("LOG_DIR", "data/logs")

# ------------------------------------------------------------
# Browser settings
# ------------------------------------------------------------
PLAYWRIGHT_HEADFUL = _env_bool("PLAYWRIGHT_HEADFUL", "False")  # debug mode for scraping
# Run `playwright install chromium` once per process before the first launch
PLAYWRIGHT_AUTO_INSTALL = _env_bool("PLAYWRIGHT_AUTO_INSTALL", "True")
BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-blink-features=AutomationControlled",
]
USER_AGENT = os.getenv(
    "USER_AGENT",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36",
)
VIEWPORT = {"width": 1920, "height": 1080}

# ------------------------------------------------------------
# Timeouts (milliseconds, Playwright convention)
# ------------------------------------------------------------
PAGE_TIMEOUT_MS = int(os.getenv("PAGE_TIMEOUT_MS", "30000"))        # generic page scrape
SEARCH_TIMEOUT_MS = int(os.getenv("SEARCH_TIMEOUT_MS", "60000"))    # Pinterest search page
IMAGE_WAIT_TIMEOUT_MS = int(os.getenv("IMAGE_WAIT_TIMEOUT_MS", "30000"))  # first <img> to appear

# ------------------------------------------------------------
# Scroll-collect settings
# ------------------------------------------------------------
PINTEREST_SEARCH_URL = "https://www.pinterest.com/search/pins/?q="
PINTEREST_IMAGE_SELECTOR = 'img[src*="pinimg"]'
INITIAL_SETTLE_SECONDS = float(os.getenv("INITIAL_SETTLE_SECONDS", "3.0"))  # pause once images appear
SCROLL_SLEEP = float(os.getenv("SCROLL_SLEEP", "1.5"))                      # time between scrolls

# Empirically tuned: collect twice the requested count so the ranker has a
# surplus, and scroll at most max(MIN_SCROLL_ROUNDS, count // DIVISOR + PADDING) times
OVERCOLLECT_FACTOR = int(os.getenv("OVERCOLLECT_FACTOR", "2"))
MIN_SCROLL_ROUNDS = int(os.getenv("MIN_SCROLL_ROUNDS", "20"))
SCROLL_ROUNDS_DIVISOR = int(os.getenv("SCROLL_ROUNDS_DIVISOR", "3"))
SCROLL_ROUNDS_PADDING = int(os.getenv("SCROLL_ROUNDS_PADDING", "5"))

# Images narrower than this are dropped unless the URL says High/Original
MIN_ACCEPTED_WIDTH = int(os.getenv("MIN_ACCEPTED_WIDTH", "474"))

# ------------------------------------------------------------
# Request limits / batch settings
# ------------------------------------------------------------
DEFAULT_IMAGE_COUNT = 20
MAX_IMAGE_COUNT = 100
MAX_BATCH_QUERIES = 50
# 0 = full fan-out (one browser per query, all at once)
MAX_CONCURRENT_SCRAPER = int(os.getenv("MAX_CONCURRENT_SCRAPER", "0"))

# ------------------------------------------------------------
# Image download settings
# ------------------------------------------------------------
LOCAL_IMAGE_URL_PREFIX = "/images"
DOWNLOAD_TIMEOUT = int(os.getenv("DOWNLOAD_TIMEOUT", "45"))  # seconds
DOWNLOAD_MAX_RETRIES = int(os.getenv("DOWNLOAD_MAX_RETRIES", "3"))
DOWNLOAD_REFERER = "https://www.pinterest.com/"

# ------------------------------------------------------------
# Logging
# ------------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
