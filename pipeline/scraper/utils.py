import asyncio
import random
import time
import uuid
from pathlib import Path
from typing import Dict, List, Optional

import aiofiles
import aiohttp
from aiohttp import ClientTimeout

from utils.logger import setup_logger
from utils.helpers import ensure_directory, safe_filename
from config import (
    DOWNLOAD_MAX_RETRIES,
    DOWNLOAD_REFERER,
    DOWNLOAD_TIMEOUT,
    IMAGE_DOWNLOAD_DIR,
    LOCAL_IMAGE_URL_PREFIX,
    USER_AGENT,
)
from .errors import DownloadError
from .models import RankedImage

logger = setup_logger(__name__)

DOWNLOAD_HEADERS = {
    "User-Agent": USER_AGENT,
    "Referer": DOWNLOAD_REFERER,
    "Accept": "image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8",
}

CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

RETRYABLE_STATUSES = (403, 429, 500, 503)


def extension_for(content_type: Optional[str]) -> str:
    media_type = (content_type or "").split(";")[0].strip().lower()
    return CONTENT_TYPE_EXTENSIONS.get(media_type, ".jpg")


def with_download(image: RankedImage, local_path: Optional[str],
                  url_prefix: str = LOCAL_IMAGE_URL_PREFIX) -> RankedImage:
    """Return a copy of `image` carrying the download outcome.

    On success the image URL points at the locally served file; on failure
    the remote URL is kept and downloaded stays False.
    """
    if not local_path:
        return image.model_copy(update={"downloaded": False, "local_file_path": None})
    return image.model_copy(update={
        "image_url": f"{url_prefix.rstrip('/')}/{Path(local_path).name}",
        "local_file_path": local_path,
        "downloaded": True,
    })


class ImageDownloader:
    """Fetches image bytes with browser-like headers and stores them on disk."""

    def __init__(
        self,
        dest_dir: str = IMAGE_DOWNLOAD_DIR,
        max_retries: int = DOWNLOAD_MAX_RETRIES,
        timeout: int = DOWNLOAD_TIMEOUT,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.dest_dir = Path(dest_dir)
        self.max_retries = max(max_retries, 1)
        self.timeout = ClientTimeout(total=timeout, connect=10)
        self.headers = dict(headers or DOWNLOAD_HEADERS)

    async def fetch(self, session: aiohttp.ClientSession, url: str) -> tuple[bytes, str]:
        """
        GET an image, retrying throttling/server errors with capped backoff.

        Returns:
            (body, content_type)

        Raises:
            DownloadError: non-retryable status, or retries exhausted
        """
        last_error = "no attempt made"
        for attempt in range(1, self.max_retries + 1):
            try:
                async with session.get(url, allow_redirects=True) as resp:
                    if resp.status == 200:
                        return await resp.read(), resp.headers.get("Content-Type", "image/jpeg")
                    if resp.status not in RETRYABLE_STATUSES:
                        raise DownloadError(f"Bad status {resp.status} for {url}")
                    last_error = f"status {resp.status}"
                    logger.warning(f"Retryable {resp.status} for {url} (attempt {attempt})")
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_error = str(e) or type(e).__name__
                logger.warning(f"Attempt {attempt} failed for {url}: {last_error}")

            if attempt < self.max_retries:
                delay = min(2 ** attempt + random.uniform(0, 2), 10)
                logger.info(f"Retrying {url} in {delay:.1f}s...")
                await asyncio.sleep(delay)

        raise DownloadError(f"Giving up on {url} after {self.max_retries} attempts: {last_error}")

    async def download(self, session: aiohttp.ClientSession, url: str, query: str, index: int) -> Optional[str]:
        """Download one image; returns the local file path, or None on any failure."""
        try:
            body, content_type = await self.fetch(session, url)
            ensure_directory(str(self.dest_dir))
            filename = f"{safe_filename(query)}_{index}_{int(time.time())}_{uuid.uuid4().hex[:8]}{extension_for(content_type)}"
            path = self.dest_dir / filename
            async with aiofiles.open(path, "wb") as f:
                await f.write(body)
        except DownloadError as e:
            logger.warning(str(e))
            return None
        except OSError as e:
            logger.error(f"Error saving image from {url}: {e}")
            return None
        logger.info(f"Downloaded image to: {path}")
        return str(path)

    async def download_all(self, images: List[RankedImage], query: str) -> List[RankedImage]:
        """Download images in order; failures leave the remote URL untouched."""
        updated: List[RankedImage] = []
        async with aiohttp.ClientSession(headers=self.headers, timeout=self.timeout) as session:
            for i, image in enumerate(images, start=1):
                local_path = await self.download(session, image.image_url, query, i)
                updated.append(with_download(image, local_path))
        logger.info(f"Downloaded {sum(1 for i in updated if i.downloaded)}/{len(updated)} images for '{query}'")
        return updated
