"""Tests for the optional image download step."""

import asyncio

import aiohttp
import pytest

from pipeline.scraper import utils as download_utils
from pipeline.scraper.errors import DownloadError
from pipeline.scraper.utils import ImageDownloader, extension_for


class FakeResponse:
    def __init__(self, status, body=b"", content_type="image/jpeg"):
        self.status = status
        self._body = body
        self.headers = {"Content-Type": content_type}

    async def read(self):
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Replays one scripted response (or exception) per GET."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requested = []

    def get(self, url, **kwargs):
        self.requested.append(url)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def no_backoff(monkeypatch):
    async def instant(_delay):
        return None
    monkeypatch.setattr(download_utils.asyncio, "sleep", instant)


@pytest.mark.parametrize("content_type,ext", [
    ("image/jpeg", ".jpg"),
    ("image/png", ".png"),
    ("image/webp; charset=binary", ".webp"),
    ("image/gif", ".gif"),
    ("application/octet-stream", ".jpg"),
    (None, ".jpg"),
])
def test_extension_for(content_type, ext):
    assert extension_for(content_type) == ext


@pytest.mark.asyncio
async def test_download_writes_file(tmp_path):
    session = FakeSession(FakeResponse(200, b"\x89PNG", "image/png"))
    downloader = ImageDownloader(dest_dir=str(tmp_path))

    path = await downloader.download(session, "https://i.pinimg.com/originals/a.png", "glass igloo: night?", 3)

    assert path is not None
    assert path.endswith(".png")
    name = path.rsplit("/", 1)[-1]
    assert name.startswith("glass igloo_ night__3_")
    with open(path, "rb") as f:
        assert f.read() == b"\x89PNG"


@pytest.mark.asyncio
async def test_same_query_and_index_get_distinct_files(tmp_path, monkeypatch):
    """Test two units downloading the same query in the same second keep both images."""
    monkeypatch.setattr(download_utils.time, "time", lambda: 1700000000)
    downloader = ImageDownloader(dest_dir=str(tmp_path))

    first = await downloader.download(FakeSession(FakeResponse(200, b"one")), "https://i.pinimg.com/a.jpg", "aurora", 1)
    second = await downloader.download(FakeSession(FakeResponse(200, b"two")), "https://i.pinimg.com/b.jpg", "aurora", 1)

    assert first != second
    assert len(list(tmp_path.iterdir())) == 2
    with open(first, "rb") as f:
        assert f.read() == b"one"


@pytest.mark.asyncio
async def test_non_retryable_status_returns_none(tmp_path):
    session = FakeSession(FakeResponse(404))
    downloader = ImageDownloader(dest_dir=str(tmp_path), max_retries=3)

    assert await downloader.download(session, "https://i.pinimg.com/x.jpg", "q", 1) is None
    assert len(session.requested) == 1
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_retryable_status_is_retried(tmp_path, no_backoff):
    session = FakeSession(FakeResponse(429), FakeResponse(200, b"jpeg-bytes"))
    downloader = ImageDownloader(dest_dir=str(tmp_path), max_retries=3)

    path = await downloader.download(session, "https://i.pinimg.com/x.jpg", "q", 1)

    assert path is not None
    assert len(session.requested) == 2


@pytest.mark.asyncio
async def test_fetch_gives_up_after_retries(tmp_path, no_backoff):
    session = FakeSession(aiohttp.ClientConnectionError("reset"), asyncio.TimeoutError())
    downloader = ImageDownloader(dest_dir=str(tmp_path), max_retries=2)

    with pytest.raises(DownloadError, match="after 2 attempts"):
        await downloader.fetch(session, "https://i.pinimg.com/x.jpg")
