from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Mapping

from pydantic import BaseModel, ConfigDict, Field, model_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_int(value: Any) -> int:
    """Parse a DOM dimension; anything missing or malformed counts as 0."""
    if isinstance(value, bool):
        return 0
    if not isinstance(value, (int, float)):
        value = _as_str(value)
    try:
        number = int(float(value))
    except (ValueError, OverflowError):
        return 0
    return max(number, 0)


class QualityTier(str, Enum):
    """Image quality derived from the Pinterest CDN path segment."""
    ORIGINAL = "Original"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    UNKNOWN = "Unknown"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]


_TIER_RANK = {
    QualityTier.ORIGINAL: 4,
    QualityTier.HIGH: 3,
    QualityTier.MEDIUM: 2,
    QualityTier.LOW: 1,
    QualityTier.UNKNOWN: 0,
}


class PageResult(BaseModel):
    """Title and HTML of a single rendered page."""
    model_config = ConfigDict(frozen=True)

    url: str
    title: str = ""
    content: str = ""
    content_length: int = 0
    success: bool
    error: str | None = None
    scraped_at: datetime = Field(default_factory=_utcnow)


class ImageCandidate(BaseModel):
    """An image observed during one extraction pass.

    Fields:
        image_url: Canonical (highest resolution) URL, also the dedup key
        title: Alt text of the <img>
        source_url: Href of the enclosing pin link, if any
        width, height: naturalWidth/naturalHeight, 0 when not yet decoded
    """
    model_config = ConfigDict(frozen=True)

    image_url: str
    title: str = ""
    source_url: str | None = None
    width: int = 0
    height: int = 0

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ImageCandidate":
        """Build a candidate from one in-page extraction record.

        Missing or empty fields default to "" / 0 instead of raising.
        """
        if not isinstance(record, Mapping):
            record = {}
        return cls(
            image_url=_as_str(record.get("imageUrl")),
            title=_as_str(record.get("title")),
            source_url=_as_str(record.get("sourceUrl")) or None,
            width=_as_int(record.get("width")),
            height=_as_int(record.get("height")),
        )


class RankedImage(ImageCandidate):
    """A selected image with its quality tier and download state."""
    quality: QualityTier = QualityTier.UNKNOWN
    downloaded: bool = False
    local_file_path: str | None = None


class QueryResult(BaseModel):
    """Outcome of one image search."""
    model_config = ConfigDict(frozen=True)

    query: str
    images: List[RankedImage] = Field(default_factory=list)
    image_count: int = 0
    success: bool
    error: str | None = None
    scraped_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _check_count(self) -> "QueryResult":
        if self.image_count != len(self.images):
            raise ValueError(
                f"image_count ({self.image_count}) does not match {len(self.images)} images"
            )
        return self

    @classmethod
    def ok(cls, query: str, images: List[RankedImage]) -> "QueryResult":
        return cls(query=query, images=list(images), image_count=len(images), success=True)

    @classmethod
    def failed(cls, query: str, error: str) -> "QueryResult":
        return cls(query=query, images=[], image_count=0, success=False, error=error)


class BatchResult(BaseModel):
    """Aggregated results of a batch, in submission order."""
    model_config = ConfigDict(frozen=True)

    results: List[QueryResult] = Field(default_factory=list)
    total_queries: int = 0
    total_images: int = 0
    success: bool
    error: str | None = None
    scraped_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_results(cls, results: List[QueryResult]) -> "BatchResult":
        return cls(
            results=list(results),
            total_queries=len(results),
            total_images=sum(r.image_count for r in results),
            success=True,
        )

    @classmethod
    def failed(cls, error: str) -> "BatchResult":
        return cls(success=False, error=error)
