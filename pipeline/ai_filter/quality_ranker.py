"""
Heuristic image quality ranking.
Classifies Pinterest image URLs by their CDN size segment and orders
candidates by tier, then pixel area, then shortest side. No image decoding.
"""

import re
from typing import Iterable, List, Optional, Sequence

from utils.logger import setup_logger
from pipeline.scraper.models import ImageCandidate, QualityTier, RankedImage
from config import MIN_ACCEPTED_WIDTH

logger = setup_logger(__name__)

ORIGINALS_SEGMENT = "/originals/"
# Checked in order; only the first match is rewritten
LOW_RES_SEGMENTS = ("/236x/", "/474x/", "/736x/")

# e.g. /236x/, /1200x/, /75x75_RS/
_SIZE_SEGMENT = re.compile(r"/(\d+)x[^/]*/")


def canonicalize_url(url: str, segments: Sequence[str] = LOW_RES_SEGMENTS) -> str:
    """Rewrite a low-resolution size segment to /originals/."""
    if not url:
        return ""
    for segment in segments:
        if segment in url:
            return url.replace(segment, ORIGINALS_SEGMENT)
    return url


def classify_url(url: str) -> QualityTier:
    """
    Map an image URL to a quality tier.

    /originals/ is Original; otherwise the numeric size segment decides:
    >= 736 High, >= 474 Medium, anything smaller Low. No segment is Unknown.
    """
    if not url:
        return QualityTier.UNKNOWN
    if ORIGINALS_SEGMENT in url:
        return QualityTier.ORIGINAL
    match = _SIZE_SEGMENT.search(url)
    if not match:
        return QualityTier.UNKNOWN
    size = int(match.group(1))
    if size >= 736:
        return QualityTier.HIGH
    if size >= 474:
        return QualityTier.MEDIUM
    return QualityTier.LOW


def is_acceptable(candidate: ImageCandidate, tier: Optional[QualityTier] = None,
                  min_width: int = MIN_ACCEPTED_WIDTH) -> bool:
    """Keep wide images, images not yet decoded (width 0) and High/Original URLs."""
    tier = tier or classify_url(candidate.image_url)
    return (
        candidate.width >= min_width
        or candidate.width == 0
        or tier in (QualityTier.HIGH, QualityTier.ORIGINAL)
    )


def to_ranked(candidate: ImageCandidate) -> RankedImage:
    return RankedImage(
        **candidate.model_dump(),
        quality=classify_url(candidate.image_url),
    )


def _sort_key(image: RankedImage):
    return (
        image.quality.rank,
        image.width * image.height,
        min(image.width, image.height),
    )


def rank_images(candidates: Iterable[ImageCandidate], limit: int) -> List[RankedImage]:
    """
    Rank candidates and keep the best `limit`.

    Order: tier (Original first), then width*height, then min(width, height),
    all descending. Remaining ties keep extraction order.

    Returns:
        A new list; the input is not reordered.
    """
    ranked = [c if isinstance(c, RankedImage) else to_ranked(c) for c in candidates]
    ranked = sorted(ranked, key=_sort_key, reverse=True)
    selected = ranked[:max(limit, 0)]
    logger.info(f"[ranker] Selected top {len(selected)} of {len(ranked)} candidates")
    return selected
