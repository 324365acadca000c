"""
Input parser module for the Pinterest image scraper.
Turns raw batch input (pasted text or a list) into validated search queries.
"""

import re
from typing import Iterable, List, Optional

from utils.logger import setup_logger
from pipeline.scraper.errors import InvalidRequestError
from config import MAX_BATCH_QUERIES, MAX_IMAGE_COUNT

logger = setup_logger(__name__)

_LINE_BREAKS = re.compile(r"[\r\n]+")


def parse_queries_text(text: Optional[str]) -> List[str]:
    """
    Split a multi-line string into queries, one per line.

    Args:
        text (str): Pasted list, e.g. "Snow mobile safari\\nSanta Claus village"

    Returns:
        List[str]: Trimmed, non-blank queries in input order
    """
    if not text:
        return []
    return [line.strip() for line in _LINE_BREAKS.split(text) if line.strip()]


def apply_extension(queries: Iterable[str], extension: Optional[str]) -> List[str]:
    """Append `extension` (e.g. "arctic finland") to every query."""
    queries = list(queries)
    if not extension or not extension.strip():
        return queries
    logger.info(f"Applied extension '{extension}' to all queries")
    return [f"{q} {extension}".strip() for q in queries]


def validate_count(count: int, name: str = "count") -> int:
    if isinstance(count, bool) or not isinstance(count, int) or not 1 <= count <= MAX_IMAGE_COUNT:
        raise InvalidRequestError(f"{name} must be between 1 and {MAX_IMAGE_COUNT}")
    return count


def parse_batch_request(
    queries_text: Optional[str] = None,
    queries: Optional[Iterable[str]] = None,
    extension: Optional[str] = None,
    count_per_query: int = 20,
) -> List[str]:
    """
    Build the query list for a batch scrape.

    queries_text wins over queries when both are given.

    Raises:
        InvalidRequestError: no queries, more than MAX_BATCH_QUERIES, or a
            count outside 1..MAX_IMAGE_COUNT
    """
    if queries_text and queries_text.strip():
        parsed = parse_queries_text(queries_text)
    else:
        parsed = [q.strip() for q in (queries or []) if q and q.strip()]

    if not parsed:
        raise InvalidRequestError("At least one search query is required")
    if len(parsed) > MAX_BATCH_QUERIES:
        raise InvalidRequestError(f"Maximum {MAX_BATCH_QUERIES} queries allowed per batch request")

    validate_count(count_per_query, "count_per_query")
    parsed = apply_extension(parsed, extension)
    logger.info(f"Parsed {len(parsed)} batch queries")
    return parsed
