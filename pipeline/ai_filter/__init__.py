"""
AI filter subpackage.
Expose the heuristic quality ranker.
"""
from .quality_ranker import rank_images, classify_url, canonicalize_url

__all__ = ["rank_images", "classify_url", "canonicalize_url"]
