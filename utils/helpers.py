"""
Helper functions for the Pinterest image scraper.
Contains utility functions used across different modules.
"""

import os
import re

# Characters not allowed in file names on common filesystems
_INVALID_FILENAME_CHARS = re.compile(r'[\x00-\x1f<>:"/\\|?*]')

def ensure_directory(path: str) -> None:
    """
    Ensure a directory exists, create if it doesn't.

    Args:
        path (str): Path to the directory
    """
    os.makedirs(path, exist_ok=True)

def safe_filename(text: str, max_length: int = 50) -> str:
    """
    Turn free text (e.g. a search query) into a file name fragment.

    Invalid characters become underscores and the result is truncated.

    Args:
        text (str): Source text
        max_length (int): Maximum length of the result

    Returns:
        str: File-system safe fragment, "image" if nothing usable remains
    """
    cleaned = _INVALID_FILENAME_CHARS.sub("_", text or "").strip()
    return cleaned[:max_length] or "image"
