"""
Text utility functions for the Liumo corpus.

Provides text cleaning, line normalization for source poem bodies,
and truncation for previews.
"""

import re
import unicodedata
from typing import Any, List


def clean_text(text: str) -> str:
    """
    Normalize and clean a single piece of source text.

    Applies NFC (not NFKC, which would fold full-width punctuation into
    ASCII), removes control characters and collapses runs of spaces.

    Args:
        text: Raw text from a source file.

    Returns:
        Cleaned text string.
    """
    if not text:
        return ""

    text = unicodedata.normalize("NFC", text)

    # Remove control characters except newlines and tabs
    text = "".join(
        char for char in text
        if not unicodedata.category(char).startswith("C")
        or char in "\n\t"
    )

    text = re.sub(r"[ \t]+", " ", text)

    return text.strip()


def normalize_lines(raw: Any) -> List[str]:
    """
    Normalize a source body into a list of non-empty lines.

    Lists keep one entry per element; strings are split on newlines.
    Anything else yields no lines.

    Args:
        raw: The paragraphs/content field of a source record.

    Returns:
        Cleaned, non-empty lines.
    """
    if isinstance(raw, list):
        candidates = [str(item) for item in raw if item is not None]
    elif isinstance(raw, str):
        candidates = raw.split("\n")
    else:
        return []

    lines = [clean_text(line) for line in candidates]
    return [line for line in lines if line]


def truncate_text(text: str, max_length: int, suffix: str = "…") -> str:
    """
    Truncate text to maximum length with ellipsis.

    Args:
        text: Text to truncate.
        max_length: Maximum length including suffix.
        suffix: String to append when truncated.

    Returns:
        Truncated text or original if within limit.
    """
    if not text or len(text) <= max_length:
        return text

    truncate_at = max_length - len(suffix)
    if truncate_at <= 0:
        return suffix[:max_length]

    return text[:truncate_at] + suffix
