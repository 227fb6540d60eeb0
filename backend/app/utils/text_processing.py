"""
AfriVerse Editorial Desk - Text Processing Utilities
====================================================
Input sanitization, word counting and slug generation for article bodies.
"""

import html
import re
import unicodedata


def sanitize_input(text: str) -> str:
    """
    Input Guard: strip markup and scriptable fragments from user text.
    Feeds word counting, so HTML article bodies are measured by their visible words.
    """
    if not text:
        return ""

    # Remove HTML tags
    text = re.sub(r'<script[^>]*>.*?</script>', '', text, flags=re.DOTALL | re.IGNORECASE)
    text = re.sub(r'<style[^>]*>.*?</style>', '', text, flags=re.DOTALL | re.IGNORECASE)
    text = re.sub(r'<[^>]+>', ' ', text)

    # Decode HTML entities
    text = html.unescape(text)

    # Remove dangerous patterns
    text = re.sub(r'javascript:', '', text, flags=re.IGNORECASE)
    text = re.sub(r'on\w+\s*=', '', text, flags=re.IGNORECASE)

    # Remove null bytes
    text = text.replace('\x00', '')

    # Normalize whitespace
    text = re.sub(r'\s+', ' ', text).strip()

    return text


def count_words(text: str) -> int:
    """Count whitespace-separated words, ignoring markup."""
    if not text:
        return 0
    return len(sanitize_input(text).split())


def slugify(text: str, max_length: int = 300) -> str:
    """URL-safe lowercase slug: `Lagos Tech Week 2026!` -> `lagos-tech-week-2026`."""
    if not text:
        return ""
    value = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    value = re.sub(r"[^\w\s-]", "", value.lower())
    value = re.sub(r"[\s_-]+", "-", value).strip("-")
    return value[:max_length].rstrip("-")
