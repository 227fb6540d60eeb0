"""Utils package."""
from app.utils.text_processing import (
    sanitize_input, count_words, slugify,
)

__all__ = [
    "sanitize_input", "count_words", "slugify",
]
