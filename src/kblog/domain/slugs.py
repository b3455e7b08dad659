"""URL slug derivation for titled documents (posts, tags)."""

from __future__ import annotations

import re
import unicodedata


def slugify(title: str) -> str:
    """Derive a URL slug from *title*.

    Lowercases, applies NFKC normalization, strips punctuation and joins
    words with hyphens. Non-Latin letters are kept as-is.

    Examples:
        >>> slugify("Hello")
        'hello'
        >>> slugify("  Hello, World!  ")
        'hello-world'
        >>> slugify("snake_case and spaces")
        'snake-case-and-spaces'
    """
    text = unicodedata.normalize("NFKC", title.lower())
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_-]+", "-", text)
    return text.strip("-")
