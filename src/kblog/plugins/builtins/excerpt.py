"""Built-in excerpt plugin.

Contributes a ``before.create`` / ``before.update`` step to the posts
pipeline that fills ``excerpt`` from ``content`` when the author left it
empty: markup stripped, whitespace collapsed, cut at a word boundary.
"""

from __future__ import annotations

import re

import pluggy

from kblog.services.hooks import HookContext, HookFragment

hookimpl = pluggy.HookimplMarker("kblog")

DEFAULT_MAX_CHARS = 200
_TAG = re.compile(r"<[^>]+>")
_SPACE = re.compile(r"\s+")


def make_excerpt(content: str, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """Plain-text preview of *content*, at most *max_chars* plus an ellipsis.

    Examples:
        >>> make_excerpt("<p>Short</p>")
        'Short'
        >>> make_excerpt("one two three", max_chars=8)
        'one two...'
    """
    text = _SPACE.sub(" ", _TAG.sub(" ", content)).strip()
    if len(text) <= max_chars:
        return text
    cut = text[:max_chars]
    if " " in cut:
        cut = cut.rsplit(" ", 1)[0]
    return f"{cut.rstrip('.,;:')}..."


class ExcerptPlugin:
    """Fills post excerpts from their content."""

    def __init__(self, max_chars: int = DEFAULT_MAX_CHARS, services: tuple[str, ...] = ("posts",)):
        self._max_chars = max_chars
        self._services = services

    def fill_excerpt(self, ctx: HookContext) -> None:
        data = ctx.data
        if not data or data.get("excerpt"):
            return
        content = data.get("content")
        if isinstance(content, str) and content.strip():
            data["excerpt"] = make_excerpt(content, self._max_chars)

    @hookimpl
    def register_service_hooks(self, service_name: str) -> HookFragment | None:
        if service_name not in self._services:
            return None
        return {
            "before.create": [self.fill_excerpt],
            "before.update": [self.fill_excerpt],
        }
