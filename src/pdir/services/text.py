"""Small text helpers shared by prompts and blogs."""

from __future__ import annotations

import re
from collections.abc import Iterable

from pdir.config import EXCERPT_LENGTH

_SLUG_SEPARATOR = re.compile(r"[^a-z0-9]+")
_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def make_excerpt(content: str, length: int = EXCERPT_LENGTH) -> str:
    """Return ``content`` cut to ``length`` characters plus "..." when longer."""
    if len(content) > length:
        return content[:length] + "..."
    return content


def generate_slug(title: str) -> str:
    """Turn a title into a URL-friendly slug.

    >>> generate_slug("10 Tips for Better AI Prompts")
    '10-tips-for-better-ai-prompts'
    """
    return _SLUG_SEPARATOR.sub("-", title.lower()).strip("-")


def is_valid_slug(slug: str) -> bool:
    return _SLUG_PATTERN.match(slug) is not None


def matches_search(search: str | None, fields: Iterable[str], tags: Iterable[str]) -> bool:
    """Case-insensitive substring test of ``search`` against fields and tags.

    A missing, empty or whitespace-only search matches everything.  The
    untrimmed search string is what gets matched otherwise.
    """
    if not search or not search.strip():
        return True
    needle = search.casefold()
    if any(needle in field.casefold() for field in fields):
        return True
    return any(needle in tag.casefold() for tag in tags)
