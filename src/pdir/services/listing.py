"""Filter, sort and project prompts for the public directory listing.

These functions work on any sequence of prompt-like records (ORM rows or
plain objects with the same attributes) and never touch the database, so
the ordering rules can be exercised directly.

Python's sort is stable: records that tie on every sort key keep the order
they had in the input.  Callers feed rows in a fixed order (creation time,
then id), which makes the output reproducible for a fixed collection and
query.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Any

from pdir.schemas.prompt import PromptQuery, PromptSummary
from pdir.services.text import matches_search

APPROVED = "approved"

SortKey = Callable[[Any], tuple]

_SORT_KEYS: dict[str, SortKey] = {
    "usage": lambda p: (-p.usage_count,),
    "recent": lambda p: (-p.created_at,),
    "featured": lambda p: (not p.featured,),
}


def _default_key(p: Any) -> tuple:
    # featured first, then most used
    return (not p.featured, -p.usage_count)


def filter_prompts(records: Iterable[Any], query: PromptQuery) -> list[Any]:
    """Keep approved records that satisfy the category and search filters."""
    results = [r for r in records if r.status == APPROVED]
    if query.category:
        results = [r for r in results if r.category == query.category]
    if query.categories:
        wanted = set(query.categories)
        results = [r for r in results if r.category in wanted]
    if query.search and query.search.strip():
        results = [
            r
            for r in results
            if matches_search(query.search, (r.title, r.content, r.excerpt), r.tags)
        ]
    return results


def sort_prompts(records: Sequence[Any], sort: str | None) -> list[Any]:
    """Order records for display; unknown sort modes use the default ordering."""
    key = _SORT_KEYS.get(sort or "", _default_key)
    return sorted(records, key=key)


def apply_limit(records: Sequence[Any], limit: int | None) -> list[Any]:
    if limit is not None and limit > 0:
        return list(records[:limit])
    return list(records)


def project(records: Iterable[Any]) -> list[PromptSummary]:
    return [PromptSummary.model_validate(r) for r in records]


def compute_approved_prompts(records: Iterable[Any], query: PromptQuery) -> list[PromptSummary]:
    """Run the full listing pipeline over ``records``."""
    filtered = filter_prompts(records, query)
    ordered = sort_prompts(filtered, query.sort)
    return project(apply_limit(ordered, query.limit))
