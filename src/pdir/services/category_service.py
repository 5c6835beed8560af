"""Category taxonomy lookups."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from pdir.models.base import now_ms
from pdir.models.category import Category

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_categories(self) -> list[Category]:
        """Return all categories ordered by name, ignoring case.

        Names compare by ``str.casefold()`` rather than a locale collation, so
        accented names sort by code point (``"Église"`` after ``"Zeal"``).
        """
        categories = self._session.execute(select(Category)).scalars().all()
        return sorted(categories, key=lambda c: (c.name.casefold(), c.name))

    def get_category(self, category_id: str) -> Category | None:
        return self._session.execute(
            select(Category).where(Category.category_id == category_id)
        ).scalar_one_or_none()

    def upsert_category(
        self,
        category_id: str,
        name: str,
        description: str = "",
        icon: str = "",
        prompt_count: int = 0,
    ) -> Category:
        """Insert a category or refresh the stored one with the same id."""
        now = now_ms()
        category = self.get_category(category_id)
        if category is None:
            category = Category(category_id=category_id, created_at=now)
            self._session.add(category)
        category.name = name
        category.description = description
        category.icon = icon
        category.prompt_count = prompt_count
        category.updated_at = now
        self._session.flush()
        logger.debug("Upserted category %s", category_id)
        return category
