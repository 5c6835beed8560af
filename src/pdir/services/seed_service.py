"""Bulk upsert of categories, users and prompts from a JSON document."""

from __future__ import annotations

import datetime
import json
import logging
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.orm import Session

from pdir.models.base import now_ms
from pdir.models.prompt import Prompt
from pdir.schemas.seed import SeedPayload, SeedPrompt, SeedUser
from pdir.services.category_service import CategoryService
from pdir.services.text import make_excerpt
from pdir.services.user_service import UserService

logger = logging.getLogger(__name__)


def _to_ms(value: datetime.datetime | None, fallback: int) -> int:
    if value is None:
        return fallback
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return int(value.timestamp() * 1000)


class SeedService:
    """Re-running a seed is safe: every record is matched before insert."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def seed(self, payload: SeedPayload) -> dict[str, int]:
        categories = CategoryService(self._session)
        for c in payload.categories:
            categories.upsert_category(
                c.id,
                name=c.name,
                description=c.description,
                icon=c.icon,
                prompt_count=c.prompt_count,
            )
        for u in payload.users:
            self._upsert_user(u)
        for p in payload.prompts:
            self._upsert_prompt(p)

        counts = {
            "categories": len(payload.categories),
            "users": len(payload.users),
            "prompts": len(payload.prompts),
        }
        logger.info("Seeded %s", counts)
        return counts

    def seed_file(self, path: Path) -> dict[str, int]:
        data = json.loads(path.read_text(encoding="utf-8"))
        return self.seed(SeedPayload.model_validate(data))

    def _upsert_user(self, data: SeedUser) -> None:
        users = UserService(self._session)
        user = users.get_user_by_external_id(data.id)
        now = now_ms()
        if user is None:
            user = users.create_user(
                data.id,
                name=data.name,
                email=data.email,
                role=data.role,
                is_subscribed=data.is_subscribed,
            )
            user.created_at = _to_ms(data.joined_at, now)
            user.updated_at = user.created_at
        else:
            user.name = data.name
            user.email = data.email
            user.role = data.role
            user.is_subscribed = data.is_subscribed
            user.updated_at = now
        user.prompt_view_count = data.prompt_view_count
        self._session.flush()

    def _upsert_prompt(self, data: SeedPrompt) -> None:
        # Authors may submit several prompts with one title; the oldest is the seed target.
        existing = (
            self._session.execute(
                select(Prompt)
                .where(Prompt.author_id == data.author_id, Prompt.title == data.title)
                .order_by(Prompt.created_at, Prompt.id)
            )
            .scalars()
            .first()
        )
        created = _to_ms(data.created_at, now_ms())
        updated = _to_ms(data.updated_at, created)
        fields = {
            "content": data.content,
            "excerpt": data.excerpt or make_excerpt(data.content),
            "category": data.category,
            "tags": list(data.tags),
            "status": data.status,
            "usage_count": data.usage_count,
            "execution_count": data.execution_count,
            "featured": data.featured,
            "updated_at": updated,
        }
        if existing is None:
            prompt = Prompt(
                title=data.title,
                author_id=data.author_id,
                author_name=data.author_name,
                created_at=created,
                **fields,
            )
            if data.id and self._session.get(Prompt, data.id) is None:
                prompt.id = data.id
            self._session.add(prompt)
        else:
            for field, value in fields.items():
                setattr(existing, field, value)
        self._session.flush()
