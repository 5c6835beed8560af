"""Core business-logic service for prompts."""

from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from pdir.config import BOOT_RECENT_LIMIT
from pdir.models.base import now_ms
from pdir.models.prompt import PROMPT_STATUSES, Prompt
from pdir.schemas.category import BootData, CategoryOut
from pdir.schemas.prompt import (
    CounterResult,
    PromptCreate,
    PromptQuery,
    PromptSummary,
    PromptUpdate,
)
from pdir.schemas.user import Identity
from pdir.services.category_service import CategoryService
from pdir.services.exceptions import InvalidArgument, NotFound
from pdir.services.listing import APPROVED, compute_approved_prompts
from pdir.services.text import make_excerpt
from pdir.services.user_service import UserService, require_identity

logger = logging.getLogger(__name__)


class PromptService:
    """Service layer wrapping all prompt operations."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _get(self, prompt_id: str) -> Prompt:
        prompt = self._session.get(Prompt, prompt_id)
        if prompt is None:
            raise NotFound("Prompt", prompt_id)
        return prompt

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_approved_prompts(self, query: PromptQuery | None = None) -> list[PromptSummary]:
        """Return the public listing for ``query``.

        The status and category filters go through the indexes; search,
        ordering, limit and projection run in memory over the result.
        """
        query = query or PromptQuery()
        stmt = select(Prompt).where(Prompt.status == APPROVED)
        if query.category:
            stmt = stmt.where(Prompt.category == query.category)
        stmt = stmt.order_by(Prompt.created_at, Prompt.id)
        records = self._session.execute(stmt).scalars().all()
        return compute_approved_prompts(records, query)

    def get_prompt_by_id(self, prompt_id: str) -> Prompt | None:
        return self._session.get(Prompt, prompt_id)

    def get_prompts_by_author(self, author_id: str) -> list[Prompt]:
        """Return every prompt by ``author_id``, newest first, any status."""
        return list(
            self._session.execute(
                select(Prompt)
                .where(Prompt.author_id == author_id)
                .order_by(Prompt.created_at.desc(), Prompt.id)
            )
            .scalars()
            .all()
        )

    def get_pending_prompts(self) -> list[Prompt]:
        """Return the moderation queue, oldest submission first."""
        return list(
            self._session.execute(
                select(Prompt)
                .where(Prompt.status == "pending")
                .order_by(Prompt.created_at, Prompt.id)
            )
            .scalars()
            .all()
        )

    def get_boot_data(self, limit: int = BOOT_RECENT_LIMIT) -> BootData:
        categories = CategoryService(self._session).list_categories()
        recent = self.get_approved_prompts(PromptQuery(sort="recent", limit=limit))
        return BootData(
            categories=[CategoryOut.model_validate(c) for c in categories],
            recent_prompts=recent,
        )

    # ------------------------------------------------------------------
    # Submission & moderation
    # ------------------------------------------------------------------

    def create_prompt(self, identity: Identity | None, data: PromptCreate) -> Prompt:
        """Submit a new prompt for review. The caller becomes its author."""
        identity = require_identity(identity)
        author_name = UserService(self._session).author_name_for(identity)
        now = now_ms()
        prompt = Prompt(
            title=data.title,
            content=data.content,
            excerpt=data.excerpt or make_excerpt(data.content),
            category=data.category,
            tags=list(data.tags),
            author_id=identity.subject,
            author_name=author_name,
            status="pending",
            usage_count=0,
            execution_count=0,
            featured=False,
            created_at=now,
            updated_at=now,
        )
        self._session.add(prompt)
        self._session.flush()
        logger.info("Prompt %s submitted by %s", prompt.id, identity.subject)
        return prompt

    def update_prompt(
        self, identity: Identity | None, prompt_id: str, patch: PromptUpdate
    ) -> Prompt:
        """Apply the fields present in ``patch``; a new content refreshes the excerpt."""
        require_identity(identity)
        prompt = self._get(prompt_id)
        changes = patch.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None:
                continue
            setattr(prompt, field, list(value) if field == "tags" else value)
        if changes.get("content") is not None:
            prompt.excerpt = make_excerpt(prompt.content)
        prompt.updated_at = now_ms()
        self._session.flush()
        logger.info("Prompt %s updated (%s)", prompt_id, ", ".join(sorted(changes)) or "no fields")
        return prompt

    def update_prompt_status(
        self, identity: Identity | None, prompt_id: str, status: str
    ) -> Prompt:
        """Set the moderation status. Any status may follow any other."""
        require_identity(identity)
        if status not in PROMPT_STATUSES:
            raise InvalidArgument(
                f"Unknown status '{status}'. Expected one of: {', '.join(PROMPT_STATUSES)}."
            )
        prompt = self._get(prompt_id)
        prompt.status = status
        prompt.updated_at = now_ms()
        self._session.flush()
        logger.info("Prompt %s marked %s", prompt_id, status)
        return prompt

    def delete_prompt(self, identity: Identity | None, prompt_id: str) -> None:
        """Delete a prompt and the favorites pointing at it."""
        require_identity(identity)
        prompt = self._get(prompt_id)
        self._session.delete(prompt)
        self._session.flush()
        logger.info("Prompt %s deleted", prompt_id)

    # ------------------------------------------------------------------
    # Counters
    # ------------------------------------------------------------------

    def _increment(self, prompt_id: str, field: str, delta: int) -> CounterResult:
        if delta <= 0:
            raise InvalidArgument("delta must be a positive number")
        self._get(prompt_id)
        column = getattr(Prompt, field)
        self._session.execute(
            update(Prompt)
            .where(Prompt.id == prompt_id)
            .values({column: column + delta, Prompt.updated_at: now_ms()})
        )
        prompt = self._get(prompt_id)
        value = getattr(prompt, field)
        logger.debug("Prompt %s %s -> %d", prompt_id, field, value)
        return CounterResult.model_validate({"id": prompt_id, field: value})

    def increment_usage_count(self, prompt_id: str, delta: int = 1) -> CounterResult:
        """Add ``delta`` to the usage counter (a copy) and return the new value."""
        return self._increment(prompt_id, "usage_count", delta)

    def increment_execution_count(self, prompt_id: str, delta: int = 1) -> CounterResult:
        """Add ``delta`` to the execution counter (an AI run) and return the new value."""
        return self._increment(prompt_id, "execution_count", delta)
