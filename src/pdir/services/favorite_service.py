"""Per-user saved prompts."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from pdir.models.base import now_ms
from pdir.models.prompt import Favorite, Prompt
from pdir.schemas.prompt import PromptSummary
from pdir.schemas.user import Identity
from pdir.services.exceptions import DuplicateKey, NotFound
from pdir.services.user_service import require_identity

logger = logging.getLogger(__name__)


class FavoriteService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def _find(self, user_id: str, prompt_id: str) -> Favorite | None:
        return self._session.execute(
            select(Favorite).where(Favorite.user_id == user_id, Favorite.prompt_id == prompt_id)
        ).scalar_one_or_none()

    def add_favorite(self, identity: Identity | None, prompt_id: str) -> Favorite:
        identity = require_identity(identity)
        if self._session.get(Prompt, prompt_id) is None:
            raise NotFound("Prompt", prompt_id)
        if self._find(identity.subject, prompt_id) is not None:
            raise DuplicateKey(f"Prompt '{prompt_id}' is already a favorite.")
        favorite = Favorite(user_id=identity.subject, prompt_id=prompt_id, created_at=now_ms())
        self._session.add(favorite)
        self._session.flush()
        logger.info("%s saved prompt %s", identity.subject, prompt_id)
        return favorite

    def remove_favorite(self, identity: Identity | None, prompt_id: str) -> bool:
        """Remove a favorite; returns False when there was nothing to remove."""
        identity = require_identity(identity)
        favorite = self._find(identity.subject, prompt_id)
        if favorite is None:
            return False
        self._session.delete(favorite)
        self._session.flush()
        logger.info("%s removed prompt %s from favorites", identity.subject, prompt_id)
        return True

    def toggle_favorite(self, identity: Identity | None, prompt_id: str) -> bool:
        """Flip the favorite state and return the new one."""
        identity = require_identity(identity)
        if self._find(identity.subject, prompt_id) is not None:
            self.remove_favorite(identity, prompt_id)
            return False
        self.add_favorite(identity, prompt_id)
        return True

    def list_favorite_ids(self, identity: Identity | None) -> list[str]:
        identity = require_identity(identity)
        return list(
            self._session.execute(
                select(Favorite.prompt_id)
                .where(Favorite.user_id == identity.subject)
                .order_by(Favorite.created_at.desc(), Favorite.id.desc())
            )
            .scalars()
            .all()
        )

    def list_favorite_prompts(self, identity: Identity | None) -> list[PromptSummary]:
        """Summaries of the caller's favorites, most recently saved first."""
        identity = require_identity(identity)
        prompts = self._session.execute(
            select(Prompt)
            .join(Favorite, Favorite.prompt_id == Prompt.id)
            .where(Favorite.user_id == identity.subject)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        ).scalars()
        return [PromptSummary.model_validate(p) for p in prompts]
