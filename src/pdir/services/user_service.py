"""User records mirrored from the identity provider."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from pdir.models.base import now_ms
from pdir.models.user import USER_ROLES, User
from pdir.schemas.user import Identity, UserUpdate
from pdir.services.exceptions import AuthenticationRequired, InvalidArgument, NotFound

logger = logging.getLogger(__name__)


def require_identity(identity: Identity | None) -> Identity:
    """Return ``identity`` or raise AuthenticationRequired when it is absent."""
    if identity is None:
        raise AuthenticationRequired()
    return identity


def primary_email(data: dict[str, Any]) -> str | None:
    """Pick the primary address out of an identity-provider user payload."""
    emails = data.get("email_addresses") or []
    primary_id = data.get("primary_email_address_id")
    if not primary_id:
        return emails[0].get("email_address") if emails else None
    for entry in emails:
        if entry.get("id") == primary_id:
            return entry.get("email_address")
    return None


def display_name(data: dict[str, Any]) -> str:
    first = data.get("first_name") or ""
    last = data.get("last_name") or ""
    combined = f"{first} {last}".strip()
    if combined:
        return combined
    if data.get("username"):
        return data["username"]
    emails = data.get("email_addresses") or []
    if emails and emails[0].get("email_address"):
        return emails[0]["email_address"]
    return "User"


class UserService:
    """Lookups and idempotent upserts keyed by the external subject id."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_user_by_external_id(self, external_id: str) -> User | None:
        return self._session.execute(
            select(User).where(User.external_id == external_id)
        ).scalar_one_or_none()

    def get_current_user(self, identity: Identity | None) -> User | None:
        """Return the caller's user record, or None for anonymous callers."""
        if identity is None:
            return None
        return self.get_user_by_external_id(identity.subject)

    def list_users(self) -> list[User]:
        return list(self._session.execute(select(User).order_by(User.created_at)).scalars().all())

    def create_user(
        self,
        external_id: str,
        name: str,
        email: str = "",
        role: str = "user",
        is_subscribed: bool = False,
    ) -> User:
        """Create a user; returns the existing record if one is already stored."""
        existing = self.get_user_by_external_id(external_id)
        if existing is not None:
            return existing
        if role not in USER_ROLES:
            raise InvalidArgument(f"Unknown role '{role}'.")
        now = now_ms()
        user = User(
            external_id=external_id,
            name=name,
            email=email,
            role=role,
            is_subscribed=is_subscribed,
            prompt_view_count=0,
            created_at=now,
            updated_at=now,
        )
        self._session.add(user)
        self._session.flush()
        logger.info("Created user %s", external_id)
        return user

    def update_user(self, external_id: str, patch: UserUpdate) -> User:
        user = self.get_user_by_external_id(external_id)
        if user is None:
            raise NotFound("User", external_id)
        for field, value in patch.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(user, field, value)
        user.updated_at = now_ms()
        self._session.flush()
        return user

    def delete_user(self, external_id: str) -> int | None:
        """Delete a user; returns the removed row id or None if there was none."""
        user = self.get_user_by_external_id(external_id)
        if user is None:
            return None
        user_id = user.id
        self._session.delete(user)
        self._session.flush()
        logger.info("Deleted user %s", external_id)
        return user_id

    def ensure_current_user(
        self,
        identity: Identity | None,
        name: str | None = None,
        email: str | None = None,
    ) -> User:
        """Make sure the caller has a user record before the webhook lands."""
        identity = require_identity(identity)
        existing = self.get_user_by_external_id(identity.subject)
        if existing is not None:
            return existing
        return self.create_user(
            identity.subject,
            name=name or identity.name or "User",
            email=email or identity.email or "",
        )

    def set_role(self, external_id: str, role: str) -> User:
        if role not in USER_ROLES:
            raise InvalidArgument(f"Unknown role '{role}'.")
        user = self.get_user_by_external_id(external_id)
        if user is None:
            raise NotFound("User", external_id)
        user.role = role
        user.updated_at = now_ms()
        self._session.flush()
        logger.info("Set role of %s to %s", external_id, role)
        return user

    def author_name_for(self, identity: Identity) -> str:
        user = self.get_user_by_external_id(identity.subject)
        if user is not None:
            return user.name
        return identity.name or "User"

    # ------------------------------------------------------------------
    # Webhook ingestion
    # ------------------------------------------------------------------

    def handle_webhook_event(self, event: dict[str, Any]) -> str:
        """Apply a verified user lifecycle event.

        Returns the event type when it was applied, or "ignored" for event
        types this service does not handle.  Replays are harmless: creates
        are idempotent, updates overwrite (or create a missing user), deletes
        of missing users no-op.
        """
        event_type = event.get("type") or ""
        data = event.get("data") or {}
        external_id = data.get("id")
        if not external_id:
            raise InvalidArgument("Webhook event is missing the user id.")

        if event_type == "user.created":
            self.create_user(
                external_id, name=display_name(data), email=primary_email(data) or ""
            )
        elif event_type == "user.updated":
            name, email = display_name(data), primary_email(data)
            if self.get_user_by_external_id(external_id) is None:
                # the create event was lost or has not arrived yet
                self.create_user(external_id, name=name, email=email or "")
            else:
                self.update_user(external_id, UserUpdate(name=name, email=email))
        elif event_type == "user.deleted":
            self.delete_user(external_id)
        else:
            logger.debug("Ignoring webhook event of type %r", event_type)
            return "ignored"
        return event_type
