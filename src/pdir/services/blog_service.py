"""Blog posts: slug addressing and the draft/published lifecycle."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from pdir.models.base import now_ms
from pdir.models.blog import Blog
from pdir.schemas.blog import BlogCreate, BlogUpdate
from pdir.schemas.user import Identity
from pdir.services.exceptions import DuplicateSlug, InvalidArgument, NotFound
from pdir.services.text import generate_slug, is_valid_slug, make_excerpt, matches_search
from pdir.services.user_service import UserService, require_identity

logger = logging.getLogger(__name__)

PUBLISHED = "published"


def _check_slug(slug: str) -> None:
    if not is_valid_slug(slug):
        raise InvalidArgument(
            f"Invalid slug '{slug}': use lowercase letters, digits and single hyphens."
        )


class BlogService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def _get(self, blog_id: str) -> Blog:
        blog = self._session.get(Blog, blog_id)
        if blog is None:
            raise NotFound("Blog", blog_id)
        return blog

    def _find_by_slug(self, slug: str) -> Blog | None:
        return self._session.execute(select(Blog).where(Blog.slug == slug)).scalar_one_or_none()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_published_blogs(
        self, limit: int | None = None, search: str | None = None
    ) -> list[Blog]:
        """Published posts, most recently published first."""
        blogs = self._session.execute(
            select(Blog).where(Blog.status == PUBLISHED).order_by(Blog.created_at, Blog.id)
        ).scalars()
        results = [
            b
            for b in blogs
            if matches_search(search, (b.title, b.content, b.excerpt), b.tags)
        ]
        results.sort(key=lambda b: -(b.published_at or 0))
        if limit is not None and limit > 0:
            results = results[:limit]
        return results

    def get_blog_by_slug(self, slug: str) -> Blog | None:
        """Public lookup; drafts are not returned."""
        blog = self._find_by_slug(slug)
        if blog is not None and blog.status == PUBLISHED:
            return blog
        return None

    def get_all_blogs(self) -> list[Blog]:
        """Every post including drafts, newest first."""
        return list(
            self._session.execute(select(Blog).order_by(Blog.created_at.desc(), Blog.id))
            .scalars()
            .all()
        )

    def get_blog_by_id(self, blog_id: str) -> Blog | None:
        return self._session.get(Blog, blog_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_blog(self, identity: Identity | None, data: BlogCreate) -> Blog:
        identity = require_identity(identity)
        if data.slug:
            _check_slug(data.slug)
        slug = data.slug or generate_slug(data.title)
        if not slug:
            raise InvalidArgument(f"Cannot derive a slug from title '{data.title}'.")
        if self._find_by_slug(slug) is not None:
            raise DuplicateSlug(slug)

        now = now_ms()
        blog = Blog(
            title=data.title,
            slug=slug,
            content=data.content,
            excerpt=data.excerpt or make_excerpt(data.content),
            meta_description=data.meta_description,
            meta_keywords=list(data.meta_keywords),
            author_id=identity.subject,
            author_name=UserService(self._session).author_name_for(identity),
            tags=list(data.tags),
            status=data.status,
            featured=data.featured,
            published_at=now if data.status == PUBLISHED else None,
            created_at=now,
            updated_at=now,
        )
        self._session.add(blog)
        self._session.flush()
        logger.info("Blog %s created as %s", slug, data.status)
        return blog

    def update_blog(self, identity: Identity | None, blog_id: str, patch: BlogUpdate) -> Blog:
        """Apply a partial update.

        ``published_at`` is stamped only the first time a post moves into
        ``published``; later unpublish/republish cycles keep the original date.
        """
        require_identity(identity)
        blog = self._get(blog_id)
        changes = {k: v for k, v in patch.model_dump(exclude_unset=True).items() if v is not None}

        new_slug = changes.get("slug")
        if new_slug:
            _check_slug(new_slug)
        if new_slug and new_slug != blog.slug and self._find_by_slug(new_slug) is not None:
            raise DuplicateSlug(new_slug)

        now = now_ms()
        if (
            changes.get("status") == PUBLISHED
            and blog.status != PUBLISHED
            and not blog.published_at
        ):
            blog.published_at = now

        for field, value in changes.items():
            setattr(blog, field, list(value) if isinstance(value, list) else value)
        blog.updated_at = now
        self._session.flush()
        logger.info("Blog %s updated (%s)", blog.slug, ", ".join(sorted(changes)) or "no fields")
        return blog

    def delete_blog(self, identity: Identity | None, blog_id: str) -> None:
        require_identity(identity)
        blog = self._get(blog_id)
        self._session.delete(blog)
        self._session.flush()
        logger.info("Blog %s deleted", blog.slug)
