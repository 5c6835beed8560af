"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from pdir.models.base import Base
from pdir.models.prompt import Prompt
from pdir.schemas.user import Identity
from pdir.services.blog_service import BlogService
from pdir.services.prompt_service import PromptService


@pytest.fixture()
def tmp_db(tmp_path: Path) -> Path:
    """Return a temporary database file path."""
    return tmp_path / "test.db"


@pytest.fixture()
def session(tmp_db: Path) -> Session:
    """Create a SQLite session with all tables."""
    engine = create_engine(f"sqlite:///{tmp_db}", echo=False)
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine)
    sess = factory()
    yield sess  # type: ignore[misc]
    sess.close()
    engine.dispose()


@pytest.fixture()
def service(session: Session) -> PromptService:
    """Return a PromptService bound to the test session."""
    return PromptService(session)


@pytest.fixture()
def blogs(session: Session) -> BlogService:
    return BlogService(session)


@pytest.fixture()
def alice() -> Identity:
    return Identity(subject="user_alice", name="Alice", email="alice@example.com")


@pytest.fixture()
def make_prompt(session: Session) -> Callable[..., Prompt]:
    """Insert a prompt row directly, bypassing the submission workflow."""
    counter = iter(range(1, 10_000))

    def _make(**overrides: Any) -> Prompt:
        n = next(counter)
        fields: dict[str, Any] = {
            "title": f"Prompt {n}",
            "content": f"Content for prompt {n}",
            "excerpt": f"Content for prompt {n}",
            "category": "general",
            "tags": [],
            "author_id": "user_seed",
            "author_name": "Seed Author",
            "status": "approved",
            "usage_count": 0,
            "execution_count": 0,
            "featured": False,
            "created_at": 1_700_000_000_000 + n,
            "updated_at": 1_700_000_000_000 + n,
        }
        fields.update(overrides)
        prompt = Prompt(**fields)
        session.add(prompt)
        session.flush()
        return prompt

    return _make
