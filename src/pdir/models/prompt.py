from __future__ import annotations

import uuid

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pdir.models.base import Base, now_ms

PROMPT_STATUSES = ("pending", "approved", "rejected")


def new_id() -> str:
    return uuid.uuid4().hex


class Prompt(Base):
    __tablename__ = "prompts"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    excerpt: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    author_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    author_name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", index=True
    )
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    execution_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)

    favorites: Mapped[list[Favorite]] = relationship(
        "Favorite",
        back_populates="prompt",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Prompt(id={self.id!r}, title={self.title!r}, status={self.status!r})>"


class Favorite(Base):
    __tablename__ = "favorites"
    __table_args__ = (UniqueConstraint("user_id", "prompt_id", name="uq_favorites_user_prompt"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    prompt_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("prompts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)

    prompt: Mapped[Prompt] = relationship("Prompt", back_populates="favorites")

    def __repr__(self) -> str:
        return f"<Favorite(user_id={self.user_id!r}, prompt_id={self.prompt_id!r})>"
