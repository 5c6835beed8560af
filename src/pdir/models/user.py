from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from pdir.models.base import Base, now_ms

USER_ROLES = ("user", "admin")


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Subject id issued by the identity provider.
    external_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="", index=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")
    is_subscribed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    prompt_view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)

    def __repr__(self) -> str:
        return f"<User(external_id={self.external_id!r}, role={self.role!r})>"
