from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from pdir.schemas.base import CamelModel, RecordModel

UserRole = Literal["user", "admin"]


class Identity(BaseModel):
    """A caller already verified by the identity provider."""

    model_config = ConfigDict(frozen=True)

    subject: str = Field(..., min_length=1)
    name: str | None = None
    email: str | None = None


class UserOut(RecordModel):
    external_id: str
    name: str
    email: str
    role: str
    is_subscribed: bool
    prompt_view_count: int
    created_at: int
    updated_at: int


class UserUpdate(CamelModel):
    name: str | None = None
    email: str | None = None
    role: UserRole | None = None
    is_subscribed: bool | None = None
    prompt_view_count: int | None = Field(default=None, ge=0)
