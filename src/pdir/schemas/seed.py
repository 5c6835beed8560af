"""Shape of the JSON document accepted by ``pdir seed``.

Timestamps arrive as ISO-8601 strings and are stored as epoch milliseconds.
"""

from __future__ import annotations

import datetime

from pydantic import Field

from pdir.schemas.base import CamelModel


class SeedCategory(CamelModel):
    id: str
    name: str
    description: str = ""
    icon: str = ""
    prompt_count: int = 0


class SeedUser(CamelModel):
    id: str
    name: str
    email: str = ""
    role: str = "user"
    is_subscribed: bool = False
    joined_at: datetime.datetime | None = None
    prompt_view_count: int = 0


class SeedPrompt(CamelModel):
    id: str | None = None
    title: str
    content: str
    excerpt: str | None = None
    category: str
    tags: list[str] = Field(default_factory=list)
    author_id: str
    author_name: str
    status: str = "pending"
    usage_count: int = 0
    execution_count: int = 0
    featured: bool = False
    created_at: datetime.datetime | None = None
    updated_at: datetime.datetime | None = None


class SeedPayload(CamelModel):
    categories: list[SeedCategory] = Field(default_factory=list)
    users: list[SeedUser] = Field(default_factory=list)
    prompts: list[SeedPrompt] = Field(default_factory=list)
