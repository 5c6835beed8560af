from __future__ import annotations

from typing import Literal

from pydantic import Field

from pdir.schemas.base import CamelModel, RecordModel

BlogStatus = Literal["draft", "published"]


class BlogCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    slug: str | None = Field(default=None, description="Generated from the title when omitted")
    content: str = Field(..., description="Markdown body")
    excerpt: str = ""
    meta_description: str = ""
    meta_keywords: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    status: BlogStatus = "draft"
    featured: bool = False


class BlogUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, min_length=1)
    content: str | None = None
    excerpt: str | None = None
    meta_description: str | None = None
    meta_keywords: list[str] | None = None
    tags: list[str] | None = None
    status: BlogStatus | None = None
    featured: bool | None = None


class BlogOut(RecordModel):
    id: str
    title: str
    slug: str
    content: str
    excerpt: str
    meta_description: str
    meta_keywords: list[str]
    author_id: str
    author_name: str
    tags: list[str]
    status: str
    featured: bool
    published_at: int | None
    created_at: int
    updated_at: int
