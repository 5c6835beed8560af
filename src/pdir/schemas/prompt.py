from __future__ import annotations

from typing import Literal

from pydantic import Field

from pdir.schemas.base import CamelModel, RecordModel

PromptStatus = Literal["pending", "approved", "rejected"]


class PromptQuery(CamelModel):
    category: str | None = Field(default=None, description="Exact categoryId filter")
    categories: list[str] | None = Field(
        default=None, description="Match any of these categoryIds"
    )
    search: str | None = Field(default=None, description="Case-insensitive substring")
    # Free-form: unrecognized values fall back to the default ordering.
    sort: str | None = Field(default=None, description="usage | recent | featured")
    limit: int | None = Field(default=None, description="Cap on results when > 0")


class PromptSummary(RecordModel):
    """The list-view projection of a prompt; full content is withheld."""

    id: str
    title: str
    excerpt: str
    category: str
    author_name: str
    usage_count: int
    execution_count: int
    tags: list[str]
    created_at: int
    featured: bool


class PromptOut(RecordModel):
    id: str
    title: str
    content: str
    excerpt: str
    category: str
    tags: list[str]
    author_id: str
    author_name: str
    status: str
    usage_count: int
    execution_count: int
    featured: bool
    created_at: int
    updated_at: int


class PromptCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1, description="Prompt template body")
    category: str = Field(..., min_length=1, description="categoryId")
    tags: list[str] = Field(default_factory=list)
    excerpt: str | None = Field(default=None, description="Derived from content when omitted")


class PromptUpdate(CamelModel):
    """Partial patch; only fields explicitly set are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = Field(default=None, min_length=1)
    category: str | None = None
    tags: list[str] | None = None
    status: PromptStatus | None = None
    featured: bool | None = None


class CounterResult(CamelModel):
    """New value of a single counter; only the counter that changed is set."""

    id: str
    usage_count: int | None = None
    execution_count: int | None = None

    @property
    def value(self) -> int:
        return self.usage_count if self.usage_count is not None else self.execution_count or 0
