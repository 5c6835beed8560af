from __future__ import annotations

from pdir.schemas.base import RecordModel
from pdir.schemas.prompt import PromptSummary


class CategoryOut(RecordModel):
    category_id: str
    name: str
    description: str
    icon: str
    prompt_count: int


class BootData(RecordModel):
    """Everything the directory page needs on first load."""

    categories: list[CategoryOut]
    recent_prompts: list[PromptSummary]
