"""Pydantic schemas for Article model."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

ArticleStatus = Literal["draft", "review", "published"]


class FeedbackItem(BaseModel):
    text: str
    created_at: datetime


class ArticleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    site_id: UUID
    title: str
    content_html: str | None = None
    status: ArticleStatus
    source_data: Any = None
    feedback_history: list[FeedbackItem] = []
    wp_post_id: int | None = None
    created_at: datetime
    updated_at: datetime


class ArticleSummary(BaseModel):
    """Recent article info n8n uses to avoid repeating itself."""

    id: UUID
    title: str
    createdAt: datetime
    angle: str | None = None


class ArticleCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1)
    keyword: str | None = None
    wp_post_id: int | None = Field(None, alias="wpPostId")
    angle: str | None = None


class ArticleStatusUpdate(BaseModel):
    status: ArticleStatus


class ArticleContentUpdate(BaseModel):
    content_html: str


class FeedbackRequest(BaseModel):
    feedback: str = Field(min_length=1)
    regenerate: bool = True  # False only records the feedback
