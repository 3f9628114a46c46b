"""Pydantic schemas for SiteKeyword model."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class KeywordRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    site_id: UUID
    keyword: str
    priority: int
    is_active: bool
    use_count: int = 0
    last_used_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class KeywordInput(BaseModel):
    """One row of a full keyword-list replacement."""

    keyword: str = Field(min_length=1)
    priority: int | None = None
    is_active: bool = True
    use_count: int = 0
    last_used_at: datetime | None = None


class KeywordReplaceRequest(BaseModel):
    keywords: list[KeywordInput]


class KeywordCreate(BaseModel):
    keyword: str
    priority: int | None = None


class KeywordUseRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    keyword_id: UUID = Field(alias="keywordId")


class KeywordList(BaseModel):
    keywords: list[KeywordRead]
    count: int
