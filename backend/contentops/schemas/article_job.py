"""Pydantic schemas for ArticleJob model and the n8n job endpoints."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

JobStatus = Literal["pending", "processing", "completed", "failed"]
JobCreateOutcome = Literal["created", "already_exists", "already_processing", "duplicate"]


class ArticleJobRead(BaseModel):
    """Full article job output."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    site_id: UUID
    wp_post_id: int | None = None
    idempotency_key: str | None = None
    status: JobStatus
    result_data: dict[str, Any] | None = None
    error_message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class JobCreateRequest(BaseModel):
    """Body sent by n8n when it starts work on a post."""

    model_config = ConfigDict(populate_by_name=True)

    site_id: UUID = Field(alias="siteId")
    wp_post_id: int | None = Field(None, alias="wpPostId", gt=0)
    idempotency_key: str | None = Field(None, alias="idempotencyKey", min_length=1, max_length=255)
    metadata: dict[str, Any] | None = None


class JobCreateResponse(BaseModel):
    status: JobCreateOutcome
    job: ArticleJobRead | None = None
    message: str | None = None


class JobUpdateRequest(BaseModel):
    """Status change reported by n8n."""

    model_config = ConfigDict(populate_by_name=True)

    status: JobStatus
    result_data: dict[str, Any] | None = Field(None, alias="resultData")
    error_message: str | None = Field(None, alias="errorMessage")
    wp_post_id: int | None = Field(None, alias="wpPostId", gt=0)


class DashboardJobUpdateRequest(BaseModel):
    """Status change made by an operator from the jobs page."""

    model_config = ConfigDict(populate_by_name=True)

    status: JobStatus
    error_message: str | None = Field(None, alias="errorMessage")


class JobUpdateResponse(BaseModel):
    status: Literal["updated"] = "updated"
    job: ArticleJobRead


class JobListResponse(BaseModel):
    jobs: list[ArticleJobRead]
    count: int
