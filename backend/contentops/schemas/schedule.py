"""Pydantic schemas for SiteSchedule model."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contentops.schemas.site import SiteRead

FrequencyType = Literal["daily", "weekly", "custom"]

_TIME_OF_DAY = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)(:[0-5]\d)?$")

MIN_ARTICLES_PER_RUN = 1
MAX_ARTICLES_PER_RUN = 10


class ScheduleConfig(BaseModel):
    """Recurrence settings for a site's automated runs."""

    model_config = ConfigDict(from_attributes=True)

    is_enabled: bool = False
    frequency_type: FrequencyType = "daily"
    time_of_day: str = "09:00"
    days_of_week: list[int] = Field(default_factory=list)  # 0=Sunday .. 6=Saturday
    custom_interval_hours: int | None = Field(None, ge=1)
    articles_per_run: int = 1

    @field_validator("time_of_day")
    @classmethod
    def _check_time_of_day(cls, value: str) -> str:
        if not _TIME_OF_DAY.match(value):
            raise ValueError("time_of_day must be HH:MM")
        return value

    @field_validator("days_of_week")
    @classmethod
    def _check_days(cls, value: list[int]) -> list[int]:
        if any(day < 0 or day > 6 for day in value):
            raise ValueError("days_of_week entries must be between 0 (Sunday) and 6 (Saturday)")
        return sorted(set(value))

    @field_validator("articles_per_run")
    @classmethod
    def _clamp_articles(cls, value: int) -> int:
        return max(MIN_ARTICLES_PER_RUN, min(MAX_ARTICLES_PER_RUN, value))


class SiteScheduleRead(ScheduleConfig):
    """Full schedule output including run bookkeeping."""

    id: UUID
    site_id: UUID
    last_run_at: datetime | None = None
    next_run_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ScheduleUpdateRequest(BaseModel):
    schedule: ScheduleConfig


class ScheduleResponse(BaseModel):
    schedule: SiteScheduleRead
    siteName: str


class DueSchedule(SiteScheduleRead):
    """A due schedule joined with its site, including WordPress credentials for n8n."""

    site: SiteRead


class DueScheduleList(BaseModel):
    schedules: list[DueSchedule]
    count: int
    checkedAt: datetime


class RecordRunRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    site_id: UUID = Field(alias="siteId")


class RecordRunResponse(BaseModel):
    success: bool = True
    schedule: SiteScheduleRead
    nextRunAt: datetime | None
