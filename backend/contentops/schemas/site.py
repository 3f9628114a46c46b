"""Pydantic schemas for Site model."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from contentops.schemas.platform_user import SiteRole


class SiteBase(BaseModel):
    """Base fields for a site."""

    name: str
    slug: str
    description: str | None = None
    system_prompt: str | None = None
    wp_url: str | None = None
    wp_username: str | None = None
    wp_app_password: str | None = None
    n8n_webhook_url: str | None = None
    is_active: bool = True


class SiteCreate(BaseModel):
    """Fields accepted when a super admin creates a site."""

    name: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    description: str | None = None
    wp_url: str | None = None
    is_active: bool = True


class SiteUpdate(BaseModel):
    """Partial update from the settings page. Unset fields are left alone."""

    name: str | None = None
    slug: str | None = None
    description: str | None = None
    system_prompt: str | None = None
    wp_url: str | None = None
    wp_username: str | None = None
    wp_app_password: str | None = None
    n8n_webhook_url: str | None = None
    is_active: bool | None = None


class SiteRead(SiteBase):
    """Full site output."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime


class SiteSummary(BaseModel):
    """Minimal site info for navigation lists."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str
    description: str | None = None


class SiteWithPermission(SiteSummary):
    """Site as seen by a particular user, with that user's role on it."""

    role: SiteRole


class SiteActiveUpdate(BaseModel):
    is_active: bool


class WebhookTriggerRequest(BaseModel):
    """Posts to send to the site's n8n workflow for regeneration."""

    model_config = ConfigDict(populate_by_name=True)

    post_ids: list[int] = Field(alias="postIds", min_length=1)
