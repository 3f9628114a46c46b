"""Pydantic schemas for platform users and site permissions."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

PlatformRole = Literal["super_admin", "user"]
SiteRole = Literal["admin", "manager"]


class PlatformUserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    firebase_uid: str
    email: str
    display_name: str | None = None
    role: PlatformRole
    created_at: datetime
    updated_at: datetime


class PlatformUserUpsert(BaseModel):
    """Create or update a platform user, keyed by ``firebase_uid``."""

    firebase_uid: str = Field(min_length=1)
    email: str = Field(min_length=3)
    display_name: str | None = None
    role: PlatformRole = "user"


class PlatformRoleUpdate(BaseModel):
    role: PlatformRole


class PermissionGrant(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    firebase_uid: str = Field(alias="firebaseUid", min_length=1)
    role: SiteRole


class UserPermissionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    firebase_uid: str
    site_id: UUID
    role: SiteRole
    created_at: datetime
