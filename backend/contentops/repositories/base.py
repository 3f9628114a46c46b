"""Storage port: typed repositories per entity.

Every implementation returns the pydantic ``*Read`` schemas, never ORM rows,
so handlers and services work the same against Postgres and the in-memory
demo store. Inserts that hit a unique constraint raise
``UniqueConstraintViolation``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Sequence
from uuid import UUID

from contentops.schemas.article import ArticleRead, FeedbackItem
from contentops.schemas.article_job import ArticleJobRead
from contentops.schemas.keyword import KeywordInput, KeywordRead
from contentops.schemas.platform_user import (
    PlatformUserRead,
    PlatformUserUpsert,
    SiteRole,
    UserPermissionRead,
)
from contentops.schemas.schedule import DueSchedule, ScheduleConfig, SiteScheduleRead
from contentops.schemas.site import SiteCreate, SiteRead, SiteWithPermission


class SiteRepository(ABC):
    @abstractmethod
    async def get(self, site_id: UUID) -> SiteRead | None: ...

    @abstractmethod
    async def list(self, active_only: bool = False) -> list[SiteRead]:
        """All sites, newest first."""

    @abstractmethod
    async def list_for_user(self, firebase_uid: str) -> list[SiteWithPermission]:
        """Sites the user holds a permission on, with that role."""

    @abstractmethod
    async def add(self, data: SiteCreate) -> SiteRead: ...

    @abstractmethod
    async def update(self, site_id: UUID, changes: dict[str, Any]) -> SiteRead | None: ...

    @abstractmethod
    async def delete(self, site_id: UUID) -> bool: ...

    @abstractmethod
    async def slug_taken(self, slug: str, exclude_site_id: UUID | None = None) -> bool: ...


class ArticleJobRepository(ABC):
    @abstractmethod
    async def get(self, job_id: UUID, site_id: UUID | None = None) -> ArticleJobRead | None:
        """Fetch a job, optionally requiring it to belong to ``site_id``."""

    @abstractmethod
    async def find_by_idempotency_key(self, key: str) -> ArticleJobRead | None: ...

    @abstractmethod
    async def find_active(self, site_id: UUID, wp_post_id: int) -> ArticleJobRead | None:
        """The pending or processing job for this (site, post), if any."""

    @abstractmethod
    async def list(
        self,
        site_id: UUID | None = None,
        status: str | None = None,
        limit: int = 50,
    ) -> list[ArticleJobRead]:
        """Jobs newest first."""

    @abstractmethod
    async def add(
        self,
        site_id: UUID,
        wp_post_id: int | None,
        idempotency_key: str | None,
    ) -> ArticleJobRead:
        """Insert a new pending job."""

    @abstractmethod
    async def save(self, job: ArticleJobRead) -> ArticleJobRead:
        """Persist the mutable fields of ``job`` (status, timestamps, result, error, post id)."""

    @abstractmethod
    async def delete(self, job_id: UUID) -> bool: ...


class KeywordRepository(ABC):
    @abstractmethod
    async def list(self, site_id: UUID, active_only: bool = False, limit: int | None = None) -> list[KeywordRead]:
        """Keywords by priority, highest first."""

    @abstractmethod
    async def get(self, site_id: UUID, keyword_id: UUID) -> KeywordRead | None: ...

    @abstractmethod
    async def max_priority(self, site_id: UUID) -> int:
        """Highest priority in use on the site, 0 when it has no keywords."""

    @abstractmethod
    async def add(self, site_id: UUID, keyword: str, priority: int) -> KeywordRead: ...

    @abstractmethod
    async def replace_all(self, site_id: UUID, keywords: Sequence[KeywordInput]) -> list[KeywordRead]:
        """Delete every keyword of the site and insert ``keywords``."""

    @abstractmethod
    async def mark_used(self, site_id: UUID, keyword_id: UUID, used_at: datetime) -> KeywordRead | None: ...


class ScheduleRepository(ABC):
    @abstractmethod
    async def get(self, site_id: UUID) -> SiteScheduleRead | None: ...

    @abstractmethod
    async def add(self, site_id: UUID, config: ScheduleConfig) -> SiteScheduleRead: ...

    @abstractmethod
    async def update_config(
        self, site_id: UUID, config: ScheduleConfig, next_run_at: datetime | None
    ) -> SiteScheduleRead | None: ...

    @abstractmethod
    async def record_run(
        self, site_id: UUID, last_run_at: datetime, next_run_at: datetime | None
    ) -> SiteScheduleRead | None: ...

    @abstractmethod
    async def list_due(self, now: datetime) -> list[DueSchedule]:
        """Enabled schedules with ``next_run_at <= now`` whose site is active."""


class ArticleRepository(ABC):
    @abstractmethod
    async def get(self, article_id: UUID, site_id: UUID | None = None) -> ArticleRead | None: ...

    @abstractmethod
    async def list(self, site_id: UUID, limit: int | None = None, order_by: str = "updated_at") -> list[ArticleRead]:
        """Articles of a site, newest first by ``order_by`` (``updated_at`` or ``created_at``)."""

    @abstractmethod
    async def add(
        self,
        site_id: UUID,
        title: str,
        wp_post_id: int | None,
        source_data: dict[str, Any],
    ) -> ArticleRead:
        """Insert a draft article."""

    @abstractmethod
    async def update(self, article_id: UUID, changes: dict[str, Any]) -> ArticleRead | None: ...

    @abstractmethod
    async def append_feedback(self, article_id: UUID, item: FeedbackItem) -> ArticleRead | None: ...


class PlatformUserRepository(ABC):
    @abstractmethod
    async def list(self) -> list[PlatformUserRead]: ...

    @abstractmethod
    async def get(self, user_id: UUID) -> PlatformUserRead | None: ...

    @abstractmethod
    async def get_by_uid(self, firebase_uid: str) -> PlatformUserRead | None: ...

    @abstractmethod
    async def upsert(self, data: PlatformUserUpsert) -> PlatformUserRead: ...

    @abstractmethod
    async def update_role(self, user_id: UUID, role: str) -> PlatformUserRead | None: ...

    @abstractmethod
    async def delete(self, user_id: UUID) -> bool: ...

    @abstractmethod
    async def get_site_role(self, firebase_uid: str, site_id: UUID) -> SiteRole | None: ...

    @abstractmethod
    async def grant(self, firebase_uid: str, site_id: UUID, role: SiteRole) -> UserPermissionRead: ...

    @abstractmethod
    async def revoke(self, firebase_uid: str, site_id: UUID) -> bool: ...


@dataclass
class Store:
    """One unit of work: the repositories a request handler talks to."""

    sites: SiteRepository
    jobs: ArticleJobRepository
    keywords: KeywordRepository
    schedules: ScheduleRepository
    articles: ArticleRepository
    users: PlatformUserRepository

    async def ping(self) -> bool:
        """Cheap reachability check for the health endpoint."""
        await self.sites.list(active_only=True)
        return True


# Opens a Store for one request; commits on success, rolls back on error.
StoreFactory = Callable[[], AbstractAsyncContextManager[Store]]
