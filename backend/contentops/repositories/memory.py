"""In-memory store: the demo-mode backend, also used by the test suite.

State lives in a ``MemoryDatabase`` instance owned by whoever builds the
app; nothing is module-level. Unique constraints mirror the Postgres schema
so the dedup paths behave the same. There is no rollback: a failed request
keeps whatever it already wrote.
"""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Sequence
from uuid import UUID

from contentops import demo_data
from contentops.errors import UniqueConstraintViolation
from contentops.repositories.base import (
    ArticleJobRepository,
    ArticleRepository,
    KeywordRepository,
    PlatformUserRepository,
    ScheduleRepository,
    SiteRepository,
    Store,
)
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
from contentops.services.job_state import ACTIVE_STATUSES
from contentops.services.scheduling import compute_next_run


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class MemoryDatabase:
    sites: dict[UUID, SiteRead] = field(default_factory=dict)
    jobs: dict[UUID, ArticleJobRead] = field(default_factory=dict)
    keywords: dict[UUID, KeywordRead] = field(default_factory=dict)
    schedules: dict[UUID, SiteScheduleRead] = field(default_factory=dict)  # keyed by site_id
    articles: dict[UUID, ArticleRead] = field(default_factory=dict)
    users: dict[UUID, PlatformUserRead] = field(default_factory=dict)
    permissions: dict[tuple[str, UUID], UserPermissionRead] = field(default_factory=dict)


class MemorySiteRepository(SiteRepository):
    def __init__(self, db: MemoryDatabase):
        self.db = db

    async def get(self, site_id: UUID) -> SiteRead | None:
        site = self.db.sites.get(site_id)
        return site.model_copy() if site else None

    async def list(self, active_only: bool = False) -> list[SiteRead]:
        sites = [s for s in self.db.sites.values() if s.is_active or not active_only]
        return sorted(sites, key=lambda s: s.created_at, reverse=True)

    async def list_for_user(self, firebase_uid: str) -> list[SiteWithPermission]:
        result = []
        for (uid, site_id), permission in self.db.permissions.items():
            site = self.db.sites.get(site_id)
            if uid != firebase_uid or site is None:
                continue
            result.append(
                SiteWithPermission(
                    id=site.id,
                    name=site.name,
                    slug=site.slug,
                    description=site.description,
                    role=permission.role,
                )
            )
        return sorted(result, key=lambda s: s.name)

    async def add(self, data: SiteCreate) -> SiteRead:
        if await self.slug_taken(data.slug):
            raise UniqueConstraintViolation("sites_slug_key")
        now = _now()
        site = SiteRead(id=uuid.uuid4(), created_at=now, updated_at=now, **data.model_dump())
        self.db.sites[site.id] = site
        return site.model_copy()

    async def update(self, site_id: UUID, changes: dict[str, Any]) -> SiteRead | None:
        site = self.db.sites.get(site_id)
        if site is None:
            return None
        if "slug" in changes and await self.slug_taken(changes["slug"], exclude_site_id=site_id):
            raise UniqueConstraintViolation("sites_slug_key")
        updated = site.model_copy(update={**changes, "updated_at": _now()})
        self.db.sites[site_id] = updated
        return updated.model_copy()

    async def delete(self, site_id: UUID) -> bool:
        if self.db.sites.pop(site_id, None) is None:
            return False
        # ON DELETE CASCADE
        self.db.schedules.pop(site_id, None)
        for table in (self.db.jobs, self.db.keywords, self.db.articles):
            for row_id in [k for k, row in table.items() if row.site_id == site_id]:
                del table[row_id]
        for key in [k for k in self.db.permissions if k[1] == site_id]:
            del self.db.permissions[key]
        return True

    async def slug_taken(self, slug: str, exclude_site_id: UUID | None = None) -> bool:
        return any(s.slug == slug and s.id != exclude_site_id for s in self.db.sites.values())


class MemoryArticleJobRepository(ArticleJobRepository):
    def __init__(self, db: MemoryDatabase):
        self.db = db

    async def get(self, job_id: UUID, site_id: UUID | None = None) -> ArticleJobRead | None:
        job = self.db.jobs.get(job_id)
        if job is None or (site_id is not None and job.site_id != site_id):
            return None
        return job.model_copy(deep=True)

    async def find_by_idempotency_key(self, key: str) -> ArticleJobRead | None:
        for job in self.db.jobs.values():
            if job.idempotency_key == key:
                return job.model_copy(deep=True)
        return None

    async def find_active(self, site_id: UUID, wp_post_id: int) -> ArticleJobRead | None:
        for job in self.db.jobs.values():
            if job.site_id == site_id and job.wp_post_id == wp_post_id and job.status in ACTIVE_STATUSES:
                return job.model_copy(deep=True)
        return None

    async def list(
        self,
        site_id: UUID | None = None,
        status: str | None = None,
        limit: int = 50,
    ) -> list[ArticleJobRead]:
        jobs = [
            j for j in self.db.jobs.values()
            if (site_id is None or j.site_id == site_id) and (status is None or j.status == status)
        ]
        jobs.sort(key=lambda j: j.created_at, reverse=True)
        return [j.model_copy(deep=True) for j in jobs[:limit]]

    def _check_unique(self, job: ArticleJobRead) -> None:
        for other in self.db.jobs.values():
            if other.id == job.id:
                continue
            if job.idempotency_key and other.idempotency_key == job.idempotency_key:
                raise UniqueConstraintViolation("article_jobs_idempotency_key_key")
            if (
                job.wp_post_id is not None
                and job.status in ACTIVE_STATUSES
                and other.status in ACTIVE_STATUSES
                and other.site_id == job.site_id
                and other.wp_post_id == job.wp_post_id
            ):
                raise UniqueConstraintViolation("uq_article_jobs_active_post")

    async def add(
        self,
        site_id: UUID,
        wp_post_id: int | None,
        idempotency_key: str | None,
    ) -> ArticleJobRead:
        now = _now()
        job = ArticleJobRead(
            id=uuid.uuid4(),
            site_id=site_id,
            wp_post_id=wp_post_id,
            idempotency_key=idempotency_key,
            status="pending",
            created_at=now,
            updated_at=now,
        )
        self._check_unique(job)
        self.db.jobs[job.id] = job
        return job.model_copy(deep=True)

    async def save(self, job: ArticleJobRead) -> ArticleJobRead:
        self._check_unique(job)
        self.db.jobs[job.id] = job.model_copy(deep=True)
        return job

    async def delete(self, job_id: UUID) -> bool:
        return self.db.jobs.pop(job_id, None) is not None


class MemoryKeywordRepository(KeywordRepository):
    def __init__(self, db: MemoryDatabase):
        self.db = db

    async def list(self, site_id: UUID, active_only: bool = False, limit: int | None = None) -> list[KeywordRead]:
        keywords = [
            k for k in self.db.keywords.values()
            if k.site_id == site_id and (k.is_active or not active_only)
        ]
        keywords.sort(key=lambda k: k.priority, reverse=True)
        if limit is not None:
            keywords = keywords[:limit]
        return [k.model_copy() for k in keywords]

    async def get(self, site_id: UUID, keyword_id: UUID) -> KeywordRead | None:
        keyword = self.db.keywords.get(keyword_id)
        if keyword is None or keyword.site_id != site_id:
            return None
        return keyword.model_copy()

    async def max_priority(self, site_id: UUID) -> int:
        priorities = [k.priority for k in self.db.keywords.values() if k.site_id == site_id]
        return max(priorities, default=0)

    def _insert(self, site_id: UUID, **fields: Any) -> KeywordRead:
        now = _now()
        keyword = KeywordRead(id=uuid.uuid4(), site_id=site_id, created_at=now, updated_at=now, **fields)
        self.db.keywords[keyword.id] = keyword
        return keyword.model_copy()

    async def add(self, site_id: UUID, keyword: str, priority: int) -> KeywordRead:
        return self._insert(site_id, keyword=keyword, priority=priority, is_active=True, use_count=0)

    async def replace_all(self, site_id: UUID, keywords: Sequence[KeywordInput]) -> list[KeywordRead]:
        for keyword_id in [k for k, row in self.db.keywords.items() if row.site_id == site_id]:
            del self.db.keywords[keyword_id]
        return [self._insert(site_id, **kw.model_dump()) for kw in keywords]

    async def mark_used(self, site_id: UUID, keyword_id: UUID, used_at: datetime) -> KeywordRead | None:
        keyword = self.db.keywords.get(keyword_id)
        if keyword is None or keyword.site_id != site_id:
            return None
        updated = keyword.model_copy(
            update={"use_count": keyword.use_count + 1, "last_used_at": used_at, "updated_at": _now()}
        )
        self.db.keywords[keyword_id] = updated
        return updated.model_copy()


class MemoryScheduleRepository(ScheduleRepository):
    def __init__(self, db: MemoryDatabase):
        self.db = db

    async def get(self, site_id: UUID) -> SiteScheduleRead | None:
        schedule = self.db.schedules.get(site_id)
        return schedule.model_copy(deep=True) if schedule else None

    async def add(self, site_id: UUID, config: ScheduleConfig) -> SiteScheduleRead:
        if site_id in self.db.schedules:
            raise UniqueConstraintViolation("site_schedules_site_id_key")
        now = _now()
        schedule = SiteScheduleRead(
            id=uuid.uuid4(),
            site_id=site_id,
            created_at=now,
            updated_at=now,
            **config.model_dump(),
        )
        self.db.schedules[site_id] = schedule
        return schedule.model_copy(deep=True)

    def _update(self, site_id: UUID, changes: dict[str, Any]) -> SiteScheduleRead | None:
        schedule = self.db.schedules.get(site_id)
        if schedule is None:
            return None
        updated = schedule.model_copy(update={**changes, "updated_at": _now()})
        self.db.schedules[site_id] = updated
        return updated.model_copy(deep=True)

    async def update_config(
        self, site_id: UUID, config: ScheduleConfig, next_run_at: datetime | None
    ) -> SiteScheduleRead | None:
        return self._update(site_id, {**config.model_dump(), "next_run_at": next_run_at})

    async def record_run(
        self, site_id: UUID, last_run_at: datetime, next_run_at: datetime | None
    ) -> SiteScheduleRead | None:
        return self._update(site_id, {"last_run_at": last_run_at, "next_run_at": next_run_at})

    async def list_due(self, now: datetime) -> list[DueSchedule]:
        due = []
        for schedule in self.db.schedules.values():
            site = self.db.sites.get(schedule.site_id)
            if (
                site is None
                or not site.is_active
                or not schedule.is_enabled
                or schedule.next_run_at is None
                or schedule.next_run_at > now
            ):
                continue
            due.append(DueSchedule(**schedule.model_dump(), site=site))
        return sorted(due, key=lambda s: s.next_run_at)


class MemoryArticleRepository(ArticleRepository):
    def __init__(self, db: MemoryDatabase):
        self.db = db

    async def get(self, article_id: UUID, site_id: UUID | None = None) -> ArticleRead | None:
        article = self.db.articles.get(article_id)
        if article is None or (site_id is not None and article.site_id != site_id):
            return None
        return article.model_copy(deep=True)

    async def list(self, site_id: UUID, limit: int | None = None, order_by: str = "updated_at") -> list[ArticleRead]:
        articles = [a for a in self.db.articles.values() if a.site_id == site_id]
        articles.sort(key=lambda a: getattr(a, order_by), reverse=True)
        if limit is not None:
            articles = articles[:limit]
        return [a.model_copy(deep=True) for a in articles]

    async def add(
        self,
        site_id: UUID,
        title: str,
        wp_post_id: int | None,
        source_data: dict[str, Any],
    ) -> ArticleRead:
        now = _now()
        article = ArticleRead(
            id=uuid.uuid4(),
            site_id=site_id,
            title=title,
            status="draft",
            source_data=source_data,
            feedback_history=[],
            wp_post_id=wp_post_id,
            created_at=now,
            updated_at=now,
        )
        self.db.articles[article.id] = article
        return article.model_copy(deep=True)

    async def update(self, article_id: UUID, changes: dict[str, Any]) -> ArticleRead | None:
        article = self.db.articles.get(article_id)
        if article is None:
            return None
        updated = article.model_copy(update={**changes, "updated_at": _now()})
        self.db.articles[article_id] = updated
        return updated.model_copy(deep=True)

    async def append_feedback(self, article_id: UUID, item: FeedbackItem) -> ArticleRead | None:
        article = self.db.articles.get(article_id)
        if article is None:
            return None
        return await self.update(article_id, {"feedback_history": [*article.feedback_history, item]})


class MemoryPlatformUserRepository(PlatformUserRepository):
    def __init__(self, db: MemoryDatabase):
        self.db = db

    async def list(self) -> list[PlatformUserRead]:
        users = sorted(self.db.users.values(), key=lambda u: u.created_at, reverse=True)
        return [u.model_copy() for u in users]

    async def get(self, user_id: UUID) -> PlatformUserRead | None:
        user = self.db.users.get(user_id)
        return user.model_copy() if user else None

    async def get_by_uid(self, firebase_uid: str) -> PlatformUserRead | None:
        for user in self.db.users.values():
            if user.firebase_uid == firebase_uid:
                return user.model_copy()
        return None

    async def upsert(self, data: PlatformUserUpsert) -> PlatformUserRead:
        now = _now()
        existing = await self.get_by_uid(data.firebase_uid)
        if existing:
            user = existing.model_copy(update={**data.model_dump(), "updated_at": now})
        else:
            user = PlatformUserRead(id=uuid.uuid4(), created_at=now, updated_at=now, **data.model_dump())
        self.db.users[user.id] = user
        return user.model_copy()

    async def update_role(self, user_id: UUID, role: str) -> PlatformUserRead | None:
        user = self.db.users.get(user_id)
        if user is None:
            return None
        updated = user.model_copy(update={"role": role, "updated_at": _now()})
        self.db.users[user_id] = updated
        return updated.model_copy()

    async def delete(self, user_id: UUID) -> bool:
        return self.db.users.pop(user_id, None) is not None

    async def get_site_role(self, firebase_uid: str, site_id: UUID) -> SiteRole | None:
        permission = self.db.permissions.get((firebase_uid, site_id))
        return permission.role if permission else None

    async def grant(self, firebase_uid: str, site_id: UUID, role: SiteRole) -> UserPermissionRead:
        existing = self.db.permissions.get((firebase_uid, site_id))
        permission = UserPermissionRead(
            id=existing.id if existing else uuid.uuid4(),
            firebase_uid=firebase_uid,
            site_id=site_id,
            role=role,
            created_at=existing.created_at if existing else _now(),
        )
        self.db.permissions[(firebase_uid, site_id)] = permission
        return permission.model_copy()

    async def revoke(self, firebase_uid: str, site_id: UUID) -> bool:
        return self.db.permissions.pop((firebase_uid, site_id), None) is not None


def build_memory_store(db: MemoryDatabase) -> Store:
    return Store(
        sites=MemorySiteRepository(db),
        jobs=MemoryArticleJobRepository(db),
        keywords=MemoryKeywordRepository(db),
        schedules=MemoryScheduleRepository(db),
        articles=MemoryArticleRepository(db),
        users=MemoryPlatformUserRepository(db),
    )


class MemoryStoreFactory:
    """Hands every request the same store over one shared ``MemoryDatabase``."""

    def __init__(self, db: MemoryDatabase | None = None):
        self.db = db or MemoryDatabase()
        self.store = build_memory_store(self.db)

    @asynccontextmanager
    async def __call__(self) -> AsyncIterator[Store]:
        yield self.store


def seed_demo_data(db: MemoryDatabase, now: datetime) -> None:
    """Load the demo sites, the demo user's grants, keywords, a schedule and articles."""

    for site in demo_data.DEMO_SITES:
        db.sites[site["id"]] = SiteRead(updated_at=site["created_at"], **site)

    for site_id, role in demo_data.DEMO_PERMISSIONS:
        db.permissions[(demo_data.DEMO_USER_UID, site_id)] = UserPermissionRead(
            id=uuid.uuid4(),
            firebase_uid=demo_data.DEMO_USER_UID,
            site_id=site_id,
            role=role,
            created_at=now,
        )

    for kw in demo_data.DEMO_KEYWORDS:
        keyword = KeywordRead(
            id=uuid.uuid4(),
            site_id=demo_data.HEALTH_SITE_ID,
            created_at=now,
            updated_at=now,
            **kw,
        )
        db.keywords[keyword.id] = keyword

    config = ScheduleConfig(**demo_data.DEMO_SCHEDULE)
    db.schedules[demo_data.HEALTH_SITE_ID] = SiteScheduleRead(
        id=uuid.uuid4(),
        site_id=demo_data.HEALTH_SITE_ID,
        next_run_at=compute_next_run(config, now),
        created_at=now,
        updated_at=now,
        **config.model_dump(),
    )

    for data in demo_data.DEMO_ARTICLES:
        article = ArticleRead(id=uuid.uuid4(), updated_at=data["created_at"], **data)
        db.articles[article.id] = article
