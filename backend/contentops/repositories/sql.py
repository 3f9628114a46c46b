"""SQLAlchemy implementation of the storage port."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Sequence
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from contentops.errors import NotFoundError, UniqueConstraintViolation
from contentops.models.article import Article
from contentops.models.article_job import ArticleJob
from contentops.models.platform_user import PlatformUser
from contentops.models.site import Site
from contentops.models.site_keyword import SiteKeyword
from contentops.models.site_schedule import SiteSchedule
from contentops.models.user_permission import UserPermission
from contentops.repositories.base import (
    ArticleJobRepository,
    ArticleRepository,
    KeywordRepository,
    PlatformUserRepository,
    ScheduleRepository,
    SiteRepository,
    Store,
    StoreFactory,
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

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def _unique_violation(exc: IntegrityError) -> UniqueConstraintViolation | None:
    """Map a Postgres unique violation to the storage-port error, else None."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code != UNIQUE_VIOLATION:
        return None
    constraint = getattr(orig.__cause__, "constraint_name", None) or "unknown"
    return UniqueConstraintViolation(constraint)


class _SqlRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _write(self, *rows: Any) -> None:
        """Flush pending changes inside a savepoint, then reload server-side defaults."""
        try:
            async with self.session.begin_nested():
                self.session.add_all(rows)
        except IntegrityError as exc:
            violation = _unique_violation(exc)
            if violation is None:
                raise
            logger.info("Unique constraint hit: %s", violation.constraint)
            raise violation from exc
        for row in rows:
            await self.session.refresh(row)


class SqlSiteRepository(_SqlRepository, SiteRepository):
    async def get(self, site_id: UUID) -> SiteRead | None:
        site = await self.session.get(Site, site_id)
        return SiteRead.model_validate(site) if site else None

    async def list(self, active_only: bool = False) -> list[SiteRead]:
        query = select(Site).order_by(Site.created_at.desc())
        if active_only:
            query = query.where(Site.is_active.is_(True))
        result = await self.session.execute(query)
        return [SiteRead.model_validate(s) for s in result.scalars().all()]

    async def list_for_user(self, firebase_uid: str) -> list[SiteWithPermission]:
        query = (
            select(Site, UserPermission.role)
            .join(UserPermission, UserPermission.site_id == Site.id)
            .where(UserPermission.firebase_uid == firebase_uid)
            .order_by(Site.name)
        )
        result = await self.session.execute(query)
        return [
            SiteWithPermission(id=site.id, name=site.name, slug=site.slug, description=site.description, role=role)
            for site, role in result.all()
        ]

    async def add(self, data: SiteCreate) -> SiteRead:
        site = Site(**data.model_dump())
        await self._write(site)
        return SiteRead.model_validate(site)

    async def update(self, site_id: UUID, changes: dict[str, Any]) -> SiteRead | None:
        site = await self.session.get(Site, site_id)
        if site is None:
            return None
        for key, value in changes.items():
            setattr(site, key, value)
        await self._write(site)
        return SiteRead.model_validate(site)

    async def delete(self, site_id: UUID) -> bool:
        # Child rows go with it through ON DELETE CASCADE
        result = await self.session.execute(delete(Site).where(Site.id == site_id))
        return result.rowcount > 0

    async def slug_taken(self, slug: str, exclude_site_id: UUID | None = None) -> bool:
        query = select(Site.id).where(Site.slug == slug)
        if exclude_site_id is not None:
            query = query.where(Site.id != exclude_site_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None


class SqlArticleJobRepository(_SqlRepository, ArticleJobRepository):
    async def get(self, job_id: UUID, site_id: UUID | None = None) -> ArticleJobRead | None:
        job = await self.session.get(ArticleJob, job_id)
        if job is None or (site_id is not None and job.site_id != site_id):
            return None
        return ArticleJobRead.model_validate(job)

    async def find_by_idempotency_key(self, key: str) -> ArticleJobRead | None:
        result = await self.session.execute(select(ArticleJob).where(ArticleJob.idempotency_key == key))
        job = result.scalar_one_or_none()
        return ArticleJobRead.model_validate(job) if job else None

    async def find_active(self, site_id: UUID, wp_post_id: int) -> ArticleJobRead | None:
        query = (
            select(ArticleJob)
            .where(
                ArticleJob.site_id == site_id,
                ArticleJob.wp_post_id == wp_post_id,
                ArticleJob.status.in_(ACTIVE_STATUSES),
            )
            .limit(1)
        )
        result = await self.session.execute(query)
        job = result.scalar_one_or_none()
        return ArticleJobRead.model_validate(job) if job else None

    async def list(
        self,
        site_id: UUID | None = None,
        status: str | None = None,
        limit: int = 50,
    ) -> list[ArticleJobRead]:
        query = select(ArticleJob)
        if site_id is not None:
            query = query.where(ArticleJob.site_id == site_id)
        if status:
            query = query.where(ArticleJob.status == status)
        query = query.order_by(ArticleJob.created_at.desc()).limit(limit)
        result = await self.session.execute(query)
        return [ArticleJobRead.model_validate(j) for j in result.scalars().all()]

    async def add(
        self,
        site_id: UUID,
        wp_post_id: int | None,
        idempotency_key: str | None,
    ) -> ArticleJobRead:
        job = ArticleJob(
            site_id=site_id,
            wp_post_id=wp_post_id,
            idempotency_key=idempotency_key,
            status="pending",
        )
        await self._write(job)
        return ArticleJobRead.model_validate(job)

    async def save(self, job: ArticleJobRead) -> ArticleJobRead:
        row = await self.session.get(ArticleJob, job.id)
        if row is None:
            raise NotFoundError("Job not found")
        for field in ("status", "wp_post_id", "result_data", "error_message", "started_at", "completed_at"):
            setattr(row, field, getattr(job, field))
        await self._write(row)
        return ArticleJobRead.model_validate(row)

    async def delete(self, job_id: UUID) -> bool:
        result = await self.session.execute(delete(ArticleJob).where(ArticleJob.id == job_id))
        return result.rowcount > 0


class SqlKeywordRepository(_SqlRepository, KeywordRepository):
    async def list(self, site_id: UUID, active_only: bool = False, limit: int | None = None) -> list[KeywordRead]:
        query = select(SiteKeyword).where(SiteKeyword.site_id == site_id)
        if active_only:
            query = query.where(SiteKeyword.is_active.is_(True))
        query = query.order_by(SiteKeyword.priority.desc())
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return [KeywordRead.model_validate(k) for k in result.scalars().all()]

    async def get(self, site_id: UUID, keyword_id: UUID) -> KeywordRead | None:
        keyword = await self.session.get(SiteKeyword, keyword_id)
        if keyword is None or keyword.site_id != site_id:
            return None
        return KeywordRead.model_validate(keyword)

    async def max_priority(self, site_id: UUID) -> int:
        result = await self.session.execute(
            select(func.max(SiteKeyword.priority)).where(SiteKeyword.site_id == site_id)
        )
        return result.scalar_one_or_none() or 0

    async def add(self, site_id: UUID, keyword: str, priority: int) -> KeywordRead:
        row = SiteKeyword(site_id=site_id, keyword=keyword, priority=priority, is_active=True, use_count=0)
        await self._write(row)
        return KeywordRead.model_validate(row)

    async def replace_all(self, site_id: UUID, keywords: Sequence[KeywordInput]) -> list[KeywordRead]:
        await self.session.execute(delete(SiteKeyword).where(SiteKeyword.site_id == site_id))
        rows = [SiteKeyword(site_id=site_id, **kw.model_dump()) for kw in keywords]
        if rows:
            await self._write(*rows)
        return [KeywordRead.model_validate(r) for r in rows]

    async def mark_used(self, site_id: UUID, keyword_id: UUID, used_at: datetime) -> KeywordRead | None:
        row = await self.session.get(SiteKeyword, keyword_id)
        if row is None or row.site_id != site_id:
            return None
        row.use_count = (row.use_count or 0) + 1
        row.last_used_at = used_at
        await self._write(row)
        return KeywordRead.model_validate(row)


class SqlScheduleRepository(_SqlRepository, ScheduleRepository):
    async def _row(self, site_id: UUID) -> SiteSchedule | None:
        result = await self.session.execute(select(SiteSchedule).where(SiteSchedule.site_id == site_id))
        return result.scalar_one_or_none()

    async def get(self, site_id: UUID) -> SiteScheduleRead | None:
        row = await self._row(site_id)
        return SiteScheduleRead.model_validate(row) if row else None

    async def add(self, site_id: UUID, config: ScheduleConfig) -> SiteScheduleRead:
        row = SiteSchedule(site_id=site_id, **config.model_dump())
        await self._write(row)
        return SiteScheduleRead.model_validate(row)

    async def update_config(
        self, site_id: UUID, config: ScheduleConfig, next_run_at: datetime | None
    ) -> SiteScheduleRead | None:
        row = await self._row(site_id)
        if row is None:
            return None
        for key, value in config.model_dump().items():
            setattr(row, key, value)
        row.next_run_at = next_run_at
        await self._write(row)
        return SiteScheduleRead.model_validate(row)

    async def record_run(
        self, site_id: UUID, last_run_at: datetime, next_run_at: datetime | None
    ) -> SiteScheduleRead | None:
        row = await self._row(site_id)
        if row is None:
            return None
        row.last_run_at = last_run_at
        row.next_run_at = next_run_at
        await self._write(row)
        return SiteScheduleRead.model_validate(row)

    async def list_due(self, now: datetime) -> list[DueSchedule]:
        query = (
            select(SiteSchedule, Site)
            .join(Site, Site.id == SiteSchedule.site_id)
            .where(
                SiteSchedule.is_enabled.is_(True),
                SiteSchedule.next_run_at <= now,
                Site.is_active.is_(True),
            )
            .order_by(SiteSchedule.next_run_at)
        )
        result = await self.session.execute(query)
        return [
            DueSchedule(
                **SiteScheduleRead.model_validate(schedule).model_dump(),
                site=SiteRead.model_validate(site),
            )
            for schedule, site in result.all()
        ]


class SqlArticleRepository(_SqlRepository, ArticleRepository):
    async def get(self, article_id: UUID, site_id: UUID | None = None) -> ArticleRead | None:
        article = await self.session.get(Article, article_id)
        if article is None or (site_id is not None and article.site_id != site_id):
            return None
        return ArticleRead.model_validate(article)

    async def list(self, site_id: UUID, limit: int | None = None, order_by: str = "updated_at") -> list[ArticleRead]:
        column = Article.created_at if order_by == "created_at" else Article.updated_at
        query = select(Article).where(Article.site_id == site_id).order_by(column.desc())
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return [ArticleRead.model_validate(a) for a in result.scalars().all()]

    async def add(
        self,
        site_id: UUID,
        title: str,
        wp_post_id: int | None,
        source_data: dict[str, Any],
    ) -> ArticleRead:
        article = Article(
            site_id=site_id,
            title=title,
            status="draft",
            source_data=source_data,
            feedback_history=[],
            wp_post_id=wp_post_id,
        )
        await self._write(article)
        return ArticleRead.model_validate(article)

    async def update(self, article_id: UUID, changes: dict[str, Any]) -> ArticleRead | None:
        article = await self.session.get(Article, article_id)
        if article is None:
            return None
        for key, value in changes.items():
            setattr(article, key, value)
        await self._write(article)
        return ArticleRead.model_validate(article)

    async def append_feedback(self, article_id: UUID, item: FeedbackItem) -> ArticleRead | None:
        article = await self.session.get(Article, article_id)
        if article is None:
            return None
        # Reassign so the JSONB column is marked dirty
        article.feedback_history = [*(article.feedback_history or []), item.model_dump(mode="json")]
        await self._write(article)
        return ArticleRead.model_validate(article)


class SqlPlatformUserRepository(_SqlRepository, PlatformUserRepository):
    async def list(self) -> list[PlatformUserRead]:
        result = await self.session.execute(select(PlatformUser).order_by(PlatformUser.created_at.desc()))
        return [PlatformUserRead.model_validate(u) for u in result.scalars().all()]

    async def get(self, user_id: UUID) -> PlatformUserRead | None:
        user = await self.session.get(PlatformUser, user_id)
        return PlatformUserRead.model_validate(user) if user else None

    async def _by_uid(self, firebase_uid: str) -> PlatformUser | None:
        result = await self.session.execute(select(PlatformUser).where(PlatformUser.firebase_uid == firebase_uid))
        return result.scalar_one_or_none()

    async def get_by_uid(self, firebase_uid: str) -> PlatformUserRead | None:
        user = await self._by_uid(firebase_uid)
        return PlatformUserRead.model_validate(user) if user else None

    async def upsert(self, data: PlatformUserUpsert) -> PlatformUserRead:
        user = await self._by_uid(data.firebase_uid)
        if user is None:
            user = PlatformUser(**data.model_dump())
        else:
            for key, value in data.model_dump().items():
                setattr(user, key, value)
        await self._write(user)
        return PlatformUserRead.model_validate(user)

    async def update_role(self, user_id: UUID, role: str) -> PlatformUserRead | None:
        user = await self.session.get(PlatformUser, user_id)
        if user is None:
            return None
        user.role = role
        await self._write(user)
        return PlatformUserRead.model_validate(user)

    async def delete(self, user_id: UUID) -> bool:
        result = await self.session.execute(delete(PlatformUser).where(PlatformUser.id == user_id))
        return result.rowcount > 0

    async def _permission(self, firebase_uid: str, site_id: UUID) -> UserPermission | None:
        result = await self.session.execute(
            select(UserPermission).where(
                UserPermission.firebase_uid == firebase_uid,
                UserPermission.site_id == site_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_site_role(self, firebase_uid: str, site_id: UUID) -> SiteRole | None:
        permission = await self._permission(firebase_uid, site_id)
        return permission.role if permission else None

    async def grant(self, firebase_uid: str, site_id: UUID, role: SiteRole) -> UserPermissionRead:
        permission = await self._permission(firebase_uid, site_id)
        if permission is None:
            permission = UserPermission(firebase_uid=firebase_uid, site_id=site_id, role=role)
        else:
            permission.role = role
        await self._write(permission)
        return UserPermissionRead.model_validate(permission)

    async def revoke(self, firebase_uid: str, site_id: UUID) -> bool:
        result = await self.session.execute(
            delete(UserPermission).where(
                UserPermission.firebase_uid == firebase_uid,
                UserPermission.site_id == site_id,
            )
        )
        return result.rowcount > 0


def build_sql_store(session: AsyncSession) -> Store:
    return Store(
        sites=SqlSiteRepository(session),
        jobs=SqlArticleJobRepository(session),
        keywords=SqlKeywordRepository(session),
        schedules=SqlScheduleRepository(session),
        articles=SqlArticleRepository(session),
        users=SqlPlatformUserRepository(session),
    )


def sql_store_factory(session_maker: async_sessionmaker[AsyncSession]) -> StoreFactory:
    """One session per request: commit when the handler returns, roll back if it raises."""

    @asynccontextmanager
    async def open_store() -> AsyncIterator[Store]:
        async with session_maker() as session:
            try:
                yield build_sql_store(session)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return open_store
