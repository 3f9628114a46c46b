"""Declarative base, mixins and lazily built engines.

Engines are created on first use so the memory backend never needs a
database driver.
"""

import uuid
from functools import lru_cache

from sqlalchemy import Column, DateTime, MetaData, func, create_engine
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from contentops.config import Settings, get_settings

# Unique constraints get Postgres' default names; the storage layer reports them
NAMING_CONVENTION = {
    "uq": "%(table_name)s_%(column_0_name)s_key",
    "ix": "ix_%(column_0_label)s",
    "fk": "%(table_name)s_%(column_0_name)s_fkey",
    "pk": "%(table_name)s_pkey",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class TimestampMixin:
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class UUIDMixin:
    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )


@lru_cache
def get_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Async engine for request handling, one per database URL."""
    return create_async_engine(
        database_url,
        echo=echo,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
    )


@lru_cache
def get_session_maker(database_url: str, echo: bool = False) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(database_url, echo), class_=AsyncSession, expire_on_commit=False)


@lru_cache
def get_sync_engine(database_url: str, echo: bool = False) -> Engine:
    """Sync engine (psycopg2) for scripts."""
    sync_url = database_url.replace("postgresql+asyncpg://", "postgresql://")
    return create_engine(sync_url, echo=echo, pool_size=5, max_overflow=10, pool_timeout=30)


def sync_session(settings: Settings | None = None) -> Session:
    settings = settings or get_settings()
    engine = get_sync_engine(settings.database_url, settings.debug)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)()
