"""Shared fixtures: an app on the in-memory store with a pinned clock."""

import uuid
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from contentops.config import Settings
from contentops.dependencies.common import get_now
from contentops.main import create_app
from contentops.repositories.memory import MemoryDatabase, build_memory_store
from contentops.schemas.platform_user import PlatformUserUpsert
from contentops.schemas.site import SiteCreate

API_KEY = "n8n_testkey"
SUPER_ADMIN_UID = "uid-super"
ADMIN_UID = "uid-admin"
MANAGER_UID = "uid-manager"
OUTSIDER_UID = "uid-outsider"

# Wednesday
FIXED_NOW = datetime(2024, 1, 10, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings():
    return Settings(
        storage_backend="memory",
        seed_demo_data=False,
        n8n_api_key=API_KEY,
        n8n_webhook_base_url=None,
        schedule_timezone="UTC",
    )


@pytest.fixture
def app(settings):
    app = create_app(settings)
    app.dependency_overrides[get_now] = lambda: FIXED_NOW
    return app


@pytest.fixture
def db(app) -> MemoryDatabase:
    return app.state.store_factory.db


@pytest.fixture
def store(app):
    return app.state.store_factory.store


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
async def site(store):
    """An active site with the admin and manager granted and a super admin registered."""
    site = await store.sites.add(
        SiteCreate(name="Health Media", slug="health-media", wp_url="https://health.example.com")
    )
    await store.users.upsert(
        PlatformUserUpsert(firebase_uid=SUPER_ADMIN_UID, email="root@example.com", role="super_admin")
    )
    await store.users.grant(ADMIN_UID, site.id, "admin")
    await store.users.grant(MANAGER_UID, site.id, "manager")
    return site


@pytest.fixture
def n8n_headers():
    return {"x-api-key": API_KEY}


def user_headers(uid: str) -> dict[str, str]:
    return {"X-User-Uid": uid}


def random_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def fresh_store():
    """A standalone store, not attached to any app."""
    return build_memory_store(MemoryDatabase())
