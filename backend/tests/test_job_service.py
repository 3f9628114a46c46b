"""Tests for job creation dedup against the in-memory store."""

import uuid

import pytest

from contentops.errors import NotFoundError, UniqueConstraintViolation
from contentops.schemas.site import SiteCreate
from contentops.services.job_service import create_job
from contentops.services.job_state import apply_transition


@pytest.fixture
async def site(fresh_store):
    return await fresh_store.sites.add(SiteCreate(name="Whisky", slug="whisky"))


async def test_creates_pending_job(fresh_store, site):
    result = await create_job(fresh_store, site.id, wp_post_id=10, idempotency_key="run-1")
    assert result.created
    assert result.job.status == "pending"
    assert result.job.idempotency_key == "run-1"
    assert result.message is None


async def test_reused_idempotency_key_returns_original(fresh_store, site):
    first = await create_job(fresh_store, site.id, wp_post_id=10, idempotency_key="run-1")
    second = await create_job(fresh_store, site.id, wp_post_id=11, idempotency_key="run-1")

    assert second.outcome == "already_exists"
    assert second.job.id == first.job.id
    assert len(await fresh_store.jobs.list()) == 1


async def test_idempotency_checked_even_after_job_finished(fresh_store, site):
    first = await create_job(fresh_store, site.id, wp_post_id=10, idempotency_key="run-1")
    await fresh_store.jobs.save(apply_transition(first.job, "completed"))

    again = await create_job(fresh_store, site.id, wp_post_id=10, idempotency_key="run-1")
    assert again.outcome == "already_exists"
    assert again.job.status == "completed"


async def test_active_job_for_same_post_is_returned(fresh_store, site):
    first = await create_job(fresh_store, site.id, wp_post_id=10)
    second = await create_job(fresh_store, site.id, wp_post_id=10)

    assert second.outcome == "already_processing"
    assert second.job.id == first.job.id
    assert second.message == "A job for this article is already in progress"
    assert len(await fresh_store.jobs.list()) == 1


async def test_processing_job_also_blocks(fresh_store, site):
    first = await create_job(fresh_store, site.id, wp_post_id=10)
    await fresh_store.jobs.save(apply_transition(first.job, "processing"))

    second = await create_job(fresh_store, site.id, wp_post_id=10, idempotency_key="other")
    assert second.outcome == "already_processing"


async def test_finished_job_does_not_block_a_new_one(fresh_store, site):
    first = await create_job(fresh_store, site.id, wp_post_id=10)
    await fresh_store.jobs.save(apply_transition(first.job, "failed"))

    second = await create_job(fresh_store, site.id, wp_post_id=10)
    assert second.created
    assert second.job.id != first.job.id


async def test_jobs_without_post_never_dedup(fresh_store, site):
    first = await create_job(fresh_store, site.id)
    second = await create_job(fresh_store, site.id)
    assert first.created and second.created


async def test_same_post_on_other_site_is_independent(fresh_store, site):
    other = await fresh_store.sites.add(SiteCreate(name="Shrine", slug="shrine"))
    await create_job(fresh_store, site.id, wp_post_id=10)
    result = await create_job(fresh_store, other.id, wp_post_id=10)
    assert result.created


async def test_lost_insert_race_reports_duplicate(fresh_store, site, monkeypatch):
    async def no_match(*args, **kwargs):
        return None

    # Simulate a concurrent request inserting between the lookups and the insert
    await fresh_store.jobs.add(site.id, wp_post_id=None, idempotency_key="run-1")
    monkeypatch.setattr(fresh_store.jobs, "find_by_idempotency_key", no_match)

    result = await create_job(fresh_store, site.id, wp_post_id=10, idempotency_key="run-1")
    assert result.outcome == "duplicate"
    assert result.job is None
    assert result.message == "Job already exists (concurrent request)"
    assert len(await fresh_store.jobs.list()) == 1


async def test_memory_store_enforces_active_post_uniqueness(fresh_store, site):
    await fresh_store.jobs.add(site.id, wp_post_id=10, idempotency_key=None)
    with pytest.raises(UniqueConstraintViolation) as exc_info:
        await fresh_store.jobs.add(site.id, wp_post_id=10, idempotency_key=None)
    assert exc_info.value.constraint == "uq_article_jobs_active_post"


async def test_unknown_site(fresh_store):
    with pytest.raises(NotFoundError, match="Site not found"):
        await create_job(fresh_store, uuid.uuid4(), wp_post_id=10)
