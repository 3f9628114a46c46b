"""Dashboard view of a site's article jobs."""

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from contentops.dependencies.auth import SiteAccess, require_site_access
from contentops.dependencies.common import get_now, get_store
from contentops.errors import NotFoundError
from contentops.repositories.base import Store
from contentops.schemas.article_job import ArticleJobRead, DashboardJobUpdateRequest, JobStatus
from contentops.services.job_state import apply_transition, ensure_deletable

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sites/{site_id}/jobs", tags=["jobs"])


async def _get_site_job(store: Store, site_id: UUID, job_id: UUID) -> ArticleJobRead:
    job = await store.jobs.get(job_id, site_id=site_id)
    if not job:
        raise NotFoundError("Job not found")
    return job


@router.get("")
async def list_site_jobs(
    access: SiteAccess = Depends(require_site_access),
    store: Store = Depends(get_store),
    job_status: JobStatus | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=100),
):
    """Jobs for the site, newest first."""
    jobs = await store.jobs.list(site_id=access.site.id, status=job_status, limit=limit)
    return {"jobs": jobs, "siteName": access.site.name}


@router.patch("/{job_id}")
async def update_site_job(
    job_id: UUID,
    body: DashboardJobUpdateRequest,
    access: SiteAccess = Depends(require_site_access),
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
):
    """Operator override of a job's status, e.g. marking a stuck job failed."""
    job = await _get_site_job(store, access.site.id, job_id)
    updated = apply_transition(job, body.status, error_message=body.error_message, now=now)
    saved = await store.jobs.save(updated)
    logger.info("User %s moved job %s to %s", access.user.uid, job_id, body.status)
    return {"success": True, "job": saved}


@router.delete("/{job_id}")
async def delete_site_job(
    job_id: UUID,
    access: SiteAccess = Depends(require_site_access),
    store: Store = Depends(get_store),
):
    job = await _get_site_job(store, access.site.id, job_id)
    ensure_deletable(job)
    await store.jobs.delete(job_id)
    return {"success": True, "jobId": job_id}
