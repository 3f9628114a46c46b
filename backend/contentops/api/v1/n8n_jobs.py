"""Article job endpoints called by the n8n workflow."""

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from contentops.dependencies.auth import require_n8n_api_key
from contentops.dependencies.common import get_now, get_store
from contentops.errors import ConflictError, NotFoundError, UniqueConstraintViolation
from contentops.repositories.base import Store
from contentops.schemas.article_job import (
    ArticleJobRead,
    JobCreateRequest,
    JobCreateResponse,
    JobListResponse,
    JobStatus,
    JobUpdateRequest,
    JobUpdateResponse,
)
from contentops.services.job_service import create_job
from contentops.services.job_state import apply_transition, ensure_deletable

logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 100

router = APIRouter(prefix="/n8n/jobs", tags=["n8n"], dependencies=[Depends(require_n8n_api_key)])


async def _get_job(store: Store, job_id: UUID) -> ArticleJobRead:
    job = await store.jobs.get(job_id)
    if not job:
        raise NotFoundError("Job not found")
    return job


@router.post("", response_model=JobCreateResponse, response_model_exclude_none=True)
async def create_article_job(
    body: JobCreateRequest,
    response: Response,
    store: Store = Depends(get_store),
):
    """Start tracking a generation attempt. 201 when a new job was created."""
    result = await create_job(store, body.site_id, body.wp_post_id, body.idempotency_key)
    if result.created:
        response.status_code = status.HTTP_201_CREATED
    return JobCreateResponse(status=result.outcome, job=result.job, message=result.message)


@router.get("", response_model=JobListResponse)
async def list_jobs(
    store: Store = Depends(get_store),
    site_id: UUID | None = Query(None, alias="siteId"),
    job_status: JobStatus | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1),
):
    """List jobs newest first, at most 100."""
    jobs = await store.jobs.list(site_id=site_id, status=job_status, limit=min(limit, MAX_LIST_LIMIT))
    return JobListResponse(jobs=jobs, count=len(jobs))


@router.get("/{job_id}")
async def get_job(job_id: UUID, store: Store = Depends(get_store)):
    """Get job details."""
    job = await _get_job(store, job_id)
    return {"job": job}


@router.patch("/{job_id}", response_model=JobUpdateResponse)
async def update_job(
    job_id: UUID,
    body: JobUpdateRequest,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
):
    """Advance a job through the status state machine."""
    job = await _get_job(store, job_id)
    updated = apply_transition(
        job,
        body.status,
        error_message=body.error_message,
        result_data=body.result_data,
        wp_post_id=body.wp_post_id,
        now=now,
    )
    try:
        saved = await store.jobs.save(updated)
    except UniqueConstraintViolation:
        raise ConflictError("Another job is already active for this post", currentStatus=job.status)
    return JobUpdateResponse(job=saved)


@router.delete("/{job_id}")
async def delete_job(job_id: UUID, store: Store = Depends(get_store)):
    """Delete a pending or failed job."""
    job = await _get_job(store, job_id)
    ensure_deletable(job)
    await store.jobs.delete(job_id)
    logger.info("Deleted job %s (%s)", job_id, job.status)
    return {"status": "deleted", "jobId": job_id}
