"""Article job creation with idempotency and active-job dedup."""

import logging
from dataclasses import dataclass
from uuid import UUID

from contentops.errors import NotFoundError, UniqueConstraintViolation
from contentops.repositories.base import Store
from contentops.schemas.article_job import ArticleJobRead, JobCreateOutcome

logger = logging.getLogger(__name__)


@dataclass
class JobCreation:
    outcome: JobCreateOutcome
    job: ArticleJobRead | None = None
    message: str | None = None

    @property
    def created(self) -> bool:
        return self.outcome == "created"


async def create_job(
    store: Store,
    site_id: UUID,
    wp_post_id: int | None = None,
    idempotency_key: str | None = None,
) -> JobCreation:
    """Create a pending job unless an equivalent one already exists.

    1. A reused ``idempotency_key`` returns the job it created (``already_exists``).
    2. An active job for the same (site, post) is returned (``already_processing``).
    3. Otherwise a new job is inserted. Losing an insert race to a concurrent
       request is reported as ``duplicate`` rather than an error.
    """
    site = await store.sites.get(site_id)
    if site is None:
        raise NotFoundError("Site not found")

    if idempotency_key:
        existing = await store.jobs.find_by_idempotency_key(idempotency_key)
        if existing:
            logger.info("Job %s already exists for idempotency key %s", existing.id, idempotency_key)
            return JobCreation("already_exists", existing, "Job with this idempotency key already exists")

    if wp_post_id is not None:
        active = await store.jobs.find_active(site_id, wp_post_id)
        if active:
            logger.info("Post %s on site %s already has active job %s", wp_post_id, site_id, active.id)
            return JobCreation("already_processing", active, "A job for this article is already in progress")

    try:
        job = await store.jobs.add(site_id, wp_post_id, idempotency_key)
    except UniqueConstraintViolation as exc:
        logger.warning("Job insert for site %s lost a race (%s)", site_id, exc.constraint)
        return JobCreation("duplicate", None, "Job already exists (concurrent request)")

    logger.info("Created job %s for site %s (post %s)", job.id, site_id, wp_post_id)
    return JobCreation("created", job)
