"""Article job status transitions.

pending -> processing | completed | failed
processing -> completed | failed
completed, failed -> (nothing)
"""

import logging
from datetime import datetime, timezone
from typing import Any

from contentops.errors import ConflictError, InvalidTransition
from contentops.schemas.article_job import ArticleJobRead, JobStatus

logger = logging.getLogger(__name__)

ACTIVE_STATUSES: frozenset[str] = frozenset({"pending", "processing"})
TERMINAL_STATUSES: frozenset[str] = frozenset({"completed", "failed"})
DELETABLE_STATUSES: frozenset[str] = frozenset({"pending", "failed"})

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"processing", "completed", "failed"}),
    "processing": frozenset({"completed", "failed"}),
    "completed": frozenset(),
    "failed": frozenset(),
}

DEFAULT_FAILURE_MESSAGE = "Job failed without an error message"


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


def apply_transition(
    job: ArticleJobRead,
    new_status: JobStatus,
    *,
    error_message: str | None = None,
    result_data: dict[str, Any] | None = None,
    wp_post_id: int | None = None,
    now: datetime | None = None,
) -> ArticleJobRead:
    """Return a copy of ``job`` moved to ``new_status`` with its timestamp side effects.

    Raises InvalidTransition (and leaves ``job`` untouched) when the move is
    not allowed from the current status.
    """
    if job.status in TERMINAL_STATUSES:
        raise InvalidTransition(
            f"Cannot update job with status '{job.status}'",
            currentStatus=job.status,
        )
    if not can_transition(job.status, new_status):
        raise InvalidTransition(
            f"Cannot move job from '{job.status}' to '{new_status}'",
            currentStatus=job.status,
        )

    now = now or datetime.now(timezone.utc)
    changes: dict[str, Any] = {"status": new_status, "updated_at": now}

    if new_status == "processing" and job.started_at is None:
        changes["started_at"] = now

    if new_status in TERMINAL_STATUSES:
        changes["completed_at"] = now

    if new_status == "completed":
        changes["error_message"] = None
        if result_data is not None:
            changes["result_data"] = result_data

    if new_status == "failed":
        changes["error_message"] = error_message or DEFAULT_FAILURE_MESSAGE

    if wp_post_id is not None:
        changes["wp_post_id"] = wp_post_id

    logger.info("Job %s: %s -> %s", job.id, job.status, new_status)
    return job.model_copy(update=changes)


def ensure_deletable(job: ArticleJobRead) -> None:
    """Only pending and failed jobs may be deleted."""
    if job.status not in DELETABLE_STATUSES:
        if job.status == "processing":
            raise ConflictError("Cannot delete a job that is currently processing", currentStatus=job.status)
        raise ConflictError(f"Cannot delete a job with status '{job.status}'", currentStatus=job.status)
