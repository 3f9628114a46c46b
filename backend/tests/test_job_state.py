"""Tests for the article job status state machine."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from contentops.errors import ConflictError, InvalidTransition
from contentops.schemas.article_job import ArticleJobRead
from contentops.services.job_state import (
    DEFAULT_FAILURE_MESSAGE,
    apply_transition,
    can_transition,
    ensure_deletable,
)

T0 = datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)
T1 = T0 + timedelta(minutes=5)


def make_job(**overrides) -> ArticleJobRead:
    values = {
        "id": uuid.uuid4(),
        "site_id": uuid.uuid4(),
        "wp_post_id": 42,
        "status": "pending",
        "created_at": T0,
        "updated_at": T0,
    }
    values.update(overrides)
    return ArticleJobRead(**values)


class TestTransitions:
    def test_pending_to_processing_sets_started_at(self):
        job = apply_transition(make_job(), "processing", now=T1)
        assert job.status == "processing"
        assert job.started_at == T1
        assert job.completed_at is None
        assert job.updated_at == T1

    def test_started_at_is_never_overwritten(self):
        job = make_job(started_at=T0)
        moved = apply_transition(job, "processing", now=T1)
        assert moved.started_at == T0

    def test_processing_to_completed_clears_error(self):
        job = make_job(status="processing", started_at=T0, error_message="earlier hiccup")
        done = apply_transition(job, "completed", result_data={"title": "Done"}, now=T1)
        assert done.status == "completed"
        assert done.error_message is None
        assert done.completed_at == T1
        assert done.result_data == {"title": "Done"}
        assert done.started_at == T0

    def test_failed_without_message_uses_default(self):
        job = make_job(status="processing")
        failed = apply_transition(job, "failed", now=T1)
        assert failed.error_message == DEFAULT_FAILURE_MESSAGE
        assert failed.completed_at == T1

    def test_failed_message_stored_verbatim(self):
        failed = apply_transition(make_job(status="processing"), "failed", error_message="  LLM timeout ", now=T1)
        assert failed.error_message == "  LLM timeout "

    def test_pending_can_jump_to_terminal(self):
        assert apply_transition(make_job(), "completed", now=T1).status == "completed"
        assert apply_transition(make_job(), "failed", now=T1).status == "failed"

    def test_wp_post_id_can_be_attached(self):
        job = make_job(wp_post_id=None, status="processing")
        done = apply_transition(job, "completed", wp_post_id=777, now=T1)
        assert done.wp_post_id == 777

    def test_original_job_is_left_alone(self):
        job = make_job()
        apply_transition(job, "processing", now=T1)
        assert job.status == "pending"
        assert job.started_at is None


class TestRejections:
    @pytest.mark.parametrize("terminal", ["completed", "failed"])
    @pytest.mark.parametrize("target", ["pending", "processing", "completed", "failed"])
    def test_terminal_states_are_absorbing(self, terminal, target):
        job = make_job(status=terminal, completed_at=T0)
        with pytest.raises(InvalidTransition) as exc_info:
            apply_transition(job, target, now=T1)
        assert exc_info.value.extra == {"currentStatus": terminal}
        assert job.status == terminal
        assert job.completed_at == T0

    def test_invalid_transition_is_a_conflict(self):
        with pytest.raises(ConflictError):
            apply_transition(make_job(status="completed"), "failed")

    @pytest.mark.parametrize("current,target", [("processing", "pending"), ("processing", "processing"), ("pending", "pending")])
    def test_backwards_and_repeat_moves_rejected(self, current, target):
        with pytest.raises(InvalidTransition):
            apply_transition(make_job(status=current), target, now=T1)

    def test_can_transition_table(self):
        assert can_transition("pending", "processing")
        assert can_transition("processing", "failed")
        assert not can_transition("failed", "pending")
        assert not can_transition("unknown", "pending")


class TestDeletion:
    @pytest.mark.parametrize("status", ["pending", "failed"])
    def test_pending_and_failed_are_deletable(self, status):
        ensure_deletable(make_job(status=status))

    def test_processing_is_not_deletable(self):
        with pytest.raises(ConflictError, match="currently processing"):
            ensure_deletable(make_job(status="processing"))

    def test_completed_is_not_deletable(self):
        with pytest.raises(ConflictError):
            ensure_deletable(make_job(status="completed"))
