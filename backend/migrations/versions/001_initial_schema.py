"""Initial schema — sites, platform users, permissions, keywords, schedules, articles, article jobs.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # Sites
    op.create_table(
        "sites",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("system_prompt", sa.Text),
        sa.Column("wp_url", sa.String(500)),
        sa.Column("wp_username", sa.String(255)),
        sa.Column("wp_app_password", sa.String(255)),
        sa.Column("n8n_webhook_url", sa.String(500)),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.UniqueConstraint("slug", name="sites_slug_key"),
    )
    op.create_index("ix_sites_is_active", "sites", ["is_active"])

    # Platform users
    op.create_table(
        "platform_users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("firebase_uid", sa.String(128), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(255)),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        *_timestamps(),
        sa.UniqueConstraint("firebase_uid", name="platform_users_firebase_uid_key"),
    )

    # Per-site role grants
    op.create_table(
        "user_permissions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("firebase_uid", sa.String(128), nullable=False, index=True),
        sa.Column("site_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("sites.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("firebase_uid", "site_id", name="uq_user_permissions_uid_site"),
    )

    # Keywords
    op.create_table(
        "site_keywords",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("site_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("sites.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("keyword", sa.String(255), nullable=False),
        sa.Column("priority", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("use_count", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("last_used_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("idx_keyword_site_priority", "site_keywords", ["site_id", "priority"])

    # Schedules (one per site)
    op.create_table(
        "site_schedules",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("site_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("sites.id", ondelete="CASCADE"), nullable=False),
        sa.Column("is_enabled", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("frequency_type", sa.String(20), nullable=False, server_default="daily"),
        sa.Column("time_of_day", sa.String(8), nullable=False, server_default="09:00"),
        sa.Column("days_of_week", postgresql.ARRAY(sa.Integer), nullable=False, server_default=sa.text("'{}'")),
        sa.Column("custom_interval_hours", sa.Integer),
        sa.Column("articles_per_run", sa.Integer, nullable=False, server_default=sa.text("1")),
        sa.Column("last_run_at", sa.DateTime(timezone=True)),
        sa.Column("next_run_at", sa.DateTime(timezone=True)),
        *_timestamps(),
        sa.UniqueConstraint("site_id", name="site_schedules_site_id_key"),
    )
    op.create_index("idx_schedule_due", "site_schedules", ["is_enabled", "next_run_at"])

    # Articles
    op.create_table(
        "articles",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("site_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("sites.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("content_html", sa.Text),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("source_data", postgresql.JSONB, server_default=sa.text("'{}'::jsonb")),
        sa.Column("feedback_history", postgresql.JSONB, server_default=sa.text("'[]'::jsonb")),
        sa.Column("wp_post_id", sa.Integer),
        *_timestamps(),
    )
    op.create_index("idx_article_site_created", "articles", ["site_id", "created_at"])

    # Article jobs
    op.create_table(
        "article_jobs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("site_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("sites.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("wp_post_id", sa.Integer),
        sa.Column("idempotency_key", sa.String(255)),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("result_data", postgresql.JSONB),
        sa.Column("error_message", sa.Text),
        sa.Column("started_at", sa.DateTime(timezone=True)),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        *_timestamps(),
        sa.UniqueConstraint("idempotency_key", name="article_jobs_idempotency_key_key"),
    )
    op.create_index("idx_job_site_status", "article_jobs", ["site_id", "status"])
    # At most one active job per (site, post)
    op.create_index(
        "uq_article_jobs_active_post",
        "article_jobs",
        ["site_id", "wp_post_id"],
        unique=True,
        postgresql_where=sa.text("status IN ('pending', 'processing') AND wp_post_id IS NOT NULL"),
    )


def downgrade() -> None:
    op.drop_table("article_jobs")
    op.drop_table("articles")
    op.drop_table("site_schedules")
    op.drop_table("site_keywords")
    op.drop_table("user_permissions")
    op.drop_table("platform_users")
    op.drop_table("sites")
