"""Seed the demo sites, keywords, schedule and articles into Postgres.

Gives the demo user (demo-user-123) admin on the health site and manager on
the whisky site. Safe to re-run: rows whose site already exists are skipped.

Usage:
    PYTHONPATH=backend python scripts/seed_demo_sites.py
"""

from datetime import datetime, timezone

from contentops import demo_data
from contentops.models.base import sync_session
from contentops.models.article import Article
from contentops.models.site import Site
from contentops.models.site_keyword import SiteKeyword
from contentops.models.site_schedule import SiteSchedule
from contentops.models.user_permission import UserPermission
from contentops.models.article_job import ArticleJob  # noqa: F401  needed for relationship resolution
from contentops.schemas.schedule import ScheduleConfig
from contentops.services.scheduling import compute_next_run


def seed():
    db = sync_session()
    now = datetime.now(timezone.utc)
    sites_created = 0

    try:
        for site_data in demo_data.DEMO_SITES:
            if db.get(Site, site_data["id"]):
                print(f"  skip {site_data['slug']} (exists)")
                continue
            db.add(Site(**site_data))
            sites_created += 1
        db.flush()

        health = demo_data.HEALTH_SITE_ID

        for site_id, role in demo_data.DEMO_PERMISSIONS:
            existing = db.query(UserPermission).filter(
                UserPermission.firebase_uid == demo_data.DEMO_USER_UID,
                UserPermission.site_id == site_id,
            ).first()
            if not existing:
                db.add(UserPermission(firebase_uid=demo_data.DEMO_USER_UID, site_id=site_id, role=role))

        if not db.query(SiteKeyword).filter(SiteKeyword.site_id == health).first():
            for kw in demo_data.DEMO_KEYWORDS:
                db.add(SiteKeyword(site_id=health, **kw))

        if not db.query(SiteSchedule).filter(SiteSchedule.site_id == health).first():
            config = ScheduleConfig(**demo_data.DEMO_SCHEDULE)
            db.add(SiteSchedule(site_id=health, next_run_at=compute_next_run(config, now), **config.model_dump()))

        if not db.query(Article).filter(Article.site_id == health).first():
            for data in demo_data.DEMO_ARTICLES:
                article = dict(data)
                article["feedback_history"] = [
                    {"text": item["text"], "created_at": item["created_at"].isoformat()}
                    for item in data["feedback_history"]
                ]
                db.add(Article(**article))

        db.commit()
        print(f"\nDone: {sites_created} sites created")

    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed()
