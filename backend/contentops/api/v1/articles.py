"""Article review: status, content edits, feedback-driven regeneration and publishing."""

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Request

from contentops.dependencies.auth import SiteAccess, require_site_access
from contentops.dependencies.common import get_n8n_client, get_now, get_store
from contentops.errors import NotFoundError
from contentops.repositories.base import Store
from contentops.schemas.article import (
    ArticleContentUpdate,
    ArticleRead,
    ArticleStatusUpdate,
    FeedbackItem,
    FeedbackRequest,
)
from contentops.services.n8n import N8nClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sites/{site_id}/articles", tags=["articles"])


def _bearer_token(request: Request) -> str | None:
    """Caller's auth-provider token, forwarded so n8n can call back as the user."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token


async def _get_article(store: Store, site_id: UUID, article_id: UUID) -> ArticleRead:
    article = await store.articles.get(article_id, site_id=site_id)
    if not article:
        raise NotFoundError("Article not found")
    return article


@router.get("", response_model=list[ArticleRead])
async def list_articles(
    access: SiteAccess = Depends(require_site_access),
    store: Store = Depends(get_store),
):
    """Articles for the site, most recently edited first."""
    return await store.articles.list(access.site.id)


@router.get("/{article_id}", response_model=ArticleRead)
async def get_article(
    article_id: UUID,
    access: SiteAccess = Depends(require_site_access),
    store: Store = Depends(get_store),
):
    return await _get_article(store, access.site.id, article_id)


@router.patch("/{article_id}/status", response_model=ArticleRead)
async def update_article_status(
    article_id: UUID,
    body: ArticleStatusUpdate,
    access: SiteAccess = Depends(require_site_access),
    store: Store = Depends(get_store),
):
    await _get_article(store, access.site.id, article_id)
    return await store.articles.update(article_id, {"status": body.status})


@router.put("/{article_id}/content", response_model=ArticleRead)
async def update_article_content(
    article_id: UUID,
    body: ArticleContentUpdate,
    access: SiteAccess = Depends(require_site_access),
    store: Store = Depends(get_store),
):
    await _get_article(store, access.site.id, article_id)
    return await store.articles.update(article_id, {"content_html": body.content_html})


@router.post("/{article_id}/feedback")
async def submit_feedback(
    article_id: UUID,
    body: FeedbackRequest,
    request: Request,
    access: SiteAccess = Depends(require_site_access),
    store: Store = Depends(get_store),
    n8n: N8nClient = Depends(get_n8n_client),
    now: datetime = Depends(get_now),
):
    """Record reviewer feedback and, unless told not to, ask n8n to regenerate."""
    await _get_article(store, access.site.id, article_id)
    text = body.feedback.strip()
    article = await store.articles.append_feedback(article_id, FeedbackItem(text=text, created_at=now))

    result = None
    if body.regenerate:
        result = await n8n.trigger_regeneration(article_id, text, user_token=_bearer_token(request))
        logger.info("Regeneration requested for article %s by %s", article_id, access.user.uid)
    return {"success": True, "article": article, "regeneration": result}


@router.post("/{article_id}/publish")
async def publish_article(
    article_id: UUID,
    request: Request,
    access: SiteAccess = Depends(require_site_access),
    store: Store = Depends(get_store),
    n8n: N8nClient = Depends(get_n8n_client),
):
    """Hand the article to n8n for publishing to WordPress."""
    await _get_article(store, access.site.id, article_id)
    result = await n8n.trigger_publish(article_id, user_token=_bearer_token(request))
    logger.info("Publish requested for article %s by %s", article_id, access.user.uid)
    return result
