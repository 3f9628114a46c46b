"""Per-site keyword and article endpoints used while n8n generates content."""

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from contentops.dependencies.auth import require_n8n_api_key
from contentops.dependencies.common import get_now, get_store
from contentops.errors import NotFoundError
from contentops.repositories.base import Store
from contentops.schemas.article import ArticleCreateRequest, ArticleRead, ArticleSummary
from contentops.schemas.keyword import KeywordList, KeywordUseRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/n8n/sites", tags=["n8n"], dependencies=[Depends(require_n8n_api_key)])


def _matches_keyword(article: ArticleRead, keyword: str) -> bool:
    """Title contains the keyword, or the article was generated for exactly it (case-insensitive)."""
    needle = keyword.lower()
    if needle in article.title.lower():
        return True
    source = article.source_data if isinstance(article.source_data, dict) else {}
    source_keyword = source.get("keyword")
    return isinstance(source_keyword, str) and source_keyword.lower() == needle


@router.get("/{site_id}/keywords", response_model=KeywordList)
async def list_site_keywords(
    site_id: UUID,
    store: Store = Depends(get_store),
    limit: int = Query(10, ge=1),
    active: bool = Query(True, description="Only active keywords"),
):
    """Highest-priority keywords first."""
    keywords = await store.keywords.list(site_id, active_only=active, limit=limit)
    return KeywordList(keywords=keywords, count=len(keywords))


@router.post("/{site_id}/keywords")
async def mark_keyword_used(
    site_id: UUID,
    body: KeywordUseRequest,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
):
    """Record that a keyword was used for a generated article."""
    keyword = await store.keywords.mark_used(site_id, body.keyword_id, used_at=now)
    if not keyword:
        raise NotFoundError("Keyword not found")
    return {"success": True, "keyword": keyword}


@router.post("/{site_id}/articles")
async def create_article(
    site_id: UUID,
    body: ArticleCreateRequest,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
):
    """Save a generated article as a draft."""
    if not await store.sites.get(site_id):
        raise NotFoundError("Site not found")

    article = await store.articles.add(
        site_id,
        title=body.title,
        wp_post_id=body.wp_post_id,
        source_data={
            "keyword": body.keyword,
            "angle": body.angle,
            "generated_at": now.isoformat(),
        },
    )
    logger.info("Saved draft article %s for site %s", article.id, site_id)
    return {"success": True, "article": article}


@router.get("/{site_id}/articles")
async def list_recent_articles(
    site_id: UUID,
    store: Store = Depends(get_store),
    keyword: str | None = Query(None),
    limit: int = Query(10, ge=1),
):
    """Recent articles so n8n can avoid repeating titles and angles."""
    articles = await store.articles.list(site_id, limit=limit, order_by="created_at")
    if keyword:
        articles = [a for a in articles if _matches_keyword(a, keyword)]

    summaries = [
        ArticleSummary(
            id=a.id,
            title=a.title,
            createdAt=a.created_at,
            angle=a.source_data.get("angle") if isinstance(a.source_data, dict) else None,
        )
        for a in articles
    ]
    return {"articles": summaries, "count": len(summaries), "keyword": keyword}
