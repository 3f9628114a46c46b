"""Outbound n8n webhooks: per-site regeneration and article regenerate/publish."""

import json
import logging
from datetime import datetime
from typing import Any
from uuid import UUID

import httpx

from contentops.errors import UpstreamError, ValidationError
from contentops.schemas.site import SiteRead

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "Development mode: Webhook not configured"


def build_regenerate_payload(site: SiteRead, post_ids: list[int], triggered_at: datetime) -> dict[str, Any]:
    """Payload for a site's own n8n workflow; n8n fills in post details itself."""
    return {
        "action": "regenerate",
        "site_id": str(site.id),
        "site_name": site.name,
        "site_slug": site.slug,
        "wp_url": site.wp_url,
        "system_prompt": site.system_prompt,
        "posts": [
            {
                "wp_post_id": post_id,
                "title": "",
                "slug": "",
                "status": "",
                "link": f"{site.wp_url}?p={post_id}",
            }
            for post_id in post_ids
        ],
        "triggered_at": triggered_at.isoformat(),
    }


def _parse_optional_json(response: httpx.Response) -> Any:
    """n8n may answer async workflows with an empty or non-JSON body."""
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


class N8nClient:
    """Posts JSON to n8n webhook URLs."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout = timeout
        self.transport = transport

    async def _post(self, url: str, payload: dict[str, Any], headers: dict[str, str] | None = None) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error("n8n webhook %s unreachable: %s", url, e)
            raise UpstreamError(f"n8n webhook call failed: {e}") from e

        if response.is_error:
            logger.error("n8n webhook %s returned %s: %s", url, response.status_code, response.text)
            raise UpstreamError(f"n8n webhook call failed: {response.status_code}")
        return response

    async def trigger_site_regeneration(
        self, site: SiteRead, post_ids: list[int], triggered_at: datetime
    ) -> dict[str, Any]:
        """POST a ``regenerate`` request to the site's own workflow URL."""
        if not site.n8n_webhook_url:
            raise ValidationError("n8n webhook URL is not configured for this site")
        if not site.wp_url:
            raise ValidationError("WordPress URL is not configured for this site")

        payload = build_regenerate_payload(site, post_ids, triggered_at)
        response = await self._post(site.n8n_webhook_url, payload)
        logger.info("Triggered regeneration of %d posts for site %s", len(post_ids), site.slug)
        return {
            "success": True,
            "message": f"Sent regeneration request for {len(post_ids)} posts",
            "postIds": post_ids,
            "webhookResult": _parse_optional_json(response),
        }

    async def _trigger(self, path: str, payload: dict[str, Any], user_token: str | None, default: str) -> dict[str, Any]:
        if not self.base_url:
            logger.warning("N8N_WEBHOOK_BASE_URL is not configured, skipping %s", path)
            return {"success": True, "message": NOT_CONFIGURED_MESSAGE}

        headers = {"Authorization": f"Bearer {user_token}"} if user_token else None
        response = await self._post(f"{self.base_url}{path}", payload, headers)
        data = _parse_optional_json(response)
        message = data.get("message") if isinstance(data, dict) else None
        return {"success": True, "message": message or default}

    async def trigger_regeneration(self, article_id: UUID, feedback: str, user_token: str | None = None) -> dict[str, Any]:
        payload = {"article_id": str(article_id), "feedback": feedback, "user_token": user_token}
        return await self._trigger("/regenerate", payload, user_token, "Regeneration triggered successfully")

    async def trigger_publish(self, article_id: UUID, user_token: str | None = None) -> dict[str, Any]:
        payload = {"article_id": str(article_id), "user_token": user_token}
        return await self._trigger("/publish", payload, user_token, "Publishing triggered successfully")
