"""WordPress REST API client for a site's read-only post listing."""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from contentops.errors import UpstreamError
from contentops.schemas.site import SiteRead

logger = logging.getLogger(__name__)


def normalize_wp_url(url: str) -> str:
    """Add ``https://`` when no scheme is given and ensure a trailing slash."""
    normalized = url.strip()
    if not normalized.startswith(("http://", "https://")):
        normalized = "https://" + normalized
    if not normalized.endswith("/"):
        normalized += "/"
    return normalized


@dataclass
class WordPressCredentials:
    wp_url: str
    username: str | None = None
    app_password: str | None = None

    @classmethod
    def from_site(cls, site: SiteRead) -> "WordPressCredentials":
        return cls(wp_url=site.wp_url or "", username=site.wp_username, app_password=site.wp_app_password)

    @property
    def has_auth(self) -> bool:
        return bool(self.username and self.app_password)


@dataclass
class PostPage:
    posts: list[dict[str, Any]]
    total: int
    total_pages: int


class WordPressClient:
    """
    Thin async wrapper over ``wp-json/wp/v2``.

    Authenticates with an application password (HTTP basic auth) when the
    site has one. Non-2xx responses raise UpstreamError.
    """

    def __init__(
        self,
        credentials: WordPressCredentials,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.credentials = credentials
        self.base_url = normalize_wp_url(credentials.wp_url)
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        auth = None
        if self.credentials.has_auth:
            auth = httpx.BasicAuth(self.credentials.username, self.credentials.app_password)
        return httpx.AsyncClient(
            base_url=self.base_url,
            auth=auth,
            timeout=self.timeout,
            transport=self.transport,
            headers={"Content-Type": "application/json"},
        )

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        try:
            async with self._client() as client:
                response = await client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.error("WordPress request to %s%s failed: %s", self.base_url, path, e)
            raise UpstreamError(f"WordPress API error: {e}") from e

        if response.is_error:
            logger.error("WordPress API error %s for %s%s", response.status_code, self.base_url, path)
            raise UpstreamError(f"WordPress API error: {response.status_code} - {response.text}")
        return response

    async def fetch_posts(
        self,
        page: int = 1,
        per_page: int = 20,
        status: str = "any",
        search: str | None = None,
        categories: list[int] | None = None,
        orderby: str = "modified",
        order: str = "desc",
    ) -> PostPage:
        """
        Fetch one page of posts, newest edits first by default.

        Args:
            page: 1-based page number
            per_page: Posts per page
            status: WordPress post status filter ("any" includes drafts)
            search: Optional full-text search
            categories: Optional category ids

        Returns:
            PostPage with totals from the X-WP-Total / X-WP-TotalPages headers
        """
        params: dict[str, Any] = {
            "page": page,
            "per_page": per_page,
            "status": status,
            "orderby": orderby,
            "order": order,
            "_embed": 1,
        }
        if search:
            params["search"] = search
        if categories:
            params["categories"] = ",".join(str(c) for c in categories)

        response = await self._get("wp-json/wp/v2/posts", params)
        return PostPage(
            posts=response.json(),
            total=int(response.headers.get("X-WP-Total", "0")),
            total_pages=int(response.headers.get("X-WP-TotalPages", "0")),
        )

    async def fetch_post(self, post_id: int) -> dict[str, Any]:
        response = await self._get(f"wp-json/wp/v2/posts/{post_id}", {"_embed": 1})
        return response.json()

    async def fetch_categories(self) -> list[dict[str, Any]]:
        response = await self._get("wp-json/wp/v2/categories", {"per_page": 100})
        return response.json()

    async def fetch_tags(self) -> list[dict[str, Any]]:
        response = await self._get("wp-json/wp/v2/tags", {"per_page": 100})
        return response.json()

    async def test_connection(self) -> dict[str, Any]:
        """Check the site answers and, if credentials are set, that they work.

        Never raises; failures come back as ``{"success": False, "message": ...}``.
        """
        try:
            async with self._client() as client:
                response = await client.get("wp-json/")
                if response.is_error:
                    return {"success": False, "message": f"Connection failed: {response.status_code}"}
                data = response.json()

                if self.credentials.has_auth:
                    posts = await client.get("wp-json/wp/v2/posts", params={"per_page": 1, "status": "any"})
                    if posts.is_error:
                        return {
                            "success": False,
                            "message": "Authentication failed. Check the username and application password.",
                        }
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("WordPress connection test for %s failed: %s", self.base_url, e)
            return {"success": False, "message": f"Connection error: {e}"}

        return {
            "success": True,
            "message": "Connected",
            "siteInfo": {
                "name": data.get("name") or "Unknown",
                "url": data.get("url") or self.credentials.wp_url,
            },
        }
