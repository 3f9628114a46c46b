"""Tests for the WordPress proxy routes and client, with upstream calls mocked."""

import httpx
import pytest

from conftest import ADMIN_UID, user_headers
from contentops.dependencies.common import get_http_transport
from contentops.errors import UpstreamError
from contentops.services.wordpress import WordPressClient, WordPressCredentials, normalize_wp_url

POSTS = [{"id": 1, "title": {"rendered": "Hello"}}, {"id": 2, "title": {"rendered": "World"}}]


class Recorder:
    """MockTransport handler that answers from a route table and keeps the requests."""

    def __init__(self, routes):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for path, response in self.routes.items():
            if request.url.path.endswith(path):
                return response
        return httpx.Response(404, json={"code": "rest_no_route"})


@pytest.fixture
def wordpress(app):
    def install(routes) -> Recorder:
        recorder = Recorder(routes)
        app.dependency_overrides[get_http_transport] = lambda: httpx.MockTransport(recorder)
        return recorder

    return install


class TestNormalizeUrl:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("example.com", "https://example.com/"),
            ("http://example.com", "http://example.com/"),
            (" https://example.com/blog/ ", "https://example.com/blog/"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_wp_url(raw) == expected


class TestPostsRoute:
    def test_lists_posts_with_totals(self, client, site, wordpress):
        recorder = wordpress({
            "/wp/v2/posts": httpx.Response(200, json=POSTS, headers={"X-WP-Total": "42", "X-WP-TotalPages": "3"})
        })
        response = client.get(
            f"/api/v1/sites/{site.id}/posts",
            params={"page": 2, "per_page": 20, "search": "sleep"},
            headers=user_headers(ADMIN_UID),
        )
        assert response.status_code == 200
        assert response.json() == {"posts": POSTS, "total": 42, "totalPages": 3}

        sent = recorder.requests[0]
        assert sent.url.host == "health.example.com"
        assert sent.url.params["page"] == "2"
        assert sent.url.params["search"] == "sleep"
        assert sent.url.params["status"] == "any"
        assert sent.url.params["_embed"] == "1"

    async def test_credentials_sent_as_basic_auth(self, client, store, site, wordpress):
        await store.sites.update(site.id, {"wp_username": "editor", "wp_app_password": "abcd efgh"})
        recorder = wordpress({"/wp/v2/posts": httpx.Response(200, json=[])})
        client.get(f"/api/v1/sites/{site.id}/posts", headers=user_headers(ADMIN_UID))
        assert recorder.requests[0].headers["Authorization"].startswith("Basic ")

    async def test_site_without_wordpress_url(self, client, store, site, wordpress):
        await store.sites.update(site.id, {"wp_url": None})
        recorder = wordpress({})
        response = client.get(f"/api/v1/sites/{site.id}/posts", headers=user_headers(ADMIN_UID))
        assert response.status_code == 400
        assert response.json() == {"error": "WordPress URL not configured for this site"}
        assert recorder.requests == []

    def test_upstream_error_is_502(self, client, site, wordpress):
        wordpress({"/wp/v2/posts": httpx.Response(401, json={"code": "rest_forbidden"})})
        response = client.get(f"/api/v1/sites/{site.id}/posts", headers=user_headers(ADMIN_UID))
        assert response.status_code == 502
        assert response.json()["error"].startswith("WordPress API error: 401")

    def test_categories_and_tags(self, client, site, wordpress):
        wordpress({
            "/wp/v2/categories": httpx.Response(200, json=[{"id": 3, "name": "健康"}]),
            "/wp/v2/tags": httpx.Response(200, json=[{"id": 9, "name": "睡眠"}]),
        })
        headers = user_headers(ADMIN_UID)
        assert client.get(f"/api/v1/sites/{site.id}/wordpress/categories", headers=headers).json() == {
            "categories": [{"id": 3, "name": "健康"}]
        }
        assert client.get(f"/api/v1/sites/{site.id}/wordpress/tags", headers=headers).json() == {
            "tags": [{"id": 9, "name": "睡眠"}]
        }


class TestConnectionCheck:
    def test_connected(self, client, site, wordpress):
        wordpress({"/wp-json/": httpx.Response(200, json={"name": "Health Media", "url": "https://health.example.com"})})
        data = client.post(f"/api/v1/sites/{site.id}/wordpress/test", headers=user_headers(ADMIN_UID)).json()
        assert data == {
            "success": True,
            "message": "Connected",
            "siteInfo": {"name": "Health Media", "url": "https://health.example.com"},
        }

    def test_unreachable_site_reports_failure(self, client, site, wordpress):
        wordpress({"/wp-json/": httpx.Response(503)})
        data = client.post(f"/api/v1/sites/{site.id}/wordpress/test", headers=user_headers(ADMIN_UID)).json()
        assert data == {"success": False, "message": "Connection failed: 503"}

    async def test_bad_credentials(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/wp-json/":
                return httpx.Response(200, json={"name": "Blog"})
            return httpx.Response(401)

        credentials = WordPressCredentials("blog.example.com", username="editor", app_password="wrong")
        client = WordPressClient(credentials, transport=httpx.MockTransport(handler))
        result = await client.test_connection()
        assert result["success"] is False
        assert result["message"].startswith("Authentication failed")

    async def test_network_error_never_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = WordPressClient(WordPressCredentials("blog.example.com"), transport=httpx.MockTransport(handler))
        result = await client.test_connection()
        assert result["success"] is False
        assert "connection refused" in result["message"]


class TestWordPressClient:
    async def test_fetch_post(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/wp-json/wp/v2/posts/5"
            return httpx.Response(200, json={"id": 5})

        client = WordPressClient(WordPressCredentials("blog.example.com"), transport=httpx.MockTransport(handler))
        assert await client.fetch_post(5) == {"id": 5}

    async def test_category_filter_joined(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json=[])

        client = WordPressClient(WordPressCredentials("blog.example.com"), transport=httpx.MockTransport(handler))
        page = await client.fetch_posts(categories=[1, 2])
        assert seen["categories"] == "1,2"
        assert page.total == 0

    async def test_transport_error_raises_upstream_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = WordPressClient(WordPressCredentials("blog.example.com"), transport=httpx.MockTransport(handler))
        with pytest.raises(UpstreamError):
            await client.fetch_categories()
