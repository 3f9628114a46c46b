"""Tests for article review routes and the outbound n8n webhooks."""

import json

import httpx
import pytest

from conftest import ADMIN_UID, FIXED_NOW, MANAGER_UID, OUTSIDER_UID, random_id, user_headers
from contentops.config import get_settings
from contentops.dependencies.common import get_http_transport
from contentops.services.n8n import NOT_CONFIGURED_MESSAGE


@pytest.fixture
def n8n_calls(app):
    """Capture outbound n8n requests; answer with whatever ``reply`` holds."""
    calls = {"requests": [], "reply": httpx.Response(200, json={"message": "Workflow started"})}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["requests"].append(request)
        return calls["reply"]

    app.dependency_overrides[get_http_transport] = lambda: httpx.MockTransport(handler)
    return calls


@pytest.fixture
def n8n_base_url(app, settings):
    """Point article regenerate/publish calls at a (mocked) n8n instance."""
    configured = settings.model_copy(update={"n8n_webhook_base_url": "https://n8n.example.com/webhook"})
    app.dependency_overrides[get_settings] = lambda: configured


@pytest.fixture
async def article(store, site):
    return await store.articles.add(
        site.id,
        title="睡眠の質を上げる5つの習慣",
        wp_post_id=None,
        source_data={"keyword": "睡眠の質"},
    )


def _article_url(site_id, article_id, suffix: str = "") -> str:
    return f"/api/v1/sites/{site_id}/articles/{article_id}{suffix}"


class TestReview:
    def test_list_and_get(self, client, site, article):
        listed = client.get(f"/api/v1/sites/{site.id}/articles", headers=user_headers(MANAGER_UID)).json()
        assert [a["id"] for a in listed] == [str(article.id)]

        data = client.get(_article_url(site.id, article.id), headers=user_headers(MANAGER_UID)).json()
        assert data["title"] == "睡眠の質を上げる5つの習慣"
        assert data["status"] == "draft"

    def test_article_under_ungranted_site(self, client, site, article):
        response = client.get(_article_url(random_id(), article.id), headers=user_headers(MANAGER_UID))
        assert response.status_code == 403

    def test_missing_article(self, client, site):
        response = client.get(_article_url(site.id, random_id()), headers=user_headers(ADMIN_UID))
        assert response.status_code == 404
        assert response.json() == {"error": "Article not found"}

    def test_status_change(self, client, site, article):
        response = client.patch(
            _article_url(site.id, article.id, "/status"), json={"status": "review"}, headers=user_headers(ADMIN_UID)
        )
        assert response.json()["status"] == "review"

    def test_unknown_status_rejected(self, client, site, article):
        response = client.patch(
            _article_url(site.id, article.id, "/status"), json={"status": "archived"}, headers=user_headers(ADMIN_UID)
        )
        assert response.status_code == 400

    def test_content_edit(self, client, site, article):
        html = "<h2>はじめに</h2><p>本文</p>"
        response = client.put(
            _article_url(site.id, article.id, "/content"), json={"content_html": html}, headers=user_headers(ADMIN_UID)
        )
        assert response.json()["content_html"] == html

    def test_outsider_rejected(self, client, site, article):
        response = client.get(_article_url(site.id, article.id), headers=user_headers(OUTSIDER_UID))
        assert response.status_code == 403


class TestFeedback:
    def test_feedback_recorded_and_regeneration_triggered(self, client, site, article, n8n_calls, n8n_base_url):
        headers = {**user_headers(ADMIN_UID), "Authorization": "Bearer id-token-123"}
        response = client.post(
            _article_url(site.id, article.id, "/feedback"), json={"feedback": " 導入を具体的に "}, headers=headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["regeneration"] == {"success": True, "message": "Workflow started"}
        assert data["article"]["feedback_history"] == [
            {"text": "導入を具体的に", "created_at": "2024-01-10T10:00:00Z"}
        ]

        sent = n8n_calls["requests"][0]
        assert str(sent.url) == "https://n8n.example.com/webhook/regenerate"
        assert sent.headers["Authorization"] == "Bearer id-token-123"
        assert json.loads(sent.content) == {
            "article_id": str(article.id),
            "feedback": "導入を具体的に",
            "user_token": "id-token-123",
        }

    def test_feedback_without_regeneration(self, client, site, article, n8n_calls):
        response = client.post(
            _article_url(site.id, article.id, "/feedback"),
            json={"feedback": "Looks good", "regenerate": False},
            headers=user_headers(ADMIN_UID),
        )
        assert response.json()["regeneration"] is None
        assert n8n_calls["requests"] == []

    def test_unconfigured_n8n_is_development_mode(self, client, site, article, n8n_calls):
        response = client.post(
            _article_url(site.id, article.id, "/feedback"), json={"feedback": "More detail"}, headers=user_headers(ADMIN_UID)
        )
        assert response.json()["regeneration"] == {"success": True, "message": NOT_CONFIGURED_MESSAGE}
        assert n8n_calls["requests"] == []

    def test_empty_feedback_rejected(self, client, site, article):
        response = client.post(
            _article_url(site.id, article.id, "/feedback"), json={"feedback": ""}, headers=user_headers(ADMIN_UID)
        )
        assert response.status_code == 400


class TestPublish:
    def test_publish(self, client, site, article, n8n_calls, n8n_base_url):
        n8n_calls["reply"] = httpx.Response(200)
        response = client.post(_article_url(site.id, article.id, "/publish"), headers=user_headers(ADMIN_UID))
        assert response.json() == {"success": True, "message": "Publishing triggered successfully"}
        assert str(n8n_calls["requests"][0].url) == "https://n8n.example.com/webhook/publish"

    def test_n8n_failure_is_502(self, client, site, article, n8n_calls, n8n_base_url):
        n8n_calls["reply"] = httpx.Response(500, text="boom")
        response = client.post(_article_url(site.id, article.id, "/publish"), headers=user_headers(ADMIN_UID))
        assert response.status_code == 502
        assert response.json() == {"error": "n8n webhook call failed: 500"}


class TestSiteWebhook:
    async def _configure(self, store, site):
        await store.sites.update(site.id, {"n8n_webhook_url": "https://n8n.example.com/webhook/health"})

    async def test_regenerate_payload(self, client, store, site, n8n_calls):
        await self._configure(store, site)
        response = client.post(
            f"/api/v1/sites/{site.id}/webhook", json={"postIds": [10, 11]}, headers=user_headers(MANAGER_UID)
        )
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Sent regeneration request for 2 posts",
            "postIds": [10, 11],
            "webhookResult": {"message": "Workflow started"},
        }

        sent = n8n_calls["requests"][0]
        assert str(sent.url) == "https://n8n.example.com/webhook/health"
        payload = json.loads(sent.content)
        assert payload["action"] == "regenerate"
        assert payload["site_slug"] == "health-media"
        assert payload["triggered_at"] == FIXED_NOW.isoformat()
        assert payload["posts"][0] == {
            "wp_post_id": 10,
            "title": "",
            "slug": "",
            "status": "",
            "link": "https://health.example.com?p=10",
        }

    async def test_empty_response_tolerated(self, client, store, site, n8n_calls):
        await self._configure(store, site)
        n8n_calls["reply"] = httpx.Response(200, content=b"")
        response = client.post(f"/api/v1/sites/{site.id}/webhook", json={"postIds": [1]}, headers=user_headers(ADMIN_UID))
        assert response.status_code == 200
        assert response.json()["webhookResult"] is None

    async def test_non_json_response_tolerated(self, client, store, site, n8n_calls):
        await self._configure(store, site)
        n8n_calls["reply"] = httpx.Response(200, text="Workflow was started")
        response = client.post(f"/api/v1/sites/{site.id}/webhook", json={"postIds": [1]}, headers=user_headers(ADMIN_UID))
        assert response.json()["webhookResult"] is None

    async def test_webhook_error_is_502(self, client, store, site, n8n_calls):
        await self._configure(store, site)
        n8n_calls["reply"] = httpx.Response(404, text="no such workflow")
        response = client.post(f"/api/v1/sites/{site.id}/webhook", json={"postIds": [1]}, headers=user_headers(ADMIN_UID))
        assert response.status_code == 502

    def test_missing_webhook_url(self, client, site, n8n_calls):
        response = client.post(f"/api/v1/sites/{site.id}/webhook", json={"postIds": [1]}, headers=user_headers(ADMIN_UID))
        assert response.status_code == 400
        assert response.json() == {"error": "n8n webhook URL is not configured for this site"}
        assert n8n_calls["requests"] == []

    def test_empty_post_list_rejected(self, client, site):
        response = client.post(f"/api/v1/sites/{site.id}/webhook", json={"postIds": []}, headers=user_headers(ADMIN_UID))
        assert response.status_code == 400

