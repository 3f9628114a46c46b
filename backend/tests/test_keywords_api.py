"""Tests for keyword management and the n8n keyword/article feed."""

import pytest

from conftest import ADMIN_UID, MANAGER_UID, random_id, user_headers


def _keywords_url(site_id) -> str:
    return f"/api/v1/sites/{site_id}/keywords"


def _n8n_url(site_id, resource: str) -> str:
    return f"/api/v1/n8n/sites/{site_id}/{resource}"


@pytest.fixture
def keywords(client, site):
    body = {
        "keywords": [
            {"keyword": " 睡眠の質 "},
            {"keyword": "朝食レシピ"},
            {"keyword": "ストレス解消", "is_active": False},
        ]
    }
    response = client.put(_keywords_url(site.id), json=body, headers=user_headers(ADMIN_UID))
    assert response.json() == {"success": True}
    return client.get(_keywords_url(site.id), headers=user_headers(ADMIN_UID)).json()["keywords"]


class TestDashboardKeywords:
    def test_replace_assigns_priorities_by_position(self, keywords):
        assert [(k["keyword"], k["priority"]) for k in keywords] == [
            ("睡眠の質", 3),
            ("朝食レシピ", 2),
            ("ストレス解消", 1),
        ]

    def test_explicit_priorities_kept(self, client, site):
        body = {"keywords": [{"keyword": "a", "priority": 5}, {"keyword": "b", "priority": 50}]}
        client.put(_keywords_url(site.id), json=body, headers=user_headers(ADMIN_UID))
        listed = client.get(_keywords_url(site.id), headers=user_headers(ADMIN_UID)).json()
        assert [k["keyword"] for k in listed["keywords"]] == ["b", "a"]
        assert listed["siteName"] == "Health Media"

    def test_replace_drops_old_rows(self, client, site, keywords):
        client.put(_keywords_url(site.id), json={"keywords": [{"keyword": "only"}]}, headers=user_headers(ADMIN_UID))
        listed = client.get(_keywords_url(site.id), headers=user_headers(ADMIN_UID)).json()["keywords"]
        assert [k["keyword"] for k in listed] == ["only"]

    def test_add_goes_to_the_top(self, client, site, keywords):
        response = client.post(_keywords_url(site.id), json={"keyword": "新着"}, headers=user_headers(MANAGER_UID))
        assert response.status_code == 201
        keyword = response.json()["keyword"]
        assert keyword["priority"] == 4
        assert keyword["is_active"] is True
        assert keyword["use_count"] == 0

    def test_add_to_empty_list(self, client, site):
        response = client.post(_keywords_url(site.id), json={"keyword": "first"}, headers=user_headers(ADMIN_UID))
        assert response.json()["keyword"]["priority"] == 1

    def test_add_blank_rejected(self, client, site):
        response = client.post(_keywords_url(site.id), json={"keyword": "   "}, headers=user_headers(ADMIN_UID))
        assert response.status_code == 400
        assert response.json() == {"error": "Keyword is required"}


class TestN8nKeywords:
    def test_active_keywords_by_priority(self, client, n8n_headers, site, keywords):
        data = client.get(_n8n_url(site.id, "keywords"), headers=n8n_headers).json()
        assert data["count"] == 2
        assert [k["keyword"] for k in data["keywords"]] == ["睡眠の質", "朝食レシピ"]

    def test_inactive_included_on_request(self, client, n8n_headers, site, keywords):
        data = client.get(_n8n_url(site.id, "keywords"), params={"active": "false"}, headers=n8n_headers).json()
        assert data["count"] == 3

    def test_limit(self, client, n8n_headers, site, keywords):
        data = client.get(_n8n_url(site.id, "keywords"), params={"limit": 1}, headers=n8n_headers).json()
        assert data["count"] == 1

    def test_mark_used(self, client, n8n_headers, site, keywords):
        keyword_id = keywords[0]["id"]
        response = client.post(_n8n_url(site.id, "keywords"), json={"keywordId": keyword_id}, headers=n8n_headers)
        assert response.status_code == 200
        keyword = response.json()["keyword"]
        assert response.json()["success"] is True
        assert keyword["use_count"] == 1
        assert keyword["last_used_at"] == "2024-01-10T10:00:00Z"

    def test_mark_used_on_wrong_site(self, client, n8n_headers, keywords):
        response = client.post(
            _n8n_url(random_id(), "keywords"), json={"keywordId": keywords[0]["id"]}, headers=n8n_headers
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Keyword not found"}


class TestN8nArticles:
    def test_create_draft(self, client, n8n_headers, site):
        body = {"title": "睡眠の質を上げる5つの習慣", "keyword": "睡眠の質", "angle": "習慣", "wpPostId": 12}
        response = client.post(_n8n_url(site.id, "articles"), json=body, headers=n8n_headers)
        assert response.status_code == 200
        article = response.json()["article"]
        assert article["status"] == "draft"
        assert article["wp_post_id"] == 12
        assert article["source_data"] == {
            "keyword": "睡眠の質",
            "angle": "習慣",
            "generated_at": "2024-01-10T10:00:00+00:00",
        }

    def test_create_for_missing_site(self, client, n8n_headers):
        response = client.post(_n8n_url(random_id(), "articles"), json={"title": "x"}, headers=n8n_headers)
        assert response.status_code == 404

    def test_title_required(self, client, n8n_headers, site):
        response = client.post(_n8n_url(site.id, "articles"), json={"keyword": "x"}, headers=n8n_headers)
        assert response.status_code == 400

    def test_recent_articles_filtered_by_keyword(self, client, n8n_headers, site):
        url = _n8n_url(site.id, "articles")
        client.post(url, json={"title": "朝の睡眠ルーティン", "angle": "朝"}, headers=n8n_headers)
        client.post(url, json={"title": "よく眠るコツ", "keyword": "睡眠"}, headers=n8n_headers)
        client.post(url, json={"title": "朝食レシピ10選", "keyword": "朝食"}, headers=n8n_headers)

        data = client.get(url, params={"keyword": "睡眠"}, headers=n8n_headers).json()
        assert data["keyword"] == "睡眠"
        assert sorted(a["title"] for a in data["articles"]) == ["よく眠るコツ", "朝の睡眠ルーティン"]
        assert data["count"] == 2

        everything = client.get(url, headers=n8n_headers).json()
        assert everything["count"] == 3
        assert everything["keyword"] is None
        angles = {a["title"]: a["angle"] for a in everything["articles"]}
        assert angles["朝の睡眠ルーティン"] == "朝"

    def test_keyword_match_is_case_insensitive(self, client, n8n_headers, site):
        url = _n8n_url(site.id, "articles")
        client.post(url, json={"title": "Whisky Basics", "keyword": "Single Malt"}, headers=n8n_headers)
        assert client.get(url, params={"keyword": "whisky"}, headers=n8n_headers).json()["count"] == 1
        assert client.get(url, params={"keyword": "single malt"}, headers=n8n_headers).json()["count"] == 1
        assert client.get(url, params={"keyword": "single"}, headers=n8n_headers).json()["count"] == 0
