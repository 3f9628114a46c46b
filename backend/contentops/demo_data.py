"""Demo dataset for the in-memory store and the Postgres seed script."""

import uuid
from datetime import datetime, timezone

DEMO_USER_UID = "demo-user-123"


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


DEMO_SITES = [
    {
        "id": uuid.UUID("7c5a4f8e-0001-4d1e-9a51-3f2b6c1d0001"),
        "name": "健康メディア",
        "slug": "health-media",
        "description": "健康・ウェルネスに関する情報を発信するメディアサイト",
        "system_prompt": "健康に関する専門的で信頼性の高い記事を執筆してください。",
        "is_active": True,
        "created_at": _ts("2024-01-01T00:00:00"),
    },
    {
        "id": uuid.UUID("7c5a4f8e-0002-4d1e-9a51-3f2b6c1d0002"),
        "name": "ウイスキーマガジン",
        "slug": "whisky-magazine",
        "description": "ウイスキーの魅力を伝える専門メディア",
        "system_prompt": "ウイスキーの魅力を伝える専門的な記事を執筆してください。",
        "is_active": True,
        "created_at": _ts("2024-01-02T00:00:00"),
    },
    {
        "id": uuid.UUID("7c5a4f8e-0003-4d1e-9a51-3f2b6c1d0003"),
        "name": "神社巡りガイド",
        "slug": "shrine-guide",
        "description": "日本全国の神社を紹介する観光メディア",
        "system_prompt": "日本の神社文化を紹介する親しみやすい記事を執筆してください。",
        "is_active": True,
        "created_at": _ts("2024-01-03T00:00:00"),
    },
    {
        "id": uuid.UUID("7c5a4f8e-0004-4d1e-9a51-3f2b6c1d0004"),
        "name": "テックブログ",
        "slug": "tech-blog",
        "description": "最新テクノロジーを分かりやすく解説",
        "system_prompt": "技術的なトピックを分かりやすく解説する記事を執筆してください。",
        "is_active": False,
        "created_at": _ts("2024-01-04T00:00:00"),
    },
]

HEALTH_SITE_ID = DEMO_SITES[0]["id"]
WHISKY_SITE_ID = DEMO_SITES[1]["id"]
SHRINE_SITE_ID = DEMO_SITES[2]["id"]

# (site_id, role) grants for the demo user
DEMO_PERMISSIONS = [
    (HEALTH_SITE_ID, "admin"),
    (WHISKY_SITE_ID, "manager"),
]

DEMO_KEYWORDS = [
    {"keyword": "健康的な朝食レシピ", "priority": 10, "is_active": True, "use_count": 5,
     "last_used_at": _ts("2024-01-10T09:00:00")},
    {"keyword": "睡眠の質を上げる方法", "priority": 9, "is_active": True, "use_count": 3,
     "last_used_at": _ts("2024-01-09T10:00:00")},
    {"keyword": "ストレス解消法", "priority": 8, "is_active": True, "use_count": 2, "last_used_at": None},
    {"keyword": "運動習慣の作り方", "priority": 7, "is_active": False, "use_count": 0, "last_used_at": None},
    {"keyword": "メンタルヘルスケア", "priority": 6, "is_active": True, "use_count": 1,
     "last_used_at": _ts("2024-01-08T14:00:00")},
]

DEMO_SCHEDULE = {
    "is_enabled": True,
    "frequency_type": "daily",
    "time_of_day": "09:00",
    "days_of_week": [1, 2, 3, 4, 5],
    "custom_interval_hours": None,
    "articles_per_run": 1,
}

DEMO_ARTICLES = [
    {
        "site_id": HEALTH_SITE_ID,
        "title": "睡眠の質を上げる5つの習慣",
        "content_html": "<h2>はじめに</h2><p>質の良い睡眠は健康の基盤です。</p>",
        "status": "review",
        "source_data": {"keyword": "睡眠の質を上げる方法", "angle": "習慣"},
        "feedback_history": [
            {"text": "導入部分をもう少し具体的にしてください", "created_at": _ts("2024-01-08T10:00:00")},
        ],
        "wp_post_id": None,
        "created_at": _ts("2024-01-07T09:00:00"),
    },
    {
        "site_id": HEALTH_SITE_ID,
        "title": "朝食で摂りたい栄養素TOP10",
        "content_html": "<h2>朝食の重要性</h2><p>1日のエネルギーを確保するため、朝食は非常に重要です。</p>",
        "status": "draft",
        "source_data": {"keyword": "健康的な朝食レシピ"},
        "feedback_history": [],
        "wp_post_id": None,
        "created_at": _ts("2024-01-08T11:00:00"),
    },
    {
        "site_id": WHISKY_SITE_ID,
        "title": "シングルモルトの魅力を探る",
        "content_html": "<h2>シングルモルトとは</h2><p>一つの蒸留所で作られたモルトウイスキーを指します。</p>",
        "status": "review",
        "source_data": {},
        "feedback_history": [],
        "wp_post_id": None,
        "created_at": _ts("2024-01-06T10:00:00"),
    },
    {
        "site_id": SHRINE_SITE_ID,
        "title": "伊勢神宮参拝ガイド",
        "content_html": "<h2>伊勢神宮について</h2><p>日本で最も格式の高い神社の一つです。</p>",
        "status": "published",
        "source_data": {},
        "feedback_history": [],
        "wp_post_id": 67890,
        "created_at": _ts("2024-01-03T09:00:00"),
    },
]
