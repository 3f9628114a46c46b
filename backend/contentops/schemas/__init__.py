"""Pydantic schemas package."""

from contentops.schemas.platform_user import (
    PlatformRole,
    SiteRole,
    PlatformUserRead,
    PlatformUserUpsert,
    PlatformRoleUpdate,
    PermissionGrant,
    UserPermissionRead,
)
from contentops.schemas.site import (
    SiteBase,
    SiteCreate,
    SiteUpdate,
    SiteRead,
    SiteSummary,
    SiteWithPermission,
    SiteActiveUpdate,
    WebhookTriggerRequest,
)
from contentops.schemas.article_job import (
    JobStatus,
    ArticleJobRead,
    JobCreateRequest,
    JobCreateResponse,
    JobUpdateRequest,
    DashboardJobUpdateRequest,
    JobUpdateResponse,
    JobListResponse,
)
from contentops.schemas.schedule import (
    FrequencyType,
    ScheduleConfig,
    SiteScheduleRead,
    ScheduleUpdateRequest,
    ScheduleResponse,
    DueSchedule,
    DueScheduleList,
    RecordRunRequest,
    RecordRunResponse,
)
from contentops.schemas.keyword import (
    KeywordRead,
    KeywordInput,
    KeywordReplaceRequest,
    KeywordCreate,
    KeywordUseRequest,
    KeywordList,
)
from contentops.schemas.article import (
    ArticleStatus,
    FeedbackItem,
    ArticleRead,
    ArticleSummary,
    ArticleCreateRequest,
    ArticleStatusUpdate,
    ArticleContentUpdate,
    FeedbackRequest,
)

__all__ = [
    # Users
    "PlatformRole",
    "SiteRole",
    "PlatformUserRead",
    "PlatformUserUpsert",
    "PlatformRoleUpdate",
    "PermissionGrant",
    "UserPermissionRead",
    # Site
    "SiteBase",
    "SiteCreate",
    "SiteUpdate",
    "SiteRead",
    "SiteSummary",
    "SiteWithPermission",
    "SiteActiveUpdate",
    "WebhookTriggerRequest",
    # ArticleJob
    "JobStatus",
    "ArticleJobRead",
    "JobCreateRequest",
    "JobCreateResponse",
    "JobUpdateRequest",
    "DashboardJobUpdateRequest",
    "JobUpdateResponse",
    "JobListResponse",
    # Schedule
    "FrequencyType",
    "ScheduleConfig",
    "SiteScheduleRead",
    "ScheduleUpdateRequest",
    "ScheduleResponse",
    "DueSchedule",
    "DueScheduleList",
    "RecordRunRequest",
    "RecordRunResponse",
    # Keyword
    "KeywordRead",
    "KeywordInput",
    "KeywordReplaceRequest",
    "KeywordCreate",
    "KeywordUseRequest",
    "KeywordList",
    # Article
    "ArticleStatus",
    "FeedbackItem",
    "ArticleRead",
    "ArticleSummary",
    "ArticleCreateRequest",
    "ArticleStatusUpdate",
    "ArticleContentUpdate",
    "FeedbackRequest",
]
