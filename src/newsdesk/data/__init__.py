"""Data models for newsdesk."""

from newsdesk.data.models import (
    MAX_ANGLES,
    PUBLISHABLE_TIERS,
    Article,
    ArticleFrame,
    ArticleQuizQuestion,
    Authenticity,
    AuthenticityStatus,
    Body,
    Categories,
    Category,
    ClassificationState,
    Country,
    DeduplicationState,
    Discourse,
    Headline,
    Language,
    NewsArticle,
    NewsCluster,
    Report,
    ReportAngle,
    ReportDigest,
    Stance,
    Tier,
    Traits,
)

__all__ = [
    "MAX_ANGLES",
    "PUBLISHABLE_TIERS",
    "Article",
    "ArticleFrame",
    "ArticleQuizQuestion",
    "Authenticity",
    "AuthenticityStatus",
    "Body",
    "Categories",
    "Category",
    "ClassificationState",
    "Country",
    "DeduplicationState",
    "Discourse",
    "Headline",
    "Language",
    "NewsArticle",
    "NewsCluster",
    "Report",
    "ReportAngle",
    "ReportDigest",
    "Stance",
    "Tier",
    "Traits",
]
