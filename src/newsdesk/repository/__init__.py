"""Report and article persistence."""

from newsdesk.repository.base import (
    SOURCE_REFERENCE_WINDOW,
    ArticleQuery,
    ArticleRepository,
    ReportRepository,
    ReportUpdate,
)
from newsdesk.repository.memory import (
    InMemoryArticleRepository,
    InMemoryReportRepository,
    InMemoryStore,
)

__all__ = [
    "SOURCE_REFERENCE_WINDOW",
    "ArticleQuery",
    "ArticleRepository",
    "InMemoryArticleRepository",
    "InMemoryReportRepository",
    "InMemoryStore",
    "ReportRepository",
    "ReportUpdate",
]
