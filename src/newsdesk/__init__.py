"""Newsdesk: turn the day's news into verified reports, articles and fake-news challenges."""

from newsdesk.agents import (
    ArticleCompositionAgent,
    ArticleFabricationAgent,
    ClaudeArticleCompositionAgent,
    ClaudeArticleFabricationAgent,
    ClaudeReportClassificationAgent,
    ClaudeReportDeduplicationAgent,
    ClaudeReportIngestionAgent,
    ReportClassificationAgent,
    ReportDeduplicationAgent,
    ReportIngestionAgent,
)
from newsdesk.config import NewsdeskConfig, create_from_config, load_config
from newsdesk.data import (
    Article,
    Authenticity,
    Categories,
    Category,
    Country,
    Language,
    NewsArticle,
    NewsCluster,
    Report,
    ReportAngle,
    Tier,
    Traits,
)
from newsdesk.news import NewsProvider, WorldNewsProvider
from newsdesk.pipeline import Pipeline, PipelineRun, ReportPipeline
from newsdesk.repository import (
    ArticleRepository,
    InMemoryArticleRepository,
    InMemoryReportRepository,
    InMemoryStore,
    ReportRepository,
)
from newsdesk.run_logger import RunLogger
from newsdesk.stages import (
    ClassificationStage,
    ClassificationSummary,
    CompositionStage,
    DeduplicationStage,
    FabricationStage,
    IngestionStage,
)

__all__ = [
    # Models
    "Article",
    "Authenticity",
    "Categories",
    "Category",
    "Country",
    "Language",
    "NewsArticle",
    "NewsCluster",
    "Report",
    "ReportAngle",
    "Tier",
    "Traits",
    # Protocols
    "ArticleCompositionAgent",
    "ArticleFabricationAgent",
    "ArticleRepository",
    "NewsProvider",
    "Pipeline",
    "ReportClassificationAgent",
    "ReportDeduplicationAgent",
    "ReportIngestionAgent",
    "ReportRepository",
    # Agents
    "ClaudeArticleCompositionAgent",
    "ClaudeArticleFabricationAgent",
    "ClaudeReportClassificationAgent",
    "ClaudeReportDeduplicationAgent",
    "ClaudeReportIngestionAgent",
    # Providers
    "WorldNewsProvider",
    # Repositories
    "InMemoryArticleRepository",
    "InMemoryReportRepository",
    "InMemoryStore",
    # Stages
    "ClassificationStage",
    "ClassificationSummary",
    "CompositionStage",
    "DeduplicationStage",
    "FabricationStage",
    "IngestionStage",
    # Pipelines
    "PipelineRun",
    "ReportPipeline",
    # Logging
    "RunLogger",
    # Config
    "NewsdeskConfig",
    "create_from_config",
    "load_config",
]
