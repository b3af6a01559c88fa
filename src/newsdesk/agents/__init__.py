"""LLM agents: protocols and Claude-backed implementations."""

from newsdesk.agents.base import (
    ArticleCompositionAgent,
    ArticleCompositionResult,
    ArticleFabricationAgent,
    ArticleFabricationResult,
    ComposedFrame,
    FabricationContext,
    FabricationTone,
    IngestedAngle,
    RecentArticleContext,
    ReportClassificationAgent,
    ReportClassificationResult,
    ReportDeduplicationAgent,
    ReportDeduplicationResult,
    ReportIngestionAgent,
    ReportIngestionResult,
)
from newsdesk.agents.claude import (
    ClaudeArticleCompositionAgent,
    ClaudeArticleFabricationAgent,
    ClaudeReportClassificationAgent,
    ClaudeReportDeduplicationAgent,
    ClaudeReportIngestionAgent,
)

__all__ = [
    "ArticleCompositionAgent",
    "ArticleCompositionResult",
    "ArticleFabricationAgent",
    "ArticleFabricationResult",
    "ClaudeArticleCompositionAgent",
    "ClaudeArticleFabricationAgent",
    "ClaudeReportClassificationAgent",
    "ClaudeReportDeduplicationAgent",
    "ClaudeReportIngestionAgent",
    "ComposedFrame",
    "FabricationContext",
    "FabricationTone",
    "IngestedAngle",
    "RecentArticleContext",
    "ReportClassificationAgent",
    "ReportClassificationResult",
    "ReportDeduplicationAgent",
    "ReportDeduplicationResult",
    "ReportIngestionAgent",
    "ReportIngestionResult",
]
