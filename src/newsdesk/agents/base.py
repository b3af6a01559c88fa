"""Protocols and payloads for the LLM-backed agents."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Protocol

from newsdesk.data import (
    Categories,
    Category,
    Country,
    Discourse,
    Language,
    NewsCluster,
    Report,
    ReportDigest,
    Stance,
    Tier,
    Traits,
)

FabricationTone = Literal["serious", "satirical"]

# -- Ingestion --


@dataclass(frozen=True)
class IngestedAngle:
    corpus: str
    stance: Stance
    discourse: Discourse | None = None


@dataclass(frozen=True)
class ReportIngestionResult:
    facts: str
    categories: Categories
    angles: tuple[IngestedAngle, ...]
    traits: Traits = field(default_factory=Traits)


class ReportIngestionAgent(Protocol):
    """Distills a cluster of source articles into verified facts and angles."""

    async def run(self, *, news_cluster: NewsCluster) -> ReportIngestionResult | None:
        """Extract facts, categories and up to two angles from a cluster.

        Args:
            news_cluster: Source articles covering one event.

        Returns:
            The extracted report content, or None if the agent failed.
        """
        ...


# -- Deduplication --


@dataclass(frozen=True)
class ReportDeduplicationResult:
    duplicate_of_report_id: str | None


class ReportDeduplicationAgent(Protocol):
    """Decides whether a new report describes an already-known event."""

    async def run(
        self,
        *,
        existing_reports: list[ReportDigest],
        new_report: NewsCluster | Report,
    ) -> ReportDeduplicationResult | None:
        """Compare a candidate against existing report summaries.

        Args:
            existing_reports: Id and facts of the reports to compare against.
            new_report: Raw cluster (inline check) or stored report.

        Returns:
            The id of the matching report (or None when unique), or None if
            the agent failed.
        """
        ...


# -- Classification --


@dataclass(frozen=True)
class ReportClassificationResult:
    classification: Tier
    reason: str
    traits: Traits | None = None


class ReportClassificationAgent(Protocol):
    """Assigns an audience tier to a report."""

    async def run(self, *, report: Report) -> ReportClassificationResult | None: ...


# -- Composition --


@dataclass(frozen=True)
class ComposedFrame:
    headline: str
    body: str
    stance: Stance | None = None
    discourse: Discourse | None = None


@dataclass(frozen=True)
class ArticleCompositionResult:
    headline: str
    body: str
    frames: tuple[ComposedFrame, ...]


class ArticleCompositionAgent(Protocol):
    """Writes a neutral article plus one frame per report angle."""

    async def run(
        self,
        *,
        report: Report,
        target_country: Country,
        target_language: Language,
    ) -> ArticleCompositionResult | None: ...


# -- Fabrication --


@dataclass(frozen=True)
class RecentArticleContext:
    headline: str
    body: str
    published_at: datetime
    frames: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class FabricationContext:
    current_date: datetime
    recent_articles: tuple[RecentArticleContext, ...]


@dataclass(frozen=True)
class ArticleFabricationResult:
    headline: str
    body: str
    clarification: str
    category: Category
    tone: FabricationTone
    insert_after_index: int = -1


class ArticleFabricationAgent(Protocol):
    """Fabricates a clearly-labeled fake article for the detection game."""

    async def run(
        self,
        *,
        target_country: Country,
        target_language: Language,
        context: FabricationContext,
        tone: FabricationTone | None = None,
        target_category: Category | None = None,
    ) -> ArticleFabricationResult | None:
        """Fabricate one article that blends in with recent coverage.

        Args:
            target_country: Country the article is written for.
            target_language: Language the article is written in.
            context: Current date and the recent articles, newest first.
            tone: Requested tone; None lets the agent choose.
            target_category: Requested category; None lets the agent infer
                one from the context.

        Returns:
            The fabricated article with its clarification and placement
            index into ``context.recent_articles`` (-1 = before all), or
            None if the agent failed.
        """
        ...
