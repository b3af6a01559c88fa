"""Shared fixtures: builders for reports, articles and news clusters."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from newsdesk.data import (
    Article,
    Authenticity,
    Body,
    Categories,
    Category,
    ClassificationState,
    Country,
    DeduplicationState,
    Headline,
    Language,
    NewsArticle,
    NewsCluster,
    Report,
    ReportAngle,
    Stance,
    Tier,
)
from newsdesk.repository import (
    InMemoryArticleRepository,
    InMemoryReportRepository,
    InMemoryStore,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)

CORPUS = (
    "Lawmakers backing the measure argue that the new transit funding will cut commute "
    "times across the region, citing a state study of 1,200 riders and the support of "
    "three mayors who say the plan finally addresses years of deferred maintenance."
)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def report_repo(store: InMemoryStore) -> InMemoryReportRepository:
    return InMemoryReportRepository(store)


@pytest.fixture
def article_repo(store: InMemoryStore) -> InMemoryArticleRepository:
    return InMemoryArticleRepository(store)


@pytest.fixture
def make_report() -> Callable[..., Report]:
    counter = iter(range(1, 10_000))

    def _make(**overrides: Any) -> Report:
        n = next(counter)
        fields: dict[str, Any] = {
            "id": f"report-{n}",
            "categories": Categories(values=(Category.POLITICS,)),
            "country": Country.US,
            "dateline": NOW - timedelta(hours=n),
            "facts": f"City council approved transit funding package number {n}.",
            "angles": (ReportAngle(corpus=CORPUS, stance=Stance.SUPPORTIVE),),
            "source_references": (f"worldnewsapi:{n}a", f"worldnewsapi:{n}b"),
            "created_at": NOW - timedelta(minutes=n),
            "updated_at": NOW - timedelta(minutes=n),
        }
        fields.update(overrides)
        return Report(**fields)

    return _make


@pytest.fixture
def make_classified_report(make_report: Callable[..., Report]) -> Callable[..., Report]:
    def _make(tier: Tier = Tier.GENERAL, **overrides: Any) -> Report:
        return make_report(
            classification_state=ClassificationState.COMPLETE,
            deduplication_state=DeduplicationState.COMPLETE,
            tier=tier,
            **overrides,
        )

    return _make


@pytest.fixture
def make_article() -> Callable[..., Article]:
    counter = iter(range(1, 10_000))

    def _make(*, fabricated: bool = False, **overrides: Any) -> Article:
        n = next(counter)
        fields: dict[str, Any] = {
            "id": f"article-{n}",
            "headline": Headline(f"Headline number {n}"),
            "body": Body(f"Body of article number {n} with enough text."),
            "categories": Categories(values=(Category.POLITICS,)),
            "country": Country.US,
            "language": Language.EN,
            "authenticity": (
                Authenticity.fabricated("Invented story.") if fabricated else Authenticity()
            ),
            "published_at": NOW - timedelta(hours=n),
        }
        fields.update(overrides)
        return Article(**fields)

    return _make


@pytest.fixture
def make_cluster() -> Callable[..., NewsCluster]:
    def _make(*ids: str, published_at: datetime = NOW) -> NewsCluster:
        return NewsCluster(
            articles=tuple(
                NewsArticle(id=i, headline=f"Headline {i}", body=f"Body {i}") for i in ids
            ),
            published_at=published_at,
        )

    return _make
