"""In-memory repositories sharing a single store.

Both repositories read and write the same ``InMemoryStore`` so that
report queries can see which reports already have articles.
"""

import asyncio
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from newsdesk.data import (
    Article,
    Category,
    ClassificationState,
    Country,
    DeduplicationState,
    Language,
    Report,
    ReportDigest,
    Tier,
)
from newsdesk.repository.base import SOURCE_REFERENCE_WINDOW, ArticleQuery, ReportUpdate


@dataclass
class InMemoryStore:
    """Reports and articles keyed by id, in insertion order."""

    reports: dict[str, Report] = field(default_factory=dict)
    articles: dict[str, Article] = field(default_factory=dict)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def linked_report_ids(self) -> set[str]:
        return {rid for article in self.articles.values() for rid in article.report_ids}


def _now() -> datetime:
    return datetime.now(tz=UTC)


class InMemoryReportRepository:
    """Report repository backed by an ``InMemoryStore``."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def create(self, report: Report) -> Report:
        async with self._store.lock:
            if report.id in self._store.reports:
                raise ValueError(f"Report already exists: {report.id}")
            self._store.reports[report.id] = report
        return report

    async def update(self, report_id: str, changes: ReportUpdate) -> Report:
        async with self._store.lock:
            report = self._get(report_id)
            if (
                report.classification_state is ClassificationState.COMPLETE
                and changes.classification_state is ClassificationState.PENDING
            ):
                raise ValueError(f"Report {report_id} is already classified")
            if (
                report.deduplication_state is DeduplicationState.COMPLETE
                and changes.deduplication_state is DeduplicationState.PENDING
            ):
                raise ValueError(f"Report {report_id} is already deduplicated")

            updated = replace(
                report,
                classification_state=changes.classification_state or report.classification_state,
                deduplication_state=changes.deduplication_state or report.deduplication_state,
                tier=changes.tier or report.tier,
                traits=changes.traits or report.traits,
                updated_at=_now(),
            )
            self._store.reports[report_id] = updated
        return updated

    async def find_by_id(self, report_id: str) -> Report | None:
        return self._store.reports.get(report_id)

    async def find_pending_classification(
        self, *, limit: int, country: Country | None = None
    ) -> list[Report]:
        matches = [
            r
            for r in self._store.reports.values()
            if r.classification_state is ClassificationState.PENDING
            and not r.is_duplicate
            and (country is None or r.country is country)
        ]
        return matches[:limit]

    async def find_pending_deduplication(
        self, *, limit: int, country: Country | None = None
    ) -> list[Report]:
        matches = [
            r
            for r in self._store.reports.values()
            if r.deduplication_state is DeduplicationState.PENDING
            and (country is None or r.country is country)
        ]
        return matches[:limit]

    async def find_recent(
        self,
        *,
        since: datetime,
        limit: int,
        country: Country | None = None,
        exclude_ids: list[str] | None = None,
    ) -> list[Report]:
        excluded = set(exclude_ids or [])
        matches = [
            r
            for r in self._store.reports.values()
            if r.created_at >= since
            and r.id not in excluded
            and not r.is_duplicate
            and (country is None or r.country is country)
        ]
        matches.sort(key=lambda r: r.created_at, reverse=True)
        return matches[:limit]

    async def find_recent_facts(self, *, country: Country, since: datetime) -> list[ReportDigest]:
        recent = await self.find_recent(
            since=since, limit=len(self._store.reports), country=country
        )
        return [ReportDigest(id=r.id, facts=r.facts) for r in recent]

    async def find_without_articles(
        self,
        *,
        tiers: tuple[Tier, ...],
        limit: int,
        country: Country | None = None,
    ) -> list[Report]:
        linked = self._store.linked_report_ids()
        matches = [
            r
            for r in self._store.reports.values()
            if r.classification_state is ClassificationState.COMPLETE
            and r.tier in tiers
            and not r.is_duplicate
            and r.id not in linked
            and (country is None or r.country is country)
        ]
        return matches[:limit]

    async def get_source_references(
        self, country: Country | None = None, *, limit: int = SOURCE_REFERENCE_WINDOW
    ) -> list[str]:
        reports = [
            r for r in self._store.reports.values() if country is None or r.country is country
        ]
        reports.sort(key=lambda r: r.created_at, reverse=True)
        references: list[str] = []
        for report in reports:
            references.extend(report.source_references)
            if len(references) >= limit:
                break
        return references[:limit]

    async def add_source_references(self, report_id: str, source_ids: list[str]) -> Report:
        async with self._store.lock:
            report = self._get(report_id)
            updated = report.with_source_references(source_ids, updated_at=_now())
            self._store.reports[report_id] = updated
        return updated

    async def mark_as_duplicate(self, report_id: str, *, duplicate_of_id: str) -> Report:
        async with self._store.lock:
            report = self._get(report_id)
            self._get(duplicate_of_id)
            updated = replace(
                report,
                deduplication_state=DeduplicationState.COMPLETE,
                duplicate_of=duplicate_of_id,
                updated_at=_now(),
            )
            self._store.reports[report_id] = updated
        return updated

    def _get(self, report_id: str) -> Report:
        try:
            return self._store.reports[report_id]
        except KeyError:
            raise KeyError(f"Report not found: {report_id}") from None


class InMemoryArticleRepository:
    """Article repository backed by an ``InMemoryStore``."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def create_many(self, articles: list[Article]) -> None:
        async with self._store.lock:
            for article in articles:
                if article.id in self._store.articles:
                    raise ValueError(f"Article already exists: {article.id}")
            for article in articles:
                self._store.articles[article.id] = article

    async def find_many(self, query: ArticleQuery) -> list[Article]:
        matches = [
            a
            for a in self._store.articles.values()
            if (query.country is None or a.country is query.country)
            and (query.language is None or a.language is query.language)
            and (query.category is None or a.categories.contains(query.category))
            and (query.status is None or a.authenticity.status is query.status)
            and (query.before is None or a.published_at < query.before)
        ]
        matches.sort(key=lambda a: a.published_at, reverse=True)
        return matches[: query.limit]

    async def count_many(
        self,
        *,
        country: Country | None = None,
        language: Language | None = None,
        category: Category | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> int:
        return sum(
            1
            for a in self._store.articles.values()
            if (country is None or a.country is country)
            and (language is None or a.language is language)
            and (category is None or a.categories.contains(category))
            and (start_date is None or a.published_at >= start_date)
            and (end_date is None or a.published_at <= end_date)
        )
