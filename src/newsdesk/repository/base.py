"""Persistence protocols for reports and articles."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from newsdesk.data import (
    Article,
    AuthenticityStatus,
    Category,
    ClassificationState,
    Country,
    DeduplicationState,
    Language,
    Report,
    ReportDigest,
    Tier,
    Traits,
)

SOURCE_REFERENCE_WINDOW = 5000


@dataclass(frozen=True)
class ReportUpdate:
    """Partial update applied to a stored report. ``None`` leaves a field as is."""

    classification_state: ClassificationState | None = None
    deduplication_state: DeduplicationState | None = None
    tier: Tier | None = None
    traits: Traits | None = None


@dataclass(frozen=True)
class ArticleQuery:
    """Filters for article lookups. Results are ordered newest first.

    ``before`` is a pagination cursor: only articles published strictly
    earlier are returned.
    """

    limit: int
    country: Country | None = None
    language: Language | None = None
    category: Category | None = None
    status: AuthenticityStatus | None = None
    before: datetime | None = None


class ReportRepository(Protocol):
    """Interface for report persistence."""

    async def create(self, report: Report) -> Report: ...

    async def update(self, report_id: str, changes: ReportUpdate) -> Report:
        """Apply ``changes`` to a stored report.

        Raises:
            KeyError: If the report does not exist.
            ValueError: If the change would move a completed state back to
                pending.
        """
        ...

    async def find_by_id(self, report_id: str) -> Report | None: ...

    async def find_pending_classification(
        self, *, limit: int, country: Country | None = None
    ) -> list[Report]:
        """Reports awaiting classification, excluding resolved duplicates."""
        ...

    async def find_pending_deduplication(
        self, *, limit: int, country: Country | None = None
    ) -> list[Report]: ...

    async def find_recent(
        self,
        *,
        since: datetime,
        limit: int,
        country: Country | None = None,
        exclude_ids: list[str] | None = None,
    ) -> list[Report]:
        """Canonical (non-duplicate) reports created since ``since``, newest first."""
        ...

    async def find_recent_facts(self, *, country: Country, since: datetime) -> list[ReportDigest]:
        """Id and facts of canonical reports created since ``since``."""
        ...

    async def find_without_articles(
        self,
        *,
        tiers: tuple[Tier, ...],
        limit: int,
        country: Country | None = None,
    ) -> list[Report]:
        """Classified, non-duplicate reports in ``tiers`` with no linked article."""
        ...

    async def get_source_references(
        self, country: Country | None = None, *, limit: int = SOURCE_REFERENCE_WINDOW
    ) -> list[str]:
        """Source ids of the most recent reports, capped at ``limit`` entries."""
        ...

    async def add_source_references(self, report_id: str, source_ids: list[str]) -> Report:
        """Append source ids to a report, ignoring ids it already carries."""
        ...

    async def mark_as_duplicate(self, report_id: str, *, duplicate_of_id: str) -> Report:
        """Resolve a report as an alias of ``duplicate_of_id``."""
        ...


class ArticleRepository(Protocol):
    """Interface for article persistence."""

    async def create_many(self, articles: list[Article]) -> None: ...

    async def find_many(self, query: ArticleQuery) -> list[Article]: ...

    async def count_many(
        self,
        *,
        country: Country | None = None,
        language: Language | None = None,
        category: Category | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> int: ...
