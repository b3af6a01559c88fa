"""Ingestion stage: turn fresh news clusters into pending reports."""

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from newsdesk.agents.base import (
    ReportDeduplicationAgent,
    ReportDeduplicationResult,
    ReportIngestionAgent,
)
from newsdesk.data import (
    Country,
    DeduplicationState,
    Language,
    NewsCluster,
    Report,
    ReportAngle,
    ReportDigest,
)
from newsdesk.news.base import NewsProvider
from newsdesk.repository.base import SOURCE_REFERENCE_WINDOW, ReportRepository

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class IngestionStage:
    """Fetch news clusters and persist one report per new event.

    Flow:
    1. Load known source references and recent report facts for the country
    2. Fetch clusters from the news provider
    3. Drop clusters that share any source id with a known report, or that
       have fewer than ``min_articles`` articles
    4. Keep the first ``max_clusters`` survivors
    5. For each cluster: optional inline duplicate check, ingestion agent
       call, report creation

    Reports created earlier in the same run join the comparison list, so two
    clusters about the same event in one batch yield a single report.

    Args:
        news_provider: Source of news clusters.
        ingestion_agent: Agent extracting facts and angles.
        report_repository: Report persistence.
        deduplication_agent: Agent for the inline duplicate check. Inline
            deduplication is disabled when None.
        max_clusters: Maximum clusters sent to the agent per run.
        min_articles: Minimum articles a cluster needs to be corroborated.
        recent_facts_days: Age of the reports used as duplicate context.
        source_reference_window: How many known source ids to load.
        clock: Returns the current time (UTC).
    """

    def __init__(
        self,
        news_provider: NewsProvider,
        ingestion_agent: ReportIngestionAgent,
        report_repository: ReportRepository,
        deduplication_agent: ReportDeduplicationAgent | None = None,
        *,
        max_clusters: int = 3,
        min_articles: int = 2,
        recent_facts_days: int = 3,
        source_reference_window: int = SOURCE_REFERENCE_WINDOW,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._news_provider = news_provider
        self._ingestion_agent = ingestion_agent
        self._reports = report_repository
        self._deduplication_agent = deduplication_agent
        self._max_clusters = max_clusters
        self._min_articles = min_articles
        self._recent_facts_days = recent_facts_days
        self._source_reference_window = source_reference_window
        self._clock = clock

    async def execute(self, language: Language, country: Country) -> list[Report]:
        """Ingest new reports for a locale.

        Args:
            language: Language of the source articles.
            country: Country the reports are about.

        Returns:
            Newly created reports. Clusters merged into an existing report
            are not included.

        Raises:
            Exception: Any error from the initial repository reads or the
                news provider aborts the run.
        """
        logger.info("Starting report ingestion for %s/%s", language.value, country.value)

        known_sources = set(
            await self._reports.get_source_references(
                country, limit=self._source_reference_window
            )
        )
        since = self._clock() - timedelta(days=self._recent_facts_days)
        comparison = await self._reports.find_recent_facts(country=country, since=since)
        logger.info(
            "Loaded %d source references and %d recent reports",
            len(known_sources),
            len(comparison),
        )

        clusters = await self._news_provider.fetch_news(country=country, language=language)
        if not clusters:
            logger.warning("No news clusters fetched for %s/%s", language.value, country.value)
            return []
        logger.info("Fetched %d news clusters", len(clusters))

        batch = self._select_clusters(clusters, known_sources)
        if not batch:
            logger.info("No new clusters to ingest")
            return []

        created: list[Report] = []
        for cluster in batch:
            try:
                report = await self._ingest_cluster(cluster, country, comparison)
            except Exception:
                logger.exception(
                    "Error while ingesting cluster (sources: %s)", ", ".join(cluster.source_ids)
                )
                continue
            if report is not None:
                created.append(report)
                comparison.append(ReportDigest(id=report.id, facts=report.facts))

        logger.info(
            "Report ingestion finished for %s/%s: %d created",
            language.value,
            country.value,
            len(created),
        )
        return created

    def _select_clusters(
        self, clusters: list[NewsCluster], known_sources: set[str]
    ) -> list[NewsCluster]:
        """Filter out seen or thin clusters, then cap the batch size."""
        selected: list[NewsCluster] = []
        claimed = set(known_sources)
        for cluster in clusters:
            source_ids = cluster.source_ids
            if any(source_id in claimed for source_id in source_ids):
                continue
            if len(cluster.articles) < self._min_articles:
                continue
            claimed.update(source_ids)
            selected.append(cluster)

        logger.info(
            "%d of %d clusters are new and corroborated; keeping %d",
            len(selected),
            len(clusters),
            min(len(selected), self._max_clusters),
        )
        return selected[: self._max_clusters]

    async def _ingest_cluster(
        self,
        cluster: NewsCluster,
        country: Country,
        comparison: list[ReportDigest],
    ) -> Report | None:
        deduplication_state = DeduplicationState.PENDING

        if self._deduplication_agent is not None:
            if not comparison:
                deduplication_state = DeduplicationState.COMPLETE
            else:
                verdict = await self._inline_verdict(
                    self._deduplication_agent, cluster, comparison
                )
                if verdict is not None:
                    duplicate_of = verdict.duplicate_of_report_id
                    if duplicate_of and any(d.id == duplicate_of for d in comparison):
                        await self._reports.add_source_references(
                            duplicate_of, cluster.source_ids
                        )
                        logger.info(
                            "Cluster merged into existing report %s (%d sources)",
                            duplicate_of,
                            len(cluster.articles),
                        )
                        return None
                    if duplicate_of:
                        logger.warning(
                            "Duplicate check pointed at unknown report %s; treating as unique",
                            duplicate_of,
                        )
                    deduplication_state = DeduplicationState.COMPLETE

        result = await self._ingestion_agent.run(news_cluster=cluster)
        if result is None:
            logger.warning(
                "Ingestion agent returned no result (%d articles)", len(cluster.articles)
            )
            return None

        now = self._clock()
        report = Report(
            id=str(uuid.uuid4()),
            categories=result.categories,
            country=country,
            dateline=cluster.published_at,
            facts=result.facts,
            angles=tuple(
                ReportAngle(corpus=a.corpus, stance=a.stance, discourse=a.discourse)
                for a in result.angles
            ),
            source_references=tuple(dict.fromkeys(cluster.source_ids)),
            created_at=now,
            updated_at=now,
            deduplication_state=deduplication_state,
            traits=result.traits,
        )
        saved = await self._reports.create(report)
        logger.info("Report %s ingested (%d angles)", saved.id, len(saved.angles))
        return saved

    async def _inline_verdict(
        self,
        agent: ReportDeduplicationAgent,
        cluster: NewsCluster,
        comparison: list[ReportDigest],
    ) -> ReportDeduplicationResult | None:
        """Run the inline duplicate check; None leaves the report pending."""
        try:
            verdict = await agent.run(
                existing_reports=list(comparison), new_report=cluster
            )
        except Exception:
            logger.exception("Inline duplicate check failed; report left pending")
            return None
        if verdict is None:
            logger.warning("Inline duplicate check returned no result")
        return verdict
