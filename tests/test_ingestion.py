"""Tests for the ingestion stage."""

from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from newsdesk.agents.base import (
    IngestedAngle,
    ReportDeduplicationResult,
    ReportIngestionResult,
)
from newsdesk.data import (
    Categories,
    Category,
    ClassificationState,
    Country,
    DeduplicationState,
    Language,
    NewsCluster,
    Report,
    Stance,
    Traits,
)
from newsdesk.repository import InMemoryReportRepository
from newsdesk.stages import IngestionStage

from conftest import CORPUS, NOW


def _ingestion_result() -> ReportIngestionResult:
    return ReportIngestionResult(
        facts="A new transit plan was approved by the council.",
        categories=Categories(values=(Category.POLITICS, Category.SOCIETY)),
        angles=(
            IngestedAngle(corpus=CORPUS, stance=Stance.SUPPORTIVE),
            IngestedAngle(corpus=CORPUS + " Critics disagree.", stance=Stance.CRITICAL),
        ),
        traits=Traits(smart=True),
    )


@pytest.fixture
def provider() -> MagicMock:
    mock = MagicMock()
    mock.fetch_news = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def ingestion_agent() -> MagicMock:
    mock = MagicMock()
    mock.run = AsyncMock(return_value=_ingestion_result())
    return mock


@pytest.fixture
def dedup_agent() -> MagicMock:
    mock = MagicMock()
    mock.run = AsyncMock(return_value=ReportDeduplicationResult(duplicate_of_report_id=None))
    return mock


def _stage(
    provider: MagicMock,
    ingestion_agent: MagicMock,
    report_repo: InMemoryReportRepository,
    dedup_agent: MagicMock | None = None,
    **kwargs: int,
) -> IngestionStage:
    return IngestionStage(
        provider, ingestion_agent, report_repo, dedup_agent, clock=lambda: NOW, **kwargs
    )


class TestIngestionStage:
    """Tests for IngestionStage.execute."""

    async def test_single_cluster_creates_pending_report(
        self,
        provider: MagicMock,
        ingestion_agent: MagicMock,
        report_repo: InMemoryReportRepository,
        make_cluster: Callable[..., NewsCluster],
    ) -> None:
        cluster = make_cluster("worldnewsapi:1", "worldnewsapi:2", "worldnewsapi:3")
        provider.fetch_news.return_value = [cluster]
        stage = _stage(provider, ingestion_agent, report_repo)

        reports = await stage.execute(Language.EN, Country.US)

        assert len(reports) == 1
        report = reports[0]
        assert report.classification_state is ClassificationState.PENDING
        assert report.deduplication_state is DeduplicationState.PENDING
        assert report.country is Country.US
        assert report.dateline == cluster.published_at
        assert report.source_references == (
            "worldnewsapi:1",
            "worldnewsapi:2",
            "worldnewsapi:3",
        )
        assert report.categories.primary is Category.POLITICS
        assert len(report.angles) == 2
        assert report.traits.smart
        assert await report_repo.find_by_id(report.id) == report
        provider.fetch_news.assert_awaited_once_with(country=Country.US, language=Language.EN)

    async def test_second_run_with_same_clusters_creates_nothing(
        self,
        provider: MagicMock,
        ingestion_agent: MagicMock,
        report_repo: InMemoryReportRepository,
        make_cluster: Callable[..., NewsCluster],
    ) -> None:
        provider.fetch_news.return_value = [make_cluster("a:1", "a:2", "a:3")]
        stage = _stage(provider, ingestion_agent, report_repo)

        first = await stage.execute(Language.EN, Country.US)
        second = await stage.execute(Language.EN, Country.US)

        assert len(first) == 1
        assert second == []
        assert ingestion_agent.run.await_count == 1

    async def test_cluster_sharing_one_known_source_is_skipped(
        self,
        provider: MagicMock,
        ingestion_agent: MagicMock,
        report_repo: InMemoryReportRepository,
        make_report: Callable[..., Report],
        make_cluster: Callable[..., NewsCluster],
    ) -> None:
        await report_repo.create(make_report(source_references=("known:1",)))
        provider.fetch_news.return_value = [make_cluster("new:1", "known:1", "new:2")]
        stage = _stage(provider, ingestion_agent, report_repo)

        assert await stage.execute(Language.EN, Country.US) == []
        ingestion_agent.run.assert_not_awaited()

    async def test_thin_clusters_are_dropped_before_batch_cap(
        self,
        provider: MagicMock,
        ingestion_agent: MagicMock,
        report_repo: InMemoryReportRepository,
        make_cluster: Callable[..., NewsCluster],
    ) -> None:
        provider.fetch_news.return_value = [
            make_cluster("solo:1"),
            make_cluster("b:1", "b:2"),
            make_cluster("c:1", "c:2"),
            make_cluster("d:1", "d:2"),
        ]
        stage = _stage(provider, ingestion_agent, report_repo, max_clusters=2)

        reports = await stage.execute(Language.EN, Country.US)

        assert [r.source_references for r in reports] == [("b:1", "b:2"), ("c:1", "c:2")]

    async def test_clusters_overlapping_within_a_run_are_ingested_once(
        self,
        provider: MagicMock,
        ingestion_agent: MagicMock,
        report_repo: InMemoryReportRepository,
        make_cluster: Callable[..., NewsCluster],
    ) -> None:
        provider.fetch_news.return_value = [
            make_cluster("x:1", "x:2"),
            make_cluster("x:2", "x:3"),
        ]
        stage = _stage(provider, ingestion_agent, report_repo)

        assert len(await stage.execute(Language.EN, Country.US)) == 1

    async def test_agent_failure_skips_cluster(
        self,
        provider: MagicMock,
        ingestion_agent: MagicMock,
        report_repo: InMemoryReportRepository,
        make_cluster: Callable[..., NewsCluster],
    ) -> None:
        provider.fetch_news.return_value = [
            make_cluster("a:1", "a:2"),
            make_cluster("b:1", "b:2"),
            make_cluster("c:1", "c:2"),
        ]
        ingestion_agent.run.side_effect = [
            None,
            RuntimeError("model overloaded"),
            _ingestion_result(),
        ]
        stage = _stage(provider, ingestion_agent, report_repo)

        reports = await stage.execute(Language.EN, Country.US)

        assert [r.source_references for r in reports] == [("c:1", "c:2")]

    async def test_invalid_agent_output_skips_cluster(
        self,
        provider: MagicMock,
        ingestion_agent: MagicMock,
        report_repo: InMemoryReportRepository,
        make_cluster: Callable[..., NewsCluster],
    ) -> None:
        provider.fetch_news.return_value = [make_cluster("a:1", "a:2")]
        ingestion_agent.run.return_value = ReportIngestionResult(
            facts="Short but valid facts here.",
            categories=Categories(values=(Category.OTHER,)),
            angles=(IngestedAngle(corpus="too short", stance=Stance.NEUTRAL),),
        )
        stage = _stage(provider, ingestion_agent, report_repo)

        assert await stage.execute(Language.EN, Country.US) == []

    async def test_provider_failure_propagates(
        self,
        provider: MagicMock,
        ingestion_agent: MagicMock,
        report_repo: InMemoryReportRepository,
    ) -> None:
        provider.fetch_news.side_effect = RuntimeError("API down")
        stage = _stage(provider, ingestion_agent, report_repo)

        with pytest.raises(RuntimeError, match="API down"):
            await stage.execute(Language.EN, Country.US)

    async def test_empty_provider_output(
        self,
        provider: MagicMock,
        ingestion_agent: MagicMock,
        report_repo: InMemoryReportRepository,
    ) -> None:
        stage = _stage(provider, ingestion_agent, report_repo)
        assert await stage.execute(Language.EN, Country.US) == []
        ingestion_agent.run.assert_not_awaited()


class TestInlineDeduplication:
    """Tests for the duplicate check performed during ingestion."""

    async def test_nothing_to_compare_resolves_report(
        self,
        provider: MagicMock,
        ingestion_agent: MagicMock,
        dedup_agent: MagicMock,
        report_repo: InMemoryReportRepository,
        make_cluster: Callable[..., NewsCluster],
    ) -> None:
        provider.fetch_news.return_value = [make_cluster("a:1", "a:2")]
        stage = _stage(provider, ingestion_agent, report_repo, dedup_agent)

        [report] = await stage.execute(Language.EN, Country.US)

        assert report.deduplication_state is DeduplicationState.COMPLETE
        dedup_agent.run.assert_not_awaited()

    async def test_duplicate_cluster_merges_sources(
        self,
        provider: MagicMock,
        ingestion_agent: MagicMock,
        dedup_agent: MagicMock,
        report_repo: InMemoryReportRepository,
        make_report: Callable[..., Report],
        make_cluster: Callable[..., NewsCluster],
    ) -> None:
        existing = await report_repo.create(
            make_report(id="existing", source_references=("old:1",))
        )
        provider.fetch_news.return_value = [make_cluster("new:1", "new:2")]
        dedup_agent.run.return_value = ReportDeduplicationResult(
            duplicate_of_report_id="existing"
        )
        stage = _stage(provider, ingestion_agent, report_repo, dedup_agent)

        assert await stage.execute(Language.EN, Country.US) == []

        merged = await report_repo.find_by_id(existing.id)
        assert merged is not None
        assert merged.source_references == ("old:1", "new:1", "new:2")
        ingestion_agent.run.assert_not_awaited()
        kwargs = dedup_agent.run.await_args.kwargs
        assert [d.id for d in kwargs["existing_reports"]] == ["existing"]

    async def test_unique_verdict_resolves_report(
        self,
        provider: MagicMock,
        ingestion_agent: MagicMock,
        dedup_agent: MagicMock,
        report_repo: InMemoryReportRepository,
        make_report: Callable[..., Report],
        make_cluster: Callable[..., NewsCluster],
    ) -> None:
        await report_repo.create(make_report())
        provider.fetch_news.return_value = [make_cluster("new:1", "new:2")]
        stage = _stage(provider, ingestion_agent, report_repo, dedup_agent)

        [report] = await stage.execute(Language.EN, Country.US)

        assert report.deduplication_state is DeduplicationState.COMPLETE

    async def test_failed_check_leaves_report_pending(
        self,
        provider: MagicMock,
        ingestion_agent: MagicMock,
        dedup_agent: MagicMock,
        report_repo: InMemoryReportRepository,
        make_report: Callable[..., Report],
        make_cluster: Callable[..., NewsCluster],
    ) -> None:
        await report_repo.create(make_report())
        provider.fetch_news.return_value = [make_cluster("new:1", "new:2")]
        dedup_agent.run.return_value = None
        stage = _stage(provider, ingestion_agent, report_repo, dedup_agent)

        [report] = await stage.execute(Language.EN, Country.US)

        assert report.deduplication_state is DeduplicationState.PENDING

    async def test_raising_check_still_creates_pending_report(
        self,
        provider: MagicMock,
        ingestion_agent: MagicMock,
        dedup_agent: MagicMock,
        report_repo: InMemoryReportRepository,
        make_report: Callable[..., Report],
        make_cluster: Callable[..., NewsCluster],
    ) -> None:
        await report_repo.create(make_report())
        provider.fetch_news.return_value = [make_cluster("new:1", "new:2")]
        dedup_agent.run.side_effect = RuntimeError("boom")
        stage = _stage(provider, ingestion_agent, report_repo, dedup_agent)

        [report] = await stage.execute(Language.EN, Country.US)

        assert report.deduplication_state is DeduplicationState.PENDING
        assert report.source_references == ("new:1", "new:2")
        ingestion_agent.run.assert_awaited_once()

    async def test_unknown_duplicate_id_is_treated_as_unique(
        self,
        provider: MagicMock,
        ingestion_agent: MagicMock,
        dedup_agent: MagicMock,
        report_repo: InMemoryReportRepository,
        make_report: Callable[..., Report],
        make_cluster: Callable[..., NewsCluster],
    ) -> None:
        await report_repo.create(make_report())
        provider.fetch_news.return_value = [make_cluster("new:1", "new:2")]
        dedup_agent.run.return_value = ReportDeduplicationResult(
            duplicate_of_report_id="hallucinated"
        )
        stage = _stage(provider, ingestion_agent, report_repo, dedup_agent)

        [report] = await stage.execute(Language.EN, Country.US)

        assert report.deduplication_state is DeduplicationState.COMPLETE

    async def test_reports_from_same_run_are_compared(
        self,
        provider: MagicMock,
        ingestion_agent: MagicMock,
        dedup_agent: MagicMock,
        report_repo: InMemoryReportRepository,
        make_cluster: Callable[..., NewsCluster],
    ) -> None:
        provider.fetch_news.return_value = [
            make_cluster("a:1", "a:2"),
            make_cluster("b:1", "b:2"),
        ]
        stage = _stage(provider, ingestion_agent, report_repo, dedup_agent)

        first, second = await stage.execute(Language.EN, Country.US)

        kwargs = dedup_agent.run.await_args.kwargs
        assert [d.id for d in kwargs["existing_reports"]] == [first.id]
        assert second.deduplication_state is DeduplicationState.COMPLETE
