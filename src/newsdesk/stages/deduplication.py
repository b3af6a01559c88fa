"""Deduplication stage: resolve reports that may repeat a known event."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from newsdesk.agents.base import ReportDeduplicationAgent
from newsdesk.data import Country, DeduplicationState, Report, ReportDigest
from newsdesk.repository.base import ReportRepository, ReportUpdate

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class DeduplicationStage:
    """Resolve every report still pending deduplication.

    Each pending report is compared against a window of recent canonical
    reports. A duplicate has its source references merged into the
    canonical report and becomes an alias of it; a unique report is simply
    resolved. Reports whose check fails are resolved too, so a flaky agent
    cannot keep a report pending forever.

    Args:
        deduplication_agent: Agent comparing a report against known ones.
        report_repository: Report persistence.
        batch_size: Maximum pending reports handled per run.
        comparison_days: Age of the reports used as comparison window.
        comparison_limit: Maximum reports in the comparison window.
        clock: Returns the current time (UTC).
    """

    def __init__(
        self,
        deduplication_agent: ReportDeduplicationAgent,
        report_repository: ReportRepository,
        *,
        batch_size: int = 50,
        comparison_days: int = 7,
        comparison_limit: int = 1000,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._agent = deduplication_agent
        self._reports = report_repository
        self._batch_size = batch_size
        self._comparison_days = comparison_days
        self._comparison_limit = comparison_limit
        self._clock = clock

    async def execute(self, country: Country | None = None) -> list[Report]:
        """Deduplicate pending reports.

        Args:
            country: Restrict the run to one country; all countries if None.

        Returns:
            The processed reports in their resolved state.
        """
        scope = country.value if country else "all"
        pending = await self._reports.find_pending_deduplication(
            limit=self._batch_size, country=country
        )
        if not pending:
            logger.info("No reports pending deduplication (%s)", scope)
            return []
        logger.info("Deduplicating %d reports (%s)", len(pending), scope)

        existing = await self._reports.find_recent(
            since=self._clock() - timedelta(days=self._comparison_days),
            limit=self._comparison_limit,
            country=country,
            exclude_ids=[r.id for r in pending],
        )
        window = [ReportDigest(id=r.id, facts=r.facts) for r in existing]
        window_ids = {digest.id for digest in window}
        logger.info("Loaded %d reports for comparison", len(window))

        processed: list[Report] = []
        duplicates = 0
        for report in pending:
            try:
                duplicate_of = await self._find_duplicate(report, window, window_ids)
                if duplicate_of is not None:
                    await self._reports.add_source_references(
                        duplicate_of, list(report.source_references)
                    )
                    resolved = await self._reports.mark_as_duplicate(
                        report.id, duplicate_of_id=duplicate_of
                    )
                    duplicates += 1
                    logger.info("Report %s is a duplicate of %s", report.id, duplicate_of)
                else:
                    resolved = await self._resolve(report)
                    logger.info("Report %s is unique", report.id)
                processed.append(resolved)
            except Exception:
                logger.exception("Error deduplicating report %s", report.id)
                try:
                    processed.append(await self._resolve(report))
                except Exception:
                    logger.exception("Failed to resolve report %s after error", report.id)

        logger.info(
            "Deduplication finished (%s): %d processed, %d duplicates, %d unique",
            scope,
            len(processed),
            duplicates,
            len(processed) - duplicates,
        )
        return processed

    async def _find_duplicate(
        self, report: Report, window: list[ReportDigest], window_ids: set[str]
    ) -> str | None:
        if not window:
            return None
        verdict = await self._agent.run(existing_reports=window, new_report=report)
        if verdict is None or verdict.duplicate_of_report_id is None:
            return None
        if verdict.duplicate_of_report_id not in window_ids:
            logger.warning(
                "Agent flagged report %s as duplicate of unknown report %s; keeping it",
                report.id,
                verdict.duplicate_of_report_id,
            )
            return None
        return verdict.duplicate_of_report_id

    async def _resolve(self, report: Report) -> Report:
        return await self._reports.update(
            report.id, ReportUpdate(deduplication_state=DeduplicationState.COMPLETE)
        )
