"""Classification stage: assign an audience tier to pending reports."""

import logging
from dataclasses import dataclass

from newsdesk.agents.base import ReportClassificationAgent
from newsdesk.data import ClassificationState, Country
from newsdesk.repository.base import ReportRepository, ReportUpdate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassificationSummary:
    successful: int = 0
    failed: int = 0

    @property
    def total_reviewed(self) -> int:
        return self.successful + self.failed


class ClassificationStage:
    """Classify reports awaiting a tier.

    A report the agent fails on is left untouched, so it stays pending and
    is picked up again by the next run.

    Args:
        classification_agent: Agent assigning tiers.
        report_repository: Report persistence.
        batch_size: Maximum reports classified per run.
    """

    def __init__(
        self,
        classification_agent: ReportClassificationAgent,
        report_repository: ReportRepository,
        *,
        batch_size: int = 50,
    ) -> None:
        self._agent = classification_agent
        self._reports = report_repository
        self._batch_size = batch_size

    async def execute(self, country: Country | None = None) -> ClassificationSummary:
        """Classify pending reports.

        Args:
            country: Restrict the run to one country; all countries if None.

        Returns:
            Counts of successful and failed classifications.
        """
        logger.info("Starting report classification")
        reports = await self._reports.find_pending_classification(
            limit=self._batch_size, country=country
        )
        if not reports:
            logger.info("No reports pending classification")
            return ClassificationSummary()
        logger.info("Classifying %d reports", len(reports))

        successful = 0
        failed = 0
        for report in reports:
            try:
                result = await self._agent.run(report=report)
                if result is None:
                    logger.warning("Classification agent returned no result for %s", report.id)
                    failed += 1
                    continue

                await self._reports.update(
                    report.id,
                    ReportUpdate(
                        classification_state=ClassificationState.COMPLETE,
                        tier=result.classification,
                        traits=result.traits,
                    ),
                )
                logger.info(
                    "Report %s classified as %s: %s",
                    report.id,
                    result.classification.value,
                    result.reason,
                )
                successful += 1
            except Exception:
                logger.exception("Error classifying report %s", report.id)
                failed += 1

        summary = ClassificationSummary(successful=successful, failed=failed)
        logger.info(
            "Report classification completed: successful=%d failed=%d total_reviewed=%d",
            summary.successful,
            summary.failed,
            summary.total_reviewed,
        )
        return summary
