"""Sequential report pipeline implementation."""

import asyncio
import logging
import time
from collections.abc import Sequence

from newsdesk.data import Article, Country, Language
from newsdesk.pipeline.base import PipelineRun
from newsdesk.run_logger import RunLogger
from newsdesk.stages import (
    ClassificationStage,
    CompositionStage,
    DeduplicationStage,
    FabricationStage,
    IngestionStage,
)

logger = logging.getLogger(__name__)


class ReportPipeline:
    """Pipeline that turns a locale's news into reports and articles.

    Flow:
    1. Ingestion fetches clusters and writes new reports
    2. Deduplication resolves reports the inline check left pending
    3. Classification assigns tiers and traits
    4. Composition writes an article per publishable report
    5. Fabrication tops up fake articles for the detection game

    Stages run one after another; each reads what the previous ones persisted.

    Args:
        ingestion: Ingestion stage.
        deduplication: Standalone deduplication stage.
        classification: Classification stage.
        composition: Composition stage.
        fabrication: Fabrication stage, or None to disable fabrication.
        run_logger: Optional RunLogger for per-stage result logging.
    """

    def __init__(
        self,
        ingestion: IngestionStage,
        deduplication: DeduplicationStage,
        classification: ClassificationStage,
        composition: CompositionStage,
        fabrication: FabricationStage | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._ingestion = ingestion
        self._deduplication = deduplication
        self._classification = classification
        self._composition = composition
        self._fabrication = fabrication
        self._run_logger = run_logger

    async def execute(self, language: Language, country: Country) -> PipelineRun:
        """Run all stages for a locale.

        Args:
            language: Language of the locale.
            country: Country of the locale.

        Returns:
            What each stage produced.

        Raises:
            Exception: Any fatal stage error (provider fetch, repository
                failures) aborts the run and propagates.
        """
        locale = f"{language.value}/{country.value}"
        run_id = None
        if self._run_logger:
            run_id = self._run_logger.start_run(language.value, country.value)
        logger.info("Starting pipeline run for %s", locale)

        t0 = time.monotonic()
        ingested = await self._ingestion.execute(language, country)
        self._log_stage(run_id, "ingestion", self._ingestion, ingested, t0)

        t0 = time.monotonic()
        deduplicated = await self._deduplication.execute(country)
        self._log_stage(run_id, "deduplication", self._deduplication, deduplicated, t0)

        t0 = time.monotonic()
        classification = await self._classification.execute(country)
        self._log_stage(run_id, "classification", self._classification, classification, t0)

        t0 = time.monotonic()
        composed = await self._composition.execute(language, country)
        self._log_stage(run_id, "composition", self._composition, composed, t0)

        fabricated: list[Article] = []
        if self._fabrication is not None:
            t0 = time.monotonic()
            fabricated = await self._fabrication.execute(language, country)
            self._log_stage(run_id, "fabrication", self._fabrication, fabricated, t0)

        if self._run_logger:
            path = self._run_logger.finish_run(
                run_id,
                report_count=len(ingested),
                article_count=len(composed),
                fabricated_count=len(fabricated),
            )
            if path:
                logger.info("Run log written to %s", path)

        logger.info(
            "Pipeline run for %s finished: %d reports, %d articles, %d fabricated",
            locale,
            len(ingested),
            len(composed),
            len(fabricated),
        )
        return PipelineRun(
            language=language,
            country=country,
            ingested=ingested,
            deduplicated=deduplicated,
            classification=classification,
            composed=composed,
            fabricated=fabricated,
        )

    async def run_locales(self, locales: Sequence[tuple[Language, Country]]) -> list[PipelineRun]:
        """Run several locales concurrently.

        A failing locale is logged and left out of the result; the others
        are unaffected.

        Args:
            locales: (language, country) pairs.

        Returns:
            Runs of the locales that completed.
        """
        results = await asyncio.gather(
            *(self.execute(language, country) for language, country in locales),
            return_exceptions=True,
        )

        runs: list[PipelineRun] = []
        for (language, country), result in zip(locales, results, strict=True):
            if isinstance(result, BaseException):
                logger.error(
                    "Pipeline run for %s/%s failed: %s",
                    language.value,
                    country.value,
                    result,
                    exc_info=result,
                )
                continue
            runs.append(result)
        return runs

    def _log_stage(
        self,
        run_id: str | None,
        stage: str,
        component: object,
        output: object,
        started: float,
    ) -> None:
        if self._run_logger:
            self._run_logger.log_stage(
                run_id,
                stage=stage,
                component=type(component).__name__,
                output_data=output,
                duration_seconds=time.monotonic() - started,
            )
