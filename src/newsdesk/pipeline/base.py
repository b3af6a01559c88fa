"""Pipeline protocol and run result for one locale."""

from dataclasses import dataclass, field
from typing import Protocol

from newsdesk.data import Article, Country, Language, Report
from newsdesk.stages.classification import ClassificationSummary


@dataclass(frozen=True)
class PipelineRun:
    """Outcome of a pipeline run for a single locale.

    Attributes:
        language: Language the run targeted.
        country: Country the run targeted.
        ingested: Reports created by ingestion.
        deduplicated: Reports resolved by the standalone deduplication stage.
        classification: Classification counts.
        composed: Authentic articles composed.
        fabricated: Fabricated articles generated.
    """

    language: Language
    country: Country
    ingested: list[Report] = field(default_factory=list)
    deduplicated: list[Report] = field(default_factory=list)
    classification: ClassificationSummary = field(default_factory=ClassificationSummary)
    composed: list[Article] = field(default_factory=list)
    fabricated: list[Article] = field(default_factory=list)

    @property
    def locale(self) -> str:
        return f"{self.language.value}/{self.country.value}"


class Pipeline(Protocol):
    """Interface for the report-to-article pipeline."""

    async def execute(self, language: Language, country: Country) -> PipelineRun:
        """Run every stage for one locale.

        Args:
            language: Language of the locale.
            country: Country of the locale.

        Returns:
            What each stage produced.
        """
        ...
