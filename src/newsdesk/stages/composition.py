"""Composition stage: write authentic articles from classified reports."""

import logging
import uuid

from newsdesk.agents.base import ArticleCompositionAgent, ArticleCompositionResult
from newsdesk.data import (
    PUBLISHABLE_TIERS,
    Article,
    ArticleFrame,
    Authenticity,
    Body,
    Country,
    Headline,
    Language,
    Report,
)
from newsdesk.repository.base import ArticleRepository, ReportRepository

logger = logging.getLogger(__name__)


class FrameCountMismatchError(ValueError):
    """The composition agent returned a different number of frames than angles."""


def build_article(
    report: Report,
    result: ArticleCompositionResult,
    *,
    country: Country,
    language: Language,
) -> Article:
    """Turn a composition result into an authentic article linked to ``report``.

    Raises:
        FrameCountMismatchError: If frames and report angles differ in number.
        ValueError: If the headline, body or a frame fails validation.
    """
    if len(result.frames) != len(report.angles):
        raise FrameCountMismatchError(
            f"Expected {len(report.angles)} frames for report {report.id}, "
            f"got {len(result.frames)}"
        )

    frames = tuple(
        ArticleFrame(
            headline=Headline(frame.headline),
            body=Body(frame.body),
            stance=frame.stance,
            discourse=frame.discourse,
        )
        for frame in result.frames
    )
    return Article(
        id=str(uuid.uuid4()),
        headline=Headline(result.headline),
        body=Body(result.body),
        categories=report.categories,
        country=country,
        language=language,
        authenticity=Authenticity.authentic(),
        published_at=report.dateline,
        frames=frames,
        report_ids=(report.id,),
        traits=report.traits,
    )


class CompositionStage:
    """Compose one neutral article per publishable report lacking one.

    Articles are persisted one at a time so that the fabrication controller,
    which runs next, counts them.

    Args:
        composition_agent: Agent writing the article and its frames.
        report_repository: Report persistence.
        article_repository: Article persistence.
        batch_size: Maximum reports composed per run.
    """

    def __init__(
        self,
        composition_agent: ArticleCompositionAgent,
        report_repository: ReportRepository,
        article_repository: ArticleRepository,
        *,
        batch_size: int = 20,
    ) -> None:
        self._agent = composition_agent
        self._reports = report_repository
        self._articles = article_repository
        self._batch_size = batch_size

    async def execute(self, language: Language, country: Country) -> list[Article]:
        """Compose articles for a locale.

        Args:
            language: Language to write the articles in.
            country: Country whose reports are composed.

        Returns:
            Persisted authentic articles.
        """
        locale = f"{language.value}/{country.value}"
        reports = await self._reports.find_without_articles(
            tiers=PUBLISHABLE_TIERS, limit=self._batch_size, country=country
        )
        if not reports:
            logger.info("No reports awaiting composition (%s)", locale)
            return []
        logger.info("Composing articles for %d reports (%s)", len(reports), locale)

        composed: list[Article] = []
        for report in reports:
            try:
                result = await self._agent.run(
                    report=report, target_country=country, target_language=language
                )
                if result is None:
                    logger.warning("Composition agent returned no result for %s", report.id)
                    continue
                article = build_article(report, result, country=country, language=language)
                await self._articles.create_many([article])
                composed.append(article)
                logger.info(
                    "Article %s composed from report %s (%d frames)",
                    article.id,
                    report.id,
                    len(article.frames),
                )
            except FrameCountMismatchError as e:
                logger.warning("Rejected composition: %s", e)
            except Exception:
                logger.exception("Error composing article for report %s", report.id)

        logger.info("Composition finished (%s): %d articles", locale, len(composed))
        return composed
