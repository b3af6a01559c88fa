"""Fabrication ratio controller for the fake-news detection game.

Keeps roughly one in three recent articles of a locale fabricated:

- nothing is fabricated until a locale has ``baseline_threshold`` articles,
- the target is ``ceil(window / ratio_divisor)`` fabricated articles within
  the ``window`` most recent ones, which settles around a quarter of the
  full corpus as authentic articles keep accumulating,
- at most ``max_per_run`` articles are fabricated per run.
"""

import logging
import math
import random
import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from newsdesk.agents.base import (
    ArticleFabricationAgent,
    ArticleFabricationResult,
    FabricationContext,
    FabricationTone,
    RecentArticleContext,
)
from newsdesk.data import (
    Article,
    Authenticity,
    Body,
    Categories,
    Country,
    Headline,
    Language,
)
from newsdesk.repository.base import ArticleQuery, ArticleRepository

logger = logging.getLogger(__name__)

MIN_OFFSET_MINUTES = 2.0
MAX_OFFSET_MINUTES = 10.0
FALLBACK_WINDOW = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def fabrication_quota(
    recent_count: int,
    fabricated_count: int,
    *,
    ratio_divisor: int = 3,
    max_per_run: int = 3,
) -> int:
    """Number of articles to fabricate for a recent window.

    Args:
        recent_count: Size of the recent article window.
        fabricated_count: Fabricated articles already in that window.
        ratio_divisor: One in ``ratio_divisor`` recent articles should be fake.
        max_per_run: Upper bound on the result.

    Returns:
        ``ceil(recent_count / ratio_divisor) - fabricated_count`` clamped to
        ``[0, max_per_run]``.
    """
    desired = math.ceil(recent_count / ratio_divisor)
    return max(0, min(desired - fabricated_count, max_per_run))


def placement_time(
    recent_published: list[datetime],
    insert_after_index: int | None,
    *,
    now: datetime,
    rng: random.Random,
) -> datetime:
    """Pick a publication time that slots a fake article into the timeline.

    The article lands 2-10 minutes after the chosen base article (index
    clamped into ``[-1, len - 1]``; -1 uses the first article), never later
    than one minute before ``now``. Without recent articles it lands at a
    random moment within the last 24 hours.
    """
    if not recent_published or insert_after_index is None:
        return now - FALLBACK_WINDOW * rng.random()

    index = max(-1, min(insert_after_index, len(recent_published) - 1))
    base = recent_published[0] if index == -1 else recent_published[index]
    published_at = base + timedelta(minutes=rng.uniform(MIN_OFFSET_MINUTES, MAX_OFFSET_MINUTES))
    if published_at > now:
        published_at = now - timedelta(minutes=1)
    return published_at


class FabricationStage:
    """Generate fabricated articles to keep the locale's fake ratio on target.

    Args:
        fabrication_agent: Agent writing fake articles.
        article_repository: Article persistence.
        baseline_threshold: Minimum articles a locale needs before any fake.
        window_size: Number of recent articles the ratio is measured on.
        ratio_divisor: One in ``ratio_divisor`` recent articles should be fake.
        max_per_run: Maximum fabricated articles per run.
        tone: Tone requested from the agent; None lets it choose.
        clock: Returns the current time (UTC).
        rng: Random source for publication offsets.
    """

    def __init__(
        self,
        fabrication_agent: ArticleFabricationAgent,
        article_repository: ArticleRepository,
        *,
        baseline_threshold: int = 10,
        window_size: int = 10,
        ratio_divisor: int = 3,
        max_per_run: int = 3,
        tone: FabricationTone | None = None,
        clock: Callable[[], datetime] = _utcnow,
        rng: random.Random | None = None,
    ) -> None:
        self._agent = fabrication_agent
        self._articles = article_repository
        self._baseline_threshold = baseline_threshold
        self._window_size = window_size
        self._ratio_divisor = ratio_divisor
        self._max_per_run = max_per_run
        self._tone = tone
        self._clock = clock
        self._rng = rng or random.Random()

    async def execute(self, language: Language, country: Country) -> list[Article]:
        """Fabricate and persist articles for a locale if the ratio calls for it.

        Args:
            language: Language of the fabricated articles.
            country: Country the fabricated articles target.

        Returns:
            Persisted fabricated articles (possibly empty).

        Raises:
            Exception: Repository failures while counting, sampling or
                persisting propagate; agent failures only reduce the yield.
        """
        locale = f"{language.value}/{country.value}"

        total = await self._articles.count_many(country=country, language=language)
        if total < self._baseline_threshold:
            logger.info(
                "Skipping fabrication for %s: insufficient baseline articles (%d < %d)",
                locale,
                total,
                self._baseline_threshold,
            )
            return []

        recent = await self._articles.find_many(
            ArticleQuery(limit=self._window_size, country=country, language=language)
        )
        fabricated_count = sum(1 for a in recent if a.is_fabricated)
        quota = fabrication_quota(
            len(recent),
            fabricated_count,
            ratio_divisor=self._ratio_divisor,
            max_per_run=self._max_per_run,
        )
        if quota == 0:
            logger.info(
                "Skipping fabrication for %s: recent ratio already satisfied (%d/%d fabricated)",
                locale,
                fabricated_count,
                len(recent),
            )
            return []
        logger.info(
            "Fabricating %d articles for %s (%d/%d recent fabricated)",
            quota,
            locale,
            fabricated_count,
            len(recent),
        )

        context = FabricationContext(
            current_date=self._clock(),
            recent_articles=tuple(
                RecentArticleContext(
                    headline=a.headline.value,
                    body=a.body.value,
                    published_at=a.published_at,
                    frames=tuple((f.headline.value, f.body.value) for f in a.frames),
                )
                for a in recent
            ),
        )
        recent_published = [a.published_at for a in recent]

        fabricated: list[Article] = []
        for _ in range(quota):
            try:
                result = await self._agent.run(
                    target_country=country,
                    target_language=language,
                    context=context,
                    tone=self._tone,
                )
                if result is None:
                    logger.warning("Fabrication agent returned no result for %s", locale)
                    continue
                article = self._build_article(result, recent_published, language, country)
            except Exception:
                logger.exception("Error fabricating article for %s", locale)
                continue
            fabricated.append(article)
            logger.info(
                "Fabricated article %s (%s, %s): %s",
                article.id,
                result.category.value,
                result.tone,
                article.headline.value,
            )

        if fabricated:
            await self._articles.create_many(fabricated)
            logger.info("Persisted %d fabricated articles for %s", len(fabricated), locale)
        return fabricated

    def _build_article(
        self,
        result: ArticleFabricationResult,
        recent_published: list[datetime],
        language: Language,
        country: Country,
    ) -> Article:
        published_at = placement_time(
            recent_published, result.insert_after_index, now=self._clock(), rng=self._rng
        )
        return Article(
            id=str(uuid.uuid4()),
            headline=Headline(result.headline),
            body=Body(result.body),
            categories=Categories(values=(result.category,)),
            country=country,
            language=language,
            authenticity=Authenticity.fabricated(result.clarification),
            published_at=published_at,
        )
