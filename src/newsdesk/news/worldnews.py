"""World News API provider."""

import asyncio
import logging
import os
import time
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import httpx

from newsdesk.data import Country, Language, NewsArticle, NewsCluster

logger = logging.getLogger(__name__)

WORLD_NEWS_API_URL = "https://api.worldnewsapi.com/top-news"
SOURCE_PREFIX = "worldnewsapi"

COUNTRY_TIMEZONES: dict[Country, str] = {
    Country.US: "America/New_York",
    Country.FR: "Europe/Paris",
}


def _parse_publish_date(raw: str) -> datetime:
    """Parse a World News timestamp ("2026-02-01 10:00:00" or ISO 8601) as UTC."""
    parsed = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _to_cluster(section: dict, index: int = 0) -> NewsCluster | None:
    """Convert one ``top_news`` section into a cluster, or None when empty.

    Raises:
        ValueError: If an item lacks its ``id`` or ``publish_date``.
    """
    news = section.get("news", [])
    if not news:
        return None

    try:
        articles = tuple(
            NewsArticle(
                id=f"{SOURCE_PREFIX}:{item['id']}",
                headline=item.get("title", ""),
                body=item.get("text", ""),
            )
            for item in news
        )
        timestamps = [_parse_publish_date(item["publish_date"]).timestamp() for item in news]
    except KeyError as e:
        raise ValueError(f"top_news section {index} has an item without {e}") from e
    average = sum(timestamps) / len(timestamps)
    return NewsCluster(articles=articles, published_at=datetime.fromtimestamp(average, tz=UTC))


class WorldNewsProvider:
    """Fetch clustered top news from the World News API.

    Requests are spaced at least ``min_request_interval`` seconds apart to
    respect the API rate limit. HTTP failures propagate to the caller.

    Args:
        api_key: World News API key (defaults to WORLD_NEWS_API_KEY env var).
        min_request_interval: Minimum delay between two requests, in seconds.
        timeout: HTTP timeout in seconds.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        min_request_interval: float = 1.2,
        timeout: float = 30.0,
    ) -> None:
        self._api_key = api_key or os.environ.get("WORLD_NEWS_API_KEY")
        if not self._api_key:
            raise ValueError(
                "World News API key required. Pass api_key or set WORLD_NEWS_API_KEY env var."
            )
        self._min_interval = min_request_interval
        self._timeout = timeout
        self._last_request: float | None = None
        self._rate_lock = asyncio.Lock()

    async def fetch_news(self, *, country: Country, language: Language) -> list[NewsCluster]:
        """Fetch today's top news for a locale.

        Args:
            country: Source country of the articles.
            language: Language of the articles.

        Returns:
            One cluster per non-empty ``top_news`` section.
        """
        params: dict[str, str] = {
            "api-key": self._api_key,  # type: ignore[dict-item]
            "source-country": country.value,
            "language": language.value,
            "date": self._local_date(country),
        }

        await self._wait_for_slot()
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.get(WORLD_NEWS_API_URL, params=params)
        response.raise_for_status()
        data = response.json()

        clusters: list[NewsCluster] = []
        for index, section in enumerate(data.get("top_news", [])):
            cluster = _to_cluster(section, index)
            if cluster is not None:
                clusters.append(cluster)

        logger.info(
            "Fetched %d news clusters for %s/%s", len(clusters), language.value, country.value
        )
        return clusters

    def _local_date(self, country: Country) -> str:
        """Today's date in the country's main timezone (YYYY-MM-DD)."""
        tz = ZoneInfo(COUNTRY_TIMEZONES.get(country, "UTC"))
        return datetime.now(tz=tz).strftime("%Y-%m-%d")

    async def _wait_for_slot(self) -> None:
        async with self._rate_lock:
            if self._last_request is not None:
                elapsed = time.monotonic() - self._last_request
                if elapsed < self._min_interval:
                    await asyncio.sleep(self._min_interval - elapsed)
            self._last_request = time.monotonic()
