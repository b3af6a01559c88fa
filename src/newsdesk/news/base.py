"""Protocol for news providers."""

from typing import Protocol

from newsdesk.data import Country, Language, NewsCluster


class NewsProvider(Protocol):
    """Interface for fetching clustered news from an external source."""

    async def fetch_news(self, *, country: Country, language: Language) -> list[NewsCluster]:
        """Fetch today's top news clusters for a locale.

        Args:
            country: Source country filter.
            language: Article language filter.

        Returns:
            Clusters of articles, each covering one event.
        """
        ...
