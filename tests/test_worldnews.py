"""Tests for WorldNewsProvider."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import MagicMock

import httpx
import pytest

from newsdesk.data import Country, Language, NewsCluster
from newsdesk.news.worldnews import WORLD_NEWS_API_URL, WorldNewsProvider, _to_cluster


class TestWorldNewsProvider:
    """Tests for WorldNewsProvider."""

    @pytest.fixture
    def mock_response_data(self) -> dict:
        """Sample World News API top-news response."""
        return {
            "top_news": [
                {
                    "news": [
                        {
                            "id": 101,
                            "title": "Storm hits the coast",
                            "text": "A powerful storm made landfall overnight.",
                            "publish_date": "2026-03-10 08:00:00",
                        },
                        {
                            "id": 102,
                            "title": "Coastal towns evacuated",
                            "text": "Thousands left their homes ahead of the storm.",
                            "publish_date": "2026-03-10 10:00:00",
                        },
                    ]
                },
                {"news": []},
                {
                    "news": [
                        {
                            "id": 201,
                            "title": "Local team wins",
                            "text": "The final ended 2-1.",
                            "publish_date": "2026-03-10T12:00:00Z",
                        }
                    ]
                },
            ],
            "language": "en",
            "country": "us",
        }

    @pytest.fixture
    def provider(self) -> WorldNewsProvider:
        """Create a provider with a test API key and no rate-limit delay."""
        return WorldNewsProvider(api_key="test-key", min_request_interval=0.0)

    def test_init_requires_api_key(self, monkeypatch: pytest.MonkeyPatch):
        """Should raise if no API key provided."""
        monkeypatch.delenv("WORLD_NEWS_API_KEY", raising=False)
        with pytest.raises(ValueError, match="API key required"):
            WorldNewsProvider()

    def test_init_uses_env_var(self, monkeypatch: pytest.MonkeyPatch):
        """Should use WORLD_NEWS_API_KEY env var if no key passed."""
        monkeypatch.setenv("WORLD_NEWS_API_KEY", "env-key")
        provider = WorldNewsProvider()
        assert provider._api_key == "env-key"

    async def test_fetch_news_returns_clusters(
        self,
        provider: WorldNewsProvider,
        mock_response_data: dict,
        monkeypatch: pytest.MonkeyPatch,
    ):
        """Should return one cluster per non-empty section with prefixed ids."""
        mock_response = MagicMock()
        mock_response.json.return_value = mock_response_data
        mock_response.raise_for_status = MagicMock()

        async def mock_get(*args, **kwargs):
            return mock_response

        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)

        clusters = await provider.fetch_news(country=Country.US, language=Language.EN)

        assert len(clusters) == 2
        assert all(isinstance(c, NewsCluster) for c in clusters)
        assert clusters[0].source_ids == ["worldnewsapi:101", "worldnewsapi:102"]
        assert clusters[0].articles[0].headline == "Storm hits the coast"
        assert clusters[0].articles[1].body == "Thousands left their homes ahead of the storm."
        assert clusters[0].published_at == datetime(2026, 3, 10, 9, 0, tzinfo=UTC)
        assert clusters[1].source_ids == ["worldnewsapi:201"]

    async def test_fetch_news_passes_params(
        self,
        provider: WorldNewsProvider,
        monkeypatch: pytest.MonkeyPatch,
    ):
        """Should query top-news with key, locale and a local date."""
        captured: dict = {}

        mock_response = MagicMock()
        mock_response.json.return_value = {"top_news": []}
        mock_response.raise_for_status = MagicMock()

        async def mock_get(self, url, params=None):
            captured["url"] = url
            captured.update(params or {})
            return mock_response

        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)

        clusters = await provider.fetch_news(country=Country.FR, language=Language.FR)

        assert clusters == []
        assert captured["url"] == WORLD_NEWS_API_URL
        assert captured["api-key"] == "test-key"
        assert captured["source-country"] == "fr"
        assert captured["language"] == "fr"
        assert len(captured["date"]) == 10

    async def test_fetch_news_propagates_http_errors(
        self,
        provider: WorldNewsProvider,
        monkeypatch: pytest.MonkeyPatch,
    ):
        """Should let HTTP errors abort the caller's run."""

        async def mock_get(*args, **kwargs):
            raise httpx.HTTPError("API error")

        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)

        with pytest.raises(httpx.HTTPError):
            await provider.fetch_news(country=Country.US, language=Language.EN)

    async def test_fetch_news_propagates_status_errors(
        self,
        provider: WorldNewsProvider,
        monkeypatch: pytest.MonkeyPatch,
    ):
        """Should raise on non-2xx responses."""
        mock_response = MagicMock()
        mock_response.raise_for_status = MagicMock(side_effect=httpx.HTTPError("402"))

        async def mock_get(*args, **kwargs):
            return mock_response

        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)

        with pytest.raises(httpx.HTTPError, match="402"):
            await provider.fetch_news(country=Country.US, language=Language.EN)


def test_to_cluster_skips_empty_sections() -> None:
    assert _to_cluster({"news": []}) is None
    assert _to_cluster({}) is None


def test_to_cluster_rejects_items_without_id_or_date() -> None:
    with pytest.raises(ValueError, match="section 2 has an item without 'id'"):
        _to_cluster({"news": [{"title": "T", "publish_date": "2026-03-10 08:00:00"}]}, 2)
    with pytest.raises(ValueError, match="publish_date"):
        _to_cluster({"news": [{"id": 1, "title": "T"}]})
