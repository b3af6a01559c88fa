"""Tests for configuration loading and factory functions."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from newsdesk.agents.claude import (
    ClaudeArticleFabricationAgent,
    ClaudeReportIngestionAgent,
)
from newsdesk.config import (
    ClaudeAgentConfig,
    FabricationConfig,
    IngestionConfig,
    LocaleConfig,
    NewsdeskConfig,
    WorldNewsProviderConfig,
    create_from_config,
    get_default_config_path,
    load_config,
)
from newsdesk.config.factory import create_agent, create_news_provider
from newsdesk.data import Country, Language
from newsdesk.news.worldnews import WorldNewsProvider
from newsdesk.pipeline import ReportPipeline
from newsdesk.run_logger import RunLogger


@pytest.fixture(autouse=True)
def api_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLAUDE_API_KEY", "test-claude-key")
    monkeypatch.setenv("WORLD_NEWS_API_KEY", "test-worldnews-key")


class TestConfigModels:
    """Tests for Pydantic config models."""

    def test_root_defaults(self) -> None:
        config = NewsdeskConfig()
        assert [(l.language, l.country) for l in config.locales] == [
            (Language.EN, Country.US),
            (Language.FR, Country.FR),
        ]
        assert config.news_provider.type == "worldnews"
        assert config.agents.ingestion.model == "claude-haiku-4-5-20251001"
        assert config.logging.enabled is False

    def test_stage_defaults(self) -> None:
        config = NewsdeskConfig()
        assert config.ingestion.max_clusters == 3
        assert config.ingestion.min_articles == 2
        assert config.ingestion.source_reference_window == 5000
        assert config.ingestion.inline_deduplication is True
        assert config.deduplication.comparison_days == 7
        assert config.classification.batch_size == 50
        assert config.composition.batch_size == 20

    def test_fabrication_defaults(self) -> None:
        config = FabricationConfig()
        assert config.enabled is True
        assert config.baseline_threshold == 10
        assert config.window_size == 10
        assert config.ratio_divisor == 3
        assert config.max_per_run == 3
        assert config.tone is None

    def test_locale_parses_codes(self) -> None:
        locale = LocaleConfig.model_validate({"language": "FR", "country": "Fr"})
        assert locale.language is Language.FR
        assert locale.country is Country.FR

    def test_locale_rejects_unknown_country(self) -> None:
        with pytest.raises(ValidationError):
            LocaleConfig.model_validate({"language": "en", "country": "de"})

    def test_rejects_invalid_values(self) -> None:
        with pytest.raises(ValidationError):
            IngestionConfig(max_clusters=0)
        with pytest.raises(ValidationError):
            FabricationConfig.model_validate({"tone": "angry"})
        with pytest.raises(ValidationError):
            NewsdeskConfig.model_validate({"news_provider": {"type": "gnews"}})

    def test_models_are_frozen(self) -> None:
        config = ClaudeAgentConfig()
        with pytest.raises(ValidationError):
            config.model = "other"  # type: ignore[misc]


class TestLoader:
    """Tests for YAML loading."""

    def test_load_config(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "locales:\n"
            "  - language: en\n"
            "    country: us\n"
            "fabrication:\n"
            "  enabled: false\n"
            "  tone: satirical\n"
            "agents:\n"
            "  composition:\n"
            "    type: claude\n"
            "    model: claude-sonnet-4-5\n"
        )

        config = load_config(path)

        assert len(config.locales) == 1
        assert config.fabrication.enabled is False
        assert config.fabrication.tone == "satirical"
        assert config.agents.composition.model == "claude-sonnet-4-5"
        assert config.agents.ingestion.model == "claude-haiku-4-5-20251001"

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == NewsdeskConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_default_config_file_is_valid(self) -> None:
        path = get_default_config_path()
        assert path.exists()
        config = load_config(path)
        assert config.ingestion.max_clusters == 3


class TestFactory:
    """Tests for factory functions."""

    def test_create_news_provider(self) -> None:
        provider = create_news_provider(WorldNewsProviderConfig(min_request_interval=2.0))
        assert isinstance(provider, WorldNewsProvider)
        assert provider._min_interval == 2.0

    def test_create_agent(self) -> None:
        agent = create_agent("ingestion", ClaudeAgentConfig(model="claude-test"))
        assert isinstance(agent, ClaudeReportIngestionAgent)
        assert agent._model == "claude-test"
        assert isinstance(
            create_agent("fabrication", ClaudeAgentConfig()), ClaudeArticleFabricationAgent
        )

    def test_create_agent_unknown_role(self) -> None:
        with pytest.raises(ValueError, match="Unknown agent role"):
            create_agent("publishing", ClaudeAgentConfig())

    def test_create_from_config(self) -> None:
        pipeline, run_logger = create_from_config(NewsdeskConfig())
        assert isinstance(pipeline, ReportPipeline)
        assert run_logger is None
        assert pipeline._fabrication is not None

    def test_create_from_config_with_logging(self, tmp_path: Path) -> None:
        config = NewsdeskConfig.model_validate({"fabrication": {"enabled": False}})
        pipeline, run_logger = create_from_config(
            config, log_override=True, log_dir_override=str(tmp_path)
        )
        assert isinstance(run_logger, RunLogger)
        assert run_logger.enabled
        assert pipeline._fabrication is None

    def test_inline_deduplication_toggle(self) -> None:
        config = NewsdeskConfig.model_validate({"ingestion": {"inline_deduplication": False}})
        pipeline, _ = create_from_config(config)
        assert pipeline._ingestion._deduplication_agent is None
