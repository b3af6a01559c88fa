"""Pydantic configuration models for newsdesk components."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from newsdesk.data import Country, Language

# ============================================================
# Locale Configs
# ============================================================


class LocaleConfig(BaseModel):
    """A (language, country) pair the pipeline runs for."""

    language: Language
    country: Country

    model_config = {"frozen": True}

    @field_validator("language", mode="before")
    @classmethod
    def parse_language(cls, v: object) -> object:
        return Language.parse(v) if isinstance(v, str) else v

    @field_validator("country", mode="before")
    @classmethod
    def parse_country(cls, v: object) -> object:
        return Country.parse(v) if isinstance(v, str) else v


# ============================================================
# Agent Configs
# ============================================================


class ClaudeAgentConfig(BaseModel):
    """Configuration for a Claude-backed agent."""

    type: Literal["claude"] = "claude"
    model: str = "claude-haiku-4-5-20251001"
    max_tokens: int = Field(default=4096, gt=0)

    model_config = {"frozen": True}


# Single variant today; becomes a discriminated union on "type" once a
# second agent backend exists.
AgentConfig = ClaudeAgentConfig


class AgentsConfig(BaseModel):
    """Agent used by each stage."""

    ingestion: AgentConfig = Field(default_factory=ClaudeAgentConfig)
    deduplication: AgentConfig = Field(default_factory=ClaudeAgentConfig)
    classification: AgentConfig = Field(default_factory=ClaudeAgentConfig)
    composition: AgentConfig = Field(default_factory=ClaudeAgentConfig)
    fabrication: AgentConfig = Field(default_factory=ClaudeAgentConfig)

    model_config = {"frozen": True}


# ============================================================
# News Provider Configs
# ============================================================


class WorldNewsProviderConfig(BaseModel):
    """Configuration for WorldNewsProvider."""

    type: Literal["worldnews"] = "worldnews"
    api_key: str | None = None
    min_request_interval: float = Field(default=1.2, ge=0.0)
    timeout: float = Field(default=30.0, gt=0.0)

    model_config = {"frozen": True}


NewsProviderConfig = WorldNewsProviderConfig


# ============================================================
# Stage Configs
# ============================================================


class IngestionConfig(BaseModel):
    """Configuration for the ingestion stage."""

    max_clusters: int = Field(default=3, gt=0)
    min_articles: int = Field(default=2, gt=0)
    source_reference_window: int = Field(default=5000, gt=0)
    recent_facts_days: int = Field(default=3, gt=0)
    inline_deduplication: bool = True

    model_config = {"frozen": True}


class DeduplicationConfig(BaseModel):
    """Configuration for the standalone deduplication stage."""

    batch_size: int = Field(default=50, gt=0)
    comparison_days: int = Field(default=7, gt=0)
    comparison_limit: int = Field(default=1000, gt=0)

    model_config = {"frozen": True}


class ClassificationConfig(BaseModel):
    """Configuration for the classification stage."""

    batch_size: int = Field(default=50, gt=0)

    model_config = {"frozen": True}


class CompositionConfig(BaseModel):
    """Configuration for the composition stage."""

    batch_size: int = Field(default=20, gt=0)

    model_config = {"frozen": True}


class FabricationConfig(BaseModel):
    """Configuration for the fabrication ratio controller."""

    enabled: bool = True
    baseline_threshold: int = Field(default=10, ge=0)
    window_size: int = Field(default=10, gt=0)
    ratio_divisor: int = Field(default=3, gt=0)
    max_per_run: int = Field(default=3, ge=0)
    tone: Literal["serious", "satirical"] | None = None

    model_config = {"frozen": True}


# ============================================================
# Logging Config
# ============================================================


class LoggingConfig(BaseModel):
    """Configuration for per-run JSON logging."""

    enabled: bool = False
    log_dir: str = "logs"

    model_config = {"frozen": True}


# ============================================================
# Root Config
# ============================================================


class NewsdeskConfig(BaseModel):
    """Root configuration for newsdesk."""

    locales: list[LocaleConfig] = Field(
        default_factory=lambda: [
            LocaleConfig(language=Language.EN, country=Country.US),
            LocaleConfig(language=Language.FR, country=Country.FR),
        ]
    )
    news_provider: NewsProviderConfig = Field(default_factory=WorldNewsProviderConfig)
    agents: AgentsConfig = Field(default_factory=AgentsConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    deduplication: DeduplicationConfig = Field(default_factory=DeduplicationConfig)
    classification: ClassificationConfig = Field(default_factory=ClassificationConfig)
    composition: CompositionConfig = Field(default_factory=CompositionConfig)
    fabrication: FabricationConfig = Field(default_factory=FabricationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}
