"""Configuration module for newsdesk."""

from newsdesk.config.factory import create_agent, create_from_config, create_news_provider
from newsdesk.config.loader import get_default_config_path, load_config
from newsdesk.config.models import (
    AgentConfig,
    AgentsConfig,
    ClassificationConfig,
    ClaudeAgentConfig,
    CompositionConfig,
    DeduplicationConfig,
    FabricationConfig,
    IngestionConfig,
    LocaleConfig,
    LoggingConfig,
    NewsdeskConfig,
    NewsProviderConfig,
    WorldNewsProviderConfig,
)

__all__ = [
    "AgentConfig",
    "AgentsConfig",
    "ClassificationConfig",
    "ClaudeAgentConfig",
    "CompositionConfig",
    "DeduplicationConfig",
    "FabricationConfig",
    "IngestionConfig",
    "LocaleConfig",
    "LoggingConfig",
    "NewsProviderConfig",
    "NewsdeskConfig",
    "WorldNewsProviderConfig",
    "create_agent",
    "create_from_config",
    "create_news_provider",
    "get_default_config_path",
    "load_config",
]
