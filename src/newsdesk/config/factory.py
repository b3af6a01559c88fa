"""Factory functions to create components from configuration."""

from pathlib import Path

from newsdesk.agents.claude import (
    ClaudeArticleCompositionAgent,
    ClaudeArticleFabricationAgent,
    ClaudeReportClassificationAgent,
    ClaudeReportDeduplicationAgent,
    ClaudeReportIngestionAgent,
)
from newsdesk.config.models import (
    AgentConfig,
    ClaudeAgentConfig,
    NewsdeskConfig,
    NewsProviderConfig,
    WorldNewsProviderConfig,
)
from newsdesk.news.base import NewsProvider
from newsdesk.news.worldnews import WorldNewsProvider
from newsdesk.pipeline.report import ReportPipeline
from newsdesk.repository.memory import (
    InMemoryArticleRepository,
    InMemoryReportRepository,
    InMemoryStore,
)
from newsdesk.run_logger import RunLogger
from newsdesk.stages import (
    ClassificationStage,
    CompositionStage,
    DeduplicationStage,
    FabricationStage,
    IngestionStage,
)

_CLAUDE_AGENTS = {
    "ingestion": ClaudeReportIngestionAgent,
    "deduplication": ClaudeReportDeduplicationAgent,
    "classification": ClaudeReportClassificationAgent,
    "composition": ClaudeArticleCompositionAgent,
    "fabrication": ClaudeArticleFabricationAgent,
}


def create_news_provider(config: NewsProviderConfig) -> NewsProvider:
    """Create a news provider from config."""
    if isinstance(config, WorldNewsProviderConfig):
        return WorldNewsProvider(
            api_key=config.api_key,
            min_request_interval=config.min_request_interval,
            timeout=config.timeout,
        )
    msg = f"Unknown news provider config type: {type(config)}"
    raise ValueError(msg)


def create_agent(
    role: str, config: AgentConfig
) -> (
    ClaudeReportIngestionAgent
    | ClaudeReportDeduplicationAgent
    | ClaudeReportClassificationAgent
    | ClaudeArticleCompositionAgent
    | ClaudeArticleFabricationAgent
):
    """Create the agent for a stage role from config.

    Args:
        role: One of ingestion, deduplication, classification, composition,
            fabrication.
        config: Agent configuration.
    """
    if role not in _CLAUDE_AGENTS:
        msg = f"Unknown agent role: {role}"
        raise ValueError(msg)
    if isinstance(config, ClaudeAgentConfig):
        return _CLAUDE_AGENTS[role](model=config.model, max_tokens=config.max_tokens)
    msg = f"Unknown agent config type: {type(config)}"
    raise ValueError(msg)


def create_pipeline(
    config: NewsdeskConfig,
    store: InMemoryStore,
    run_logger: RunLogger | None = None,
) -> ReportPipeline:
    """Wire every stage of the pipeline over a shared store."""
    reports = InMemoryReportRepository(store)
    articles = InMemoryArticleRepository(store)
    agents = config.agents
    deduplication_agent = create_agent("deduplication", agents.deduplication)

    ingestion = IngestionStage(
        news_provider=create_news_provider(config.news_provider),
        ingestion_agent=create_agent("ingestion", agents.ingestion),
        report_repository=reports,
        deduplication_agent=(
            deduplication_agent if config.ingestion.inline_deduplication else None
        ),
        max_clusters=config.ingestion.max_clusters,
        min_articles=config.ingestion.min_articles,
        recent_facts_days=config.ingestion.recent_facts_days,
        source_reference_window=config.ingestion.source_reference_window,
    )
    deduplication = DeduplicationStage(
        deduplication_agent,
        reports,
        batch_size=config.deduplication.batch_size,
        comparison_days=config.deduplication.comparison_days,
        comparison_limit=config.deduplication.comparison_limit,
    )
    classification = ClassificationStage(
        create_agent("classification", agents.classification),
        reports,
        batch_size=config.classification.batch_size,
    )
    composition = CompositionStage(
        create_agent("composition", agents.composition),
        reports,
        articles,
        batch_size=config.composition.batch_size,
    )

    fabrication: FabricationStage | None = None
    if config.fabrication.enabled:
        fabrication = FabricationStage(
            create_agent("fabrication", agents.fabrication),
            articles,
            baseline_threshold=config.fabrication.baseline_threshold,
            window_size=config.fabrication.window_size,
            ratio_divisor=config.fabrication.ratio_divisor,
            max_per_run=config.fabrication.max_per_run,
            tone=config.fabrication.tone,
        )

    return ReportPipeline(
        ingestion=ingestion,
        deduplication=deduplication,
        classification=classification,
        composition=composition,
        fabrication=fabrication,
        run_logger=run_logger,
    )


def create_from_config(
    config: NewsdeskConfig,
    *,
    log_override: bool | None = None,
    log_dir_override: str | None = None,
    store: InMemoryStore | None = None,
) -> tuple[ReportPipeline, RunLogger | None]:
    """Create a complete pipeline from root config.

    Args:
        config: Root configuration.
        log_override: Override the config's logging.enabled setting.
        log_dir_override: Override the config's logging.log_dir setting.
        store: Store backing the repositories; a fresh one when None.

    Returns:
        Tuple of (pipeline, run_logger).
        run_logger is None if logging is disabled.
    """
    log_enabled = log_override if log_override is not None else config.logging.enabled
    log_dir = Path(log_dir_override if log_dir_override is not None else config.logging.log_dir)

    run_logger: RunLogger | None = None
    if log_enabled:
        run_logger = RunLogger(log_dir=log_dir, enabled=True)

    pipeline = create_pipeline(config, store or InMemoryStore(), run_logger=run_logger)
    return (pipeline, run_logger)
