#!/usr/bin/env python
"""CLI for the newsdesk report pipeline."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import BaseModel, field_validator, model_validator

from newsdesk.config import create_from_config, get_default_config_path, load_config
from newsdesk.data import Country, Language

logger = logging.getLogger(__name__)


class CLIArgs(BaseModel):
    """Validated CLI arguments."""

    config: Path
    language: Language | None = None
    country: Country | None = None
    log: bool = False
    log_dir: str = "logs"

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v

    @field_validator("language", mode="before")
    @classmethod
    def parse_language(cls, v: object) -> object:
        return Language.parse(v) if isinstance(v, str) else v

    @field_validator("country", mode="before")
    @classmethod
    def parse_country(cls, v: object) -> object:
        return Country.parse(v) if isinstance(v, str) else v

    @model_validator(mode="after")
    def locale_is_complete(self) -> "CLIArgs":
        if (self.language is None) != (self.country is None):
            raise ValueError("--language and --country must be given together")
        return self


async def run(args: CLIArgs) -> int:
    """Run the pipeline once for the selected locales.

    Args:
        args: Validated CLI arguments.

    Returns:
        Process exit code: 0 when every locale completed, 1 otherwise.
    """
    config = load_config(args.config)
    pipeline, run_logger = create_from_config(
        config,
        log_override=args.log if args.log else None,
        log_dir_override=args.log_dir if args.log_dir != "logs" else None,
    )

    if args.language is not None and args.country is not None:
        locales = [(args.language, args.country)]
    else:
        locales = [(locale.language, locale.country) for locale in config.locales]

    logger.info(f"Config: {args.config}")
    logger.info(f"Locales: {', '.join(f'{lang}/{country}' for lang, country in locales)}")

    runs = await pipeline.run_locales(locales)

    for pipeline_run in runs:
        logger.info(f"\n--- {pipeline_run.locale} ---")
        logger.info(f"Reports ingested: {len(pipeline_run.ingested)}")
        logger.info(f"Reports deduplicated: {len(pipeline_run.deduplicated)}")
        summary = pipeline_run.classification
        logger.info(
            f"Reports classified: {summary.successful}/{summary.total_reviewed}"
            f" ({summary.failed} failed)"
        )
        logger.info(f"Articles composed: {len(pipeline_run.composed)}")
        for article in pipeline_run.composed:
            logger.info(f"  - {article.headline.value}")
        logger.info(f"Articles fabricated: {len(pipeline_run.fabricated)}")

    if run_logger and run_logger.last_log_path:
        logger.info(f"\nLast run log written to: {run_logger.last_log_path}")

    return 0 if len(runs) == len(locales) else 1


def main() -> None:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Turn the day's news into reports, articles and fake-news challenges."
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: configs/default.yaml)",
    )
    parser.add_argument(
        "--language",
        "-l",
        help="Run a single locale: language code (en, fr). Requires --country.",
    )
    parser.add_argument(
        "--country",
        help="Run a single locale: country code (us, fr). Requires --language.",
    )
    parser.add_argument(
        "--log",
        action="store_true",
        default=False,
        help="Enable per-run logging to JSON files",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default="logs",
        help="Directory for log files (default: logs/)",
    )

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    ns = parser.parse_args()
    config_path: Path = ns.config if ns.config else get_default_config_path()

    try:
        args = CLIArgs(
            config=config_path,
            language=ns.language,
            country=ns.country,
            log=ns.log,
            log_dir=ns.log_dir,
        )
    except Exception as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
