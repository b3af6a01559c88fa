"""Run logger for recording per-stage pipeline results to JSON files."""

import dataclasses
import uuid
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel


class StageRecord(BaseModel):
    """Record of a single stage execution."""

    stage: str
    component: str
    output: Any = None
    item_count: int | None = None
    timestamp: str = ""
    duration_seconds: float = 0.0


class RunRecord(BaseModel):
    """Record of a complete locale run."""

    run_id: str
    language: str
    country: str
    started_at: str
    completed_at: str | None = None
    stages: list[StageRecord] = []
    report_count: int = 0
    article_count: int = 0
    fabricated_count: int = 0


def _serialize(obj: Any) -> Any:
    """Serialize an object to a JSON-compatible structure.

    Handles dataclasses, Pydantic models, enums, datetimes, containers and
    primitives.
    """
    if obj is None:
        return None
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime):
        return obj.isoformat()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: _serialize(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, list | tuple):
        return [_serialize(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): _serialize(v) for k, v in obj.items()}
    if isinstance(obj, Path):
        return str(obj)
    return obj


class RunLogger:
    """Accumulates stage records and writes one JSON log file per locale run.

    When ``enabled=False``, all methods are no-ops.

    Args:
        log_dir: Directory to write JSON log files.
        enabled: If False, all methods become no-ops.
    """

    def __init__(self, log_dir: Path, *, enabled: bool = True) -> None:
        self._log_dir = log_dir
        self._enabled = enabled
        self._records: dict[str, RunRecord] = {}
        self._last_log_path: Path | None = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def last_log_path(self) -> Path | None:
        """Path to the last written log file, or None."""
        return self._last_log_path

    def start_run(self, language: str, country: str) -> str | None:
        """Open a record for a locale run.

        Locale runs may overlap, so each run gets its own id which the
        other methods take.

        Returns:
            The run id, or None when logging is disabled.
        """
        if not self._enabled:
            return None

        run_id = str(uuid.uuid4())
        self._records[run_id] = RunRecord(
            run_id=run_id,
            language=language,
            country=country,
            started_at=datetime.now(tz=UTC).isoformat(),
        )
        return run_id

    def log_stage(
        self,
        run_id: str | None,
        *,
        stage: str,
        component: str,
        output_data: Any,
        duration_seconds: float,
    ) -> None:
        """Append a stage record to a run.

        Args:
            run_id: Id returned by ``start_run``.
            stage: Stage name (e.g. "ingestion", "fabrication").
            component: Stage class name.
            output_data: Stage output (will be serialized).
            duration_seconds: Wall-clock time for this stage.
        """
        if not self._enabled or run_id is None or run_id not in self._records:
            return

        item_count = len(output_data) if isinstance(output_data, list) else None
        self._records[run_id].stages.append(
            StageRecord(
                stage=stage,
                component=component,
                output=_serialize(output_data),
                item_count=item_count,
                timestamp=datetime.now(tz=UTC).isoformat(),
                duration_seconds=round(duration_seconds, 4),
            )
        )

    def finish_run(
        self,
        run_id: str | None,
        *,
        report_count: int,
        article_count: int,
        fabricated_count: int,
    ) -> Path | None:
        """Write a run record to a JSON file.

        Returns:
            Path to the written JSON file, or None if logging is disabled.
        """
        if not self._enabled or run_id is None:
            return None
        record = self._records.pop(run_id, None)
        if record is None:
            return None

        record.completed_at = datetime.now(tz=UTC).isoformat()
        record.report_count = report_count
        record.article_count = article_count
        record.fabricated_count = fabricated_count

        self._log_dir.mkdir(parents=True, exist_ok=True)

        # run_en-us_2026-02-12T14-30-00_<id8>.json (colons -> dashes)
        ts = record.started_at.replace(":", "-").split(".")[0].split("+")[0]
        filename = f"run_{record.language}-{record.country}_{ts}_{record.run_id[:8]}.json"
        filepath = self._log_dir / filename

        filepath.write_text(record.model_dump_json(indent=2))
        self._last_log_path = filepath
        return filepath
