"""
Pipeline Context

Per-run state: the bound logger, timing, the date window and the
partial-failure flag.
"""

from __future__ import annotations

import time
import traceback
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Optional

import pytz

from core.logging import get_logger
from core.settings import settings


def local_now() -> datetime:
    return datetime.now(pytz.timezone(settings.timezone))


def as_local(value: datetime) -> datetime:
    """Attach the configured timezone to a naive datetime."""
    if value.tzinfo is None:
        return pytz.timezone(settings.timezone).localize(value)
    return value


@dataclass
class PipelineContext:
    """
    State for one pipeline run.

    Holds the reference time the date window is computed from, a logger bound
    to the pipeline name and run ID (the refresh cycle ID is added by the
    logging config) and a flag raised whenever an upstream fetch degraded.

    Usage:
        ctx = PipelineContext("big_games", now=now)
        ctx.start()
        for day in ctx.upcoming_dates(7):
            ...
        ctx.increment_records(len(games))
        ctx.mark_success()
    """

    pipeline_name: str
    now: datetime = field(default_factory=local_now)
    run_id: uuid.UUID = field(default_factory=uuid.uuid4)
    records_processed: int = 0
    had_errors: bool = False

    _started: float = field(default_factory=time.monotonic, repr=False)
    _log: Any = field(default=None, repr=False)

    def __post_init__(self):
        """Localize a naive reference time and bind the logger."""
        self.now = as_local(self.now)
        self._log = get_logger("pipeline").bind(
            pipeline=self.pipeline_name,
            run_id=str(self.run_id),
        )

    @property
    def log(self):
        return self._log

    @property
    def today(self) -> date:
        return self.now.date()

    def upcoming_dates(self, days: int) -> list[date]:
        """Today and the following days, `days` dates in total."""
        return [self.today + timedelta(days=i) for i in range(days)]

    def start(self) -> None:
        self._log.info("pipeline_started")

    def increment_records(self, count: int = 1) -> None:
        self.records_processed += count

    def flag_error(self, **context: Any) -> None:
        """Record that part of the data could not be fetched."""
        self.had_errors = True
        if context:
            self._log.warning("pipeline_partial_data", **context)

    def elapsed_seconds(self) -> float:
        return round(time.monotonic() - self._started, 3)

    def mark_success(self, message: Optional[str] = None) -> None:
        self._log.info(
            "pipeline_completed",
            message=message,
            records_processed=self.records_processed,
            partial=self.had_errors,
            duration_seconds=self.elapsed_seconds(),
        )

    def mark_failed(self, error: Exception) -> None:
        """Log an unexpected failure. The run degrades to an error-flagged result."""
        self.had_errors = True
        self._log.error(
            "pipeline_failed",
            error=f"{type(error).__name__}: {error}",
            traceback=traceback.format_exc(),
            duration_seconds=self.elapsed_seconds(),
        )
