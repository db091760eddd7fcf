"""Structured logging for the newshub scoring engine.

Every module logs through ``get_logger(__name__)`` with key/value events.
Batch jobs wrap their run in ``JobTimer`` so each run ends with one event
carrying its duration and item counts.
"""

import json
import logging
import sys
import time
from typing import Any, Protocol

import structlog
from structlog import processors, stdlib

from .config import get_settings


def _renderer(json_logging: bool) -> list:
    if json_logging:
        return [processors.JSONRenderer(serializer=json.dumps)]
    return [
        processors.CallsiteParameterAdder(
            parameters=[processors.CallsiteParameter.FILENAME, processors.CallsiteParameter.LINENO]
        ),
        structlog.dev.ConsoleRenderer(colors=False),
    ]


def setup_logging(log_level: str | None = None, json_logging: bool | None = None) -> None:
    """Route structlog events through stdlib logging on stderr.

    Args:
        log_level: Log level name, defaults to the ``LOG_LEVEL`` setting
        json_logging: JSON lines instead of console output, defaults to the
            ``JSON_LOGGING`` setting
    """
    settings = get_settings()
    level = getattr(logging, (log_level or settings.log_level).upper())
    as_json = settings.json_logging if json_logging is None else json_logging

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    structlog.configure(
        processors=[
            stdlib.filter_by_level,
            stdlib.add_logger_name,
            stdlib.add_log_level,
            processors.TimeStamper(fmt="iso"),
            processors.format_exc_info,
            *_renderer(as_json),
        ],
        wrapper_class=stdlib.BoundLogger,
        logger_factory=stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def error_fields(error: BaseException, stage: str, item_id: str | None = None) -> dict[str, Any]:
    """Event fields for a per-item failure inside a batch job."""
    fields = {
        "stage": stage,
        "error_type": type(error).__name__,
        "error_message": str(error),
    }
    if item_id is not None:
        fields["item_id"] = item_id
    return fields


class JobCounts(Protocol):
    total: int
    updated: int
    failed: int


class JobTimer:
    """Times a batch job and logs its outcome counts when it ends.

    ``counts`` is read on exit, so the job can keep filling it in while
    the timer runs.
    """

    def __init__(self, job: str, logger: structlog.stdlib.BoundLogger,
                 counts: JobCounts | None = None, **context: Any):
        self.job = job
        self.logger = logger
        self.counts = counts
        self.context = context
        self.duration: float | None = None
        self._started = 0.0

    def _count_fields(self) -> dict[str, int]:
        if self.counts is None:
            return {}
        return {
            "total": self.counts.total,
            "updated": self.counts.updated,
            "failed": self.counts.failed,
        }

    def __enter__(self) -> "JobTimer":
        self._started = time.perf_counter()
        self.logger.info("job_started", job=self.job, **self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.duration = time.perf_counter() - self._started
        fields = {"job": self.job, "duration": round(self.duration, 3),
                  **self._count_fields(), **self.context}
        if exc_type is not None:
            self.logger.error("job_aborted", error_type=exc_type.__name__, error_message=str(exc_val), **fields)
        elif fields.get("failed"):
            self.logger.warning("job_finished_with_failures", **fields)
        else:
            self.logger.info("job_finished", **fields)


setup_logging()
