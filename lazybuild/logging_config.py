"""
Structured logging setup for lazybuild.

- structlog on top of stdlib logging
- console renderer for development, JSON for analysis
- BatchLogger collapses per-file records into one summary line per pass
"""

import logging
import time

import structlog
from structlog.processors import JSONRenderer

# ============================================================
# Structured logging configuration
# ============================================================


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
):
    """
    Configure structured logging.

    Args:
        level: Log level (None → LAZYBUILD_LOG_LEVEL)
        json_format: Render JSON lines (None → LAZYBUILD_LOG_JSON)
    """
    from lazybuild.config import settings

    if level is None:
        level = settings.log_level
    if json_format is None:
        json_format = settings.log_json

    renderer = JSONRenderer() if json_format else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", level=level.upper())


def get_logger(name: str):
    """Structured logger for a module."""
    return structlog.get_logger(name)


# ============================================================
# Batch logging
# ============================================================


class BatchLogger:
    """
    Collects one record per item and logs a single summary on exit.

    Example:
        with BatchLogger(logger, "transform_batch", sample_size=3) as batch:
            for path in paths:
                batch.record(build_path=path, outputs=2)
        # → transform_batch_complete count=... duration_ms=... samples=[...]

    Nothing is logged if the block raises; the caller reports the failure.
    """

    def __init__(self, logger, operation: str, sample_size: int = 3, **fields):
        self.logger = logger
        self.operation = operation
        self.sample_size = sample_size
        self.fields = fields
        self.count = 0
        self.samples: list[dict] = []
        self.start_time: float | None = None
        self.duration_ms = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = round((time.perf_counter() - self.start_time) * 1000, 2)
        if exc_type is not None:
            return False

        log_data = dict(self.fields, count=self.count, duration_ms=self.duration_ms)
        if self.samples:
            log_data["samples"] = self.samples

        self.logger.info(f"{self.operation}_complete", **log_data)
        return False

    def record(self, **kwargs):
        """Count an item; keep it only while the sample window has room."""
        self.count += 1
        if len(self.samples) < self.sample_size:
            self.samples.append(kwargs)
