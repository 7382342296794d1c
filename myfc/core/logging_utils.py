from __future__ import annotations

import logging
import sys
import uuid

from loguru import logger as loguru_logger

# Standard LogRecord attributes that are not user-supplied ``extra`` fields
_STANDARD_FIELDS = {
    "args",
    "msg",
    "name",
    "levelno",
    "levelname",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "getMessage",
    "message",
}


class InterceptHandler(logging.Handler):
    """Bridge stdlib logging records into loguru, keeping ``extra`` fields."""

    def emit(self, record: logging.LogRecord) -> None:
        level_to_use: int | str
        try:
            level_to_use = loguru_logger.level(record.levelname).name
        except ValueError:
            level_to_use = record.levelno

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if not key.startswith("_") and key not in _STANDARD_FIELDS
        }

        loguru_logger.bind(logger_name=record.name, **extra).opt(
            depth=6, exception=record.exc_info
        ).log(level_to_use, record.getMessage())


def setup_json_logging(
    level: str = "INFO",
    log_file: str | None = None,
    max_file_size: str = "100 MB",
    retention: str = "30 days",
) -> None:
    """Configure JSON logging through loguru and route stdlib logging into it.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path for persistent logging
        max_file_size: Maximum size per log file (loguru format)
        retention: Log retention period (loguru format)
    """
    lvl = getattr(logging, level.upper(), logging.INFO)

    loguru_logger.remove()
    loguru_logger.add(
        sys.stdout,
        level=level.upper(),
        serialize=True,
        enqueue=True,
        backtrace=True,
        diagnose=False,
    )
    if log_file:
        loguru_logger.add(
            log_file,
            level=level.upper(),
            serialize=True,
            rotation=max_file_size,
            retention=retention,
            compression="gz",
            enqueue=True,
        )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(lvl)
    root.addHandler(InterceptHandler())

    # Reduce noise from verbose third-party loggers
    for noisy_logger in ("httpx", "httpcore", "peewee"):
        logging.getLogger(noisy_logger).setLevel(max(lvl, logging.WARNING))

    loguru_logger.info(
        "json_logging_initialized",
        setup_config={"level": level, "log_file": log_file, "retention": retention},
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance by name.

    Args:
        name: Logger name, typically __name__ of the calling module

    Returns:
        Logger instance for the given name
    """
    return logging.getLogger(name)


def generate_correlation_id() -> str:
    """Generate a short correlation ID for tracing errors across logs and responses."""
    return uuid.uuid4().hex[:12]


__all__ = [
    "InterceptHandler",
    "generate_correlation_id",
    "get_logger",
    "setup_json_logging",
]
