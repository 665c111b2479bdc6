"""Structured logging configuration.

This module configures Python logging with:
- JSON structured logging for production
- A human-readable format for development
- Optional log file with rotation
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger

from .config import LoggingConfig

# LogRecord attributes that are not user supplied context
_RESERVED_ATTRS = frozenset(
    [
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
    ]
)


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that adds logger, level, timestamp and context fields."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        """Add custom fields to the log record."""
        super().add_fields(log_record, record, message_dict)

        log_record["logger"] = record.name
        log_record["level"] = record.levelname
        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["thread"] = record.threadName

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_record[key] = value


def build_formatter(config: LoggingConfig) -> logging.Formatter:
    """Return the formatter matching the configured output style."""
    if config.json_logs:
        return CustomJsonFormatter(
            "%(timestamp)s %(level)s %(logger)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    return logging.Formatter(
        "%(asctime)s - %(name)s - [%(threadName)s] - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging(config: LoggingConfig) -> None:
    """Configure the root logger and the cadence logger.

    Args:
        config: Logging configuration settings
    """
    formatter = build_formatter(config)

    root_logger = logging.getLogger()
    root_logger.setLevel(config.log_level)
    root_logger.handlers.clear()

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        handler: logging.Handler = logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=config.log_rotation_size,
            backupCount=config.log_rotation_count,
            encoding="utf-8",
        )
    else:
        handler = logging.StreamHandler(sys.stderr)

    handler.setLevel(config.log_level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logging.getLogger("cadence").setLevel(config.log_level)

    root_logger.info("Logging configured successfully")
    root_logger.info(f"Log level: {config.log_level}")
    root_logger.info(f"JSON logs: {config.json_logs}")
    root_logger.info(f"Logs: {config.log_file or 'stderr'}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger, level: int, message: str, **context) -> None:
    """Log a message with additional context fields.

    With JSON logging the context fields become searchable attributes.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, logging.ERROR, etc.)
        message: Log message
        **context: Additional context fields to include in the log

    Example:
        log_with_context(
            logger, logging.DEBUG,
            "Job finished",
            job="backup",
            next_run="2024-01-01T00:00:00+00:00",
        )
    """
    logger.log(level, message, extra=context)
