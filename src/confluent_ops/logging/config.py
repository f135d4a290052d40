"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from datetime import datetime, timedelta
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog

LOG_DIR = Path.home() / ".local" / "state" / "confluent-ops"
LOG_FILE = LOG_DIR / "confluent-ops.log"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5
RETENTION_DAYS = 30

SENSITIVE_KEYS = frozenset(
    {"password", "token", "secret", "session_token", "access_token", "cookie", "authorization"}
)
MASK = "***"


def mask_secrets(
    _logger: Any,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Replace credential values in an event with a fixed mask."""
    for key in event_dict:
        if key.lower() in SENSITIVE_KEYS and event_dict[key]:
            event_dict[key] = MASK
    return event_dict


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        mask_secrets,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _cleanup_old_logs() -> None:
    """Delete log files older than RETENTION_DAYS."""
    if not LOG_DIR.exists():
        return
    cutoff = datetime.now() - timedelta(days=RETENTION_DAYS)
    for log_file in LOG_DIR.glob(f"{LOG_FILE.name}*"):
        try:
            if datetime.fromtimestamp(log_file.stat().st_mtime) < cutoff:
                log_file.unlink()
        except OSError:
            continue


def _setup_file_logging() -> None:
    """Set up rotating JSON file handler."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    _cleanup_old_logs()

    file_handler = RotatingFileHandler(
        LOG_FILE,
        maxBytes=MAX_LOG_SIZE,
        backupCount=BACKUP_COUNT,
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=_shared_processors(),
        )
    )
    logging.getLogger().addHandler(file_handler)


def configure_logging(
    verbose: bool = False,
    debug: bool = False,
    json_output: bool = False,
) -> None:
    """Configure structured logging for confluent-ops.

    Logs go to the console and to ``~/.local/state/confluent-ops/`` as JSON,
    rotated at 10MB with 5 backups and cleaned up after 30 days. Credential
    values (passwords, tokens, secrets, cookies) are masked in both.

    Args:
        verbose: Enable verbose (INFO level) output.
        debug: Enable debug mode (DEBUG level).
        json_output: Output console logs as JSON.
    """
    if debug:
        log_level = logging.DEBUG
    elif verbose:
        log_level = logging.INFO
    else:
        log_level = logging.WARNING

    shared_processors = _shared_processors()
    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=debug),
        )
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(console_handler)

    # httpx logs every request at INFO, including URLs with query strings
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _setup_file_logging()


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Get a logger with optional initial context.

    Args:
        name: Logger name.
        **initial_context: Context variables to bind.

    Returns:
        A bound structlog logger.
    """
    logger: structlog.BoundLogger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
