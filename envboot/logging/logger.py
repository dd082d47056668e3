"""
Core logging module with named log streams.

Architecture:
- Multiple log streams (system, startup, persistence)
- JSON formatting for machine consumption
- Human-readable console formatting for development
- Automatic rotation
"""

import logging
import logging.handlers
from pathlib import Path


# ============================================================================
# LOG STREAM DEFINITIONS
# ============================================================================

class LogStream:
    """Log stream identifiers."""
    SYSTEM = "system"             # Infrastructure, startup chain settlement
    STARTUP = "startup"           # Environment discovery and reconciliation
    PERSISTENCE = "persistence"   # Configuration store reads and writes


LOGGER_PREFIX = "envboot"

ALL_STREAMS = (LogStream.SYSTEM, LogStream.STARTUP, LogStream.PERSISTENCE)


# ============================================================================
# LOGGER SETUP
# ============================================================================

_loggers_initialized = False


def setup_logging(
    log_dir: Path = Path("logs"),
    log_level: str = "INFO",
    console_level: str = "INFO",
    json_logs: bool = True,
    max_bytes: int = 10_000_000,  # 10MB
    backup_count: int = 5
) -> None:
    """
    Initialize logging infrastructure.

    Creates log files:
    - logs/system/system.log
    - logs/startup/startup.log
    - logs/persistence/persistence.log

    Args:
        log_dir: Base directory for logs
        log_level: File logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        console_level: Console logging level
        json_logs: If True, use JSON formatting
        max_bytes: Max bytes per log file before rotation
        backup_count: Number of backup files to keep
    """
    global _loggers_initialized

    if _loggers_initialized:
        return

    log_dir = Path(log_dir)
    for stream in ALL_STREAMS:
        (log_dir / stream).mkdir(parents=True, exist_ok=True)

    from .formatters import JSONFormatter, ConsoleFormatter

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)  # Capture everything, filter at handler level
    root.handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, console_level.upper()))
    console_handler.setFormatter(ConsoleFormatter())
    root.addHandler(console_handler)

    file_level = getattr(logging, log_level.upper())

    for stream in ALL_STREAMS:
        log_file = log_dir / stream / f"{stream}.log"

        handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        handler.setLevel(file_level)

        if json_logs:
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            ))

        logger = logging.getLogger(f"{LOGGER_PREFIX}.{stream}")
        logger.addHandler(handler)
        logger.setLevel(file_level)
        logger.propagate = True  # Also send to root logger (console)

    _loggers_initialized = True

    get_logger(LogStream.SYSTEM).info(
        "Logging system initialized",
        extra={
            "log_dir": str(log_dir),
            "log_level": log_level,
            "json_logs": json_logs
        }
    )


def reset_logging() -> None:
    """Detach stream file handlers so setup_logging() can run again."""
    global _loggers_initialized

    for stream in ALL_STREAMS:
        logger = logging.getLogger(f"{LOGGER_PREFIX}.{stream}")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
    _loggers_initialized = False


def get_logger(stream: str) -> logging.Logger:
    """
    Get logger for specific stream.

    Example:
        logger = get_logger(LogStream.STARTUP)
        logger.info("Runtime resolved", extra={"environment": "production"})
    """
    return logging.getLogger(f"{LOGGER_PREFIX}.{stream}")
