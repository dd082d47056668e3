"""
Logging infrastructure for envboot.

Features:
- Named log streams (system, startup, persistence)
- JSON structured file logs
- Human-readable console output
- Log rotation
"""

from .logger import (
    get_logger,
    setup_logging,
    reset_logging,
    LogStream,
)

from .formatters import (
    JSONFormatter,
    ConsoleFormatter,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "reset_logging",
    "LogStream",
    "JSONFormatter",
    "ConsoleFormatter",
]
