"""
Log formatters for structured and human-readable output.

Provides:
- JSONFormatter: Machine-readable JSON logs
- ConsoleFormatter: Human-readable colored console output
"""

import logging
import json
from datetime import datetime, timezone
import traceback


# Standard LogRecord attributes, excluded from the "extra" payload
_STANDARD_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName', 'relativeCreated',
    'thread', 'threadName', 'exc_info', 'exc_text', 'stack_info',
    'taskName',
}


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for machine-readable structured logs.

    Output format:
    {
        "timestamp": "2025-01-19T10:30:45.123456+00:00",
        "level": "INFO",
        "logger": "envboot.startup",
        "message": "Runtime environment resolved",
        "extra": {...}
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS and not key.startswith('_')
        }
        if extra:
            log_data["extra"] = extra

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info)
            }

        # Source location for warnings and above
        if record.levelno >= logging.WARNING:
            log_data["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName
            }

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable console formatter with color coding.

    Format:
    [2025-01-19 10:30:45] [INFO    ] [STARTUP     ] Runtime environment resolved
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')

        level = record.levelname
        if self.use_colors:
            color = self.COLORS.get(level, self.COLORS['RESET'])
            level_str = f"{color}{level:8}{self.COLORS['RESET']}"
        else:
            level_str = f"{level:8}"

        # Stream name is the last dotted component
        stream = record.name.split('.')[-1].upper()

        formatted = f"[{timestamp}] [{level_str}] [{stream:12}] {record.getMessage()}"

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted
