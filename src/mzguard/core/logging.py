"""Structured logging for mzguard."""

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional

from pythonjsonlogger.json import JsonFormatter

from mzguard.schemas.plugins import ScanError

ROOT_LOGGER_NAME = "mzguard"

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class LogLevel(str, Enum):
    """Log level names accepted on the command line."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def number(self) -> int:
        return logging.getLevelName(self.value)


def _formatter(json_output: bool) -> logging.Formatter:
    if json_output:
        return JsonFormatter(JSON_FORMAT)
    return logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


class StructuredLogger:
    """
    Owner of the ``mzguard`` logger's handlers, plus analysis events.

    Events carry an ``event_type`` and their fields as record attributes,
    so the JSON formatter emits them as top-level keys. Module loggers
    (``logging.getLogger(__name__)`` inside the package) are children of
    the ``mzguard`` logger and share its handlers.
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.WARNING,
        json_output: bool = False,
        log_file: Optional[Path] = None,
    ):
        """
        Replace the handlers of the ``mzguard`` logger.

        Args:
            level: Minimum level to emit
            json_output: Emit one JSON object per record instead of text
            log_file: Also append records to this file
        """
        self.level = level
        self.json_output = json_output
        self.log_file: Optional[Path] = None

        self.logger = logging.getLogger(ROOT_LOGGER_NAME)
        self.logger.propagate = False
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()
        self._attach(logging.StreamHandler(sys.stderr))
        self.set_level(level)

        if log_file:
            self.add_file_handler(log_file)

    def _attach(self, handler: logging.Handler) -> None:
        handler.setFormatter(_formatter(self.json_output))
        self.logger.addHandler(handler)

    def add_file_handler(self, log_file: Path) -> None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        self._attach(logging.FileHandler(log_file, encoding="utf-8"))
        self.log_file = log_file

    def set_level(self, level: LogLevel) -> None:
        self.level = level
        self.logger.setLevel(level.number)

    def event(self, level: int, event_type: str, message: str, **fields: Any) -> None:
        """Log ``message`` with ``event_type`` and ``fields`` attached to the record."""
        self.logger.log(level, message, extra={"event_type": event_type, **fields})

    def log_scan_stage(
        self,
        stage: str,
        status: str,
        duration_ms: Optional[float] = None,
        **fields: Any,
    ) -> None:
        """
        Log a pipeline stage transition.

        Args:
            stage: "scan", "dependencies" or "conflicts"
            status: "started", "completed" or "failed"
            duration_ms: Time spent in the stage
            **fields: Stage results such as plugin_count or issues
        """
        if duration_ms is not None:
            fields["duration_ms"] = round(duration_ms, 2)
        level = {"failed": logging.ERROR, "completed": logging.INFO}.get(status, logging.DEBUG)
        self.event(level, "analysis_stage", f"Stage {stage} {status}", stage=stage, status=status, **fields)

    def log_scan_errors(self, errors: Iterable[ScanError]) -> None:
        """One warning per plugin file that could not be read."""
        for error in errors:
            self.event(
                logging.WARNING,
                "scan_error",
                f"Could not read {error.file}: {error.error}",
                file=error.file,
                error_type=error.type,
            )

    def log_conflict_summary(self, plugin_count: int, total_overrides: int, conflicts: int, warnings: int) -> None:
        self.event(
            logging.INFO,
            "conflict_summary",
            f"{conflicts} conflicts ({warnings} warnings) across {plugin_count} plugins",
            plugin_count=plugin_count,
            total_overrides=total_overrides,
            conflicts=conflicts,
            warnings=warnings,
        )


_default_logger: Optional[StructuredLogger] = None


def get_logger(level: Optional[LogLevel] = None) -> StructuredLogger:
    """
    Return the package logger, creating a stderr-only one on first use.

    Args:
        level: New minimum level; the current one is kept if None
    """
    global _default_logger

    if _default_logger is None:
        _default_logger = StructuredLogger(level=level or LogLevel.WARNING)
    elif level is not None:
        _default_logger.set_level(level)
    return _default_logger


def configure_logging(
    level: str = "WARNING",
    json_output: bool = False,
    log_file: Optional[str] = None,
) -> StructuredLogger:
    """
    Configure package logging, replacing any handlers set up earlier.

    Called once per CLI command so the console handler writes to the
    current stderr.

    Args:
        level: Log level name (case-insensitive)
        json_output: If True, output JSON-formatted logs
        log_file: Optional file path to write logs to

    Returns:
        Configured StructuredLogger instance
    """
    global _default_logger

    _default_logger = StructuredLogger(
        level=LogLevel[level.upper()],
        json_output=json_output,
        log_file=Path(log_file) if log_file else None,
    )
    return _default_logger
