"""
Structured Logging for issuescope.

This module provides the logging infrastructure used by every layer: a logger
with context binding, a cached factory, and a request-scoped logger that
tracks the stages of one analysis.

Architecture Context
--------------------
All modules should import get_logger() from here rather than using Python's
logging directly:

    # Good - structured key/value fields
    from issuescope.core.logging import get_logger
    logger = get_logger(__name__)
    logger.info("Loaded candidates", count=12)

    # Avoid - bypasses our structure
    import logging
    logger = logging.getLogger(__name__)

Logger Types
------------
**StructuredLogger**
    Wraps a stdlib logger. Extra keyword arguments and bound context are
    rendered as ``message | key=value | ...``:

        logger = get_logger(__name__)
        logger.bind(strategy="rule_based")
        logger.info("Analysis started")  # includes strategy=rule_based

**AnalysisLogger**
    Tracks the stages of a single analysis request (keywords, files,
    symbols, apis) with timing:

        alog = AnalysisLogger("model_assisted")
        alog.start_stage("files")
        alog.finish(success=True, files=4)
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from rich.logging import RichHandler


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file_path: Optional[Path] = None
    console: bool = True


class StructuredLogger:
    """
    Structured logger with context support.

    Provides consistent logging across the engine with support for
    structured fields and bound context.
    """

    def __init__(self, name: str, config: Optional[LogConfig] = None) -> None:
        self.logger = logging.getLogger(name)
        self.config = config or _ConfigHolder.get_config()
        self._context: Dict[str, Any] = {}
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Configure handlers for this logger."""
        level = getattr(logging, self.config.level.upper(), logging.INFO)
        self.logger.setLevel(level)
        self.logger.handlers.clear()

        if self.config.console:
            console_handler = RichHandler(
                show_time=True,
                show_path=False,
                markup=False,
                rich_tracebacks=True,
            )
            console_handler.setLevel(level)
            self.logger.addHandler(console_handler)

        if self.config.file_path:
            self.config.file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.config.file_path)
            file_handler.setLevel(level)
            file_handler.setFormatter(
                logging.Formatter(self.config.format, datefmt=self.config.date_format)
            )
            self.logger.addHandler(file_handler)

    def bind(self, **kwargs: Any) -> "StructuredLogger":
        """Attach context fields to every subsequent message."""
        self._context.update(kwargs)
        return self

    def unbind(self, *keys: str) -> "StructuredLogger":
        """Remove previously bound context fields."""
        for key in keys:
            self._context.pop(key, None)
        return self

    def _format_message(self, message: str, **kwargs: Any) -> str:
        """Format message with context and extra fields."""
        fields = {**self._context, **kwargs}
        if fields:
            field_str = " | ".join(f"{k}={v}" for k, v in fields.items())
            return f"{message} | {field_str}"
        return message

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self.logger.error(self._format_message(message, **kwargs))

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self.logger.exception(self._format_message(message, **kwargs))


class _ConfigHolder:
    """Holds the default logging configuration.

    Rule #6: Encapsulates singleton state in smallest scope.
    """

    _config: LogConfig = LogConfig()

    @classmethod
    def get_config(cls) -> LogConfig:
        return cls._config

    @classmethod
    def set_config(cls, config: LogConfig) -> None:
        cls._config = config


_loggers: Dict[str, StructuredLogger] = {}


def get_logger(name: str, config: Optional[LogConfig] = None) -> StructuredLogger:
    """
    Get or create a structured logger.

    Args:
        name: Logger name (typically __name__).
        config: Optional logging configuration.

    Returns:
        Cached StructuredLogger instance.
    """
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name, config)
    return _loggers[name]


def configure_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    console: bool = True,
) -> None:
    """
    Configure global logging settings.

    Loggers created before this call are reconfigured in place.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional file path for log output.
        console: Whether to log to the console.
    """
    config = LogConfig(level=level, file_path=log_file, console=console)
    _ConfigHolder.set_config(config)

    for structured in _loggers.values():
        structured.config = config
        structured._setup_logger()


class AnalysisLogger:
    """
    Request-scoped logger for one analysis run.

    Tracks the active stage and logs its duration when the next stage
    starts or the run finishes.
    """

    def __init__(self, strategy_name: str) -> None:
        self.strategy_name = strategy_name
        self.logger = get_logger("issuescope.analysis")
        self._stage_start: Optional[datetime] = None
        self._current_stage: Optional[str] = None
        self.durations: Dict[str, float] = {}

    def start_stage(self, stage: str) -> None:
        """Mark the start of an analysis stage."""
        self._finish_current_stage()
        self._current_stage = stage
        self._stage_start = datetime.now()
        self.logger.debug("Starting stage", strategy=self.strategy_name, stage=stage)

    def _finish_current_stage(self) -> None:
        if not (self._current_stage and self._stage_start):
            return
        duration = (datetime.now() - self._stage_start).total_seconds()
        self.durations[self._current_stage] = duration
        self.logger.debug(
            "Completed stage",
            strategy=self.strategy_name,
            stage=self._current_stage,
            duration_sec=f"{duration:.2f}",
        )
        self._current_stage = None
        self._stage_start = None

    def finish(self, success: bool, error: Optional[str] = None, **counts: Any) -> None:
        """Mark completion of the analysis run."""
        self._finish_current_stage()
        if success:
            self.logger.info(
                "Analysis completed", strategy=self.strategy_name, **counts
            )
        else:
            self.logger.error(
                "Analysis failed", strategy=self.strategy_name, error=error
            )
