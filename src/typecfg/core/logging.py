"""
Simple logging system for typecfg.
"""

import os
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

from loguru import logger as loguru_logger

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class LoggingSettings:
    """Logging settings read from the environment."""

    debug_mode: bool
    log_file: Optional[str]
    level: str


def get_logging_settings() -> LoggingSettings:
    """
    Read logging settings from environment variables.

    - TYPECFG_DEBUG: enable library records and stack traces
    - TYPECFG_LOG_FILE: path of a rotating file sink
    - TYPECFG_LOG_LEVEL: level of the file sink (default DEBUG)
    """
    return LoggingSettings(
        debug_mode=os.getenv("TYPECFG_DEBUG", "false").strip().lower() in _TRUE_VALUES,
        log_file=os.getenv("TYPECFG_LOG_FILE") or None,
        level=os.getenv("TYPECFG_LOG_LEVEL", "DEBUG").upper(),
    )


class AsyncLogger:
    """
    Component logger with plain format.

    Format: timestamp | level | component | message
    Context is passed as keyword arguments and lands in `extra`.
    """

    # Single file handler shared by every instance
    _handler_id = None

    def __init__(self, component: str, debug_mode: bool = False):
        self.component = component
        self.debug_mode = debug_mode

    @classmethod
    def add_file_sink(cls, path: str, level: str = "DEBUG") -> None:
        """
        Add the rotating file sink once.

        Features:
        - Non-blocking writes (enqueue)
        - Rotation at 10MB, zip compression
        - Singleton: only one handler to avoid duplicates
        """
        if cls._handler_id is None:
            cls._handler_id = loguru_logger.add(
                path,
                level=level,
                format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[component]} | {message}",
                filter=lambda record: "component" in record["extra"],
                rotation="10 MB",
                compression="zip",
                enqueue=True,
            )

    def log(self, level: str, message: str, **context):
        """Log a message with structured context."""
        loguru_logger.bind(component=self.component, **context).log(level, message)

    def debug(self, message: str, **context):
        """Log DEBUG level."""
        self.log("DEBUG", message, **context)

    def info(self, message: str, **context):
        """Log INFO level."""
        self.log("INFO", message, **context)

    def warning(self, message: str, **context):
        """Log WARNING level."""
        self.log("WARNING", message, **context)

    def error(self, message: str, include_trace: Optional[bool] = None, **context):
        """
        Log ERROR level with optional stack trace.

        Args:
            message: Error message
            include_trace: Include the stack trace (None = follow debug_mode)
            **context: Additional context
        """
        should_include_trace = include_trace if include_trace is not None else self.debug_mode

        if should_include_trace:
            import traceback

            context["stack_trace"] = traceback.format_exc()

        self.log("ERROR", message, **context)


class PerformanceLogger:
    """
    Logger for timing measurements.

    Records the duration of each measured operation.
    """

    def __init__(self):
        self.logger = AsyncLogger("performance", debug_mode=logger.debug_mode)

    @contextmanager
    def measure(self, operation: str, **context):
        """
        Context manager measuring an operation.

        Usage:
        ```
        with perf_logger.measure("config_load", path=cfg.path):
            cfg.fail_load()
        ```
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            duration = time.perf_counter() - start
            self.logger.debug(
                "Operation completed", operation=operation, duration_ms=duration * 1000, **context
            )


def _configure() -> LoggingSettings:
    """Apply environment settings to loguru."""
    settings = get_logging_settings()

    # A library stays silent unless asked otherwise
    if settings.debug_mode:
        loguru_logger.enable("typecfg")
    else:
        loguru_logger.disable("typecfg")

    if settings.log_file:
        loguru_logger.enable("typecfg")
        AsyncLogger.add_file_sink(settings.log_file, settings.level)

    return settings


_settings = _configure()

logger = AsyncLogger("typecfg", debug_mode=_settings.debug_mode)
perf_logger = PerformanceLogger()
