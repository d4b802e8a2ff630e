"""
typecfg Core module.

Exports the infrastructure shared by validators and Config.
"""

# Exceptions and errors
from typecfg.core.exceptions import (
    TypecfgError,
    ConfigurationError,
    ValidationError,
    NotObjectLikeError,
    ParseError,
    PersistenceError,
    # Helper functions
    fail_throw,
)

# Logging
from typecfg.core.logging import (
    AsyncLogger,
    PerformanceLogger,
    LoggingSettings,
    get_logging_settings,
    logger,  # Pre-configured global logger
    perf_logger,
)

# Codecs
from typecfg.core.parser import Parser, JsonParser, YamlParser, default_parser

# File access
from typecfg.core.storage import Storage, LocalFileStorage

# Syntax highlighting
from typecfg.core.highlight import Highlighter, HighlightOptions

__all__ = [
    # Exceptions
    "TypecfgError",
    "ConfigurationError",
    "ValidationError",
    "NotObjectLikeError",
    "ParseError",
    "PersistenceError",
    "fail_throw",
    # Logging
    "AsyncLogger",
    "PerformanceLogger",
    "LoggingSettings",
    "get_logging_settings",
    "logger",
    "perf_logger",
    # Codecs
    "Parser",
    "JsonParser",
    "YamlParser",
    "default_parser",
    # Storage
    "Storage",
    "LocalFileStorage",
    # Highlighting
    "Highlighter",
    "HighlightOptions",
]
