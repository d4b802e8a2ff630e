"""
typecfg - Typed configuration files.

Runtime validators describe the shape of a configuration, `Config` loads,
edits and saves a file that always satisfies it.
"""

from typecfg._version import __version__, __version_info__

# Validators
from typecfg import types
from typecfg.types import COMPUTE, TypeValidator

# Configuration manager
from typecfg.config import (
    Config,
    ConfigGetMode,
    ConfigState,
    PrintableOptions,
    fail_string,
)

# Core components
from typecfg.core import (
    TypecfgError,
    ConfigurationError,
    ValidationError,
    NotObjectLikeError,
    ParseError,
    PersistenceError,
    fail_throw,
    JsonParser,
    YamlParser,
    HighlightOptions,
    LocalFileStorage,
)

__all__ = [
    "__version__",
    "__version_info__",
    "types",
    "COMPUTE",
    "TypeValidator",
    "Config",
    "ConfigGetMode",
    "ConfigState",
    "PrintableOptions",
    "fail_string",
    "TypecfgError",
    "ConfigurationError",
    "ValidationError",
    "NotObjectLikeError",
    "ParseError",
    "PersistenceError",
    "fail_throw",
    "JsonParser",
    "YamlParser",
    "HighlightOptions",
    "LocalFileStorage",
]
