"""
Core utilities module for typecfg.
"""

# Datetime utilities
from .datetime_utils import ensure_utc, parse_iso_datetime, format_iso

# Value formatting
from .formatting import (
    format_value,
    format_number,
    labeled_number,
    MAX_SAFE_INTEGER,
    MIN_SAFE_INTEGER,
)

__all__ = [
    # Datetime utilities
    'ensure_utc',
    'parse_iso_datetime',
    'format_iso',
    # Formatting utilities
    'format_value',
    'format_number',
    'labeled_number',
    'MAX_SAFE_INTEGER',
    'MIN_SAFE_INTEGER',
]
