"""
Value formatting shared by validator messages and printing.
"""

import math
from typing import Any, Union

from rich.pretty import pretty_repr

MAX_SAFE_INTEGER = 2**53 - 1
MIN_SAFE_INTEGER = -(2**53 - 1)

Number = Union[int, float]


def format_value(value: Any) -> str:
    """Readable dump of any decoded value, used in error messages."""
    return pretty_repr(value, max_width=120)


def format_number(value: Number) -> str:
    """
    String form of a number as the config file would show it.

    Examples:
        >>> format_number(1.0)
        '1'
        >>> format_number(float("inf"))
        'Infinity'
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def clamp_safe(value: Number) -> Number:
    """Clamp a bound into the safe integer range."""
    if value > MAX_SAFE_INTEGER:
        return MAX_SAFE_INTEGER
    if value < MIN_SAFE_INTEGER:
        return MIN_SAFE_INTEGER
    return value


def labeled_number(value: Number) -> str:
    """
    Format a numeric bound for error text.

    The bound is clamped to the safe integer range first, the extremes get a
    label: `9007199254740991 (Max safe integer)`.
    """
    clamped = clamp_safe(value)
    label = ""
    if clamped == MAX_SAFE_INTEGER:
        label = "Max safe integer"
    elif clamped == MIN_SAFE_INTEGER:
        label = "Min safe integer"

    text = format_number(clamped)
    if not label:
        return text
    return f"{text} ({label})"
