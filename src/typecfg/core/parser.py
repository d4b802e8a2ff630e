"""
Text codecs used to persist configuration data.

Any object with `parse(text)` and `stringify(value)` satisfies the `Parser`
protocol: JSON is the default, YAML ships alongside it.
"""

import json
from datetime import date, datetime
from typing import Any, Optional, Protocol, runtime_checkable

import yaml

from typecfg.core.utils.datetime_utils import format_iso


@runtime_checkable
class Parser(Protocol):
    """Text <-> value codec."""

    def parse(self, text: str) -> Any: ...

    def stringify(self, value: Any) -> str: ...


def _json_default(value: Any) -> Any:
    """Encode values json does not know natively."""
    if isinstance(value, (datetime, date)):
        return format_iso(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonParser:
    """
    JSON codec.

    Datetimes are written as ISO 8601 strings so the `date` validator can read
    them back.
    """

    def __init__(self, indent: Optional[int] = None):
        self.indent = indent

    def parse(self, text: str) -> Any:
        return json.loads(text)

    def stringify(self, value: Any) -> str:
        return json.dumps(value, indent=self.indent, ensure_ascii=False, default=_json_default)


class YamlParser:
    """
    YAML codec (PyYAML safe loader/dumper).

    Empty documents decode to None.
    """

    def parse(self, text: str) -> Any:
        return yaml.safe_load(text)

    def stringify(self, value: Any) -> str:
        return yaml.safe_dump(value, sort_keys=False, allow_unicode=True)


default_parser: Parser = JsonParser()
