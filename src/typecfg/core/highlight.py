"""
Syntax colouring for printed configuration values.

Pure text-to-text decoration: plain strings in, ANSI strings out. Config
calls it only when colours are requested.
"""

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console
from rich.highlighter import RegexHighlighter
from rich.text import Text
from rich.theme import Theme

HEX_COLOR = r"^#[0-9a-fA-F]{6}$"

_TYPE_NAME = re.compile(
    r"^\s*\??(any|switch|boolean|object|string|number|integer|struct|date)(\[\])*\s*$"
)


class HighlightOptions(BaseModel):
    """Custom colours for the syntax highlighting."""

    model_config = ConfigDict(frozen=True)

    keys: str = Field(default="#FFBC42", pattern=HEX_COLOR, description="Configuration keys")
    types: str = Field(default="#9999ff", pattern=HEX_COLOR, description="Type names")
    specials: str = Field(default="#73A7DE", pattern=HEX_COLOR, description="true, false, null, Infinity")
    strings: str = Field(default="#A2D2FF", pattern=HEX_COLOR, description="Quoted strings")
    numbers: str = Field(default="#73DEA7", pattern=HEX_COLOR, description="Digits")
    separators: str = Field(default="#D81159", pattern=HEX_COLOR, description="Punctuation")
    square_brackets: str = Field(default="#B171D9", pattern=HEX_COLOR, description="[ and ]")
    color_system: Literal["standard", "256", "truecolor"] = Field(
        default="truecolor", description="Terminal colour capability"
    )


class ValueHighlighter(RegexHighlighter):
    """Token colouring of formatted values. Later patterns win over earlier ones."""

    base_style = "typecfg."
    highlights = [
        r"(?P<special>\b(True|False|None|true|false|null|Infinity|NaN|inf)\b)",
        r"(?P<number>\d+)",
        r"(?P<bracket>[\[\]])",
        r"(?P<separator>[,.\-:=\"|])",
        r"(?P<string>'[^']*')",
    ]


class Highlighter:
    """
    Colours keys, values and type names.

    Usage:
    ```
    highlighter = Highlighter(HighlightOptions(keys="#FF0000"))
    line = f"{highlighter.key('port')} {highlighter.highlight('=')} {highlighter.highlight('8080')}"
    ```
    """

    def __init__(self, options: HighlightOptions = HighlightOptions()):
        self.options = options
        self.value_highlighter = ValueHighlighter()
        self.theme = Theme(
            {
                "typecfg.key": options.keys,
                "typecfg.type": f"dim {options.types}",
                "typecfg.special": options.specials,
                "typecfg.string": options.strings,
                "typecfg.number": options.numbers,
                "typecfg.separator": options.separators,
                "typecfg.bracket": options.square_brackets,
            }
        )

    def render(self, text: Text) -> str:
        """Render styled text to an ANSI string, never wrapping."""
        console = Console(
            theme=self.theme,
            force_terminal=True,
            color_system=self.options.color_system,
            legacy_windows=False,
        )
        with console.capture() as capture:
            console.print(text, end="", soft_wrap=True, highlight=False)
        return capture.get()

    def highlight(self, text: str) -> str:
        """Colour the tokens of `text`. Existing ANSI sequences are kept."""
        styled = Text.from_ansi(text)
        self.value_highlighter.highlight(styled)
        return self.render(styled)

    def key(self, text: str) -> str:
        """Colour a configuration key."""
        return self.render(Text(text, style="typecfg.key"))

    def type_name(self, text: str) -> str:
        """Colour a type name: simple names in one colour, composite ones by token."""
        if _TYPE_NAME.match(text):
            return self.render(Text(text, style="typecfg.type"))

        styled = Text(text, style="dim")
        self.value_highlighter.highlight(styled)
        return self.render(styled)
