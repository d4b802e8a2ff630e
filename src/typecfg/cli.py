"""
typecfg CLI - click commands bound to a Config.

Usage:
```
settings = Config("settings.json", types.struct({...}))

@click.group()
def cli():
    pass

cli.add_command(init_command(settings))
```

Then `mytool config get`, `mytool config set port=8080`, `mytool config unset port`.
"""

from typing import Any, Iterable, Optional, Tuple

import click

from typecfg.config import CONFIG_GET_MODES, Config, PrintableOptions, fail_string
from typecfg.core.exceptions import ConfigurationError, ParseError, TypecfgError
from typecfg.core.highlight import HighlightOptions
from typecfg.core.parser import YamlParser
from typecfg.types.validator import TypeValidatorStruct

# Command line values are YAML so that 5, true, [1, 2] and bare words all work
value_parser = YamlParser()


def _decode_value(text: str) -> Any:
    try:
        return value_parser.parse(text)
    except Exception as e:
        raise ParseError(f"Unable to parse the value: {text}", cause=e) from e


def _check(message: Optional[str]) -> None:
    if message is not None:
        raise click.ClickException(message)


def _split_pair(pair: str) -> Tuple[str, str]:
    key, separator, text = pair.partition("=")
    if not separator or not key:
        raise click.BadParameter(f"Expected KEY=VALUE, got '{pair}'.", param_hint="KEY=VALUE")
    return key, text


def _key_type(cfg: Config) -> click.ParamType:
    """Fixed structs get completion and checking of their keys."""
    if isinstance(cfg.type, TypeValidatorStruct) and cfg.type.dynamic_properties is None:
        return click.Choice(list(cfg.type.properties))
    return click.STRING


def init_command(
    cfg: Config,
    name: str = "config",
    syntax: Optional[HighlightOptions] = HighlightOptions(),
) -> click.Group:
    """
    Build the `config` command group for `cfg`.

    Args:
        cfg: Configuration to manage, its type must be a struct or an object.
        name: Name of the group.
        syntax: Colours of the printed values, None for plain output.

    Raises:
        ConfigurationError: The configuration type is not object-like.
    """
    if not cfg.type.is_object_like:
        raise ConfigurationError(
            f"Only struct and object configurations have keys to manage. Got {cfg.type.type_name}.",
            context={"path": cfg.path},
        )

    key_type = _key_type(cfg)

    def load() -> None:
        try:
            cfg.load()
        except TypecfgError as e:
            raise click.ClickException(e.message) from e

    def save() -> None:
        _check(cfg.fail_save())

    def printable(keys: Optional[Iterable[str]] = None, **options: Any) -> str:
        options.setdefault("syntax", syntax)
        return cfg.get_printable(list(keys) if keys is not None else None, PrintableOptions(**options))

    @click.group(name=name)
    def group():
        """Manage the configuration file."""
        pass

    @group.command("path")
    def path_command():
        """Print the configuration file path."""
        click.echo(cfg.path)

    @group.command("get")
    @click.argument("key", required=False, type=key_type)
    @click.option(
        "--mode",
        type=click.Choice(CONFIG_GET_MODES),
        default="current",
        show_default=True,
        help="real: stored values with defaults, current: stored values, default: defaults only",
    )
    @click.option("--types/--no-types", default=True, help="Show the type of each value")
    @click.option("--parsable", is_flag=True, help="One line per key, value and type")
    @click.option("--no-color", is_flag=True, help="Disable the syntax highlighting")
    def get_command(key: Optional[str], mode: str, types: bool, parsable: bool, no_color: bool):
        """Print the value of KEY, or the whole configuration."""
        load()
        keys = [key] if key is not None else None
        click.echo(
            printable(
                keys,
                mode=mode,
                types=types,
                parsable=parsable,
                syntax=None if no_color else syntax,
            )
        )

    @group.command("set")
    @click.argument("pairs", nargs=-1, metavar="[KEY=VALUE]...")
    def set_command(pairs: Tuple[str, ...]):
        """Set each KEY to VALUE (parsed as YAML) and save."""
        load()
        if not pairs:
            click.echo(printable())
            return

        keys = []
        for pair in pairs:
            key, text = _split_pair(pair)
            value, error = fail_string(lambda: _decode_value(text))
            _check(error)
            _check(cfg.fail_set(key, value))
            keys.append(key)

        save()
        click.echo(printable(keys))

    @group.command("unset")
    @click.argument("keys", nargs=-1, type=key_type)
    def unset_command(keys: Tuple[str, ...]):
        """Delete each KEY, or the whole configuration, and save."""
        load()
        if not keys:
            _check(cfg.fail_unset())
            save()
            click.echo(click.style("Configuration file has been completely deleted.", fg="green"))
            return

        for key in keys:
            _check(cfg.fail_unset(key))

        save()
        click.echo(printable())

    return group
