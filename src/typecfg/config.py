"""
The configuration manager.

A `Config` owns one piece of persisted data guarded by a single validator.
Every operation comes in two flavours: `fail_*` returns an error message (or
None on success) and the plain form raises when that message is not None.
"""

import copy
from enum import Enum
from typing import Any, Callable, Generic, List, Literal, Optional, Tuple, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

from typecfg.core.exceptions import (
    ConfigurationError,
    NotObjectLikeError,
    ParseError,
    PersistenceError,
    TypecfgError,
    ValidationError,
    fail_throw,
)
from typecfg.core.highlight import Highlighter, HighlightOptions
from typecfg.core.logging import logger, perf_logger
from typecfg.core.parser import Parser
from typecfg.core.storage import LocalFileStorage, Storage
from typecfg.core.utils.formatting import format_value
from typecfg.types.validator import (
    COMPUTE,
    TypeValidator,
    TypeValidatorObject,
    TypeValidatorStruct,
)

T = TypeVar("T")

# "real" - stored values, with resolved default values.
# "current" - values provided in the config file.
# "default" - only default values, ignoring the configuration file.
ConfigGetMode = Literal["real", "current", "default"]
CONFIG_GET_MODES = ("real", "current", "default")


class ConfigState(Enum):
    """
    Lifecycle of the data slot.

    UNLOADED: data is the declared default
    LOADED: data matches what was last read from or written to the file
    MUTATED: data changed in memory since then
    """

    UNLOADED = "unloaded"
    LOADED = "loaded"
    MUTATED = "mutated"


class PrintableOptions(BaseModel):
    """Options of `Config.get_printable`."""

    model_config = ConfigDict(frozen=True)

    mode: ConfigGetMode = Field(default="current", description="Value resolution mode")
    types: bool = Field(default=True, description="Add the type postfix")
    parsable: bool = Field(default=False, description="Line-delimited output, no colours")
    syntax: Optional[HighlightOptions] = Field(
        default=None, description="Colours for the syntax highlighting, None disables them"
    )


def fail_string(func: Callable[[], T]) -> Tuple[Optional[T], Optional[str]]:
    """
    Run `func` and turn a raised typecfg error into a message.

    Returns:
        (value, None) on success, (None, message) on failure.
    """
    try:
        return func(), None
    except TypecfgError as e:
        return None, e.message


def _check_mode(mode: str) -> None:
    if mode not in CONFIG_GET_MODES:
        raise ConfigurationError(
            f"Unknown mode '{mode}'. Expected one of: {', '.join(CONFIG_GET_MODES)}."
        )


class Config(Generic[T]):
    """
    The configuration manager.

    Invariant: the live data always satisfies `type` (or is its declared
    default). Failed operations leave the data untouched.
    """

    def __init__(
        self,
        path: str,
        type: TypeValidator[T],
        parser: Optional[Parser] = None,
        storage: Optional[Storage] = None,
    ) -> None:
        """
        Args:
            path: Location of the configuration file.
            type: Validator of the whole configuration, see `typecfg.types`.
            parser: Text codec, defaults to the validator's parser (JSON).
            storage: File access, defaults to the local disk.
        """
        self.path: str = str(path)
        self.type: TypeValidator[T] = type
        self.parser: Parser = parser if parser is not None else type.parser
        self.storage: Storage = storage if storage is not None else LocalFileStorage()
        self.state: ConfigState = ConfigState.UNLOADED
        self._data: Optional[T] = copy.deepcopy(type.default_val)

    def __repr__(self) -> str:
        return f"<Config path={self.path!r} type={self.type.type_name} state={self.state.value}>"

    def get_data(self) -> Optional[T]:
        """
        Returns:
            A deep copy of the live data.
        """
        return copy.deepcopy(self._data)

    def fail_set_data(self, value: Any) -> Optional[str]:
        """Replace the whole data, if `value` satisfies the type."""
        error = self.type.fail(value)
        if error is not None:
            return f"Unable to set the data. {error}"

        self._data = copy.deepcopy(value)
        self.state = ConfigState.MUTATED
        return None

    def set_data(self, value: Any) -> None:
        """Replace the whole data. Raises ValidationError on a bad value."""
        fail_throw(ValidationError, self.fail_set_data(value), path=self.path)

    def _load(self) -> Tuple[Optional[str], type]:
        if not self.storage.exists(self.path):
            parsed = copy.deepcopy(self.type.default_val)
        else:
            try:
                text = self.storage.read_text(self.path)
            except OSError as e:
                logger.error("Unable to read config file", path=self.path, error=str(e))
                return f"Unable to read: {self.path}.", PersistenceError

            try:
                parsed = self.parser.parse(text)
            except Exception as e:
                logger.error("Unable to parse config file", path=self.path, error=str(e))
                return f"Unable to parse: {self.path}.", ParseError

        message = self.type.fail(parsed)
        if message is None and self.type.after_parse is not None:
            try:
                parsed = self.type.after_parse(parsed)
            except (TypeError, ValueError) as e:
                logger.warning("Config file rejected, conversion failed", path=self.path, error=str(e))
                return f"Unable to convert: {self.path}. {e}", ValidationError
            message = self.type.fail(parsed)

        if not self.type.check(parsed, message):
            logger.warning("Config file rejected, keeping current data", path=self.path)
            return message, ValidationError

        self._data = parsed
        self.state = ConfigState.LOADED
        logger.debug("Config loaded", path=self.path)
        return None, ValidationError

    def fail_load(self) -> Optional[str]:
        """
        Load the config from `path`, if it satisfies the type check.
        A missing file means the declared default.

        Returns:
            The error message for each invalid configuration key, or the
            parse/read failure. The current data is kept on failure.
        """
        with perf_logger.measure("config_load", path=self.path):
            message, _ = self._load()
        return message

    def load(self) -> None:
        """
        Load the config from `path`, if it satisfies the type check.

        Raises:
            ParseError: The file content could not be decoded.
            PersistenceError: The file could not be read.
            ValidationError: The decoded data does not satisfy the type.
        """
        with perf_logger.measure("config_load", path=self.path):
            message, error_class = self._load()
        fail_throw(error_class, message, path=self.path)

    def is_object_like(self, error: Union[str, None, int] = COMPUTE) -> bool:
        """
        Check the type is a struct/object and the data satisfies it.

        Args:
            error: A precomputed `type.fail(data)` result, or COMPUTE.
        """
        return self.type.is_object_like and self.type.check(self._data, error)

    def _fail_object_like(self, action: str) -> Optional[str]:
        error = self.type.fail(self._data)
        if self.is_object_like(error):
            return None

        reason = error if error is not None else f"Got type {self.type.type_name}."
        return f"{action} Not object-like. {reason}"

    def _records(self) -> dict:
        return self._data if isinstance(self._data, dict) else {}

    def _defaults(self) -> dict:
        default_val = self.type.default_val
        return default_val if isinstance(default_val, dict) else {}

    def get_key_type(self, key: str) -> Optional[TypeValidator[Any]]:
        """The validator governing `key`, or None if the key is not expected."""
        if isinstance(self.type, TypeValidatorStruct):
            key_type, _ = self.type.get_type(self._records(), key, require_present=False)
            return key_type
        if isinstance(self.type, TypeValidatorObject):
            return self.type.value_type
        return None

    def key_list(self, mode: ConfigGetMode = "current") -> List[str]:
        """
        Returns:
            "current": keys stored in the data.
            "real": struct properties whose stored-or-default value is defined.
            "default": struct properties with a defined default.
            Object (map) types have no fixed property list and always use "current".

        Raises:
            NotObjectLikeError: The data is not struct/object shaped.
        """
        _check_mode(mode)
        fail_throw(NotObjectLikeError, self._fail_object_like("Unable to list keys."), path=self.path)

        records = self._records()
        if mode == "current" or not isinstance(self.type, TypeValidatorStruct):
            return list(records)

        defaults = self._defaults()
        if mode == "real":
            return [
                key
                for key in self.type.properties
                if (records[key] if records.get(key) is not None else defaults.get(key)) is not None
            ]

        return [key for key in self.type.properties if defaults.get(key) is not None]

    def fail_get(self, key: str, mode: ConfigGetMode = "real") -> Tuple[Any, Optional[str]]:
        """
        Returns:
            (value, None), or (None, message) when the data is not object-like.
            The value is a copy, None when nothing resolves.
        """
        _check_mode(mode)
        message = self._fail_object_like(f"Unable to get the key: '{key}'.")
        if message is not None:
            return None, message

        value = self._records().get(key)
        if mode == "default" or (mode == "real" and value is None):
            value = self._defaults().get(key)

        return copy.deepcopy(value), None

    def get(self, key: str, mode: ConfigGetMode = "real") -> Any:
        """
        Returns:
            The value for the specified key.

        Raises:
            NotObjectLikeError: The data is not struct/object shaped.
        """
        value, message = self.fail_get(key, mode)
        fail_throw(NotObjectLikeError, message, path=self.path, key=key)
        return value

    def fail_set(self, key: str, value: Any) -> Optional[str]:
        """
        Set a new value for the configuration key.
        The key's own validator must accept the value.

        Returns:
            An error message, data unchanged, or None.
        """
        message = self._fail_object_like(f"Unable to set the key: '{key}'.")
        if message is not None:
            return message

        candidate = dict(self._records())
        candidate[key] = value

        if isinstance(self.type, TypeValidatorStruct):
            key_type, dynamic = self.type.get_type(candidate, key)
            if key_type is None:
                info = f" {dynamic.info}" if dynamic.info else ""
                return f"Unable to set the key: '{key}'. Unexpected key.{info}"
        else:
            key_type = self.type.value_type

        error = key_type.fail(value)
        if not key_type.check(value, error):
            return f"Unable to set the key: '{key}'. Got: {format_value(value)}. {error}"

        if self._data is None:
            self._data = {}
        self._data[key] = copy.deepcopy(value)
        self.state = ConfigState.MUTATED
        logger.debug("Config key set", path=self.path, key=key)
        return None

    def set(self, key: str, value: Any) -> None:
        """
        Set a new value for the configuration key.

        Raises:
            NotObjectLikeError: The data is not struct/object shaped.
            ValidationError: The value does not satisfy the key's type.
        """
        message = self._fail_object_like(f"Unable to set the key: '{key}'.")
        fail_throw(NotObjectLikeError, message, path=self.path, key=key)
        fail_throw(ValidationError, self.fail_set(key, value), path=self.path, key=key)

    def _without(self, key: str) -> dict:
        return {name: item for name, item in self._records().items() if name != key}

    def fail_unset(self, key: Optional[str] = None) -> Optional[str]:
        """
        Delete the configuration key.
        Without a key, every stored key is deleted.

        A key is kept when removing it would break the type (a required
        property without default). All such keys are reported together.
        """
        message = self._fail_object_like(f"Unable to unset the key: '{key}'.")
        if message is not None:
            return message

        if key is not None:
            if key not in self._records():
                return None

            error = self.type.fail(self._without(key))
            if error is not None:
                return f"Unable to unset the key: '{key}'. {error}"

            del self._data[key]
            self.state = ConfigState.MUTATED
            logger.debug("Config key unset", path=self.path, key=key)
            return None

        failed = []
        for name in list(self._records()):
            if self.type.check(self._without(name), COMPUTE):
                del self._data[name]
                self.state = ConfigState.MUTATED
            else:
                failed.append(name)

        if failed:
            return "Unable to unset keys: " + ", ".join(f"'{name}'" for name in failed) + "."

        logger.debug("Config keys unset", path=self.path)
        return None

    def unset(self, key: Optional[str] = None) -> None:
        """
        Delete the configuration key, or every key.

        Raises:
            NotObjectLikeError: The data is not struct/object shaped.
            ValidationError: A key could not be deleted.
        """
        message = self._fail_object_like(f"Unable to unset the key: '{key}'.")
        fail_throw(NotObjectLikeError, message, path=self.path, key=key)
        fail_throw(ValidationError, self.fail_unset(key), path=self.path, key=key)

    def get_data_string(self) -> str:
        """
        Stringify the config data with the type checking.

        Raises:
            ValidationError: The data does not satisfy the type.
        """
        self.type.fail_throw(self._data)
        return self.parser.stringify(self._data)

    def fail_save(self, keep_empty_file: bool = False) -> Optional[str]:
        """
        Save the config to `path`. Without any stored key the file is
        deleted (if it exists), unless `keep_empty_file` asks to write the
        empty record instead.

        Returns:
            Error message for an invalid write/remove operation.
        """
        with perf_logger.measure("config_save", path=self.path):
            if not keep_empty_file and self.is_object_like() and not self._records():
                if not self.storage.exists(self.path):
                    self.state = ConfigState.LOADED
                    return None

                try:
                    self.storage.delete_file(self.path)
                except OSError as e:
                    logger.error("Unable to remove config file", path=self.path, error=str(e))
                    return f"Unable to remove: {self.path}."

                self.state = ConfigState.LOADED
                logger.debug("Config file removed", path=self.path)
                return None

            text, error = fail_string(self.get_data_string)
            if error is not None:
                return f"Unable to write: {self.path}. {error}"

            try:
                self.storage.write_text(self.path, text)
            except OSError as e:
                logger.error("Unable to write config file", path=self.path, error=str(e))
                return f"Unable to write: {self.path}."

            self.state = ConfigState.LOADED
            logger.debug("Config saved", path=self.path)
            return None

    def save(self, keep_empty_file: bool = False) -> None:
        """
        Save the config to `path`.

        Raises:
            PersistenceError: The file could not be written or removed.
        """
        fail_throw(PersistenceError, self.fail_save(keep_empty_file), path=self.path)

    def _type_name_of(self, key: str) -> str:
        key_type = self.get_key_type(key)
        return key_type.type_name if key_type is not None else "unknown"

    def get_printable(
        self,
        keys: Union[str, List[str], None] = None,
        options: Optional[PrintableOptions] = None,
    ) -> str:
        """
        For command-line printing purposes. Values are shown with Python
        formatting, not with the parser.

        Returns:
            Aligned "key = value: type" lines, or in parsable mode each key,
            value and type on its own line.
        """
        options = options or PrintableOptions()
        highlighter = (
            Highlighter(options.syntax) if options.syntax is not None and not options.parsable else None
        )

        if not self.is_object_like():
            value = format_value(self._data)
            type_name = self.type.type_name
            if options.parsable:
                return f"{value}\n{type_name}" if options.types else value
            if highlighter is not None:
                value = highlighter.highlight(value)
                type_name = highlighter.type_name(type_name)
            return f"{value}: {type_name}" if options.types else value

        if keys is None:
            keys = self.key_list(options.mode)
        elif isinstance(keys, str):
            keys = [keys]

        rows = [
            (key, format_value(self.get(key, options.mode)), self._type_name_of(key)) for key in keys
        ]

        if options.parsable:
            return "\n".join(
                f"{key}\n{value}\n{type_name}" if options.types else f"{key}\n{value}"
                for key, value, type_name in rows
            )

        width = max((len(key) for key in keys), default=0)
        lines = []
        for key, value, type_name in rows:
            pad = " " * (width - len(key))
            equals, colon = "=", ":"
            if highlighter is not None:
                key, value, type_name = (
                    highlighter.key(key),
                    highlighter.highlight(value),
                    highlighter.type_name(type_name),
                )
                equals, colon = highlighter.highlight(equals), highlighter.highlight(colon)

            line = f"{pad}{key} {equals} {value}"
            if options.types:
                line += f"{colon} {type_name}"
            lines.append(line)

        return "\n".join(lines)
