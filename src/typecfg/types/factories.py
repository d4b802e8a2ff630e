"""
Validator builders.

Each builder configures a `TypeValidator` with its failure logic, naming and
defaults. Composite builders (`array`, `object_`, `struct`) recurse into the
validators they are given and aggregate every nested failure.
"""

import math
import re
from datetime import date as date_type, datetime
from functools import lru_cache
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Pattern,
    Tuple,
    Union,
)

from typecfg.core.exceptions import ConfigurationError
from typecfg.core.parser import Parser
from typecfg.core.utils.datetime_utils import ensure_utc, parse_iso_datetime
from typecfg.core.utils.formatting import format_number, format_value, labeled_number
from typecfg.types.validator import (
    DynamicProperties,
    TypeValidator,
    TypeValidatorArray,
    TypeValidatorObject,
    TypeValidatorStruct,
)

Number = Union[int, float]
LowType = Union[str, int, float, bool]
StringPattern = Union[str, Pattern[str], Callable[[str], Optional[str]]]
NumberPattern = Union[str, Pattern[str], Callable[[Number, str], Optional[str]]]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _compile(pattern: Any) -> Any:
    if isinstance(pattern, str):
        return re.compile(pattern)
    return pattern


@lru_cache(maxsize=1)
def _any_delegates() -> Tuple[TypeValidator[Any], ...]:
    # Order matters: {} must be claimed by object_ before anything else is tried
    return (array(), object_(), boolean(), string(), number())


def any_(
    *,
    optional: bool = False,
    parser: Optional[Parser] = None,
    default_val: Any = None,
) -> TypeValidator[Any]:
    """Any value representable in a config file: array, object, boolean, string or number."""

    def fail(validator: TypeValidator[Any], value: Any) -> Optional[str]:
        for delegate in _any_delegates():
            if delegate.check(value, delegate.fail(value)):
                return None

        return f"Can not be represented as any. Got: {format_value(value)}."

    return TypeValidator(
        "any", fail, optional=optional, parser=parser, default_val=default_val
    )


def array(
    element_type: Optional[TypeValidator[Any]] = None,
    *,
    optional: bool = False,
    parser: Optional[Parser] = None,
    default_val: Optional[List[Any]] = None,
) -> TypeValidatorArray[Any]:
    """A list (or tuple) whose every element satisfies `element_type` (default: any)."""
    element_type = element_type if element_type is not None else any_()

    def fail(validator: TypeValidator[Any], value: Any) -> Optional[str]:
        if not _is_sequence(value):
            return "The value should be an array."

        messages = []
        for index, element in enumerate(value):
            message = element_type.fail(element)
            if message is not None:
                messages.append(f"Element {index}: {message}")

        if messages:
            listing = "\n\n".join(messages)
            return f"The value should be a typed array. Found bad elements:\n{listing}"
        return None

    return TypeValidatorArray(
        f"array<{element_type.type_name}>",
        fail,
        element_type,
        optional=optional,
        parser=parser,
        default_val=default_val,
    )


def object_(
    value_type: Optional[TypeValidator[Any]] = None,
    *,
    optional: bool = False,
    parser: Optional[Parser] = None,
    default_val: Optional[Dict[str, Any]] = None,
) -> TypeValidatorObject[Any]:
    """A plain dict whose every value satisfies `value_type` (default: any)."""
    value_type = value_type if value_type is not None else any_()

    def fail(validator: TypeValidator[Any], value: Any) -> Optional[str]:
        if not isinstance(value, dict):
            return f"The value should be an {validator.type_name}."

        errors = []
        for key, item in value.items():
            message = value_type.fail(item)
            if not value_type.check(item, message):
                errors.append(
                    f"Invalid value type for the key '{key}'. Got {format_value(item)}. {message}"
                )

        if errors:
            listing = "\n\n".join(errors)
            return f"The value should be an {validator.type_name}:\n{listing}"
        return None

    return TypeValidatorObject(
        f"object<{value_type.type_name}>",
        fail,
        value_type,
        optional=optional,
        parser=parser,
        default_val=default_val,
    )


def struct(
    properties: Mapping[str, TypeValidator[Any]],
    dynamic_properties: Optional[DynamicProperties] = None,
    *,
    optional: bool = False,
    parser: Optional[Parser] = None,
) -> TypeValidatorStruct:
    """
    A fixed-shape record.

    Args:
        properties: Validator of each known key.
        dynamic_properties: Rule for other keys, a `DynamicPropertyCalculation`
            (or a dict of its fields) or a callback
            `(obj, (key, static_validator)) -> calculation | None`.
    """

    def fail(validator: TypeValidator[Any], value: Any) -> Optional[str]:
        if not isinstance(value, dict):
            return f"The value should be a {validator.type_name}."

        errors = validator.collect_errors(value)
        if errors:
            listing = "\n\n".join(errors)
            return f"The value should be a {validator.type_name}:\n{listing}"
        return None

    return TypeValidatorStruct(
        "struct",
        fail,
        properties,
        dynamic_properties,
        optional=optional,
        parser=parser,
    )


def _literal_equals(choice: Any, value: Any) -> bool:
    if isinstance(choice, bool) or isinstance(value, bool):
        return isinstance(choice, bool) and isinstance(value, bool) and choice == value
    return choice == value


def literal(
    choices: Iterable[Union[LowType, TypeValidator[Any]]],
    *,
    optional: bool = False,
    parser: Optional[Parser] = None,
    default_val: Any = None,
) -> TypeValidator[Any]:
    """
    One of the given choices.

    Scalar choices match by equality (booleans never equal numbers),
    validator choices match when they accept the value.
    """
    choices = tuple(choices)
    if not choices:
        raise ConfigurationError("A literal needs at least one choice.")

    scalars = [choice for choice in choices if not isinstance(choice, TypeValidator)]
    validators = [choice for choice in choices if isinstance(choice, TypeValidator)]
    labels = [choice.type_name if isinstance(choice, TypeValidator) else repr(choice) for choice in choices]

    def fail(validator: TypeValidator[Any], value: Any) -> Optional[str]:
        if any(_literal_equals(choice, value) for choice in scalars):
            return None

        for choice in validators:
            if choice.check(value, 0):
                return None

        if len(labels) == 1:
            return f"The value should be {labels[0]}. Got: {format_value(value)}."
        return f"The value should be {', '.join(labels[:-1])} or {labels[-1]}. Got: {format_value(value)}."

    return TypeValidator(
        "|".join(labels), fail, optional=optional, parser=parser, default_val=default_val
    )


def boolean(
    *,
    optional: bool = False,
    parser: Optional[Parser] = None,
    default_val: Optional[bool] = None,
) -> TypeValidator[bool]:
    """True or False."""

    def fail(validator: TypeValidator[Any], value: Any) -> Optional[str]:
        if isinstance(value, bool):
            return None
        return f"The value should be a {validator.type_name}."

    return TypeValidator(
        "boolean", fail, optional=optional, parser=parser, default_val=default_val
    )


def string(
    *,
    pattern: Optional[StringPattern] = None,
    optional: bool = False,
    parser: Optional[Parser] = None,
    default_val: Optional[str] = None,
) -> TypeValidator[str]:
    """
    A string, optionally constrained by `pattern`.

    `pattern` is a regex (searched in the value) or a callback returning an
    error fragment, or None when the value is acceptable.
    """
    pattern = _compile(pattern)

    def fail(validator: TypeValidator[Any], value: Any) -> Optional[str]:
        if not isinstance(value, str):
            return f"Should be a {validator.type_name}. Got {format_value(value)}."

        if isinstance(pattern, re.Pattern):
            if not pattern.search(value):
                return f"Should satisfy the regex pattern: {pattern.pattern}. Got {format_value(value)}."
        elif pattern is not None:
            message = pattern(value)
            if message is not None:
                return f"Should be a specific {validator.type_name}. Got {format_value(value)}. {message}"
        return None

    return TypeValidator(
        "string", fail, optional=optional, parser=parser, default_val=default_val
    )


def _numeric(
    type_name: str,
    article: str,
    whole: bool,
    min: Optional[Number],
    max: Optional[Number],
    pattern: Optional[NumberPattern],
    optional: bool,
    parser: Optional[Parser],
    default_val: Optional[Number],
) -> TypeValidator[Number]:
    lower = -math.inf if min is None else min
    upper = math.inf if max is None else max
    pattern = _compile(pattern)

    def in_range(value: Number) -> bool:
        if lower <= value <= upper:
            return True
        # Unset bounds always admit the matching infinity
        return (value == math.inf and max is None) or (value == -math.inf and min is None)

    def fail(validator: TypeValidator[Any], value: Any) -> Optional[str]:
        error = (
            f"Should be {article} {validator.type_name}: {labeled_number(lower)} - {labeled_number(upper)}."
            f" Got: {format_value(value)}."
        )

        if not _is_number(value) or not in_range(value):
            return error

        if whole and not (isinstance(value, int) or value.is_integer()):
            return error

        value_string = format_number(value)
        if isinstance(pattern, re.Pattern):
            if not pattern.search(value_string):
                return f"Should satisfy the regex pattern: {pattern.pattern}. Got: {value_string}."
        elif pattern is not None:
            message = pattern(value, value_string)
            if message is not None:
                return f"Should be a specific {validator.type_name}. Got: {value_string}. {message}"
        return None

    return TypeValidator(
        type_name, fail, optional=optional, parser=parser, default_val=default_val
    )


def number(
    *,
    min: Optional[Number] = None,
    max: Optional[Number] = None,
    pattern: Optional[NumberPattern] = None,
    optional: bool = False,
    parser: Optional[Parser] = None,
    default_val: Optional[Number] = None,
) -> TypeValidator[Number]:
    """
    An int or float within [min, max] (inclusive, unbounded by default).

    `pattern` is a regex tested against the string form of the value, or a
    callback `(value, value_string)` returning an error fragment or None.
    """
    return _numeric("number", "a", False, min, max, pattern, optional, parser, default_val)


def integer(
    *,
    min: Optional[Number] = None,
    max: Optional[Number] = None,
    pattern: Optional[NumberPattern] = None,
    optional: bool = False,
    parser: Optional[Parser] = None,
    default_val: Optional[int] = None,
) -> TypeValidator[Number]:
    """Same as `number` for whole values only (1.0 counts, 1.5 does not)."""
    return _numeric("integer", "an", True, min, max, pattern, optional, parser, default_val)


def _to_datetime(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    return parse_iso_datetime(str(value))


def date(
    *,
    optional: bool = False,
    parser: Optional[Parser] = None,
    default_val: Optional[datetime] = None,
) -> TypeValidator[datetime]:
    """
    A date stored as an ISO 8601 string.

    The stored shape is a string, `parse` turns it into an aware datetime.
    """
    value_type = string()

    def fail(validator: TypeValidator[Any], value: Any) -> Optional[str]:
        if isinstance(value, (datetime, date_type)):
            return None
        try:
            parse_iso_datetime(str(value))
        except ValueError:
            return f"Should be a {validator.type_name}. Got {format_value(value)}."
        return None

    return TypeValidator(
        f"date<{value_type.type_name}>",
        fail,
        optional=optional,
        parser=parser,
        default_val=default_val,
        after_parse=_to_datetime,
    )
