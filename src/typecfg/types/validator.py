"""
Runtime type-checking descriptors.

A `TypeValidator` describes the expected shape of a decoded value and
explains, exhaustively, why a value does not have that shape. Validators are
immutable: build a new one to change the rules.
"""

import copy
from dataclasses import dataclass
from types import MappingProxyType
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from typecfg.core.exceptions import (
    ConfigurationError,
    ParseError,
    TypecfgError,
    ValidationError,
)
from typecfg.core.parser import Parser, default_parser

T = TypeVar("T")

# Passed as `error` to `check` to compute the message on the spot
COMPUTE = 0

FailFunction = Callable[["TypeValidator[Any]", Any], Optional[str]]


class TypeValidator(Generic[T]):
    """
    Runtime type-checker.

    Contract:
    1. `fail(value)` returns None for a valid value, else the full diagnostic
    2. `check(value, error)` never disagrees with `fail`
    3. `parse(text)` decodes, converts and validates
    4. `stringify(value)` validates and encodes
    """

    is_object_like: bool = False

    def __init__(
        self,
        type_name: str,
        fail: FailFunction,
        *,
        optional: bool = False,
        parser: Optional[Parser] = None,
        default_val: Optional[T] = None,
        after_parse: Optional[Callable[[Any], T]] = None,
    ) -> None:
        self._init_attrs(
            _fail=fail,
            optional=bool(optional),
            parser=parser if parser is not None else default_parser,
            _default_val=default_val,
            type_name=("?" if optional else "") + type_name,
            after_parse=after_parse,
        )

    @property
    def default_val(self) -> Optional[T]:
        """A fresh copy of the default value, None when there is none."""
        return copy.deepcopy(self._default_val)

    def _init_attrs(self, **attrs: Any) -> None:
        for name, value in attrs.items():
            object.__setattr__(self, name, value)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable, build a new validator instead")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable, build a new validator instead")

    def fail(self, value: Any) -> Optional[str]:
        """
        Create the error message for `value`.

        Returns:
            None when the value satisfies the type, otherwise a message
            describing every violation found.
        """
        if value is None and self.optional:
            return None

        return self._fail(self, value)

    def check(self, value: Any, error: Union[str, None, int] = COMPUTE) -> bool:
        """
        Args:
            value: The value to check.
            error: A precomputed `fail` result, or COMPUTE (0) to compute it now.
        """
        if error is not None and not isinstance(error, str):
            error = self.fail(value)

        return error is None

    def fail_throw(
        self, value: Any, error_class: Type[TypecfgError] = ValidationError
    ) -> None:
        """Raise `error_class` instead of returning a message string."""
        message = self.fail(value)
        if message is not None:
            raise error_class(message, context={"type": self.type_name})

    def parse(self, text: str) -> T:
        """
        Decode the text, apply `after_parse` and check the type.

        Raises:
            ParseError: The parser could not decode the text.
            ValidationError: The decoded value does not satisfy the type.
        """
        try:
            parsed = self.parser.parse(text)
        except Exception as e:
            raise ParseError(
                f"Unable to parse the value as {self.type_name}.",
                context={"type": self.type_name},
                cause=e,
            ) from e

        if self.after_parse is not None:
            try:
                parsed = self.after_parse(parsed)
            except (TypeError, ValueError) as e:
                raise ValidationError(
                    self.fail(parsed) or str(e), context={"type": self.type_name}, cause=e
                ) from e

        self.fail_throw(parsed)
        return parsed

    def stringify(self, value: T) -> str:
        """Check the type and encode the value."""
        self.fail_throw(value)
        return self.parser.stringify(value)

    def __str__(self) -> str:
        return self.type_name

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.type_name}>"


class TypeValidatorArray(TypeValidator[List[T]]):
    """Runtime type-checker for sequences of `element_type`."""

    def __init__(self, type_name: str, fail: FailFunction, element_type: TypeValidator[T], **options: Any):
        super().__init__(type_name, fail, **options)
        self._init_attrs(element_type=element_type)


class TypeValidatorObject(TypeValidator[Dict[str, T]]):
    """Runtime type-checker for plain dicts whose values are `value_type`."""

    is_object_like = True

    def __init__(self, type_name: str, fail: FailFunction, value_type: TypeValidator[T], **options: Any):
        super().__init__(type_name, fail, **options)
        self._init_attrs(value_type=value_type)


@dataclass(frozen=True)
class DynamicPropertyCalculation:
    """
    Rule for keys not covered by the fixed struct properties.

    Attributes:
        validator: Value validator. None means the key is unexpected.
        override: Prefer this validator over the fixed property validator.
        info: Extra text appended to the "Unexpected key" message.
    """

    validator: Optional[TypeValidator[Any]] = None
    override: bool = False
    info: Optional[str] = None


DynamicPropertyResult = Union[DynamicPropertyCalculation, Mapping[str, Any], None]
DynamicPropertyCallback = Callable[
    [Dict[str, Any], Tuple[str, Optional[TypeValidator[Any]]]], DynamicPropertyResult
]
DynamicProperties = Union[DynamicPropertyCalculation, Mapping[str, Any], DynamicPropertyCallback]


def _as_calculation(result: DynamicPropertyResult) -> DynamicPropertyCalculation:
    if result is None:
        return DynamicPropertyCalculation()
    if isinstance(result, DynamicPropertyCalculation):
        return result
    return DynamicPropertyCalculation(**dict(result))


def _has_default(prop: TypeValidator[Any]) -> bool:
    # A nested struct derives {} even when its own required keys make it invalid
    if isinstance(prop, TypeValidatorStruct):
        return prop.check(prop.default_val)
    return prop.default_val is not None


class TypeValidatorStruct(TypeValidator[Dict[str, Any]]):
    """
    Runtime type-checker for fixed-shape records.

    The default value is derived from the property validators and checked
    against the struct itself at construction.
    """

    is_object_like = True

    def __init__(
        self,
        type_name: str,
        fail: FailFunction,
        properties: Mapping[str, TypeValidator[Any]],
        dynamic_properties: Optional[DynamicProperties] = None,
        **options: Any,
    ):
        if "default_val" in options:
            raise ConfigurationError(
                "A struct default is derived from its properties and can not be given."
            )

        properties = MappingProxyType(dict(properties))
        default_val = {
            key: prop.default_val for key, prop in properties.items() if _has_default(prop)
        }

        if dynamic_properties is not None and not callable(dynamic_properties):
            dynamic_properties = _as_calculation(dynamic_properties)

        super().__init__(type_name, fail, default_val=default_val, **options)
        self._init_attrs(properties=properties, dynamic_properties=dynamic_properties)

        errors = self.collect_errors(default_val, report_missing=False)
        if errors:
            message = "\n\n".join(errors)
            raise ConfigurationError(
                f"The default value does not satisfy {self.type_name}:\n{message}",
                context={"type": self.type_name},
            )

    def get_type(
        self, obj: Dict[str, Any], key: str, require_present: bool = True
    ) -> Tuple[Optional[TypeValidator[Any]], DynamicPropertyCalculation]:
        """
        Resolve the validator of `key` using `properties` and `dynamic_properties`.

        Dynamic callbacks are evaluated on every call since they may depend on
        sibling keys of `obj`.
        """
        if require_present and key not in obj:
            return None, DynamicPropertyCalculation()

        static = self.properties.get(key)
        if callable(self.dynamic_properties):
            dynamic = _as_calculation(self.dynamic_properties(obj, (key, static)))
        else:
            dynamic = self.dynamic_properties or DynamicPropertyCalculation()

        if dynamic.override:
            property_type = dynamic.validator or static
        else:
            property_type = static or dynamic.validator

        return property_type, dynamic

    def is_required(self, key: str) -> bool:
        """A property must be present when it has no default and rejects None."""
        prop = self.properties.get(key)
        if prop is None or _has_default(prop):
            return False
        return prop.fail(None) is not None

    def collect_errors(self, obj: Dict[str, Any], report_missing: bool = True) -> List[str]:
        """
        Check every key of `obj`, never stopping at the first bad one.

        Returns:
            One entry per unexpected key, per bad value, plus one entry for
            all missing required keys.
        """
        errors: List[str] = []
        keys_to_process = list(self.properties)
        keys_to_process += [key for key in obj if key not in self.properties]

        for key in keys_to_process:
            if key not in obj:
                continue

            property_type, dynamic = self.get_type(obj, key)
            if property_type is None:
                errors.append(f"Unexpected key '{key}'." + (f" {dynamic.info}" if dynamic.info else ""))
                continue

            message = property_type.fail(obj[key])
            if not property_type.check(obj[key], message):
                errors.append(f"Bad value for the key '{key}': {message}")

        if report_missing:
            missing = [key for key in self.properties if key not in obj and self.is_required(key)]
            if missing:
                errors.append("Missing keys: " + ", ".join(f"'{key}'" for key in missing) + ".")

        return errors
