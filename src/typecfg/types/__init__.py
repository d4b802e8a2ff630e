"""
Run-time type checking.

Builders return immutable validators that can be composed freely:

    >>> from typecfg import types
    >>> settings = types.struct({
    ...     "port": types.integer(min=1024, max=65535, default_val=8080),
    ...     "hosts": types.array(types.string()),
    ... })
    >>> settings.check({"port": 8000, "hosts": ["localhost"]})
    True
"""

from typecfg.types.validator import (
    COMPUTE,
    DynamicPropertyCalculation,
    TypeValidator,
    TypeValidatorArray,
    TypeValidatorObject,
    TypeValidatorStruct,
)
from typecfg.types.factories import (
    any_,
    array,
    boolean,
    date,
    integer,
    literal,
    number,
    object_,
    string,
    struct,
)

__all__ = [
    # Validators
    "COMPUTE",
    "DynamicPropertyCalculation",
    "TypeValidator",
    "TypeValidatorArray",
    "TypeValidatorObject",
    "TypeValidatorStruct",
    # Builders
    "any_",
    "array",
    "boolean",
    "date",
    "integer",
    "literal",
    "number",
    "object_",
    "string",
    "struct",
]
