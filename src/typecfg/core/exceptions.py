"""
Unified exception hierarchy for typecfg.
Single source of the errors raised by validators and by Config.
"""

from typing import Dict, Any, Optional, List, Type


class TypecfgError(Exception):
    """
    Base error of typecfg.

    Features:
    1. Structured serialization
    2. Rich context
    3. Resolution suggestions
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        self.message: str = message
        self.code: str = code or self.__class__.__name__
        self.context: Dict[str, Any] = context or {}
        self.cause: Optional[Exception] = cause
        self.suggestions: List[str] = []
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize to a dictionary.

        Returns:
            {
                "code": "ParseError",
                "message": "Unable to parse: settings.json.",
                "context": {...}
            }
        """
        result: Dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }

        if self.cause:
            result["cause"] = {"type": type(self.cause).__name__, "message": str(self.cause)}

        if self.suggestions:
            result["suggestions"] = self.suggestions

        return result

    def add_suggestion(self, suggestion: str) -> None:
        """
        Add a resolution hint to the error.

        Hints accumulate, duplicates are ignored.

        Example:
            error = ParseError("Unable to parse: settings.json.")
            error.add_suggestion("Check the file is valid JSON")
        """
        if not suggestion or not isinstance(suggestion, str):
            return

        if suggestion not in self.suggestions:
            self.suggestions.append(suggestion)


class ConfigurationError(TypecfgError):
    """Invalid validator or Config definition."""

    pass


class ValidationError(TypecfgError):
    """
    A value does not satisfy a validator.

    The message is the full aggregated diagnostic produced by
    `TypeValidator.fail`, every violation included.
    """

    pass


class NotObjectLikeError(ValidationError):
    """Key operation requested on a Config whose data is not struct/map shaped."""

    pass


class ParseError(TypecfgError):
    """Raw text could not be decoded by the configured parser."""

    pass


class PersistenceError(TypecfgError):
    """Backing file could not be written or removed."""

    pass


def fail_throw(
    error_class: Type[TypecfgError], message: Optional[str], **context: Any
) -> None:
    """
    Raise `error_class` if `message` is a string, do nothing otherwise.

    Bridges the `fail_*` methods (which return messages) and their raising
    counterparts.
    """
    if not isinstance(message, str):
        return

    raise error_class(message, context=context or None)


__all__ = [
    "TypecfgError",
    "ConfigurationError",
    "ValidationError",
    "NotObjectLikeError",
    "ParseError",
    "PersistenceError",
    "fail_throw",
]
