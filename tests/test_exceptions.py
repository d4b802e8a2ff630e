"""
Tests for the exception hierarchy and helpers.
"""

import pytest

from typecfg.core.exceptions import (
    NotObjectLikeError,
    ParseError,
    TypecfgError,
    ValidationError,
    fail_throw,
)


def test_hierarchy():
    assert issubclass(NotObjectLikeError, ValidationError)
    assert issubclass(ParseError, TypecfgError)


def test_to_dict():
    cause = ValueError("bad json")
    error = ParseError("Unable to parse: a.json.", context={"path": "a.json"}, cause=cause)

    assert error.to_dict() == {
        "code": "ParseError",
        "message": "Unable to parse: a.json.",
        "context": {"path": "a.json"},
        "cause": {"type": "ValueError", "message": "bad json"},
    }


def test_suggestions_are_unique():
    error = TypecfgError("Broken.")

    error.add_suggestion("Check the file")
    error.add_suggestion("Check the file")
    error.add_suggestion("")

    assert error.suggestions == ["Check the file"]
    assert error.to_dict()["suggestions"] == ["Check the file"]


def test_fail_throw():
    fail_throw(ValidationError, None)

    with pytest.raises(ValidationError) as exc_info:
        fail_throw(ValidationError, "Bad value.", key="port")

    assert exc_info.value.message == "Bad value."
    assert exc_info.value.context == {"key": "port"}
