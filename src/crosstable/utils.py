"""Utility functions for crosstable.

Shared validation and parsing helpers used by the query builders.
"""

import json
from typing import Any

from .exceptions import InvalidQueryError


def non_negative(name: str, value: Any) -> int:
    """Return `value` if it is a non-negative int, else raise InvalidQueryError."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidQueryError(f"{name} must be a non-negative integer", **{name: value})
    return value


def load_json(name: str, value: Any) -> Any:
    """Decode a JSON-encoded wire parameter; non-strings are returned as-is."""
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except ValueError as e:
        raise InvalidQueryError("Parameter is not valid JSON", param=name, value=value) from e


def load_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise InvalidQueryError("Parameter is not an integer", param=name, value=value) from e
