"""Compiler utility functions.

Provides helpers for encoding parameter values in the stable form the
serializer emits.
"""

import json
from typing import Any

from crosstable.constants import JSON_SEPARATORS


def dump_json(value: Any) -> str:
    """Encode `value` as compact JSON, preserving key insertion order."""
    return json.dumps(value, separators=JSON_SEPARATORS, ensure_ascii=False)


def encode_value(value: Any) -> str:
    """Encode a single parameter value.

    - str: passed through
    - bool: `true` / `false`
    - int/float: decimal string
    - dict/list/tuple: compact JSON
    - None: empty string
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (dict, list, tuple)):
        return dump_json(value)
    if value is None:
        return ""
    return str(value)


def join_list(values: Any) -> str:
    """Comma-join a sequence of names (`select`, `only`)."""
    return ",".join(str(v) for v in values)
