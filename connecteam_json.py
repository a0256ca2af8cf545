# -*- coding: utf-8 -*-
# SPDX-License-Identifier: FAFOL

"""Absent-safe navigation of loosely-typed JSON from the Connecteam dashboard"""

import json
from typing import Any, List, Union

from connecteam_errors import SchemaError


class _Absent:
    """Marker for "nothing at this path"; falsy, and distinct from JSON null."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return 'ABSENT'


ABSENT = _Absent()

NULL_TEXT = 'null'


def get_path(node: Any, *path: Union[str, int]) -> Any:
    """Walk `path` through `node`.

    String steps index dicts, integer steps index lists. A missing key, an
    index out of range, or a step into the wrong kind of node gives `ABSENT`
    instead of raising.

    Args:
        node: a decoded JSON value (or `ABSENT`)
        *path: dict keys and list indices

    Returns:
        the value at the end of the path, or `ABSENT`
    """
    for step in path:
        if isinstance(step, bool):
            return ABSENT
        if isinstance(step, str) and isinstance(node, dict):
            if step not in node:
                return ABSENT
            node = node[step]
        elif isinstance(step, int) and isinstance(node, list):
            if not 0 <= step < len(node):
                return ABSENT
            node = node[step]
        else:
            return ABSENT
    return node


def as_list(node: Any) -> List[Any]:
    """The elements of a JSON array, or an empty list for anything else"""
    if isinstance(node, list):
        return node
    return []


def text_of(node: Any) -> str:
    """Coerce a JSON node to text.

    Absent nodes become the empty string, JSON null becomes the literal text
    `"null"`, strings pass through, anything else is rendered as JSON. The
    dashboard hands back `"null"` as text in some fields, so both spellings of
    null come out the same here and `is_present_text` filters them.
    """
    if node is ABSENT:
        return ''
    if node is None:
        return NULL_TEXT
    if isinstance(node, str):
        return node
    return json.dumps(node)


def decode_json(text: str) -> Any:
    """Decode a response body, turning decode failures into `SchemaError`"""
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise SchemaError(f'Response is not JSON: {e}') from e


def is_present_text(text: str) -> bool:
    """False for the empty string and the `"null"` marker"""
    return text not in ('', NULL_TEXT)


def string_or_empty(node: Any) -> str:
    """Text for a name-like field; absent and null both become `""`"""
    if node is ABSENT or node is None:
        return ''
    return text_of(node)


def as_int(node: Any) -> Any:
    """Exact integer view of a numeric node, or `ABSENT`.

    Booleans are not numbers. Floats are only accepted when they carry no
    fractional part.
    """
    if isinstance(node, bool):
        return ABSENT
    if isinstance(node, int):
        return node
    if isinstance(node, float) and node.is_integer():
        return int(node)
    return ABSENT


def is_number(node: Any) -> bool:
    """True for JSON numbers (ints and floats, not booleans)"""
    return isinstance(node, (int, float)) and not isinstance(node, bool)
