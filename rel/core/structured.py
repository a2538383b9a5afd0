"""Helpers for safely working with dynamic (untyped) structures.

TOML documents and index JSON lines arrive as plain `dict`/`list` trees;
these helpers narrow them at the boundary so parsers downstream work with
checked types.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TypeGuard, cast

StrDict = dict[str, object]
ObjList = list[object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    """Return obj as StrDict if it matches, else None."""
    if is_str_dict(obj):
        return obj
    return None


def as_obj_list(obj: object) -> ObjList | None:
    """Return obj as ObjList if it is a list, else None."""
    if isinstance(obj, list):
        return cast(ObjList, obj)
    return None


def as_str_list(obj: object) -> list[str] | None:
    """Return obj as a list of strings, or None if any item is not a str."""
    items = as_obj_list(obj)
    if items is None or not all(isinstance(item, str) for item in items):
        return None
    return cast(list[str], items)


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value from a mapping, stripping whitespace.

    Returns None if missing, not a str, or empty after stripping.
    """
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    """Get a nested table (dict with string keys) from a mapping."""
    return as_str_dict(table.get(key))


def get_path(table: Mapping[str, object], *keys: str) -> StrDict | None:
    """Walk nested tables, e.g. `get_path(doc, "package", "metadata")`."""
    current: StrDict | None = dict(table)
    for key in keys:
        if current is None:
            return None
        current = get_table(current, key)
    return current
