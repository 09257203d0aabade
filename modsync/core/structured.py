"""Helpers for safely working with manifest documents.

composer.json files are parsed with ``json`` into untyped objects. These
helpers narrow them at the boundary so the rest of the code only sees
``StrDict`` tables and plain strings.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]


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


def get_path(table: Mapping[str, object], *keys: str) -> object | None:
    """Follow a key path through nested tables.

    ``get_path(doc, "extra", "module-sync", "repository-base")`` returns the
    value at that path, or None as soon as a segment is missing or is not a
    table.
    """
    current: object = table
    for key in keys:
        d = as_str_dict(current)
        if d is None or key not in d:
            return None
        current = d[key]
    return current


def get_str_map(table: Mapping[str, object], key: str) -> dict[str, str]:
    """Get a ``name -> constraint`` mapping, dropping non-string entries.

    Composer encodes an empty ``require`` section as ``[]``, which is read as
    an empty mapping.
    """
    value = as_str_dict(table.get(key))
    if value is None:
        return {}
    return {k: v for k, v in value.items() if isinstance(v, str)}
