"""
Dotted field-path resolution over nested records.

Filter and search configuration reference record fields by path strings
such as ``"parsed_cookie.domain"``. Resolution never raises: any missing
hop yields the ``MISSING`` sentinel.
"""
from __future__ import annotations

from typing import Any, Mapping


class _Missing:
    """Sentinel type for a field path that does not resolve."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def resolve_field_path(record: Any, path: str) -> Any:
    """
    Resolve ``path`` against ``record``.

    Each dot-separated segment is looked up as a mapping key first and as
    an attribute second. ``None`` encountered mid-path is treated as absent.

    Args:
        record: Mapping or object to read from
        path: Dot-separated field path

    Returns:
        The resolved value, or ``MISSING`` when any segment is absent
    """
    if not path:
        return MISSING

    current = record
    for segment in path.split("."):
        if current is None or current is MISSING:
            return MISSING
        if isinstance(current, Mapping):
            if segment not in current:
                return MISSING
            current = current[segment]
            continue
        try:
            current = getattr(current, segment)
        except AttributeError:
            return MISSING
    if current is None:
        return MISSING
    return current


def value_as_text(value: Any) -> str:
    """Render a resolved value for substring search; absent becomes ''."""
    if value is MISSING or value is None:
        return ""
    if isinstance(value, (list, tuple, set, frozenset)):
        return " ".join(value_as_text(item) for item in value)
    return str(value)
