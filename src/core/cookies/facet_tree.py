"""Facet tree helpers: selection toggling and tree navigation."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Set

from .filtering import FilterDefinition, FilterValues, SelectedFilters


def toggle_filter(
    selected: Mapping[str, Set[str]],
    facet_key: str,
    label: str,
    checked: bool,
) -> SelectedFilters:
    """
    Return a new selection with ``label`` added to or removed from a facet.

    A facet whose selection becomes empty is removed from the mapping.
    The input mapping is left untouched.
    """
    result: SelectedFilters = {key: set(labels) for key, labels in selected.items()}
    labels = result.get(facet_key, set())
    if checked:
        labels.add(label)
    else:
        labels.discard(label)

    if labels:
        result[facet_key] = labels
    else:
        result.pop(facet_key, None)
    return result


def clear_facet(selected: Mapping[str, Set[str]], facet_key: str) -> SelectedFilters:
    """Return a copy of ``selected`` without any labels for ``facet_key``."""
    return {key: set(labels) for key, labels in selected.items() if key != facet_key}


def build_facet_tree(
    definitions: Mapping[str, FilterDefinition],
    options: Mapping[str, FilterValues],
) -> Dict[str, Dict[str, Any]]:
    """
    Arrange facets and their labels as a two-level tree.

    Each node is ``{"title": str, "selected": bool, "children": {...}}``;
    facet nodes are keyed by filter key, label nodes by label.
    """
    tree: Dict[str, Dict[str, Any]] = {}
    for key, definition in definitions.items():
        values = options.get(key, {})
        children = {
            label: {"title": label, "selected": bool(state.get("selected")), "children": {}}
            for label, state in values.items()
        }
        tree[key] = {
            "title": definition.title,
            "description": definition.description,
            "selected": any(child["selected"] for child in children.values()),
            "children": children,
        }
    return tree


def create_key_path(items: Mapping[str, Mapping[str, Any]], key: str) -> List[str]:
    """
    Return the chain of keys from the root of ``items`` down to ``key``.

    Returns an empty list when ``key`` is not in the tree.

    Example:
        >>> create_key_path({"a": {"children": {"b": {"children": {}}}}}, "b")
        ['a', 'b']
    """
    for item_key, item in items.items():
        if item_key == key:
            return [item_key]
        children = item.get("children") or {}
        path = create_key_path(children, key)
        if path:
            return [item_key] + path
    return []
