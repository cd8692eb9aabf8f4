"""
Faceted filtering, free-text search and sorting over record sequences.

Every function here is a pure re-derivation: it reads the records and the
current selections and returns a new sequence, so it can be re-run on each
record update or facet change.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
    TypeVar,
)

from .field_paths import MISSING, resolve_field_path, value_as_text

logger = logging.getLogger(__name__)

T = TypeVar("T")

Comparator = Callable[[Any, str], bool]
SelectedFilters = Dict[str, Set[str]]
FilterValues = Dict[str, Dict[str, bool]]

__all__ = [
    "Comparator",
    "FilterDefinition",
    "FilterValues",
    "SelectedFilters",
    "compute_filter_options",
    "default_match",
    "filter_records",
    "matches_filters",
    "matches_search",
    "normalize_selected_filters",
    "sort_records",
]


@dataclass
class FilterDefinition:
    """
    One facet of the listing, keyed by the field path it reads.

    ``static_values`` fixes the label set; without it labels are derived
    from the values present in the records. ``comparator`` decides whether
    a field value matches a label; without it ``default_match`` applies.
    """

    key: str
    title: str
    static_values: Optional[Sequence[str]] = None
    comparator: Optional[Comparator] = None
    use_generic_persistence_key: bool = False
    description: str = ""

    @property
    def has_static_filter_values(self) -> bool:
        return self.static_values is not None

    def matches(self, value: Any, selected_labels: Iterable[str]) -> bool:
        """True if ``value`` matches any selected label (OR within a facet)."""
        compare = self.comparator or default_match
        for label in selected_labels:
            try:
                if compare(value, label):
                    return True
            except (TypeError, ValueError, AttributeError):
                logger.debug("Comparator for %s failed on %r", self.key, value, exc_info=True)
        return False

    def filter_values(self, selected: Iterable[str] = ()) -> FilterValues:
        """Static labels in the ``{label: {"selected": bool}}`` shape."""
        chosen = set(selected)
        return {label: {"selected": label in chosen} for label in self.static_values or ()}


def default_match(value: Any, label: str) -> bool:
    """
    Match a field value against a facet label.

    Strings compare case-insensitively. Other scalars compare by equality
    with the label or with their string form. Collections match when any
    element matches. Absent values never match.
    """
    if value is MISSING or value is None:
        return False
    if isinstance(value, str):
        return value.casefold() == str(label).casefold()
    if isinstance(value, (list, tuple, set, frozenset)):
        return any(default_match(item, label) for item in value)
    return value == label or str(value) == str(label)


def normalize_selected_filters(selected: Optional[Mapping[str, Iterable[str]]]) -> SelectedFilters:
    """
    Copy selections into set form, dropping empty facets.

    Saved state may be stale or hand-edited: facets whose value is not a
    label, a list of labels or the legacy mapping are skipped, as are
    ``None`` labels.
    """
    result: SelectedFilters = {}
    for key, labels in (selected or {}).items():
        if isinstance(labels, Mapping):
            # Legacy {label: {"selected": bool}} shape
            chosen = {str(label) for label, state in labels.items() if _is_selected(state)}
        elif isinstance(labels, str):
            chosen = {labels}
        elif isinstance(labels, (list, tuple, set, frozenset)):
            chosen = {str(label) for label in labels if label is not None}
        else:
            logger.debug("Ignoring selection %r for facet %s", labels, key)
            continue
        if chosen:
            result[key] = chosen
    return result


def _is_selected(state: Any) -> bool:
    if isinstance(state, Mapping):
        return bool(state.get("selected"))
    return bool(state)


def matches_filters(
    record: Any,
    definitions: Mapping[str, FilterDefinition],
    selected: Mapping[str, Set[str]],
) -> bool:
    """
    AND across facets with a non-empty selection.

    Selections for keys without a definition (stale saved state) are ignored.
    """
    for key, labels in selected.items():
        definition = definitions.get(key)
        if not labels or definition is None:
            continue
        if not definition.matches(resolve_field_path(record, key), labels):
            return False
    return True


def matches_search(record: Any, query: str, search_keys: Sequence[str]) -> bool:
    """True if any search field contains ``query``; an empty query passes."""
    needle = (query or "").strip().casefold()
    if not needle:
        return True
    for path in search_keys:
        if needle in value_as_text(resolve_field_path(record, path)).casefold():
            return True
    return False


def filter_records(
    records: Iterable[T],
    definitions: Mapping[str, FilterDefinition],
    selected: Mapping[str, Set[str]],
    query: str = "",
    search_keys: Sequence[str] = (),
) -> List[T]:
    """
    Return the records passing every facet and the search query.

    Input order is preserved; no sorting happens here.
    """
    return [
        record
        for record in records
        if matches_filters(record, definitions, selected)
        and matches_search(record, query, search_keys)
    ]


def compute_filter_options(
    records: Iterable[Any],
    definitions: Mapping[str, FilterDefinition],
    selected: Mapping[str, Set[str]],
) -> Dict[str, FilterValues]:
    """
    Compute the label set of every facet with its selected flags.

    Dynamic facets list the distinct values observed in ``records`` in
    first-seen order. Selected labels no longer present are kept so they
    can still be cleared.
    """
    records = list(records)
    options: Dict[str, FilterValues] = {}
    for key, definition in definitions.items():
        chosen = selected.get(key, set())
        if definition.has_static_filter_values:
            options[key] = definition.filter_values(chosen)
            continue

        labels: Dict[str, None] = {}
        for record in records:
            value = resolve_field_path(record, key)
            if value is MISSING:
                continue
            values = value if isinstance(value, (list, tuple, set, frozenset)) else (value,)
            for item in values:
                text = value_as_text(item)
                if text:
                    labels.setdefault(text, None)
        for label in sorted(chosen):
            labels.setdefault(label, None)
        options[key] = {label: {"selected": label in chosen} for label in labels}
    return options


def _sort_key(value: Any):
    if isinstance(value, bool):
        return (0, int(value), "")
    if isinstance(value, (int, float)):
        return (0, value, "")
    return (1, 0, value_as_text(value).casefold())


def sort_records(records: Iterable[T], field_path: str, descending: bool = False) -> List[T]:
    """
    Sort records by a field path.

    Records whose value is absent always come last, in their original order.
    """
    present: List[tuple[Any, T]] = []
    absent: List[T] = []
    for record in records:
        value = resolve_field_path(record, field_path)
        if value is MISSING:
            absent.append(record)
        else:
            present.append((_sort_key(value), record))
    present.sort(key=lambda item: item[0], reverse=descending)
    return [record for _, record in present] + absent
