"""
Cookie listing controller.

Owns the state of one listing (record snapshot, facet selections, search,
sort, filtered view and selection pointer) and keeps it consistent when the
record source changes, the user edits facets, the inspected frame switches,
rows are deleted or the backing store reports an outside change.

Views connect to the ``changed`` signal and read the public properties.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

from PySide6.QtCore import QObject, Signal

from core.preferences import PreferenceStore

from .cookie_filters import (
    COOKIE_SEARCH_KEYS,
    DEFAULT_PERSISTENCE_PREFIX,
    build_cookie_filters,
    generic_persistence_key,
    specific_persistence_key,
)
from .facet_tree import clear_facet, toggle_filter
from .filtering import (
    FilterDefinition,
    FilterValues,
    SelectedFilters,
    compute_filter_options,
    filter_records,
    normalize_selected_filters,
    sort_records,
)
from .persistence import FilterPersistence
from .records import CookieRecord, compute_key
from .selection import SelectionState, next_index_after_delete

logger = logging.getLogger(__name__)


class CookieSource(Protocol):
    """Record source and deletion sink for one inspected tab."""

    def cookies_for_frame(self, frame: Optional[str] = None) -> Mapping[str, CookieRecord]:
        ...

    def delete(self, key: str) -> Any:
        ...

    def delete_all(self) -> Any:
        ...


class Subscribable(Protocol):
    """A bound zero-argument signal."""

    def connect(self, listener: Callable[[], None]) -> Any:
        ...

    def disconnect(self, listener: Callable[[], None]) -> Any:
        ...


@dataclass
class ListingState:
    """Mutable state of one listing; replaced only through the controller."""

    frame: Optional[str] = None
    records: Dict[str, CookieRecord] = field(default_factory=dict)
    selected_filters: SelectedFilters = field(default_factory=dict)
    query: str = ""
    sorting: Optional[Dict[str, Any]] = None
    filtered: List[CookieRecord] = field(default_factory=list)
    options: Dict[str, FilterValues] = field(default_factory=dict)
    selection: SelectionState = field(default_factory=SelectionState)


class CookieListingController(QObject):
    """Filter, search, persistence and selection for a cookie table."""

    changed = Signal()

    def __init__(
        self,
        source: CookieSource,
        store: Optional[PreferenceStore] = None,
        storage_signal: Optional[Subscribable] = None,
        definitions: Optional[Mapping[str, FilterDefinition]] = None,
        search_keys: Sequence[str] = COOKIE_SEARCH_KEYS,
        persistence_prefix: str = DEFAULT_PERSISTENCE_PREFIX,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.source = source
        self.definitions: Dict[str, FilterDefinition] = dict(
            definitions if definitions is not None else build_cookie_filters()
        )
        self.search_keys = tuple(search_keys)
        self.persistence_prefix = persistence_prefix
        self.persistence = FilterPersistence(store, self.definitions)
        self.state = ListingState()

        self._storage_signal = storage_signal
        self._subscriptions: List[tuple[Subscribable, Callable[[], None]]] = []
        self._opened = False
        self._batch_depth = 0
        self._pending_notify = False

    # ─── Lifecycle ────────────────────────────────────────────────────

    def open(self, frame: Optional[str] = None) -> None:
        """Subscribe to collaborators and enter ``frame``."""
        if not self._opened:
            source_signal = getattr(self.source, "changed", None)
            if source_signal is not None:
                self._subscribe(source_signal, self.refresh)
            if self._storage_signal is not None:
                self._subscribe(self._storage_signal, self.remove_highlights)
            self._opened = True
        self._enter_frame(frame)

    def close(self) -> None:
        """Unsubscribe and leave the listing; never raises."""
        for signal, callback in self._subscriptions:
            try:
                signal.disconnect(callback)
            except (RuntimeError, ValueError, TypeError):
                logger.debug("Listener %r already detached", callback, exc_info=True)
        self._subscriptions.clear()
        self.state.selected_filters = self.persistence.on_context_exit(leave_generic=True)
        self.state.selection.reset(None)
        self._opened = False

    def set_frame(self, frame: Optional[str]) -> None:
        """Switch the inspected frame."""
        if self._opened and frame == self.state.frame:
            return
        self._enter_frame(frame)

    def _subscribe(self, signal: Subscribable, callback: Callable[[], None]) -> None:
        signal.connect(callback)
        self._subscriptions.append((signal, callback))

    def _enter_frame(self, frame: Optional[str]) -> None:
        with self._batched():
            self.state.frame = frame
            self.state.selection.reset(frame)
            self.state.selected_filters = self.persistence.on_context_enter(
                self.state.selected_filters,
                specific_key=specific_persistence_key(frame, self.persistence_prefix),
                generic_key=generic_persistence_key(self.persistence_prefix),
            )
            self.state.sorting = self.persistence.load_sorting()
            self.refresh()

    # ─── Public state ─────────────────────────────────────────────────

    @property
    def frame(self) -> Optional[str]:
        return self.state.frame

    @property
    def filtered_records(self) -> List[CookieRecord]:
        return list(self.state.filtered)

    @property
    def filtered_keys(self) -> List[str]:
        return [compute_key(record) for record in self.state.filtered]

    @property
    def selected_filters(self) -> SelectedFilters:
        return {key: set(labels) for key, labels in self.state.selected_filters.items()}

    @property
    def filter_options(self) -> Dict[str, FilterValues]:
        return {key: dict(values) for key, values in self.state.options.items()}

    @property
    def search_query(self) -> str:
        return self.state.query

    @property
    def sorting(self) -> Optional[Dict[str, Any]]:
        return dict(self.state.sorting) if self.state.sorting else None

    @property
    def selected_key(self) -> Optional[str]:
        return self.state.selection.key

    @property
    def selected_record(self) -> Optional[CookieRecord]:
        key = self.state.selection.key
        if key is None:
            return None
        return self.state.records.get(key)

    @property
    def can_delete_selected(self) -> bool:
        target, _ = self.state.selection.deletion_target(self.filtered_keys)
        return target is not None

    def record(self, key: str) -> Optional[CookieRecord]:
        return self.state.records.get(key)

    # ─── Records ──────────────────────────────────────────────────────

    def refresh(self) -> None:
        """Re-read the active frame from the source, keeping highlights."""
        previous = self.state.records
        fresh: Dict[str, CookieRecord] = {}
        for record in self.source.cookies_for_frame(self.state.frame).values():
            key = compute_key(record)
            before = previous.get(key)
            fresh[key] = record.with_highlight(bool(before and before.highlighted))
        self.state.records = fresh
        self._recompute()

    def highlight(self, key: str, value: bool = True) -> bool:
        """Set the transient highlight flag of one record."""
        record = self.state.records.get(key)
        if record is None:
            return False
        self.state.records[key] = record.with_highlight(value)
        self._recompute()
        return True

    def remove_highlights(self) -> None:
        """Clear every highlight; filters and selection are left alone."""
        self.state.records = {
            key: record.with_highlight(False) for key, record in self.state.records.items()
        }
        self._recompute()

    # ─── Facets, search, sort ─────────────────────────────────────────

    def toggle_filter(self, facet_key: str, label: str, checked: bool) -> None:
        self._apply_selection(toggle_filter(self.state.selected_filters, facet_key, label, checked))

    def set_selected_filters(self, selected: Mapping[str, Iterable[str]]) -> None:
        self._apply_selection(normalize_selected_filters(selected))

    def clear_facet(self, facet_key: str) -> None:
        self._apply_selection(clear_facet(self.state.selected_filters, facet_key))

    def clear_filters(self) -> None:
        self._apply_selection({})

    def set_search(self, query: str) -> None:
        query = query or ""
        if query == self.state.query:
            return
        self.state.query = query
        self._recompute()

    def set_sorting(self, field_path: Optional[str], descending: bool = False) -> None:
        """Sort by ``field_path``; None restores source order."""
        sorting = {"key": field_path, "descending": bool(descending)} if field_path else None
        if sorting == self.state.sorting:
            return
        self.state.sorting = sorting
        self.persistence.save_sorting(sorting)
        self._recompute()

    def _apply_selection(self, selected: SelectedFilters) -> None:
        previous = self.state.selected_filters
        if selected == previous:
            return
        self.state.selected_filters = selected
        self.persistence.save(previous, selected)
        self._recompute()

    # ─── Selection & deletion ─────────────────────────────────────────

    def select(self, key: Optional[str]) -> Optional[str]:
        """Explicit user pick of a row by record key."""
        picked = self.state.selection.pick(key, self.filtered_keys)
        self._notify()
        return picked

    def select_index(self, index: int) -> Optional[str]:
        keys = self.filtered_keys
        if not 0 <= index < len(keys):
            return self.select(None)
        return self.select(keys[index])

    def clear_selection(self) -> None:
        self.state.selection.clear()
        self._notify()

    def delete_selected(self) -> Optional[str]:
        """
        Delete the selected cookie and select its successor.

        Errors from the deletion sink propagate with the listing unchanged.

        Returns:
            Key of the deleted cookie, or None when nothing was selected
        """
        keys = self.filtered_keys
        target, index = self.state.selection.deletion_target(keys)
        if target is None:
            return None
        candidate = next_index_after_delete(index, len(keys))

        with self._batched():
            self.source.delete(target)
            self.refresh()
            recovered = self.state.selection.recover(candidate, self.filtered_keys)
            self._notify()
        logger.debug("Deleted cookie %r, selection moved to %r", target, recovered)
        return target

    def delete_all(self) -> None:
        """Delete every cookie; the selection becomes idle."""
        with self._batched():
            self.source.delete_all()
            self.state.selection.clear()
            self.refresh()

    # ─── Derivation ───────────────────────────────────────────────────

    def _recompute(self) -> None:
        records = list(self.state.records.values())
        filtered = filter_records(
            records,
            self.definitions,
            self.state.selected_filters,
            query=self.state.query,
            search_keys=self.search_keys,
        )
        if self.state.sorting:
            filtered = sort_records(
                filtered, self.state.sorting["key"], self.state.sorting.get("descending", False)
            )
        self.state.filtered = filtered
        self.state.options = compute_filter_options(
            records, self.definitions, self.state.selected_filters
        )
        self.state.selection.resolve(self.filtered_keys)
        self._notify()

    @contextmanager
    def _batched(self):
        self._batch_depth += 1
        try:
            yield
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self._pending_notify:
                self._pending_notify = False
                self.changed.emit()

    def _notify(self) -> None:
        if self._batch_depth:
            self._pending_notify = True
        else:
            self.changed.emit()
