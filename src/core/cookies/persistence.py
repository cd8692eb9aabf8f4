"""
Two-tier persistence of facet selections.

Selections of facets flagged ``use_generic_persistence_key`` are saved under
a generic key shared by every frame; all other selections are saved under a
frame-specific key. The owning controller calls the lifecycle methods when a
frame is entered or left and ``save`` after every selection change.

Store failures are logged and swallowed; the live selection held by the
controller stays authoritative.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from core.preferences import PreferenceStore

from .filtering import FilterDefinition, SelectedFilters, normalize_selected_filters

logger = logging.getLogger(__name__)

SELECTED_FILTERS_FIELD = "selectedFilters"
SORTING_FIELD = "sorting"


def _copy(selected: Mapping[str, Set[str]]) -> SelectedFilters:
    return {key: set(labels) for key, labels in selected.items() if labels}


def _serialize(selected: Mapping[str, Set[str]]) -> Dict[str, List[str]]:
    return {key: sorted(labels) for key, labels in selected.items() if labels}


class FilterPersistence:
    """Load, reconcile and save specific and generic facet selections."""

    def __init__(self, store: Optional[PreferenceStore], definitions: Mapping[str, FilterDefinition]):
        self.store = store
        self.definitions = dict(definitions)
        self._specific_key: Optional[str] = None
        self._generic_key: Optional[str] = None
        self._generic_snapshot: SelectedFilters = {}

    # ─── State ────────────────────────────────────────────────────────

    @property
    def specific_key(self) -> Optional[str]:
        return self._specific_key

    @property
    def generic_key(self) -> Optional[str]:
        return self._generic_key

    @property
    def generic_snapshot(self) -> SelectedFilters:
        return _copy(self._generic_snapshot)

    def is_generic(self, filter_key: str) -> bool:
        definition = self.definitions.get(filter_key)
        return bool(definition and definition.use_generic_persistence_key)

    def split(self, selected: Mapping[str, Set[str]]) -> Tuple[SelectedFilters, SelectedFilters]:
        """Partition a selection into (specific, generic) subsets."""
        specific: SelectedFilters = {}
        generic: SelectedFilters = {}
        for key, labels in selected.items():
            if not labels or key not in self.definitions:
                continue
            target = generic if self.is_generic(key) else specific
            target[key] = set(labels)
        return specific, generic

    # ─── Lifecycle ────────────────────────────────────────────────────

    def on_context_enter(
        self,
        live: Mapping[str, Set[str]],
        specific_key: Optional[str] = None,
        generic_key: Optional[str] = None,
    ) -> SelectedFilters:
        """
        Enter a context and return the reconciled live selection.

        Generic selections are loaded first so specific ones overlay them.
        A key equal to the one already active is not reloaded.
        """
        selected = _copy(live)
        if generic_key != self._generic_key:
            if self._generic_key is not None:
                selected = self.exit_generic()
            if generic_key is not None:
                selected = self.enter_generic(generic_key, selected)
        if specific_key != self._specific_key:
            if self._specific_key is not None:
                selected = self.exit_specific()
            if specific_key is not None:
                selected = self.enter_specific(specific_key, selected)
        return selected

    def on_context_exit(self, leave_generic: bool = False) -> SelectedFilters:
        """
        Leave the current specific context and return the live selection.

        With ``leave_generic`` the generic scope is left too and the
        selection is emptied.
        """
        selected = self.exit_specific()
        if leave_generic:
            selected = self.exit_generic()
        return selected

    def enter_generic(self, key: str, live: Mapping[str, Set[str]]) -> SelectedFilters:
        self._generic_key = key
        loaded = self._restrict(self._load(key), generic=True)
        if loaded is None:
            logger.debug("No saved generic filters for %s", key)
            return _copy(live)
        self._generic_snapshot = loaded
        logger.debug("Loaded generic filters for %s: %s", key, sorted(loaded))
        return {**_copy(live), **_copy(loaded)}

    def enter_specific(self, key: str, live: Mapping[str, Set[str]]) -> SelectedFilters:
        self._specific_key = key
        loaded = self._restrict(self._load(key), generic=False)
        if loaded is None:
            logger.debug("No saved specific filters for %s", key)
            return _copy(live)
        logger.debug("Loaded specific filters for %s: %s", key, sorted(loaded))
        return {**_copy(live), **loaded}

    def exit_specific(self) -> SelectedFilters:
        """Forget the specific key; the live selection falls back to the generic snapshot."""
        if self._specific_key is not None:
            logger.debug("Leaving specific filter context %s", self._specific_key)
        self._specific_key = None
        return self.generic_snapshot

    def exit_generic(self) -> SelectedFilters:
        """Forget the generic key and snapshot; the live selection is emptied."""
        if self._generic_key is not None:
            logger.debug("Leaving generic filter context %s", self._generic_key)
        self._generic_key = None
        self._generic_snapshot = {}
        return {}

    # ─── Saving ───────────────────────────────────────────────────────

    def save(self, previous: Mapping[str, Set[str]], current: Mapping[str, Set[str]]) -> List[str]:
        """
        Write each persistence domain whose subset changed.

        Returns:
            The persistence keys written to
        """
        old_specific, old_generic = self.split(previous)
        new_specific, new_generic = self.split(current)
        written: List[str] = []

        if new_generic != old_generic:
            if self._generic_key is not None:
                self._generic_snapshot = _copy(new_generic)
            if self._write(self._generic_key, {SELECTED_FILTERS_FIELD: _serialize(new_generic)}):
                written.append(self._generic_key)
        if new_specific != old_specific:
            if self._write(self._specific_key, {SELECTED_FILTERS_FIELD: _serialize(new_specific)}):
                written.append(self._specific_key)
        return written

    def save_sorting(self, sorting: Optional[Mapping[str, Any]]) -> bool:
        """Persist the column sort under the specific key."""
        payload = dict(sorting) if sorting else None
        return self._write(self._specific_key, {SORTING_FIELD: payload})

    def load_sorting(self) -> Optional[Dict[str, Any]]:
        if self._specific_key is None:
            return None
        data = self._read(self._specific_key, SORTING_FIELD)
        if not isinstance(data, Mapping) or not data.get("key"):
            return None
        return {"key": str(data["key"]), "descending": bool(data.get("descending"))}

    # ─── Store access ─────────────────────────────────────────────────

    def _restrict(self, loaded: Optional[SelectedFilters], generic: bool) -> Optional[SelectedFilters]:
        if loaded is None:
            return None
        return {
            key: labels
            for key, labels in loaded.items()
            if key in self.definitions and self.is_generic(key) == generic
        }

    def _load(self, key: str) -> Optional[SelectedFilters]:
        data = self._read(key, SELECTED_FILTERS_FIELD)
        if not isinstance(data, Mapping):
            return None
        return normalize_selected_filters(data)

    def _read(self, key: str, field: str) -> Any:
        if self.store is None:
            return None
        try:
            return self.store.get(key, field)
        except Exception:
            logger.warning("Failed to read %s for %s; continuing without saved state",
                           field, key, exc_info=True)
            return None

    def _write(self, key: Optional[str], values: Mapping[str, Any]) -> bool:
        if key is None or self.store is None:
            return False
        try:
            self.store.set(key, values)
        except Exception:
            logger.warning("Failed to save %s for %s", ", ".join(values), key, exc_info=True)
            return False
        return True
