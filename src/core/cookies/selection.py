"""
Row selection state for the cookie listing.

The selection is either idle or points at one record key. It is reset on
every frame switch and recomputed after deletions so it keeps pointing at a
row that is present in the filtered sequence.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


class SelectionMode(StrEnum):
    IDLE = "idle"
    SELECTED = "selected"


def next_index_after_delete(index: Optional[int], length: int) -> Optional[int]:
    """
    Index to select once the row at ``index`` is removed.

    ``length`` is the sequence length before removal. The row sliding into
    the vacated slot is chosen, or the new last row when the last one was
    deleted. None when nothing remains or nothing was selected.

    Example:
        >>> next_index_after_delete(1, 3)
        1
        >>> next_index_after_delete(2, 3)
        1
        >>> next_index_after_delete(0, 1) is None
        True
    """
    if index is None or index < 0:
        return None
    remaining = length - 1
    if remaining <= 0:
        return None
    return min(max(index, 0), remaining - 1)


@dataclass
class SelectionState:
    """
    Selection pointer of one frame.

    ``recovered`` is set when the current selection was chosen by deletion
    recovery rather than by the user. In that case the next deletion target
    is read from the recomputed ``index`` instead of the picked key.
    """

    context: Optional[str] = None
    key: Optional[str] = None
    index: int = -1
    recovered: bool = False

    @property
    def mode(self) -> SelectionMode:
        return SelectionMode.IDLE if self.key is None else SelectionMode.SELECTED

    def pick(self, key: Optional[str], keys: Sequence[str]) -> Optional[str]:
        """Explicit user pick; a key not present in ``keys`` clears the selection."""
        self.recovered = False
        if key is None or key not in keys:
            self._idle()
            return None
        self.key = key
        self.index = keys.index(key)
        return key

    def reset(self, context: Optional[str] = None) -> None:
        """Frame switch: back to idle and clear the recovery gate."""
        if self.context != context:
            logger.debug("Selection reset for frame %r", context)
        self.context = context
        self.recovered = False
        self._idle()

    def clear(self) -> None:
        self.recovered = False
        self._idle()

    def resolve(self, keys: Sequence[str]) -> Optional[str]:
        """
        Re-validate the pointer against a recomputed filtered sequence.

        A selected key that is no longer present drops the selection.
        """
        if self.key is None:
            return None
        if self.key in keys:
            self.index = keys.index(self.key)
            return self.key
        self._idle()
        return None

    def deletion_target(self, keys: Sequence[str]) -> Tuple[Optional[str], Optional[int]]:
        """Return ``(key, index)`` of the row a delete request applies to."""
        if self.recovered:
            if 0 <= self.index < len(keys):
                return keys[self.index], self.index
            return None, None
        if self.key is not None and self.key in keys:
            return self.key, keys.index(self.key)
        return None, None

    def recover(self, candidate: Optional[int], keys: Sequence[str]) -> Optional[str]:
        """Select the row at ``candidate`` in the post-deletion sequence."""
        self.recovered = True
        if candidate is None or not keys:
            self._idle()
            return None
        index = min(max(candidate, 0), len(keys) - 1)
        self.key = keys[index]
        self.index = index
        return self.key

    def _idle(self) -> None:
        self.key = None
        self.index = -1
