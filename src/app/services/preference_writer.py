"""
Fire-and-forget preference writes.

``BackgroundPreferenceStore`` wraps a synchronous preference store. Reads go
straight through; writes are queued on a private single-thread pool so the
UI never waits on disk, and they reach the store in submission order.
"""
from __future__ import annotations

import copy
import logging
import traceback
from typing import Any, Mapping, Optional

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal, Slot

from core.preferences import PreferenceStore

logger = logging.getLogger(__name__)


class PreferenceWriteSignals(QObject):
    finished = Signal(str)  # persistence key
    error = Signal(str, str)  # persistence key, traceback


class PreferenceWriteTask(QRunnable):
    """Write one set of preference fields."""

    def __init__(self, store: PreferenceStore, persistence_key: str, values: Mapping[str, Any]):
        super().__init__()
        self.store = store
        self.persistence_key = persistence_key
        self.values = copy.deepcopy(dict(values))
        self.signals = PreferenceWriteSignals()

    @Slot()
    def run(self) -> None:
        try:
            self.store.set(self.persistence_key, self.values)
        except Exception:
            logger.warning("Background write of %s failed", self.persistence_key, exc_info=True)
            self.signals.error.emit(self.persistence_key, traceback.format_exc())
            return
        self.signals.finished.emit(self.persistence_key)


class BackgroundPreferenceStore(QObject):
    """Preference store whose writes run off the GUI thread."""

    write_failed = Signal(str)  # persistence key

    def __init__(self, store: PreferenceStore, pool: Optional[QThreadPool] = None, parent=None):
        super().__init__(parent)
        self.store = store
        self.pool = pool or QThreadPool()
        # A single writer applies writes in submission order
        self.pool.setMaxThreadCount(1)
        self.failed_writes = 0

    def get(self, persistence_key: str, field: str) -> Optional[Any]:
        return self.store.get(persistence_key, field)

    def set(self, persistence_key: str, values: Mapping[str, Any]) -> None:
        task = PreferenceWriteTask(self.store, persistence_key, values)
        task.signals.error.connect(self._on_error)
        self.pool.start(task)

    def wait_for_done(self, msecs: int = 5000) -> bool:
        """Block until queued writes are flushed (shutdown and tests)."""
        return self.pool.waitForDone(msecs)

    @Slot(str, str)
    def _on_error(self, persistence_key: str, details: str) -> None:
        self.failed_writes += 1
        self.write_failed.emit(persistence_key)
