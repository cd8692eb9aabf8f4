"""
Storage-changed notifications backed by Qt signals.

``StorageEvents.storage_changed`` is a bound signal, so it can be handed to
the listing controller as its storage-changed subscription directly.
``ReportWatcher`` emits it when the report file a panel was opened from is
rewritten by another process.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from PySide6.QtCore import QFileSystemWatcher, QObject, Signal

logger = logging.getLogger(__name__)


class StorageEvents(QObject):
    """Signals about the backing cookie store."""

    storage_changed = Signal()


class ReportWatcher(QObject):
    """Watch a report file and announce outside modifications."""

    def __init__(
        self,
        path: Path,
        events: StorageEvents,
        on_reload: Optional[Callable[[Path], object]] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.path = Path(path)
        self.events = events
        self.on_reload = on_reload
        self._watcher = QFileSystemWatcher(self)
        self._watcher.fileChanged.connect(self._on_file_changed)
        if self.path.exists():
            self._watcher.addPath(str(self.path))
        else:
            logger.warning("Report %s does not exist; not watching", self.path)

    def watched_files(self) -> list[str]:
        return list(self._watcher.files())

    def _on_file_changed(self, path: str) -> None:
        logger.info("Report %s changed on disk", path)
        # Editors replace files; re-add the path so later writes are seen too
        if path not in self._watcher.files() and Path(path).exists():
            self._watcher.addPath(path)
        if self.on_reload is not None:
            try:
                self.on_reload(Path(path))
            except (OSError, ValueError):
                logger.error("Failed to reload report %s", path, exc_info=True)
        self.events.storage_changed.emit()

    def stop(self) -> None:
        files = self._watcher.files()
        if files:
            self._watcher.removePaths(files)
