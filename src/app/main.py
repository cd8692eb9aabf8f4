from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from PySide6.QtGui import QAction, QCloseEvent
from PySide6.QtWidgets import QApplication, QFileDialog, QMainWindow, QMessageBox

from core.app_version import get_app_version
from core.config import AppConfig, load_app_config
from core.cookies import CookieListingController, MemoryCookieSource
from core.logging import configure_logging, get_logger, level_from_name
from core.preferences import SqlitePreferenceStore

from .features.cookies import CookiesPanel
from .services.preference_writer import BackgroundPreferenceStore
from .services.storage_signal import ReportWatcher, StorageEvents

LOGGER = get_logger("app.main")


class MainWindow(QMainWindow):
    def __init__(self, app_config: AppConfig, report: Optional[Path] = None, frame: Optional[str] = None) -> None:
        super().__init__()
        self.app_config = app_config
        self.report_path: Optional[Path] = None
        self._watcher: Optional[ReportWatcher] = None

        self.setWindowTitle("CookieSifter")
        self.resize(1200, 720)

        self.store = BackgroundPreferenceStore(SqlitePreferenceStore(app_config.preferences_path), parent=self)
        self.store.write_failed.connect(self._on_write_failed)
        self.source = MemoryCookieSource()
        self.events = StorageEvents(self)
        self.controller = CookieListingController(
            self.source,
            store=self.store,
            storage_signal=self.events.storage_changed,
            search_keys=app_config.panel.search_keys,
            persistence_prefix=app_config.panel.persistence_key_prefix,
        )
        self.controller.open(frame)

        self.panel = CookiesPanel(self.controller, self)
        self.setCentralWidget(self.panel)
        self._setup_menu()

        if report is not None:
            self.open_report(report)

    def _setup_menu(self) -> None:
        file_menu = self.menuBar().addMenu("&File")

        open_action = QAction("&Open Report…", self)
        open_action.setShortcut("Ctrl+O")
        open_action.triggered.connect(self._choose_report)
        file_menu.addAction(open_action)

        reload_action = QAction("&Reload", self)
        reload_action.setShortcut("F5")
        reload_action.triggered.connect(self._reload_report)
        file_menu.addAction(reload_action)

        file_menu.addSeparator()
        quit_action = QAction("&Quit", self)
        quit_action.setShortcut("Ctrl+Q")
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

    def _choose_report(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Open Cookie Report", "", "JSON reports (*.json)")
        if path:
            self.open_report(Path(path))

    def _reload_report(self) -> None:
        if self.report_path is not None:
            self.open_report(self.report_path)

    def open_report(self, path: Path) -> bool:
        """Load a JSON cookie report and watch it for outside changes."""
        try:
            count = self.source.load_report(path)
        except (OSError, ValueError) as exc:
            LOGGER.error("Failed to open report %s: %s", path, exc, exc_info=True)
            QMessageBox.critical(self, "Open Report", f"Could not read {path}:\n{exc}")
            return False

        if self._watcher is not None:
            self._watcher.stop()
        self.report_path = Path(path)
        self._watcher = ReportWatcher(self.report_path, self.events, on_reload=self.source.load_report, parent=self)
        self.panel.set_frames(self.source.frames())
        self.setWindowTitle(f"CookieSifter - {self.report_path.name}")
        self.statusBar().showMessage(f"Loaded {count} cookies", 5000)
        return True

    def _on_write_failed(self, persistence_key: str) -> None:
        self.statusBar().showMessage(f"Could not save table settings ({persistence_key})", 5000)

    def closeEvent(self, event: QCloseEvent) -> None:
        if self._watcher is not None:
            self._watcher.stop()
        self.panel.teardown()
        self.controller.close()
        if not self.store.wait_for_done(5000):
            LOGGER.warning("Pending preference writes did not finish before exit")
        super().closeEvent(event)


def _parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="cookiesifter", description="Inspect cookies captured from a tab.")
    parser.add_argument("report", nargs="?", type=Path, help="JSON cookie report to open")
    parser.add_argument("--frame", help="Frame to select initially")
    parser.add_argument("--version", action="version", version=f"CookieSifter {get_app_version()}")
    # Qt consumes its own options; leave unknown ones to QApplication
    args, _ = parser.parse_known_args(argv)
    return args


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    args = _parse_args(argv)

    if getattr(sys, 'frozen', False):
        # Running in a PyInstaller bundle
        base_dir = Path(sys._MEIPASS)
    else:
        # Running from source
        base_dir = Path(__file__).resolve().parents[2]

    app_config = load_app_config(base_dir)
    configure_logging(
        app_config.logs_dir,
        level=level_from_name(app_config.logging.level),
        max_bytes=app_config.logging.app_log_max_mb * 1024 * 1024,
        backup_count=app_config.logging.app_log_backup_count,
        console=app_config.logging.console,
    )
    LOGGER.info("CookieSifter %s starting", get_app_version())

    app = QApplication([sys.argv[0], *argv])
    window = MainWindow(app_config, report=args.report, frame=args.frame)
    window.show()
    return app.exec()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
