"""Cookie listing panel: search bar, facet tree, table and status."""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from PySide6.QtCore import QModelIndex, Qt
from PySide6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QMenu,
    QPushButton,
    QSplitter,
    QTableView,
    QVBoxLayout,
    QWidget,
)

from core.cookies import CookieListingController
from .dialog import CookieDetailsDialog
from .facet_tree import FacetTreeWidget
from .model import CookieListingTableModel

logger = logging.getLogger(__name__)

ALL_FRAMES_LABEL = "All frames"


class CookiesPanel(QWidget):
    """Cookies of the inspected tab with facet filtering and deletion."""

    def __init__(self, controller: CookieListingController, parent=None):
        super().__init__(parent)
        self.controller = controller
        self._syncing_selection = False
        self._model = CookieListingTableModel(controller, self)

        self._setup_ui()
        controller.changed.connect(self._on_controller_changed)
        self._on_controller_changed()

    # ─── UI Construction ──────────────────────────────────────────────

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)

        top_bar = QHBoxLayout()
        top_bar.addWidget(QLabel("Frame:"))
        self.frame_combo = QComboBox()
        self.frame_combo.addItem(ALL_FRAMES_LABEL, None)
        self.frame_combo.currentIndexChanged.connect(self._on_frame_changed)
        top_bar.addWidget(self.frame_combo)

        self.search_edit = QLineEdit()
        self.search_edit.setPlaceholderText("Search by name or domain...")
        self.search_edit.setClearButtonEnabled(True)
        self.search_edit.setText(self.controller.search_query)
        self.search_edit.textChanged.connect(self.controller.set_search)
        top_bar.addWidget(self.search_edit, 1)

        self.clear_filters_btn = QPushButton("Clear Filters")
        self.clear_filters_btn.clicked.connect(self.controller.clear_filters)
        top_bar.addWidget(self.clear_filters_btn)

        self.delete_btn = QPushButton("Delete Selected")
        self.delete_btn.setToolTip("Delete selected cookie")
        self.delete_btn.clicked.connect(self._delete_selected)
        top_bar.addWidget(self.delete_btn)

        self.delete_all_btn = QPushButton("Delete All")
        self.delete_all_btn.setToolTip("Delete all cookies")
        self.delete_all_btn.clicked.connect(self._delete_all)
        top_bar.addWidget(self.delete_all_btn)
        layout.addLayout(top_bar)

        splitter = QSplitter(Qt.Horizontal)
        self.facet_tree = FacetTreeWidget(self.controller)
        splitter.addWidget(self.facet_tree)

        self.table = QTableView()
        self.table.setModel(self._model)
        self.table.setSelectionBehavior(QTableView.SelectRows)
        self.table.setSelectionMode(QTableView.SingleSelection)
        self.table.setContextMenuPolicy(Qt.CustomContextMenu)
        self.table.customContextMenuRequested.connect(self._show_context_menu)
        self.table.doubleClicked.connect(self._view_details)
        self.table.selectionModel().currentRowChanged.connect(self._on_current_row_changed)

        header = self.table.horizontalHeader()
        header.setSectionResizeMode(QHeaderView.Interactive)
        header.setStretchLastSection(True)
        header.setSectionsClickable(True)
        header.setSortIndicatorShown(True)
        header.sectionClicked.connect(self._on_header_clicked)
        splitter.addWidget(self.table)
        splitter.setStretchFactor(1, 4)
        layout.addWidget(splitter, 1)

        self.status_label = QLabel("0 cookies")
        layout.addWidget(self.status_label)

    def set_frames(self, frames: Iterable[str]) -> None:
        """Offer the given frame ids in the frame selector."""
        current = self.controller.frame
        self.frame_combo.blockSignals(True)
        try:
            self.frame_combo.clear()
            self.frame_combo.addItem(ALL_FRAMES_LABEL, None)
            for frame in frames:
                self.frame_combo.addItem(frame, frame)
            index = self.frame_combo.findData(current)
            self.frame_combo.setCurrentIndex(max(index, 0))
        finally:
            self.frame_combo.blockSignals(False)

    def teardown(self) -> None:
        """Detach every view from the controller."""
        try:
            self.controller.changed.disconnect(self._on_controller_changed)
        except ValueError:
            logger.debug("Panel already detached")
        self._model.detach()
        self.facet_tree.detach()

    # ─── Controller → view ────────────────────────────────────────────

    def _on_controller_changed(self) -> None:
        self._sync_selection()
        self._sync_sort_indicator()
        self.delete_btn.setEnabled(self.controller.can_delete_selected)
        self.delete_all_btn.setEnabled(self._model.rowCount() > 0)
        self.clear_filters_btn.setEnabled(bool(self.controller.selected_filters))
        self._update_status()

    def _sync_selection(self) -> None:
        row = self._model.row_for_key(self.controller.selected_key)
        self._syncing_selection = True
        try:
            if row >= 0:
                self.table.selectRow(row)
            else:
                self.table.clearSelection()
                self.table.setCurrentIndex(QModelIndex())
        finally:
            self._syncing_selection = False

    def _sync_sort_indicator(self) -> None:
        sorting = self.controller.sorting
        header = self.table.horizontalHeader()
        if not sorting or sorting["key"] not in self._model.COLUMNS:
            header.setSortIndicator(-1, Qt.AscendingOrder)
            return
        order = Qt.DescendingOrder if sorting["descending"] else Qt.AscendingOrder
        header.setSortIndicator(self._model.COLUMNS.index(sorting["key"]), order)

    def _update_status(self) -> None:
        shown = self._model.rowCount()
        total = len(self.controller.state.records)
        highlighted = sum(1 for r in self.controller.state.records.values() if r.highlighted)
        text = f"{shown} cookies" if shown == total else f"{shown} of {total} cookies"
        if highlighted:
            text += f" ({highlighted} edited)"
        self.status_label.setText(text)

    # ─── View → controller ────────────────────────────────────────────

    def _on_frame_changed(self, index: int) -> None:
        self.controller.set_frame(self.frame_combo.itemData(index))

    def _on_current_row_changed(self, current: QModelIndex, previous: QModelIndex) -> None:
        if self._syncing_selection:
            return
        self.controller.select(self._model.key_for_row(current.row()) if current.isValid() else None)

    def _on_header_clicked(self, column: int) -> None:
        key = self._model.COLUMNS[column]
        sorting = self.controller.sorting
        if sorting and sorting["key"] == key:
            if sorting["descending"]:
                # Third click restores source order
                self.controller.set_sorting(None)
            else:
                self.controller.set_sorting(key, descending=True)
        else:
            self.controller.set_sorting(key)

    def _delete_selected(self) -> None:
        deleted = self.controller.delete_selected()
        logger.info("Deleted cookie %s", deleted)

    def _delete_all(self) -> None:
        self.controller.delete_all()
        logger.info("Deleted all cookies")

    # ─── Context Menu & Details ──────────────────────────────────────

    def _show_context_menu(self, position) -> None:
        index = self.table.indexAt(position)
        record = self._model.get_row_data(index)
        if record is None:
            return
        key = self._model.key_for_row(index.row())
        self.controller.select(key)

        menu = QMenu(self)
        view_action = menu.addAction("View Details")
        view_action.triggered.connect(lambda: self._view_details(index))
        label = "Remove Highlight" if record.highlighted else "Highlight"
        highlight_action = menu.addAction(label)
        highlight_action.triggered.connect(
            lambda: self.controller.highlight(key, not record.highlighted)
        )
        menu.addSeparator()
        delete_action = menu.addAction("Delete")
        delete_action.triggered.connect(self._delete_selected)
        menu.exec(self.table.viewport().mapToGlobal(position))

    def _view_details(self, index: QModelIndex) -> Optional[CookieDetailsDialog]:
        record = self._model.get_row_data(index)
        if record is None:
            return None
        dialog = CookieDetailsDialog(record, parent=self)
        dialog.exec()
        return dialog
