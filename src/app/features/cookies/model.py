"""
Qt model for the cookie listing table.

Presents the controller's filtered, sorted view. The model owns no data of
its own; it resets whenever the controller reports a change.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt
from PySide6.QtGui import QBrush, QColor

from core.cookies import CookieListingController, CookieRecord, classify_retention, compute_key
from core.cookies.field_paths import MISSING, resolve_field_path
from core.enums import HeaderType
from core.timestamps import format_duration, now_ms, parse_expiry, to_epoch_ms

logger = logging.getLogger(__name__)

HIGHLIGHT_COLOR = QColor("#fff3c4")
KEY_ROLE = Qt.UserRole + 1


class CookieListingTableModel(QAbstractTableModel):
    """
    Qt model for cookies of the selected frame.

    Column keys are field paths, so a header click sorts by the same path
    the filters read.
    """

    COLUMNS = [
        "parsed_cookie.name",
        "is_first_party",
        "parsed_cookie.domain",
        "parsed_cookie.partition_key",
        "parsed_cookie.samesite",
        "analytics.category",
        "analytics.platform",
        "parsed_cookie.httponly",
        "parsed_cookie.secure",
        "parsed_cookie.value",
        "parsed_cookie.path",
        "parsed_cookie.expires",
        "parsed_cookie.priority",
        "parsed_cookie.size",
        "header_type",
    ]

    HEADERS = [
        "Name",
        "Scope",
        "Domain",
        "Partition Key",
        "SameSite",
        "Category",
        "Platform",
        "HttpOnly",
        "Secure",
        "Value",
        "Path",
        "Expires / Max-Age",
        "Priority",
        "Size",
        "Set Via",
    ]

    COL_NAME = 0
    COL_SCOPE = 1
    COL_HTTPONLY = 7
    COL_SECURE = 8
    COL_VALUE = 9
    COL_EXPIRES = 11
    COL_SIZE = 13
    COL_SET_VIA = 14

    def __init__(self, controller: CookieListingController, parent=None):
        super().__init__(parent)
        self.controller = controller
        self._rows: List[CookieRecord] = controller.filtered_records
        controller.changed.connect(self._on_controller_changed)

    def detach(self) -> None:
        """Stop following the controller."""
        try:
            self.controller.changed.disconnect(self._on_controller_changed)
        except ValueError:
            logger.debug("Model was not attached to the controller")

    def _on_controller_changed(self) -> None:
        self.beginResetModel()
        self._rows = self.controller.filtered_records
        self.endResetModel()

    # Row helpers

    def key_for_row(self, row: int) -> Optional[str]:
        if not 0 <= row < len(self._rows):
            return None
        return compute_key(self._rows[row])

    def row_for_key(self, key: Optional[str]) -> int:
        if key is None:
            return -1
        for row, record in enumerate(self._rows):
            if compute_key(record) == key:
                return row
        return -1

    def get_row_data(self, index: QModelIndex) -> Optional[CookieRecord]:
        """Get the record for a given index."""
        if not index.isValid() or not (0 <= index.row() < len(self._rows)):
            return None
        return self._rows[index.row()]

    # Qt interface methods

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        """Return number of rows."""
        if parent.isValid():
            return 0
        return len(self._rows)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        """Return number of columns."""
        return len(self.HEADERS)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole) -> Any:
        """Return data for given index and role."""
        record = self.get_row_data(index)
        if record is None:
            return None
        col = index.column()

        if role == Qt.DisplayRole:
            return self._display(record, col)

        elif role == Qt.ToolTipRole:
            if col == self.COL_VALUE:
                return record.parsed_cookie.value
            elif col == self.COL_EXPIRES:
                return self._expiry_tooltip(record)

        elif role == Qt.BackgroundRole:
            if record.highlighted:
                return QBrush(HIGHLIGHT_COLOR)

        elif role == Qt.TextAlignmentRole:
            if col in (self.COL_HTTPONLY, self.COL_SECURE, self.COL_SIZE):
                return Qt.AlignCenter

        elif role == KEY_ROLE:
            return compute_key(record)

        return None

    def headerData(self, section: int, orientation, role: int = Qt.DisplayRole):
        """Return header data."""
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return None

    def sort(self, column: int, order: Qt.SortOrder = Qt.AscendingOrder) -> None:
        """Delegate sorting to the controller so it is persisted."""
        if not 0 <= column < len(self.COLUMNS):
            return
        self.controller.set_sorting(self.COLUMNS[column], descending=order == Qt.DescendingOrder)

    # Formatting

    def _display(self, record: CookieRecord, col: int) -> str:
        value = resolve_field_path(record, self.COLUMNS[col])
        if col == self.COL_SCOPE:
            if value is MISSING:
                return ""
            return "First Party" if value else "Third Party"
        if col in (self.COL_HTTPONLY, self.COL_SECURE):
            return "✓" if value is True else ""
        if col == self.COL_VALUE:
            text = "" if value is MISSING else str(value)
            # Truncate long values
            if len(text) > 50:
                return text[:47] + "..."
            return text
        if col == self.COL_SET_VIA:
            if value == HeaderType.JAVASCRIPT:
                return "JS"
            return "HTTP" if value in HeaderType.http_types() else ""
        if value is MISSING:
            return ""
        if col == self.COL_EXPIRES and not isinstance(value, str):
            expires = parse_expiry(value)
            return expires.isoformat() if expires else str(value)
        return str(value)

    def _expiry_tooltip(self, record: CookieRecord) -> str:
        expires = record.parsed_cookie.expires
        bucket = classify_retention(expires)
        if bucket is None:
            return f"Unrecognised expiry: {expires}"
        moment = parse_expiry(expires)
        if moment is None:
            return bucket.value
        remaining = (to_epoch_ms(moment) - now_ms()) / 1000
        if remaining <= 0:
            return f"{bucket.value} (expired)"
        return f"{bucket.value}, expires in {format_duration(remaining)}"
