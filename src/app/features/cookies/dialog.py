"""Cookie details dialog."""
from __future__ import annotations

from PySide6.QtWidgets import (
    QApplication,
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QTextEdit,
    QVBoxLayout,
)

from core.cookies import CookieRecord, classify_retention


def _yes_no(value) -> str:
    return "Yes" if value else "No"


class CookieDetailsDialog(QDialog):
    """Dialog showing full details for a cookie."""

    def __init__(self, record: CookieRecord, parent=None):
        """
        Initialize cookie details dialog.

        Args:
            record: Cookie record to show
            parent: Parent widget
        """
        super().__init__(parent)
        self.record = record

        self.setWindowTitle("Cookie Details")
        self.setModal(True)
        self.resize(550, 450)

        self._setup_ui()

    def _setup_ui(self) -> None:
        """Create UI layout."""
        cookie = self.record.parsed_cookie
        analytics = self.record.analytics
        layout = QVBoxLayout(self)

        form = QFormLayout()

        form.addRow("Name:", QLabel(cookie.name))
        form.addRow("Domain:", QLabel(cookie.domain or "N/A"))
        form.addRow("Path:", QLabel(cookie.path or "/"))
        form.addRow("Partition Key:", QLabel(cookie.partition_key or "N/A"))

        form.addRow("", QLabel(""))  # Spacer

        scope = "N/A"
        if self.record.is_first_party is not None:
            scope = "First Party" if self.record.is_first_party else "Third Party"
        form.addRow("Scope:", QLabel(scope))
        form.addRow("Set Via:", QLabel(self.record.header_type or "N/A"))
        form.addRow("Category:", QLabel((analytics and analytics.category) or "Uncategorized"))
        form.addRow("Platform:", QLabel((analytics and analytics.platform) or "Unknown"))

        form.addRow("", QLabel(""))  # Spacer

        form.addRow("Secure:", QLabel(_yes_no(cookie.secure)))
        form.addRow("HttpOnly:", QLabel(_yes_no(cookie.httponly)))
        form.addRow("SameSite:", QLabel(cookie.samesite or "unset"))
        form.addRow("Priority:", QLabel(cookie.priority or "N/A"))
        form.addRow("Size:", QLabel(str(cookie.size)))

        bucket = classify_retention(cookie.expires)
        form.addRow("Expires:", QLabel(str(cookie.expires)))
        form.addRow("Retention:", QLabel(bucket.value if bucket else "Unknown"))

        if self.record.blocked_reasons:
            form.addRow("Blocked:", QLabel(", ".join(self.record.blocked_reasons)))

        layout.addLayout(form)

        layout.addWidget(QLabel("Value:"))
        value_text = QTextEdit()
        value_text.setReadOnly(True)
        value_text.setMaximumHeight(80)
        value_text.setPlainText(cookie.value)
        layout.addWidget(value_text)

        button_layout = QHBoxLayout()

        copy_value_btn = QPushButton("Copy Value")
        copy_value_btn.clicked.connect(
            lambda: QApplication.clipboard().setText(cookie.value)
        )
        button_layout.addWidget(copy_value_btn)

        button_layout.addStretch()

        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.reject)
        button_layout.addWidget(close_btn)

        layout.addLayout(button_layout)
