"""
Tests for the cookies panel widget.
"""

import pytest
from PySide6.QtCore import SIGNAL, Qt
from PySide6.QtWidgets import QLabel

from app.features.cookies import CookiesPanel
from app.features.cookies.dialog import CookieDetailsDialog

from tests.fixtures.cookies import make_cookie


@pytest.fixture
def panel(qtbot, controller):
    widget = CookiesPanel(controller)
    qtbot.addWidget(widget)
    widget.show()
    return widget


def selected_row(panel):
    rows = panel.table.selectionModel().selectedRows()
    return rows[0].row() if rows else -1


class TestCookiesPanel:

    def test_initial_state(self, panel):
        assert panel._model.rowCount() == 4
        assert panel.status_label.text() == "4 cookies"
        assert not panel.delete_btn.isEnabled()
        assert panel.delete_all_btn.isEnabled()
        assert not panel.clear_filters_btn.isEnabled()

    def test_search_filters_rows(self, panel):
        panel.search_edit.setText("tracker")
        assert panel._model.rowCount() == 1
        assert panel.status_label.text() == "1 of 4 cookies"

    def test_clear_filters_button(self, panel, controller):
        controller.toggle_filter("is_first_party", "Third Party", True)
        assert panel.clear_filters_btn.isEnabled()
        panel.clear_filters_btn.click()
        assert controller.selected_filters == {}
        assert panel._model.rowCount() == 4

    def test_table_selection_updates_controller(self, panel, controller):
        panel.table.selectRow(2)
        assert controller.selected_key == panel._model.key_for_row(2)
        assert panel.delete_btn.isEnabled()

    def test_controller_selection_updates_table(self, panel, controller):
        controller.select(panel._model.key_for_row(3))
        assert selected_row(panel) == 3
        controller.clear_selection()
        assert selected_row(panel) == -1

    def test_delete_selected_moves_to_next_row(self, panel, controller):
        following = panel._model.key_for_row(2)
        panel.table.selectRow(1)
        panel.delete_btn.click()

        assert panel._model.rowCount() == 3
        assert controller.selected_key == following
        assert selected_row(panel) == 1

    def test_delete_all(self, panel):
        panel.delete_all_btn.click()
        assert panel._model.rowCount() == 0
        assert not panel.delete_all_btn.isEnabled()
        assert panel.status_label.text() == "0 cookies"

    def test_frames(self, panel, controller, cookie_source):
        panel.set_frames(cookie_source.frames())
        assert panel.frame_combo.count() == 4
        assert panel.frame_combo.itemData(0) is None

        panel.frame_combo.setCurrentIndex(1)
        assert controller.frame == "main"
        assert panel._model.rowCount() == 3

    def test_header_click_cycles_sort(self, panel, controller):
        header = panel.table.horizontalHeader()

        header.sectionClicked.emit(0)
        assert controller.sorting == {"key": "parsed_cookie.name", "descending": False}
        assert header.sortIndicatorSection() == 0
        assert header.sortIndicatorOrder() == Qt.AscendingOrder

        header.sectionClicked.emit(0)
        assert controller.sorting == {"key": "parsed_cookie.name", "descending": True}

        header.sectionClicked.emit(0)
        assert controller.sorting is None

    def test_highlight_counted_in_status(self, panel, controller):
        controller.highlight(panel._model.key_for_row(0))
        assert panel.status_label.text() == "4 cookies (1 edited)"

    def test_teardown_detaches_views(self, panel, controller):
        panel.teardown()
        assert controller.receivers(SIGNAL("changed()")) == 0
        panel.teardown()


class TestCookieDetailsDialog:

    def test_shows_cookie_attributes(self, qtbot):
        record = make_cookie("sid", secure=True, category="Functional", blocked_reasons=("SecureOnly",))
        dialog = CookieDetailsDialog(record)
        qtbot.addWidget(dialog)

        texts = [label.text() for label in dialog.findChildren(QLabel)]
        assert dialog.windowTitle() == "Cookie Details"
        assert "sid" in texts
        assert "Functional" in texts
        assert "SecureOnly" in texts
        assert "Session" in texts
