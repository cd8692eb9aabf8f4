"""
Qt fixtures for the cookie panel GUI tests.

Every test under tests/gui runs on the offscreen platform and shares one
QApplication.
"""
import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Qt must be imported after the platform is chosen
from PySide6.QtWidgets import QApplication, QWidget

from core.cookies import CookieListingController


@pytest.fixture(scope="session")
def qapp():
    """Session-wide QApplication; pytest-qt owns its shutdown."""
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    yield app


@pytest.fixture
def qtbot(qapp, request):
    """Fresh QtBot per test that closes and schedules deletion of its widgets."""
    from pytestqt.qtbot import QtBot

    bot = QtBot(request)
    yield bot

    for widget in getattr(bot, "_widgets", []):
        try:
            if isinstance(widget, QWidget) and widget.isVisible():
                widget.close()
            widget.deleteLater()
        except RuntimeError:
            # C++ object already gone
            pass
    qapp.processEvents()


@pytest.fixture
def controller(cookie_source, preference_store):
    """Opened controller over the sample cookies, closed after the test."""
    controller = CookieListingController(cookie_source, store=preference_store)
    controller.open()
    yield controller
    controller.close()


def pytest_configure(config):
    config.addinivalue_line("markers", "gui_offscreen: GUI tests that run on the offscreen platform")
    config.addinivalue_line("markers", "gui_live: GUI tests that require a live display")


def pytest_collection_modifyitems(config, items):
    """Mark GUI tests gui_offscreen unless they say otherwise."""
    for item in items:
        if "tests/gui" not in str(item.fspath):
            continue
        if item.get_closest_marker("gui_live") or item.get_closest_marker("gui_offscreen"):
            continue
        item.add_marker(pytest.mark.gui_offscreen)
