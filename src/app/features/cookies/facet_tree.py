"""Checkable facet tree for the cookie listing."""
from __future__ import annotations

import logging
from typing import Dict, Optional, Set

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import QTreeWidget, QTreeWidgetItem

from core.cookies import CookieListingController, build_facet_tree, create_key_path

logger = logging.getLogger(__name__)

FACET_KEY_ROLE = Qt.UserRole + 1
LABEL_ROLE = Qt.UserRole + 2


class FacetTreeWidget(QTreeWidget):
    """
    Two-level tree: facets on top, their labels as checkable children.

    Checking a label toggles it in the controller; the tree is rebuilt from
    the controller's options after every change.
    """

    def __init__(self, controller: CookieListingController, parent=None):
        super().__init__(parent)
        self.controller = controller
        self._items: Dict[str, QTreeWidgetItem] = {}
        self._expanded: Set[str] = set()
        self._rebuilding = False
        self._handling_toggle = False

        self.setHeaderHidden(True)
        self.setColumnCount(1)
        self.itemChanged.connect(self._on_item_changed)
        self.itemExpanded.connect(lambda item: self._expanded.add(item.data(0, FACET_KEY_ROLE)))
        self.itemCollapsed.connect(lambda item: self._expanded.discard(item.data(0, FACET_KEY_ROLE)))
        controller.changed.connect(self._on_controller_changed)
        self.rebuild()

    def detach(self) -> None:
        try:
            self.controller.changed.disconnect(self._on_controller_changed)
        except ValueError:
            logger.debug("Facet tree was not attached to the controller")

    def _on_controller_changed(self) -> None:
        # Items must outlive the itemChanged emission that caused the change
        if self._handling_toggle:
            QTimer.singleShot(0, self.rebuild)
        else:
            self.rebuild()

    def rebuild(self) -> None:
        """Recreate items from the controller's current facet options."""
        tree = build_facet_tree(self.controller.definitions, self.controller.filter_options)
        self._rebuilding = True
        try:
            self.clear()
            self._items.clear()
            for facet_key, node in tree.items():
                selected_count = sum(1 for child in node["children"].values() if child["selected"])
                title = node["title"] if not selected_count else f"{node['title']} ({selected_count})"
                facet_item = QTreeWidgetItem([title])
                facet_item.setData(0, FACET_KEY_ROLE, facet_key)
                if node.get("description"):
                    facet_item.setToolTip(0, node["description"])
                self.addTopLevelItem(facet_item)
                self._items[facet_key] = facet_item

                for label, child in node["children"].items():
                    child_item = QTreeWidgetItem([label])
                    child_item.setData(0, FACET_KEY_ROLE, facet_key)
                    child_item.setData(0, LABEL_ROLE, label)
                    child_item.setFlags(child_item.flags() | Qt.ItemIsUserCheckable)
                    child_item.setCheckState(0, Qt.Checked if child["selected"] else Qt.Unchecked)
                    facet_item.addChild(child_item)

                facet_item.setExpanded(facet_key in self._expanded)
        finally:
            self._rebuilding = False

    def label_item(self, facet_key: str, label: str) -> Optional[QTreeWidgetItem]:
        facet_item = self._items.get(facet_key)
        if facet_item is None:
            return None
        for row in range(facet_item.childCount()):
            child = facet_item.child(row)
            if child.data(0, LABEL_ROLE) == label:
                return child
        return None

    def reveal(self, facet_key: str) -> bool:
        """Expand every node on the way to ``facet_key``."""
        tree = build_facet_tree(self.controller.definitions, self.controller.filter_options)
        path = create_key_path(tree, facet_key)
        if not path:
            return False
        for key in path:
            item = self._items.get(key)
            if item is not None:
                item.setExpanded(True)
        return True

    def _on_item_changed(self, item: QTreeWidgetItem, column: int) -> None:
        if self._rebuilding:
            return
        label = item.data(0, LABEL_ROLE)
        facet_key = item.data(0, FACET_KEY_ROLE)
        if label is None or facet_key is None:
            return
        checked = item.checkState(0) == Qt.Checked
        logger.debug("Facet %s label %r -> %s", facet_key, label, checked)
        self._handling_toggle = True
        try:
            self.controller.toggle_filter(facet_key, label, checked)
        finally:
            self._handling_toggle = False
