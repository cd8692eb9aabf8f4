"""Cookie listing feature: table model, facet tree and panel widget."""

from .model import CookieListingTableModel
from .facet_tree import FacetTreeWidget
from .widget import CookiesPanel

__all__ = ["CookieListingTableModel", "CookiesPanel", "FacetTreeWidget"]
