"""Core layer of the cookie inspection panel (no widgets)."""

from .config import AppConfig, load_app_config  # noqa: F401
from .preferences import MemoryPreferenceStore, PreferenceStore, SqlitePreferenceStore  # noqa: F401
