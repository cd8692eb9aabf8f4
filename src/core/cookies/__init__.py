"""Cookie listing engine: keying, facet filtering, persistence and selection."""

from .controller import CookieListingController, ListingState  # noqa: F401
from .cookie_filters import (  # noqa: F401
    BLOCKED_REASON_LIST,
    COOKIE_SEARCH_KEYS,
    build_cookie_filters,
    generic_persistence_key,
    specific_persistence_key,
)
from .facet_tree import build_facet_tree, create_key_path, toggle_filter  # noqa: F401
from .field_paths import MISSING, resolve_field_path  # noqa: F401
from .filtering import (  # noqa: F401
    FilterDefinition,
    compute_filter_options,
    filter_records,
    sort_records,
)
from .persistence import FilterPersistence  # noqa: F401
from .records import (  # noqa: F401
    CookieAnalytics,
    CookieRecord,
    CookieRecordError,
    ParsedCookie,
    compute_key,
)
from .retention import classify_retention  # noqa: F401
from .selection import SelectionState, next_index_after_delete  # noqa: F401
from .source import MemoryCookieSource  # noqa: F401
