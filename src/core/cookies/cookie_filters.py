"""
Facet configuration of the cookie listing.

Builds the ``FilterDefinition`` set, search keys and persistence keys used
by the cookie table.
"""
from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from core.enums import BlockedReason, CookiePriority, HeaderType, RetentionBucket, SameSite

from .field_paths import MISSING
from .filtering import FilterDefinition
from .retention import retention_comparator

DEFAULT_PERSISTENCE_PREFIX = "cookieListing"
ALL_FRAMES = "*"

SCOPE_FIRST_PARTY = "First Party"
SCOPE_THIRD_PARTY = "Third Party"
SET_VIA_HTTP = "HTTP"
SET_VIA_JS = "JS"

COOKIE_SEARCH_KEYS = ("parsed_cookie.name", "parsed_cookie.domain")

BLOCKED_REASON_LIST = tuple(reason.value for reason in BlockedReason.all_reasons())


def _bool_label_comparator(true_label: str):
    def compare(value: Any, label: str) -> bool:
        if not isinstance(value, bool):
            return False
        return value == (label == true_label)

    return compare


def samesite_comparator(value: Any, label: str) -> bool:
    return isinstance(value, str) and value.lower() == label.lower()


def blocked_reason_comparator(value: Any, label: str) -> bool:
    if value is MISSING or not isinstance(value, (list, tuple, set, frozenset)):
        return False
    return label in value


def header_type_comparator(value: Any, label: str) -> bool:
    if label == SET_VIA_JS:
        return value == HeaderType.JAVASCRIPT
    if label == SET_VIA_HTTP:
        return value in HeaderType.http_types()
    return True


def build_cookie_filters(
    blocked_reasons: Optional[Sequence[str]] = None,
) -> Dict[str, FilterDefinition]:
    """
    Return the cookie facets keyed by field path, in display order.

    Args:
        blocked_reasons: Labels for the block-reason facet; defaults to
            every known reason
    """
    reasons = tuple(blocked_reasons) if blocked_reasons is not None else BLOCKED_REASON_LIST
    definitions = [
        FilterDefinition("analytics.category", "Category"),
        FilterDefinition(
            "is_first_party",
            "Scope",
            static_values=(SCOPE_FIRST_PARTY, SCOPE_THIRD_PARTY),
            comparator=_bool_label_comparator(SCOPE_FIRST_PARTY),
        ),
        FilterDefinition("parsed_cookie.domain", "Domain"),
        FilterDefinition(
            "parsed_cookie.httponly",
            "HttpOnly",
            static_values=("True", "False"),
            comparator=_bool_label_comparator("True"),
        ),
        FilterDefinition(
            "parsed_cookie.samesite",
            "SameSite",
            static_values=tuple(s.value for s in SameSite),
            comparator=samesite_comparator,
        ),
        FilterDefinition(
            "parsed_cookie.secure",
            "Secure",
            static_values=("True", "False"),
            comparator=_bool_label_comparator("True"),
        ),
        FilterDefinition("parsed_cookie.path", "Path"),
        FilterDefinition(
            "parsed_cookie.expires",
            "Retention Period",
            static_values=tuple(b.value for b in RetentionBucket),
            comparator=retention_comparator,
        ),
        FilterDefinition("analytics.platform", "Platform"),
        FilterDefinition(
            "blocked_reasons",
            "Cookie Blocked Reasons",
            static_values=reasons,
            comparator=blocked_reason_comparator,
            use_generic_persistence_key=True,
            description="Reason why the cookies were blocked.",
        ),
        FilterDefinition(
            "header_type",
            "Set Via",
            static_values=(SET_VIA_HTTP, SET_VIA_JS),
            comparator=header_type_comparator,
        ),
        FilterDefinition(
            "parsed_cookie.priority",
            "Priority",
            static_values=tuple(p.value for p in CookiePriority),
        ),
    ]
    return {definition.key: definition for definition in definitions}


def specific_persistence_key(frame: Optional[str], prefix: str = DEFAULT_PERSISTENCE_PREFIX) -> str:
    """Per-frame persistence key, e.g. ``cookieListing#https://example.com``."""
    return f"{prefix}#{frame or ALL_FRAMES}"


def generic_persistence_key(prefix: str = DEFAULT_PERSISTENCE_PREFIX) -> str:
    """Persistence key shared by every frame."""
    return prefix
