"""
Tests for the cookie facet configuration.
"""

from core.cookies import (
    BLOCKED_REASON_LIST,
    build_cookie_filters,
    generic_persistence_key,
    specific_persistence_key,
)
from core.enums import RetentionBucket


class TestBuildCookieFilters:

    def test_facets_in_display_order(self):
        definitions = build_cookie_filters()
        assert [d.title for d in definitions.values()] == [
            "Category",
            "Scope",
            "Domain",
            "HttpOnly",
            "SameSite",
            "Secure",
            "Path",
            "Retention Period",
            "Platform",
            "Cookie Blocked Reasons",
            "Set Via",
            "Priority",
        ]

    def test_only_blocked_reasons_is_generic(self):
        generic = [k for k, d in build_cookie_filters().items() if d.use_generic_persistence_key]
        assert generic == ["blocked_reasons"]

    def test_static_and_dynamic_facets(self):
        definitions = build_cookie_filters()
        assert not definitions["analytics.category"].has_static_filter_values
        assert definitions["parsed_cookie.expires"].static_values == tuple(b.value for b in RetentionBucket)
        assert definitions["blocked_reasons"].static_values == BLOCKED_REASON_LIST

    def test_custom_blocked_reasons(self):
        definitions = build_cookie_filters(blocked_reasons=["SecureOnly"])
        assert definitions["blocked_reasons"].static_values == ("SecureOnly",)


class TestPersistenceKeys:

    def test_specific_key_per_frame(self):
        assert specific_persistence_key("https://a.test") == "cookieListing#https://a.test"
        assert specific_persistence_key("main", prefix="inspector") == "inspector#main"

    def test_all_frames_key_differs_from_generic(self):
        assert specific_persistence_key(None) == "cookieListing#*"
        assert specific_persistence_key(None) != generic_persistence_key()
        assert generic_persistence_key() == "cookieListing"
