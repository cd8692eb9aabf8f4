"""
Core Enumerations

Centralized enum definitions for consistent typing across the codebase.
Using StrEnum (Python 3.11+) for string-based enums that serialize naturally.
"""

from enum import StrEnum


class HeaderType(StrEnum):
    """How a cookie reached the browser."""

    REQUEST = "request"
    RESPONSE = "response"
    JAVASCRIPT = "javascript"

    @classmethod
    def http_types(cls) -> tuple["HeaderType", ...]:
        """Return header types set through HTTP headers."""
        return (cls.REQUEST, cls.RESPONSE)


class SameSite(StrEnum):
    """SameSite cookie attribute values."""

    NONE = "None"
    LAX = "Lax"
    STRICT = "Strict"


class CookiePriority(StrEnum):
    """Chromium cookie priority values."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class RetentionBucket(StrEnum):
    """Coarse classification of a cookie's remaining lifetime.

    Values double as the facet labels shown in the retention filter.
    """

    SESSION = "Session"
    SHORT = "Short Term (< 24h)"
    MEDIUM = "Medium Term (24h - 1 week)"
    LONG = "Long Term (1 week - 1 month)"
    EXTENDED = "Extended Term (> 1 month)"


class BlockedReason(StrEnum):
    """Reasons a browser refused to send or store a cookie.

    Mirrors the DevTools protocol ``CookieBlockedReason`` and
    ``SetCookieBlockedReason`` values.
    """

    SECURE_ONLY = "SecureOnly"
    NOT_ON_PATH = "NotOnPath"
    DOMAIN_MISMATCH = "DomainMismatch"
    SAME_SITE_STRICT = "SameSiteStrict"
    SAME_SITE_LAX = "SameSiteLax"
    SAME_SITE_UNSPECIFIED_TREATED_AS_LAX = "SameSiteUnspecifiedTreatedAsLax"
    SAME_SITE_NONE_INSECURE = "SameSiteNoneInsecure"
    USER_PREFERENCES = "UserPreferences"
    THIRD_PARTY_PHASEOUT = "ThirdPartyPhaseout"
    THIRD_PARTY_BLOCKED_IN_FIRST_PARTY_SET = "ThirdPartyBlockedInFirstPartySet"
    UNKNOWN_ERROR = "UnknownError"
    SCHEMEFUL_SAME_SITE_STRICT = "SchemefulSameSiteStrict"
    SCHEMEFUL_SAME_SITE_LAX = "SchemefulSameSiteLax"
    SCHEMEFUL_SAME_SITE_UNSPECIFIED_TREATED_AS_LAX = "SchemefulSameSiteUnspecifiedTreatedAsLax"
    SAME_PARTY_FROM_CROSS_PARTY_CONTEXT = "SamePartyFromCrossPartyContext"
    NAME_VALUE_PAIR_EXCEEDS_MAX_SIZE = "NameValuePairExceedsMaxSize"
    # Set-Cookie specific
    SYNTAX_ERROR = "SyntaxError"
    SCHEME_NOT_SUPPORTED = "SchemeNotSupported"
    OVERWRITE_SECURE = "OverwriteSecure"
    INVALID_DOMAIN = "InvalidDomain"
    INVALID_PREFIX = "InvalidPrefix"
    SAME_PARTY_CONFLICTS_WITH_OTHER_ATTRIBUTES = "SamePartyConflictsWithOtherAttributes"
    DISALLOWED_CHARACTER = "DisallowedCharacter"
    NO_COOKIE_CONTENT = "NoCookieContent"

    @classmethod
    def all_reasons(cls) -> tuple["BlockedReason", ...]:
        """Return every known block reason in declaration order."""
        return tuple(cls)
