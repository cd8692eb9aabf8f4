"""
Cookie record model and record identity.

A ``CookieRecord`` is one tracked cookie as observed in an inspected tab.
Identity is derived from ``(name, domain, path)`` by ``compute_key`` and is
stable across re-fetches, so a later snapshot can be matched against an
earlier one.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from datetime import datetime
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from core.enums import HeaderType

SESSION_MARKER = "Session"
KEY_SEPARATOR = ";"

__all__ = [
    "CookieAnalytics",
    "CookieRecord",
    "CookieRecordError",
    "ParsedCookie",
    "SESSION_MARKER",
    "compute_key",
    "dedupe_records",
]


class CookieRecordError(ValueError):
    """Raised when raw input cannot be turned into a cookie record."""


@dataclass(slots=True)
class ParsedCookie:
    """Intrinsic cookie attributes."""

    name: str
    value: str = ""
    domain: str = ""
    path: str = "/"
    expires: Any = SESSION_MARKER
    httponly: bool = False
    secure: bool = False
    samesite: Optional[str] = None
    priority: Optional[str] = None
    size: Optional[int] = None
    partition_key: Optional[str] = None

    def __post_init__(self) -> None:
        if self.size is None:
            self.size = len(self.name) + len(self.value or "")

    @property
    def is_session(self) -> bool:
        return is_session_marker(self.expires)


@dataclass(slots=True)
class CookieAnalytics:
    """Known-cookie classification (e.g. from the Open Cookie Database)."""

    category: Optional[str] = None
    platform: Optional[str] = None
    description: Optional[str] = None


@dataclass(slots=True)
class CookieRecord:
    """One cookie row in the listing."""

    parsed_cookie: ParsedCookie
    header_type: Optional[str] = None
    is_first_party: Optional[bool] = None
    blocked_reasons: Tuple[str, ...] = ()
    analytics: Optional[CookieAnalytics] = None
    frame_ids: Tuple[str, ...] = ()
    highlighted: bool = False

    @property
    def key(self) -> str:
        return compute_key(self)

    def with_highlight(self, highlighted: bool) -> "CookieRecord":
        """Return a copy carrying the given highlight flag."""
        if self.highlighted == highlighted:
            return self
        return replace(self, highlighted=highlighted)

    def to_dict(self) -> Dict[str, Any]:
        """Snake_case mapping of the record, suitable for JSON output."""
        data = asdict(self)
        expires = data["parsed_cookie"]["expires"]
        if isinstance(expires, datetime):
            data["parsed_cookie"]["expires"] = expires.isoformat()
        data["blocked_reasons"] = list(self.blocked_reasons)
        data["frame_ids"] = list(self.frame_ids)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CookieRecord":
        """
        Build a record from a report/extension mapping.

        Both the camelCase shape written by the analysis tooling
        (``parsedCookie``, ``headerType``, ``isFirstParty``, ...) and the
        snake_case shape produced by ``to_dict`` are accepted.

        Raises:
            CookieRecordError: if the cookie attributes or name are missing
        """
        if not isinstance(data, Mapping):
            raise CookieRecordError(f"Cookie entry must be a mapping, got {type(data).__name__}")

        raw_cookie = _first(data, "parsed_cookie", "parsedCookie")
        if not isinstance(raw_cookie, Mapping):
            raise CookieRecordError("Cookie entry has no parsedCookie mapping")
        name = raw_cookie.get("name")
        if not name:
            raise CookieRecordError("Cookie entry has no name")

        expires = _first(raw_cookie, "expires", "expirationDate")
        parsed = ParsedCookie(
            name=str(name),
            value=str(raw_cookie.get("value") or ""),
            domain=str(raw_cookie.get("domain") or ""),
            path=str(raw_cookie.get("path") or "/"),
            expires=SESSION_MARKER if expires in (None, "", 0) else expires,
            httponly=_as_bool(_first(raw_cookie, "httponly", "httpOnly")),
            secure=_as_bool(raw_cookie.get("secure")),
            samesite=_first(raw_cookie, "samesite", "sameSite"),
            priority=raw_cookie.get("priority"),
            size=raw_cookie.get("size"),
            partition_key=_first(raw_cookie, "partition_key", "partitionKey"),
        )

        raw_analytics = data.get("analytics")
        analytics = None
        if isinstance(raw_analytics, Mapping):
            analytics = CookieAnalytics(
                category=raw_analytics.get("category"),
                platform=raw_analytics.get("platform"),
                description=raw_analytics.get("description"),
            )

        header_type = _first(data, "header_type", "headerType")
        first_party = _first(data, "is_first_party", "isFirstParty")
        return cls(
            parsed_cookie=parsed,
            header_type=str(header_type) if header_type else None,
            is_first_party=None if first_party is None else _as_bool(first_party),
            blocked_reasons=_as_labels(_first(data, "blocked_reasons", "blockedReasons")),
            analytics=analytics,
            frame_ids=_as_labels(_first(data, "frame_ids", "frameIdList")),
        )

    @property
    def set_via_http(self) -> bool:
        return self.header_type in HeaderType.http_types()


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "first party")
    return bool(value)


def _first(data: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in data and data[name] is not None:
            return data[name]
    return None


def _as_labels(value: Any) -> Tuple[str, ...]:
    """A lone scalar is one label, not a sequence of characters."""
    if value is None or value == "":
        return ()
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(str(item) for item in value if item is not None)
    return (str(value),)


def is_session_marker(value: Any) -> bool:
    """True for the literal session marker (case-insensitive)."""
    return isinstance(value, str) and value.strip().lower() == SESSION_MARKER.lower()


def _escape(part: str) -> str:
    return part.replace("\\", "\\\\").replace(KEY_SEPARATOR, "\\" + KEY_SEPARATOR)


def compute_key(record: Any) -> str:
    """
    Return the identity key of a cookie.

    The key is ``name;domain;path`` with backslash escaping, so distinct
    tuples never produce the same key. Accepts a ``CookieRecord``, a
    ``ParsedCookie`` or a mapping with those three fields.
    """
    cookie = record.parsed_cookie if isinstance(record, CookieRecord) else record
    if isinstance(cookie, Mapping):
        parts = (cookie.get("name"), cookie.get("domain"), cookie.get("path"))
    else:
        parts = (
            getattr(cookie, "name", None),
            getattr(cookie, "domain", None),
            getattr(cookie, "path", None),
        )
    return KEY_SEPARATOR.join(_escape("" if part is None else str(part)) for part in parts)


def dedupe_records(records: Iterable[CookieRecord]) -> Dict[str, CookieRecord]:
    """
    Index records by key, keeping the last occurrence of each identity.

    Frame membership of duplicates is merged so a cookie seen through two
    ingestion paths still belongs to every frame it was observed in.
    """
    result: Dict[str, CookieRecord] = {}
    for record in records:
        key = compute_key(record)
        previous = result.get(key)
        if previous is not None and previous.frame_ids != record.frame_ids:
            merged = tuple(dict.fromkeys(previous.frame_ids + record.frame_ids))
            record = replace(record, frame_ids=merged)
        result[key] = record
    return result
