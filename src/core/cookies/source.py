"""
In-memory cookie source partitioned by frame.

``MemoryCookieSource`` plays both external roles the listing needs: it hands
out the records of a frame and it accepts delete requests. The ``changed``
signal fires after every mutation.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from PySide6.QtCore import QObject, Signal

from .records import CookieRecord, CookieRecordError, dedupe_records

logger = logging.getLogger(__name__)


class MemoryCookieSource(QObject):
    """Cookies of one inspected tab, indexed by record key."""

    changed = Signal()

    def __init__(self, records: Iterable[CookieRecord] = (), parent: Optional[QObject] = None):
        super().__init__(parent)
        self._records: Dict[str, CookieRecord] = dedupe_records(records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: str) -> bool:
        return key in self._records

    # ─── Reading ──────────────────────────────────────────────────────

    def cookies_for_frame(self, frame: Optional[str] = None) -> Dict[str, CookieRecord]:
        """
        Records observed in ``frame`` keyed by record key.

        ``None`` returns every record of the tab.
        """
        if frame is None:
            return dict(self._records)
        return {key: record for key, record in self._records.items() if frame in record.frame_ids}

    def frames(self) -> List[str]:
        """Frame ids in first-seen order."""
        seen: Dict[str, None] = {}
        for record in self._records.values():
            for frame in record.frame_ids:
                seen.setdefault(frame, None)
        return list(seen)

    # ─── Writing ──────────────────────────────────────────────────────

    def replace(self, records: Iterable[CookieRecord]) -> None:
        """Swap in a fresh snapshot of the tab's cookies."""
        self._records = dedupe_records(records)
        self.changed.emit()

    def delete(self, key: str) -> bool:
        """Remove one cookie; an unknown key is a no-op."""
        if key not in self._records:
            logger.debug("Delete of unknown cookie key %r ignored", key)
            return False
        del self._records[key]
        self.changed.emit()
        return True

    def delete_all(self, frame: Optional[str] = None) -> int:
        """Remove every cookie, or every cookie observed in ``frame``."""
        doomed = list(self.cookies_for_frame(frame))
        for key in doomed:
            del self._records[key]
        if doomed:
            self.changed.emit()
        return len(doomed)

    # ─── Reports ──────────────────────────────────────────────────────

    def load_report(self, path: Path) -> int:
        """
        Load the cookies of a JSON report and replace the current snapshot.

        Accepted shapes: a list of cookie entries, or an object whose
        ``cookies`` member is a list or a key->entry mapping. Entries
        without cookie attributes are logged and skipped.

        Returns:
            Number of records loaded
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        records = list(parse_report_entries(data))
        self.replace(records)
        logger.info("Loaded %d cookies from %s", len(self._records), path)
        return len(self._records)


def parse_report_entries(data: Any) -> Iterable[CookieRecord]:
    """Yield records from a decoded report, skipping malformed entries."""
    entries: Any = data
    if isinstance(data, Mapping):
        entries = data.get("cookies", data.get("tabCookies", []))
    if isinstance(entries, Mapping):
        entries = list(entries.values())
    if not isinstance(entries, list):
        logger.warning("Report has no cookie list (got %s)", type(entries).__name__)
        return

    for position, entry in enumerate(entries):
        if isinstance(entry, Mapping) and "parsedCookie" not in entry and "parsed_cookie" not in entry:
            entry = _wrap_flat_entry(entry)
        try:
            yield CookieRecord.from_dict(entry)
        except CookieRecordError as exc:
            logger.warning("Skipping cookie entry %d: %s", position, exc)


def _wrap_flat_entry(entry: Mapping[str, Any]) -> Dict[str, Any]:
    """Flat CLI report rows carry cookie and analytics fields side by side."""
    wrapped: Dict[str, Any] = {
        "parsedCookie": dict(entry),
        "isFirstParty": entry.get("isFirstParty"),
        "headerType": entry.get("headerType"),
        "blockedReasons": entry.get("blockedReasons"),
        "frameIdList": entry.get("frameIdList"),
    }
    if entry.get("category") or entry.get("platform"):
        wrapped["analytics"] = {
            "category": entry.get("category"),
            "platform": entry.get("platform"),
            "description": entry.get("description"),
        }
    return wrapped

