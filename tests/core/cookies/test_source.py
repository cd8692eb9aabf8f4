"""
Tests for the in-memory cookie source and report loading.
"""

import json

import pytest

from core.cookies import MemoryCookieSource, compute_key
from core.cookies.source import parse_report_entries

from tests.fixtures.cookies import make_cookie


class TestMemoryCookieSource:

    def test_cookies_for_frame(self, cookie_source):
        assert len(cookie_source.cookies_for_frame()) == 4
        main = cookie_source.cookies_for_frame("main")
        assert [r.parsed_cookie.name for r in main.values()] == ["session_id", "_ga", "ad_id"]
        assert cookie_source.cookies_for_frame("unknown") == {}

    def test_frames_first_seen_order(self, cookie_source):
        assert cookie_source.frames() == ["main", "https://ads.tracker.net", "https://widgets.example.com"]

    def test_delete_notifies(self, cookie_source, sample_cookies):
        calls = []
        cookie_source.changed.connect(lambda: calls.append(1))
        key = compute_key(sample_cookies[0])

        assert cookie_source.delete(key) is True
        assert key not in cookie_source
        assert calls == [1]

    def test_delete_unknown_is_noop(self, cookie_source):
        calls = []
        cookie_source.changed.connect(lambda: calls.append(1))
        assert cookie_source.delete("nope;nope;/") is False
        assert calls == []
        assert len(cookie_source) == 4

    def test_delete_all_for_frame(self, cookie_source):
        assert cookie_source.delete_all("https://widgets.example.com") == 1
        assert len(cookie_source) == 3
        assert cookie_source.delete_all() == 3
        assert len(cookie_source) == 0

    def test_replace_merges_frames_of_repeated_cookie(self, cookie_source):
        cookie_source.replace([
            make_cookie("session_id", "example.com", frames=("main",)),
            make_cookie("session_id", "example.com", frames=("iframe",)),
        ])
        assert len(cookie_source) == 1
        record = cookie_source.cookies_for_frame("iframe")
        assert [r.frame_ids for r in record.values()] == [("main", "iframe")]

    def test_replace(self, cookie_source):
        cookie_source.replace([make_cookie("only")])
        assert list(cookie_source.cookies_for_frame()) == ["only;example.com;/"]


class TestReports:

    def test_load_report(self, report_path, caplog):
        """Nested and flat entries load; nameless entries are skipped."""
        source = MemoryCookieSource()
        assert source.load_report(report_path) == 2

        records = source.cookies_for_frame()
        fbp = records["_fbp;.facebook.com;/"]
        assert fbp.is_first_party is False
        assert fbp.analytics.platform == "Facebook"
        assert fbp.frame_ids == ("main", "https://www.facebook.com")
        assert records["sid;example.com;/"].parsed_cookie.httponly is True
        assert "Skipping cookie entry 2" in caplog.text

    def test_load_report_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError):
            MemoryCookieSource().load_report(path)

    def test_plain_list_and_keyed_mapping(self):
        entry = {"parsedCookie": {"name": "a", "domain": "d"}}
        assert len(list(parse_report_entries([entry]))) == 1
        assert len(list(parse_report_entries({"tabCookies": {"a;d;/": entry}}))) == 1

    def test_unexpected_shape(self, caplog):
        assert list(parse_report_entries({"cookies": "nope"})) == []
        assert "no cookie list" in caplog.text

    def test_report_written_by_to_dict(self, tmp_path, sample_cookies):
        path = tmp_path / "export.json"
        path.write_text(json.dumps([r.to_dict() for r in sample_cookies]), encoding="utf-8")
        source = MemoryCookieSource()
        assert source.load_report(path) == 4
