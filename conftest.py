import os
from pathlib import Path

import pytest


@pytest.fixture()
def report_path(tmp_path: Path) -> Path:
    """Write a small cookie report in the analysis CLI's JSON layout."""
    report = tmp_path / "data.json"
    report.write_text(
        """
        {
          "cookies": [
            {"parsedCookie": {"name": "sid", "domain": "example.com", "path": "/",
                              "value": "abc", "httpOnly": true, "secure": true,
                              "sameSite": "Lax", "expires": "Session"},
             "isFirstParty": true, "headerType": "response",
             "frameIdList": ["main"]},
            {"name": "_fbp", "domain": ".facebook.com", "path": "/", "value": "fb.1",
             "expires": "2099-01-01T00:00:00Z", "isFirstParty": "No",
             "category": "Marketing", "platform": "Facebook",
             "frameIdList": ["main", "https://www.facebook.com"]},
            {"parsedCookie": {"domain": "nameless.example"}}
          ]
        }
        """,
        encoding="utf-8",
    )
    return report


@pytest.fixture()
def config_base_dir(tmp_path: Path) -> Path:
    """Base directory with a config/config.yml override."""
    base = tmp_path / "base"
    (base / "config").mkdir(parents=True)
    (base / "config" / "config.yml").write_text(
        os.linesep.join(
            [
                "logging:",
                "  level: DEBUG",
                "  app_log_max_mb: 2",
                "panel:",
                "  persistence_key_prefix: inspector",
                "  search_keys: [parsed_cookie.name, parsed_cookie.value]",
            ]
        ),
        encoding="utf-8",
    )
    return base
