from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

DEFAULT_SEARCH_KEYS = ["parsed_cookie.name", "parsed_cookie.domain"]


@dataclass(slots=True)
class LoggingConfig:
    """Logging configuration from config.yml."""

    level: str = "INFO"
    app_log_max_mb: int = 10
    app_log_backup_count: int = 3
    console: bool = True


@dataclass(slots=True)
class PanelConfig:
    """Cookie panel configuration from config.yml."""

    persistence_key_prefix: str = "cookieListing"
    preferences_db: str = "preferences.sqlite"
    search_keys: List[str] = field(default_factory=lambda: list(DEFAULT_SEARCH_KEYS))


@dataclass(slots=True)
class AppConfig:
    """Top-level configuration resolved from disk."""

    base_dir: Path
    logs_dir: Path
    data_dir: Path
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    panel: PanelConfig = field(default_factory=PanelConfig)

    @property
    def preferences_path(self) -> Path:
        """Location of the SQLite file holding saved filter preferences."""
        return self.data_dir / self.panel.preferences_db

    def to_json(self) -> str:
        """Serialize the configuration into a JSON string for diagnostics."""
        data = {
            "logs_dir": str(self.logs_dir),
            "data_dir": str(self.data_dir),
            "logging_level": self.logging.level,
            "persistence_key_prefix": self.panel.persistence_key_prefix,
            "search_keys": list(self.panel.search_keys),
        }
        return json.dumps(data, indent=2, sort_keys=True)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        content = yaml.safe_load(handle) or {}
        if not isinstance(content, dict):
            raise ValueError(f"Config file {path} must contain a mapping at the top level.")
        return content


def load_app_config(base_dir: Path) -> AppConfig:
    """Load application configuration from disk, providing sensible defaults."""

    config_yaml = base_dir / "config" / "config.yml"
    config_overrides = _load_yaml(config_yaml)

    # Frozen builds cannot write next to the executable.
    if getattr(sys, "frozen", False):
        state_root = Path.home() / ".config" / "cookiesifter"
    else:
        state_root = base_dir
    logs_dir = state_root / "logs"
    data_dir = state_root / "data"
    logs_dir.mkdir(parents=True, exist_ok=True)
    data_dir.mkdir(parents=True, exist_ok=True)

    logging_cfg = config_overrides.get("logging", {}) or {}
    logging_config = LoggingConfig(
        level=logging_cfg.get("level", "INFO"),
        app_log_max_mb=logging_cfg.get("app_log_max_mb", 10),
        app_log_backup_count=logging_cfg.get("app_log_backup_count", 3),
        console=logging_cfg.get("console", True),
    )

    panel_cfg = config_overrides.get("panel", {}) or {}
    search_keys = panel_cfg.get("search_keys") or list(DEFAULT_SEARCH_KEYS)
    panel_config = PanelConfig(
        persistence_key_prefix=panel_cfg.get("persistence_key_prefix", "cookieListing"),
        preferences_db=panel_cfg.get("preferences_db", "preferences.sqlite"),
        search_keys=[str(key) for key in search_keys],
    )

    return AppConfig(
        base_dir=base_dir,
        logs_dir=logs_dir,
        data_dir=data_dir,
        logging=logging_config,
        panel=panel_config,
    )
