"""
Tests for application configuration loading.
"""

import json

import pytest

from core.config import DEFAULT_SEARCH_KEYS, load_app_config


class TestLoadAppConfig:

    def test_defaults_without_file(self, tmp_path):
        config = load_app_config(tmp_path)

        assert config.logging.level == "INFO"
        assert config.panel.persistence_key_prefix == "cookieListing"
        assert config.panel.search_keys == DEFAULT_SEARCH_KEYS
        assert config.logs_dir.is_dir()
        assert config.preferences_path == tmp_path / "data" / "preferences.sqlite"

    def test_overrides(self, config_base_dir):
        config = load_app_config(config_base_dir)

        assert config.logging.level == "DEBUG"
        assert config.logging.app_log_max_mb == 2
        assert config.logging.app_log_backup_count == 3
        assert config.panel.persistence_key_prefix == "inspector"
        assert config.panel.search_keys == ["parsed_cookie.name", "parsed_cookie.value"]

    def test_non_mapping_rejected(self, tmp_path):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "config.yml").write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_app_config(tmp_path)

    def test_empty_file(self, tmp_path):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "config.yml").write_text("", encoding="utf-8")
        assert load_app_config(tmp_path).logging.console is True

    def test_to_json(self, config_base_dir):
        data = json.loads(load_app_config(config_base_dir).to_json())
        assert data["persistence_key_prefix"] == "inspector"
        assert data["logging_level"] == "DEBUG"
