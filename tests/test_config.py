"""Tests for configuration loading."""

import json
import logging
from pathlib import Path

import pytest

from config import Config, RemoteConfig, NotificationConfig, DEFAULT_DATA_DIR, load_config
from monitoring import ConfigurationError


class TestRemoteConfig:

    def test_disabled_by_default(self):
        config = RemoteConfig()
        assert config.enabled is False
        assert config.host is None

    def test_trailing_slash_and_host(self):
        config = RemoteConfig(base_url=" https://redmine.example.com:8443/ ")
        assert config.base_url == "https://redmine.example.com:8443"
        assert config.host == "redmine.example.com:8443"

    @pytest.mark.parametrize("url", ["redmine.example.com", "ftp://redmine.example.com", "https://"])
    def test_rejects_invalid_url(self, url):
        with pytest.raises(ValueError):
            RemoteConfig(base_url=url)


class TestConfigFromEnv:

    def test_defaults(self, monkeypatch):
        for name in ("REDMINE_BASE_URL", "SLACK_WEBHOOK_URL", "DATA_DIR", "PORT", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        config = Config.from_env()

        assert config.remote.enabled is False
        assert config.notification.enabled is False
        assert config.storage.data_dir == DEFAULT_DATA_DIR
        assert config.server.port == 3000
        assert config.logging.level == "INFO"

    def test_reads_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("REDMINE_BASE_URL", "https://redmine.example.com")
        monkeypatch.setenv("REDMINE_API_KEY", "abcdef123456")
        monkeypatch.setenv("REDMINE_TIMEOUT", "7")
        monkeypatch.setenv("SLACK_WEBHOOK_URL", "https://hooks.example.com/x")
        monkeypatch.setenv("DATA_DIR", str(tmp_path))
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("SERVER_DEBUG", "true")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        config = Config.from_env()

        assert config.remote.host == "redmine.example.com"
        assert config.remote.timeout == 7
        assert config.notification.enabled is True
        assert config.storage.schedule_file == Path(tmp_path) / "schedule.json"
        assert config.server.port == 8080
        assert config.server.debug is True
        assert config.logging.level == "DEBUG"


class TestConfigFromFile:

    def test_loads_sections(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "remote": {"base_url": "http://redmine.local", "page_size": 50},
            "storage": {"data_dir": str(tmp_path)},
            "server": {"port": 4000}
        }), encoding="utf-8")

        config = Config.from_file(str(path))

        assert config.remote.page_size == 50
        assert config.storage.data_dir == tmp_path
        assert config.server.port == 4000
        assert config.notification.webhook_url == ""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.from_file(str(tmp_path / "nope.json"))

    def test_invalid_format(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ValueError):
            Config.from_file(str(path))


class TestConfigHelpers:

    def test_to_dict_masks_secrets(self):
        config = Config(
            remote=RemoteConfig(base_url="https://redmine.example.com", api_key="abcdef123456"),
            notification=NotificationConfig(webhook_url="https://hooks.example.com/secret")
        )
        data = config.to_dict()

        assert data["remote"]["api_key"] == "abcd***"
        assert "secret" not in data["notification"]["webhook_url"]

    def test_setup_logging_with_file(self, tmp_path):
        config = Config()
        config.logging.level = "DEBUG"
        config.logging.file_path = str(tmp_path / "app.log")
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            config.setup_logging()
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 2
        finally:
            for handler in root.handlers[:]:
                root.removeHandler(handler)
                handler.close()
            for handler in saved_handlers:
                root.addHandler(handler)
            root.setLevel(saved_level)


class TestLoadConfig:

    def test_prefers_config_file(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config.json").write_text(json.dumps({"server": {"port": 5001}}), encoding="utf-8")
        assert load_config().server.port == 5001

    def test_invalid_environment(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("REDMINE_BASE_URL", "not a url")
        with pytest.raises(ConfigurationError):
            load_config()
