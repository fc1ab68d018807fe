"""Tests for configuration loading and overrides."""

from __future__ import annotations

import logging

import pytest

from trctl.config.config import ConfigManager, init_config
from trctl.models import LogLevel
from trctl.utils.exceptions import ConfigurationError

pytestmark = [pytest.mark.unit, pytest.mark.config]


class TestLoading:
    """Test defaults, files and environment layering."""

    def test_defaults(self):
        config = ConfigManager().config

        assert config.rpc.host == "localhost"
        assert config.rpc.port == 9091
        assert config.rpc.url_path == "/transmission/rpc/"
        assert config.rpc.max_session_retries == 3
        assert config.units.size_base == 1000
        assert config.observability.log_level == LogLevel.WARNING

    def test_file_in_working_directory(self, tmp_path):
        (tmp_path / "trctl.toml").write_text(
            '[rpc]\nhost = "nas.local"\nport = 9092\nurl_path = "custom/rpc"\n'
        )

        manager = ConfigManager()

        assert manager.config_file == tmp_path / "trctl.toml"
        assert manager.config.rpc.host == "nas.local"
        assert manager.config.rpc.port == 9092
        assert manager.config.rpc.url_path == "/custom/rpc/"

    def test_explicit_file_must_exist(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Config file not found"):
            ConfigManager(tmp_path / "missing.toml")

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.toml"
        path.write_text('[rpc]\nhost = "from-file"\ntimeout = 10.0\n')
        monkeypatch.setenv("TRCTL_HOST", "from-env")
        monkeypatch.setenv("TRCTL_USE_SSL", "yes")
        monkeypatch.setenv("TRCTL_BLOCKLIST_TIMEOUT", "120.5")
        monkeypatch.setenv("TRCTL_LOG_LEVEL", "debug")

        config = ConfigManager(path).config

        assert config.rpc.host == "from-env"
        assert config.rpc.use_ssl is True
        assert config.rpc.timeout == 10.0
        assert config.rpc.blocklist_timeout == 120.5
        assert config.observability.log_level == LogLevel.DEBUG

    def test_auth_from_environment_stays_a_string(self, monkeypatch):
        monkeypatch.setenv("TRCTL_AUTH", "1234")

        assert ConfigManager().config.rpc.auth == "1234"

    def test_invalid_value_is_configuration_error(self, monkeypatch):
        monkeypatch.setenv("TRCTL_PORT", "70000")

        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            ConfigManager()

    def test_invalid_unit_base(self, tmp_path):
        path = tmp_path / "units.toml"
        path.write_text("[units]\nsize_base = 1500\n")

        with pytest.raises(ConfigurationError):
            ConfigManager(path)

    def test_unreadable_toml_falls_back_to_defaults(self, tmp_path, caplog):
        path = tmp_path / "broken.toml"
        path.write_text("[rpc\nhost = ")

        with caplog.at_level(logging.WARNING):
            config = ConfigManager(path).config

        assert config.rpc.host == "localhost"
        assert "Failed to load config file" in caplog.text


class TestOverrides:
    """Test command-line overrides."""

    def test_none_values_are_ignored(self, monkeypatch):
        monkeypatch.setenv("TRCTL_HOST", "from-env")
        manager = ConfigManager()

        config = manager.apply_overrides({"rpc": {"host": None, "debug": True}})

        assert config.rpc.host == "from-env"
        assert config.rpc.debug is True
        assert manager.config is config

    def test_invalid_override(self):
        manager = ConfigManager()

        with pytest.raises(ConfigurationError):
            manager.apply_overrides({"rpc": {"max_session_retries": 99}})

    def test_init_config_reads_file(self, tmp_path):
        path = tmp_path / "other.toml"
        path.write_text('[rpc]\nhost = "other-host"\n')

        manager = init_config(path)

        assert manager.config.rpc.host == "other-host"


class TestLoggingSetup:
    """Test how the configuration drives logging."""

    def test_debug_flag_forces_debug_level(self):
        manager = ConfigManager()
        manager.apply_overrides({"rpc": {"debug": True}})

        manager.setup_logging()

        assert logging.getLogger("trctl").level == logging.DEBUG
        assert manager.config.observability.log_level == LogLevel.WARNING

    def test_configured_level_without_debug(self, monkeypatch):
        monkeypatch.setenv("TRCTL_LOG_LEVEL", "INFO")
        manager = ConfigManager()

        manager.setup_logging()

        assert logging.getLogger("trctl").level == logging.INFO
