"""Configuration management for trctl.

Provides centralized configuration with TOML support, validation, and
hierarchical loading from defaults → config file → environment → CLI.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import toml

from trctl.models import Config, LogLevel
from trctl.utils.exceptions import ConfigurationError
from trctl.utils.logging_config import get_logger, setup_logging

logger = get_logger(__name__)

# Paths whose environment value is always kept as a string
_STRING_PATHS = frozenset(
    {
        "rpc.host",
        "rpc.url_path",
        "rpc.auth",
        "rpc.netrc",
        "observability.log_file",
        "observability.log_level",
    }
)


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_file: str | Path | None = None):
        """Initialize configuration manager.

        Args:
            config_file: Path to TOML config file. If None, searches for trctl.toml

        """
        self.config_file = self._find_config_file(config_file)
        self.config = self._load_config()

    def _find_config_file(
        self,
        config_file: str | Path | None,
    ) -> Path | None:
        """Find configuration file in standard locations."""
        if config_file:
            path = Path(config_file).expanduser()
            if not path.exists():
                msg = f"Config file not found: {path}"
                raise ConfigurationError(msg)
            return path

        search_paths = [
            Path.cwd() / "trctl.toml",
            Path.home() / ".config" / "trctl" / "trctl.toml",
            Path.home() / ".trctl.toml",
        ]

        for path in search_paths:
            if path.exists():
                return path

        return None

    def _load_config(self) -> Config:
        """Load configuration from file and environment."""
        config_data: dict[str, Any] = {}

        if self.config_file and self.config_file.exists():
            try:
                with open(self.config_file, encoding="utf-8") as f:
                    config_data.update(toml.load(f))
            except (OSError, toml.TomlDecodeError) as e:
                logger.warning(
                    "Failed to load config file %s: %s", self.config_file, e
                )

        env_config = self._get_env_config()
        config_data = self._merge_config(config_data, env_config)

        try:
            return Config(**config_data)
        except Exception as e:
            msg = f"Invalid configuration: {e}"
            raise ConfigurationError(msg) from e

    def _get_env_config(self) -> dict[str, Any]:
        """Get configuration from environment variables."""
        env_config: dict[str, Any] = {}

        env_mappings: dict[str, str] = {
            # RPC endpoint
            "TRCTL_HOST": "rpc.host",
            "TRCTL_PORT": "rpc.port",
            "TRCTL_URL_PATH": "rpc.url_path",
            "TRCTL_USE_SSL": "rpc.use_ssl",
            "TRCTL_AUTH": "rpc.auth",
            "TRCTL_NETRC": "rpc.netrc",
            "TRCTL_DEBUG": "rpc.debug",
            "TRCTL_TIMEOUT": "rpc.timeout",
            "TRCTL_BLOCKLIST_TIMEOUT": "rpc.blocklist_timeout",
            "TRCTL_MAX_SESSION_RETRIES": "rpc.max_session_retries",
            # Observability
            "TRCTL_LOG_LEVEL": "observability.log_level",
            "TRCTL_LOG_FILE": "observability.log_file",
        }

        def _parse_env_value(raw: str, path: str) -> bool | int | float | str:
            if path in _STRING_PATHS:
                return raw.upper() if path == "observability.log_level" else raw

            low = raw.lower()
            if low in {"true", "yes", "on"}:
                return True
            if low in {"false", "no", "off"}:
                return False
            try:
                if "." in raw:
                    return float(raw)
                return int(raw)
            except ValueError:
                return raw

        def _set_nested(d: dict[str, Any], path: str, value: Any) -> None:
            parts = path.split(".")
            cur = d
            for p in parts[:-1]:
                cur = cur.setdefault(p, {})
            cur[parts[-1]] = value

        for env_name, cfg_path in env_mappings.items():
            raw = os.getenv(env_name)
            if raw is None:
                continue
            _set_nested(env_config, cfg_path, _parse_env_value(raw, cfg_path))

        return env_config

    def _merge_config(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Merge configuration dictionaries recursively."""
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value

        return result

    def apply_overrides(self, overrides: dict[str, Any]) -> Config:
        """Layer command-line values on top of the loaded configuration.

        ``None`` values are ignored so unset CLI flags keep the file or
        environment value.
        """
        cleaned = {
            section: {k: v for k, v in values.items() if v is not None}
            for section, values in overrides.items()
        }
        data = self._merge_config(self.config.model_dump(), cleaned)
        try:
            self.config = Config(**data)
        except Exception as e:
            msg = f"Invalid configuration: {e}"
            raise ConfigurationError(msg) from e
        return self.config

    def setup_logging(self) -> None:
        """Configure logging from the observability section.

        The rpc debug flag forces DEBUG level.
        """
        observability = self.config.observability
        if self.config.rpc.debug and observability.log_level != LogLevel.DEBUG:
            observability = observability.model_copy(
                update={"log_level": LogLevel.DEBUG}
            )
        setup_logging(observability)


def init_config(config_file: str | Path | None = None) -> ConfigManager:
    """Load configuration from defaults, file and environment."""
    return ConfigManager(config_file)
