"""Configuration loading for trctl."""

from __future__ import annotations

from trctl.config.config import ConfigManager, init_config

__all__ = ["ConfigManager", "init_config"]
