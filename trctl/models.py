"""Pydantic models for trctl.

Provides validated configuration models for the remote client.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class RpcConfig(BaseModel):
    """Daemon endpoint and transport configuration."""

    host: str = Field(default="localhost", description="Daemon host name or address")
    port: int = Field(default=9091, ge=1, le=65535, description="Daemon RPC port")
    url_path: str = Field(
        default="/transmission/rpc/",
        description="RPC path on the daemon",
    )
    use_ssl: bool = Field(default=False, description="Talk to the daemon over HTTPS")
    auth: str | None = Field(default=None, description="Credentials as user:password")
    netrc: str | None = Field(default=None, description="Path to a .netrc file")
    debug: bool = Field(default=False, description="Echo requests and responses")
    timeout: float = Field(
        default=60.0,
        gt=0,
        description="Request timeout in seconds",
    )
    blocklist_timeout: float = Field(
        default=300.0,
        gt=0,
        description="Timeout in seconds for blocklist-update",
    )
    max_session_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="How many times a 409 session-id challenge is retried",
    )

    @field_validator("url_path")
    @classmethod
    def _normalize_url_path(cls, v: str) -> str:
        if not v.startswith("/"):
            v = "/" + v
        if not v.endswith("/"):
            v = v + "/"
        return v


class UnitsConfig(BaseModel):
    """Unit bases and names used when printing sizes and speeds."""

    size_base: int = Field(default=1000, description="Base for disk sizes")
    size_units: list[str] = Field(default_factory=lambda: ["kB", "MB", "GB", "TB"])
    mem_base: int = Field(default=1024, description="Base for memory sizes")
    mem_units: list[str] = Field(default_factory=lambda: ["KiB", "MiB", "GiB", "TiB"])
    speed_base: int = Field(default=1000, description="Base for transfer speeds")
    speed_units: list[str] = Field(
        default_factory=lambda: ["kB/s", "MB/s", "GB/s", "TB/s"]
    )

    @field_validator("size_base", "mem_base", "speed_base")
    @classmethod
    def _check_base(cls, v: int) -> int:
        if v not in (1000, 1024):
            msg = "unit base must be 1000 or 1024"
            raise ValueError(msg)
        return v

    @field_validator("size_units", "mem_units", "speed_units")
    @classmethod
    def _check_units(cls, v: list[str]) -> list[str]:
        if len(v) != 4:
            msg = "exactly four unit names are required (kilo, mega, giga, tera)"
            raise ValueError(msg)
        return v


class ObservabilityConfig(BaseModel):
    """Logging configuration."""

    log_level: LogLevel = Field(default=LogLevel.WARNING, description="Log level")
    log_file: str | None = Field(None, description="Log file path")
    structured_logging: bool = Field(
        default=False,
        description="Write the log file as JSON lines",
    )


class Config(BaseModel):
    """Main configuration model."""

    rpc: RpcConfig = Field(default_factory=RpcConfig)
    units: UnitsConfig = Field(default_factory=UnitsConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
