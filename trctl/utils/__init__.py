"""Utility modules for trctl: errors, logging, console output and unit formatting."""

from __future__ import annotations

from trctl.utils.exceptions import (
    ConfigurationError,
    DirectiveError,
    HttpStatusError,
    NetworkError,
    ProtocolDecodeError,
    ProtocolError,
    RpcError,
    SelectorParseWarning,
    SessionRetryExhaustedError,
    TransportError,
    TrctlError,
    ValidationError,
    ValueShapeError,
)

__all__ = [
    "ConfigurationError",
    "DirectiveError",
    "HttpStatusError",
    "NetworkError",
    "ProtocolDecodeError",
    "ProtocolError",
    "RpcError",
    "SelectorParseWarning",
    "SessionRetryExhaustedError",
    "TransportError",
    "TrctlError",
    "ValidationError",
    "ValueShapeError",
]
