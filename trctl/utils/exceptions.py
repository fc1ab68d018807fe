"""Exception hierarchy for trctl.

Every failure a flush can run into has its own class so the accumulator can
report it and carry on with the next directive.
"""

from __future__ import annotations

from typing import Any


class TrctlError(Exception):
    """Base exception for all trctl errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize trctl error."""
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class NetworkError(TrctlError):
    """Network-related errors."""


class TransportError(NetworkError):
    """Connect, timeout or TLS failure talking to the daemon."""


class SessionRetryExhaustedError(TransportError):
    """The daemon kept answering 409 past the retry budget."""


class HttpStatusError(NetworkError):
    """The daemon answered with an unexpected HTTP status."""

    def __init__(self, status: int, body: str = ""):
        """Initialize HTTP status error."""
        super().__init__(f"Unexpected response: {body}" if body else f"Unexpected response: HTTP {status}")
        self.status = status
        self.body = body


class ProtocolError(TrctlError):
    """RPC protocol errors."""


class ProtocolDecodeError(ProtocolError):
    """Response body is not a usable RPC envelope."""


class ValueShapeError(ProtocolDecodeError):
    """A decoded value does not have the expected type."""

    def __init__(self, key: str, expected: str, actual: Any):
        """Initialize shape error."""
        super().__init__(
            f"Field {key!r}: expected {expected}, got {type(actual).__name__}"
        )
        self.key = key
        self.expected = expected
        self.actual = actual


class RpcError(TrctlError):
    """The daemon processed the request and reported a failure."""

    def __init__(self, result: str):
        """Initialize RPC error with the daemon's result string."""
        super().__init__(result)
        self.result = result


class SelectorParseWarning(TrctlError):
    """Torrent selector could not be used; nothing will match."""


class ValidationError(TrctlError):
    """Data validation errors."""


class ConfigurationError(ValidationError):
    """Configuration validation errors."""


class DirectiveError(ValidationError):
    """A command-line directive could not be understood."""
