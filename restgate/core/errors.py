"""Typed exception hierarchy for restgate."""

from __future__ import annotations


class RestGateError(Exception):
    """Base class for all restgate errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(RestGateError):
    """Raised for configuration issues (missing file, invalid JSON, validation failure)."""


class LoadError(RestGateError):
    """Base class for loading errors (config files)."""

    pass


class ServerBindError(RestGateError):
    """Raised when the listener cannot bind its TCP port."""

    def __init__(self, host: str, port: int, reason: str) -> None:
        self.host = host
        self.port = port
        self.reason = reason
        super().__init__(f"Cannot bind {host}:{port}: {reason}")


class ClientError(RestGateError):
    """Exception for client-side errors (connection, timeout)."""
