"""Core types, constants and errors."""

from restgate.core.encoding import ENCODING, ENCODING_ERRORS, configure_stdio, decode_text
from restgate.core.errors import (
    ClientError,
    ConfigError,
    LoadError,
    RestGateError,
    ServerBindError,
)
from restgate.core.status import StatusCode, status_from_code

__all__ = [
    "ENCODING",
    "ENCODING_ERRORS",
    "configure_stdio",
    "decode_text",
    "RestGateError",
    "ConfigError",
    "LoadError",
    "ServerBindError",
    "ClientError",
    "StatusCode",
    "status_from_code",
]
