"""restgate: a minimal Basic-auth HTTP listener for local IPC."""

from restgate.client import RestClient
from restgate.core.errors import ClientError, ConfigError, RestGateError, ServerBindError
from restgate.core.status import StatusCode
from restgate.server import (
    ConnectionHandler,
    ConnectionState,
    Credentials,
    ParsedRequest,
    RestServer,
    encode_response,
    parse_request_frame,
    run_rest_server,
)

__version__ = "0.1.0"

__all__ = [
    "ClientError",
    "ConfigError",
    "ConnectionHandler",
    "ConnectionState",
    "Credentials",
    "ParsedRequest",
    "RestClient",
    "RestGateError",
    "RestServer",
    "ServerBindError",
    "StatusCode",
    "encode_response",
    "parse_request_frame",
    "run_rest_server",
]
