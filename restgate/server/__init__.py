"""Basic-auth HTTP listener for local inter-process communication.

Each accepted TCP connection carries exactly one HTTP/1.1 request. The
listener checks its Basic Authorization header, passes the body to a
caller-supplied handler and answers with a plain-text status before closing.

Example usage:
    python -m restgate serve --port 8080
    curl -X POST http://127.0.0.1:8080/ \\
        -u TestUsername:TestPassword \\
        -d '{"a":1}'
"""

from restgate.server.auth import (
    Credentials,
    check_basic_auth,
    decode_basic_auth,
    encode_basic_auth,
    resolve_credentials,
)
from restgate.server.connection import ConnectionHandler, ConnectionState, RequestHandler
from restgate.server.framing import ParsedRequest, frame_is_complete, parse_request_frame
from restgate.server.listener import RestServer, run_rest_server
from restgate.server.logs import configure_server_logging
from restgate.server.response import encode_response

__all__ = [
    # Auth
    "Credentials",
    "check_basic_auth",
    "decode_basic_auth",
    "encode_basic_auth",
    "resolve_credentials",
    # Framing
    "ParsedRequest",
    "frame_is_complete",
    "parse_request_frame",
    # Response
    "encode_response",
    # Connection
    "ConnectionHandler",
    "ConnectionState",
    "RequestHandler",
    # Listener
    "RestServer",
    "run_rest_server",
    # Logging
    "configure_server_logging",
]
