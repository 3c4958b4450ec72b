"""Render plain-text HTTP/1.1 status responses."""

from __future__ import annotations

from restgate.core.status import StatusCode

CONTENT_TYPE = "text/plain; charset=utf-8"


def encode_response(status: StatusCode, message: str | None = None) -> bytes:
    """Render a complete HTTP response for a status code.

    The status line always carries the canonical reason phrase. The body is
    the override message when given, otherwise the phrase again, so a bare
    200 answers "OK" with Content-Length 2.

    Args:
        status: Status to send.
        message: Optional body text replacing the reason phrase.

    Returns:
        The response bytes, ready to write to the socket.
    """
    body = (message if message is not None else status.phrase).encode("utf-8")
    head = (
        f"HTTP/1.1 {status.value} {status.phrase}\r\n"
        f"Content-Type: {CONTENT_TYPE}\r\n"
        f"Content-Length: {len(body)}\r\n"
        "\r\n"
    )
    return head.encode("utf-8") + body
