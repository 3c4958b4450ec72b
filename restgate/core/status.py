"""HTTP status codes shared by the server, client and CLI."""

from __future__ import annotations

from enum import IntEnum


class StatusCode(IntEnum):
    """Closed set of HTTP status codes used by restgate.

    The server itself only emits OK, BAD_REQUEST, UNAUTHORIZED and
    INTERNAL_SERVER_ERROR; the rest are shared vocabulary for callers.
    """

    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NO_CONTENT = 204
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    CONFLICT = 409
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    SERVICE_UNAVAILABLE = 503

    @property
    def phrase(self) -> str:
        """Canonical reason phrase (e.g. "Bad Request")."""
        return _REASON_PHRASES[self]

    def __str__(self) -> str:
        return self.phrase


_REASON_PHRASES: dict[StatusCode, str] = {
    StatusCode.OK: "OK",
    StatusCode.CREATED: "Created",
    StatusCode.ACCEPTED: "Accepted",
    StatusCode.NO_CONTENT: "No Content",
    StatusCode.BAD_REQUEST: "Bad Request",
    StatusCode.UNAUTHORIZED: "Unauthorized",
    StatusCode.FORBIDDEN: "Forbidden",
    StatusCode.NOT_FOUND: "Not Found",
    StatusCode.METHOD_NOT_ALLOWED: "Method Not Allowed",
    StatusCode.CONFLICT: "Conflict",
    StatusCode.INTERNAL_SERVER_ERROR: "Internal Server Error",
    StatusCode.NOT_IMPLEMENTED: "Not Implemented",
    StatusCode.SERVICE_UNAVAILABLE: "Service Unavailable",
}


def status_from_code(code: int) -> StatusCode | None:
    """Look up a StatusCode by its numeric value.

    Returns None for codes outside the closed set instead of raising, so
    callers reading arbitrary server responses can fall back to the raw int.
    """
    try:
        return StatusCode(code)
    except ValueError:
        return None
