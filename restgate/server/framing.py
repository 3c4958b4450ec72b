"""Split raw HTTP request bytes into a header map and a body.

The request line is never interpreted: only the header block and the body
matter to the connection handler. Header names keep the exact case they
arrived with, so lookups must use the exact name (e.g. "Authorization").
"""

from __future__ import annotations

from dataclasses import dataclass, field

from restgate.core.encoding import ENCODING, decode_text

HEADER_DELIMITER = "\r\n\r\n"
LINE_DELIMITER = "\r\n"

_HEADER_DELIMITER_BYTES = HEADER_DELIMITER.encode("ascii")


@dataclass(frozen=True)
class ParsedRequest:
    """Headers and body of one request.

    Attributes:
        headers: Header names (case as received) to stripped values.
        body: Body bytes exactly as received, minus surrounding ASCII
            whitespace.
    """

    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


def parse_header_block(block: str) -> dict[str, str]:
    """Split a header block into an ordered name -> value mapping.

    Each line is split on its first colon. Lines with no colon, or with
    nothing on one side of it, are dropped. Later duplicates overwrite
    earlier ones.
    """
    headers: dict[str, str] = {}
    for line in block.split(LINE_DELIMITER):
        name, sep, value = line.partition(":")
        if not sep or not name or not value:
            continue
        headers[name.strip()] = value.strip()
    return headers


def parse_request_frame(buffer: bytes | str) -> ParsedRequest | None:
    """Parse a complete request buffer.

    The buffer is split on every blank-line delimiter; the first segment is
    the header block and the last segment is the body. A body that itself
    contains the delimiter therefore keeps only its final part.

    Only the header block is decoded. Body bytes are sliced from the raw
    buffer and never pass through text, so the handler sees what the client
    sent.

    Args:
        buffer: Raw request bytes, or text (whose body is UTF-8 encoded).

    Returns:
        ParsedRequest, or None if the buffer has no header/body delimiter.
    """
    if isinstance(buffer, str):
        text_segments = buffer.split(HEADER_DELIMITER)
        if len(text_segments) < 2:
            return None
        return ParsedRequest(
            headers=parse_header_block(text_segments[0]),
            body=text_segments[-1].strip().encode(ENCODING),
        )

    segments = bytes(buffer).split(_HEADER_DELIMITER_BYTES)
    if len(segments) < 2:
        return None

    headers = parse_header_block(decode_text(segments[0]))
    body = segments[-1].strip()
    return ParsedRequest(headers=headers, body=body)


def frame_is_complete(buffer: bytes | bytearray) -> bool:
    """Check whether enough bytes have arrived to parse the request.

    Complete means the header delimiter is present and, when the headers
    carry a numeric Content-Length, at least that many body bytes follow it.
    Without Content-Length the body is whatever arrived with the headers.
    """
    end = buffer.find(_HEADER_DELIMITER_BYTES)
    if end < 0:
        return False

    headers = parse_header_block(decode_text(buffer[:end]))
    content_length = None
    for name, value in headers.items():
        if name.lower() == "content-length":
            content_length = value

    # str.isdigit() also accepts digits like "\u00b2" that int() rejects
    if content_length is None or not (content_length.isascii() and content_length.isdigit()):
        return True

    received = len(buffer) - (end + len(_HEADER_DELIMITER_BYTES))
    return received >= int(content_length)
