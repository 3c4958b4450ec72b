"""Text handling at the byte boundaries: the socket and the terminal."""

from __future__ import annotations

import sys
from typing import TextIO

ENCODING = "utf-8"
ENCODING_ERRORS = "replace"


def decode_text(data: bytes | bytearray) -> str:
    """Decode network bytes for display or header parsing.

    Never raises: undecodable bytes become U+FFFD. Only use this where the
    text is looked at, never to rebuild bytes that get passed on.
    """
    return bytes(data).decode(ENCODING, errors=ENCODING_ERRORS)


def configure_stdio(*streams: TextIO) -> None:
    """Switch text streams to UTF-8 with replacement.

    Received payloads are printed as-is, so the console must accept any
    text without UnicodeEncodeError on a narrow locale. Defaults to stdout
    and stderr. Streams without reconfigure() (StringIO, capture objects)
    are left untouched.
    """
    for stream in streams or (sys.stdout, sys.stderr):
        reconfigure = getattr(stream, "reconfigure", None)
        if reconfigure is not None:
            reconfigure(encoding=ENCODING, errors=ENCODING_ERRORS)
