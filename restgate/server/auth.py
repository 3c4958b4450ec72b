"""Basic Authentication for the restgate listener.

The listener accepts a single fixed credential pair, resolved once at
startup:

    1. Environment variables named by the config (RESTGATE_USERNAME /
       RESTGATE_PASSWORD by default)
    2. Literal values in config.json
    3. The built-in local testing pair (TestUsername / TestPassword)

Clients send it as:

    Authorization: Basic base64("username:password")

Security properties:
    - Comparison is constant-time (hmac.compare_digest)
    - Attempted credentials are never logged
    - Any decode failure fails closed; nothing raises past check_basic_auth()
"""

from __future__ import annotations

import base64
import binascii
import hmac
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from restgate.config.schema import CredentialsConfig

logger = logging.getLogger(__name__)

BASIC_PREFIX = "Basic "


@dataclass(frozen=True)
class Credentials:
    """The one username/password pair the listener accepts."""

    username: str
    password: str = field(repr=False)


def _constant_time_equals(provided: str, expected: str) -> bool:
    # compare_digest only accepts ASCII str, so compare the UTF-8 bytes
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def decode_basic_auth(header_value: str | None) -> tuple[str, str] | None:
    """Extract (username, password) from an Authorization header value.

    Everything after the first "Basic " is strict base64 that must decode to
    UTF-8 text holding exactly one colon.

    Returns:
        The decoded pair, or None for a missing or malformed header.
    """
    if header_value is None:
        return None

    _, prefix, encoded = header_value.partition(BASIC_PREFIX)
    if not prefix:
        return None

    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        # UnicodeDecodeError is a ValueError
        return None

    parts = decoded.split(":")
    if len(parts) != 2:
        return None
    return parts[0], parts[1]


def check_basic_auth(header_value: str | None, credentials: Credentials) -> bool:
    """Validate an Authorization header against the configured credentials.

    Args:
        header_value: Raw Authorization header value, or None if absent.
        credentials: The accepted credential pair.

    Returns:
        True only if the header decodes to exactly the configured pair.
    """
    pair = decode_basic_auth(header_value)
    if pair is None:
        return False

    username, password = pair
    # Evaluate both so a wrong username costs the same as a wrong password
    username_ok = _constant_time_equals(username, credentials.username)
    password_ok = _constant_time_equals(password, credentials.password)
    return username_ok and password_ok


def encode_basic_auth(username: str, password: str) -> str:
    """Build an Authorization header value for the given pair.

    Example:
        >>> encode_basic_auth("TestUsername", "TestPassword")
        'Basic VGVzdFVzZXJuYW1lOlRlc3RQYXNzd29yZA=='
    """
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"{BASIC_PREFIX}{token}"


def resolve_credentials(
    config: CredentialsConfig | None = None,
    environ: Mapping[str, str] | None = None,
) -> Credentials:
    """Resolve the credential pair from the environment or config.

    Each component is resolved independently: an environment variable that
    is set and non-empty wins over the configured literal.

    Args:
        config: Credentials section of the config. Defaults to CredentialsConfig().
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        The resolved Credentials.
    """
    config = config or CredentialsConfig()
    env = os.environ if environ is None else environ

    env_username = env.get(config.username_env)
    env_password = env.get(config.password_env)

    if env_username or env_password:
        logger.debug(
            "Credentials from environment (%s, %s)", config.username_env, config.password_env
        )

    return Credentials(
        username=env_username or config.username,
        password=env_password or config.password,
    )
