"""Async HTTP client for posting payloads to a restgate server."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from restgate.core.constants import (
    BIND_HOST,
    DEFAULT_PASSWORD,
    DEFAULT_PORT,
    DEFAULT_USERNAME,
)
from restgate.core.errors import ClientError
from restgate.core.status import StatusCode, status_from_code
from restgate.server.auth import encode_basic_auth

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class RestClient:
    """Async client that POSTs a body with Basic auth.

    Usage:
        async with RestClient(port=8080) as client:
            status, text = await client.post(b'{"a":1}')
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        host: str = BIND_HOST,
        port: int = DEFAULT_PORT,
        username: str = DEFAULT_USERNAME,
        password: str = DEFAULT_PASSWORD,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the client.

        Args:
            url: Full server URL. Built from host and port when None.
            host: Server host, used only when url is None.
            port: Server port, used only when url is None.
            username: Basic-auth username.
            password: Basic-auth password.
            timeout: Request timeout in seconds.
        """
        self._url = url or f"http://{host}:{port}/"
        self._authorization = encode_basic_auth(username, password)
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None
        logger.debug("RestClient initialized: url=%s, timeout=%s", self._url, timeout)

    @property
    def url(self) -> str:
        return self._url

    async def __aenter__(self) -> RestClient:
        """Open the underlying httpx connection pool."""
        self._client = httpx.AsyncClient(timeout=self._timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Close the connection pool; post() fails until re-entered."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def post(self, body: bytes | str) -> tuple[StatusCode | int, str]:
        """POST a body to the server.

        Args:
            body: Payload to send. Strings are sent UTF-8 encoded.

        Returns:
            (status, response text). The status is a StatusCode when the code
            is one restgate knows, otherwise the raw int.

        Raises:
            ClientError: On connection failure or timeout.
        """
        if self._client is None:
            raise ClientError("Client not initialized. Use 'async with' context manager.")

        content = body.encode("utf-8") if isinstance(body, str) else body
        headers = {
            "Authorization": self._authorization,
            "Content-Type": "application/json",
        }

        logger.debug("POST %s (%d bytes)", self._url, len(content))
        try:
            response = await self._client.post(self._url, content=content, headers=headers)
        except httpx.ConnectError as e:
            logger.warning("Connection failed to %s: %s", self._url, e)
            raise ClientError(f"Connection failed: {e}") from e
        except httpx.TimeoutException as e:
            logger.warning("Request timed out: url=%s, timeout=%s", self._url, self._timeout)
            raise ClientError(f"Request timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.warning("HTTP error talking to %s: %s", self._url, e)
            raise ClientError(f"HTTP error: {e}") from e

        status = status_from_code(response.status_code)
        return (status if status is not None else response.status_code), response.text
