"""Send a single payload to a running listener."""

import sys
from pathlib import Path

from dotenv import load_dotenv

from restgate.cli.output import print_error, print_status
from restgate.client import RestClient
from restgate.config.loader import load_config
from restgate.core.errors import ClientError, RestGateError
from restgate.server.auth import resolve_credentials


async def cmd_send(
    body: str,
    port: int | None = None,
    host: str | None = None,
    config_path: Path | None = None,
    username: str | None = None,
    password: str | None = None,
    timeout: float = 10.0,
) -> int:
    """POST body to the listener and print the response.

    Connection details and credentials not given on the command line are
    resolved the same way the listener resolves them.

    Returns:
        0 for a 2xx response, 1 otherwise.
    """
    load_dotenv()

    try:
        config = load_config(config_path)
    except RestGateError as e:
        print_error(f"Configuration error: {e.message}")
        return 1

    credentials = resolve_credentials(config.credentials)
    payload = sys.stdin.read() if body == "-" else body

    client = RestClient(
        host=host or config.server.host,
        port=port if port is not None else config.server.port,
        username=username if username is not None else credentials.username,
        password=password if password is not None else credentials.password,
        timeout=timeout,
    )

    try:
        async with client:
            status, text = await client.post(payload)
    except ClientError as e:
        print_error(e.message)
        return 1

    print_status(status, text)
    return 0 if 200 <= int(status) < 300 else 1
