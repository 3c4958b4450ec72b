"""TCP listener that hands each accepted connection to its own handler task.

The listening socket is bound when the RestServer is constructed, so a port
conflict surfaces immediately rather than on start(). Once started, every
accepted connection gets a fresh ConnectionHandler running in its own asyncio
task: a slow request handler on one connection never delays accepting new
connections or finishing other ones.

Example usage:
    async def on_body(body: bytes) -> None:
        print(body.decode())

    server = RestServer(on_body, Credentials("TestUsername", "TestPassword"), port=8080)
    await server.start()
    ...
    server.stop()            # stop accepting; in-flight requests finish
    await server.wait_closed()
"""

from __future__ import annotations

import asyncio
import logging
import socket
from concurrent.futures import ThreadPoolExecutor

from restgate.config.schema import ServerConfig
from restgate.core.errors import ServerBindError
from restgate.server.auth import Credentials, resolve_credentials
from restgate.server.connection import ConnectionHandler, RequestHandler

LISTEN_BACKLOG = 100
LOOPBACK_HOSTS = frozenset({"127.0.0.1", "localhost", "::1"})


def _bind_socket(host: str, port: int) -> socket.socket:
    """Create a non-blocking listening TCP socket.

    Raises:
        ServerBindError: If the address cannot be bound.
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(LISTEN_BACKLOG)
        sock.setblocking(False)
    except OSError as e:
        sock.close()
        raise ServerBindError(host, port, str(e)) from e
    return sock


class RestServer:
    """Accept connections and run one ConnectionHandler per connection.

    Attributes:
        host: Bound host.
        port: Bound port (the real one when constructed with port 0).
    """

    def __init__(
        self,
        request_handler: RequestHandler,
        credentials: Credentials | None = None,
        *,
        config: ServerConfig | None = None,
        host: str | None = None,
        port: int | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Bind the listening socket.

        Args:
            request_handler: Called with the body of every authenticated,
                non-empty request.
            credentials: Accepted Basic-Auth pair. Defaults to the pair
                resolved from the environment / built-in defaults.
            config: Server settings. Defaults to ServerConfig().
            host: Overrides config.host.
            port: Overrides config.port. 0 picks an ephemeral port.
            logger: Logger for the listener and its connection handlers.

        Raises:
            ServerBindError: If the port cannot be bound.
        """
        self._config = config or ServerConfig()
        self._request_handler = request_handler
        self._credentials = credentials or resolve_credentials()
        self._logger = logger if logger is not None else logging.getLogger(__name__)

        bind_host = host if host is not None else self._config.host
        bind_port = port if port is not None else self._config.port
        if bind_host not in LOOPBACK_HOSTS:
            self._logger.warning(
                "Binding to non-loopback host %s: Basic auth over plain HTTP is "
                "readable by anyone on the network",
                bind_host,
            )

        self._socket: socket.socket | None = _bind_socket(bind_host, bind_port)
        self.host = bind_host
        self.port: int = self._socket.getsockname()[1]
        self._server: asyncio.Server | None = None
        self._connections: set[asyncio.Task[None]] = set()
        self._executor = ThreadPoolExecutor(
            max_workers=self._config.handler_threads,
            thread_name_prefix="restgate-handler",
        )

    @property
    def is_serving(self) -> bool:
        """True between start() and stop()."""
        return self._server is not None and self._server.is_serving()

    @property
    def active_connections(self) -> int:
        """Number of connections currently being handled."""
        return len(self._connections)

    async def start(self) -> None:
        """Begin accepting connections.

        Raises:
            RuntimeError: If already started or already stopped.
        """
        if self._server is not None:
            raise RuntimeError("RestServer already started")
        if self._socket is None:
            raise RuntimeError("RestServer was stopped; create a new instance")

        self._server = await asyncio.start_server(self._on_connection, sock=self._socket)
        self._logger.info("REST server listening on http://%s:%s/", self.host, self.port)

    def stop(self) -> None:
        """Stop accepting connections.

        Connections already being handled are not interrupted; use
        wait_closed() to wait for them.
        """
        if self._server is not None:
            self._server.close()
        elif self._socket is not None:
            # Never started: release the bound port ourselves
            self._socket.close()
        self._socket = None
        self._logger.info("REST server on port %s stopped accepting", self.port)

    async def wait_closed(self) -> None:
        """Wait until every in-flight connection has been handled.

        After stop() this also releases the handler thread pool. Threads
        still running a handler that outlived handler_timeout are not joined.
        """
        while self._connections:
            await asyncio.gather(*self._connections, return_exceptions=True)
        if self._socket is None:
            self._executor.shutdown(wait=False)

    async def __aenter__(self) -> RestServer:
        await self.start()
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.stop()
        await self.wait_closed()

    async def _on_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        # asyncio.start_server already runs each callback in its own task
        task = asyncio.current_task()
        if task is None:
            raise RuntimeError("connection callback must run inside an asyncio task")
        self._connections.add(task)
        try:
            handler = ConnectionHandler(
                self._credentials,
                self._request_handler,
                chunk_size=self._config.chunk_size,
                max_request_size=self._config.max_request_size,
                read_timeout=self._config.read_timeout,
                handler_timeout=self._config.handler_timeout,
                executor=self._executor,
                logger=self._logger,
            )
            await handler.handle(reader, writer)
        except Exception as e:
            # handle() contains its own errors; anything here is a bug
            self._logger.error("Unexpected error handling connection: %s", e, exc_info=True)
        finally:
            self._connections.discard(task)


async def run_rest_server(
    request_handler: RequestHandler,
    config: ServerConfig | None = None,
    credentials: Credentials | None = None,
    *,
    started_event: asyncio.Event | None = None,
    stop_event: asyncio.Event | None = None,
    logger: logging.Logger | None = None,
) -> None:
    """Run a RestServer until cancelled or stop_event is set.

    Args:
        request_handler: Called with every authenticated, non-empty body.
        config: Server settings. Defaults to ServerConfig().
        credentials: Accepted pair. Defaults to resolve_credentials().
        started_event: Set once the server is accepting connections.
        stop_event: When set, the server stops accepting and returns after
            in-flight connections finish.
        logger: Logger for the server and its connection handlers.

    Raises:
        ServerBindError: If the port cannot be bound.
    """
    server = RestServer(request_handler, credentials, config=config, logger=logger)
    await server.start()

    if started_event is not None:
        started_event.set()

    try:
        if stop_event is None:
            await asyncio.Event().wait()
        else:
            await stop_event.wait()
    finally:
        server.stop()

    await server.wait_closed()
