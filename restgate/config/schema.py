"""Pydantic models for restgate configuration validation."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from restgate.core.constants import (
    BIND_HOST,
    DEFAULT_PASSWORD,
    DEFAULT_PORT,
    DEFAULT_USERNAME,
    HANDLER_THREADS,
    MAX_REQUEST_SIZE,
    PASSWORD_ENV,
    READ_CHUNK_SIZE,
    USERNAME_ENV,
)


class ServerConfig(BaseModel):
    """Configuration for the listener and its connection handlers.

    Example in config.json:
        "server": {
            "host": "127.0.0.1",
            "port": 8080,
            "handler_timeout": 30.0
        }
    """

    model_config = ConfigDict(extra="forbid")

    host: str = BIND_HOST
    """Host address to bind to."""

    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)
    """TCP port. 0 picks an ephemeral port."""

    chunk_size: int = Field(default=READ_CHUNK_SIZE, gt=0)
    """Maximum bytes requested per socket read."""

    max_request_size: int = Field(default=MAX_REQUEST_SIZE, gt=0)
    """Requests growing beyond this many bytes are answered with 400."""

    read_timeout: float | None = Field(default=None, gt=0)
    """Seconds to wait for each read. None waits forever."""

    handler_timeout: float | None = Field(default=None, gt=0)
    """Seconds the request handler may run before the connection gets a 500.

    None means the handler is awaited without a deadline.
    """

    handler_threads: int = Field(default=HANDLER_THREADS, gt=0)
    """Worker threads reserved for plain (non-async) request handlers.

    When all of them are busy, further sync handler calls wait for a free
    worker. Coroutine handlers do not use this pool.
    """


class CredentialsConfig(BaseModel):
    """Where the single Basic-Auth credential pair comes from.

    Environment variables win over the literal values; the literal values
    default to the well-known local testing pair.
    """

    model_config = ConfigDict(extra="forbid")

    username_env: str = USERNAME_ENV
    """Environment variable holding the username."""

    password_env: str = PASSWORD_ENV
    """Environment variable holding the password."""

    username: str = DEFAULT_USERNAME
    password: str = DEFAULT_PASSWORD

    @field_validator("username")
    @classmethod
    def reject_colon_in_username(cls, v: str) -> str:
        """A colon in the username could never authenticate over Basic auth."""
        if ":" in v:
            raise ValueError("username must not contain ':'")
        return v


class LoggingConfig(BaseModel):
    """Server logging configuration."""

    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    """Logging level for the server log file."""

    log_dir: str | None = None
    """Directory for server.log. None disables file logging."""


class Config(BaseModel):
    """Root configuration model.

    Example config.json:
        {
            "server": {"port": 8080},
            "credentials": {"username_env": "MY_APP_USER", "password_env": "MY_APP_PASS"},
            "logging": {"level": "DEBUG", "log_dir": "~/.restgate/logs"}
        }
    """

    model_config = ConfigDict(extra="forbid")

    server: ServerConfig = ServerConfig()
    credentials: CredentialsConfig = CredentialsConfig()
    logging: LoggingConfig = LoggingConfig()
