"""Configuration loading and validation."""

from restgate.config.loader import load_config
from restgate.config.schema import Config, CredentialsConfig, LoggingConfig, ServerConfig

__all__ = [
    "Config",
    "CredentialsConfig",
    "LoggingConfig",
    "ServerConfig",
    "load_config",
]
