"""Core constants and paths for restgate.

Single source of truth for global paths and defaults. Modules import from
here instead of hardcoding `Path.home() / ".restgate"`.
"""

from pathlib import Path

RESTGATE_DIR_NAME = ".restgate"

DEFAULT_PORT = 8080
BIND_HOST = "127.0.0.1"

# Per-read chunk size and total request cap
READ_CHUNK_SIZE = 65_536  # 64 KiB
MAX_REQUEST_SIZE = 1_048_576  # 1 MiB

# Thread pool size for plain-function request handlers
HANDLER_THREADS = 16

# Fallback credential pair when neither env nor config supplies one
DEFAULT_USERNAME = "TestUsername"
DEFAULT_PASSWORD = "TestPassword"

USERNAME_ENV = "RESTGATE_USERNAME"
PASSWORD_ENV = "RESTGATE_PASSWORD"


def get_restgate_dir() -> Path:
    """Get ~/.restgate (global config directory)."""
    return Path.home() / RESTGATE_DIR_NAME


def get_default_config_path() -> Path:
    """Get default config file path."""
    return get_restgate_dir() / "config.json"


def get_log_dir() -> Path:
    """Get default server log directory."""
    return get_restgate_dir() / "logs"
