"""Logging setup for the restgate server.

Components never configure logging themselves: each takes an optional
`logger` argument and otherwise logs through `logging.getLogger(__name__)`,
which lands under the "restgate" namespace configured here.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "restgate"

_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_server_logging(
    log_dir: Path | None = None,
    level: int = logging.INFO,
    console_level: int = logging.WARNING,
) -> Path | None:
    """Configure the restgate namespace logger.

    Installs a stderr console handler and, when log_dir is given, a rotating
    `{log_dir}/server.log` (max 5MB per file, 3 backup files). Existing
    handlers on the namespace logger are replaced, so calling this twice
    does not duplicate output.

    Args:
        log_dir: Directory for server.log. Created (mode 0o700) if missing.
            None disables file logging.
        level: Logging level for file output (default INFO).
        console_level: Logging level for console output (default WARNING).

    Returns:
        Path to the server.log file, or None without a log_dir.
    """
    restgate_logger = logging.getLogger(LOGGER_NAME)
    restgate_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%H:%M:%S"))
    restgate_logger.addHandler(console_handler)

    log_file: Path | None = None
    effective_level = console_level
    if log_dir is not None:
        log_dir = log_dir.expanduser()
        log_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
        log_file = log_dir / "server.log"

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        restgate_logger.addHandler(file_handler)
        effective_level = min(level, console_level)

    restgate_logger.setLevel(effective_level)

    # Don't propagate to root logger
    restgate_logger.propagate = False

    if log_file is not None:
        restgate_logger.info("Server logging configured: %s", log_file)
    return log_file
