"""Configuration loading with fail-fast behavior and layered merging.

Layers, later overriding earlier:
1. Global user config (~/.restgate/config.json)
2. Project local config (cwd/.restgate/config.json)

An explicit path skips layering entirely. No files at all yields the
pydantic defaults.
"""

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from restgate.config.load_utils import merge_layers, read_json_object
from restgate.config.schema import Config
from restgate.core.constants import RESTGATE_DIR_NAME, get_restgate_dir
from restgate.core.errors import ConfigError, LoadError

logger = logging.getLogger(__name__)


def load_config(path: Path | None = None, cwd: Path | None = None) -> Config:
    """Load configuration from file with layered merging.

    Args:
        path: Explicit config file path. If provided, skips layered loading.
        cwd: Working directory for local lookup. Defaults to Path.cwd().

    Returns:
        Validated Config object.

    Raises:
        ConfigError: If any config file contains invalid JSON or merged config
            fails validation.
    """
    if path is not None:
        return _load_from_path(path)

    global_config = get_restgate_dir() / "config.json"
    local_config = (cwd or Path.cwd()) / RESTGATE_DIR_NAME / "config.json"

    candidates = [global_config]
    # From the home directory both candidates are the same file
    if local_config.resolve() != global_config.resolve():
        candidates.append(local_config)

    layers: list[tuple[Path, dict[str, Any]]] = []
    for candidate in candidates:
        try:
            data = read_json_object(candidate, required=False)
        except LoadError as e:
            raise ConfigError(e.message) from e
        if data:
            layers.append((candidate, data))

    if not layers:
        logger.debug("No config files found, using defaults")
        return Config()

    sources = [str(p) for p, _ in layers]
    logger.info("Config loaded from: %s", sources)

    try:
        return Config.model_validate(merge_layers(*(data for _, data in layers)))
    except ValidationError as e:
        raise ConfigError(
            f"Config validation failed (merged from {', '.join(sources)}): {e}"
        ) from e


def _load_from_path(path: Path) -> Config:
    """Load and validate config from a specific path.

    Raises:
        ConfigError: If file doesn't exist, contains invalid JSON, or fails validation.
    """
    try:
        data = read_json_object(path)
    except LoadError as e:
        raise ConfigError(e.message) from e

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed for {path}: {e}") from e
