"""Reading and merging config.json layers."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from restgate.core.errors import LoadError

logger = logging.getLogger(__name__)


def read_json_object(
    path: Path,
    *,
    required: bool = True,
    error_context: str = "config",
) -> dict[str, Any] | None:
    """Read a file holding a single JSON object.

    A blank file reads as {} and a leading UTF-8 BOM is ignored.

    Args:
        path: File to read. "~" is expanded.
        required: When False a missing file returns None instead of raising.
        error_context: Prefix for error messages.

    Returns:
        The parsed object, or None for a missing optional file.

    Raises:
        LoadError: If the file is missing (and required), unreadable, not
            valid UTF-8 JSON, or holds something other than an object.
    """
    resolved = path.expanduser().resolve()
    try:
        raw = resolved.read_bytes()
    except FileNotFoundError:
        if required:
            raise LoadError(f"{error_context}: no such file: {path}") from None
        logger.debug("No %s layer at %s", error_context, resolved)
        return None
    except OSError as e:
        raise LoadError(f"{error_context}: cannot read {path}: {e}") from e

    try:
        text = raw.decode("utf-8-sig").strip()
    except UnicodeDecodeError as e:
        raise LoadError(f"{error_context}: {path} is not UTF-8: {e}") from e

    if not text:
        return {}

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise LoadError(
            f"{error_context}: {path} is not valid JSON "
            f"(line {e.lineno}, column {e.colno}): {e.msg}"
        ) from e

    if not isinstance(data, dict):
        raise LoadError(
            f"{error_context}: {path} must hold a JSON object, not {type(data).__name__}"
        )

    logger.debug("Read %s layer %s", error_context, resolved)
    return data


def merge_layers(*layers: Mapping[str, Any]) -> dict[str, Any]:
    """Fold config layers left to right into a new dict.

    Nested objects merge key by key. Any other value in a later layer,
    lists included, replaces the earlier one outright. Inputs are not
    modified.
    """
    merged: dict[str, Any] = {}
    for layer in layers:
        for key, value in layer.items():
            current = merged.get(key)
            if isinstance(current, Mapping) and isinstance(value, Mapping):
                merged[key] = merge_layers(current, value)
            else:
                merged[key] = value
    return merged
