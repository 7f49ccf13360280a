"""JSON file helpers shared by the settings store and the metadata cache.

Writes go through a temporary sibling file and :func:`os.replace`, so a
crash mid-write never leaves a truncated document behind.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from ytdlp_interactive.exceptions import ParseError, SettingsWriteError

logger = logging.getLogger(__name__)

JSON_INDENT: int = 2


def read_json(path: Path, error_class: type[ParseError]) -> dict[str, Any]:
    """Read and parse a JSON object from *path*.

    Raises
    ------
    ParseError
        (as *error_class*) when the file cannot be read, is not valid
        JSON, or does not hold a JSON object.
    """
    hint = (
        f"The file may be corrupt: {path}\n"
        "Fix or move it aside manually; it is not deleted automatically."
    )
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise error_class(f"Failed to read {path}: {exc}", path=str(path), hint=hint) from exc
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise error_class(
            f"Failed to parse JSON from {path}: {exc}", path=str(path), hint=hint,
        ) from exc
    if not isinstance(data, dict):
        raise error_class(
            f"Expected a JSON object in {path}, got {type(data).__name__}.",
            path=str(path),
            hint=hint,
        )
    return data


def write_json(path: Path, data: dict[str, Any]) -> None:
    """Serialise *data* with two-space indentation and replace *path*."""
    write_text(path, json.dumps(data, indent=JSON_INDENT, ensure_ascii=False))


def write_text(path: Path, text: str) -> None:
    tmp = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(text, encoding="utf-8")
        os.replace(tmp, path)
    except OSError as exc:
        logger.debug("Write to %s failed", path, exc_info=True)
        try:
            tmp.unlink(missing_ok=True)
        except OSError:
            logger.debug("Could not remove %s", tmp)
        raise SettingsWriteError(f"Failed to write {path}: {exc}") from exc
