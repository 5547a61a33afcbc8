"""
JSON document persistence for the on-disk stores.

Reads translate I/O and decode failures into the persistence exceptions;
writes go through a temp file in the target directory followed by an
atomic rename so a crash never leaves a half-written document.
"""

import json
import os
import re
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from tera.core.exceptions import (
    DocumentParseError,
    PersistenceReadError,
    PersistenceWriteError,
)


def read_json_document(path: Path) -> Optional[dict[str, Any]]:
    """Read a JSON object from disk.

    Args:
        path: Document location

    Returns:
        Parsed document, or None if the file does not exist

    Raises:
        PersistenceReadError: File exists but could not be read
        DocumentParseError: File is not a JSON object
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as e:
        raise PersistenceReadError(path, f"Failed to read {path}: {e}") from e

    try:
        document = json.loads(raw)
    except json.JSONDecodeError as e:
        raise DocumentParseError(path, f"Failed to parse {path}: {e}") from e

    if not isinstance(document, dict):
        raise DocumentParseError(
            path, f"Failed to parse {path}: expected a JSON object at top level"
        )
    return document


def write_json_atomic(path: Path, document: dict[str, Any]) -> None:
    """Write a JSON document via temp file + fsync + rename.

    Raises:
        PersistenceWriteError: Directory, temp file, or rename failed
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PersistenceWriteError(
            path, f"Failed to create directory {path.parent}: {e}"
        ) from e

    data = json.dumps(document, indent=2, ensure_ascii=False) + "\n"

    temp_path = None
    try:
        fd, temp_path = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.stem}-", suffix=".tmp"
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        os.replace(temp_path, path)
        temp_path = None
    except OSError as e:
        raise PersistenceWriteError(path, f"Failed to write {path}: {e}") from e
    finally:
        # Clean up temp file on failure
        if temp_path is not None and os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError:
                logger.warning(f"Could not remove temp file: {temp_path}")

    logger.debug(f"Saved {path}")


_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def utc_now() -> datetime:
    """Current time as an aware UTC datetime (the stores' default clock)."""
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Serialize a datetime as RFC 3339."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware datetime.

    Accepts a trailing "Z" and nanosecond fractions (truncated to
    microseconds). Naive values are taken as UTC.

    Raises:
        ValueError: Not a timestamp
    """
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {type(value).__name__}")
    text = _FRACTION_RE.sub(r"\1", value.strip())
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
