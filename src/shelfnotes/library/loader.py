"""Load a library snapshot from a JSON export."""

import json
from pathlib import Path
from typing import Union

import structlog
from pydantic import ValidationError

from .schemas import LibrarySnapshot

logger = structlog.get_logger(__name__)


class SnapshotLoadError(Exception):
    """Raised when a snapshot file cannot be read or validated."""

    pass


def load_snapshot(path: Union[str, Path]) -> LibrarySnapshot:
    """Read a snapshot file.

    The file holds an object with a ``books`` array; each book may carry a
    nested ``sessions`` array.

    Args:
        path: Path to the JSON file

    Returns:
        Validated LibrarySnapshot

    Raises:
        SnapshotLoadError: If the file is missing or its content is invalid
    """
    path = Path(path)
    if not path.exists():
        raise SnapshotLoadError(f"Snapshot file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SnapshotLoadError(f"Invalid JSON in {path}: {e}") from e

    if isinstance(data, list):
        data = {"books": data}

    try:
        snapshot = LibrarySnapshot.model_validate(data)
    except ValidationError as e:
        raise SnapshotLoadError(f"Invalid snapshot in {path}: {e}") from e

    logger.debug(
        "snapshot_loaded",
        path=str(path),
        books=len(snapshot.books),
        sessions=len(snapshot.sessions),
    )
    return snapshot
