"""Library snapshot module.

Provides the read-only book and reading-session records that every
aggregation works on, plus providers and a JSON loader.
"""

from .loader import SnapshotLoadError, load_snapshot
from .providers import SnapshotProvider, StaticSnapshotProvider
from .schemas import (
    RATING_CRITERIA,
    Book,
    BookStatus,
    LibrarySnapshot,
    ReadingSession,
)

__all__ = [
    "Book",
    "BookStatus",
    "LibrarySnapshot",
    "RATING_CRITERIA",
    "ReadingSession",
    "SnapshotLoadError",
    "SnapshotProvider",
    "StaticSnapshotProvider",
    "load_snapshot",
]
