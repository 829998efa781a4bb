"""Snapshot providers.

The aggregation and challenge code never fetches data itself; it asks a
provider for the current snapshot once per operation.
"""

from typing import Iterable, Protocol, runtime_checkable

from .schemas import Book, LibrarySnapshot


@runtime_checkable
class SnapshotProvider(Protocol):
    """Anything that can hand out the current library snapshot."""

    def get_snapshot(self) -> LibrarySnapshot:
        ...


class StaticSnapshotProvider:
    """Provider that always returns the same snapshot."""

    def __init__(self, snapshot: LibrarySnapshot):
        self._snapshot = snapshot

    @classmethod
    def from_books(cls, books: Iterable[Book]) -> "StaticSnapshotProvider":
        return cls(LibrarySnapshot.from_books(books))

    def get_snapshot(self) -> LibrarySnapshot:
        return self._snapshot

    def replace(self, snapshot: LibrarySnapshot) -> None:
        """Swap in a newer snapshot."""
        self._snapshot = snapshot
