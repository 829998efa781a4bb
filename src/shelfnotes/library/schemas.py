"""Pydantic schemas for the library snapshot.

A snapshot is a read-only view of the user's books and reading sessions
handed to the aggregation and challenge code. Malformed values are
normalized on read rather than rejected.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from ..config import get_config


def generate_uuid() -> str:
    """Generate a UUID string for record ids."""
    return str(uuid4())


def _as_instant(dt: datetime) -> datetime:
    # Naive values are wall-clock time in the configured timezone
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=get_config().tzinfo)
    return dt.astimezone(timezone.utc)


class BookStatus(str, Enum):
    """Reading status of a book."""

    TO_READ = "to_read"
    READING = "reading"
    FINISHED = "finished"


RATING_CRITERIA = (
    "rating_plot",
    "rating_characters",
    "rating_writing_style",
    "rating_atmosphere",
    "rating_genre_fit",
    "rating_presentation",
)


class ReadingSession(BaseModel):
    """A logged reading interval for one book."""

    id: str = Field(default_factory=generate_uuid)
    book_id: Optional[str] = None
    started_at: datetime
    ended_at: datetime
    pages_read: Optional[int] = None
    note: Optional[str] = None

    @property
    def normalized_bounds(self) -> tuple[datetime, datetime]:
        """Start and end as UTC instants, with reversed entries swapped."""
        start = _as_instant(self.started_at)
        end = _as_instant(self.ended_at)
        if end < start:
            return end, start
        return start, end

    @property
    def duration_seconds(self) -> int:
        """Session length in whole seconds, never negative."""
        start, end = self.normalized_bounds
        return max(0, int((end - start).total_seconds()))

    @property
    def pages_read_normalized(self) -> Optional[int]:
        """Pages read, or None unless a positive value was logged."""
        if self.pages_read is not None and self.pages_read > 0:
            return self.pages_read
        return None


class Book(BaseModel):
    """A book with the attributes used by statistics and challenges."""

    id: str = Field(default_factory=generate_uuid)
    title: str = ""
    author: str = ""
    status: BookStatus = BookStatus.TO_READ

    # Reading period
    read_from: Optional[date] = None
    read_to: Optional[date] = None

    # Metadata
    page_count: Optional[int] = None
    publisher: Optional[str] = None
    language: Optional[str] = None
    main_category: Optional[str] = None
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    # User ratings, 0 = not rated
    rating_plot: int = Field(0, ge=0, le=5)
    rating_characters: int = Field(0, ge=0, le=5)
    rating_writing_style: int = Field(0, ge=0, le=5)
    rating_atmosphere: int = Field(0, ge=0, le=5)
    rating_genre_fit: int = Field(0, ge=0, le=5)
    rating_presentation: int = Field(0, ge=0, le=5)

    sessions: list[ReadingSession] = Field(default_factory=list)

    @field_validator(*RATING_CRITERIA, mode="before")
    @classmethod
    def unrate_out_of_range(cls, v):
        """Treat ratings outside 0-5 or non-numeric ratings as unrated."""
        if v is None or isinstance(v, bool):
            return 0
        if isinstance(v, float) and not v.is_integer():
            return 0
        try:
            rating = int(v)
        except (TypeError, ValueError):
            return 0
        return rating if 0 <= rating <= 5 else 0

    @field_validator("read_from", "read_to", mode="before")
    @classmethod
    def coerce_to_day(cls, v):
        """Reduce instants to their calendar day."""
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and "T" in v:
            return datetime.fromisoformat(v.replace("Z", "+00:00")).date()
        return v

    @model_validator(mode="after")
    def attach_sessions(self) -> "Book":
        """Point sessions without an owner at this book."""
        for session in self.sessions:
            if session.book_id is None:
                session.book_id = self.id
        return self

    @property
    def page_count_normalized(self) -> Optional[int]:
        """Page count, or None unless positive."""
        if self.page_count is not None and self.page_count > 0:
            return self.page_count
        return None

    @property
    def ratings(self) -> tuple[int, ...]:
        """The six rating criteria in a fixed order."""
        return tuple(getattr(self, name) for name in RATING_CRITERIA)

    @property
    def user_rating_average(self) -> Optional[float]:
        """Mean of the rated criteria, or None if nothing is rated."""
        rated = [r for r in self.ratings if r > 0]
        if not rated:
            return None
        return sum(rated) / len(rated)

    @property
    def completion_date(self) -> Optional[date]:
        """Day a finished book counts as completed (read_to, else read_from)."""
        if self.status != BookStatus.FINISHED:
            return None
        return self.read_to or self.read_from

    @property
    def display_title(self) -> str:
        """Trimmed title with a placeholder for empty titles."""
        return self.title.strip() or "Untitled"


class LibrarySnapshot(BaseModel):
    """A consistent, read-only view of books and their sessions."""

    books: tuple[Book, ...] = ()

    @classmethod
    def from_books(cls, books) -> "LibrarySnapshot":
        """Build a snapshot from any iterable of books."""
        return cls(books=tuple(books))

    @property
    def sessions(self) -> list[ReadingSession]:
        """All sessions across all books."""
        return [session for book in self.books for session in book.sessions]
