"""Reading statistics calculations.

Provides scoped, year-filtered statistics about a book collection, including:
- Top lists for genres, subgenres, authors, publishers, languages and tags
- Monthly finished-books and pages series
- Superlative picks (fastest, slowest, biggest, highest rated)
- Average pace figures
"""

import calendar
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable, Iterable, Optional

from ..config import get_config
from ..library.schemas import Book, BookStatus
from .genres import extract_genres, extract_subgenres


class StatsScope(str, Enum):
    """Which books statistics are computed over."""

    ALL = "all"
    FINISHED = "finished"
    READING = "reading"
    TO_READ = "to_read"


@dataclass(frozen=True)
class TopEntry:
    """One row of a top-N list."""

    label: str
    count: int


@dataclass(frozen=True)
class MonthKey:
    """A calendar month."""

    year: int
    month: int

    @property
    def id(self) -> str:
        return f"{self.year}-{self.month}"

    @property
    def label(self) -> str:
        return calendar.month_abbr[self.month]


@dataclass(frozen=True)
class MonthlySeriesPoint:
    """Finished books and their pages in one month."""

    year: int
    month: int
    label: str
    finished_count: int = 0
    pages: int = 0


@dataclass(frozen=True)
class NerdPick:
    """A single-book superlative."""

    book_id: str
    title: str
    value: float
    label: str
    sort_key: int


@dataclass
class StatsSummary:
    """Everything the statistics screen shows for one scope and year."""

    scope: StatsScope
    year: int
    months_count: int = 0
    monthly_series: list[MonthlySeriesPoint] = field(default_factory=list)

    # Top lists
    top_genres: list[TopEntry] = field(default_factory=list)
    top_subgenres: list[TopEntry] = field(default_factory=list)
    top_authors: list[TopEntry] = field(default_factory=list)
    top_publishers: list[TopEntry] = field(default_factory=list)
    top_languages: list[TopEntry] = field(default_factory=list)
    top_tags: list[TopEntry] = field(default_factory=list)

    # Superlatives
    fastest: Optional[NerdPick] = None
    slowest: Optional[NerdPick] = None
    biggest: Optional[NerdPick] = None
    highest_rated: Optional[NerdPick] = None

    # Pace
    finished_in_year: int = 0
    total_pages: int = 0
    avg_pages_per_book: Optional[int] = None
    avg_days_per_book: Optional[int] = None
    avg_pages_per_day: Optional[int] = None


def sorted_counts(counts: dict[str, int], limit: int) -> list[TopEntry]:
    """Sort counts descending, then labels case-insensitively, and truncate.

    Raises:
        ValueError: If limit is negative
    """
    if limit < 0:
        raise ValueError("limit must not be negative")
    entries = sorted(
        counts.items(),
        key=lambda item: (-item[1], item[0].casefold(), item[0]),
    )
    return [TopEntry(label=label, count=count) for label, count in entries[:limit]]


def days_between(start: Optional[date], end: Optional[date]) -> Optional[int]:
    """Inclusive day span of a reading period; a same-day read counts as 1."""
    if start is None or end is None:
        return None
    return max(1, (end - start).days + 1)


def _round(value: float) -> int:
    return int(value + 0.5)


class StatsAggregator:
    """Calculates collection statistics from a book snapshot."""

    def __init__(
        self,
        top_list_limit: Optional[int] = None,
        top_tags_limit: Optional[int] = None,
    ):
        """Initialize aggregator.

        Args:
            top_list_limit: Rows in most top lists (default: from config)
            top_tags_limit: Rows in the tags list (default: from config)
        """
        config = get_config()
        self.top_list_limit = (
            top_list_limit if top_list_limit is not None else config.top_list_limit
        )
        self.top_tags_limit = (
            top_tags_limit if top_tags_limit is not None else config.top_tags_limit
        )

    # -------------------------------------------------------------------------
    # Slicing
    # -------------------------------------------------------------------------

    @staticmethod
    def scoped_books(books: Iterable[Book], scope: StatsScope) -> list[Book]:
        """Filter books by scope."""
        scope = StatsScope(scope)
        if scope == StatsScope.ALL:
            return list(books)
        status = {
            StatsScope.FINISHED: BookStatus.FINISHED,
            StatsScope.READING: BookStatus.READING,
            StatsScope.TO_READ: BookStatus.TO_READ,
        }[scope]
        return [b for b in books if b.status == status]

    @staticmethod
    def finished_in_year(books: Iterable[Book], year: int) -> list[Book]:
        """Finished books whose completion day falls in the year."""
        return [
            b for b in books
            if b.completion_date is not None and b.completion_date.year == year
        ]

    # -------------------------------------------------------------------------
    # Top lists
    # -------------------------------------------------------------------------

    def _top(
        self,
        books: Iterable[Book],
        labels: Callable[[Book], Iterable[Optional[str]]],
        limit: int,
    ) -> list[TopEntry]:
        counts: dict[str, int] = defaultdict(int)
        for book in books:
            for raw in labels(book):
                label = (raw or "").strip()
                if label:
                    counts[label] += 1
        return sorted_counts(counts, limit)

    def top_genres(self, books: Iterable[Book], limit: Optional[int] = None) -> list[TopEntry]:
        return self._top(books, extract_genres, self._limit(limit))

    def top_subgenres(self, books: Iterable[Book], limit: Optional[int] = None) -> list[TopEntry]:
        return self._top(books, extract_subgenres, self._limit(limit))

    def top_authors(self, books: Iterable[Book], limit: Optional[int] = None) -> list[TopEntry]:
        return self._top(books, lambda b: [b.author], self._limit(limit))

    def top_publishers(self, books: Iterable[Book], limit: Optional[int] = None) -> list[TopEntry]:
        return self._top(books, lambda b: [b.publisher], self._limit(limit))

    def top_languages(self, books: Iterable[Book], limit: Optional[int] = None) -> list[TopEntry]:
        return self._top(books, lambda b: [b.language], self._limit(limit))

    def top_tags(self, books: Iterable[Book], limit: Optional[int] = None) -> list[TopEntry]:
        """Most used tags, ignoring '#' characters."""
        if limit is None:
            limit = self.top_tags_limit
        return self._top(books, lambda b: [t.replace("#", "") for t in b.tags], limit)

    def _limit(self, limit: Optional[int]) -> int:
        return self.top_list_limit if limit is None else limit

    # -------------------------------------------------------------------------
    # Monthly series
    # -------------------------------------------------------------------------

    @staticmethod
    def months_for_year(year: int, today: date) -> list[MonthKey]:
        """All months of a year, or up to the current month for this year."""
        last_month = today.month if year == today.year else 12
        return [MonthKey(year, m) for m in range(1, last_month + 1)]

    @staticmethod
    def monthly_series(
        months: list[MonthKey],
        finished_books: Iterable[Book],
    ) -> list[MonthlySeriesPoint]:
        """Finished count and pages per month, zero-filled.

        Args:
            months: Months to report, in display order
            finished_books: Books to bucket by completion month

        Returns:
            One point per requested month
        """
        count_by: dict[MonthKey, int] = defaultdict(int)
        pages_by: dict[MonthKey, int] = defaultdict(int)

        for book in finished_books:
            day = book.completion_date
            if day is None:
                continue
            key = MonthKey(day.year, day.month)
            count_by[key] += 1
            pages_by[key] += book.page_count_normalized or 0

        return [
            MonthlySeriesPoint(
                year=mk.year,
                month=mk.month,
                label=mk.label,
                finished_count=count_by.get(mk, 0),
                pages=pages_by.get(mk, 0),
            )
            for mk in months
        ]

    # -------------------------------------------------------------------------
    # Superlatives
    # -------------------------------------------------------------------------

    @staticmethod
    def _days_pick(book: Book, days: int) -> NerdPick:
        return NerdPick(
            book_id=book.id,
            title=book.display_title,
            value=days,
            label=f"{book.display_title} • {days} days",
            sort_key=days,
        )

    def fastest_book(self, finished_books: Iterable[Book]) -> Optional[NerdPick]:
        """Shortest reading period; first book wins ties."""
        best: Optional[NerdPick] = None
        for book in finished_books:
            days = days_between(book.read_from, book.read_to)
            if days is None:
                continue
            if best is None or days < best.sort_key:
                best = self._days_pick(book, days)
        return best

    def slowest_book(self, finished_books: Iterable[Book]) -> Optional[NerdPick]:
        """Longest reading period; first book wins ties."""
        best: Optional[NerdPick] = None
        for book in finished_books:
            days = days_between(book.read_from, book.read_to)
            if days is None:
                continue
            if best is None or days > best.sort_key:
                best = self._days_pick(book, days)
        return best

    def biggest_book(self, finished_books: Iterable[Book]) -> Optional[NerdPick]:
        """Most pages; first book wins ties."""
        best: Optional[NerdPick] = None
        for book in finished_books:
            pages = book.page_count_normalized
            if pages is None:
                continue
            if best is None or pages > best.sort_key:
                best = NerdPick(
                    book_id=book.id,
                    title=book.display_title,
                    value=pages,
                    label=f"{book.display_title} • {pages} pages",
                    sort_key=pages,
                )
        return best

    def highest_rated_book(self, books: Iterable[Book]) -> Optional[NerdPick]:
        """Best average user rating, compared at one decimal."""
        best: Optional[NerdPick] = None
        for book in books:
            rating = book.user_rating_average
            if rating is None or rating <= 0:
                continue
            key = _round(rating * 10)
            if best is None or key > best.sort_key:
                best = NerdPick(
                    book_id=book.id,
                    title=book.display_title,
                    value=rating,
                    label=f"{book.display_title} • {rating:.1f} / 5",
                    sort_key=key,
                )
        return best

    # -------------------------------------------------------------------------
    # Pace
    # -------------------------------------------------------------------------

    @staticmethod
    def average_pages_per_book(finished_books: Iterable[Book]) -> Optional[int]:
        pages = [b.page_count_normalized for b in finished_books if b.page_count_normalized]
        if not pages:
            return None
        return _round(sum(pages) / len(pages))

    @staticmethod
    def average_days_per_book(finished_books: Iterable[Book]) -> Optional[int]:
        durations = [
            d for d in (days_between(b.read_from, b.read_to) for b in finished_books)
            if d is not None
        ]
        if not durations:
            return None
        return _round(sum(durations) / len(durations))

    @staticmethod
    def average_pages_per_day(finished_books: Iterable[Book]) -> Optional[int]:
        speeds = []
        for book in finished_books:
            pages = book.page_count_normalized
            days = days_between(book.read_from, book.read_to)
            if pages and days:
                speeds.append(pages / days)
        if not speeds:
            return None
        return _round(sum(speeds) / len(speeds))

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    def compute_summary(
        self,
        books: Iterable[Book],
        scope: StatsScope,
        year: int,
        today: Optional[date] = None,
    ) -> StatsSummary:
        """Compute all statistics for a scope and year.

        Top lists and the highest-rated pick span the whole scope; the
        monthly series, pace figures and the other picks only use books
        finished in the selected year.

        Args:
            books: Full book collection
            scope: Which books to include
            year: Selected year
            today: Reference day for the month range (default: today)

        Returns:
            StatsSummary for the scope and year
        """
        if today is None:
            today = date.today()

        scoped = self.scoped_books(books, scope)
        finished = self.finished_in_year(scoped, year)
        months = self.months_for_year(year, today)

        return StatsSummary(
            scope=StatsScope(scope),
            year=year,
            months_count=len(months),
            monthly_series=self.monthly_series(months, finished),
            top_genres=self.top_genres(scoped),
            top_subgenres=self.top_subgenres(scoped),
            top_authors=self.top_authors(scoped),
            top_publishers=self.top_publishers(scoped),
            top_languages=self.top_languages(scoped),
            top_tags=self.top_tags(scoped),
            fastest=self.fastest_book(finished),
            slowest=self.slowest_book(finished),
            biggest=self.biggest_book(finished),
            highest_rated=self.highest_rated_book(scoped),
            finished_in_year=len(finished),
            total_pages=sum(b.page_count_normalized or 0 for b in finished),
            avg_pages_per_book=self.average_pages_per_book(finished),
            avg_days_per_book=self.average_days_per_book(finished),
            avg_pages_per_day=self.average_pages_per_day(finished),
        )
