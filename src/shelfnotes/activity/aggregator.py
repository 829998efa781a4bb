"""Day-bucketed activity counts for heatmaps.

Each metric has its own attribution rule:
- reading-minutes: session time split at local midnight, summed per day in
  seconds and only then rounded to minutes
- completions: one count on the day a finished book was completed
- reading-days: days covered by a book's reading period (not its sessions)
"""

from collections import defaultdict
from datetime import date, datetime, tzinfo
from enum import Enum
from typing import Iterable, Optional

from ..library.schemas import Book, BookStatus
from .intervals import DayRange, iter_days, local_day, resolve_tz, split_by_day


class ActivityMetric(str, Enum):
    """What a heatmap cell counts."""

    READING_DAYS = "reading-days"
    READING_MINUTES = "reading-minutes"
    COMPLETIONS = "completions"

    @property
    def unit_suffix(self) -> str:
        """Suffix appended to counts in labels."""
        if self == ActivityMetric.READING_MINUTES:
            return " min"
        return ""

    @property
    def label(self) -> str:
        return {
            ActivityMetric.READING_DAYS: "Reading days",
            ActivityMetric.READING_MINUTES: "Reading minutes",
            ActivityMetric.COMPLETIONS: "Completions",
        }[self]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if value < 0:
        return -int(-value + 0.5)
    return int(value + 0.5)


class ActivityAggregator:
    """Computes daily activity counts over a set of books."""

    def __init__(self, tz: Optional[tzinfo] = None):
        """Initialize aggregator.

        Args:
            tz: Timezone for day boundaries (default: configured timezone)
        """
        self.tz = resolve_tz(tz)

    def daily_counts(
        self,
        metric: ActivityMetric,
        day_range: DayRange,
        books: Iterable[Book],
        today: Optional[date] = None,
    ) -> dict[date, int]:
        """Count activity per day.

        Args:
            metric: Metric to count
            day_range: Inclusive day range; days outside it are dropped
            books: Books (with their sessions) to aggregate
            today: Reference day for in-progress books (default: today)

        Returns:
            Mapping of day to count; days without activity are absent
        """
        metric = ActivityMetric(metric)
        if metric == ActivityMetric.READING_MINUTES:
            return self.reading_minutes(day_range, books)
        if metric == ActivityMetric.COMPLETIONS:
            return self.completions(day_range, books)
        return self.reading_days(day_range, books, today=today)

    def reading_minutes(self, day_range: DayRange, books: Iterable[Book]) -> dict[date, int]:
        """Minutes read per day, rounded after summing each day's seconds."""
        window = day_range.window(self.tz)
        seconds_by_day: dict[date, int] = defaultdict(int)

        for book in books:
            for session in book.sessions:
                parts = split_by_day(
                    session.started_at, session.ended_at, tz=self.tz, window=window
                )
                for day, seconds in parts:
                    if day in day_range:
                        seconds_by_day[day] += seconds

        minutes: dict[date, int] = {}
        for day, seconds in seconds_by_day.items():
            m = round_half_up(seconds / 60)
            if m > 0:
                minutes[day] = m
        return minutes

    def completions(self, day_range: DayRange, books: Iterable[Book]) -> dict[date, int]:
        """Finished books per completion day."""
        counts: dict[date, int] = defaultdict(int)
        for book in books:
            day = book.completion_date
            if day is not None and day in day_range:
                counts[day] += 1
        return dict(counts)

    def reading_days(
        self,
        day_range: DayRange,
        books: Iterable[Book],
        today: Optional[date] = None,
    ) -> dict[date, int]:
        """Books active per day, derived from reading periods.

        Finished books cover read_from..read_to (or the single known bound).
        Books in progress cover read_from..min(today, range end).
        """
        if today is None:
            today = local_day(datetime.now(self.tz), self.tz)

        counts: dict[date, int] = defaultdict(int)

        def add_span(first: date, last: date) -> None:
            first = max(first, day_range.start)
            last = min(last, day_range.end)
            for day in iter_days(first, last):
                counts[day] += 1

        for book in books:
            if book.status == BookStatus.FINISHED:
                if book.read_from and book.read_to:
                    add_span(book.read_from, book.read_to)
                else:
                    day = book.read_to or book.read_from
                    if day is not None:
                        add_span(day, day)
            elif book.status == BookStatus.READING:
                if book.read_from:
                    add_span(book.read_from, min(today, day_range.end))

        return dict(counts)
