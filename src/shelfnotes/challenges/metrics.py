"""Period bounds and session/book aggregations for challenges.

Unlike the heatmap reading-days rule, challenge counting is session based:
a day is active when at least one session covers 60 seconds of it, and a
session only counts when 60 seconds of it fall inside the window.
"""

from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable

from ..activity.intervals import (
    TimeWindow,
    local_day,
    overlap_seconds,
    split_by_day,
    start_of_day,
)
from ..library.schemas import Book, BookStatus, ReadingSession
from .schemas import BaselineStats, ChallengeKind

MIN_COUNTED_SECONDS = 60

LOOKBACK_DAYS = {
    ChallengeKind.WEEKLY: 28,
    ChallengeKind.MONTHLY: 90,
}

# Lookback length in periods, used to turn totals into averages
LOOKBACK_PERIODS = {
    ChallengeKind.WEEKLY: 4,
    ChallengeKind.MONTHLY: 3,
}


def period_first_day(kind: ChallengeKind, day: date) -> date:
    """ISO Monday of the week, or first of the month."""
    if kind == ChallengeKind.WEEKLY:
        return day - timedelta(days=day.weekday())
    return day.replace(day=1)


def next_period_first_day(kind: ChallengeKind, first: date) -> date:
    if kind == ChallengeKind.WEEKLY:
        return first + timedelta(days=7)
    if first.month == 12:
        return date(first.year + 1, 1, 1)
    return date(first.year, first.month + 1, 1)


def period_bounds(kind: ChallengeKind, now: datetime, tz: tzinfo) -> TimeWindow:
    """Half-open instant window of the period containing now.

    Args:
        kind: Weekly or monthly
        now: Reference instant
        tz: Timezone whose midnights bound the period

    Returns:
        UTC window [local period start 00:00, next period start 00:00)
    """
    first = period_first_day(kind, local_day(now, tz))
    return TimeWindow(
        start_of_day(first, tz),
        start_of_day(next_period_first_day(kind, first), tz),
    )


def baseline_window(kind: ChallengeKind, period_start: datetime, tz: tzinfo) -> TimeWindow:
    """Lookback window ending where the period begins."""
    first = local_day(period_start, tz)
    lookback_start = first - timedelta(days=LOOKBACK_DAYS[kind])
    return TimeWindow(start_of_day(lookback_start, tz), period_start)


def _sessions(books: Iterable[Book]) -> Iterable[ReadingSession]:
    for book in books:
        yield from book.sessions


def total_reading_seconds(books: Iterable[Book], window: TimeWindow, tz: tzinfo) -> int:
    """Seconds of session time inside the window."""
    return sum(
        overlap_seconds(s.started_at, s.ended_at, window, tz) for s in _sessions(books)
    )


def active_reading_days(books: Iterable[Book], window: TimeWindow, tz: tzinfo) -> set[date]:
    """Local days on which some session covers at least a minute."""
    days: set[date] = set()
    for session in _sessions(books):
        for day, seconds in split_by_day(session.started_at, session.ended_at, tz, window):
            if seconds >= MIN_COUNTED_SECONDS:
                days.add(day)
    return days


def session_count(books: Iterable[Book], window: TimeWindow, tz: tzinfo) -> int:
    """Sessions with at least a minute inside the window."""
    return sum(
        1
        for s in _sessions(books)
        if overlap_seconds(s.started_at, s.ended_at, window, tz) >= MIN_COUNTED_SECONDS
    )


def total_pages_read(books: Iterable[Book], window: TimeWindow, tz: tzinfo) -> int:
    """Logged pages of every session touching the window.

    Pages are not split by time; any overlap counts the whole session.
    """
    total = 0
    for s in _sessions(books):
        if overlap_seconds(s.started_at, s.ended_at, window, tz) > 0:
            total += s.pages_read_normalized or 0
    return total


def finished_books_count(books: Iterable[Book], window: TimeWindow, tz: tzinfo) -> int:
    """Finished books whose read_to day starts inside the window."""
    count = 0
    for book in books:
        if book.status != BookStatus.FINISHED or book.read_to is None:
            continue
        if window.start <= start_of_day(book.read_to, tz) < window.end:
            count += 1
    return count


def baseline_stats(
    books: Iterable[Book],
    kind: ChallengeKind,
    period_start: datetime,
    tz: tzinfo,
) -> BaselineStats:
    """Totals over the lookback window before a period.

    Args:
        books: Books with their sessions
        kind: Weekly (28 days back) or monthly (90 days back)
        period_start: Start of the period being generated
        tz: Timezone for day boundaries

    Returns:
        BaselineStats with whole minutes and counts
    """
    books = list(books)
    window = baseline_window(kind, period_start, tz)
    return BaselineStats(
        minutes=max(0, total_reading_seconds(books, window, tz) // 60),
        active_days=len(active_reading_days(books, window, tz)),
        sessions=session_count(books, window, tz),
        pages_read=total_pages_read(books, window, tz),
        finished_books=finished_books_count(books, window, tz),
    )
