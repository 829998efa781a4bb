"""Interval math for reading sessions.

Sessions are instants; heatmaps and challenges work on local calendar days.
Everything here converts to UTC before subtracting so that day lengths
around DST switches come out exact, and floors instants to whole seconds so
that per-day parts always add up to the clamped total.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterator, NamedTuple, Optional

from ..config import get_config

ONE_DAY = timedelta(days=1)


class TimeWindow(NamedTuple):
    """Half-open instant window [start, end)."""

    start: datetime
    end: datetime


@dataclass(frozen=True)
class DayRange:
    """Inclusive range of calendar days."""

    start: date
    end: date

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end

    def __len__(self) -> int:
        return max(0, (self.end - self.start).days + 1)

    def days(self) -> Iterator[date]:
        """Iterate every day of the range."""
        return iter_days(self.start, self.end)

    def window(self, tz: Optional[tzinfo] = None) -> TimeWindow:
        """The instant window covering the whole range."""
        return day_window(self.start, self.end, tz)


def resolve_tz(tz: Optional[tzinfo] = None) -> tzinfo:
    """Return tz, or the configured timezone when none is given."""
    return tz if tz is not None else get_config().tzinfo


def to_local(dt: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Express an instant in local time. Naive values are already local."""
    tz = resolve_tz(tz)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def to_utc(dt: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Express an instant in UTC. Naive values are read as local time."""
    return to_local(dt, tz).astimezone(timezone.utc)


def local_day(dt: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar day an instant falls on, in local time."""
    return to_local(dt, tz).date()


def start_of_day(day: date, tz: Optional[tzinfo] = None) -> datetime:
    """Local midnight of a day, as a UTC instant."""
    tz = resolve_tz(tz)
    return datetime.combine(day, time(), tzinfo=tz).astimezone(timezone.utc)


def day_window(first: date, last: date, tz: Optional[tzinfo] = None) -> TimeWindow:
    """Instant window [first 00:00, (last + 1) 00:00) in local time."""
    return TimeWindow(start_of_day(first, tz), start_of_day(last + ONE_DAY, tz))


def iter_days(first: date, last: date) -> Iterator[date]:
    """Yield each calendar day from first to last inclusive."""
    day = first
    while day <= last:
        yield day
        day += ONE_DAY


def normalize(a: datetime, b: datetime) -> tuple[datetime, datetime]:
    """Order two instants, swapping reversed entries."""
    if b < a:
        return b, a
    return a, b


def clamp(
    start: datetime,
    end: datetime,
    window: TimeWindow,
) -> Optional[TimeWindow]:
    """Intersect [start, end) with a window.

    Returns:
        The intersection, or None when it is empty
    """
    clamped_start = max(start, window.start)
    clamped_end = min(end, window.end)
    if clamped_end <= clamped_start:
        return None
    return TimeWindow(clamped_start, clamped_end)


def _utc_interval(
    start: datetime,
    end: datetime,
    window: Optional[TimeWindow],
    tz: tzinfo,
) -> Optional[TimeWindow]:
    s, e = normalize(to_utc(start, tz), to_utc(end, tz))
    s = s.replace(microsecond=0)
    e = e.replace(microsecond=0)
    if window is not None:
        utc_window = TimeWindow(to_utc(window.start, tz), to_utc(window.end, tz))
        return clamp(s, e, utc_window)
    if e <= s:
        return None
    return TimeWindow(s, e)


def overlap_seconds(
    start: datetime,
    end: datetime,
    window: TimeWindow,
    tz: Optional[tzinfo] = None,
) -> int:
    """Whole seconds of [start, end) that fall inside the window."""
    interval = _utc_interval(start, end, window, resolve_tz(tz))
    if interval is None:
        return 0
    return int((interval.end - interval.start).total_seconds())


def split_by_day(
    start: datetime,
    end: datetime,
    tz: Optional[tzinfo] = None,
    window: Optional[TimeWindow] = None,
) -> list[tuple[date, int]]:
    """Split an interval into per-day second counts.

    A session running from 23:30 to 00:10 yields 1800 seconds on the first
    day and 600 on the second. Days with no overlap are omitted and no day
    appears twice.

    Args:
        start: Interval start (reversed bounds are swapped)
        end: Interval end
        tz: Timezone for day boundaries (default: configured timezone)
        window: Optional window to clamp the interval to first

    Returns:
        List of (day, seconds) in chronological order
    """
    tz = resolve_tz(tz)
    interval = _utc_interval(start, end, window, tz)
    if interval is None:
        return []

    parts: list[tuple[date, int]] = []
    cursor = interval.start
    while cursor < interval.end:
        day = cursor.astimezone(tz).date()
        next_midnight = start_of_day(day + ONE_DAY, tz)
        if next_midnight <= cursor:
            next_midnight = cursor + ONE_DAY
        segment_end = min(interval.end, next_midnight)
        seconds = int((segment_end - cursor).total_seconds())
        if seconds > 0:
            parts.append((day, seconds))
        cursor = segment_end

    return parts
