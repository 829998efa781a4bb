"""Heatmap grid, intensity levels, streaks and records.

Works on the day -> count mapping produced by ActivityAggregator.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from .aggregator import ActivityMetric
from .intervals import DayRange, iter_days

WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
EMPTY_LABEL = "–"


@dataclass(frozen=True)
class HeatmapRange:
    """Visible day range plus the whole-week grid around it."""

    start: date
    end: date
    grid_start: date  # Monday
    grid_end: date  # Sunday

    @classmethod
    def for_days(cls, start: date, end: date) -> "HeatmapRange":
        """Extend [start, end] to Monday of the first week and Sunday of the last."""
        grid_start = start - timedelta(days=start.weekday())
        grid_end = end + timedelta(days=6 - end.weekday())
        return cls(start=start, end=end, grid_start=grid_start, grid_end=grid_end)

    @property
    def days(self) -> DayRange:
        return DayRange(self.start, self.end)


@dataclass(frozen=True)
class HeatmapDay:
    """One grid cell."""

    date: date
    count: int
    level: int
    is_in_range: bool


@dataclass(frozen=True)
class HeatmapWeek:
    """Seven cells, Monday first."""

    index: int
    days: tuple[HeatmapDay, ...]


@dataclass(frozen=True)
class BestDay:
    date: date
    count: int


@dataclass(frozen=True)
class BestWeekday:
    weekday: int  # 0=Monday, 6=Sunday
    total: int

    @property
    def name(self) -> str:
        return WEEKDAY_LABELS[self.weekday]


@dataclass(frozen=True)
class BestWeek:
    iso_year: int
    iso_week: int
    total: int


@dataclass
class HeatmapStats:
    """Summary numbers shown next to the heatmap."""

    active_days: int = 0
    max_count: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    best_day: Optional[BestDay] = None
    best_weekday: Optional[BestWeekday] = None
    best_week: Optional[BestWeek] = None
    unit_suffix: str = ""
    weekday_totals: list[int] = field(default_factory=lambda: [0] * 7)

    @property
    def best_day_label(self) -> str:
        if self.best_day is None:
            return EMPTY_LABEL
        d = self.best_day.date
        return f"{d:%b} {d.day}, {d.year} • {self.best_day.count}{self.unit_suffix}"

    @property
    def best_weekday_label(self) -> str:
        if self.best_weekday is None:
            return EMPTY_LABEL
        return f"{self.best_weekday.name} • {self.best_weekday.total}{self.unit_suffix}"

    @property
    def best_week_label(self) -> str:
        if self.best_week is None:
            return EMPTY_LABEL
        w = self.best_week
        return f"W{w.iso_week} ({w.iso_year}) • {w.total}{self.unit_suffix}"


def heatmap_range_for_year(year: int, today: date) -> HeatmapRange:
    """Range for a calendar year, cut off at today for the current year."""
    start = date(year, 1, 1)
    end = date(year, 12, 31)
    if today.year == year:
        end = min(today, end)
    return HeatmapRange.for_days(start, end)


def heat_level(count: int, max_count: int) -> int:
    """Bucket a count into intensity levels 0-4.

    Small scales (max <= 4) map counts directly; larger scales use quarters
    of the maximum.
    """
    if count <= 0 or max_count <= 0:
        return 0
    if max_count <= 4:
        return min(count, max_count)

    ratio = count / max_count
    if ratio <= 0.25:
        return 1
    if ratio <= 0.50:
        return 2
    if ratio <= 0.75:
        return 3
    return 4


def build_weeks(counts: dict[date, int], heatmap_range: HeatmapRange) -> list[HeatmapWeek]:
    """Lay out counts as Monday-aligned weeks.

    Cells outside the visible range are kept as filler with count and
    level forced to 0.
    """
    in_range_counts = [c for d, c in counts.items() if heatmap_range.start <= d <= heatmap_range.end]
    max_count = max(in_range_counts, default=0)

    total_days = (heatmap_range.grid_end - heatmap_range.grid_start).days
    week_count = max(1, total_days // 7 + 1)

    weeks = []
    for w in range(week_count):
        week_start = heatmap_range.grid_start + timedelta(days=w * 7)
        cells = []
        for d in range(7):
            day = week_start + timedelta(days=d)
            in_range = heatmap_range.start <= day <= heatmap_range.end
            count = counts.get(day, 0) if in_range else 0
            level = heat_level(count, max_count) if in_range else 0
            cells.append(HeatmapDay(date=day, count=count, level=level, is_in_range=in_range))
        weeks.append(HeatmapWeek(index=w, days=tuple(cells)))

    return weeks


def current_streak(counts: dict[date, int], day_range: DayRange) -> int:
    """Consecutive active days ending on the last day of the range."""
    streak = 0
    day = day_range.end
    while day >= day_range.start and counts.get(day, 0) > 0:
        streak += 1
        day -= timedelta(days=1)
    return streak


def longest_streak(counts: dict[date, int], day_range: DayRange) -> int:
    """Longest run of consecutive active days inside the range."""
    longest = 0
    running = 0
    for day in iter_days(day_range.start, day_range.end):
        if counts.get(day, 0) > 0:
            running += 1
            longest = max(longest, running)
        else:
            running = 0
    return longest


def best_day(counts: dict[date, int]) -> Optional[BestDay]:
    """Day with the highest count; earliest day wins ties."""
    best: Optional[BestDay] = None
    for day in sorted(counts):
        count = counts[day]
        if count > 0 and (best is None or count > best.count):
            best = BestDay(date=day, count=count)
    return best


def weekday_totals(counts: dict[date, int]) -> list[int]:
    """Sum of counts per weekday, Monday first."""
    totals = [0] * 7
    for day, count in counts.items():
        if count > 0:
            totals[day.weekday()] += count
    return totals


def best_weekday(counts: dict[date, int]) -> Optional[BestWeekday]:
    """Weekday with the highest total; earliest weekday wins ties."""
    totals = weekday_totals(counts)
    idx = max(range(7), key=lambda i: totals[i])
    if totals[idx] <= 0:
        return None
    return BestWeekday(weekday=idx, total=totals[idx])


def best_week(counts: dict[date, int]) -> Optional[BestWeek]:
    """ISO week with the highest total; earliest week wins ties."""
    sums: dict[tuple[int, int], int] = {}
    for day, count in counts.items():
        if count > 0:
            iso = day.isocalendar()
            key = (iso[0], iso[1])
            sums[key] = sums.get(key, 0) + count

    best: Optional[BestWeek] = None
    for key in sorted(sums):
        total = sums[key]
        if best is None or total > best.total:
            best = BestWeek(iso_year=key[0], iso_week=key[1], total=total)
    return best


def compute_stats(
    counts: dict[date, int],
    day_range: DayRange,
    metric: ActivityMetric = ActivityMetric.READING_DAYS,
) -> HeatmapStats:
    """Summarize a day -> count mapping over a range."""
    in_range = {d: c for d, c in counts.items() if d in day_range}

    return HeatmapStats(
        active_days=sum(1 for c in in_range.values() if c > 0),
        max_count=max(in_range.values(), default=0),
        current_streak=current_streak(in_range, day_range),
        longest_streak=longest_streak(in_range, day_range),
        best_day=best_day(in_range),
        best_weekday=best_weekday(in_range),
        best_week=best_week(in_range),
        unit_suffix=ActivityMetric(metric).unit_suffix,
        weekday_totals=weekday_totals(in_range),
    )


class HeatmapBuilder:
    """Builds heatmap grids and statistics from daily counts."""

    def __init__(self, metric: ActivityMetric = ActivityMetric.READING_DAYS):
        self.metric = ActivityMetric(metric)

    def weeks(self, counts: dict[date, int], heatmap_range: HeatmapRange) -> list[HeatmapWeek]:
        return build_weeks(counts, heatmap_range)

    def stats(self, counts: dict[date, int], heatmap_range: HeatmapRange) -> HeatmapStats:
        return compute_stats(counts, heatmap_range.days, self.metric)
