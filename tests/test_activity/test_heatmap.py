"""Tests for heatmap grid, levels, streaks and records."""

from datetime import date, timedelta

import pytest

from shelfnotes.activity import (
    ActivityMetric,
    DayRange,
    HeatmapBuilder,
    HeatmapRange,
    heat_level,
    heatmap_range_for_year,
)
from shelfnotes.activity.heatmap import (
    EMPTY_LABEL,
    best_day,
    best_week,
    best_weekday,
    compute_stats,
    current_streak,
    longest_streak,
)


class TestHeatLevel:
    """Tests for heat_level()."""

    def test_small_scale_is_identity(self):
        assert heat_level(3, 4) == 3
        assert heat_level(1, 1) == 1
        assert heat_level(2, 3) == 2

    def test_quarter_boundaries(self):
        assert heat_level(25, 100) == 1
        assert heat_level(26, 100) == 2
        assert heat_level(50, 100) == 2
        assert heat_level(75, 100) == 3
        assert heat_level(76, 100) == 4
        assert heat_level(100, 100) == 4

    def test_zero_is_level_zero(self):
        assert heat_level(0, 100) == 0
        assert heat_level(0, 0) == 0


class TestHeatmapRange:
    """Tests for range and grid bounds."""

    def test_for_days_extends_to_whole_weeks(self):
        r = HeatmapRange.for_days(date(2024, 1, 3), date(2024, 1, 9))
        assert r.grid_start == date(2024, 1, 1)
        assert r.grid_end == date(2024, 1, 14)

    def test_current_year_stops_today(self):
        r = heatmap_range_for_year(2024, today=date(2024, 3, 15))
        assert r.start == date(2024, 1, 1)
        assert r.end == date(2024, 3, 15)
        assert r.grid_end == date(2024, 3, 17)

    def test_past_year_is_complete(self):
        r = heatmap_range_for_year(2023, today=date(2024, 3, 15))
        assert r.end == date(2023, 12, 31)
        assert r.grid_start == date(2022, 12, 26)
        assert r.grid_end == date(2023, 12, 31)


class TestBuildWeeks:
    """Tests for the week grid."""

    def test_grid_shape_and_filler(self):
        r = HeatmapRange.for_days(date(2024, 1, 3), date(2024, 1, 9))
        counts = {date(2024, 1, 1): 9, date(2024, 1, 3): 2, date(2024, 1, 9): 4}
        weeks = HeatmapBuilder().weeks(counts, r)

        assert len(weeks) == 2
        assert all(len(w.days) == 7 for w in weeks)
        assert weeks[0].days[0].date == date(2024, 1, 1)

        monday = weeks[0].days[0]
        assert not monday.is_in_range
        assert monday.count == 0
        assert monday.level == 0

        wednesday = weeks[0].days[2]
        assert wednesday.is_in_range
        assert wednesday.count == 2
        assert wednesday.level == 2

        assert weeks[1].days[1].count == 4
        assert weeks[1].days[1].level == 4


class TestStreaks:
    """Tests for current and longest streaks."""

    def test_full_range(self):
        day_range = DayRange(date(2024, 1, 1), date(2024, 1, 10))
        counts = {d: 1 for d in day_range.days()}
        assert current_streak(counts, day_range) == 10
        assert longest_streak(counts, day_range) == 10

    def test_current_streak_ends_at_range_end(self):
        day_range = DayRange(date(2024, 1, 1), date(2024, 1, 10))
        counts = {date(2024, 1, 8): 1, date(2024, 1, 9): 2, date(2024, 1, 10): 1}
        assert current_streak(counts, day_range) == 3

    def test_current_streak_zero_on_gap(self):
        day_range = DayRange(date(2024, 1, 1), date(2024, 1, 10))
        counts = {date(2024, 1, 8): 1, date(2024, 1, 9): 2}
        assert current_streak(counts, day_range) == 0

    def test_longest_streak_resets(self):
        day_range = DayRange(date(2024, 1, 1), date(2024, 1, 10))
        counts = {
            date(2024, 1, 1): 1,
            date(2024, 1, 2): 1,
            date(2024, 1, 4): 1,
            date(2024, 1, 5): 1,
            date(2024, 1, 6): 1,
            date(2024, 1, 10): 1,
        }
        assert longest_streak(counts, day_range) == 3
        assert current_streak(counts, day_range) == 1

    @pytest.mark.parametrize("gap", [0, 3, 7])
    def test_longest_never_below_current(self, gap):
        day_range = DayRange(date(2024, 1, 1), date(2024, 1, 20))
        counts = {
            d: 1 for d in day_range.days() if d != date(2024, 1, 1) + timedelta(days=gap)
        }
        assert longest_streak(counts, day_range) >= current_streak(counts, day_range)


class TestRecords:
    """Tests for best day, weekday and week."""

    def test_best_day_earliest_on_tie(self):
        counts = {date(2024, 1, 5): 3, date(2024, 1, 2): 3, date(2024, 1, 3): 1}
        result = best_day(counts)
        assert result.date == date(2024, 1, 2)
        assert result.count == 3

    def test_best_day_none_without_activity(self):
        assert best_day({}) is None
        assert best_day({date(2024, 1, 1): 0}) is None

    def test_best_weekday_sums_weekdays(self):
        # 2024-01-01 is a Monday
        counts = {date(2024, 1, 1): 2, date(2024, 1, 8): 2, date(2024, 1, 3): 3}
        result = best_weekday(counts)
        assert result.weekday == 0
        assert result.total == 4
        assert result.name == "Mon"

    def test_best_weekday_earliest_on_tie(self):
        counts = {date(2024, 1, 3): 2, date(2024, 1, 2): 2}
        assert best_weekday(counts).weekday == 1

    def test_best_week_uses_iso_weeks(self):
        # 2024-12-30 and 2024-12-31 belong to ISO week 1 of 2025
        counts = {date(2024, 12, 30): 2, date(2024, 12, 31): 3, date(2024, 12, 27): 4}
        result = best_week(counts)
        assert (result.iso_year, result.iso_week, result.total) == (2025, 1, 5)

    def test_best_week_earliest_on_tie(self):
        counts = {date(2024, 1, 10): 2, date(2024, 1, 3): 2}
        result = best_week(counts)
        assert (result.iso_year, result.iso_week) == (2024, 1)


class TestComputeStats:
    """Tests for compute_stats()."""

    def test_summary_and_labels(self):
        day_range = DayRange(date(2024, 1, 1), date(2024, 1, 7))
        counts = {date(2024, 1, 2): 5, date(2024, 1, 3): 2, date(2024, 2, 1): 99}
        stats = compute_stats(counts, day_range, ActivityMetric.READING_MINUTES)

        assert stats.active_days == 2
        assert stats.max_count == 5
        assert stats.longest_streak == 2
        assert stats.current_streak == 0
        assert stats.best_day_label == "Jan 2, 2024 • 5 min"
        assert stats.best_weekday_label == "Tue • 5 min"
        assert stats.best_week_label == "W1 (2024) • 7 min"

    def test_empty_labels(self):
        stats = compute_stats({}, DayRange(date(2024, 1, 1), date(2024, 1, 7)))
        assert stats.active_days == 0
        assert stats.best_day is None
        assert stats.best_day_label == EMPTY_LABEL
        assert stats.best_weekday_label == EMPTY_LABEL
        assert stats.best_week_label == EMPTY_LABEL
