"""Reading activity module.

Provides functionality for:
- Splitting reading sessions into local calendar days
- Day-bucketed counts for reading minutes, reading days and completions
- Heatmap grids, intensity levels, streaks and best day/weekday/week
"""

from .aggregator import ActivityAggregator, ActivityMetric
from .heatmap import (
    BestDay,
    BestWeek,
    BestWeekday,
    HeatmapBuilder,
    HeatmapDay,
    HeatmapRange,
    HeatmapStats,
    HeatmapWeek,
    heat_level,
    heatmap_range_for_year,
)
from .intervals import DayRange, TimeWindow, clamp, normalize, split_by_day

__all__ = [
    "ActivityAggregator",
    "ActivityMetric",
    "BestDay",
    "BestWeek",
    "BestWeekday",
    "DayRange",
    "HeatmapBuilder",
    "HeatmapDay",
    "HeatmapRange",
    "HeatmapStats",
    "HeatmapWeek",
    "TimeWindow",
    "clamp",
    "heat_level",
    "heatmap_range_for_year",
    "normalize",
    "split_by_day",
]
