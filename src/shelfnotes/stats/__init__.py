"""Reading statistics and yearly goals."""

from .analytics import (
    MonthKey,
    MonthlySeriesPoint,
    NerdPick,
    StatsAggregator,
    StatsScope,
    StatsSummary,
    TopEntry,
)
from .genres import ParsedGenre, extract_genres, extract_subgenres, parse_genre
from .goals import (
    GoalProgress,
    GoalStoreError,
    GoalTracker,
    ReadingGoal,
    goal_progress,
    year_options,
)

__all__ = [
    "GoalProgress",
    "GoalStoreError",
    "GoalTracker",
    "MonthKey",
    "MonthlySeriesPoint",
    "NerdPick",
    "ParsedGenre",
    "ReadingGoal",
    "StatsAggregator",
    "StatsScope",
    "StatsSummary",
    "TopEntry",
    "extract_genres",
    "extract_subgenres",
    "goal_progress",
    "parse_genre",
    "year_options",
]
