"""Signature-keyed caching of heatmap and statistics results.

Callers ask for a result with their current parameters; the service
derives a key from those parameters plus the snapshot signature and only
recomputes when the key changed since the last call.
"""

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Callable, Generic, Optional, TypeVar

import structlog

from ..activity.aggregator import ActivityAggregator, ActivityMetric
from ..activity.heatmap import (
    HeatmapBuilder,
    HeatmapRange,
    HeatmapStats,
    HeatmapWeek,
    heatmap_range_for_year,
)
from ..activity.intervals import local_day, resolve_tz
from ..library.providers import SnapshotProvider
from ..stats.analytics import StatsAggregator, StatsScope, StatsSummary
from .signature import books_signature

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheKey:
    """Identity of one aggregation request."""

    scope: StatsScope
    selected_year: int
    metric: Optional[ActivityMetric]
    signature: str


class SignatureCache(Generic[T]):
    """Single-entry cache replaced whenever the key changes."""

    def __init__(self, name: str = "cache"):
        self.name = name
        self._key: Optional[CacheKey] = None
        self._value: Optional[T] = None
        self.hits = 0
        self.misses = 0

    @property
    def key(self) -> Optional[CacheKey]:
        return self._key

    def get_or_compute(self, key: CacheKey, compute: Callable[[], T]) -> T:
        """Return the cached value for key, recomputing on mismatch.

        Args:
            key: Key for the current request
            compute: Builds the value from scratch

        Returns:
            The cached or freshly computed value
        """
        if self._key is not None and self._key == key:
            self.hits += 1
            logger.debug("cache_hit", cache=self.name, signature=key.signature)
            return self._value  # type: ignore[return-value]

        self.misses += 1
        value = compute()
        self._key = key
        self._value = value
        logger.debug(
            "cache_recompute",
            cache=self.name,
            scope=key.scope.value,
            year=key.selected_year,
            signature=key.signature,
        )
        return value

    def invalidate(self) -> None:
        """Drop the cached entry so the next request recomputes."""
        if self._key is not None:
            logger.debug("cache_invalidated", cache=self.name)
        self._key = None
        self._value = None


@dataclass(frozen=True)
class HeatmapReport:
    """Everything needed to render one heatmap."""

    metric: ActivityMetric
    range: HeatmapRange
    counts: dict[date, int]
    weeks: list[HeatmapWeek]
    stats: HeatmapStats


class InsightsService:
    """Cached heatmap and statistics over a snapshot provider."""

    def __init__(
        self,
        snapshots: SnapshotProvider,
        tz: Optional[tzinfo] = None,
        stats_aggregator: Optional[StatsAggregator] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize service.

        Args:
            snapshots: Source of the current books and sessions
            tz: Timezone for day boundaries (default: configured timezone)
            stats_aggregator: Aggregator for statistics (default: from config)
            clock: Returns the current instant (default: datetime.now)
        """
        self.snapshots = snapshots
        self.tz = resolve_tz(tz)
        self.activity = ActivityAggregator(self.tz)
        self.stats_aggregator = stats_aggregator or StatsAggregator()
        self.clock = clock or (lambda: datetime.now(self.tz))
        self.heatmap_cache: SignatureCache[HeatmapReport] = SignatureCache("heatmap")
        self.stats_cache: SignatureCache[StatsSummary] = SignatureCache("stats")

    def today(self) -> date:
        return local_day(self.clock(), self.tz)

    def heatmap(
        self,
        year: int,
        metric: ActivityMetric = ActivityMetric.READING_DAYS,
        scope: StatsScope = StatsScope.ALL,
    ) -> HeatmapReport:
        """Heatmap for a year, recomputed only when the key changes."""
        metric = ActivityMetric(metric)
        scope = StatsScope(scope)
        books = self.snapshots.get_snapshot().books
        key = CacheKey(scope, year, metric, books_signature(books))

        def compute() -> HeatmapReport:
            today = self.today()
            scoped = StatsAggregator.scoped_books(books, scope)
            heatmap_range = heatmap_range_for_year(year, today)
            counts = self.activity.daily_counts(metric, heatmap_range.days, scoped, today=today)
            builder = HeatmapBuilder(metric)
            return HeatmapReport(
                metric=metric,
                range=heatmap_range,
                counts=counts,
                weeks=builder.weeks(counts, heatmap_range),
                stats=builder.stats(counts, heatmap_range),
            )

        return self.heatmap_cache.get_or_compute(key, compute)

    def stats(self, year: int, scope: StatsScope = StatsScope.ALL) -> StatsSummary:
        """Statistics summary for a scope and year."""
        scope = StatsScope(scope)
        books = self.snapshots.get_snapshot().books
        key = CacheKey(scope, year, None, books_signature(books))
        return self.stats_cache.get_or_compute(
            key,
            lambda: self.stats_aggregator.compute_summary(books, scope, year, self.today()),
        )

    def invalidate_sessions(self) -> None:
        """Force recomputation after a session was added, edited or deleted."""
        self.heatmap_cache.invalidate()
        self.stats_cache.invalidate()
