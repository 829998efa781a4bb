"""Challenge engine: generation, progress and lifecycle.

Each operation reads a fresh snapshot from the provider and writes through
the store. Mutations are applied to the record before saving; when the
save fails the caller gets a ChallengeSaveError and the record keeps its
new state.
"""

from datetime import datetime, timezone, tzinfo
from typing import Callable, Optional

import structlog

from ..activity.intervals import TimeWindow, resolve_tz, to_utc
from ..library.providers import SnapshotProvider
from ..library.schemas import Book
from .metrics import (
    active_reading_days,
    baseline_stats,
    finished_books_count,
    period_bounds,
    session_count,
    total_pages_read,
    total_reading_seconds,
)
from .schemas import (
    BaselineStats,
    ChallengeKind,
    ChallengeMetric,
    ChallengeProgress,
    ChallengeRecord,
)
from .store import ChallengeStore, ChallengeStoreError
from .targets import generate_challenge, pick_metric, reroll_metric

logger = structlog.get_logger(__name__)


class ChallengeNotFoundError(Exception):
    """Raised when a challenge id does not exist."""

    def __init__(self, challenge_id: str):
        self.challenge_id = challenge_id
        super().__init__(f"Challenge not found: {challenge_id}")


class ChallengeSaveError(Exception):
    """Raised when a challenge mutation could not be persisted."""

    def __init__(self, action: str, reason: str):
        self.action = action
        self.reason = reason
        super().__init__(f"could not save challenge {action}: {reason}")


class ChallengeEngine:
    """Generates and tracks adaptive weekly and monthly challenges."""

    def __init__(
        self,
        snapshots: SnapshotProvider,
        store: ChallengeStore,
        tz: Optional[tzinfo] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize engine.

        Args:
            snapshots: Source of books and sessions
            store: Persistence for challenge records
            tz: Timezone for period boundaries (default: configured timezone)
            clock: Returns the current instant (default: datetime.now)
        """
        self.snapshots = snapshots
        self.store = store
        self.tz = resolve_tz(tz)
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def _now(self, now: Optional[datetime] = None) -> datetime:
        return to_utc(now if now is not None else self.clock(), self.tz)

    def _books(self) -> tuple[Book, ...]:
        return self.snapshots.get_snapshot().books

    def _save(self, action: str, record: ChallengeRecord, insert: bool = False) -> None:
        try:
            if insert:
                self.store.insert(record)
            else:
                self.store.update(record)
        except ChallengeStoreError as e:
            logger.error(
                "challenge_save_failed",
                action=action,
                challenge_id=record.id,
                error=str(e),
            )
            raise ChallengeSaveError(action, str(e)) from e

    # -------------------------------------------------------------------------
    # Periods and baselines
    # -------------------------------------------------------------------------

    def period_bounds(self, kind: ChallengeKind, now: Optional[datetime] = None) -> TimeWindow:
        """Window of the week or month containing now."""
        return period_bounds(ChallengeKind(kind), self._now(now), self.tz)

    def baseline(self, kind: ChallengeKind, period_start: datetime) -> BaselineStats:
        """Totals over the lookback window before period_start."""
        return baseline_stats(self._books(), ChallengeKind(kind), period_start, self.tz)

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    def ensure_challenge(
        self, kind: ChallengeKind, now: Optional[datetime] = None
    ) -> ChallengeRecord:
        """Return the challenge for the current period, creating it if missing.

        Args:
            kind: Weekly or monthly
            now: Reference instant (default: clock)

        Returns:
            Existing or newly created record

        Raises:
            ChallengeSaveError: If the new record could not be stored
        """
        kind = ChallengeKind(kind)
        now = self._now(now)
        period = period_bounds(kind, now, self.tz)

        existing = self.store.find(kind, period.start)
        if existing is not None:
            return existing

        baseline = self.baseline(kind, period.start)
        metric = pick_metric(kind, baseline)
        generated = generate_challenge(kind, metric, baseline)

        record = ChallengeRecord(
            kind=kind,
            metric=generated.metric,
            period_start=period.start,
            period_end=period.end,
            title=generated.title,
            detail=generated.detail,
            target_value=generated.target_value,
            created_at=now,
        )
        self._save("create", record, insert=True)

        logger.info(
            "challenge_created",
            challenge_id=record.id,
            kind=kind.value,
            metric=record.metric.value,
            target=record.target_value,
            period_start=record.period_start.isoformat(),
        )
        return record

    def ensure_current_challenges(self, now: Optional[datetime] = None) -> list[ChallengeRecord]:
        """Ensure a weekly and a monthly challenge exist for now."""
        now = self._now(now)
        return [
            self.ensure_challenge(ChallengeKind.WEEKLY, now),
            self.ensure_challenge(ChallengeKind.MONTHLY, now),
        ]

    # -------------------------------------------------------------------------
    # Progress
    # -------------------------------------------------------------------------

    def compute_progress(self, record: ChallengeRecord) -> ChallengeProgress:
        """Progress inside the record's period, in the unit of its metric."""
        books = self._books()
        window = TimeWindow(record.period_start, record.period_end)
        metric = record.metric

        if metric == ChallengeMetric.READING_MINUTES:
            value = max(0, total_reading_seconds(books, window, self.tz) // 60)
        elif metric == ChallengeMetric.READING_DAYS:
            value = len(active_reading_days(books, window, self.tz))
        elif metric == ChallengeMetric.SESSIONS:
            value = session_count(books, window, self.tz)
        elif metric == ChallengeMetric.PAGES_READ:
            value = total_pages_read(books, window, self.tz)
        else:
            value = finished_books_count(books, window, self.tz)

        return ChallengeProgress(value=value, unit_suffix=metric.unit_suffix)

    def refresh_completion(self, now: Optional[datetime] = None) -> list[ChallengeRecord]:
        """Mark active challenges whose target is reached as completed.

        Safe to call repeatedly; records that are already completed are
        left alone.

        Returns:
            Records that were completed by this call
        """
        now = self._now(now)
        changed = []
        for record in self.store.list_active(now):
            if record.completed_at is not None:
                continue
            progress = self.compute_progress(record)
            if progress.value >= record.target_value:
                record.completed_at = now
                changed.append(record)

        for record in changed:
            self._save("completion", record)
            logger.info(
                "challenge_completed",
                challenge_id=record.id,
                kind=record.kind.value,
                metric=record.metric.value,
            )
        return changed

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def reroll(self, record: ChallengeRecord) -> bool:
        """Swap the metric of an active challenge once per period.

        Keeps the period, picks the first other allowed metric and
        regenerates the target and copy from the baseline.

        Returns:
            True if the record changed, False if rerolling is not allowed

        Raises:
            ChallengeSaveError: If the change could not be stored
        """
        if not record.can_reroll:
            return False

        previous = record.metric
        new_metric = reroll_metric(record.kind, previous)
        generated = generate_challenge(
            record.kind, new_metric, self.baseline(record.kind, record.period_start)
        )

        record.metric = generated.metric
        record.title = generated.title
        record.detail = generated.detail
        record.target_value = generated.target_value
        record.completed_at = None
        record.acknowledged_at = None
        record.rerolls_used += 1
        record.rerolled_at = self._now()

        self._save("reroll", record)
        logger.info(
            "challenge_rerolled",
            challenge_id=record.id,
            from_metric=previous.value,
            to_metric=record.metric.value,
            target=record.target_value,
        )
        return True

    def claim(self, record: ChallengeRecord) -> bool:
        """Acknowledge a completed challenge.

        Returns:
            True if the record was claimed, False if it was not claimable
        """
        if not record.is_completed or record.is_claimed:
            return False

        record.acknowledged_at = self._now()
        self._save("claim", record)
        logger.info("challenge_claimed", challenge_id=record.id)
        return True

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_challenge(self, challenge_id: str) -> ChallengeRecord:
        """Get a challenge by id.

        Raises:
            ChallengeNotFoundError: If no challenge has that id
        """
        record = self.store.get(challenge_id)
        if record is None:
            raise ChallengeNotFoundError(challenge_id)
        return record

    def active_challenges(self, now: Optional[datetime] = None) -> list[ChallengeRecord]:
        """Challenges whose period contains now, newest first."""
        return self.store.list_active(self._now(now))

    def history(self, kind: Optional[ChallengeKind] = None) -> list[ChallengeRecord]:
        """All stored challenges, newest period first."""
        return self.store.list_all(ChallengeKind(kind) if kind is not None else None)
