"""Schemas for adaptive weekly and monthly challenges."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..library.schemas import generate_uuid


class ChallengeKind(str, Enum):
    """Length of a challenge period."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def display_name(self) -> str:
        return "Week" if self == ChallengeKind.WEEKLY else "Month"


class ChallengeMetric(str, Enum):
    """What a challenge measures."""

    READING_MINUTES = "reading_minutes"
    READING_DAYS = "reading_days"
    SESSIONS = "sessions"
    PAGES_READ = "pages_read"
    BOOKS_FINISHED = "books_finished"

    @property
    def unit_suffix(self) -> str:
        return {
            ChallengeMetric.READING_MINUTES: "min",
            ChallengeMetric.READING_DAYS: "days",
            ChallengeMetric.SESSIONS: "sessions",
            ChallengeMetric.PAGES_READ: "pages",
            ChallengeMetric.BOOKS_FINISHED: "books",
        }[self]


class ChallengeState(str, Enum):
    """Lifecycle state of a challenge record."""

    ACTIVE = "active"  # no completion yet
    COMPLETED = "completed"  # target reached, not acknowledged
    CLAIMED = "claimed"  # acknowledged by the user


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ChallengeRecord(BaseModel):
    """A generated goal for one week or month.

    Title and detail are frozen at generation time. Instants are kept as
    aware UTC datetimes; naive input is read as UTC.
    """

    id: str = Field(default_factory=generate_uuid)
    kind: ChallengeKind
    metric: ChallengeMetric
    period_start: datetime
    period_end: datetime
    title: str = ""
    detail: str = ""
    target_value: int = Field(..., gt=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None
    acknowledged_at: Optional[datetime] = None
    rerolls_used: int = Field(0, ge=0, le=1)
    rerolled_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator(
        "period_start",
        "period_end",
        "created_at",
        "completed_at",
        "acknowledged_at",
        "rerolled_at",
    )
    @classmethod
    def normalize_instant(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Store every instant in UTC."""
        return _as_utc(v)

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def is_claimed(self) -> bool:
        return self.acknowledged_at is not None

    @property
    def state(self) -> ChallengeState:
        if self.is_claimed:
            return ChallengeState.CLAIMED
        if self.is_completed:
            return ChallengeState.COMPLETED
        return ChallengeState.ACTIVE

    @property
    def can_reroll(self) -> bool:
        """One reroll per period, and only before completion."""
        return not self.is_completed and self.rerolls_used < 1

    def is_current(self, now: datetime) -> bool:
        """Check whether now falls inside [period_start, period_end)."""
        now = _as_utc(now)
        return self.period_start <= now < self.period_end

    def period_label(self, tz: Optional[tzinfo] = None) -> str:
        """First and last local day of the period."""
        tz = tz or timezone.utc
        first = self.period_start.astimezone(tz).date()
        last = (self.period_end.astimezone(tz) - timedelta(days=1)).date()
        return f"{first.isoformat()} – {last.isoformat()}"


@dataclass(frozen=True)
class ChallengeProgress:
    """Progress toward a target, in the unit of the metric."""

    value: int
    unit_suffix: str

    def fraction(self, target: int) -> float:
        """Share of the target reached, between 0 and 1."""
        if target <= 0:
            return 0.0
        return min(1.0, max(0.0, self.value / target))

    def value_text(self, target: int) -> str:
        if target > 0:
            return f"{self.value}/{target} {self.unit_suffix}"
        return f"{self.value} {self.unit_suffix}"

    def remaining_text(self, target: int) -> Optional[str]:
        """Text for what is left, or None once the target is reached."""
        if target <= 0:
            return None
        remaining = max(0, target - self.value)
        if remaining == 0:
            return None
        return f"{remaining} more {self.unit_suffix}"


@dataclass(frozen=True)
class BaselineStats:
    """Totals over the lookback window before a period."""

    minutes: int = 0
    active_days: int = 0
    sessions: int = 0
    pages_read: int = 0
    finished_books: int = 0


@dataclass(frozen=True)
class GeneratedChallenge:
    """Metric, target and copy produced for a new or rerolled challenge."""

    metric: ChallengeMetric
    title: str
    detail: str
    target_value: int
