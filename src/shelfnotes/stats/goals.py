"""Yearly reading goals.

A goal is a target number of finished books for one calendar year.
Progress counts finished books whose completion day (read_to, else
read_from) falls in that year.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ..activity.aggregator import round_half_up
from ..db.models import utc_now_iso
from ..db.sqlite import Database, get_db
from ..library.schemas import Book
from .analytics import StatsAggregator
from .models import ReadingGoalRow

logger = structlog.get_logger(__name__)

DEFAULT_TARGET = 50
MIN_TARGET = 1
MAX_TARGET = 200


class GoalStoreError(Exception):
    """Raised when reading goals cannot be read or written."""


@dataclass
class ReadingGoal:
    """Target number of finished books for a year."""

    year: int
    target_count: int = DEFAULT_TARGET
    updated_at: Optional[datetime] = None

    @property
    def is_stored(self) -> bool:
        return self.updated_at is not None


@dataclass(frozen=True)
class GoalProgress:
    """Progress toward a yearly goal."""

    goal: ReadingGoal
    finished_books: list[Book] = field(default_factory=list)
    pages_read: int = 0
    avg_pages_per_book: Optional[int] = None
    pages_per_month: Optional[int] = None
    months_count: int = 12

    @property
    def done(self) -> int:
        return len(self.finished_books)

    @property
    def remaining(self) -> int:
        return max(0, self.goal.target_count - self.done)

    @property
    def is_complete(self) -> bool:
        return self.done >= self.goal.target_count

    @property
    def fraction(self) -> float:
        """Share of the goal reached, capped at 1."""
        return min(1.0, self.done / max(self.goal.target_count, 1))

    @property
    def progress_percent(self) -> float:
        return round(self.fraction * 100, 1)

    @property
    def value_text(self) -> str:
        return f"{self.done} / {self.goal.target_count}"


def goal_progress(
    goal: ReadingGoal,
    books: Iterable[Book],
    today: Optional[date] = None,
) -> GoalProgress:
    """Compute progress for a goal.

    Args:
        goal: Goal to measure
        books: Full book collection
        today: Reference day for the month count (default: today)

    Returns:
        GoalProgress with the year's finished books in completion order
    """
    if today is None:
        today = date.today()

    finished = sorted(
        StatsAggregator.finished_in_year(books, goal.year),
        key=lambda b: b.completion_date,
    )
    pages = sum(b.page_count_normalized or 0 for b in finished)
    months = len(StatsAggregator.months_for_year(goal.year, today))

    return GoalProgress(
        goal=goal,
        finished_books=finished,
        pages_read=pages,
        avg_pages_per_book=StatsAggregator.average_pages_per_book(finished),
        pages_per_month=round_half_up(pages / months) if months > 0 else None,
        months_count=months,
    )


def year_options(
    books: Iterable[Book],
    today: Optional[date] = None,
    goals: Iterable[ReadingGoal] = (),
) -> list[int]:
    """Years worth offering in a year picker, newest first.

    Always includes the current and the next year, plus every year with a
    completed book or a stored goal.
    """
    if today is None:
        today = date.today()

    years = {today.year, today.year + 1}
    for book in books:
        day = book.completion_date
        if day is not None:
            years.add(day.year)
    for goal in goals:
        years.add(goal.year)
    return sorted(years, reverse=True)


def _row_to_goal(row: ReadingGoalRow) -> ReadingGoal:
    updated_at = datetime.fromisoformat(row.updated_at) if row.updated_at else None
    return ReadingGoal(
        year=row.year,
        target_count=max(MIN_TARGET, row.target_count or 0),
        updated_at=updated_at,
    )


class GoalTracker:
    """Stores yearly reading goals in the SQLite database."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize goal tracker.

        Args:
            db: Database instance (default: global database)
        """
        self.db = db or get_db()

    def get_goal(self, year: int) -> ReadingGoal:
        """Stored goal for a year, or an unsaved default of 50 books."""
        try:
            with self.db.get_session() as session:
                row = session.get(ReadingGoalRow, year)
                if row is None:
                    return ReadingGoal(year=year)
                return _row_to_goal(row)
        except SQLAlchemyError as e:
            raise GoalStoreError(str(e)) from e

    def list_goals(self) -> list[ReadingGoal]:
        """All stored goals, newest year first."""
        try:
            with self.db.get_session() as session:
                stmt = select(ReadingGoalRow).order_by(ReadingGoalRow.year.desc())
                return [_row_to_goal(row) for row in session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            raise GoalStoreError(str(e)) from e

    def set_goal(self, year: int, target_count: int) -> ReadingGoal:
        """Create or update the goal for a year.

        Raises:
            ValueError: If target_count is outside 1-200
            GoalStoreError: If the goal could not be saved
        """
        if not MIN_TARGET <= target_count <= MAX_TARGET:
            raise ValueError(
                f"Goal must be between {MIN_TARGET} and {MAX_TARGET} books, got {target_count}"
            )

        try:
            with self.db.get_session() as session:
                row = session.get(ReadingGoalRow, year)
                if row is None:
                    row = ReadingGoalRow(year=year)
                    session.add(row)
                row.target_count = target_count
                row.updated_at = utc_now_iso()
                session.flush()
                goal = _row_to_goal(row)
        except SQLAlchemyError as e:
            raise GoalStoreError(str(e)) from e

        logger.info("reading_goal_set", year=year, target_count=target_count)
        return goal

    def progress(
        self,
        year: int,
        books: Iterable[Book],
        today: Optional[date] = None,
    ) -> GoalProgress:
        """Progress toward the goal of a year."""
        return goal_progress(self.get_goal(year), books, today)
