"""Tests for yearly reading goals."""

from datetime import date

import pytest

from shelfnotes.library.schemas import Book, BookStatus
from shelfnotes.stats import GoalTracker, ReadingGoal, goal_progress, year_options
from shelfnotes.stats.goals import DEFAULT_TARGET

TODAY = date(2024, 3, 15)


class TestGoalProgress:
    """Tests for goal_progress()."""

    def test_current_year(self, sample_books):
        progress = goal_progress(ReadingGoal(year=2024), sample_books, TODAY)

        assert [b.id for b in progress.finished_books] == ["book-dune", "book-hail-mary"]
        assert progress.done == 2
        assert progress.remaining == 48
        assert progress.pages_read == 1184
        assert progress.avg_pages_per_book == 592
        assert progress.months_count == 3
        assert progress.pages_per_month == 395
        assert progress.value_text == "2 / 50"
        assert progress.progress_percent == 4.0
        assert not progress.is_complete

    def test_past_year_uses_twelve_months(self, sample_books):
        progress = goal_progress(ReadingGoal(year=2023, target_count=5), sample_books, TODAY)

        assert progress.done == 0
        assert progress.months_count == 12
        assert progress.pages_per_month == 0
        assert progress.avg_pages_per_book is None

    def test_goal_exceeded(self, sample_books):
        progress = goal_progress(ReadingGoal(year=2024, target_count=1), sample_books, TODAY)

        assert progress.is_complete
        assert progress.remaining == 0
        assert progress.fraction == 1.0
        assert progress.value_text == "2 / 1"

    def test_read_from_counts_without_read_to(self):
        book = Book(status=BookStatus.FINISHED, read_from=date(2024, 12, 31), page_count=100)
        progress = goal_progress(ReadingGoal(year=2024), [book], date(2025, 1, 2))
        assert progress.done == 1
        assert progress.pages_per_month == 8


class TestYearOptions:
    """Tests for the year picker choices."""

    def test_current_and_next_year(self):
        assert year_options([], TODAY) == [2025, 2024]

    def test_completion_and_goal_years(self, sample_books):
        old = Book(status=BookStatus.FINISHED, read_to=date(2019, 6, 1))
        goals = [ReadingGoal(year=2021, target_count=10)]

        assert year_options(sample_books + [old], date(2026, 1, 5), goals) == [
            2027, 2026, 2024, 2021, 2019,
        ]

    def test_unfinished_books_ignored(self):
        book = Book(status=BookStatus.READING, read_from=date(2018, 1, 1))
        assert year_options([book], TODAY) == [2025, 2024]


class TestGoalTracker:
    """Tests for GoalTracker persistence."""

    @pytest.fixture
    def tracker(self, memory_db) -> GoalTracker:
        return GoalTracker(memory_db)

    def test_default_goal_not_stored(self, tracker):
        goal = tracker.get_goal(2024)
        assert goal.target_count == DEFAULT_TARGET
        assert not goal.is_stored
        assert tracker.list_goals() == []

    def test_set_and_update(self, tracker):
        created = tracker.set_goal(2024, 24)
        assert created.is_stored
        assert tracker.get_goal(2024).target_count == 24

        tracker.set_goal(2024, 30)
        assert tracker.get_goal(2024).target_count == 30
        assert len(tracker.list_goals()) == 1

    def test_list_newest_first(self, tracker):
        tracker.set_goal(2022, 12)
        tracker.set_goal(2024, 40)
        tracker.set_goal(2023, 20)
        assert [g.year for g in tracker.list_goals()] == [2024, 2023, 2022]

    @pytest.mark.parametrize("target", [0, -5, 201])
    def test_out_of_range_target(self, tracker, target):
        with pytest.raises(ValueError, match="between 1 and 200"):
            tracker.set_goal(2024, target)
        assert not tracker.get_goal(2024).is_stored

    def test_bounds_accepted(self, tracker):
        assert tracker.set_goal(2024, 1).target_count == 1
        assert tracker.set_goal(2025, 200).target_count == 200

    def test_progress_uses_stored_goal(self, tracker, sample_books):
        tracker.set_goal(2024, 2)
        progress = tracker.progress(2024, sample_books, TODAY)
        assert progress.is_complete
        assert progress.value_text == "2 / 2"
