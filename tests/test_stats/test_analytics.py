"""Tests for StatsAggregator."""

from datetime import date

import pytest

from shelfnotes.library.schemas import Book, BookStatus
from shelfnotes.stats import MonthKey, StatsAggregator, StatsScope, TopEntry
from shelfnotes.stats.analytics import days_between, sorted_counts


class TestSortedCounts:
    """Tests for top-N ordering."""

    def test_count_then_label(self):
        counts = {"beta": 2, "Alpha": 2, "gamma": 5, "delta": 1}
        assert sorted_counts(counts, 3) == [
            TopEntry("gamma", 5),
            TopEntry("Alpha", 2),
            TopEntry("beta", 2),
        ]

    def test_case_variants_stay_separate(self):
        result = sorted_counts({"Ace": 1, "ace": 1}, 10)
        assert [e.label for e in result] == ["Ace", "ace"]

    def test_zero_limit(self):
        assert sorted_counts({"a": 1}, 0) == []

    def test_negative_limit_rejected(self):
        with pytest.raises(ValueError):
            sorted_counts({"a": 1}, -1)


class TestDaysBetween:
    """Tests for days_between()."""

    def test_same_day_is_one(self):
        assert days_between(date(2024, 1, 1), date(2024, 1, 1)) == 1

    def test_inclusive_span(self):
        assert days_between(date(2024, 1, 1), date(2024, 1, 10)) == 10

    def test_reversed_dates_clamped(self):
        assert days_between(date(2024, 1, 10), date(2024, 1, 1)) == 1

    def test_missing_bound(self):
        assert days_between(None, date(2024, 1, 1)) is None


class TestTopLists:
    """Tests for top lists over the sample library."""

    @pytest.fixture
    def aggregator(self):
        return StatsAggregator()

    def test_limits_from_config(self, aggregator):
        assert aggregator.top_list_limit == 8
        assert aggregator.top_tags_limit == 10

    def test_top_genres(self, aggregator, sample_books):
        assert aggregator.top_genres(sample_books) == [
            TopEntry("Science Fiction", 2),
            TopEntry("Classics", 1),
            TopEntry("Fantasy", 1),
            TopEntry("Self-Help", 1),
        ]

    def test_top_subgenres(self, aggregator, sample_books):
        labels = [e.label for e in aggregator.top_subgenres(sample_books)]
        assert labels == ["Hard Science Fiction", "Historical", "Personal Growth", "Space Opera"]

    def test_top_tags_strip_hash(self, aggregator, sample_books):
        assert aggregator.top_tags(sample_books) == [
            TopEntry("scifi", 2),
            TopEntry("favorites", 1),
            TopEntry("myth", 1),
        ]

    def test_top_authors_truncated(self, aggregator, sample_books):
        result = aggregator.top_authors(sample_books, limit=2)
        assert result == [TopEntry("Andy Weir", 1), TopEntry("Frank Herbert", 1)]

    def test_top_languages_and_publishers(self, aggregator, sample_books):
        assert aggregator.top_languages(sample_books) == [TopEntry("en", 4)]
        assert len(aggregator.top_publishers(sample_books)) == 4

    def test_blank_values_skipped(self, aggregator):
        books = [Book(author="  "), Book(author="")]
        assert aggregator.top_authors(books) == []


class TestMonthlySeries:
    """Tests for months_for_year() and monthly_series()."""

    def test_current_year_until_current_month(self):
        months = StatsAggregator.months_for_year(2024, today=date(2024, 3, 15))
        assert months == [MonthKey(2024, 1), MonthKey(2024, 2), MonthKey(2024, 3)]

    def test_other_years_complete(self):
        assert len(StatsAggregator.months_for_year(2023, today=date(2024, 3, 15))) == 12
        assert len(StatsAggregator.months_for_year(2025, today=date(2024, 3, 15))) == 12

    def test_zero_filled(self, sample_books):
        months = StatsAggregator.months_for_year(2024, today=date(2024, 3, 15))
        finished = StatsAggregator.finished_in_year(sample_books, 2024)
        series = StatsAggregator.monthly_series(months, finished)

        assert [(p.label, p.finished_count, p.pages) for p in series] == [
            ("Jan", 1, 688),
            ("Feb", 0, 0),
            ("Mar", 1, 496),
        ]


class TestNerdPicks:
    """Tests for the superlative picks."""

    @pytest.fixture
    def aggregator(self):
        return StatsAggregator()

    def test_fastest_and_slowest(self, aggregator, sample_books):
        finished = aggregator.finished_in_year(sample_books, 2024)
        assert aggregator.fastest_book(finished).label == "Project Hail Mary • 2 days"
        assert aggregator.slowest_book(finished).label == "Dune • 10 days"

    def test_biggest(self, aggregator, sample_books):
        finished = aggregator.finished_in_year(sample_books, 2024)
        assert aggregator.biggest_book(finished).label == "Dune • 688 pages"

    def test_highest_rated(self, aggregator, sample_books):
        pick = aggregator.highest_rated_book(sample_books)
        assert pick.book_id == "book-hail-mary"
        assert pick.label == "Project Hail Mary • 5.0 / 5"

    def test_first_seen_wins_ties(self, aggregator):
        books = [
            Book(id="a", title="First", status=BookStatus.FINISHED,
                 read_from=date(2024, 1, 1), read_to=date(2024, 1, 3), page_count=300,
                 rating_plot=4),
            Book(id="b", title="Second", status=BookStatus.FINISHED,
                 read_from=date(2024, 2, 1), read_to=date(2024, 2, 3), page_count=300,
                 rating_plot=4),
        ]
        assert aggregator.fastest_book(books).book_id == "a"
        assert aggregator.slowest_book(books).book_id == "a"
        assert aggregator.biggest_book(books).book_id == "a"
        assert aggregator.highest_rated_book(books).book_id == "a"

    def test_requires_both_dates(self, aggregator):
        books = [Book(status=BookStatus.FINISHED, read_to=date(2024, 1, 3))]
        assert aggregator.fastest_book(books) is None
        assert aggregator.slowest_book(books) is None

    def test_unrated_books_skipped(self, aggregator):
        assert aggregator.highest_rated_book([Book(title="Plain")]) is None

    def test_untitled_label(self, aggregator):
        books = [Book(title="  ", status=BookStatus.FINISHED, page_count=120)]
        assert aggregator.biggest_book(books).label == "Untitled • 120 pages"


class TestComputeSummary:
    """Tests for compute_summary()."""

    def test_all_scope(self, sample_books):
        summary = StatsAggregator().compute_summary(
            sample_books, StatsScope.ALL, 2024, today=date(2024, 3, 15)
        )
        assert summary.months_count == 3
        assert summary.finished_in_year == 2
        assert summary.total_pages == 1184
        assert summary.avg_pages_per_book == 592
        assert summary.avg_days_per_book == 6
        assert summary.avg_pages_per_day == 158
        assert summary.fastest.book_id == "book-hail-mary"
        assert summary.top_genres[0] == TopEntry("Science Fiction", 2)

    def test_reading_scope(self, sample_books):
        summary = StatsAggregator().compute_summary(
            sample_books, StatsScope.READING, 2024, today=date(2024, 3, 15)
        )
        assert summary.finished_in_year == 0
        assert summary.top_authors == [TopEntry("Madeline Miller", 1)]
        assert summary.fastest is None
        assert summary.avg_pages_per_book is None

    def test_year_without_finished_books(self, sample_books):
        summary = StatsAggregator().compute_summary(
            sample_books, "finished", 2023, today=date(2024, 3, 15)
        )
        assert summary.months_count == 12
        assert all(p.finished_count == 0 for p in summary.monthly_series)
        assert summary.biggest is None
        # Highest rated ignores the selected year
        assert summary.highest_rated.book_id == "book-hail-mary"

    def test_limit_from_environment(self, monkeypatch, sample_books):
        from shelfnotes.config import reset_config

        monkeypatch.setenv("SHELFNOTES_TOP_LIST_LIMIT", "1")
        reset_config()
        summary = StatsAggregator().compute_summary(
            sample_books, StatsScope.ALL, 2024, today=date(2024, 3, 15)
        )
        assert summary.top_genres == [TopEntry("Science Fiction", 2)]
