"""Tests for metric selection and target generation."""

import pytest

from shelfnotes.challenges import (
    BaselineStats,
    ChallengeKind,
    ChallengeMetric,
    allowed_metrics,
    generate_challenge,
    pick_metric,
)
from shelfnotes.challenges.targets import averages, clamp_int, reroll_metric, round_up

WEEKLY = ChallengeKind.WEEKLY
MONTHLY = ChallengeKind.MONTHLY


class TestHelpers:
    """Tests for rounding helpers."""

    @pytest.mark.parametrize("value,step,expected", [(0, 10, 0), (61, 10, 70), (70, 10, 70), (-5, 10, 0), (7, 0, 7)])
    def test_round_up(self, value, step, expected):
        assert round_up(value, step) == expected

    def test_clamp_int(self):
        assert clamp_int(1, 2, 6) == 2
        assert clamp_int(9, 2, 6) == 6
        assert clamp_int(4, 2, 6) == 4

    def test_averages_truncate(self):
        avg = averages(BaselineStats(minutes=119, active_days=7, sessions=3), WEEKLY)
        assert (avg.minutes, avg.active_days, avg.sessions) == (29, 1, 0)
        assert averages(BaselineStats(finished_books=5), MONTHLY).finished_books == 1


class TestPickMetric:
    """Tests for default metric selection."""

    def test_weekly_regular_reader(self):
        assert pick_metric(WEEKLY, BaselineStats(active_days=12, minutes=1000)) == ChallengeMetric.READING_DAYS

    def test_weekly_long_reader(self):
        assert pick_metric(WEEKLY, BaselineStats(active_days=11, minutes=360)) == ChallengeMetric.READING_MINUTES

    def test_weekly_beginner_with_pages(self):
        assert pick_metric(WEEKLY, BaselineStats(minutes=100, pages_read=5)) == ChallengeMetric.SESSIONS

    def test_weekly_beginner_without_pages(self):
        assert pick_metric(WEEKLY, BaselineStats()) == ChallengeMetric.READING_MINUTES

    def test_monthly_finisher(self):
        assert pick_metric(MONTHLY, BaselineStats(finished_books=3)) == ChallengeMetric.BOOKS_FINISHED

    def test_monthly_default(self):
        assert pick_metric(MONTHLY, BaselineStats(finished_books=2, minutes=5000)) == ChallengeMetric.READING_MINUTES


class TestGenerateWeekly:
    """Tests for weekly targets."""

    def test_reading_days_from_four_active_days(self):
        generated = generate_challenge(WEEKLY, ChallengeMetric.READING_DAYS, BaselineStats(active_days=4))
        assert generated.target_value == 2
        assert generated.title == "Read on 2 days"

    def test_reading_days_capped(self):
        generated = generate_challenge(WEEKLY, ChallengeMetric.READING_DAYS, BaselineStats(active_days=28))
        assert generated.target_value == 6

    @pytest.mark.parametrize("minutes,expected", [(0, 60), (120, 60), (400, 120), (1000, 290)])
    def test_reading_minutes(self, minutes, expected):
        generated = generate_challenge(WEEKLY, ChallengeMetric.READING_MINUTES, BaselineStats(minutes=minutes))
        assert generated.target_value == expected

    @pytest.mark.parametrize("sessions,expected", [(0, 3), (40, 13), (60, 14)])
    def test_sessions(self, sessions, expected):
        generated = generate_challenge(WEEKLY, ChallengeMetric.SESSIONS, BaselineStats(sessions=sessions))
        assert generated.target_value == expected

    @pytest.mark.parametrize("pages,expected", [(0, 80), (100, 50), (400, 120)])
    def test_pages(self, pages, expected):
        generated = generate_challenge(WEEKLY, ChallengeMetric.PAGES_READ, BaselineStats(pages_read=pages))
        assert generated.target_value == expected

    def test_books_fixed(self):
        generated = generate_challenge(WEEKLY, ChallengeMetric.BOOKS_FINISHED, BaselineStats(finished_books=20))
        assert generated.target_value == 1
        assert generated.title == "Finish 1 book"


class TestGenerateMonthly:
    """Tests for monthly targets."""

    @pytest.mark.parametrize("finished,expected,title", [(0, 1, "Finish 1 book"), (6, 3, "Finish 3 books"), (30, 6, "Finish 6 books")])
    def test_books(self, finished, expected, title):
        generated = generate_challenge(MONTHLY, ChallengeMetric.BOOKS_FINISHED, BaselineStats(finished_books=finished))
        assert generated.target_value == expected
        assert generated.title == title

    @pytest.mark.parametrize("minutes,expected", [(0, 330), (1500, 570)])
    def test_minutes(self, minutes, expected):
        generated = generate_challenge(MONTHLY, ChallengeMetric.READING_MINUTES, BaselineStats(minutes=minutes))
        assert generated.target_value == expected

    @pytest.mark.parametrize("days,expected", [(0, 6), (30, 11), (75, 24)])
    def test_reading_days(self, days, expected):
        generated = generate_challenge(MONTHLY, ChallengeMetric.READING_DAYS, BaselineStats(active_days=days))
        assert generated.target_value == expected

    @pytest.mark.parametrize("sessions,expected", [(0, 8), (63, 24), (300, 60)])
    def test_sessions(self, sessions, expected):
        generated = generate_challenge(MONTHLY, ChallengeMetric.SESSIONS, BaselineStats(sessions=sessions))
        assert generated.target_value == expected

    def test_pages(self):
        generated = generate_challenge(MONTHLY, ChallengeMetric.PAGES_READ, BaselineStats())
        assert generated.target_value == 350
        assert generated.title == "Read 350 pages"


class TestAllowedMetrics:
    """Tests for reroll candidates."""

    def test_weekly_order(self):
        assert allowed_metrics(WEEKLY) == (
            ChallengeMetric.READING_DAYS,
            ChallengeMetric.READING_MINUTES,
            ChallengeMetric.SESSIONS,
            ChallengeMetric.PAGES_READ,
        )

    def test_reroll_picks_first_other(self):
        assert reroll_metric(WEEKLY, ChallengeMetric.READING_DAYS) == ChallengeMetric.READING_MINUTES
        assert reroll_metric(WEEKLY, ChallengeMetric.SESSIONS) == ChallengeMetric.READING_DAYS
        assert reroll_metric(MONTHLY, ChallengeMetric.READING_MINUTES) == ChallengeMetric.BOOKS_FINISHED

    def test_every_pair_has_positive_target(self):
        for kind in ChallengeKind:
            for metric in allowed_metrics(kind):
                assert generate_challenge(kind, metric, BaselineStats()).target_value > 0
