"""Metric selection and adaptive target generation."""

import math

from .metrics import LOOKBACK_PERIODS
from .schemas import BaselineStats, ChallengeKind, ChallengeMetric, GeneratedChallenge

ALLOWED_METRICS = {
    ChallengeKind.WEEKLY: (
        ChallengeMetric.READING_DAYS,
        ChallengeMetric.READING_MINUTES,
        ChallengeMetric.SESSIONS,
        ChallengeMetric.PAGES_READ,
    ),
    ChallengeKind.MONTHLY: (
        ChallengeMetric.READING_MINUTES,
        ChallengeMetric.BOOKS_FINISHED,
        ChallengeMetric.READING_DAYS,
        ChallengeMetric.SESSIONS,
        ChallengeMetric.PAGES_READ,
    ),
}


def round_up(value: int, step: int) -> int:
    """Round a non-negative value up to a multiple of step."""
    if step <= 0:
        return value
    v = max(0, value)
    rem = v % step
    if rem == 0:
        return v
    return v + (step - rem)


def clamp_int(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


def allowed_metrics(kind: ChallengeKind) -> tuple[ChallengeMetric, ...]:
    return ALLOWED_METRICS[ChallengeKind(kind)]


def reroll_metric(kind: ChallengeKind, current: ChallengeMetric) -> ChallengeMetric:
    """First allowed metric that differs from the current one."""
    for candidate in allowed_metrics(kind):
        if candidate != current:
            return candidate
    return current


def averages(baseline: BaselineStats, kind: ChallengeKind) -> BaselineStats:
    """Per-period averages, truncated toward zero."""
    periods = LOOKBACK_PERIODS[kind]
    return BaselineStats(
        minutes=max(0, baseline.minutes // periods),
        active_days=max(0, baseline.active_days // periods),
        sessions=max(0, baseline.sessions // periods),
        pages_read=max(0, baseline.pages_read // periods),
        finished_books=max(0, baseline.finished_books // periods),
    )


def pick_metric(kind: ChallengeKind, baseline: BaselineStats) -> ChallengeMetric:
    """Default metric for a new challenge based on recent behavior.

    Weekly prefers reading days for regular readers, then minutes for
    long readers; beginners get sessions when they track pages and minutes
    otherwise. Monthly prefers finished books when the user finishes at
    least one a month.
    """
    avg = averages(baseline, kind)

    if kind == ChallengeKind.WEEKLY:
        if avg.active_days >= 3:
            return ChallengeMetric.READING_DAYS
        if avg.minutes >= 90:
            return ChallengeMetric.READING_MINUTES
        if baseline.pages_read > 0:
            return ChallengeMetric.SESSIONS
        return ChallengeMetric.READING_MINUTES

    if avg.finished_books >= 1:
        return ChallengeMetric.BOOKS_FINISHED
    return ChallengeMetric.READING_MINUTES


def _books(n: int) -> str:
    return "1 book" if n == 1 else f"{n} books"


def generate_challenge(
    kind: ChallengeKind,
    metric: ChallengeMetric,
    baseline: BaselineStats,
) -> GeneratedChallenge:
    """Build target and copy for a kind/metric pair from a baseline.

    Args:
        kind: Weekly or monthly
        metric: Metric to generate for
        baseline: Totals over the lookback window

    Returns:
        GeneratedChallenge with a positive target
    """
    kind = ChallengeKind(kind)
    metric = ChallengeMetric(metric)
    avg = averages(baseline, kind)

    if kind == ChallengeKind.WEEKLY:
        if metric == ChallengeMetric.READING_DAYS:
            target = clamp_int(avg.active_days + 1, 2, 6)
            title = f"Read on {target} days"
            detail = "This week, every day with at least 1 minute of session reading counts."
        elif metric == ChallengeMetric.READING_MINUTES:
            scaled = int(avg.minutes * 1.15) if avg.minutes > 0 else 60
            target = max(60, round_up(scaled, 10))
            title = f"Read {target} minutes"
            detail = "This week: collect reading minutes from your sessions. Small bites count too."
        elif metric == ChallengeMetric.SESSIONS:
            target = clamp_int(math.ceil(max(1, avg.sessions) * 1.25), 3, 14)
            title = f"Log {target} sessions"
            detail = "Short sessions count too. What matters is that you keep going."
        elif metric == ChallengeMetric.PAGES_READ:
            scaled = int(avg.pages_read * 1.15) if avg.pages_read > 0 else 80
            target = max(50, round_up(scaled, 10))
            title = f"Read {target} pages"
            detail = "Only pages you enter in your sessions count."
        else:
            # Finishing books within one week is too swingy to scale
            target = 1
            title = "Finish 1 book"
            detail = "Finish a book this week (with an end date) to complete the challenge."
    else:
        if metric == ChallengeMetric.BOOKS_FINISHED:
            target = clamp_int(avg.finished_books + 1, 1, 6)
            title = f"Finish {_books(target)}"
            detail = "This month counts finished books with an end date."
        elif metric == ChallengeMetric.READING_MINUTES:
            target = round_up(int(max(300, avg.minutes) * 1.10), 30)
            title = f"Read {target} minutes"
            detail = "This month: collect reading minutes from your sessions. Small sessions add up."
        elif metric == ChallengeMetric.READING_DAYS:
            target = clamp_int(math.ceil(avg.active_days * 1.05), 6, 24)
            title = f"Collect {target} reading days"
            detail = "A reading day counts when you logged at least 1 minute in a session."
        elif metric == ChallengeMetric.SESSIONS:
            target = clamp_int(math.ceil(max(6, avg.sessions) * 1.10), 8, 60)
            title = f"Log {target} sessions"
            detail = "Log small reading sessions regularly to build consistency."
        else:
            target = round_up(int(max(300, avg.pages_read) * 1.10), 50)
            title = f"Read {target} pages"
            detail = "Only pages you enter in your sessions count."

    return GeneratedChallenge(metric=metric, title=title, detail=detail, target_value=target)
