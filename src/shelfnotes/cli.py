"""Command-line interface for shelfnotes.

Built with Typer for commands and Rich for output. Every command reads a
JSON library snapshot; challenge history lives in the SQLite database.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .activity import ActivityMetric
from .activity.heatmap import WEEKDAY_LABELS
from .cache import InsightsService
from .challenges import (
    ChallengeEngine,
    ChallengeKind,
    ChallengeNotFoundError,
    ChallengeRecord,
    ChallengeSaveError,
    ChallengeState,
    ChallengeStoreError,
    SqlChallengeStore,
)
from .config import configure_logging, get_config
from .db import Database
from .library import SnapshotLoadError, StaticSnapshotProvider, load_snapshot
from .stats import GoalStoreError, GoalTracker, StatsScope, TopEntry, year_options

# Create the main app
app = typer.Typer(
    name="shelfnotes",
    help="Reading heatmaps, statistics and adaptive challenges.",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()

LEVEL_CHARS = ["·", "░", "▒", "▓", "█"]

SnapshotArg = typer.Argument(..., help="Path to a JSON library snapshot")


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def _load_provider(snapshot: Path) -> StaticSnapshotProvider:
    try:
        return StaticSnapshotProvider(load_snapshot(snapshot))
    except SnapshotLoadError as e:
        print_error(str(e))
        raise typer.Exit(1)


def _engine(snapshot: Path, db_path: Optional[Path]) -> ChallengeEngine:
    config = get_config()
    db = Database(db_path or config.db_path)
    db.create_tables()
    return ChallengeEngine(_load_provider(snapshot), SqlChallengeStore(db), tz=config.tzinfo)


def format_top_table(entries: list[TopEntry], title: str) -> Table:
    """Create a rich table for a top-N list."""
    table = Table(title=title, show_header=False)
    table.add_column("Label", style="cyan")
    table.add_column("Count", style="green", justify="right")
    for entry in entries:
        table.add_row(entry.label, str(entry.count))
    return table


def format_challenge_table(engine: ChallengeEngine, records: list[ChallengeRecord], title: str) -> Table:
    """Create a rich table for challenges with their progress."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Kind", style="yellow")
    table.add_column("Period")
    table.add_column("Challenge", style="cyan", max_width=40)
    table.add_column("Progress", justify="right")
    table.add_column("State", style="green")

    for record in records:
        progress = engine.compute_progress(record)
        table.add_row(
            record.id[:8],
            record.kind.display_name,
            record.period_label(engine.tz),
            record.title,
            progress.value_text(record.target_value),
            record.state.value,
        )
    return table


def _find_challenge(engine: ChallengeEngine, challenge_id: str) -> ChallengeRecord:
    """Resolve a full id or a unique id prefix."""
    try:
        return engine.get_challenge(challenge_id)
    except ChallengeNotFoundError:
        matches = [r for r in engine.history() if r.id.startswith(challenge_id)]
    except ChallengeStoreError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if len(matches) == 1:
        return matches[0]
    print_error(f"Challenge not found: {challenge_id}")
    raise typer.Exit(1)


@app.callback()
def main() -> None:
    """Validate configuration and configure logging before any command runs."""
    config = get_config()
    errors = config.validate()
    if errors:
        for error in errors:
            print_error(error)
        raise typer.Exit(1)
    configure_logging(config.environment, config.log_level)


# ============================================================================
# Insights Commands
# ============================================================================


@app.command()
def heatmap(
    snapshot: Path = SnapshotArg,
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year (default: current)"),
    metric: ActivityMetric = typer.Option(
        ActivityMetric.READING_DAYS, "--metric", "-m", help="What each cell counts"
    ),
    scope: StatsScope = typer.Option(StatsScope.ALL, "--scope", "-s", help="Which books to include"),
) -> None:
    """Show the activity heatmap for a year."""
    config = get_config()
    service = InsightsService(_load_provider(snapshot), tz=config.tzinfo)
    if year is None:
        year = service.today().year

    report = service.heatmap(year, metric=metric, scope=scope)
    stats = report.stats

    console.print(Panel(f"[bold]{metric.label} {year}[/bold]", style="magenta"))
    for weekday, label in enumerate(WEEKDAY_LABELS):
        cells = []
        for week in report.weeks:
            day = week.days[weekday]
            cells.append(LEVEL_CHARS[day.level] if day.is_in_range else " ")
        console.print(f"  {label} {''.join(cells)}")

    table = Table(title="Highlights", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Active Days", str(stats.active_days))
    table.add_row("Current Streak", f"{stats.current_streak} days")
    table.add_row("Longest Streak", f"{stats.longest_streak} days")
    table.add_row("Best Day", stats.best_day_label)
    table.add_row("Best Weekday", stats.best_weekday_label)
    table.add_row("Best Week", stats.best_week_label)
    console.print(table)


@app.command()
def stats(
    snapshot: Path = SnapshotArg,
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year (default: current)"),
    scope: StatsScope = typer.Option(StatsScope.ALL, "--scope", "-s", help="Which books to include"),
) -> None:
    """Show reading statistics for a year."""
    config = get_config()
    service = InsightsService(_load_provider(snapshot), tz=config.tzinfo)
    if year is None:
        year = service.today().year

    summary = service.stats(year, scope=scope)

    console.print(Panel(f"[bold]Statistics {year} ({summary.scope.value})[/bold]", style="magenta"))

    overview = Table(title="Overview", show_header=False)
    overview.add_column("Metric", style="cyan")
    overview.add_column("Value", style="green", justify="right")
    overview.add_row("Books Finished", str(summary.finished_in_year))
    overview.add_row("Total Pages", f"{summary.total_pages:,}")
    if summary.avg_pages_per_book is not None:
        overview.add_row("Pages per Book", str(summary.avg_pages_per_book))
    if summary.avg_days_per_book is not None:
        overview.add_row("Days per Book", str(summary.avg_days_per_book))
    if summary.avg_pages_per_day is not None:
        overview.add_row("Pages per Day", str(summary.avg_pages_per_day))
    console.print(overview)

    console.print("\n[bold]Books by Month[/bold]")
    for point in summary.monthly_series:
        bar = "█" * point.finished_count if point.finished_count else "░"
        console.print(f"  {point.label}: {bar} {point.finished_count} ({point.pages} pages)")

    for title, entries in (
        ("Top Genres", summary.top_genres),
        ("Top Subgenres", summary.top_subgenres),
        ("Top Authors", summary.top_authors),
        ("Top Publishers", summary.top_publishers),
        ("Top Languages", summary.top_languages),
        ("Top Tags", summary.top_tags),
    ):
        if entries:
            console.print(format_top_table(entries, title))

    picks = [
        ("Fastest", summary.fastest),
        ("Slowest", summary.slowest),
        ("Biggest", summary.biggest),
        ("Highest Rated", summary.highest_rated),
    ]
    if any(pick for _, pick in picks):
        console.print("\n[bold]Records[/bold]")
        for label, pick in picks:
            if pick:
                console.print(f"  {label}: {pick.label}")


@app.command()
def goal(
    snapshot: Path = SnapshotArg,
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year (default: current)"),
    target: Optional[int] = typer.Option(None, "--set", "-t", help="New target (1-200 books)"),
    db_path: Optional[Path] = typer.Option(None, "--db", help="Database path"),
) -> None:
    """Show or set the yearly reading goal."""
    config = get_config()
    service = InsightsService(_load_provider(snapshot), tz=config.tzinfo)
    today = service.today()
    if year is None:
        year = today.year

    db = Database(db_path or config.db_path)
    db.create_tables()
    tracker = GoalTracker(db)
    books = service.snapshots.get_snapshot().books

    try:
        if target is not None:
            tracker.set_goal(year, target)
            print_success(f"Goal for {year} set to {target} books")
        progress = tracker.progress(year, books, today)
        goals = tracker.list_goals()
    except (ValueError, GoalStoreError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    console.print(Panel(f"[bold]Reading Goal {year}[/bold]", style="magenta"))

    table = Table(show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Books", f"{progress.value_text} ({progress.progress_percent}%)")
    table.add_row("Remaining", str(progress.remaining))
    table.add_row("Pages", f"{progress.pages_read:,}")
    if progress.avg_pages_per_book is not None:
        table.add_row("Pages per Book", str(progress.avg_pages_per_book))
    if progress.pages_per_month is not None:
        table.add_row("Pages per Month", str(progress.pages_per_month))
    console.print(table)

    if progress.is_complete:
        print_success("Goal reached!")
    if not progress.goal.is_stored:
        console.print("[dim]Default goal, set your own with --set[/dim]")

    years = ", ".join(str(y) for y in year_options(books, today, goals))
    console.print(f"[dim]Years: {years}[/dim]")


# ============================================================================
# Challenge Commands
# ============================================================================


@app.command()
def challenges(
    snapshot: Path = SnapshotArg,
    history: bool = typer.Option(False, "--history", "-H", help="Show all past challenges"),
    kind: Optional[ChallengeKind] = typer.Option(None, "--kind", "-k", help="Filter history by kind"),
    db_path: Optional[Path] = typer.Option(None, "--db", help="Challenge database path"),
) -> None:
    """Show current challenges, creating them for new periods."""
    engine = _engine(snapshot, db_path)

    try:
        engine.ensure_current_challenges()
        completed = engine.refresh_completion()
    except (ChallengeSaveError, ChallengeStoreError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    for record in completed:
        print_success(f"Challenge completed: {record.title}")

    if history:
        records = engine.history(kind)
        if not records:
            console.print("[dim]No challenges yet.[/dim]")
            return
        console.print(format_challenge_table(engine, records, "Challenge History"))
        return

    records = engine.active_challenges()
    console.print(format_challenge_table(engine, records, "Current Challenges"))
    for record in records:
        progress = engine.compute_progress(record)
        remaining = progress.remaining_text(record.target_value)
        if remaining:
            console.print(f"[dim]{record.kind.display_name}: {record.detail} ({remaining})[/dim]")
        elif record.state == ChallengeState.COMPLETED:
            console.print(f"[dim]{record.kind.display_name}: done, claim it with 'shelfnotes claim'[/dim]")


@app.command()
def reroll(
    snapshot: Path = SnapshotArg,
    challenge_id: str = typer.Argument(..., help="Challenge ID or prefix"),
    db_path: Optional[Path] = typer.Option(None, "--db", help="Challenge database path"),
) -> None:
    """Swap a challenge for a different one (once per period)."""
    engine = _engine(snapshot, db_path)
    record = _find_challenge(engine, challenge_id)

    if not record.can_reroll:
        print_warning("This challenge can no longer be rerolled.")
        raise typer.Exit(1)

    try:
        engine.reroll(record)
    except ChallengeSaveError as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"New challenge: {record.title}")
    console.print(f"[dim]{record.detail}[/dim]")


@app.command()
def claim(
    snapshot: Path = SnapshotArg,
    challenge_id: str = typer.Argument(..., help="Challenge ID or prefix"),
    db_path: Optional[Path] = typer.Option(None, "--db", help="Challenge database path"),
) -> None:
    """Claim a completed challenge."""
    engine = _engine(snapshot, db_path)
    record = _find_challenge(engine, challenge_id)

    try:
        claimed = engine.claim(record)
    except ChallengeSaveError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if not claimed:
        if record.is_claimed:
            print_warning("Challenge was already claimed.")
        else:
            print_warning("Challenge is not completed yet.")
        raise typer.Exit(1)

    print_success(f"Claimed: {record.title}")


if __name__ == "__main__":
    app()
