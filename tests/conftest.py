"""Pytest configuration and shared fixtures.

This module provides fixtures for testing shelfnotes, including sample
books and sessions, timezones, temporary databases and a CLI runner.
"""

from datetime import date, datetime, timezone
from pathlib import Path
from typing import Generator
from zoneinfo import ZoneInfo

import pytest

from shelfnotes.config import reset_config
from shelfnotes.db.sqlite import Database, reset_db
from shelfnotes.library.schemas import Book, BookStatus, ReadingSession


# ============================================================================
# Global State
# ============================================================================


@pytest.fixture(autouse=True)
def reset_global_state(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Give every test a fresh config with UTC days and a temp database path."""
    reset_config()
    reset_db()
    monkeypatch.setenv("SHELFNOTES_TIMEZONE", "UTC")
    monkeypatch.setenv("SHELFNOTES_DB_PATH", str(tmp_path / "challenges.db"))
    monkeypatch.setenv("SHELFNOTES_ENV", "development")
    monkeypatch.delenv("SHELFNOTES_TOP_LIST_LIMIT", raising=False)
    monkeypatch.delenv("SHELFNOTES_TOP_TAGS_LIMIT", raising=False)
    yield
    reset_config()
    reset_db()


# ============================================================================
# Timezone Fixtures
# ============================================================================


@pytest.fixture
def utc() -> timezone:
    return timezone.utc


@pytest.fixture
def berlin() -> ZoneInfo:
    """A timezone with DST switches."""
    return ZoneInfo("Europe/Berlin")


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def db(tmp_path: Path) -> Database:
    """Create a test database instance."""
    database = Database(tmp_path / "test.db")
    database.create_tables()
    return database


@pytest.fixture
def memory_db() -> Database:
    """Create an in-memory database."""
    database = Database(":memory:")
    database.create_tables()
    return database


# ============================================================================
# Sample Data Fixtures
# ============================================================================


def make_session(start: datetime, end: datetime, pages: int = None) -> ReadingSession:
    """Build a session between two instants."""
    return ReadingSession(started_at=start, ended_at=end, pages_read=pages)


@pytest.fixture
def session_factory():
    """Factory for reading sessions."""
    return make_session


@pytest.fixture
def sample_books() -> list[Book]:
    """A small library covering every status."""
    return [
        Book(
            id="book-dune",
            title="Dune",
            author="Frank Herbert",
            status=BookStatus.FINISHED,
            read_from=date(2024, 1, 1),
            read_to=date(2024, 1, 10),
            page_count=688,
            publisher="Ace",
            language="en",
            main_category="Fiction / Science Fiction / Space Opera",
            categories=["Fiction / Classics"],
            tags=["#scifi", "favorites"],
            rating_plot=5,
            rating_characters=4,
        ),
        Book(
            id="book-hail-mary",
            title="Project Hail Mary",
            author="Andy Weir",
            status=BookStatus.FINISHED,
            read_from=date(2024, 3, 5),
            read_to=date(2024, 3, 6),
            page_count=496,
            publisher="Ballantine Books",
            language="en",
            main_category="Fiction / Science Fiction / Hard Science Fiction",
            tags=["scifi"],
            rating_plot=5,
            rating_writing_style=5,
        ),
        Book(
            id="book-circe",
            title="Circe",
            author="Madeline Miller",
            status=BookStatus.READING,
            read_from=date(2024, 3, 20),
            page_count=400,
            publisher="Little, Brown",
            language="en",
            main_category="Fiction / Fantasy / Historical",
            tags=["myth"],
        ),
        Book(
            id="book-habits",
            title="Atomic Habits",
            author="James Clear",
            status=BookStatus.TO_READ,
            page_count=320,
            publisher="Avery",
            language="en",
            main_category="Self-Help / Personal Growth",
        ),
    ]


# ============================================================================
# CLI Testing Fixtures
# ============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner."""
    from typer.testing import CliRunner
    return CliRunner()


@pytest.fixture
def cli_app():
    """Get the CLI app for testing."""
    from shelfnotes.cli import app
    return app
