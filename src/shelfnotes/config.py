"""Configuration management for shelfnotes.

Loads configuration from environment variables and provides defaults.
"""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog
from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


@dataclass
class Config:
    """Application configuration."""

    # Database (challenge history)
    db_path: Path

    # Calendar
    timezone: str  # IANA name, used for local day boundaries

    # Logging
    environment: str  # "development" or "production"
    log_level: str

    # Statistics
    top_list_limit: int
    top_tags_limit: int

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        db_path_str = os.environ.get(
            "SHELFNOTES_DB_PATH",
            str(Path.home() / ".shelfnotes" / "challenges.db"),
        )
        db_path = Path(db_path_str).expanduser()

        return cls(
            db_path=db_path,
            timezone=os.environ.get("SHELFNOTES_TIMEZONE", "UTC"),
            environment=os.environ.get("SHELFNOTES_ENV", "development"),
            log_level=os.environ.get("SHELFNOTES_LOG_LEVEL", "INFO").upper(),
            top_list_limit=int(os.environ.get("SHELFNOTES_TOP_LIST_LIMIT", "8")),
            top_tags_limit=int(os.environ.get("SHELFNOTES_TOP_TAGS_LIMIT", "10")),
        )

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            errors.append(f"Unknown timezone: {self.timezone}")

        if self.top_list_limit < 0:
            errors.append("SHELFNOTES_TOP_LIST_LIMIT must not be negative")
        if self.top_tags_limit < 0:
            errors.append("SHELFNOTES_TOP_TAGS_LIMIT must not be negative")

        if self.environment not in ("development", "production"):
            errors.append(f"Unknown environment: {self.environment}")

        return errors

    @property
    def tzinfo(self) -> ZoneInfo:
        """Timezone object for local day boundaries."""
        return ZoneInfo(self.timezone)


def configure_logging(environment: str = "development", level: str = "INFO") -> None:
    """Configure structured logging with structlog."""
    use_json = environment == "production"

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    processors: list[Callable[..., Any]] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if use_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config instance. Used for testing."""
    global _config
    _config = None
