"""SQLAlchemy models for challenge history.

Tables:
- challenge_records: One generated challenge per kind and period

Every column has a default so rows written by older versions still load;
kind and metric are stored as versioned string codes (see mapper.py).
"""

from typing import Optional

from sqlalchemy import Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ..db.models import Base, utc_now_iso
from ..library.schemas import generate_uuid

EPOCH_ISO = "1970-01-01T00:00:00.000000+00:00"


class ChallengeRecordRow(Base):
    """Storage representation of a challenge record."""

    __tablename__ = "challenge_records"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    schema_version: Mapped[int] = mapped_column(Integer, default=1)

    # Type codes
    kind: Mapped[str] = mapped_column(String(20), default="weekly", index=True)
    metric: Mapped[str] = mapped_column(String(30), default="readingMinutes")

    # Period, ISO-8601 UTC instants
    period_start: Mapped[str] = mapped_column(String(32), default=EPOCH_ISO, index=True)
    period_end: Mapped[str] = mapped_column(String(32), default=EPOCH_ISO)

    # Content
    title: Mapped[str] = mapped_column(String(200), default="")
    detail: Mapped[str] = mapped_column(Text, default="")
    target_value: Mapped[int] = mapped_column(Integer, default=0)

    # Lifecycle
    created_at: Mapped[str] = mapped_column(String(32), default=utc_now_iso)
    completed_at: Mapped[Optional[str]] = mapped_column(String(32))
    acknowledged_at: Mapped[Optional[str]] = mapped_column(String(32))
    rerolls_used: Mapped[int] = mapped_column(Integer, default=0)
    rerolled_at: Mapped[Optional[str]] = mapped_column(String(32))

    # One challenge per kind and period
    __table_args__ = (
        UniqueConstraint("kind", "period_start", name="uq_challenge_kind_period"),
    )

    def __repr__(self) -> str:
        return (
            f"<ChallengeRecordRow(id={self.id}, kind='{self.kind}', "
            f"period_start='{self.period_start}', {self.metric}={self.target_value})>"
        )
