"""SQLAlchemy models for reading goals.

Tables:
- reading_goals: Target number of finished books per year
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ..db.models import Base, utc_now_iso


class ReadingGoalRow(Base):
    """Storage representation of a yearly reading goal."""

    __tablename__ = "reading_goals"

    year: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    target_count: Mapped[int] = mapped_column(Integer, default=50)
    updated_at: Mapped[str] = mapped_column(String(32), default=utc_now_iso)

    def __repr__(self) -> str:
        return f"<ReadingGoalRow(year={self.year}, target_count={self.target_count})>"
