"""Persistence for challenge records.

The engine talks to a ChallengeStore; any failure to read or write is
raised as ChallengeStoreError.
"""

from datetime import datetime, timezone
from typing import Optional, Protocol, runtime_checkable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ..db.sqlite import Database, get_db
from .mapper import apply_record, encode_instant, encode_kind, record_to_row, row_to_record
from .models import ChallengeRecordRow
from .schemas import ChallengeKind, ChallengeRecord


class ChallengeStoreError(Exception):
    """Raised when challenge records cannot be read or written."""


@runtime_checkable
class ChallengeStore(Protocol):
    """Persistence collaborator for challenge records."""

    def find(self, kind: ChallengeKind, period_start: datetime) -> Optional[ChallengeRecord]:
        ...

    def get(self, record_id: str) -> Optional[ChallengeRecord]:
        ...

    def list_active(self, now: datetime) -> list[ChallengeRecord]:
        ...

    def list_all(self, kind: Optional[ChallengeKind] = None) -> list[ChallengeRecord]:
        ...

    def insert(self, record: ChallengeRecord) -> None:
        ...

    def update(self, record: ChallengeRecord) -> None:
        ...


def _newest_first(records: list[ChallengeRecord]) -> list[ChallengeRecord]:
    return sorted(records, key=lambda r: (r.period_start, r.kind.value), reverse=True)


class InMemoryChallengeStore:
    """Store keeping copies of records in a dict."""

    def __init__(self):
        self._records: dict[str, ChallengeRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def find(self, kind: ChallengeKind, period_start: datetime) -> Optional[ChallengeRecord]:
        for record in self._records.values():
            if record.kind == kind and record.period_start == period_start:
                return record.model_copy(deep=True)
        return None

    def get(self, record_id: str) -> Optional[ChallengeRecord]:
        record = self._records.get(record_id)
        return record.model_copy(deep=True) if record else None

    def list_active(self, now: datetime) -> list[ChallengeRecord]:
        return _newest_first(
            [r.model_copy(deep=True) for r in self._records.values() if r.is_current(now)]
        )

    def list_all(self, kind: Optional[ChallengeKind] = None) -> list[ChallengeRecord]:
        return _newest_first(
            [
                r.model_copy(deep=True)
                for r in self._records.values()
                if kind is None or r.kind == kind
            ]
        )

    def insert(self, record: ChallengeRecord) -> None:
        if record.id in self._records:
            raise ChallengeStoreError(f"duplicate challenge id {record.id}")
        if self.find(record.kind, record.period_start) is not None:
            raise ChallengeStoreError(
                f"a {record.kind.value} challenge already exists for this period"
            )
        self._records[record.id] = record.model_copy(deep=True)

    def update(self, record: ChallengeRecord) -> None:
        if record.id not in self._records:
            raise ChallengeStoreError(f"no stored challenge with id {record.id}")
        self._records[record.id] = record.model_copy(deep=True)


class SqlChallengeStore:
    """Store backed by the SQLite database."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize store.

        Args:
            db: Database instance (default: global database)
        """
        self.db = db or get_db()

    def find(self, kind: ChallengeKind, period_start: datetime) -> Optional[ChallengeRecord]:
        try:
            with self.db.get_session() as session:
                stmt = select(ChallengeRecordRow).where(
                    ChallengeRecordRow.kind == encode_kind(kind),
                    ChallengeRecordRow.period_start == encode_instant(period_start),
                )
                row = session.execute(stmt).scalars().first()
                return row_to_record(row) if row else None
        except SQLAlchemyError as e:
            raise ChallengeStoreError(str(e)) from e

    def get(self, record_id: str) -> Optional[ChallengeRecord]:
        try:
            with self.db.get_session() as session:
                row = session.get(ChallengeRecordRow, record_id)
                return row_to_record(row) if row else None
        except SQLAlchemyError as e:
            raise ChallengeStoreError(str(e)) from e

    def list_active(self, now: datetime) -> list[ChallengeRecord]:
        now_iso = encode_instant(now if now.tzinfo else now.replace(tzinfo=timezone.utc))
        try:
            with self.db.get_session() as session:
                stmt = (
                    select(ChallengeRecordRow)
                    .where(
                        ChallengeRecordRow.period_start <= now_iso,
                        ChallengeRecordRow.period_end > now_iso,
                    )
                    .order_by(ChallengeRecordRow.period_start.desc())
                )
                rows = session.execute(stmt).scalars().all()
                return _newest_first([row_to_record(row) for row in rows])
        except SQLAlchemyError as e:
            raise ChallengeStoreError(str(e)) from e

    def list_all(self, kind: Optional[ChallengeKind] = None) -> list[ChallengeRecord]:
        try:
            with self.db.get_session() as session:
                stmt = select(ChallengeRecordRow)
                if kind is not None:
                    stmt = stmt.where(ChallengeRecordRow.kind == encode_kind(kind))
                rows = session.execute(stmt).scalars().all()
                return _newest_first([row_to_record(row) for row in rows])
        except SQLAlchemyError as e:
            raise ChallengeStoreError(str(e)) from e

    def insert(self, record: ChallengeRecord) -> None:
        try:
            with self.db.get_session() as session:
                session.add(record_to_row(record))
        except SQLAlchemyError as e:
            raise ChallengeStoreError(str(e)) from e

    def update(self, record: ChallengeRecord) -> None:
        try:
            with self.db.get_session() as session:
                row = session.get(ChallengeRecordRow, record.id)
                if row is None:
                    raise ChallengeStoreError(f"no stored challenge with id {record.id}")
                apply_record(record, row)
        except SQLAlchemyError as e:
            raise ChallengeStoreError(str(e)) from e
