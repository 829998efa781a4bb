"""Conversion between stored rows and challenge records.

Kind and metric codes are only ever read or written here; the rest of the
package works with the enums.
"""

from datetime import datetime, timezone
from typing import Optional

import structlog

from .models import ChallengeRecordRow
from .schemas import ChallengeKind, ChallengeMetric, ChallengeRecord

logger = structlog.get_logger(__name__)

SCHEMA_VERSION = 1

KIND_CODES = {
    ChallengeKind.WEEKLY: "weekly",
    ChallengeKind.MONTHLY: "monthly",
}

METRIC_CODES = {
    ChallengeMetric.READING_MINUTES: "readingMinutes",
    ChallengeMetric.READING_DAYS: "readingDays",
    ChallengeMetric.SESSIONS: "sessions",
    ChallengeMetric.PAGES_READ: "pagesRead",
    ChallengeMetric.BOOKS_FINISHED: "booksFinished",
}

_KINDS_BY_CODE = {code: kind for kind, code in KIND_CODES.items()}
_METRICS_BY_CODE = {code: metric for metric, code in METRIC_CODES.items()}


def encode_instant(value: datetime) -> str:
    """Fixed-width ISO-8601 UTC string; sorts like the instant."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def encode_optional_instant(value: Optional[datetime]) -> Optional[str]:
    return encode_instant(value) if value is not None else None


def decode_instant(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def encode_kind(kind: ChallengeKind) -> str:
    return KIND_CODES[ChallengeKind(kind)]


def decode_kind(code: Optional[str], record_id: Optional[str] = None) -> ChallengeKind:
    """Decode a stored kind, falling back to weekly for unknown codes."""
    kind = _KINDS_BY_CODE.get(code or "")
    if kind is None:
        logger.warning("challenge_kind_unknown", code=code, record_id=record_id)
        return ChallengeKind.WEEKLY
    return kind


def decode_metric(code: Optional[str], record_id: Optional[str] = None) -> ChallengeMetric:
    """Decode a stored metric, falling back to reading minutes for unknown codes."""
    metric = _METRICS_BY_CODE.get(code or "")
    if metric is None:
        logger.warning("challenge_metric_unknown", code=code, record_id=record_id)
        return ChallengeMetric.READING_MINUTES
    return metric


def row_to_record(row: ChallengeRecordRow) -> ChallengeRecord:
    """Build a domain record from a stored row."""
    if row.schema_version is not None and row.schema_version > SCHEMA_VERSION:
        logger.warning(
            "challenge_schema_newer",
            record_id=row.id,
            schema_version=row.schema_version,
        )

    return ChallengeRecord(
        id=row.id,
        kind=decode_kind(row.kind, row.id),
        metric=decode_metric(row.metric, row.id),
        period_start=decode_instant(row.period_start),
        period_end=decode_instant(row.period_end),
        title=row.title or "",
        detail=row.detail or "",
        # Legacy rows may carry a zero target
        target_value=max(1, row.target_value or 0),
        created_at=decode_instant(row.created_at),
        completed_at=decode_instant(row.completed_at),
        acknowledged_at=decode_instant(row.acknowledged_at),
        rerolls_used=min(1, max(0, row.rerolls_used or 0)),
        rerolled_at=decode_instant(row.rerolled_at),
    )


def apply_record(record: ChallengeRecord, row: ChallengeRecordRow) -> ChallengeRecordRow:
    """Copy a domain record's fields onto a row."""
    row.id = record.id
    row.schema_version = SCHEMA_VERSION
    row.kind = encode_kind(record.kind)
    row.metric = METRIC_CODES[record.metric]
    row.period_start = encode_instant(record.period_start)
    row.period_end = encode_instant(record.period_end)
    row.title = record.title
    row.detail = record.detail
    row.target_value = record.target_value
    row.created_at = encode_instant(record.created_at)
    row.completed_at = encode_optional_instant(record.completed_at)
    row.acknowledged_at = encode_optional_instant(record.acknowledged_at)
    row.rerolls_used = record.rerolls_used
    row.rerolled_at = encode_optional_instant(record.rerolled_at)
    return row


def record_to_row(record: ChallengeRecord) -> ChallengeRecordRow:
    """Build a new row from a domain record."""
    return apply_record(record, ChallengeRecordRow())
