"""시간 계산 유틸리티.

Time arithmetic helpers shared by the approval engine, override, and export.
All persisted timestamps are UTC; drivers that drop tzinfo on read
(SQLite) hand back naive values, which are re-tagged as UTC here.
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def ensure_utc(dt: datetime | None) -> datetime | None:
    """naive 값은 UTC로 간주하고, aware 값은 UTC로 변환합니다."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def minutes_between(start: datetime, end: datetime) -> int:
    """두 시각 사이의 분 — 0 방향으로 절사 (Whole minutes, truncated toward zero)."""
    delta = ensure_utc(end) - ensure_utc(start)
    return int(delta.total_seconds() / 60)


def local_date(dt: datetime, tz_name: str | None) -> date:
    """지점 타임존 기준 날짜 (Calendar date of ``dt`` in the location's timezone)."""
    try:
        tz = ZoneInfo(tz_name or "UTC")
    except ZoneInfoNotFoundError:
        tz = ZoneInfo("UTC")
    return ensure_utc(dt).astimezone(tz).date()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
