"""초과근무 집계기 — 정규/초과 분 분할.

Overtime aggregator — splits already-finalized minutes into regular and
overtime per pay policy. Input order is load-bearing for the weekly policy:
rows must arrive sorted by worker, then scheduled start, then assignment id.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from uuid import UUID

DAILY_POLICY: str = "daily"
WEEKLY_POLICY: str = "weekly"
OVERTIME_POLICIES: frozenset[str] = frozenset({DAILY_POLICY, WEEKLY_POLICY})
# 초과근무 가산율 — Overtime pay premium
OVERTIME_MULTIPLIER: float = 1.5


@dataclass
class OvertimeSplit:
    """시프트 1건의 정규/초과 분 (Regular and overtime minutes of one shift)."""

    regular_minutes: int
    overtime_minutes: int

    @property
    def regular_hours(self) -> float:
        return self.regular_minutes / 60

    @property
    def overtime_hours(self) -> float:
        return self.overtime_minutes / 60


def split_daily(minutes: int, daily_threshold: int) -> OvertimeSplit:
    """일일 기준 — 시프트마다 독립적으로 기준 초과분을 초과근무로 계산."""
    overtime = max(0, minutes - daily_threshold)
    return OvertimeSplit(regular_minutes=minutes - overtime, overtime_minutes=overtime)


class WeeklyOvertimeTracker:
    """주간 누적 기준 — 근무자별 ISO 주 단위 누적 합계.

    Per-worker, per-ISO-week running total. Each call splits one shift
    against the remaining weekly cap, then adds its minutes to the total.

    Usage:
        tracker = WeeklyOvertimeTracker(2400)
        for row in rows:  # worker, start, assignment id 순 정렬 (sorted)
            split = tracker.add(row.worker_id, row.local_date, row.minutes)
    """

    def __init__(self, weekly_threshold: int) -> None:
        self.weekly_threshold: int = weekly_threshold
        self._totals: dict[tuple[UUID, int, int], int] = defaultdict(int)

    def add(self, worker_id: UUID, work_date: date, minutes: int) -> OvertimeSplit:
        iso_year, iso_week, _ = work_date.isocalendar()
        key = (worker_id, iso_year, iso_week)
        running = self._totals[key]

        remaining = max(0, self.weekly_threshold - running)
        regular = min(minutes, remaining)
        self._totals[key] = running + minutes
        return OvertimeSplit(regular_minutes=regular, overtime_minutes=minutes - regular)

    def total_for(self, worker_id: UUID, work_date: date) -> int:
        iso_year, iso_week, _ = work_date.isocalendar()
        return self._totals[(worker_id, iso_year, iso_week)]
