"""근무시간 확정 규칙 — 스냅 및 배정 분류.

Time finalization rules — grace-period snapping and per-assignment
classification used by shift approval and correction re-derivation.
Also holds the locked-rate pay estimate both of them write.
Pure functions: no database access, no clock reads.

Rules (scheduled start/end 기준, against the *scheduled* window):
    - 출퇴근 기록 없음 → no_show, 0분 (No clock events → no-show)
    - 출근만 있음 → 예정 종료 시각으로 자동 확정 (Clock-in only → auto-finalize)
      단, 출근이 예정 종료 이후면 불일치 (clock-in after the scheduled end → inconsistent)
    - 둘 다 있음 → 스냅 후 분 계산 (Both → snap, then compute minutes)
        start: actual_in ≤ start + grace → start
        end:   end - grace ≤ actual_out < end → end
    - 퇴근만 있음 → 불일치 (Clock-out only → inconsistent)
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from shiftledger.config import settings
from shiftledger.utils.time import ensure_utc, minutes_between

AUTO_FINALIZED_METHOD: str = "system_auto_finalized"
LATE_CLOCK_OUT_NOTE: str = "Flag: Clock-out >{minutes}m past schedule"


@dataclass
class AssignmentOutcome:
    """배정 1건의 승인 분류 결과 (Approval classification of one assignment).

    ``dirty`` 가 True이면 나머지 값은 의미가 없고, 승인 전체가 차단됩니다.
    When ``dirty`` is set the remaining fields are meaningless and the whole
    approval is blocked.
    """

    assignment_id: UUID
    worker_id: UUID
    status: str = "completed"
    total_duration_minutes: int = 0
    break_minutes: int = 0
    effective_clock_in: datetime | None = None
    effective_clock_out: datetime | None = None
    clock_out_method: str | None = None
    review_note: str | None = None
    dirty: bool = False


def snap_times(
    actual_in: datetime,
    actual_out: datetime,
    scheduled_start: datetime,
    scheduled_end: datetime,
    start_grace_minutes: int | None = None,
    end_grace_minutes: int | None = None,
) -> tuple[datetime, datetime]:
    """유예 시간 내 출퇴근을 예정 시각으로 스냅합니다.

    Snap clock times to the schedule within the grace windows.
    An early arrival (or one within the start grace) is paid from the
    scheduled start; leaving slightly early is paid to the scheduled end;
    leaving after the scheduled end is paid as actually worked.

    Args:
        actual_in: 실제 출근 (Raw clock-in)
        actual_out: 실제 퇴근 (Raw clock-out)
        scheduled_start: 예정 시작 (Scheduled start)
        scheduled_end: 예정 종료 (Scheduled end)
        start_grace_minutes: 출근 유예(분), None이면 설정값 (Defaults to settings)
        end_grace_minutes: 퇴근 유예(분), None이면 설정값 (Defaults to settings)

    Returns:
        tuple[datetime, datetime]: (effective_in, effective_out), UTC aware
    """
    if start_grace_minutes is None:
        start_grace_minutes = settings.START_GRACE_MINUTES
    if end_grace_minutes is None:
        end_grace_minutes = settings.END_GRACE_MINUTES

    actual_in = ensure_utc(actual_in)
    actual_out = ensure_utc(actual_out)
    scheduled_start = ensure_utc(scheduled_start)
    scheduled_end = ensure_utc(scheduled_end)

    effective_in = actual_in
    if actual_in <= scheduled_start + timedelta(minutes=start_grace_minutes):
        effective_in = scheduled_start

    effective_out = actual_out
    if scheduled_end - timedelta(minutes=end_grace_minutes) <= actual_out < scheduled_end:
        effective_out = scheduled_end

    return effective_in, effective_out


def billable_minutes(effective_in: datetime, effective_out: datetime, break_minutes: int) -> int | None:
    """휴게 차감 후 급여 분을 계산합니다. 불일치이면 None.

    Return ``total - break`` or None when the span is negative or the break
    is negative or not shorter than the span.
    """
    total = minutes_between(effective_in, effective_out)
    if total < 0:
        return None
    if break_minutes < 0 or break_minutes >= total:
        return None
    return total - break_minutes


def classify_assignment(
    assignment_id: UUID,
    worker_id: UUID,
    actual_in: datetime | None,
    actual_out: datetime | None,
    break_minutes: int | None,
    scheduled_start: datetime,
    scheduled_end: datetime,
) -> AssignmentOutcome:
    """승인 시점에 배정 1건을 분류합니다.

    Classify one assignment of an elapsed shift into no-show,
    auto-finalized, or a snapped completed record.

    Returns:
        AssignmentOutcome: 분류 결과 (Outcome; check ``dirty`` first)
    """
    breaks = break_minutes or 0
    scheduled_end = ensure_utc(scheduled_end)
    outcome = AssignmentOutcome(assignment_id=assignment_id, worker_id=worker_id)

    if actual_in is None and actual_out is None:
        outcome.status = "no_show"
        return outcome

    if actual_in is None:
        outcome.dirty = True
        return outcome

    if actual_out is None:
        actual_in = ensure_utc(actual_in)
        if actual_in > scheduled_end:
            outcome.dirty = True
            return outcome
        outcome.effective_clock_in = actual_in
        outcome.effective_clock_out = scheduled_end
        outcome.break_minutes = breaks
        outcome.total_duration_minutes = max(0, minutes_between(actual_in, scheduled_end) - breaks)
        outcome.clock_out_method = AUTO_FINALIZED_METHOD
        return outcome

    effective_in, effective_out = snap_times(actual_in, actual_out, scheduled_start, scheduled_end)
    minutes = billable_minutes(effective_in, effective_out, breaks)
    if minutes is None:
        outcome.dirty = True
        return outcome

    outcome.effective_clock_in = effective_in
    outcome.effective_clock_out = effective_out
    outcome.break_minutes = breaks
    outcome.total_duration_minutes = minutes

    threshold = settings.LATE_CLOCK_OUT_FLAG_MINUTES
    if minutes_between(scheduled_end, actual_out) > threshold:
        outcome.review_note = LATE_CLOCK_OUT_NOTE.format(minutes=threshold)
    return outcome


def calculate_shift_pay(minutes: int, rate_cents: int | None) -> int:
    """확정 분과 시급(센트)으로 예상 급여(센트)를 계산합니다.

    Estimated pay in cents, rounded up to the next cent. Zero when either
    the minutes or the hourly rate is missing or not positive.
    """
    if not rate_cents or rate_cents <= 0 or minutes <= 0:
        return 0
    return math.ceil(minutes * rate_cents / 60)


def locked_rate(budget_rate_snapshot: int | None, shift_price: int | None) -> int:
    """고정된 시급을 반환합니다 — 스냅샷 우선, 없으면 시프트 단가.

    The hourly rate (cents) an assignment is paid at: its locked snapshot,
    falling back to the shift's current price.
    """
    if budget_rate_snapshot is not None:
        return budget_rate_snapshot
    return shift_price or 0
