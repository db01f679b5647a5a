"""근무시간 확정 규칙 테스트.

Time finalization rule tests — grace snapping boundaries, billable minutes,
and assignment classification (no-show, auto-finalize, dirty, late flag).
"""

import uuid
from datetime import timedelta

from shiftledger.services.time_rules import (
    AUTO_FINALIZED_METHOD,
    billable_minutes,
    calculate_shift_pay,
    classify_assignment,
    snap_times,
)
from tests.conftest import SHIFT_END, SHIFT_START


def classify(actual_in, actual_out, break_minutes=0):
    return classify_assignment(
        assignment_id=uuid.uuid4(),
        worker_id=uuid.uuid4(),
        actual_in=actual_in,
        actual_out=actual_out,
        break_minutes=break_minutes,
        scheduled_start=SHIFT_START,
        scheduled_end=SHIFT_END,
    )


class TestSnapTimes:
    """스냅 경계 테스트."""

    def test_early_arrival_snaps_to_start(self):
        eff_in, _ = snap_times(SHIFT_START - timedelta(minutes=20), SHIFT_END, SHIFT_START, SHIFT_END)
        assert eff_in == SHIFT_START

    def test_within_start_grace_snaps(self):
        eff_in, _ = snap_times(
            SHIFT_START + timedelta(minutes=4, seconds=59), SHIFT_END, SHIFT_START, SHIFT_END
        )
        assert eff_in == SHIFT_START

    def test_exactly_at_start_grace_snaps(self):
        eff_in, _ = snap_times(SHIFT_START + timedelta(minutes=5), SHIFT_END, SHIFT_START, SHIFT_END)
        assert eff_in == SHIFT_START

    def test_past_start_grace_kept(self):
        late = SHIFT_START + timedelta(minutes=5, seconds=1)
        eff_in, _ = snap_times(late, SHIFT_END, SHIFT_START, SHIFT_END)
        assert eff_in == late

    def test_leaving_slightly_early_snaps_to_end(self):
        _, eff_out = snap_times(SHIFT_START, SHIFT_END - timedelta(minutes=1), SHIFT_START, SHIFT_END)
        assert eff_out == SHIFT_END

    def test_leaving_before_end_grace_kept(self):
        early = SHIFT_END - timedelta(minutes=5, seconds=1)
        _, eff_out = snap_times(SHIFT_START, early, SHIFT_START, SHIFT_END)
        assert eff_out == early

    def test_late_clock_out_kept(self):
        late = SHIFT_END + timedelta(minutes=20)
        _, eff_out = snap_times(SHIFT_START, late, SHIFT_START, SHIFT_END)
        assert eff_out == late

    def test_custom_grace(self):
        eff_in, _ = snap_times(
            SHIFT_START + timedelta(minutes=8), SHIFT_END, SHIFT_START, SHIFT_END, start_grace_minutes=10
        )
        assert eff_in == SHIFT_START

    def test_naive_values_treated_as_utc(self):
        eff_in, eff_out = snap_times(
            SHIFT_START.replace(tzinfo=None), SHIFT_END.replace(tzinfo=None), SHIFT_START, SHIFT_END
        )
        assert eff_in == SHIFT_START
        assert eff_out == SHIFT_END


class TestBillableMinutes:
    def test_subtracts_break(self):
        assert billable_minutes(SHIFT_START, SHIFT_END, 30) == 450

    def test_break_equal_to_span_is_invalid(self):
        assert billable_minutes(SHIFT_START, SHIFT_START + timedelta(minutes=30), 30) is None

    def test_negative_span_is_invalid(self):
        assert billable_minutes(SHIFT_END, SHIFT_START, 0) is None

    def test_negative_break_is_invalid(self):
        assert billable_minutes(SHIFT_START, SHIFT_END, -1) is None

    def test_partial_minute_truncated(self):
        assert billable_minutes(SHIFT_START, SHIFT_START + timedelta(minutes=10, seconds=59), 0) == 10


class TestClassifyAssignment:
    """배정 분류 테스트."""

    def test_no_clock_events_is_no_show(self):
        outcome = classify(None, None)
        assert outcome.status == "no_show"
        assert outcome.total_duration_minutes == 0
        assert not outcome.dirty

    def test_clock_out_only_is_dirty(self):
        assert classify(None, SHIFT_END).dirty

    def test_clock_in_only_auto_finalizes_to_scheduled_end(self):
        actual_in = SHIFT_START + timedelta(minutes=2)
        outcome = classify(actual_in, None, break_minutes=30)
        assert outcome.status == "completed"
        assert outcome.effective_clock_in == actual_in
        assert outcome.effective_clock_out == SHIFT_END
        assert outcome.clock_out_method == AUTO_FINALIZED_METHOD
        assert outcome.total_duration_minutes == 478 - 30

    def test_clock_in_only_after_scheduled_end_is_dirty(self):
        assert classify(SHIFT_END + timedelta(minutes=30), None).dirty

    def test_clock_in_only_at_scheduled_end_is_zero_minutes(self):
        outcome = classify(SHIFT_END, None)
        assert not outcome.dirty
        assert outcome.total_duration_minutes == 0

    def test_on_time_shift(self):
        outcome = classify(SHIFT_START - timedelta(minutes=1), SHIFT_END - timedelta(minutes=2), 30)
        assert outcome.status == "completed"
        assert outcome.effective_clock_in == SHIFT_START
        assert outcome.effective_clock_out == SHIFT_END
        assert outcome.total_duration_minutes == 450
        assert outcome.review_note is None

    def test_late_clock_out_adds_review_note(self):
        outcome = classify(SHIFT_START, SHIFT_END + timedelta(minutes=20))
        assert outcome.total_duration_minutes == 500
        assert outcome.review_note == "Flag: Clock-out >15m past schedule"

    def test_clock_out_exactly_at_flag_threshold_no_note(self):
        outcome = classify(SHIFT_START, SHIFT_END + timedelta(minutes=15))
        assert outcome.review_note is None

    def test_break_longer_than_shift_is_dirty(self):
        assert classify(SHIFT_START, SHIFT_START + timedelta(hours=1, minutes=10), 600).dirty

    def test_clock_out_before_clock_in_is_dirty(self):
        assert classify(SHIFT_START + timedelta(hours=2), SHIFT_START + timedelta(hours=1)).dirty


class TestCalculateShiftPay:
    """예상 급여 계산 테스트."""

    def test_full_hours(self):
        assert calculate_shift_pay(480, 2000) == 16000

    def test_rounds_up_to_next_cent(self):
        # 7분 × 1001센트 / 60 = 116.78...
        assert calculate_shift_pay(7, 1001) == 117

    def test_missing_rate_is_zero(self):
        assert calculate_shift_pay(480, None) == 0
        assert calculate_shift_pay(480, 0) == 0

    def test_no_minutes_is_zero(self):
        assert calculate_shift_pay(0, 2000) == 0
