"""시프트 승인 테스트.

Shift approval tests — finalization of every assignment, no-show audit,
dirty-data blocking, role gate, organization scope, and the optimistic
race guard.
"""

import uuid
from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import update

from shiftledger.models.shift import Shift
from shiftledger.repositories.audit_repository import audit_log_repository
from shiftledger.services.approval_service import approval_service
from shiftledger.utils.exceptions import (
    DirtyDataError,
    ForbiddenError,
    InvalidTransitionError,
    RaceConditionError,
    ShiftNotFoundError,
)
from shiftledger.utils.time import ensure_utc
from tests.conftest import SHIFT_END, SHIFT_START, auth_header


def approve_url(shift_id) -> str:
    return f"/api/v1/admin/shifts/{shift_id}/approve"


class TestApproveShift:
    """승인 서비스 테스트."""

    async def test_finalizes_assignments(
        self, db, org, admin_user, worker, worker2, make_shift, make_assignment
    ):
        shift = await make_shift()
        worked = await make_assignment(
            shift, worker,
            actual_in=SHIFT_START - timedelta(minutes=3),
            actual_out=SHIFT_END - timedelta(minutes=2),
            break_minutes=30,
        )
        absent = await make_assignment(shift, worker2)

        result = await approval_service.approve_shift(db, shift.id, org.id, admin_user.id)

        assert result == {
            "success": True,
            "shift_id": str(shift.id),
            "status": "approved",
            "approved_assignments": 2,
            "no_shows": 1,
        }
        assert shift.status == "approved"
        assert worked.status == "completed"
        assert worked.total_duration_minutes == 450
        assert ensure_utc(worked.effective_clock_in) == SHIFT_START
        assert ensure_utc(worked.effective_clock_out) == SHIFT_END
        assert absent.status == "no_show"
        assert absent.total_duration_minutes == 0

    async def test_audits_approval_and_no_shows(
        self, db, org, admin_user, worker, make_shift, make_assignment
    ):
        shift = await make_shift()
        absent = await make_assignment(shift, worker)

        await approval_service.approve_shift(db, shift.id, org.id, admin_user.id)

        approved_logs = await audit_log_repository.get_for_entity(db, org.id, shift.id, action="shift.approved")
        assert len(approved_logs) == 1
        assert approved_logs[0].details == {"approved_assignments_count": 1, "total_cost_cents": 0}

        no_show_logs = await audit_log_repository.get_for_entity(db, org.id, absent.id, action="assignment.no_show")
        assert len(no_show_logs) == 1
        assert no_show_logs[0].details["worker_id"] == str(worker.id)

    async def test_auto_finalizes_missing_clock_out(
        self, db, org, admin_user, worker, make_shift, make_assignment
    ):
        shift = await make_shift()
        assignment = await make_assignment(shift, worker, actual_in=SHIFT_START)

        await approval_service.approve_shift(db, shift.id, org.id, admin_user.id)

        assert assignment.status == "completed"
        assert assignment.clock_out_method == "system_auto_finalized"
        assert ensure_utc(assignment.effective_clock_out) == SHIFT_END
        assert assignment.total_duration_minutes == 480

    async def test_late_clock_out_flagged(self, db, org, admin_user, worker, make_shift, make_assignment):
        shift = await make_shift()
        assignment = await make_assignment(
            shift, worker, actual_in=SHIFT_START, actual_out=SHIFT_END + timedelta(minutes=20)
        )

        await approval_service.approve_shift(db, shift.id, org.id, admin_user.id)

        assert assignment.total_duration_minutes == 500
        assert assignment.review_note == "Flag: Clock-out >15m past schedule"

    async def test_removed_assignments_ignored(self, db, org, admin_user, worker, make_shift, make_assignment):
        shift = await make_shift()
        removed = await make_assignment(shift, worker, status="removed")

        result = await approval_service.approve_shift(db, shift.id, org.id, admin_user.id)

        assert result["approved_assignments"] == 0
        assert removed.status == "removed"

    async def test_dirty_data_blocks_whole_shift(
        self, db, org, admin_user, worker, worker2, make_shift, make_assignment
    ):
        shift = await make_shift()
        clean = await make_assignment(shift, worker, actual_in=SHIFT_START, actual_out=SHIFT_END)
        await make_assignment(shift, worker2, actual_out=SHIFT_END)

        with pytest.raises(DirtyDataError) as exc_info:
            await approval_service.approve_shift(db, shift.id, org.id, admin_user.id)

        assert exc_info.value.status_code == 409
        assert exc_info.value.detail["worker_ids"] == [str(worker2.id)]
        assert clean.status == "active"
        assert clean.total_duration_minutes is None
        assert shift.status == "completed"

    async def test_clock_in_after_scheduled_end_blocks(
        self, db, org, admin_user, worker, make_shift, make_assignment
    ):
        shift = await make_shift()
        stray = await make_assignment(shift, worker, actual_in=SHIFT_END + timedelta(minutes=30))

        with pytest.raises(DirtyDataError) as exc_info:
            await approval_service.approve_shift(db, shift.id, org.id, admin_user.id)

        assert exc_info.value.detail["worker_ids"] == [str(worker.id)]
        assert stray.effective_clock_out is None
        assert shift.status == "completed"

    async def test_shift_must_be_completed(self, db, org, admin_user, make_shift):
        shift = await make_shift(status="in-progress")
        with pytest.raises(InvalidTransitionError):
            await approval_service.approve_shift(db, shift.id, org.id, admin_user.id)

    async def test_second_approval_rejected(self, db, org, admin_user, make_shift):
        shift = await make_shift()
        await approval_service.approve_shift(db, shift.id, org.id, admin_user.id)
        with pytest.raises(InvalidTransitionError):
            await approval_service.approve_shift(db, shift.id, org.id, admin_user.id)

    async def test_manager_cannot_approve(self, db, org, manager_user, make_shift):
        shift = await make_shift()
        with pytest.raises(ForbiddenError) as exc_info:
            await approval_service.approve_shift(db, shift.id, org.id, manager_user.id)
        assert exc_info.value.detail["required"] == "shifts:approve"

    async def test_other_organization_shift_not_found(self, db, org, other_org, admin_user):
        foreign = Shift(
            organization_id=other_org.id,
            title="Foreign",
            start_time=SHIFT_START,
            end_time=SHIFT_END,
            capacity=1,
            status="completed",
        )
        db.add(foreign)
        await db.flush()

        with pytest.raises(ShiftNotFoundError) as exc_info:
            await approval_service.approve_shift(db, foreign.id, org.id, admin_user.id)
        assert exc_info.value.detail["code"] == "SHIFT_NOT_FOUND"

    async def test_lost_race_raises(self, db, org, admin_user, worker, make_shift, make_assignment):
        """다른 요청이 먼저 승인 — 메모리상 상태는 completed로 남아 있음."""
        shift = await make_shift()
        await make_assignment(shift, worker, actual_in=SHIFT_START, actual_out=SHIFT_END)

        await db.execute(
            update(Shift)
            .where(Shift.id == shift.id)
            .values(status="approved")
            .execution_options(synchronize_session=False)
        )
        assert shift.status == "completed"

        with pytest.raises(RaceConditionError) as exc_info:
            await approval_service.approve_shift(db, shift.id, org.id, admin_user.id)
        assert exc_info.value.detail["code"] == "RACE_CONDITION"


class TestApprovalPay:
    """시급 고정 및 예상 급여 테스트."""

    async def test_locks_shift_price_and_estimates_cost(
        self, db, org, admin_user, worker, worker2, make_shift, make_assignment
    ):
        shift = await make_shift(price=2000)
        worked = await make_assignment(
            shift, worker, actual_in=SHIFT_START, actual_out=SHIFT_END, break_minutes=30
        )
        absent = await make_assignment(shift, worker2)

        await approval_service.approve_shift(db, shift.id, org.id, admin_user.id)

        assert worked.budget_rate_snapshot == 2000
        assert worked.estimated_cost_cents == 15000  # 450분 × 2000 / 60
        assert absent.budget_rate_snapshot is None
        assert absent.estimated_cost_cents == 0

        logs = await audit_log_repository.get_for_entity(db, org.id, shift.id, action="shift.approved")
        assert logs[0].details["total_cost_cents"] == 15000

    async def test_existing_snapshot_wins_over_shift_price(
        self, db, org, admin_user, worker, make_shift, make_assignment
    ):
        shift = await make_shift(price=2000)
        assignment = await make_assignment(
            shift, worker, actual_in=SHIFT_START, actual_out=SHIFT_END, budget_rate_snapshot=1500
        )

        await approval_service.approve_shift(db, shift.id, org.id, admin_user.id)

        assert assignment.budget_rate_snapshot == 1500
        assert assignment.estimated_cost_cents == 12000

    async def test_auto_finalized_cost_rounds_up(
        self, db, org, admin_user, worker, make_shift, make_assignment
    ):
        shift = await make_shift(price=1001)
        assignment = await make_assignment(shift, worker, actual_in=SHIFT_END - timedelta(minutes=7))

        await approval_service.approve_shift(db, shift.id, org.id, admin_user.id)

        assert assignment.total_duration_minutes == 7
        assert assignment.estimated_cost_cents == 117

    async def test_unpriced_shift_costs_nothing(
        self, db, org, admin_user, worker, make_shift, make_assignment
    ):
        shift = await make_shift()
        assignment = await make_assignment(shift, worker, actual_in=SHIFT_START, actual_out=SHIFT_END)

        await approval_service.approve_shift(db, shift.id, org.id, admin_user.id)

        assert assignment.budget_rate_snapshot == 0
        assert assignment.estimated_cost_cents == 0


class TestApproveEndpoint:
    """승인 API 테스트."""

    async def test_approve(self, client: AsyncClient, admin_token, worker, make_shift, make_assignment):
        shift = await make_shift()
        await make_assignment(shift, worker, actual_in=SHIFT_START, actual_out=SHIFT_END)

        res = await client.post(approve_url(shift.id), headers=auth_header(admin_token))
        assert res.status_code == 200
        data = res.json()
        assert data["status"] == "approved"
        assert data["approved_assignments"] == 1
        assert data["no_shows"] == 0

    async def test_requires_token(self, client: AsyncClient, make_shift):
        shift = await make_shift()
        res = await client.post(approve_url(shift.id))
        assert res.status_code == 401
        assert res.json()["detail"]["code"] == "UNAUTHORIZED"

    async def test_invalid_token(self, client: AsyncClient, make_shift):
        shift = await make_shift()
        res = await client.post(approve_url(shift.id), headers=auth_header("not-a-jwt"))
        assert res.status_code == 401

    async def test_manager_forbidden(self, client: AsyncClient, manager_token, make_shift):
        shift = await make_shift()
        res = await client.post(approve_url(shift.id), headers=auth_header(manager_token))
        assert res.status_code == 403
        assert res.json()["detail"]["code"] == "FORBIDDEN"

    async def test_dirty_data(self, client: AsyncClient, admin_token, worker, make_shift, make_assignment):
        shift = await make_shift()
        await make_assignment(shift, worker, actual_out=SHIFT_END)

        res = await client.post(approve_url(shift.id), headers=auth_header(admin_token))
        assert res.status_code == 409
        detail = res.json()["detail"]
        assert detail["code"] == "DIRTY_DATA"
        assert detail["worker_ids"] == [str(worker.id)]

    async def test_unknown_shift(self, client: AsyncClient, admin_token):
        res = await client.post(approve_url(uuid.uuid4()), headers=auth_header(admin_token))
        assert res.status_code == 404
        assert res.json()["detail"]["code"] == "SHIFT_NOT_FOUND"
