"""시프트 승인 서비스 — 근무시간 확정 및 승인 처리.

Approval Service — Finalizes every assignment of a completed shift and
promotes the shift to ``approved`` exactly once.

Approval Flow:
    1. 최고 권한(admin) 확인 (Actor must hold shifts:approve)
    2. 조직 내 시프트 조회 (Shift must belong to the organization)
    3. completed → approved 전이 검증 (Transition check)
    4. 배정별 분류 — no_show / 자동 확정 / 스냅 (Classify each assignment)
    5. 불일치 배정이 있으면 전체 차단 (Any dirty worker blocks the whole shift)
    6. 시급 고정 및 예상 급여 계산 (Lock the hourly rate, estimate pay)
    7. 배정 변경을 한 번에 flush (One unit-of-work flush for all assignments)
    8. 조건부 UPDATE로 상태 전환 — 0행이면 경쟁 패배 (Conditional flip; 0 rows = lost race)
    9. 감사 로그 — 승인 1건 + no_show마다 1건 (Audit: one approval + one per no-show)
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.logging import get_logger
from shiftledger.models.shift import Shift
from shiftledger.repositories.assignment_repository import assignment_repository
from shiftledger.repositories.shift_repository import shift_repository
from shiftledger.services.audit_service import audit_service
from shiftledger.services.permission_service import permission_service
from shiftledger.services.shift_state import ShiftStatus, validate_transition
from shiftledger.services.time_rules import (
    AssignmentOutcome,
    calculate_shift_pay,
    classify_assignment,
    locked_rate,
)
from shiftledger.utils.exceptions import DirtyDataError, RaceConditionError, ShiftNotFoundError

logger = get_logger(__name__)


class ApprovalService:
    """시프트 승인 서비스."""

    async def approve_shift(
        self,
        db: AsyncSession,
        shift_id: UUID,
        organization_id: UUID,
        actor_id: UUID,
    ) -> dict:
        """완료된 시프트를 승인합니다.

        Approve a completed shift: classify every non-removed assignment,
        write the finalized values, and flip the shift to ``approved``
        with an optimistic ``WHERE status = 'completed'`` guard.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            shift_id: 시프트 UUID (Shift UUID)
            organization_id: 조직 UUID (Organization UUID)
            actor_id: 승인자 UUID (Approving user)

        Returns:
            dict: {"success": True, "approved_assignments": n, "no_shows": n}

        Raises:
            ForbiddenError: 승인 권한 없음 (Actor lacks shifts:approve)
            ShiftNotFoundError: 시프트 없음 (Shift absent or in another org)
            InvalidTransitionError: completed 상태가 아님 (Shift not completed)
            DirtyDataError: 출퇴근 데이터 불일치 (Inconsistent clock data)
            RaceConditionError: 다른 요청이 먼저 변경 (Lost the optimistic race)
        """
        await permission_service.require(db, actor_id, organization_id, "shifts:approve")

        shift: Shift | None = await shift_repository.get_by_id(db, shift_id, organization_id)
        if shift is None:
            raise ShiftNotFoundError("시프트를 찾을 수 없습니다 (Shift not found)")

        validate_transition(shift.status, ShiftStatus.APPROVED.value)

        assignments = await assignment_repository.get_by_shift(db, shift.id)
        outcomes: list[AssignmentOutcome] = [
            classify_assignment(
                assignment_id=a.id,
                worker_id=a.worker_id,
                actual_in=a.actual_clock_in,
                actual_out=a.actual_clock_out,
                break_minutes=a.break_minutes,
                scheduled_start=shift.start_time,
                scheduled_end=shift.end_time,
            )
            for a in assignments
        ]

        dirty_workers: list[str] = [str(o.worker_id) for o in outcomes if o.dirty]
        if dirty_workers:
            logger.info("approval_blocked_dirty_data", shift_id=str(shift.id), worker_ids=dirty_workers)
            raise DirtyDataError(
                worker_ids=dirty_workers,
                message="승인 불가: 출퇴근 데이터가 일치하지 않는 근무자가 있습니다 "
                "(Cannot approve: one or more workers have inconsistent clock data)",
            )

        total_cost_cents = 0
        # 배정 변경은 서로 독립적 — 한 번의 flush로 일괄 기록 (Disjoint rows, one batch)
        for assignment, outcome in zip(assignments, outcomes):
            assignment.status = outcome.status
            assignment.total_duration_minutes = outcome.total_duration_minutes
            assignment.break_minutes = outcome.break_minutes
            if outcome.effective_clock_in is not None:
                assignment.effective_clock_in = outcome.effective_clock_in
            if outcome.effective_clock_out is not None:
                assignment.effective_clock_out = outcome.effective_clock_out
            if outcome.clock_out_method is not None:
                assignment.clock_out_method = outcome.clock_out_method
            if outcome.review_note is not None:
                assignment.review_note = outcome.review_note
            if outcome.status == "no_show":
                assignment.budget_rate_snapshot = None
                assignment.estimated_cost_cents = 0
            else:
                if assignment.budget_rate_snapshot is None:
                    logger.info("rate_snapshot_fallback", assignment_id=str(assignment.id), shift_id=str(shift.id))
                rate = locked_rate(assignment.budget_rate_snapshot, shift.price)
                assignment.budget_rate_snapshot = rate
                assignment.estimated_cost_cents = calculate_shift_pay(outcome.total_duration_minutes, rate)
            total_cost_cents += assignment.estimated_cost_cents
        await db.flush()

        flipped: bool = await shift_repository.transition_status(
            db,
            shift.id,
            organization_id,
            expected_status=ShiftStatus.COMPLETED.value,
            new_status=ShiftStatus.APPROVED.value,
        )
        if not flipped:
            logger.warning("approval_race_lost", shift_id=str(shift.id), actor_id=str(actor_id))
            raise RaceConditionError(
                "다른 요청이 시프트를 먼저 변경했습니다 "
                "(Race condition: shift was modified or approved by another request)"
            )
        await db.refresh(shift)

        no_shows = [o for o in outcomes if o.status == "no_show"]
        await audit_service.record(
            db,
            action="shift.approved",
            entity_type="shift",
            entity_id=shift.id,
            actor_id=actor_id,
            organization_id=organization_id,
            metadata={
                "approved_assignments_count": len(outcomes),
                "total_cost_cents": total_cost_cents,
            },
        )
        for outcome in no_shows:
            await audit_service.record(
                db,
                action="assignment.no_show",
                entity_type="shift_assignment",
                entity_id=outcome.assignment_id,
                actor_id=actor_id,
                organization_id=organization_id,
                metadata={
                    "shift_id": shift.id,
                    "worker_id": outcome.worker_id,
                    "reason": "No clock-in/out recorded at approval",
                },
            )

        return {
            "success": True,
            "shift_id": str(shift.id),
            "status": shift.status,
            "approved_assignments": len(outcomes),
            "no_shows": len(no_shows),
        }


# 싱글턴 인스턴스 — Singleton instance
approval_service: ApprovalService = ApprovalService()
