"""근무시간 정정 서비스 — 근무자 이의 제기 및 관리자 검토.

Correction Service — Worker dispute requests and manager review.

Workflow:
    1. 근무자가 배정 1건에 대해 정정 요청 (pending, 배정당 최대 1건)
       Worker files a request; at most one pending request per assignment
    2. 관리자가 승인(시각 재기록) 또는 반려(변경 없음)
       Manager approves (times rewritten) or rejects (times unchanged)
    3. 검토 결과는 되돌릴 수 없음 (Review outcome is terminal)
"""

from datetime import datetime
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.config import settings
from shiftledger.models.correction import TimeCorrectionRequest
from shiftledger.models.shift import Shift, ShiftAssignment
from shiftledger.repositories.assignment_repository import assignment_repository
from shiftledger.repositories.correction_repository import correction_repository
from shiftledger.services.audit_service import audit_service
from shiftledger.services.permission_service import permission_service
from shiftledger.services.time_rules import calculate_shift_pay, classify_assignment, locked_rate
from shiftledger.utils.exceptions import (
    DuplicateRequestError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from shiftledger.utils.time import ensure_utc, utc_now

MANUAL_OVERRIDE_METHOD: str = "manual_override"
# 승인 처리로 확정된 배정 상태 — Assignment statuses written by shift approval
FINALIZED_STATUSES: frozenset[str] = frozenset({"completed", "no_show"})


class CorrectionService:
    """정정 요청 서비스."""

    async def request_correction(
        self,
        db: AsyncSession,
        organization_id: UUID,
        worker_id: UUID,
        assignment_id: UUID,
        reason: str,
        requested_clock_in: datetime | None = None,
        requested_clock_out: datetime | None = None,
        requested_break_minutes: int | None = None,
    ) -> TimeCorrectionRequest:
        """근무자가 정정 요청을 제출합니다.

        File a dispute against one of the worker's own assignments.
        Snapshots the current actual and effective values and flags the assignment for
        review. The pending-uniqueness check is backed by a partial unique
        index, so a concurrent duplicate also surfaces as DUPLICATE_REQUEST.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            organization_id: 조직 UUID (Organization UUID)
            worker_id: 요청 근무자 UUID (Requesting worker)
            assignment_id: 대상 배정 UUID (Disputed assignment)
            reason: 사유 (Reason, minimum length from settings)
            requested_clock_in: 요청 출근 시각, 선택 (Requested clock-in)
            requested_clock_out: 요청 퇴근 시각, 선택 (Requested clock-out)
            requested_break_minutes: 요청 휴게(분), 선택 (Requested break)

        Returns:
            TimeCorrectionRequest: 생성된 요청 (Created pending request)

        Raises:
            ForbiddenError: 조직 멤버가 아님 (Not a member)
            NotFoundError: 본인 배정이 아니거나 없음 (Assignment not found)
            ValidationError: 사유 길이 부족 또는 요청 값 없음 (Invalid input)
            DuplicateRequestError: 대기 중인 요청이 이미 있음 (Pending request exists)
        """
        role = await permission_service.resolve_role(db, worker_id, organization_id)
        if role is None:
            raise ForbiddenError("조직 멤버가 아닙니다 (Not a member of this organization)")

        min_length = settings.CORRECTION_REASON_MIN_LENGTH
        if len((reason or "").strip()) < min_length:
            raise ValidationError(
                f"사유를 {min_length}자 이상 입력하세요 (Please provide a detailed reason, min {min_length} characters)"
            )
        if requested_clock_in is None and requested_clock_out is None and requested_break_minutes is None:
            raise ValidationError("변경할 값을 하나 이상 입력하세요 (At least one requested value is required)")
        if requested_break_minutes is not None and requested_break_minutes < 0:
            raise ValidationError("휴게 시간은 0 이상이어야 합니다 (Break minutes must be non-negative)")
        if (
            requested_clock_in is not None
            and requested_clock_out is not None
            and ensure_utc(requested_clock_out) < ensure_utc(requested_clock_in)
        ):
            raise ValidationError("퇴근 시각이 출근 시각보다 빠릅니다 (Clock-out is before clock-in)")

        found = await assignment_repository.get_in_organization(db, assignment_id, organization_id)
        if found is None or found[0].worker_id != worker_id or found[0].status == "removed":
            raise NotFoundError("배정을 찾을 수 없습니다 (Assignment not found)")
        assignment: ShiftAssignment = found[0]

        existing = await correction_repository.get_pending_for_assignment(db, assignment.id)
        if existing is not None:
            raise DuplicateRequestError(
                "이 시프트에 대기 중인 정정 요청이 이미 있습니다 "
                "(You already have a pending correction request for this shift)",
                existing_request_id=str(existing.id),
            )

        try:
            async with db.begin_nested():
                request = await correction_repository.create(
                    db,
                    {
                        "organization_id": organization_id,
                        "assignment_id": assignment.id,
                        "worker_id": worker_id,
                        "requested_clock_in": ensure_utc(requested_clock_in),
                        "requested_clock_out": ensure_utc(requested_clock_out),
                        "requested_break_minutes": requested_break_minutes,
                        "original_clock_in": assignment.actual_clock_in,
                        "original_clock_out": assignment.actual_clock_out,
                        "original_break_minutes": assignment.break_minutes,
                        "original_effective_clock_in": assignment.effective_clock_in,
                        "original_effective_clock_out": assignment.effective_clock_out,
                        "reason": reason.strip(),
                        "status": "pending",
                    },
                )
        except IntegrityError:
            # 동시 요청이 먼저 삽입됨 — A concurrent request won the partial unique index
            winner = await correction_repository.get_pending_for_assignment(db, assignment.id)
            raise DuplicateRequestError(
                "이 시프트에 대기 중인 정정 요청이 이미 있습니다 "
                "(You already have a pending correction request for this shift)",
                existing_request_id=str(winner.id) if winner is not None else None,
            )

        if not assignment.needs_review:
            assignment.needs_review = True
            assignment.review_reason = "disputed"
            await db.flush()

        return request

    async def list_pending(
        self,
        db: AsyncSession,
        organization_id: UUID,
        actor_id: UUID,
        status: str | None = "pending",
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[TimeCorrectionRequest], int]:
        """관리자용 정정 요청 목록 (Manager listing, newest first)."""
        await permission_service.require(db, actor_id, organization_id, "adjustments:read")
        return await correction_repository.list_for_organization(db, organization_id, status, page, per_page)

    async def list_own(
        self,
        db: AsyncSession,
        organization_id: UUID,
        worker_id: UUID,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[TimeCorrectionRequest], int]:
        """근무자 본인의 정정 요청 목록 (Worker's own requests)."""
        role = await permission_service.resolve_role(db, worker_id, organization_id)
        if role is None:
            raise ForbiddenError("조직 멤버가 아닙니다 (Not a member of this organization)")
        return await correction_repository.list_for_worker(db, organization_id, worker_id, page, per_page)

    async def review_correction(
        self,
        db: AsyncSession,
        organization_id: UUID,
        reviewer_id: UUID,
        request_id: UUID,
        action: str,
        review_notes: str | None = None,
    ) -> TimeCorrectionRequest:
        """관리자가 정정 요청을 승인 또는 반려합니다.

        Review a pending request. ``approve`` copies each supplied requested
        field onto the assignment's actual values (unsupplied fields stay
        untouched). When the assignment was already finalized (completed or
        no-show, or its shift is approved), its status, effective times,
        minutes and estimated pay are re-derived with the approval rules.
        ``reject`` only clears the review flag.

        Raises:
            ForbiddenError: 관리자 이상 아님 (Not manager or above)
            NotFoundError: 요청 없음 (Request absent or in another org)
            InvalidStateError: 이미 검토됨 (Already reviewed)
            ValidationError: 재계산 결과 불일치 (Re-derived times inconsistent)
        """
        await permission_service.require(db, reviewer_id, organization_id, "adjustments:review")

        if action not in ("approve", "reject"):
            raise ValidationError("action은 approve 또는 reject 이어야 합니다 (action must be 'approve' or 'reject')")

        request: TimeCorrectionRequest | None = await correction_repository.get_by_id(db, request_id, organization_id)
        if request is None:
            raise NotFoundError("정정 요청을 찾을 수 없습니다 (Correction request not found)")
        if request.status != "pending":
            raise InvalidStateError(
                "이미 검토된 요청입니다 (This request has already been reviewed)",
                status=request.status,
            )

        found = await assignment_repository.get_in_organization(db, request.assignment_id, organization_id)
        if found is None:
            raise NotFoundError("배정을 찾을 수 없습니다 (Assignment not found)")
        assignment, shift = found

        now = utc_now()
        previous_status = assignment.status
        if action == "approve":
            changes = self._apply_requested_values(assignment, request)
            assignment.needs_review = False
            assignment.adjusted_by = reviewer_id
            assignment.adjusted_at = now
            assignment.adjustment_notes = review_notes or "Approved worker correction request"
            if assignment.status in FINALIZED_STATUSES or shift.status == "approved":
                changes.update(self._rederive(assignment, shift))
        else:
            changes = {}
            assignment.needs_review = False

        request.status = "approved" if action == "approve" else "rejected"
        request.reviewed_by = reviewer_id
        request.reviewed_at = now
        request.reviewer_notes = review_notes
        await db.flush()

        await audit_service.record_assignment_event(
            db,
            assignment_id=assignment.id,
            actor_id=reviewer_id,
            previous_status=previous_status,
            new_status=assignment.status,
            metadata={
                "source": "time_correction",
                "request_id": request.id,
                "action": action,
                "changes": changes,
            },
        )
        await audit_service.record(
            db,
            action=f"time_correction.{request.status}",
            entity_type="time_correction_request",
            entity_id=request.id,
            actor_id=reviewer_id,
            organization_id=organization_id,
            metadata={
                "assignment_id": assignment.id,
                "worker_id": request.worker_id,
                "review_notes": review_notes,
            },
        )
        return request

    def _apply_requested_values(
        self,
        assignment: ShiftAssignment,
        request: TimeCorrectionRequest,
    ) -> dict[str, Any]:
        """요청에 포함된 값만 배정에 복사하고, 변경 전 값을 반환합니다."""
        changes: dict[str, Any] = {}
        if request.requested_clock_in is not None:
            changes["actual_clock_in"] = {"from": assignment.actual_clock_in, "to": request.requested_clock_in}
            assignment.actual_clock_in = ensure_utc(request.requested_clock_in)
            assignment.clock_in_method = MANUAL_OVERRIDE_METHOD
            assignment.clock_in_unverified = False
        if request.requested_clock_out is not None:
            changes["actual_clock_out"] = {"from": assignment.actual_clock_out, "to": request.requested_clock_out}
            assignment.actual_clock_out = ensure_utc(request.requested_clock_out)
            assignment.clock_out_method = MANUAL_OVERRIDE_METHOD
            assignment.clock_out_unverified = False
        if request.requested_break_minutes is not None:
            changes["break_minutes"] = {"from": assignment.break_minutes, "to": request.requested_break_minutes}
            assignment.break_minutes = request.requested_break_minutes
        return changes

    def _rederive(self, assignment: ShiftAssignment, shift: Shift) -> dict[str, Any]:
        """확정된 배정의 effective 시각과 급여 분을 다시 계산합니다.

        Re-run the approval classification against the schedule for an
        assignment that was already finalized, keeping its locked rate.
        """
        outcome = classify_assignment(
            assignment_id=assignment.id,
            worker_id=assignment.worker_id,
            actual_in=assignment.actual_clock_in,
            actual_out=assignment.actual_clock_out,
            break_minutes=assignment.break_minutes,
            scheduled_start=shift.start_time,
            scheduled_end=shift.end_time,
        )
        if outcome.dirty:
            raise ValidationError(
                "정정 후 근무시간이 일치하지 않습니다 (Corrected times are inconsistent with the break or schedule)"
            )

        changes: dict[str, Any] = {
            "total_duration_minutes": {
                "from": assignment.total_duration_minutes,
                "to": outcome.total_duration_minutes,
            },
        }
        assignment.status = outcome.status
        assignment.total_duration_minutes = outcome.total_duration_minutes
        assignment.break_minutes = outcome.break_minutes
        assignment.effective_clock_in = outcome.effective_clock_in
        assignment.effective_clock_out = outcome.effective_clock_out
        assignment.review_note = outcome.review_note
        if outcome.clock_out_method is not None:
            assignment.clock_out_method = outcome.clock_out_method

        if outcome.status == "no_show":
            assignment.budget_rate_snapshot = None
            cost = 0
        else:
            assignment.budget_rate_snapshot = locked_rate(assignment.budget_rate_snapshot, shift.price)
            cost = calculate_shift_pay(outcome.total_duration_minutes, assignment.budget_rate_snapshot)
        changes["estimated_cost_cents"] = {"from": assignment.estimated_cost_cents, "to": cost}
        assignment.estimated_cost_cents = cost
        return changes


# 싱글턴 인스턴스 — Singleton instance
correction_service: CorrectionService = CorrectionService()
