"""시프트 관리 서비스 — 편집, 상태 변경, 배정 해제.

Shift Service — Shift edits, manual status changes along the state
machine, and the unassignment guard.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.models.shift import Shift, ShiftAssignment
from shiftledger.repositories.assignment_repository import assignment_repository
from shiftledger.repositories.organization_repository import location_repository
from shiftledger.repositories.shift_repository import shift_repository
from shiftledger.services.audit_service import audit_service
from shiftledger.services.notification_service import notification_service
from shiftledger.services.permission_service import permission_service
from shiftledger.services.shift_state import (
    EDITABLE_STATUSES,
    TERMINAL_STATUSES,
    ShiftStatus,
    validate_transition,
)
from shiftledger.utils.exceptions import (
    AlreadyClockedInError,
    CapacityConflictError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    RaceConditionError,
    ShiftNotFoundError,
    ValidationError,
)
from shiftledger.utils.time import ensure_utc

NON_NULLABLE_FIELDS: tuple[str, ...] = ("title", "start_time", "end_time", "capacity")


class ShiftService:
    """시프트 관리 서비스."""

    async def _get_shift(self, db: AsyncSession, shift_id: UUID, organization_id: UUID) -> Shift:
        shift: Shift | None = await shift_repository.get_by_id(db, shift_id, organization_id)
        if shift is None:
            raise ShiftNotFoundError("시프트를 찾을 수 없습니다 (Shift not found)")
        return shift

    async def edit_shift(
        self,
        db: AsyncSession,
        shift_id: UUID,
        organization_id: UUID,
        actor_id: UUID,
        updates: dict[str, Any],
    ) -> Shift:
        """시프트 정보를 부분 수정합니다.

        Partially update a shift that has not started yet.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            shift_id: 시프트 UUID (Shift UUID)
            organization_id: 조직 UUID (Organization UUID)
            actor_id: 수정자 UUID (Acting manager)
            updates: 변경 필드 — title, description, start_time, end_time, capacity, location_id, price
                     (Fields sent by the client; schema-validated lengths and ranges)

        Returns:
            Shift: 수정된 시프트 (Updated shift)

        Raises:
            ForbiddenError: 관리자 이상 아님 (Not manager or above)
            ShiftNotFoundError: 시프트 없음 (Shift not found)
            InvalidStateError: 편집 불가 상태 (Not draft/published/assigned)
            ValidationError: 종료가 시작보다 빠름 또는 잘못된 근무지 (Bad times or location)
            CapacityConflictError: 정원 < 현재 배정 인원 (Capacity below assigned workers)
        """
        await permission_service.require(db, actor_id, organization_id, "shifts:write")
        shift = await self._get_shift(db, shift_id, organization_id)

        if shift.status not in EDITABLE_STATUSES:
            raise InvalidStateError(
                f"'{shift.status}' 상태의 시프트는 수정할 수 없습니다 (Cannot edit shift in '{shift.status}' status)",
                status=shift.status,
            )

        cleared = sorted(k for k in NON_NULLABLE_FIELDS if k in updates and updates[k] is None)
        if cleared:
            raise ValidationError(f"비울 수 없는 필드입니다 (Fields cannot be null: {', '.join(cleared)})")

        new_start: datetime = ensure_utc(updates.get("start_time") or shift.start_time)
        new_end: datetime = ensure_utc(updates.get("end_time") or shift.end_time)
        if new_end <= new_start:
            raise ValidationError("종료 시각은 시작 시각 이후여야 합니다 (End time must be after start time)")

        if updates.get("capacity") is not None:
            assigned = await assignment_repository.count_active(db, shift.id)
            if updates["capacity"] < assigned:
                raise CapacityConflictError(
                    f"정원을 {updates['capacity']}명으로 줄일 수 없습니다 — 이미 {assigned}명 배정됨 "
                    f"(Cannot reduce capacity to {updates['capacity']}: {assigned} workers already assigned)",
                    assigned=assigned,
                )

        if updates.get("location_id") is not None:
            location = await location_repository.get_by_id(db, updates["location_id"], organization_id)
            if location is None:
                raise ValidationError("근무지를 찾을 수 없습니다 (Location not found)")

        previous_start, previous_end = shift.start_time, shift.end_time
        changes: dict[str, Any] = dict(updates)
        if "start_time" in changes:
            changes["start_time"] = new_start
        if "end_time" in changes:
            changes["end_time"] = new_end
        await shift_repository.apply_changes(db, shift, changes)

        await audit_service.record(
            db,
            action="shift.edited",
            entity_type="shift",
            entity_id=shift.id,
            actor_id=actor_id,
            organization_id=organization_id,
            metadata={
                "changes": changes,
                "previous_start_time": previous_start,
                "previous_end_time": previous_end,
            },
        )
        return shift

    async def change_status(
        self,
        db: AsyncSession,
        shift_id: UUID,
        organization_id: UUID,
        actor_id: UUID,
        new_status: str,
    ) -> Shift:
        """상태 머신을 따라 시프트 상태를 변경합니다.

        Move a shift along the transition table with the same optimistic
        guard used by approval. Approval itself is refused here.

        Raises:
            ForbiddenError: 관리자 이상 아님 (Not manager or above)
            ShiftNotFoundError: 시프트 없음 (Shift not found)
            InvalidTransitionError: 허용되지 않는 전이 또는 approved 요청 (Illegal, or approved)
            RaceConditionError: 다른 요청이 먼저 변경 (Lost the optimistic race)
        """
        permission = "shifts:cancel" if new_status == ShiftStatus.CANCELLED.value else "shifts:write"
        await permission_service.require(db, actor_id, organization_id, permission)
        shift = await self._get_shift(db, shift_id, organization_id)

        if new_status == ShiftStatus.APPROVED.value:
            raise InvalidTransitionError(
                "승인은 승인 엔드포인트로만 가능합니다 (Use the approve endpoint to approve a shift)",
                current_status=shift.status,
                requested_status=new_status,
            )
        validate_transition(shift.status, new_status)

        previous_status = shift.status
        flipped = await shift_repository.transition_status(
            db, shift.id, organization_id, expected_status=previous_status, new_status=new_status
        )
        if not flipped:
            raise RaceConditionError("다른 요청이 시프트를 먼저 변경했습니다 (Shift was modified by another request)")
        await db.refresh(shift)

        await audit_service.record(
            db,
            action="shift.status_changed",
            entity_type="shift",
            entity_id=shift.id,
            actor_id=actor_id,
            organization_id=organization_id,
            metadata={"from": previous_status, "to": new_status},
        )
        return shift

    async def unassign_worker(
        self,
        db: AsyncSession,
        shift_id: UUID,
        worker_id: UUID,
        organization_id: UUID,
        actor_id: UUID,
    ) -> dict:
        """시프트에서 근무자를 배정 해제합니다 (soft delete).

        Remove a worker from a shift that has not finished. A worker who has
        clocked in can never be unassigned, whatever the shift status;
        managers adjust their times with the override instead.

        Check Order:
            1. 시프트 (SHIFT_NOT_FOUND)
            2. removed가 아닌 배정 (NOT_FOUND)
            3. 출근 기록 있음 (ALREADY_CLOCKED_IN)
            4. 종료된 시프트 또는 active가 아닌 배정 (INVALID_STATE)

        Returns:
            dict: {"success": True, "assignment_id": str}
        """
        await permission_service.require(db, actor_id, organization_id, "shifts:write")
        shift = await self._get_shift(db, shift_id, organization_id)

        assignment: ShiftAssignment | None = await assignment_repository.get_for_worker(db, shift.id, worker_id)
        if assignment is None:
            raise NotFoundError("근무자가 이 시프트에 배정되어 있지 않습니다 (Worker is not assigned to this shift)")

        if assignment.actual_clock_in is not None:
            raise AlreadyClockedInError(
                "이미 출근한 근무자입니다. 수동 수정을 사용하세요 "
                "(Worker has already clocked in. Use manager override to adjust times instead.)"
            )

        if shift.status in TERMINAL_STATUSES or assignment.status != "active":
            raise InvalidStateError(
                f"'{shift.status}' 시프트에서 배정 해제할 수 없습니다 (Cannot unassign from a '{shift.status}' shift)",
                status=shift.status,
                assignment_status=assignment.status,
            )

        previous_status = assignment.status
        assignment.status = "removed"
        await db.flush()

        await audit_service.record_assignment_event(
            db,
            assignment_id=assignment.id,
            actor_id=actor_id,
            previous_status=previous_status,
            new_status="removed",
            metadata={"source": "unassign", "shift_id": shift.id},
        )
        await audit_service.record(
            db,
            action="worker.unassigned",
            entity_type="shift_assignment",
            entity_id=assignment.id,
            actor_id=actor_id,
            organization_id=organization_id,
            metadata={"shift_id": shift.id, "worker_id": worker_id},
        )

        await notification_service.cancel_shift_reminders(db, shift.id, worker_id)

        # 배정 인원이 0이 되면 assigned → published
        if shift.status == ShiftStatus.ASSIGNED.value and await assignment_repository.count_active(db, shift.id) == 0:
            validate_transition(shift.status, ShiftStatus.PUBLISHED.value)
            if await shift_repository.transition_status(
                db, shift.id, organization_id,
                expected_status=ShiftStatus.ASSIGNED.value,
                new_status=ShiftStatus.PUBLISHED.value,
            ):
                await db.refresh(shift)

        return {"success": True, "assignment_id": str(assignment.id)}


# 싱글턴 인스턴스 — Singleton instance
shift_service: ShiftService = ShiftService()
