"""관리자 수동 수정 서비스 — 출퇴근 시각 직접 편집.

Override Service — Privileged direct edit of an assignment's clock times.
Values are written verbatim to both the actual and effective fields;
grace-period snapping is never applied here.

Status Recompute:
    출근+퇴근 → completed, total = max(0, out - in - break)
    출근만    → active
    둘 다 없음 → no_show, 0분
    퇴근만 / 퇴근 < 출근 / 음수 휴게 → VALIDATION_ERROR
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.models.shift import ShiftAssignment
from shiftledger.repositories.assignment_repository import assignment_repository
from shiftledger.services.audit_service import audit_service
from shiftledger.services.correction_service import MANUAL_OVERRIDE_METHOD
from shiftledger.services.permission_service import permission_service
from shiftledger.utils.exceptions import NotFoundError, ValidationError
from shiftledger.utils.time import ensure_utc, minutes_between, utc_now

# 수정 가능한 필드 — Fields accepted by the override
OVERRIDE_FIELDS: frozenset[str] = frozenset({"clock_in", "clock_out", "break_minutes", "notes"})


class OverrideService:
    """관리자 수동 수정 서비스."""

    async def override_assignment(
        self,
        db: AsyncSession,
        organization_id: UUID,
        actor_id: UUID,
        assignment_id: UUID,
        fields: dict[str, Any],
    ) -> dict:
        """배정의 출퇴근 시각을 직접 수정합니다.

        Apply any subset of clock-in, clock-out, break, and notes. Only keys
        present in ``fields`` are touched; a present key with value None
        clears that clock.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            organization_id: 조직 UUID (Organization UUID)
            actor_id: 수정하는 관리자 UUID (Acting manager)
            assignment_id: 대상 배정 UUID (Target assignment)
            fields: 변경할 필드 — clock_in / clock_out / break_minutes / notes
                    (Subset of fields to change, as sent by the client)

        Returns:
            dict: {"success": True, "new_status": str}

        Raises:
            ForbiddenError: 관리자 이상 아님 (Not manager or above)
            NotFoundError: 배정 없음 (Assignment absent or in another org)
            ValidationError: 시각/휴게 불일치 (Inconsistent times or break)
        """
        await permission_service.require(db, actor_id, organization_id, "timesheets:write")

        found = await assignment_repository.get_in_organization(db, assignment_id, organization_id)
        if found is None or found[0].status == "removed":
            raise NotFoundError("배정을 찾을 수 없습니다 (Assignment not found)")
        assignment: ShiftAssignment = found[0]

        unknown = set(fields) - OVERRIDE_FIELDS
        if unknown:
            raise ValidationError(f"알 수 없는 필드 (Unknown fields: {', '.join(sorted(unknown))})")

        clock_in: datetime | None = self._current_in(assignment)
        clock_out: datetime | None = self._current_out(assignment)
        break_minutes: int = assignment.break_minutes or 0
        if "clock_in" in fields:
            clock_in = ensure_utc(fields["clock_in"])
        if "clock_out" in fields:
            clock_out = ensure_utc(fields["clock_out"])
        if fields.get("break_minutes") is not None:
            break_minutes = fields["break_minutes"]

        if break_minutes < 0:
            raise ValidationError("휴게 시간은 0 이상이어야 합니다 (Break minutes must be non-negative)")
        if clock_out is not None and clock_in is None:
            raise ValidationError("출근 없이 퇴근을 기록할 수 없습니다 (Clock-out requires a clock-in)")
        if clock_in is not None and clock_out is not None and clock_out < clock_in:
            raise ValidationError("퇴근 시각이 출근 시각보다 빠릅니다 (Clock-out is before clock-in)")

        previous: dict[str, Any] = {
            "actual_clock_in": assignment.actual_clock_in,
            "actual_clock_out": assignment.actual_clock_out,
            "effective_clock_in": assignment.effective_clock_in,
            "effective_clock_out": assignment.effective_clock_out,
            "break_minutes": assignment.break_minutes,
            "total_duration_minutes": assignment.total_duration_minutes,
        }
        previous_status = assignment.status

        if "clock_in" in fields:
            assignment.actual_clock_in = clock_in
            assignment.clock_in_method = MANUAL_OVERRIDE_METHOD
            assignment.clock_in_unverified = False
        if "clock_out" in fields:
            assignment.actual_clock_out = clock_out
            assignment.clock_out_method = MANUAL_OVERRIDE_METHOD
            assignment.clock_out_unverified = False
        assignment.break_minutes = break_minutes
        assignment.effective_clock_in = clock_in
        assignment.effective_clock_out = clock_out

        if clock_in is not None and clock_out is not None:
            assignment.status = "completed"
            assignment.total_duration_minutes = max(0, minutes_between(clock_in, clock_out) - break_minutes)
        elif clock_in is not None:
            assignment.status = "active"
            assignment.total_duration_minutes = None
        else:
            assignment.status = "no_show"
            assignment.total_duration_minutes = 0

        now = utc_now()
        assignment.adjusted_by = actor_id
        assignment.adjusted_at = now
        assignment.adjustment_notes = fields.get("notes") or "Manager adjustment"
        assignment.needs_review = False
        await db.flush()

        changed = sorted(set(fields) - {"notes"})
        await audit_service.record_assignment_event(
            db,
            assignment_id=assignment.id,
            actor_id=actor_id,
            previous_status=previous_status,
            new_status=assignment.status,
            metadata={"source": "manager_override", "fields": changed, "previous": previous},
        )
        await audit_service.record(
            db,
            action="timesheet.override",
            entity_type="shift_assignment",
            entity_id=assignment.id,
            actor_id=actor_id,
            organization_id=organization_id,
            metadata={
                "fields": changed,
                "previous_status": previous_status,
                "new_status": assignment.status,
                "total_duration_minutes": assignment.total_duration_minutes,
                "notes": fields.get("notes"),
            },
        )
        return {"success": True, "new_status": assignment.status}

    @staticmethod
    def _current_in(assignment: ShiftAssignment) -> datetime | None:
        """현재 급여 기준 출근 — effective 우선 (Effective first, then actual)."""
        return ensure_utc(assignment.effective_clock_in or assignment.actual_clock_in)

    @staticmethod
    def _current_out(assignment: ShiftAssignment) -> datetime | None:
        return ensure_utc(assignment.effective_clock_out or assignment.actual_clock_out)


# 싱글턴 인스턴스 — Singleton instance
override_service: OverrideService = OverrideService()
