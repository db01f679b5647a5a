"""타임시트 레포지토리 — 급여 내보내기용 확정 배정 조회.

Timesheet Repository — Finalized assignment rows for payroll export.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.models.organization import Location
from shiftledger.models.shift import Shift, ShiftAssignment
from shiftledger.models.user import User

# 내보내기 대상 배정 상태 — Assignment statuses included in payroll export
EXPORTABLE_STATUSES: tuple[str, ...] = ("completed", "approved", "active")


class TimesheetRepository:
    """타임시트 내보내기 쿼리 (Timesheet export queries)."""

    async def get_export_rows(
        self,
        db: AsyncSession,
        organization_id: UUID,
        start: date,
        end: date,
        location_id: UUID | None = None,
        position: str | None = None,
        worker_id: UUID | None = None,
        search: str | None = None,
    ) -> Sequence[Any]:
        """기간 내 확정 배정 행을 조회합니다.

        Fetch assignment rows whose shift's scheduled start falls inside
        ``[start, end]`` (inclusive calendar days, UTC bounds), ordered by
        worker name, worker id, scheduled start, then assignment id.
        Ordering is load-bearing: the weekly overtime sweep is sequential.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            organization_id: 조직 UUID (Organization UUID)
            start: 시작일 (First calendar day, inclusive)
            end: 종료일 (Last calendar day, inclusive)
            location_id: 근무지 필터, 선택 (Optional location filter)
            position: 포지션(시프트 제목) 필터, 선택 (Optional shift title filter)
            worker_id: 근무자 필터, 선택 (Optional worker filter)
            search: 근무자 이름 검색어, 선택 (Optional worker-name search)

        Returns:
            Sequence[Row]: (ShiftAssignment, Shift, User, location timezone) 행 목록
        """
        range_start = datetime.combine(start, time.min, tzinfo=timezone.utc)
        range_end = datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc)

        query: Select = (
            select(ShiftAssignment, Shift, User, Location.timezone)
            .join(Shift, ShiftAssignment.shift_id == Shift.id)
            .join(User, ShiftAssignment.worker_id == User.id)
            .outerjoin(Location, Shift.location_id == Location.id)
            .where(
                Shift.organization_id == organization_id,
                Shift.status != "cancelled",
                Shift.start_time >= range_start,
                Shift.start_time < range_end,
                ShiftAssignment.status.in_(EXPORTABLE_STATUSES),
            )
        )

        if location_id is not None:
            query = query.where(Shift.location_id == location_id)
        if position:
            query = query.where(Shift.title == position)
        if worker_id is not None:
            query = query.where(ShiftAssignment.worker_id == worker_id)
        if search:
            query = query.where(User.full_name.ilike(f"%{search}%"))

        query = query.order_by(User.full_name, User.id, Shift.start_time, ShiftAssignment.id)
        result = await db.execute(query)
        return result.all()


# 싱글턴 인스턴스 — Singleton instance
timesheet_repository: TimesheetRepository = TimesheetRepository()
