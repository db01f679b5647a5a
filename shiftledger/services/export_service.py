"""타임시트 내보내기 서비스 — 급여용 정규/초과 근무시간 산출.

Timesheet Export Service — Produces payroll rows with the regular/overtime
split for a date range, then formats them as CSV or an .xlsx workbook.
Minutes come from ``total_duration_minutes``; raw clock times are never
re-read here.
"""

import csv
from dataclasses import dataclass
from datetime import date, datetime
from io import BytesIO, StringIO
from uuid import UUID

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.config import settings
from shiftledger.models.organization import Organization
from shiftledger.repositories.organization_repository import organization_repository
from shiftledger.repositories.timesheet_repository import timesheet_repository
from shiftledger.services.overtime import (
    DAILY_POLICY,
    OVERTIME_MULTIPLIER,
    OVERTIME_POLICIES,
    OvertimeSplit,
    WeeklyOvertimeTracker,
    split_daily,
)
from shiftledger.services.permission_service import permission_service
from shiftledger.services.time_rules import locked_rate
from shiftledger.utils.exceptions import ValidationError
from shiftledger.utils.time import ensure_utc, local_date, minutes_between

EXPORT_FORMATS: frozenset[str] = frozenset({"csv", "xlsx"})

HEADERS: list[str] = [
    "Worker ID", "Worker Name", "Email", "Position", "Date",
    "Clock In", "Clock Out", "Break (min)", "Total Minutes",
    "Regular Hours", "Overtime Hours", "Total Hours",
    "Hourly Rate", "Total Pay",
]


@dataclass
class TimesheetRow:
    """내보내기 행 1건 (One payroll row: one worker on one shift)."""

    assignment_id: UUID
    worker_id: UUID
    worker_name: str
    worker_email: str | None
    position: str
    work_date: date
    clock_in: datetime
    clock_out: datetime
    break_minutes: int
    total_minutes: int
    regular_minutes: int
    overtime_minutes: int
    rate_cents: int = 0

    @property
    def regular_hours(self) -> float:
        return round(self.regular_minutes / 60, 2)

    @property
    def overtime_hours(self) -> float:
        return round(self.overtime_minutes / 60, 2)

    @property
    def total_hours(self) -> float:
        return round(self.total_minutes / 60, 2)

    @property
    def hourly_rate(self) -> float:
        return round(self.rate_cents / 100, 2)

    @property
    def total_pay(self) -> float:
        """정규 + 초과(가산) 급여, 달러 (Regular plus overtime at the premium rate)."""
        weighted_minutes = self.regular_minutes + self.overtime_minutes * OVERTIME_MULTIPLIER
        return round(weighted_minutes * self.rate_cents / 6000, 2)

    def as_list(self) -> list:
        return [
            str(self.worker_id), self.worker_name, self.worker_email or "", self.position,
            self.work_date.isoformat(), self.clock_in.isoformat(), self.clock_out.isoformat(),
            self.break_minutes, self.total_minutes,
            self.regular_hours, self.overtime_hours, self.total_hours,
            self.hourly_rate, self.total_pay,
        ]


class ExportService:
    """타임시트 내보내기 서비스."""

    async def build_rows(
        self,
        db: AsyncSession,
        organization_id: UUID,
        actor_id: UUID,
        start: date,
        end: date,
        location_id: UUID | None = None,
        position: str | None = None,
        worker_id: UUID | None = None,
        search: str | None = None,
    ) -> list[TimesheetRow]:
        """기간 내 확정 배정을 급여 행으로 변환합니다.

        Read finalized assignments for ``[start, end]`` and split each
        shift's minutes into regular and overtime under the organization's
        policy. Rows lacking either effective time are skipped. Pay uses the
        locked hourly rate, falling back to the shift price, with overtime
        minutes paid at the overtime multiplier.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            organization_id: 조직 UUID (Organization UUID)
            actor_id: 요청자 UUID (Requesting manager)
            start: 시작일 (First day, inclusive)
            end: 종료일 (Last day, inclusive)
            location_id / position / worker_id / search: 선택 필터 (Optional filters)

        Returns:
            list[TimesheetRow]: 근무자, 시작 시각 순 정렬 (Ordered by worker, then start)

        Raises:
            ForbiddenError: 내보내기 권한 없음 (Lacks timesheets:export)
            ValidationError: 잘못된 기간 (Start after end)
        """
        await permission_service.require(db, actor_id, organization_id, "timesheets:export")
        if start > end:
            raise ValidationError("시작일이 종료일보다 늦습니다 (Start date must not be after end date)")

        organization: Organization | None = await organization_repository.get_by_id(db, organization_id)
        policy = (organization.overtime_policy if organization else None) or "weekly"
        if policy not in OVERTIME_POLICIES:
            policy = "weekly"
        daily_threshold = (
            organization.daily_overtime_minutes if organization and organization.daily_overtime_minutes is not None
            else settings.DEFAULT_DAILY_OVERTIME_MINUTES
        )
        weekly_threshold = (
            organization.weekly_overtime_minutes if organization and organization.weekly_overtime_minutes is not None
            else settings.DEFAULT_WEEKLY_OVERTIME_MINUTES
        )
        tracker = WeeklyOvertimeTracker(weekly_threshold)

        records = await timesheet_repository.get_export_rows(
            db, organization_id, start, end,
            location_id=location_id, position=position, worker_id=worker_id, search=search,
        )

        rows: list[TimesheetRow] = []
        for assignment, shift, worker, tz_name in records:
            if assignment.effective_clock_in is None or assignment.effective_clock_out is None:
                continue

            clock_in = ensure_utc(assignment.effective_clock_in)
            clock_out = ensure_utc(assignment.effective_clock_out)
            break_minutes = assignment.break_minutes or 0
            minutes = assignment.total_duration_minutes
            if minutes is None:
                minutes = max(0, minutes_between(clock_in, clock_out) - break_minutes)

            work_date = local_date(shift.start_time, tz_name)
            if policy == DAILY_POLICY:
                split: OvertimeSplit = split_daily(minutes, daily_threshold)
            else:
                split = tracker.add(worker.id, work_date, minutes)

            rows.append(TimesheetRow(
                assignment_id=assignment.id,
                worker_id=worker.id,
                worker_name=worker.full_name,
                worker_email=worker.email,
                position=shift.title,
                work_date=work_date,
                clock_in=clock_in,
                clock_out=clock_out,
                break_minutes=break_minutes,
                total_minutes=minutes,
                regular_minutes=split.regular_minutes,
                overtime_minutes=split.overtime_minutes,
                rate_cents=locked_rate(assignment.budget_rate_snapshot, shift.price),
            ))
        return rows

    def to_csv(self, rows: list[TimesheetRow]) -> bytes:
        """CSV 바이트로 변환합니다 (UTF-8 BOM, Excel 호환)."""
        buffer = StringIO()
        writer = csv.writer(buffer)
        writer.writerow(HEADERS)
        for row in rows:
            writer.writerow(row.as_list())
        return buffer.getvalue().encode("utf-8-sig")

    def to_xlsx(self, rows: list[TimesheetRow]) -> bytes:
        """openpyxl 워크북 바이트로 변환합니다."""
        wb = Workbook()
        ws = wb.active
        ws.title = "Timesheets"

        header_font = Font(bold=True, color="FFFFFF", size=11)
        header_fill = PatternFill(start_color="2D3436", end_color="2D3436", fill_type="solid")
        for col_idx, h in enumerate(HEADERS, 1):
            cell = ws.cell(row=1, column=col_idx, value=h)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")

        for row in rows:
            ws.append([
                str(row.worker_id), row.worker_name, row.worker_email or "", row.position,
                row.work_date,
                row.clock_in.replace(tzinfo=None), row.clock_out.replace(tzinfo=None),
                row.break_minutes, row.total_minutes,
                row.regular_hours, row.overtime_hours, row.total_hours,
                row.hourly_rate, row.total_pay,
            ])

        for i, w in enumerate([38, 22, 26, 18, 12, 20, 20, 12, 14, 14, 15, 12, 12, 12], 1):
            ws.column_dimensions[ws.cell(row=1, column=i).column_letter].width = w

        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    def render(self, rows: list[TimesheetRow], export_format: str) -> tuple[bytes, str, str]:
        """형식에 맞게 변환합니다 — (본문, media type, 확장자).

        Raises:
            ValidationError: 지원하지 않는 형식 (Unsupported format)
        """
        if export_format not in EXPORT_FORMATS:
            raise ValidationError(f"지원하지 않는 형식입니다 (Unsupported export format: {export_format})")
        if export_format == "csv":
            return self.to_csv(rows), "text/csv; charset=utf-8", "csv"
        return (
            self.to_xlsx(rows),
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            "xlsx",
        )


# 싱글턴 인스턴스 — Singleton instance
export_service: ExportService = ExportService()
