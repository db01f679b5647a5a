"""타임시트 내보내기 테스트.

Timesheet export tests — row selection, the daily and weekly overtime
split, location-local week bucketing, and the CSV/.xlsx renderings.
"""

import csv
from datetime import date, datetime, timedelta, timezone
from io import BytesIO, StringIO

import pytest
import pytest_asyncio
from httpx import AsyncClient
from openpyxl import load_workbook

from shiftledger.models.organization import Location
from shiftledger.services.export_service import HEADERS, export_service
from shiftledger.utils.exceptions import ForbiddenError, ValidationError
from tests.conftest import SHIFT_START, auth_header

WEEK_START = date(2026, 3, 2)
WEEK_END = date(2026, 3, 8)
EXPORT_URL = "/api/v1/admin/timesheets/export"


@pytest.fixture
def worked(make_shift, make_assignment):
    """확정된 근무 1건을 생성합니다 — start부터 minutes분."""
    async def _make(worker, start=SHIFT_START, minutes=480, break_minutes=0, status="approved", **kwargs):
        end = start + timedelta(minutes=minutes + break_minutes)
        shift = await make_shift(status=status, start=start, end=end, **kwargs)
        return await make_assignment(
            shift, worker,
            actual_in=start, actual_out=end, break_minutes=break_minutes, status="completed",
            effective_clock_in=start, effective_clock_out=end, total_duration_minutes=minutes,
        )

    return _make


@pytest_asyncio.fixture
async def daily_org(db, org):
    org.overtime_policy = "daily"
    await db.flush()
    return org


class TestBuildRows:
    """급여 행 생성 테스트."""

    async def test_weekly_overtime_accumulates(self, db, org, admin_user, worker, worked):
        for day in range(5):
            await worked(worker, start=SHIFT_START + timedelta(days=day), minutes=540)

        rows = await export_service.build_rows(db, org.id, admin_user.id, WEEK_START, WEEK_END)

        assert [(r.regular_minutes, r.overtime_minutes) for r in rows] == [
            (540, 0), (540, 0), (540, 0), (540, 0), (240, 300),
        ]
        assert [r.work_date for r in rows] == [WEEK_START + timedelta(days=d) for d in range(5)]

    async def test_weekly_totals_are_per_worker(self, db, org, admin_user, worker, worker2, worked):
        for day in range(5):
            await worked(worker, start=SHIFT_START + timedelta(days=day), minutes=540)
        await worked(worker2, minutes=540)

        rows = await export_service.build_rows(db, org.id, admin_user.id, WEEK_START, WEEK_END)

        assert [r.worker_name for r in rows] == ["Alice Worker"] * 5 + ["Bob Worker"]
        assert (rows[-1].regular_minutes, rows[-1].overtime_minutes) == (540, 0)

    async def test_week_follows_location_timezone(self, db, org, admin_user, worker, worked):
        seoul = Location(organization_id=org.id, name="Gangnam", timezone="Asia/Seoul")
        db.add(seoul)
        await db.flush()
        for day in range(4):
            await worked(worker, start=SHIFT_START + timedelta(days=day), minutes=600, location=seoul)
        # 일요일 20:00 UTC = 월요일 05:00 KST, 다음 ISO 주
        sunday_night = datetime(2026, 3, 8, 20, 0, tzinfo=timezone.utc)
        await worked(worker, start=sunday_night, minutes=600, location=seoul)

        rows = await export_service.build_rows(db, org.id, admin_user.id, WEEK_START, WEEK_END)

        assert rows[-1].work_date == date(2026, 3, 9)
        assert (rows[-1].regular_minutes, rows[-1].overtime_minutes) == (600, 0)

    async def test_daily_policy(self, db, daily_org, admin_user, worker, worked):
        await worked(worker, minutes=600)
        await worked(worker, start=SHIFT_START + timedelta(days=1), minutes=420)

        rows = await export_service.build_rows(db, daily_org.id, admin_user.id, WEEK_START, WEEK_END)

        assert [(r.regular_minutes, r.overtime_minutes) for r in rows] == [(480, 120), (420, 0)]
        assert rows[0].overtime_hours == 2.0

    async def test_pay_uses_overtime_premium(self, db, daily_org, admin_user, worker, worked):
        await worked(worker, minutes=540, price=2000)

        rows = await export_service.build_rows(db, daily_org.id, admin_user.id, WEEK_START, WEEK_END)

        assert rows[0].hourly_rate == 20.0
        # 8h × $20 + 1h × $20 × 1.5
        assert rows[0].total_pay == 190.0

    async def test_pay_prefers_locked_rate(self, db, org, admin_user, worker, worked):
        assignment = await worked(worker, minutes=480, price=2000)
        assignment.budget_rate_snapshot = 1500
        await db.flush()

        rows = await export_service.build_rows(db, org.id, admin_user.id, WEEK_START, WEEK_END)

        assert rows[0].hourly_rate == 15.0
        assert rows[0].total_pay == 120.0

    async def test_missing_total_falls_back_to_times(self, db, org, admin_user, worker, worked):
        assignment = await worked(worker, minutes=450, break_minutes=30)
        assignment.total_duration_minutes = None
        await db.flush()

        rows = await export_service.build_rows(db, org.id, admin_user.id, WEEK_START, WEEK_END)
        assert rows[0].total_minutes == 450

    async def test_skips_rows_without_effective_times(
        self, db, org, admin_user, worker, worker2, worked, make_shift, make_assignment
    ):
        await worked(worker)
        shift = await make_shift(status="in-progress", start=SHIFT_START + timedelta(days=1))
        await make_assignment(shift, worker2, actual_in=shift.start_time)

        rows = await export_service.build_rows(db, org.id, admin_user.id, WEEK_START, WEEK_END)
        assert [r.worker_name for r in rows] == ["Alice Worker"]

    async def test_excludes_cancelled_shifts_and_removed_assignments(
        self, db, org, admin_user, worker, worker2, worked
    ):
        await worked(worker, status="cancelled")
        removed = await worked(worker2)
        removed.status = "removed"
        await db.flush()

        rows = await export_service.build_rows(db, org.id, admin_user.id, WEEK_START, WEEK_END)
        assert rows == []

    async def test_date_range_is_inclusive(self, db, org, admin_user, worker, worked):
        await worked(worker, start=datetime(2026, 3, 8, 23, 0, tzinfo=timezone.utc), minutes=60)
        await worked(worker, start=datetime(2026, 3, 9, 0, 0, tzinfo=timezone.utc), minutes=60)

        rows = await export_service.build_rows(db, org.id, admin_user.id, WEEK_START, WEEK_END)
        assert len(rows) == 1

    async def test_filters(self, db, org, admin_user, worker, worker2, worked):
        await worked(worker, title="Server")
        await worked(worker2, title="Cook")

        by_search = await export_service.build_rows(
            db, org.id, admin_user.id, WEEK_START, WEEK_END, search="bob"
        )
        by_position = await export_service.build_rows(
            db, org.id, admin_user.id, WEEK_START, WEEK_END, position="Server"
        )
        by_worker = await export_service.build_rows(
            db, org.id, admin_user.id, WEEK_START, WEEK_END, worker_id=worker2.id
        )

        assert [r.worker_name for r in by_search] == ["Bob Worker"]
        assert [r.worker_name for r in by_position] == ["Alice Worker"]
        assert [r.position for r in by_worker] == ["Cook"]

    async def test_start_after_end(self, db, org, admin_user):
        with pytest.raises(ValidationError):
            await export_service.build_rows(db, org.id, admin_user.id, WEEK_END, WEEK_START)

    async def test_member_forbidden(self, db, org, worker):
        with pytest.raises(ForbiddenError):
            await export_service.build_rows(db, org.id, worker.id, WEEK_START, WEEK_END)

    def test_unknown_format(self):
        with pytest.raises(ValidationError):
            export_service.render([], "pdf")


class TestExportEndpoint:
    """내보내기 API 테스트."""

    async def test_csv(self, client: AsyncClient, admin_token, worker, worked):
        await worked(worker, minutes=450, break_minutes=30, price=1800)

        res = await client.get(
            EXPORT_URL, params={"start": "2026-03-02", "end": "2026-03-08"}, headers=auth_header(admin_token)
        )

        assert res.status_code == 200
        assert res.headers["content-type"].startswith("text/csv")
        assert "timesheets_2026-03-02_2026-03-08.csv" in res.headers["content-disposition"]

        lines = list(csv.reader(StringIO(res.content.decode("utf-8-sig"))))
        assert lines[0] == HEADERS
        assert len(lines) == 2
        row = dict(zip(HEADERS, lines[1]))
        assert row["Worker Name"] == "Alice Worker"
        assert row["Date"] == "2026-03-02"
        assert row["Break (min)"] == "30"
        assert row["Total Minutes"] == "450"
        assert row["Regular Hours"] == "7.5"
        assert row["Overtime Hours"] == "0.0"
        assert row["Hourly Rate"] == "18.0"
        assert row["Total Pay"] == "135.0"

    async def test_xlsx(self, client: AsyncClient, manager_token, worker, worked):
        await worked(worker)

        res = await client.get(
            EXPORT_URL,
            params={"start": "2026-03-02", "end": "2026-03-08", "format": "xlsx"},
            headers=auth_header(manager_token),
        )

        assert res.status_code == 200
        assert "timesheets_2026-03-02_2026-03-08.xlsx" in res.headers["content-disposition"]
        ws = load_workbook(BytesIO(res.content)).active
        assert ws.title == "Timesheets"
        assert [c.value for c in ws[1]] == HEADERS
        assert ws.max_row == 2
        assert ws.cell(row=2, column=2).value == "Alice Worker"
        assert ws.cell(row=2, column=9).value == 480

    async def test_invalid_format(self, client: AsyncClient, admin_token):
        res = await client.get(
            EXPORT_URL,
            params={"start": "2026-03-02", "end": "2026-03-08", "format": "pdf"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 400
        assert res.json()["detail"]["code"] == "VALIDATION_ERROR"

    async def test_start_after_end(self, client: AsyncClient, admin_token):
        res = await client.get(
            EXPORT_URL, params={"start": "2026-03-08", "end": "2026-03-02"}, headers=auth_header(admin_token)
        )
        assert res.status_code == 400
        assert res.json()["detail"]["code"] == "VALIDATION_ERROR"

    async def test_missing_dates(self, client: AsyncClient, admin_token):
        res = await client.get(EXPORT_URL, headers=auth_header(admin_token))
        assert res.status_code == 400

    async def test_worker_forbidden(self, client: AsyncClient, worker_token):
        res = await client.get(
            EXPORT_URL, params={"start": "2026-03-02", "end": "2026-03-08"}, headers=auth_header(worker_token)
        )
        assert res.status_code == 403
        assert res.json()["detail"]["code"] == "FORBIDDEN"
