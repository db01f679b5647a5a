"""관리자 타임시트 라우터 — 근무시간 수정 및 급여 내보내기.

Admin Timesheet Router — Manager override of an assignment's times and
the payroll export (CSV or .xlsx).
"""

from datetime import date
from io import BytesIO
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.api.deps import CurrentActor
from shiftledger.database import get_db
from shiftledger.middleware.rate_limit import rate_limit
from shiftledger.schemas.timesheet import OverrideRequest, OverrideResponse
from shiftledger.services.export_service import TimesheetRow, export_service
from shiftledger.services.override_service import override_service

router: APIRouter = APIRouter()


@router.patch(
    "/assignments/{assignment_id}",
    response_model=OverrideResponse,
    dependencies=[Depends(rate_limit("timesheet.override"))],
)
async def override_assignment(
    assignment_id: UUID,
    data: OverrideRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: CurrentActor,
) -> OverrideResponse:
    """배정의 출퇴근 시각을 수동으로 수정합니다.

    Override clock times without snapping. Only fields present in the body
    are changed; an explicit null clears a clock time.
    """
    result: dict = await override_service.override_assignment(
        db, actor.organization_id, actor.user_id, assignment_id, data.model_dump(exclude_unset=True)
    )
    await db.commit()
    return OverrideResponse(**result)


@router.get("/export", dependencies=[Depends(rate_limit("timesheet.export"))])
async def export_timesheets(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: CurrentActor,
    start: Annotated[date, Query(description="시작일 (First day, inclusive)")],
    end: Annotated[date, Query(description="종료일 (Last day, inclusive)")],
    export_format: Annotated[str, Query(alias="format")] = "csv",
    location_id: Annotated[UUID | None, Query()] = None,
    position: Annotated[str | None, Query()] = None,
    worker_id: Annotated[UUID | None, Query()] = None,
    search: Annotated[str | None, Query(max_length=100)] = None,
) -> StreamingResponse:
    """기간 내 확정 근무시간을 급여용 파일로 내보냅니다.

    Export regular/overtime hours for ``[start, end]`` as CSV or .xlsx.
    """
    rows: list[TimesheetRow] = await export_service.build_rows(
        db,
        actor.organization_id,
        actor.user_id,
        start,
        end,
        location_id=location_id,
        position=position,
        worker_id=worker_id,
        search=search,
    )
    content, media_type, ext = export_service.render(rows, export_format)
    filename = f"timesheets_{start.isoformat()}_{end.isoformat()}.{ext}"
    return StreamingResponse(
        BytesIO(content),
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
