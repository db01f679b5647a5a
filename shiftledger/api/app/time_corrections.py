"""앱 근무시간 정정 요청 라우터 — 근무자 본인 요청 제출 및 조회.

App Time Correction Router — Workers file and list their own requests.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.api.deps import CurrentActor
from shiftledger.database import get_db
from shiftledger.middleware.rate_limit import rate_limit
from shiftledger.schemas.common import PaginatedResponse
from shiftledger.schemas.correction import CorrectionCreate, CorrectionResponse
from shiftledger.services.correction_service import correction_service

router: APIRouter = APIRouter()


@router.post(
    "",
    response_model=CorrectionResponse,
    status_code=201,
    dependencies=[Depends(rate_limit("time_correction.request"))],
)
async def request_correction(
    data: CorrectionCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: CurrentActor,
) -> CorrectionResponse:
    """본인 배정에 대한 근무시간 정정을 요청합니다.

    File a correction request against one of the caller's assignments.
    """
    request = await correction_service.request_correction(
        db,
        actor.organization_id,
        actor.user_id,
        data.assignment_id,
        data.reason,
        requested_clock_in=data.requested_clock_in,
        requested_clock_out=data.requested_clock_out,
        requested_break_minutes=data.requested_break_minutes,
    )
    await db.commit()
    return CorrectionResponse.from_model(request)


@router.get("", response_model=PaginatedResponse)
async def list_my_corrections(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: CurrentActor,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse:
    """내 정정 요청 목록을 조회합니다."""
    items, total = await correction_service.list_own(db, actor.organization_id, actor.user_id, page, per_page)
    return PaginatedResponse(
        items=[CorrectionResponse.from_model(item) for item in items],
        total=total,
        page=page,
        per_page=per_page,
    )
