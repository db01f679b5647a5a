"""관리자 근무시간 정정 요청 라우터 — 목록 조회 및 승인/반려.

Admin Time Correction Router — List requests and review them.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.api.deps import CurrentActor
from shiftledger.database import get_db
from shiftledger.middleware.rate_limit import rate_limit
from shiftledger.schemas.common import PaginatedResponse
from shiftledger.schemas.correction import CorrectionResponse, CorrectionReview
from shiftledger.services.correction_service import correction_service

router: APIRouter = APIRouter()


@router.get("", response_model=PaginatedResponse)
async def list_corrections(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: CurrentActor,
    status: Annotated[str | None, Query(pattern=r"^(pending|approved|rejected)$")] = "pending",
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse:
    """정정 요청 목록을 조회합니다 (기본: 대기 중, 최신순)."""
    items, total = await correction_service.list_pending(
        db, actor.organization_id, actor.user_id, status, page, per_page
    )
    return PaginatedResponse(
        items=[CorrectionResponse.from_model(item) for item in items],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.post(
    "/{request_id}/review",
    response_model=CorrectionResponse,
    dependencies=[Depends(rate_limit("time_correction.review"))],
)
async def review_correction(
    request_id: UUID,
    data: CorrectionReview,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: CurrentActor,
) -> CorrectionResponse:
    """정정 요청을 승인 또는 반려합니다.

    Approve copies the requested values onto the assignment; reject only
    clears the review flag.
    """
    request = await correction_service.review_correction(
        db, actor.organization_id, actor.user_id, request_id, data.action, data.review_notes
    )
    await db.commit()
    return CorrectionResponse.from_model(request)
