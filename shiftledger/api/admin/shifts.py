"""관리자 시프트 라우터 — 승인, 편집, 상태 변경, 배정 해제 엔드포인트.

Admin Shift Router — Approval, edit, manual status change, and
unassignment endpoints. Role checks run inside the services.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.api.deps import CurrentActor
from shiftledger.database import get_db
from shiftledger.middleware.rate_limit import rate_limit
from shiftledger.schemas.shift import (
    ApproveResponse,
    ShiftResponse,
    ShiftStatusChange,
    ShiftUpdate,
    UnassignResponse,
)
from shiftledger.services.approval_service import approval_service
from shiftledger.services.shift_service import shift_service

router: APIRouter = APIRouter()


@router.post(
    "/{shift_id}/approve",
    response_model=ApproveResponse,
    dependencies=[Depends(rate_limit("shift.approve"))],
)
async def approve_shift(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: CurrentActor,
) -> ApproveResponse:
    """완료된 시프트를 승인하고 근무시간을 확정합니다.

    Approve a completed shift and finalize every assignment's times.
    Admin only.
    """
    result: dict = await approval_service.approve_shift(db, shift_id, actor.organization_id, actor.user_id)
    await db.commit()
    return ApproveResponse(**result)


@router.patch("/{shift_id}", response_model=ShiftResponse)
async def edit_shift(
    shift_id: UUID,
    data: ShiftUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: CurrentActor,
) -> ShiftResponse:
    """시작 전 시프트 정보를 수정합니다.

    Edit a shift in draft, published, or assigned status.
    """
    shift = await shift_service.edit_shift(
        db, shift_id, actor.organization_id, actor.user_id, data.model_dump(exclude_unset=True)
    )
    await db.commit()
    return ShiftResponse.from_model(shift)


@router.post("/{shift_id}/status", response_model=ShiftResponse)
async def change_shift_status(
    shift_id: UUID,
    data: ShiftStatusChange,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: CurrentActor,
) -> ShiftResponse:
    """시프트 상태를 수동으로 변경합니다 (승인 제외)."""
    shift = await shift_service.change_status(db, shift_id, actor.organization_id, actor.user_id, data.status)
    await db.commit()
    return ShiftResponse.from_model(shift)


@router.delete("/{shift_id}/workers/{worker_id}", response_model=UnassignResponse)
async def unassign_worker(
    shift_id: UUID,
    worker_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: CurrentActor,
) -> UnassignResponse:
    """근무자를 시프트에서 배정 해제합니다.

    Unassign a worker who has not clocked in. Pending reminders are
    cancelled on a best-effort basis.
    """
    result: dict = await shift_service.unassign_worker(
        db, shift_id, worker_id, actor.organization_id, actor.user_id
    )
    await db.commit()
    return UnassignResponse(**result)
