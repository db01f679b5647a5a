"""시프트 관련 Pydantic 요청/응답 스키마 정의.

Shift request/response schema definitions: partial edit, manual status
change, approval result, and the shift/unassign responses.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from shiftledger.models.shift import Shift


class ShiftUpdate(BaseModel):
    """시프트 수정 요청 스키마 (부분 업데이트).

    Shift edit request schema (partial update). Only fields present in the
    request body are applied; ``description`` and ``location_id`` may be
    cleared with an explicit null.

    Attributes:
        title: 시프트 제목 (1-200 chars)
        description: 설명 (Up to 2000 chars, nullable)
        start_time: 시작 시각 (New start)
        end_time: 종료 시각 (New end, must be after start)
        capacity: 정원 (1-500, not below current assignments)
        location_id: 근무지 UUID (Location in the same organization, nullable)
        price: 시급, 센트 (Hourly rate in cents, nullable)
    """

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    start_time: datetime | None = None
    end_time: datetime | None = None
    capacity: int | None = Field(default=None, ge=1, le=500)
    location_id: UUID | None = None
    price: int | None = Field(default=None, ge=0)


class ShiftStatusChange(BaseModel):
    """시프트 상태 변경 요청 스키마.

    Manual status change along the transition table (approval excluded).
    """

    status: str = Field(..., pattern=r"^(draft|published|assigned|in-progress|completed|approved|cancelled)$")


class ShiftResponse(BaseModel):
    """시프트 응답 스키마 (Shift response schema)."""

    id: str  # 시프트 UUID 문자열 (Shift UUID as string)
    organization_id: str  # 조직 UUID 문자열 (Organization UUID as string)
    location_id: str | None = None  # 근무지 UUID (Location UUID, nullable)
    title: str  # 시프트 제목 (Shift title)
    description: str | None = None  # 설명 (Description)
    start_time: datetime  # 시작 시각 (Scheduled start)
    end_time: datetime  # 종료 시각 (Scheduled end)
    capacity: int  # 정원 (Capacity)
    price: int | None = None  # 시급, 센트 (Hourly rate in cents)
    status: str  # 상태 (Lifecycle status)

    @classmethod
    def from_model(cls, shift: Shift) -> "ShiftResponse":
        return cls(
            id=str(shift.id),
            organization_id=str(shift.organization_id),
            location_id=str(shift.location_id) if shift.location_id else None,
            title=shift.title,
            description=shift.description,
            start_time=shift.start_time,
            end_time=shift.end_time,
            capacity=shift.capacity,
            price=shift.price,
            status=shift.status,
        )


class ApproveResponse(BaseModel):
    """시프트 승인 결과 스키마.

    Attributes:
        success: 성공 여부 (Always true on 200)
        shift_id: 시프트 UUID (Approved shift)
        status: 새 상태 (Always "approved")
        approved_assignments: 확정된 배정 수 (Assignments finalized, no-shows included)
        no_shows: 결근 처리 수 (Assignments marked no_show)
    """

    success: bool
    shift_id: str
    status: str
    approved_assignments: int
    no_shows: int


class UnassignResponse(BaseModel):
    """배정 해제 결과 스키마 (Unassign result)."""

    success: bool
    assignment_id: str
