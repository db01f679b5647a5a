"""근무시간 정정 요청 Pydantic 스키마 정의.

Time correction request schema definitions: worker submission, manager
review, and the request response shape.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from shiftledger.models.correction import TimeCorrectionRequest


class CorrectionCreate(BaseModel):
    """정정 요청 생성 스키마.

    Worker correction submission. At least one requested value is required;
    the reason must be at least ``CORRECTION_REASON_MIN_LENGTH`` characters
    (checked by the service).
    """

    assignment_id: UUID  # 대상 배정 UUID (Target assignment)
    requested_clock_in: datetime | None = None  # 요청 출근 시각 (Requested clock-in)
    requested_clock_out: datetime | None = None  # 요청 퇴근 시각 (Requested clock-out)
    requested_break_minutes: int | None = Field(default=None, ge=0)  # 요청 휴게(분)
    reason: str = Field(..., max_length=2000)  # 정정 사유 (Reason)


class CorrectionReview(BaseModel):
    """정정 요청 검토 스키마 (Manager review: approve or reject)."""

    action: Literal["approve", "reject"]
    review_notes: str | None = Field(default=None, max_length=2000)


class CorrectionResponse(BaseModel):
    """정정 요청 응답 스키마 (Correction request response schema)."""

    id: str
    assignment_id: str
    worker_id: str
    requested_clock_in: datetime | None = None
    requested_clock_out: datetime | None = None
    requested_break_minutes: int | None = None
    original_clock_in: datetime | None = None
    original_clock_out: datetime | None = None
    original_break_minutes: int | None = None
    original_effective_clock_in: datetime | None = None
    original_effective_clock_out: datetime | None = None
    reason: str
    status: str  # pending / approved / rejected
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    reviewer_notes: str | None = None
    created_at: datetime

    @classmethod
    def from_model(cls, request: TimeCorrectionRequest) -> "CorrectionResponse":
        return cls(
            id=str(request.id),
            assignment_id=str(request.assignment_id),
            worker_id=str(request.worker_id),
            requested_clock_in=request.requested_clock_in,
            requested_clock_out=request.requested_clock_out,
            requested_break_minutes=request.requested_break_minutes,
            original_clock_in=request.original_clock_in,
            original_clock_out=request.original_clock_out,
            original_break_minutes=request.original_break_minutes,
            original_effective_clock_in=request.original_effective_clock_in,
            original_effective_clock_out=request.original_effective_clock_out,
            reason=request.reason,
            status=request.status,
            reviewed_by=str(request.reviewed_by) if request.reviewed_by else None,
            reviewed_at=request.reviewed_at,
            reviewer_notes=request.reviewer_notes,
            created_at=request.created_at,
        )
