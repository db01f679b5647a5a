"""타임시트 관련 Pydantic 요청/응답 스키마 정의.

Timesheet schema definitions for the manager override.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class OverrideRequest(BaseModel):
    """관리자 근무시간 수정 요청 스키마.

    Manager override request. Send any subset of fields; keys left out are
    untouched, and an explicit null clears that clock time. Values are
    stored exactly as sent, with no grace-period snapping.

    Attributes:
        clock_in: 출근 시각 (Clock-in, nullable)
        clock_out: 퇴근 시각 (Clock-out, nullable)
        break_minutes: 휴게 시간(분) (Break minutes, >= 0)
        notes: 수정 메모 (Adjustment notes)
    """

    clock_in: datetime | None = None
    clock_out: datetime | None = None
    break_minutes: int | None = Field(default=None, ge=0)
    notes: str | None = Field(default=None, max_length=2000)


class OverrideResponse(BaseModel):
    """수정 결과 스키마 (Override result with the recomputed assignment status)."""

    success: bool
    new_status: str
