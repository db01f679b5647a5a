"""관리자 API 라우터 패키지 — 모든 관리자 엔드포인트 통합.

Admin API Router package — Aggregates all manager-facing endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - shifts: 시프트 승인/편집/상태/배정 해제 (Shift approval, edit, status, unassign)
    - timesheets: 근무시간 수정 및 내보내기 (Override and payroll export)
    - time_corrections: 정정 요청 검토 (Correction review)
"""

from fastapi import APIRouter

from shiftledger.api.admin.shifts import router as shifts_router
from shiftledger.api.admin.timesheets import router as timesheets_router
from shiftledger.api.admin.time_corrections import router as time_corrections_router

admin_router: APIRouter = APIRouter()

admin_router.include_router(shifts_router, prefix="/shifts", tags=["Shifts"])
admin_router.include_router(timesheets_router, prefix="/timesheets", tags=["Timesheets"])
admin_router.include_router(time_corrections_router, prefix="/time-corrections", tags=["Time Corrections"])
