"""앱 API 라우터 패키지 — 모든 앱(근무자용) 엔드포인트 통합.

App API Router package — Aggregates all worker-facing endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - time_corrections: 내 정정 요청 (My correction requests)
"""

from fastapi import APIRouter

from shiftledger.api.app.time_corrections import router as time_corrections_router

app_router: APIRouter = APIRouter()

app_router.include_router(time_corrections_router, prefix="/my/time-corrections", tags=["My Time Corrections"])
