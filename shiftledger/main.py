"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어, 예외 처리, 라우터 등록.

FastAPI application entry point — Middleware, exception handling, and
router registration.
"""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shiftledger.config import settings
from shiftledger.logging import setup_logging
from shiftledger.middleware.axiom_logging import AxiomLoggingMiddleware
from shiftledger.middleware.rate_limit import limiter

setup_logging()

app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# 속도 제한기 — Rate limiter shared by the rate_limit() dependencies
app.state.limiter = limiter

# 요청 로깅 미들웨어 — CORS보다 먼저 등록하여 모든 요청을 캡처
# Request logging middleware, registered before CORS to capture all requests
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 — Cross-Origin Resource Sharing middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """스키마 검증 실패를 도메인 오류 형식으로 변환합니다.

    Render request validation failures as 400 VALIDATION_ERROR in the same
    ``{"detail": {"code", "message"}}`` shape as domain errors.
    """
    return JSONResponse(
        status_code=400,
        content={
            "detail": {
                "code": "VALIDATION_ERROR",
                "message": "요청 값이 올바르지 않습니다 (Invalid request data)",
                "errors": jsonable_encoder(exc.errors()),
            }
        },
    )


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# 라우터 등록 — Router registration
# admin_router: 관리자용 (shifts, timesheets, time-corrections)
# app_router: 근무자용 (my time-corrections)
# ---------------------------------------------------------------------------
from shiftledger.api.admin import admin_router  # noqa: E402
from shiftledger.api.app import app_router  # noqa: E402

app.include_router(admin_router, prefix="/api/v1/admin")
app.include_router(app_router, prefix="/api/v1/app")
