"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Every domain failure carries a stable machine-readable ``code`` plus a
human-readable message, serialized by FastAPI as::

    {"detail": {"code": "DIRTY_DATA", "message": "...", "worker_ids": [...]}}

Services raise these directly; the enclosing request transaction is
rolled back by ``get_db`` when one escapes the router.

Usage:
    from shiftledger.utils.exceptions import NotFoundError, DuplicateRequestError
    raise NotFoundError("Assignment not found")
    raise DuplicateRequestError(existing_request_id=str(existing.id))
"""

from typing import Any

from fastapi import HTTPException, status


class AppError(HTTPException):
    """도메인 오류 베이스 클래스.

    Base class for domain errors. Subclasses pin the HTTP status and the
    error code; call sites only supply the message and optional extra fields.

    Args:
        message: 오류 메시지 (Human-readable error message)
        **extra: 응답 본문에 포함될 추가 필드 (Extra fields merged into the error body)
    """

    status_code_default: int = status.HTTP_400_BAD_REQUEST
    code: str = "BAD_REQUEST"
    default_message: str = "Bad request"

    def __init__(self, message: str | None = None, **extra: Any) -> None:
        self.message: str = message or self.default_message
        self.extra: dict[str, Any] = extra
        super().__init__(
            status_code=self.status_code_default,
            detail={"code": self.code, "message": self.message, **extra},
        )


class ValidationError(AppError):
    """400 — 잘못된 입력 (Malformed input; caller must fix and resubmit)."""

    code = "VALIDATION_ERROR"
    default_message = "Invalid input"


class UnauthorizedError(AppError):
    """401 — 인증 실패 (Missing, invalid, or expired bearer token)."""

    status_code_default = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class ForbiddenError(AppError):
    """403 — 권한 부족 (Role or ownership check failed; non-retryable)."""

    status_code_default = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_message = "Insufficient permissions"


class NotFoundError(AppError):
    """404 — 리소스 없음.

    404 Not Found. Also raised when the entity exists in another
    organization, so cross-tenant existence is never revealed.
    """

    status_code_default = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Resource not found"


class ShiftNotFoundError(NotFoundError):
    """404 — 시프트 없음 (Shift absent or outside the caller's organization)."""

    code = "SHIFT_NOT_FOUND"
    default_message = "Shift not found"


class InvalidTransitionError(AppError):
    """400 — 허용되지 않는 시프트 상태 전이 (Illegal shift status transition)."""

    code = "INVALID_TRANSITION"
    default_message = "Invalid shift status transition"


class InvalidStateError(AppError):
    """409 — 현재 상태에서 불가능한 작업 (Operation not allowed in current state)."""

    status_code_default = status.HTTP_409_CONFLICT
    code = "INVALID_STATE"
    default_message = "Operation not allowed in the current state"


class CapacityConflictError(AppError):
    """409 — 정원 충돌 (Capacity below the number of assigned workers)."""

    status_code_default = status.HTTP_409_CONFLICT
    code = "CAPACITY_CONFLICT"
    default_message = "Capacity conflicts with current assignments"


class DirtyDataError(AppError):
    """409 — 출퇴근 데이터 불일치로 승인 차단.

    409 Conflict. Approval blocked because one or more assignments have
    inconsistent clock data. ``worker_ids`` lists the offending workers.
    """

    status_code_default = status.HTTP_409_CONFLICT
    code = "DIRTY_DATA"
    default_message = "Cannot approve: one or more workers have inconsistent clock data"

    def __init__(self, worker_ids: list[str], message: str | None = None) -> None:
        super().__init__(message, worker_ids=worker_ids)


class RaceConditionError(AppError):
    """409 — 낙관적 잠금 실패 (Optimistic-lock loss; re-fetch and retry)."""

    status_code_default = status.HTTP_409_CONFLICT
    code = "RACE_CONDITION"
    default_message = "Shift was modified by another request"


class DuplicateRequestError(AppError):
    """409 — 대기 중인 정정 요청이 이미 존재 (A pending correction already exists)."""

    status_code_default = status.HTTP_409_CONFLICT
    code = "DUPLICATE_REQUEST"
    default_message = "A pending correction request already exists for this shift"


class AlreadyClockedInError(AppError):
    """409 — 이미 출근한 직원은 배정 해제 불가 (Worker already clocked in)."""

    status_code_default = status.HTTP_409_CONFLICT
    code = "ALREADY_CLOCKED_IN"
    default_message = "Worker has already clocked in. Use manager override to adjust times instead."


class RateLimitedError(AppError):
    """429 — 요청 속도 제한 초과 (Too many requests in the current window)."""

    status_code_default = status.HTTP_429_TOO_MANY_REQUESTS
    code = "RATE_LIMITED"
    default_message = "Rate limit exceeded"
