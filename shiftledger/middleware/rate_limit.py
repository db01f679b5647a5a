"""요청 속도 제한 — slowapi Limiter 기반 고정 윈도우.

Request rate limiting on slowapi's ``Limiter``. Counters are keyed per
(scope, user, organization) and kept in the ``limits`` storage named by
``RATE_LIMIT_STORAGE_URI``: ``memory://`` for a single instance, or e.g.
``redis://host:6379`` so several API instances share one count. Storage
lives outside the request's database transaction, so requests that fail
afterwards are still counted.

Usage:
    @router.post("/shifts/{shift_id}/approve", dependencies=[Depends(rate_limit("shift.approve"))])
"""

import math
import time
from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends
from limits import RateLimitItem, RateLimitItemPerSecond
from slowapi import Limiter
from slowapi.util import get_remote_address

from shiftledger.api.deps import AuthContext, get_auth_context
from shiftledger.config import settings
from shiftledger.logging import get_logger
from shiftledger.utils.exceptions import RateLimitedError

logger = get_logger(__name__)

# 싱글턴 인스턴스 — Singleton instance
# 엔진 엔드포인트는 rate_limit()의 actor 키로 제한 (Engine routes are keyed by actor, not address)
limiter: Limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
    key_prefix="shiftledger",
)


def current_limit() -> RateLimitItem:
    """설정값으로 윈도우당 허용량을 만듭니다 (Requests per window from settings)."""
    return RateLimitItemPerSecond(settings.RATE_LIMIT_MAX_REQUESTS, settings.RATE_LIMIT_WINDOW_SECONDS)


def rate_limit(scope: str) -> Callable[..., Awaitable[None]]:
    """범위별 속도 제한 의존성을 생성합니다.

    Build a FastAPI dependency that counts the caller's requests under
    ``scope`` and raises RATE_LIMITED (with ``Retry-After``) once the
    window is exhausted.
    """

    async def dependency(actor: Annotated[AuthContext, Depends(get_auth_context)]) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return

        item = current_limit()
        identifiers = (scope, str(actor.user_id), str(actor.organization_id))
        if limiter.limiter.hit(item, *identifiers):
            return

        reset_time, _ = limiter.limiter.get_window_stats(item, *identifiers)
        retry_after = max(1, math.ceil(reset_time - time.time()))
        logger.warning("rate_limited", scope=scope, user_id=str(actor.user_id), retry_after=retry_after)
        error = RateLimitedError(retry_after_seconds=retry_after)
        error.headers = {"Retry-After": str(retry_after)}
        raise error

    return dependency
