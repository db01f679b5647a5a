"""FastAPI 의존성 주입 모듈 — 인증 컨텍스트 추출.

FastAPI dependency injection module — Authentication context.
Bearer tokens are issued by the external auth service; this module only
verifies them and exposes the acting user and organization. Role checks
happen inside the services through the permission gate, inside the same
transaction as the guarded write.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. decode_token()이 JWT를 검증하고 페이로드를 반환
       (decode_token verifies JWT and returns payload)
    3. "sub"(사용자)와 "org"(조직)로 AuthContext 구성
       (AuthContext built from the "sub" and "org" claims)
"""

from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from shiftledger.utils.exceptions import UnauthorizedError
from shiftledger.utils.jwt import decode_token

# HTTP Bearer 토큰 추출기 — 누락 시 직접 401 응답 (Missing header handled below as 401)
security: HTTPBearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """인증된 요청 주체 (Authenticated actor).

    Attributes:
        user_id: 사용자 UUID (Acting user)
        organization_id: 조직 UUID (Active organization)
    """

    user_id: UUID
    organization_id: UUID


async def get_auth_context(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> AuthContext:
    """JWT 토큰에서 인증 컨텍스트를 추출합니다.

    Decode the bearer token and return the acting user and organization.

    Raises:
        UnauthorizedError: 토큰 없음/무효/만료, 또는 클레임 누락
                           (Missing, invalid, or expired token, or missing claims)
    """
    if credentials is None:
        raise UnauthorizedError("인증이 필요합니다 (Authentication required)")
    try:
        payload: dict = decode_token(credentials.credentials)
    except jwt.InvalidTokenError:
        raise UnauthorizedError("토큰이 유효하지 않거나 만료되었습니다 (Invalid or expired token)")

    # 토큰 타입 검증 — Reject refresh tokens used as access tokens
    if payload.get("type") != "access":
        raise UnauthorizedError("잘못된 토큰 유형입니다 (Invalid token type)")
    try:
        return AuthContext(user_id=UUID(payload["sub"]), organization_id=UUID(payload["org"]))
    except (KeyError, TypeError, ValueError):
        raise UnauthorizedError("토큰 클레임이 올바르지 않습니다 (Invalid token claims)")


CurrentActor = Annotated[AuthContext, Depends(get_auth_context)]
