"""요청 로깅 미들웨어 — structlog + Axiom.

Request logging middleware. Every API call is written as one structured
``request.completed`` line; when Axiom credentials are configured the same
event is also ingested into the Axiom dataset. Error responses carry the
domain error ``code`` (e.g. DIRTY_DATA, RACE_CONDITION) so failed
approvals and corrections can be filtered without parsing messages.
Sensitive fields (token, secret, authorization) are masked.
"""

import json
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from shiftledger.config import settings
from shiftledger.logging import get_logger

logger = get_logger(__name__)

# 마스킹 대상 필드 패턴 — Fields to mask in request bodies and query strings
_SENSITIVE_KEYS = re.compile(
    r"(password|secret|token|authorization|api_key|apikey|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}


def _mask_dict(data: Any, depth: int = 0) -> Any:
    """민감 필드 자동 마스킹 — Recursively mask sensitive fields in dicts/lists."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(k) else _mask_dict(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [_mask_dict(item, depth + 1) for item in data[:20]]
    return data


def _error_fields(body: bytes) -> dict[str, Any]:
    """오류 응답 본문에서 code/message 추출.

    Pull ``code`` and ``message`` out of ``{"detail": {...}}`` bodies;
    plain-string details are kept as the message.
    """
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {"error": body.decode("utf-8", errors="replace")[:500]}

    detail = payload.get("detail", payload) if isinstance(payload, dict) else payload
    if isinstance(detail, dict):
        return {
            "error_code": detail.get("code"),
            "error": str(detail.get("message", ""))[:500],
        }
    return {"error": str(detail)[:500]}


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 로깅하는 미들웨어.

    Logs method, path, parameters, masked request body, status code,
    duration, and the domain error code for failed requests.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        start_time = time.time()
        method = request.method
        event: dict[str, Any] = {"method": method, "path": request.url.path}
        if request.query_params:
            event["query_params"] = _mask_dict(dict(request.query_params))

        # 본문이 있는 메서드만 수집 — Only methods that carry a body
        if method in ("POST", "PUT", "PATCH"):
            body_bytes = await request.body()
            if body_bytes:
                try:
                    event["request_body"] = _mask_dict(json.loads(body_bytes))
                except (json.JSONDecodeError, UnicodeDecodeError):
                    event["request_body"] = "(non-json body)"

        status_code: int = 500
        try:
            response = await call_next(request)
            status_code = response.status_code

            if status_code >= 400:
                resp_body = b""
                async for chunk in response.body_iterator:
                    resp_body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")
                event.update(_error_fields(resp_body))

                # 소비한 body를 다시 응답으로 반환 — Re-wrap consumed body
                response = Response(
                    content=resp_body,
                    status_code=status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["status_code"] = status_code
            event["duration_ms"] = round((time.time() - start_time) * 1000, 2)
            logger.info("request.completed", **event)
            self._ingest(event)

        return response

    def _ingest(self, event: dict[str, Any]) -> None:
        if self._client is None:
            return
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception:
            # 로깅 실패가 요청 처리에 영향주지 않도록 — Never break a request on log failure
            logger.warning("axiom_ingest_failed", path=event.get("path"), exc_info=True)
