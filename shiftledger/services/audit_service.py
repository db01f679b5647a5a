"""감사 로그 서비스 — 상태 변경 기록.

Audit Service — Records every state-changing action inside the caller's
transaction. A failed insert propagates, so the audited write rolls back
with it.
"""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.models.audit import AssignmentAuditEvent, AuditLog
from shiftledger.repositories.audit_repository import (
    assignment_audit_repository,
    audit_log_repository,
)


def _jsonable(value: Any) -> Any:
    """메타데이터를 JSON 직렬화 가능한 값으로 변환합니다."""
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, UUID):
        return str(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


class AuditService:
    """감사 로그 서비스 (Audit sink)."""

    async def record(
        self,
        db: AsyncSession,
        action: str,
        entity_type: str,
        entity_id: UUID,
        actor_id: UUID | None,
        organization_id: UUID,
        metadata: dict[str, Any] | None = None,
    ) -> AuditLog:
        """조직 범위 감사 로그를 기록합니다.

        Append an organization-scoped audit record.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            action: 액션명 (e.g. "shift.approved")
            entity_type: 대상 유형 (e.g. "shift")
            entity_id: 대상 ID (Target entity id)
            actor_id: 수행자 ID (Acting user)
            organization_id: 조직 ID (Organization scope)
            metadata: 부가 정보 (Extra details; datetimes and UUIDs are stringified)

        Returns:
            AuditLog: 생성된 감사 로그 (Created audit row)
        """
        return await audit_log_repository.create(
            db,
            {
                "organization_id": organization_id,
                "actor_id": actor_id,
                "action": action,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "details": _jsonable(metadata or {}),
            },
        )

    async def record_assignment_event(
        self,
        db: AsyncSession,
        assignment_id: UUID,
        actor_id: UUID | None,
        previous_status: str | None,
        new_status: str | None,
        metadata: dict[str, Any] | None = None,
    ) -> AssignmentAuditEvent:
        """배정 단위 변경 이력을 기록합니다 (Append an assignment audit event)."""
        return await assignment_audit_repository.create(
            db,
            {
                "assignment_id": assignment_id,
                "actor_id": actor_id,
                "previous_status": previous_status,
                "new_status": new_status,
                "details": _jsonable(metadata or {}),
            },
        )


# 싱글턴 인스턴스 — Singleton instance
audit_service: AuditService = AuditService()
