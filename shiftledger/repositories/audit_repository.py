"""감사 로그 레포지토리 — append-only 기록.

Audit Repository — Append-only inserts plus the reads used by tests and
entity history views.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.models.audit import AssignmentAuditEvent, AuditLog
from shiftledger.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLog]):
    """조직 감사 로그 레포지토리 (Organization audit log repository)."""

    def __init__(self) -> None:
        super().__init__(AuditLog)

    async def get_for_entity(
        self,
        db: AsyncSession,
        organization_id: UUID,
        entity_id: UUID,
        action: str | None = None,
    ) -> Sequence[AuditLog]:
        """엔티티의 감사 로그를 시간순으로 조회합니다."""
        query: Select = select(AuditLog).where(
            AuditLog.organization_id == organization_id,
            AuditLog.entity_id == entity_id,
        )
        if action is not None:
            query = query.where(AuditLog.action == action)
        result = await db.execute(query.order_by(AuditLog.created_at))
        return result.scalars().all()


class AssignmentAuditRepository(BaseRepository[AssignmentAuditEvent]):
    """배정 변경 이력 레포지토리 (Assignment audit event repository)."""

    def __init__(self) -> None:
        super().__init__(AssignmentAuditEvent)

    async def get_for_assignment(
        self,
        db: AsyncSession,
        assignment_id: UUID,
    ) -> Sequence[AssignmentAuditEvent]:
        query: Select = (
            select(AssignmentAuditEvent)
            .where(AssignmentAuditEvent.assignment_id == assignment_id)
            .order_by(AssignmentAuditEvent.created_at)
        )
        result = await db.execute(query)
        return result.scalars().all()


# 싱글턴 인스턴스 — Singleton instances
audit_log_repository: AuditLogRepository = AuditLogRepository()
assignment_audit_repository: AssignmentAuditRepository = AssignmentAuditRepository()
