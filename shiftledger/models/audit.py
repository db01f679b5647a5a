"""감사 로그 SQLAlchemy ORM 모델 정의.

Audit SQLAlchemy ORM model definitions. Both tables are append-only:
rows are inserted inside the caller's transaction and never updated.

Tables:
    - audit_logs: 조직 범위 감사 로그 (Organization-scoped audit trail)
    - assignment_audit_events: 배정 단위 변경 이력 (Per-assignment change history)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import JSON, String, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from shiftledger.database import Base

# PostgreSQL에서는 JSONB, 그 외 드라이버는 JSON — JSONB on PostgreSQL, JSON elsewhere
JsonType = JSON().with_variant(JSONB(), "postgresql")


class AuditLog(Base):
    """조직 감사 로그 모델.

    Organization-scoped audit record: who did what to which entity.

    Attributes:
        action: 액션명 (e.g. "shift.approved", "timesheet.override")
        entity_type: 대상 유형 (e.g. "shift", "shift_assignment")
        entity_id: 대상 ID (Target entity id)
        actor_id: 수행자 ID (Acting user)
        details: 메타데이터 JSON — DB 컬럼명은 "metadata" (Stored in the "metadata" column)
    """

    __tablename__ = "audit_logs"

    # 감사 로그 고유 식별자 — Audit row identifier
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 조직 FK — Organization scope
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    # 수행자 — Acting user (no FK: actors may be system processes)
    actor_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    details: Mapped[dict | None] = mapped_column("metadata", JsonType, nullable=True)
    # 생성 일시 — Event timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_audit_logs_org_entity", "organization_id", "entity_type", "entity_id"),
    )


class AssignmentAuditEvent(Base):
    """배정 변경 이력 모델.

    Assignment-scoped audit event: status before/after plus the changed
    fields and their prior values.
    """

    __tablename__ = "assignment_audit_events"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 배정 FK — Target assignment
    assignment_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shift_assignments.id", ondelete="CASCADE"), nullable=False)
    actor_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    # 이전/새 상태 — Status before and after the change
    previous_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    new_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    details: Mapped[dict | None] = mapped_column("metadata", JsonType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_assignment_audit_events_assignment", "assignment_id"),
    )
