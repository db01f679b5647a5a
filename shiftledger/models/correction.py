"""근무시간 정정 요청 SQLAlchemy ORM 모델 정의.

Time correction request SQLAlchemy ORM model definition.
A worker disputes the recorded clock times of one assignment; a manager
approves (times rewritten) or rejects (times unchanged).

Tables:
    - time_correction_requests: 정정 요청 (Worker dispute requests)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Integer, Text, ForeignKey, Index, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from shiftledger.database import Base


class TimeCorrectionRequest(Base):
    """정정 요청 모델 — 근무자의 출퇴근 시각 이의 제기.

    Time correction request model — Worker dispute of an assignment's
    clock times. ``original_*`` snapshot the actual and effective values at
    request time.

    Status Flow:
        pending → approved | rejected (종결 후 변경 불가, terminal)

    Constraints:
        uq_time_correction_pending_assignment: 배정당 대기 요청 1건
            (Partial unique index: at most one pending request per assignment)
    """

    __tablename__ = "time_correction_requests"

    # 요청 고유 식별자 — Request unique identifier
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 조직 FK — Organization scope
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    # 배정 FK — Disputed assignment
    assignment_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shift_assignments.id", ondelete="CASCADE"), nullable=False)
    # 요청자 FK — Requesting worker
    worker_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # 요청 값 — Requested values (None = unchanged)
    requested_clock_in: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    requested_clock_out: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    requested_break_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # 원본 스냅샷 — Actual values at request time
    original_clock_in: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    original_clock_out: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    original_break_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # 확정 시각 스냅샷 — Effective values at request time
    original_effective_clock_in: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    original_effective_clock_out: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # 사유 — Reason (min length enforced in service)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    # 상태 — pending/approved/rejected
    status: Mapped[str] = mapped_column(String(20), default="pending")

    # 검토 — Reviewer provenance
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewer_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index(
            "uq_time_correction_pending_assignment",
            "assignment_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
        Index("ix_time_corrections_org_status", "organization_id", "status"),
        Index("ix_time_corrections_worker", "worker_id"),
    )
