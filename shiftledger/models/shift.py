"""시프트 및 시프트 배정 SQLAlchemy ORM 모델 정의.

Shift and shift assignment SQLAlchemy ORM model definitions.
A shift is a scheduled block of work with a capacity; each assignment
ties one worker to one shift and accumulates raw clock events, which the
approval engine turns into effective (pay-authoritative) times.

Tables:
    - shifts: 시프트 (Scheduled shifts with lifecycle status)
    - shift_assignments: 시프트 배정 (Worker ↔ shift with clock data)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Integer, Text, Boolean, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from shiftledger.database import Base


class Shift(Base):
    """시프트 모델 — 정원이 있는 예정 근무 블록.

    Shift model — A scheduled block of work with a fixed capacity.

    Status Flow:
        draft → published → assigned → in-progress → completed → approved
        - cancelled: 종료 전 어느 단계에서든 취소 가능 (Cancellable before completion)
        - completed ↔ in-progress, approved → completed: 정정용 되돌리기 (Reopen for correction)
        전이 규칙은 services/shift_state.py 참조 (See services/shift_state.py for the table)

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        organization_id: 소속 조직 FK (Tenant scope)
        location_id: 근무지 FK, 선택 (Optional location, supplies the payroll timezone)
        title: 제목/포지션명 (Title, doubles as the position label in exports)
        description: 설명, 선택 (Optional description)
        start_time: 예정 시작 UTC (Scheduled start)
        end_time: 예정 종료 UTC (Scheduled end)
        capacity: 정원 (Total worker slots)
        price: 시급, 센트 단위 (Hourly rate in cents)
        status: 상태 (Lifecycle status)
        created_by: 작성자 FK (Creator)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "shifts"

    # 시프트 고유 식별자 — Shift unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 조직 FK — Organization scope for multi-tenant data isolation
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    # 근무지 FK — Location (optional)
    location_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("locations.id", ondelete="SET NULL"), nullable=True)
    # 제목 — Shift title / position label
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    # 설명 — Optional description
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 예정 시작 — Scheduled start (UTC)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # 예정 종료 — Scheduled end (UTC)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # 정원 — Total worker slots
    capacity: Mapped[int] = mapped_column(Integer, default=1)
    # 시급(센트) — Hourly rate in cents
    price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # 상태 — draft/published/assigned/in-progress/completed/approved/cancelled
    status: Mapped[str] = mapped_column(String(20), default="draft")
    # 작성자 FK — Creator
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_shifts_org_start", "organization_id", "start_time"),
        Index("ix_shifts_org_status", "organization_id", "status"),
    )


class ShiftAssignment(Base):
    """시프트 배정 모델 — 근무자 1명과 시프트 1개의 연결 + 출퇴근 데이터.

    Shift assignment model — One worker on one shift, with raw clock events
    and the finalized values derived from them.

    Clock Data:
        actual_*: 기기/수동으로 기록된 원시 시각 (Raw clock events)
        effective_*: 스냅 적용 후 급여 기준 시각 (Post-snap, authoritative for pay)
        total_duration_minutes: 급여 기준 분 — 승인/정정/수동수정만 기록
            (Billable minutes; written only by approval, correction, or override.
             Downstream payroll reads this and never recomputes it.)
        budget_rate_snapshot: 승인 시 고정된 시급 (Rate locked at approval; None for no-shows)
        estimated_cost_cents: ceil(분 × 시급 / 60) (Estimated pay, rounded up to the cent)

    Status:
        active → completed | no_show, 배정 해제 시 removed (soft delete)
    """

    __tablename__ = "shift_assignments"

    # 배정 고유 식별자 — Assignment unique identifier
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 시프트 FK — Parent shift
    shift_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False)
    # 근무자 FK — Assigned worker
    worker_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # 상태 — active/completed/no_show/removed
    status: Mapped[str] = mapped_column(String(20), default="active")

    # 원시 출퇴근 — Raw clock events
    actual_clock_in: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    actual_clock_out: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 기록 방법 — geofence / manual_override / system_auto_finalized ...
    clock_in_method: Mapped[str | None] = mapped_column(String(30), nullable=True)
    clock_out_method: Mapped[str | None] = mapped_column(String(30), nullable=True)
    # 미검증 플래그 — Set when the clock event could not be verified on site
    clock_in_unverified: Mapped[bool] = mapped_column(Boolean, default=False)
    clock_out_unverified: Mapped[bool] = mapped_column(Boolean, default=False)

    # 확정 시각 — Effective (post-snap) times
    effective_clock_in: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    effective_clock_out: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 휴게 시간(분) — Unpaid break minutes
    break_minutes: Mapped[int] = mapped_column(Integer, default=0)
    # 급여 기준 분 — Billable minutes
    total_duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # 승인 시 고정된 시급(센트) — Hourly rate locked at approval
    budget_rate_snapshot: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # 예상 급여(센트) — Estimated pay in cents
    estimated_cost_cents: Mapped[int] = mapped_column(Integer, default=0)

    # 검토 — Review flags
    needs_review: Mapped[bool] = mapped_column(Boolean, default=False)
    review_reason: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # 참고 메모 — Informational note (e.g. late clock-out), never blocks approval
    review_note: Mapped[str | None] = mapped_column(Text, nullable=True)

    # 수정 이력 — Adjustment provenance
    adjusted_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    adjusted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    adjustment_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_shift_assignments_shift", "shift_id"),
        Index("ix_shift_assignments_worker", "worker_id"),
    )
