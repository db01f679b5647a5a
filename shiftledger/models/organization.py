"""조직 및 근무지 관련 SQLAlchemy ORM 모델 정의.

Organization and Location SQLAlchemy ORM model definitions.
Organizations are the multi-tenant boundary; every shift, assignment,
correction, and audit row is scoped to one. Locations carry the IANA
timezone used to bucket shifts into payroll days and weeks.

Tables:
    - organizations: 조직 + 초과근무 정책 (Tenant with overtime policy)
    - locations: 근무지 (Work locations with timezone)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Integer, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from shiftledger.database import Base


class Organization(Base):
    """조직 모델 — 멀티테넌트 최상위 단위.

    Organization model — Top-level tenant. Holds the payroll overtime policy
    consumed by the timesheet export.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 조직명 (Organization name)
        overtime_policy: 초과근무 정책 — "daily" 또는 "weekly" (Overtime policy)
        daily_overtime_minutes: 일일 초과근무 기준(분) (Daily threshold in minutes)
        weekly_overtime_minutes: 주간 초과근무 기준(분) (Weekly threshold in minutes)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "organizations"

    # 조직 고유 식별자 — Organization unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 조직명 — Organization display name
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    # 초과근무 정책 — "daily" (교대별) | "weekly" (ISO 주 단위 누적)
    overtime_policy: Mapped[str] = mapped_column(String(20), default="weekly")
    # 일일 초과근무 기준 — Daily overtime threshold (minutes, default 8h)
    daily_overtime_minutes: Mapped[int] = mapped_column(Integer, default=480)
    # 주간 초과근무 기준 — Weekly overtime threshold (minutes, default 40h)
    weekly_overtime_minutes: Mapped[int] = mapped_column(Integer, default=2400)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))


class Location(Base):
    """근무지 모델 — 시프트가 진행되는 물리적 장소.

    Location model — Physical place where shifts happen.
    ``timezone`` decides which calendar day and ISO week a shift belongs to.
    """

    __tablename__ = "locations"

    # 근무지 고유 식별자 — Location unique identifier
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 조직 FK — Parent organization
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    # 근무지명 — Location name
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    # IANA 타임존 — e.g. "America/New_York"
    timezone: Mapped[str] = mapped_column(String(64), default="UTC")
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
