"""사용자 및 조직 멤버십 SQLAlchemy ORM 모델 정의.

User and organization membership SQLAlchemy ORM model definitions.
Account issuance lives in the external auth service; this service only
reads users for display and memberships for role resolution.

Tables:
    - users: 사용자 계정 (User accounts)
    - members: 조직 멤버십 + 역할 문자열 (Organization membership with role string)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from shiftledger.database import Base


class User(Base):
    """사용자 모델 — 근무자 및 관리자 계정.

    User model — Worker and manager accounts. A user may belong to several
    organizations through ``members`` rows.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        full_name: 이름 (Display name, used for export ordering)
        email: 이메일, 선택 (Email, optional)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — User unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 이름 — Full display name
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    # 이메일 — Email address (optional)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class Member(Base):
    """조직 멤버십 모델 — 사용자와 조직을 역할과 함께 연결.

    Membership model — Links a user to an organization with a role string.
    The string is parsed into a closed role enumeration by the permission
    gate; unrecognized values resolve to the ``unknown`` role.

    Constraints:
        uq_member_org_user: 조직당 사용자 1회 (One membership per user per org)
    """

    __tablename__ = "members"

    # 멤버십 고유 식별자 — Membership unique identifier
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 조직 FK — Organization
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    # 사용자 FK — User
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # 역할 문자열 — Raw role string ("admin" / "manager" / "member")
    role: Mapped[str] = mapped_column(String(50), nullable=False, default="member")
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="uq_member_org_user"),
    )
