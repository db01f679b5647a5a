"""예약 알림 SQLAlchemy ORM 모델 정의.

Scheduled notification SQLAlchemy ORM model definition.
Reminders are created and delivered by the notification service; this
service only cancels the pending ones when a worker is unassigned.

Tables:
    - scheduled_notifications: 예약 알림 (Pending shift reminders)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from shiftledger.database import Base


class ScheduledNotification(Base):
    """예약 알림 모델.

    Scheduled reminder for one worker on one shift.

    Attributes:
        notification_type: 알림 종류 (night_before / 60_min / 15_min / shift_start / late_warning)
        scheduled_for: 발송 예정 시각 UTC (Delivery time)
        status: 상태 (pending / sent / cancelled)
    """

    __tablename__ = "scheduled_notifications"

    # 알림 고유 식별자 — Notification unique identifier
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 시프트 FK — Target shift
    shift_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False)
    # 수신자 FK — Recipient worker
    worker_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # 알림 종류 — Reminder kind
    notification_type: Mapped[str] = mapped_column(String(30), nullable=False)
    # 발송 예정 시각 — Scheduled delivery time (UTC)
    scheduled_for: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # 상태 — pending/sent/cancelled
    status: Mapped[str] = mapped_column(String(20), default="pending")
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_scheduled_notifications_shift_worker", "shift_id", "worker_id", "status"),
    )
