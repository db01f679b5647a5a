"""예약 알림 레포지토리.

Scheduled Notification Repository — Bulk cancellation of pending reminders.
"""

from uuid import UUID

from sqlalchemy import Update, update
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.models.notification import ScheduledNotification
from shiftledger.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[ScheduledNotification]):
    """예약 알림 레포지토리 (Scheduled notification repository)."""

    def __init__(self) -> None:
        super().__init__(ScheduledNotification)

    async def cancel_pending(
        self,
        db: AsyncSession,
        shift_id: UUID,
        worker_id: UUID,
        notification_type: str,
    ) -> int:
        """대기 중인 알림을 취소 상태로 변경합니다.

        Mark pending reminders of one kind as cancelled.

        Returns:
            int: 취소된 알림 수 (Number of reminders cancelled)
        """
        stmt: Update = (
            update(ScheduledNotification)
            .where(
                ScheduledNotification.shift_id == shift_id,
                ScheduledNotification.worker_id == worker_id,
                ScheduledNotification.notification_type == notification_type,
                ScheduledNotification.status == "pending",
            )
            .values(status="cancelled")
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        return result.rowcount


# 싱글턴 인스턴스 — Singleton instance
notification_repository: NotificationRepository = NotificationRepository()
