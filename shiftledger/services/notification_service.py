"""알림 서비스 — 예약 알림 취소.

Notification Service — Cancels pending shift reminders. Delivery and
scheduling belong to the notification collaborator; this service only
withdraws reminders for a worker who left a shift.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.logging import get_logger
from shiftledger.repositories.notification_repository import notification_repository

logger = get_logger(__name__)

# 시프트 알림 종류 — Reminder kinds scheduled per worker per shift
REMINDER_TYPES: tuple[str, ...] = ("night_before", "60_min", "15_min", "shift_start", "late_warning")


class NotificationService:
    """예약 알림 서비스."""

    async def cancel_by_type(
        self,
        db: AsyncSession,
        shift_id: UUID,
        worker_id: UUID,
        notification_type: str,
    ) -> int:
        """한 종류의 대기 알림을 취소합니다 (Cancel pending reminders of one kind)."""
        return await notification_repository.cancel_pending(db, shift_id, worker_id, notification_type)

    async def cancel_shift_reminders(
        self,
        db: AsyncSession,
        shift_id: UUID,
        worker_id: UUID,
    ) -> int:
        """모든 종류의 대기 알림을 최선 노력으로 취소합니다.

        Best-effort cancellation of every reminder kind. Each kind runs in
        its own savepoint; a failure is logged and the remaining kinds are
        still attempted. Failures never reach the caller.

        Returns:
            int: 취소된 알림 수 (Number of reminders cancelled)
        """
        cancelled = 0
        for notification_type in REMINDER_TYPES:
            try:
                async with db.begin_nested():
                    cancelled += await self.cancel_by_type(db, shift_id, worker_id, notification_type)
            except Exception:
                logger.warning(
                    "reminder_cancel_failed",
                    shift_id=str(shift_id),
                    worker_id=str(worker_id),
                    notification_type=notification_type,
                    exc_info=True,
                )
        return cancelled


# 싱글턴 인스턴스 — Singleton instance
notification_service: NotificationService = NotificationService()
