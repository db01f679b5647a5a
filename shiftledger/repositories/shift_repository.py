"""시프트 레포지토리 — 시프트 조회 및 낙관적 상태 전이 쿼리.

Shift Repository — Shift lookups and the optimistic status flip.
"""

from uuid import UUID

from sqlalchemy import Update, update
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.models.shift import Shift
from shiftledger.repositories.base import BaseRepository
from shiftledger.utils.time import utc_now


class ShiftRepository(BaseRepository[Shift]):
    """시프트 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the shifts table.
    """

    def __init__(self) -> None:
        super().__init__(Shift)

    async def transition_status(
        self,
        db: AsyncSession,
        shift_id: UUID,
        organization_id: UUID,
        expected_status: str,
        new_status: str,
    ) -> bool:
        """현재 상태가 expected_status일 때만 상태를 변경합니다.

        Conditional update: ``UPDATE shifts SET status = :new WHERE id = :id
        AND status = :expected``. The identity map is left untouched; callers
        refresh the shift after a successful flip.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            shift_id: 시프트 UUID (Shift UUID)
            organization_id: 조직 UUID (Organization scope)
            expected_status: 기대하는 현재 상태 (Status the row must still have)
            new_status: 새 상태 (Status to write)

        Returns:
            bool: 갱신 성공 여부 — False이면 다른 요청이 먼저 변경함
                  (False when another request changed the row first)
        """
        stmt: Update = (
            update(Shift)
            .where(
                Shift.id == shift_id,
                Shift.organization_id == organization_id,
                Shift.status == expected_status,
            )
            .values(status=new_status, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        return result.rowcount == 1


# 싱글턴 인스턴스 — Singleton instance
shift_repository: ShiftRepository = ShiftRepository()
