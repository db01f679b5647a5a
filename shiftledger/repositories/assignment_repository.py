"""시프트 배정 레포지토리 — 배정 조회 쿼리.

Shift Assignment Repository — Assignment lookups by shift, worker, and
organization (through the parent shift).
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.models.shift import Shift, ShiftAssignment
from shiftledger.repositories.base import BaseRepository

REMOVED: str = "removed"


class AssignmentRepository(BaseRepository[ShiftAssignment]):
    """배정 레포지토리.

    Shift assignment repository. Assignments carry no organization column;
    organization scope is enforced by joining the parent shift.

    Extends:
        BaseRepository[ShiftAssignment]
    """

    def __init__(self) -> None:
        super().__init__(ShiftAssignment)

    async def get_in_organization(
        self,
        db: AsyncSession,
        assignment_id: UUID,
        organization_id: UUID,
    ) -> tuple[ShiftAssignment, Shift] | None:
        """조직 범위 내 배정과 소속 시프트를 함께 조회합니다.

        Fetch an assignment and its shift, or None when the assignment is
        absent or belongs to another organization.

        Returns:
            tuple[ShiftAssignment, Shift] | None: (배정, 시프트) 또는 None
        """
        query: Select = (
            select(ShiftAssignment, Shift)
            .join(Shift, ShiftAssignment.shift_id == Shift.id)
            .where(
                ShiftAssignment.id == assignment_id,
                Shift.organization_id == organization_id,
            )
        )
        row = (await db.execute(query)).first()
        if row is None:
            return None
        return row[0], row[1]

    async def get_by_shift(
        self,
        db: AsyncSession,
        shift_id: UUID,
        include_removed: bool = False,
    ) -> Sequence[ShiftAssignment]:
        """시프트의 배정 목록을 조회합니다 (기본적으로 removed 제외).

        List a shift's assignments, skipping soft-deleted ones by default.
        """
        query: Select = select(ShiftAssignment).where(ShiftAssignment.shift_id == shift_id)
        if not include_removed:
            query = query.where(ShiftAssignment.status != REMOVED)
        query = query.order_by(ShiftAssignment.created_at, ShiftAssignment.id)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_for_worker(
        self,
        db: AsyncSession,
        shift_id: UUID,
        worker_id: UUID,
    ) -> ShiftAssignment | None:
        """시프트에서 해당 근무자의 (removed가 아닌) 배정을 조회합니다."""
        query: Select = select(ShiftAssignment).where(
            ShiftAssignment.shift_id == shift_id,
            ShiftAssignment.worker_id == worker_id,
            ShiftAssignment.status != REMOVED,
        )
        result = await db.execute(query)
        return result.scalars().first()

    async def count_active(self, db: AsyncSession, shift_id: UUID) -> int:
        """시프트의 active 배정 수 (Number of active assignments on a shift)."""
        query: Select = select(func.count()).select_from(ShiftAssignment).where(
            ShiftAssignment.shift_id == shift_id,
            ShiftAssignment.status == "active",
        )
        return (await db.execute(query)).scalar() or 0


# 싱글턴 인스턴스 — Singleton instance
assignment_repository: AssignmentRepository = AssignmentRepository()
