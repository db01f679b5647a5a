"""근무시간 정정 요청 레포지토리.

Time Correction Repository — Pending-request lookups and paginated listings
for manager review and worker history.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.models.correction import TimeCorrectionRequest
from shiftledger.repositories.base import BaseRepository


class CorrectionRepository(BaseRepository[TimeCorrectionRequest]):
    """정정 요청 레포지토리.

    Extends:
        BaseRepository[TimeCorrectionRequest]
    """

    def __init__(self) -> None:
        super().__init__(TimeCorrectionRequest)

    async def get_pending_for_assignment(
        self,
        db: AsyncSession,
        assignment_id: UUID,
    ) -> TimeCorrectionRequest | None:
        """배정에 대기 중인 정정 요청을 조회합니다 (최대 1건)."""
        query: Select = select(TimeCorrectionRequest).where(
            TimeCorrectionRequest.assignment_id == assignment_id,
            TimeCorrectionRequest.status == "pending",
        )
        result = await db.execute(query)
        return result.scalars().first()

    async def list_for_organization(
        self,
        db: AsyncSession,
        organization_id: UUID,
        status: str | None = "pending",
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[TimeCorrectionRequest], int]:
        """조직의 정정 요청 목록 (최신순).

        List an organization's requests, newest first, optionally filtered
        by status.
        """
        query: Select = select(TimeCorrectionRequest).where(
            TimeCorrectionRequest.organization_id == organization_id
        )
        if status is not None:
            query = query.where(TimeCorrectionRequest.status == status)
        query = query.order_by(TimeCorrectionRequest.created_at.desc(), TimeCorrectionRequest.id)
        return await self.get_paginated(db, query, page, per_page)

    async def list_for_worker(
        self,
        db: AsyncSession,
        organization_id: UUID,
        worker_id: UUID,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[TimeCorrectionRequest], int]:
        """근무자 본인의 정정 요청 목록 (최신순)."""
        query: Select = (
            select(TimeCorrectionRequest)
            .where(
                TimeCorrectionRequest.organization_id == organization_id,
                TimeCorrectionRequest.worker_id == worker_id,
            )
            .order_by(TimeCorrectionRequest.created_at.desc(), TimeCorrectionRequest.id)
        )
        return await self.get_paginated(db, query, page, per_page)


# 싱글턴 인스턴스 — Singleton instance
correction_repository: CorrectionRepository = CorrectionRepository()
