"""조직 멤버십 레포지토리.

Membership Repository — Reads the actor's membership row for role resolution.
"""

from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.models.user import Member
from shiftledger.repositories.base import BaseRepository


class MemberRepository(BaseRepository[Member]):
    """멤버십 레포지토리 (Membership repository)."""

    def __init__(self) -> None:
        super().__init__(Member)

    async def get_membership(
        self,
        db: AsyncSession,
        organization_id: UUID,
        user_id: UUID,
    ) -> Member | None:
        """조직 내 사용자의 멤버십을 조회합니다. 없으면 None."""
        query: Select = select(Member).where(
            Member.organization_id == organization_id,
            Member.user_id == user_id,
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()


# 싱글턴 인스턴스 — Singleton instance
member_repository: MemberRepository = MemberRepository()
