"""기본 레포지토리 — 모든 레포지토리의 부모 클래스.

Base Repository — Parent class for all domain repositories.
Provides generic lookup, paginated listing, create, and partial update,
scoped by organization where the model carries ``organization_id``.

Usage:
    class CorrectionRepository(BaseRepository[TimeCorrectionRequest]):
        def __init__(self) -> None:
            super().__init__(TimeCorrectionRequest)
"""

from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shiftledger.database import Base

# 제네릭 타입 변수 — SQLAlchemy 모델을 나타냄
# Generic type variable representing a SQLAlchemy model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """제네릭 레포지토리.

    Generic repository providing the database operations shared by every
    domain repository. Services own transactions; methods here only flush.

    Attributes:
        model: SQLAlchemy 모델 클래스 (The SQLAlchemy model class)
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    async def get_by_id(
        self,
        db: AsyncSession,
        record_id: UUID,
        organization_id: UUID | None = None,
    ) -> ModelType | None:
        """ID로 단일 레코드를 조회합니다.

        Retrieve a single record by its UUID. With ``organization_id`` given,
        a row owned by another organization is reported as absent.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 조회할 레코드의 UUID (UUID of the record to retrieve)
            organization_id: 조직 범위 필터, None이면 조직 필터 미적용
                             (Organization scope filter; None skips org filtering)

        Returns:
            ModelType | None: 조회된 레코드 또는 None (Found record or None)
        """
        query: Select = select(self.model).where(self.model.id == record_id)

        # 모델에 organization_id 컬럼이 있고, 필터가 제공된 경우 조직 범위 적용
        # Apply org scope if model has organization_id and filter is provided
        if organization_id is not None and hasattr(self.model, "organization_id"):
            query = query.where(self.model.organization_id == organization_id)

        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_paginated(
        self,
        db: AsyncSession,
        query: Select,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[ModelType], int]:
        """페이지네이션이 적용된 레코드 목록을 조회합니다.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            query: 기본 SELECT 쿼리 (Base SELECT query)
            page: 현재 페이지 번호, 1부터 시작 (Current page number, 1-based)
            per_page: 페이지당 레코드 수 (Number of records per page)

        Returns:
            tuple[Sequence[ModelType], int]: (레코드 목록, 전체 개수)
        """
        count_query: Select = select(func.count()).select_from(query.subquery())
        total: int = (await db.execute(count_query)).scalar() or 0

        offset: int = (page - 1) * per_page
        result = await db.execute(query.offset(offset).limit(per_page))
        return result.scalars().all(), total

    async def create(
        self,
        db: AsyncSession,
        obj_data: dict[str, Any],
    ) -> ModelType:
        """새 레코드를 생성합니다 (flush 후 refresh).

        Create a new record, flush it, and refresh server-side defaults.
        """
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def apply_changes(
        self,
        db: AsyncSession,
        db_obj: ModelType,
        changes: dict[str, Any],
    ) -> ModelType:
        """로드된 레코드에 변경 사항을 적용하고 flush합니다.

        Apply ``changes`` to an already loaded record (None values included)
        and flush.
        """
        for field, value in changes.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await db.flush()
        return db_obj
