"""데이터베이스 엔진 및 세션 설정 모듈.

Database engine and session configuration for the shift ledger.
Every timestamp column is ``timestamptz`` and the application only deals
in UTC, so PostgreSQL sessions are pinned to UTC. SQLite URLs (local runs
and tests) skip the pool and server settings asyncpg understands.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from shiftledger.config import settings

# 제약 조건 이름 규칙 — Constraint names match the migration's ix_/uq_ prefixes
NAMING_CONVENTION: dict[str, str] = {
    "ix": "ix_%(table_name)s_%(column_0_N_name)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def engine_options(database_url: str) -> dict[str, Any]:
    """드라이버별 엔진 옵션을 반환합니다.

    Pool sizing and a UTC session time zone for asyncpg; nothing extra for
    SQLite, whose driver rejects both.
    """
    if database_url.startswith("sqlite"):
        return {}
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 3600,  # 1시간마다 연결 재생성 (Recycle connections hourly)
        "connect_args": {"server_settings": {"timezone": "UTC"}},
    }


# 비동기 데이터베이스 엔진 — Async database engine
# pool_pre_ping=True: 커넥션 풀에서 꺼낸 연결의 유효성을 사전 확인 (Validates connections before use)
engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
    **engine_options(settings.DATABASE_URL),
)

# 비동기 세션 팩토리 — Async session factory
# expire_on_commit=False: 승인/정정 응답이 커밋 후 값을 그대로 읽음 (Responses read values after commit)
async_session: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """ORM 선언적 베이스 — 시프트, 배정, 정정, 감사 모델 공용.

    Declarative base for the ledger's models, carrying the shared
    constraint naming convention.
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """요청 단위 트랜잭션 세션을 생성합니다.

    FastAPI dependency that yields one async session per request.
    Routers commit on success; any exception escaping the handler rolls
    back every write made during the request, including audit rows.

    Yields:
        AsyncSession: SQLAlchemy 비동기 세션 인스턴스 (Async session instance)
    """
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
