"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite database, session, and httpx client
fixtures. Each test gets a fresh schema. The aiosqlite connection is put in
autocommit mode with an explicit BEGIN so SAVEPOINTs behave as on PostgreSQL.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from shiftledger.database import Base, get_db
from shiftledger.main import app
from shiftledger.middleware.rate_limit import limiter
from shiftledger.models import *  # noqa: F401,F403 — register all models with metadata
from shiftledger.models.organization import Location, Organization
from shiftledger.models.shift import Shift, ShiftAssignment
from shiftledger.models.user import Member, User
from shiftledger.utils.jwt import create_access_token

# ---------------------------------------------------------------------------
# 테스트 DB 설정
# ---------------------------------------------------------------------------
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# 기본 시프트 시간 — 2026-03-02(월) 09:00-17:00 UTC
SHIFT_START = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
SHIFT_END = datetime(2026, 3, 2, 17, 0, tzinfo=timezone.utc)


def auth_header(token: str) -> dict[str, str]:
    """Authorization 헤더를 생성합니다."""
    return {"Authorization": f"Bearer {token}"}


def make_token(user: User, org: Organization) -> str:
    return create_access_token({"sub": str(user.id), "org": str(org.id)})


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 매 테스트마다 스키마를 생성합니다."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(eng.sync_engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(eng.sync_engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """테스트 간 속도 제한 카운터를 초기화합니다."""
    limiter.reset()
    yield
    limiter.reset()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def _add(db: AsyncSession, obj):
    db.add(obj)
    await db.flush()
    await db.refresh(obj)
    return obj


async def _member(db: AsyncSession, org: Organization, full_name: str, role: str | None) -> User:
    user = await _add(db, User(full_name=full_name, email=f"{full_name.lower().replace(' ', '.')}@test.com"))
    if role is not None:
        await _add(db, Member(organization_id=org.id, user_id=user.id, role=role))
    return user


@pytest_asyncio.fixture
async def org(db: AsyncSession) -> Organization:
    """테스트 조직을 생성합니다 (주간 초과근무 정책)."""
    return await _add(db, Organization(name="Test Corp", overtime_policy="weekly"))


@pytest_asyncio.fixture
async def other_org(db: AsyncSession) -> Organization:
    """다른 조직 — 조직 격리 확인용."""
    return await _add(db, Organization(name="Other Corp"))


@pytest_asyncio.fixture
async def location(db: AsyncSession, org: Organization) -> Location:
    return await _add(db, Location(organization_id=org.id, name="Downtown", timezone="UTC"))


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession, org: Organization) -> User:
    return await _member(db, org, "Test Admin", "admin")


@pytest_asyncio.fixture
async def manager_user(db: AsyncSession, org: Organization) -> User:
    return await _member(db, org, "Test Manager", "manager")


@pytest_asyncio.fixture
async def worker(db: AsyncSession, org: Organization) -> User:
    return await _member(db, org, "Alice Worker", "member")


@pytest_asyncio.fixture
async def worker2(db: AsyncSession, org: Organization) -> User:
    return await _member(db, org, "Bob Worker", "member")


@pytest_asyncio.fixture
async def outsider(db: AsyncSession, org: Organization) -> User:
    """조직 멤버가 아닌 사용자."""
    return await _member(db, org, "Outside User", None)


@pytest.fixture
def admin_token(admin_user: User, org: Organization) -> str:
    return make_token(admin_user, org)


@pytest.fixture
def manager_token(manager_user: User, org: Organization) -> str:
    return make_token(manager_user, org)


@pytest.fixture
def worker_token(worker: User, org: Organization) -> str:
    return make_token(worker, org)


@pytest.fixture
def make_shift(db: AsyncSession, org: Organization, admin_user: User) -> Callable[..., Awaitable[Shift]]:
    """시프트 팩토리 — 기본값: completed, 09:00-17:00 UTC."""
    async def _make(
        status: str = "completed",
        start: datetime = SHIFT_START,
        end: datetime | None = None,
        capacity: int = 5,
        title: str = "Server",
        location: Location | None = None,
        price: int | None = None,
    ) -> Shift:
        return await _add(db, Shift(
            organization_id=org.id,
            location_id=location.id if location else None,
            title=title,
            start_time=start,
            end_time=end or start + timedelta(hours=8),
            capacity=capacity,
            status=status,
            price=price,
            created_by=admin_user.id,
        ))

    return _make


@pytest.fixture
def make_assignment(db: AsyncSession) -> Callable[..., Awaitable[ShiftAssignment]]:
    """배정 팩토리 — 출퇴근 시각과 휴게를 지정합니다."""
    async def _make(
        shift: Shift,
        worker: User,
        actual_in: datetime | None = None,
        actual_out: datetime | None = None,
        break_minutes: int = 0,
        status: str = "active",
        **extra,
    ) -> ShiftAssignment:
        return await _add(db, ShiftAssignment(
            shift_id=shift.id,
            worker_id=worker.id,
            status=status,
            actual_clock_in=actual_in,
            actual_clock_out=actual_out,
            break_minutes=break_minutes,
            **extra,
        ))

    return _make
