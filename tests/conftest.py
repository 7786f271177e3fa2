"""테스트 인프라 — 임시 DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — Throw-away database, sessions, and httpx client fixtures.
Each test gets a fresh SQLite file (aiosqlite); set TEST_DATABASE_URL to run
against PostgreSQL instead. Every API request gets its own session from the
test session factory, the same way get_db works in production.
"""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config import settings
from app.database import Base, get_db
from app.main import app
from app.models import *  # noqa: F401,F403 — register all models with metadata
from app.models.shift import SHIFT_OPEN, Shift, ShiftAssignment
from app.models.user import (
    APPROVAL_APPROVED, APPROVAL_PENDING, ROLE_ADMIN, ROLE_CAFE, ROLE_EMPLOYEE, User,
)
from app.services.notification_service import notification_service
from app.utils.jwt import create_access_token

# ---------------------------------------------------------------------------
# 테스트 DB 설정
# ---------------------------------------------------------------------------
TEST_DATABASE_URL: str | None = os.environ.get("TEST_DATABASE_URL")

# 테스트 기준 시각 (UTC) — Fixed reference "now" for service-level tests
NOW: datetime = datetime(2030, 6, 3, 9, 0, tzinfo=timezone.utc)  # 월요일 (Monday)


@pytest.fixture(autouse=True)
def test_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """테스트용 설정 — UTC 시간대, 로컬 업로드, 선불 청구, 고정 수수료."""
    monkeypatch.setattr(settings, "TIMEZONE", "UTC")
    monkeypatch.setattr(settings, "LOCAL_UPLOADS_DIR", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "AWS_ACCESS_KEY_ID", "")
    monkeypatch.setattr(settings, "INVOICING_MODE", "prepaid")
    monkeypatch.setattr(settings, "FEE_MODEL", "fixed")
    monkeypatch.setattr(settings, "SMTP_USER", "")


@pytest.fixture
def sent_notifications(monkeypatch: pytest.MonkeyPatch) -> list[tuple[str | None, str, dict]]:
    """발송된 알림 기록 — Records notification_service.send calls instead of emailing."""
    sent: list[tuple[str | None, str, dict]] = []

    def _record(to: str | None, template_id: str, params: dict[str, Any]) -> None:
        sent.append((to, template_id, params))

    monkeypatch.setattr(notification_service, "send", _record)
    return sent


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진 — 테스트마다 스키마를 새로 만듭니다."""
    url: str = TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    eng = create_async_engine(url, echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """테스트 준비/검증용 세션 — Session for arranging data and asserting on it."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — 요청마다 새 세션을 사용합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 사용자
# ---------------------------------------------------------------------------
async def _create_user(
    db: AsyncSession,
    email: str,
    full_name: str,
    role: str,
    approval_status: str = APPROVAL_APPROVED,
    shop_name: str | None = None,
) -> User:
    user = User(
        email=email,
        full_name=full_name,
        shop_name=shop_name,
        role=role,
        approval_status=approval_status,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession) -> User:
    return await _create_user(db, "admin@test.com", "Test Admin", ROLE_ADMIN)


@pytest_asyncio.fixture
async def cafe_user(db: AsyncSession) -> User:
    return await _create_user(db, "cafe@test.com", "Cafe Owner", ROLE_CAFE, shop_name="Bean There")


@pytest_asyncio.fixture
async def other_cafe(db: AsyncSession) -> User:
    return await _create_user(db, "other-cafe@test.com", "Other Owner", ROLE_CAFE, shop_name="Grind House")


@pytest_asyncio.fixture
async def employee_user(db: AsyncSession) -> User:
    return await _create_user(db, "alice@test.com", "Alice Barista", ROLE_EMPLOYEE)


@pytest_asyncio.fixture
async def employee2(db: AsyncSession) -> User:
    return await _create_user(db, "bob@test.com", "Bob Barista", ROLE_EMPLOYEE)


@pytest_asyncio.fixture
async def pending_employee(db: AsyncSession) -> User:
    return await _create_user(db, "carol@test.com", "Carol Pending", ROLE_EMPLOYEE, APPROVAL_PENDING)


def make_token(user: User) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": str(user.id), "role": user.role})


@pytest.fixture
def admin_token(admin_user: User) -> str:
    return make_token(admin_user)


@pytest.fixture
def cafe_token(cafe_user: User) -> str:
    return make_token(cafe_user)


@pytest.fixture
def employee_token(employee_user: User) -> str:
    return make_token(employee_user)


@pytest.fixture
def employee2_token(employee2: User) -> str:
    return make_token(employee2)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 근무
# ---------------------------------------------------------------------------
ShiftFactory = Callable[..., Awaitable[Shift]]


@pytest_asyncio.fixture
async def make_shift(db: AsyncSession, cafe_user: User) -> ShiftFactory:
    """근무를 직접 생성하는 팩토리 — Insert a shift (and its accepted employees) directly.

    Defaults: open, 09:00-13:00 two days after NOW, one slot, £14/h, no fee,
    created a week before NOW.
    """
    async def _make(
        *,
        cafe: User | None = None,
        shift_date: date | None = None,
        start_time: str = "09:00",
        end_time: str = "13:00",
        required_employees: int = 1,
        status: str = SHIFT_OPEN,
        base_hourly_rate: Decimal = Decimal("14.00"),
        employee_hourly_rate: Decimal | None = None,
        platform_fee: Decimal = Decimal("0.00"),
        accepted: list[User] | None = None,
        created_at: datetime | None = None,
        **extra: Any,
    ) -> Shift:
        accepted = accepted or []
        hours = Decimal(
            (int(end_time[:2]) * 60 + int(end_time[3:])) - (int(start_time[:2]) * 60 + int(start_time[3:]))
        ) / Decimal(60)
        base = (hours * base_hourly_rate * required_employees).quantize(Decimal("0.01"))
        shift = Shift(
            cafe_id=(cafe or cafe_user).id,
            date=shift_date or (NOW + timedelta(days=2)).date(),
            start_time=start_time,
            end_time=end_time,
            required_employees=required_employees,
            accepted_count=len(accepted),
            status=status,
            base_hourly_rate=base_hourly_rate,
            employee_hourly_rate=employee_hourly_rate,
            platform_fee=platform_fee,
            total_cost=base + platform_fee,
            created_at=created_at or NOW - timedelta(days=7),
            **extra,
        )
        db.add(shift)
        await db.flush()
        for employee in accepted:
            db.add(ShiftAssignment(shift_id=shift.id, employee_id=employee.id))
        await db.commit()
        return shift

    return _make
