"""인증 의존성 테스트 — Bearer JWT 검증, 역할 및 승인 상태 검사.

Auth dependency tests — bearer JWT verification, role and approval checks.
"""

from datetime import datetime, timedelta, timezone

import jwt
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from tests.conftest import auth_header, make_token

SHIFTS_URL = "/api/v1/app/shifts"


def _encode(payload: dict) -> str:
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


class TestBearerToken:
    """토큰 검증 테스트."""

    async def test_missing_header(self, client: AsyncClient):
        res = await client.get(SHIFTS_URL)
        assert res.status_code in (401, 403)

    async def test_garbage_token(self, client: AsyncClient):
        res = await client.get(SHIFTS_URL, headers=auth_header("not.a.jwt"))
        assert res.status_code == 401
        assert res.json()["detail"] == "Invalid or expired token"

    async def test_expired_token(self, client: AsyncClient, cafe_user):
        token = _encode({
            "sub": str(cafe_user.id),
            "type": "access",
            "exp": datetime.now(timezone.utc) - timedelta(minutes=1),
        })
        res = await client.get(SHIFTS_URL, headers=auth_header(token))
        assert res.status_code == 401

    async def test_wrong_token_type(self, client: AsyncClient, cafe_user):
        token = _encode({
            "sub": str(cafe_user.id),
            "type": "refresh",
            "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
        })
        res = await client.get(SHIFTS_URL, headers=auth_header(token))
        assert res.status_code == 401
        assert res.json()["detail"] == "Invalid token type"

    async def test_inactive_user(self, client: AsyncClient, db: AsyncSession, cafe_user):
        """비활성 사용자는 401."""
        token = make_token(cafe_user)
        cafe_user.is_active = False
        await db.commit()
        res = await client.get(SHIFTS_URL, headers=auth_header(token))
        assert res.status_code == 401
        assert res.json()["detail"] == "User not found or inactive"


class TestRoleChecks:
    """역할 및 승인 상태 검사 테스트."""

    async def test_admin_routes_reject_members(self, client: AsyncClient, employee_token):
        res = await client.get("/api/v1/admin/shifts", headers=auth_header(employee_token))
        assert res.status_code == 403
        assert res.json()["detail"] == "Admin access required"

    async def test_pending_cafe_blocked(self, client: AsyncClient, db: AsyncSession, cafe_user):
        """승인 대기 카페는 403."""
        cafe_user.approval_status = "pending"
        await db.commit()
        res = await client.get(SHIFTS_URL, headers=auth_header(make_token(cafe_user)))
        assert res.status_code == 403
        assert res.json()["detail"] == "Account pending approval"

    async def test_admin_cannot_use_member_routes(self, client: AsyncClient, admin_token):
        res = await client.get(SHIFTS_URL, headers=auth_header(admin_token))
        assert res.status_code == 403

    async def test_health_is_public(self, client: AsyncClient):
        res = await client.get("/health")
        assert res.status_code == 200
