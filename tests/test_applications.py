"""근무 지원서 테스트 — 지원, 수락, 거절, 철회."""

import uuid

from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.application import (
    APPLICATION_ACCEPTED, APPLICATION_PENDING, APPLICATION_REJECTED, APPLICATION_WITHDRAWN,
    Application,
)
from app.models.shift import SHIFT_ACCEPTED, SHIFT_PENDING_APPROVAL, ShiftAssignment, ShiftBlock
from tests.conftest import auth_header

APPLICATIONS_URL = "/api/v1/app/applications"


async def apply(client: AsyncClient, token: str, shift_id, message: str | None = None):
    return await client.post(
        APPLICATIONS_URL,
        json={"shift_id": str(shift_id), "message": message},
        headers=auth_header(token),
    )


class TestApply:
    """지원 테스트."""

    async def test_apply_creates_pending(self, client: AsyncClient, make_shift, employee_token):
        shift = await make_shift()
        res = await apply(client, employee_token, shift.id, "Available all morning")
        assert res.status_code == 201
        data = res.json()
        assert data["status"] == APPLICATION_PENDING
        assert data["message"] == "Available all morning"
        assert data["employee_name"] == "Alice Barista"
        assert data["shift_start_time"] == "09:00"

    async def test_duplicate_application(self, client: AsyncClient, make_shift, employee_token):
        """같은 근무에 두 번 지원 불가."""
        shift = await make_shift()
        await apply(client, employee_token, shift.id)
        res = await apply(client, employee_token, shift.id)
        assert res.status_code == 400
        assert res.json()["detail"] == "You have already applied for this shift"

    async def test_not_open(self, client: AsyncClient, make_shift, employee_token):
        shift = await make_shift(status=SHIFT_PENDING_APPROVAL)
        res = await apply(client, employee_token, shift.id)
        assert res.status_code == 400
        assert res.json()["detail"] == "Shift is not available for applications"

    async def test_blocked(self, client: AsyncClient, db: AsyncSession, make_shift, employee_user, employee_token):
        shift = await make_shift()
        db.add(ShiftBlock(shift_id=shift.id, employee_id=employee_user.id))
        await db.commit()
        res = await apply(client, employee_token, shift.id)
        assert res.status_code == 403
        assert res.json()["detail"] == "You have been blocked from applying to this shift"

    async def test_invalid_shift_id(self, client: AsyncClient, employee_token):
        res = await apply(client, employee_token, "not-a-uuid")
        assert res.status_code == 422

    async def test_unknown_shift(self, client: AsyncClient, employee_token):
        res = await apply(client, employee_token, uuid.uuid4())
        assert res.status_code == 404

    async def test_cafe_cannot_apply(self, client: AsyncClient, make_shift, cafe_token):
        shift = await make_shift()
        res = await apply(client, cafe_token, shift.id)
        assert res.status_code == 403


class TestReviewApplications:
    """카페의 지원서 검토 테스트."""

    async def test_list_for_shift(self, client: AsyncClient, make_shift, employee_token, employee2_token, cafe_token):
        shift = await make_shift(required_employees=2)
        await apply(client, employee_token, shift.id)
        await apply(client, employee2_token, shift.id)
        res = await client.get(f"{APPLICATIONS_URL}/shift/{shift.id}", headers=auth_header(cafe_token))
        assert res.status_code == 200
        assert {a["employee_name"] for a in res.json()} == {"Alice Barista", "Bob Barista"}

    async def test_other_cafe_cannot_list(self, client: AsyncClient, make_shift, other_cafe, cafe_token):
        shift = await make_shift(cafe=other_cafe)
        res = await client.get(f"{APPLICATIONS_URL}/shift/{shift.id}", headers=auth_header(cafe_token))
        assert res.status_code == 403

    async def test_accept_fills_shift_and_rejects_others(
        self, client: AsyncClient, db: AsyncSession, make_shift, employee_user, employee_token, employee2_token,
        cafe_token, sent_notifications,
    ):
        """수락으로 정원이 차면 나머지 대기 지원서는 자동 거절."""
        shift = await make_shift()
        first = (await apply(client, employee_token, shift.id)).json()
        second = (await apply(client, employee2_token, shift.id)).json()

        res = await client.put(f"{APPLICATIONS_URL}/{first['id']}/accept", headers=auth_header(cafe_token))
        assert res.status_code == 200
        assert res.json()["status"] == APPLICATION_ACCEPTED
        assert res.json()["shift_status"] == SHIFT_ACCEPTED

        other = await db.get(Application, uuid.UUID(second["id"]))
        assert other.status == APPLICATION_REJECTED
        assert other.rejection_reason == "Shift is now full"

        assigned = (await db.execute(
            select(ShiftAssignment.employee_id).where(ShiftAssignment.shift_id == shift.id)
        )).scalars().all()
        assert list(assigned) == [employee_user.id]
        assert [n[1] for n in sent_notifications] == ["shift_fully_staffed"]

    async def test_accept_partial_keeps_others_pending(
        self, client: AsyncClient, db: AsyncSession, make_shift, employee_token, employee2_token, cafe_token,
    ):
        shift = await make_shift(required_employees=2)
        first = (await apply(client, employee_token, shift.id)).json()
        second = (await apply(client, employee2_token, shift.id)).json()
        await client.put(f"{APPLICATIONS_URL}/{first['id']}/accept", headers=auth_header(cafe_token))
        other = await db.get(Application, uuid.UUID(second["id"]))
        assert other.status == APPLICATION_PENDING

    async def test_accept_full_shift(
        self, client: AsyncClient, db: AsyncSession, make_shift, employee_user, employee2, cafe_token,
    ):
        """다른 경로로 이미 찬 근무의 지원서 수락 불가."""
        shift = await make_shift()
        application = Application(shift_id=shift.id, employee_id=employee2.id, status=APPLICATION_PENDING)
        db.add(application)
        db.add(ShiftAssignment(shift_id=shift.id, employee_id=employee_user.id))
        shift.accepted_count = 1
        shift.status = SHIFT_ACCEPTED
        await db.commit()

        res = await client.put(f"{APPLICATIONS_URL}/{application.id}/accept", headers=auth_header(cafe_token))
        assert res.status_code == 400
        assert res.json()["detail"] == "Shift is already full"

    async def test_accept_twice(self, client: AsyncClient, make_shift, employee_token, cafe_token):
        shift = await make_shift(required_employees=2)
        app_id = (await apply(client, employee_token, shift.id)).json()["id"]
        await client.put(f"{APPLICATIONS_URL}/{app_id}/accept", headers=auth_header(cafe_token))
        res = await client.put(f"{APPLICATIONS_URL}/{app_id}/accept", headers=auth_header(cafe_token))
        assert res.status_code == 400
        assert res.json()["detail"] == "Application is not pending"

    async def test_reject_default_reason(self, client: AsyncClient, make_shift, employee_token, cafe_token):
        shift = await make_shift()
        app_id = (await apply(client, employee_token, shift.id)).json()["id"]
        res = await client.put(f"{APPLICATIONS_URL}/{app_id}/reject", headers=auth_header(cafe_token))
        assert res.status_code == 200
        assert res.json()["status"] == APPLICATION_REJECTED
        assert res.json()["rejection_reason"] == "Application rejected"

    async def test_reject_with_reason(self, client: AsyncClient, make_shift, employee_token, cafe_token):
        shift = await make_shift()
        app_id = (await apply(client, employee_token, shift.id)).json()["id"]
        res = await client.put(
            f"{APPLICATIONS_URL}/{app_id}/reject", json={"reason": "Need latte art"}, headers=auth_header(cafe_token)
        )
        assert res.json()["rejection_reason"] == "Need latte art"


class TestWithdrawApplication:
    """직원 지원 철회 테스트."""

    async def test_withdraw_pending(self, client: AsyncClient, make_shift, employee_token):
        shift = await make_shift()
        app_id = (await apply(client, employee_token, shift.id)).json()["id"]
        res = await client.put(f"{APPLICATIONS_URL}/{app_id}/withdraw", headers=auth_header(employee_token))
        assert res.status_code == 200
        assert res.json()["status"] == APPLICATION_WITHDRAWN

        mine = await client.get(f"{APPLICATIONS_URL}/mine", headers=auth_header(employee_token))
        assert [a["status"] for a in mine.json()] == [APPLICATION_WITHDRAWN]

    async def test_cannot_withdraw_others(self, client: AsyncClient, make_shift, employee_token, employee2_token):
        shift = await make_shift()
        app_id = (await apply(client, employee_token, shift.id)).json()["id"]
        res = await client.put(f"{APPLICATIONS_URL}/{app_id}/withdraw", headers=auth_header(employee2_token))
        assert res.status_code == 403

    async def test_cannot_withdraw_reviewed(self, client: AsyncClient, make_shift, employee_token, cafe_token):
        shift = await make_shift()
        app_id = (await apply(client, employee_token, shift.id)).json()["id"]
        await client.put(f"{APPLICATIONS_URL}/{app_id}/reject", headers=auth_header(cafe_token))
        res = await client.put(f"{APPLICATIONS_URL}/{app_id}/withdraw", headers=auth_header(employee_token))
        assert res.status_code == 400
        assert res.json()["detail"] == "Can only withdraw pending applications"
