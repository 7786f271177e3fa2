"""근무 수명주기 테스트 — 생성, 조회, 수정, 승인, 취소, 일시중지, 삭제, 완료.

Shift lifecycle tests. API-level tests use dates far in the future;
time-boundary rules are exercised on the service with an injected `now`.
"""

import io
import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.application import APPLICATION_PENDING, APPLICATION_REJECTED, Application
from app.models.invoice import INVOICE_DRAFT, Invoice
from app.models.shift import (
    SHIFT_ACCEPTED, SHIFT_CANCELLED, SHIFT_COMPLETED, SHIFT_OPEN, SHIFT_PAUSED,
    SHIFT_PENDING_APPROVAL, Shift, ShiftBlock,
)
from app.schemas.shift import RemoveEmployeeRequest, ShiftCreate
from app.services.payment_service import payment_service
from app.services.shift_service import shift_service
from app.utils.exceptions import ConflictError, ValidationError, WindowExpiredError
from tests.conftest import NOW, auth_header

SHIFTS_URL = "/api/v1/app/shifts"
# make_shift 기본 근무의 시작 시각 — Start of the default factory shift (09:00 two days after NOW)
DEFAULT_START = NOW + timedelta(days=2)


def future_date(days: int = 10) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


class TestCreateShift:
    """근무 생성 테스트."""

    async def test_create_defaults_to_tier_floor(self, client: AsyncClient, cafe_token):
        """시급 미지정 시 최저 시급, 첫 근무는 수수료 면제."""
        res = await client.post(SHIFTS_URL, json={
            "date": future_date(),
            "start_time": "09:00",
            "end_time": "17:00",
        }, headers=auth_header(cafe_token))
        assert res.status_code == 201
        data = res.json()
        assert data["status"] == SHIFT_PENDING_APPROVAL
        assert data["base_hourly_rate"] == 14.0
        assert data["platform_fee"] == 0.0
        assert data["total_cost"] == 112.0
        assert data["hours"] == 8.0
        assert data["accepted_by"] == []

    async def test_third_shift_pays_fixed_fee(self, client: AsyncClient, cafe_token):
        """세 번째 근무부터 고정 수수료."""
        payload = {"date": future_date(), "start_time": "09:00", "end_time": "13:00", "hourly_rate": 15}
        for _ in range(2):
            await client.post(SHIFTS_URL, json=payload, headers=auth_header(cafe_token))
        res = await client.post(SHIFTS_URL, json=payload, headers=auth_header(cafe_token))
        data = res.json()
        assert data["platform_fee"] == 10.0
        assert data["total_cost"] == 70.0

    async def test_percentage_fee_model(self, client: AsyncClient, cafe_token, monkeypatch):
        """비율 수수료 방식."""
        monkeypatch.setattr(settings, "FEE_MODEL", "percentage")
        res = await client.post(SHIFTS_URL, json={
            "date": future_date(), "start_time": "09:00", "end_time": "13:00",
            "hourly_rate": 15, "required_employees": 2,
        }, headers=auth_header(cafe_token))
        data = res.json()
        assert data["platform_fee"] == 12.0
        assert data["total_cost"] == 132.0

    async def test_overnight_rejected(self, client: AsyncClient, cafe_token):
        """자정을 넘는 근무 거부 (422)."""
        res = await client.post(SHIFTS_URL, json={
            "date": future_date(), "start_time": "22:00", "end_time": "02:00",
        }, headers=auth_header(cafe_token))
        assert res.status_code == 422
        assert res.json()["detail"][0]["msg"] == "End time must be after start time"

    async def test_malformed_time_rejected(self, client: AsyncClient, cafe_token):
        res = await client.post(SHIFTS_URL, json={
            "date": future_date(), "start_time": "9am", "end_time": "17:00",
        }, headers=auth_header(cafe_token))
        assert res.status_code == 422

    async def test_employee_cannot_create(self, client: AsyncClient, employee_token):
        res = await client.post(SHIFTS_URL, json={
            "date": future_date(), "start_time": "09:00", "end_time": "17:00",
        }, headers=auth_header(employee_token))
        assert res.status_code == 403
        assert res.json()["detail"] == "Only cafés can perform this action"

    async def test_unauthenticated(self, client: AsyncClient):
        res = await client.get(SHIFTS_URL)
        assert res.status_code in (401, 403)

    async def test_lead_time_enforced(self, db: AsyncSession, cafe_user):
        """최소 3시간 전 게시."""
        data = ShiftCreate(date=NOW.date(), start_time="11:00", end_time="15:00")
        with pytest.raises(WindowExpiredError) as exc:
            await shift_service.create_shift(db, cafe_user, data, now=NOW)
        assert exc.value.detail.startswith("Shift must start at least 3 hours from now")

    async def test_short_notice_floor(self, db: AsyncSession, cafe_user):
        """12시간 미만 게시는 £17 하한."""
        data = ShiftCreate(date=NOW.date(), start_time="15:00", end_time="19:00", hourly_rate=Decimal("16"))
        with pytest.raises(ValidationError) as exc:
            await shift_service.create_shift(db, cafe_user, data, now=NOW)
        assert exc.value.message == "Price per hour cannot be less than £17.00 (minimum for this posting time)."

    async def test_short_notice_default_rate(self, db: AsyncSession, cafe_user):
        """12~24시간 게시는 기본 £16."""
        data = ShiftCreate(date=(NOW + timedelta(days=1)).date(), start_time="08:00", end_time="12:00")
        response = await shift_service.create_shift(db, cafe_user, data, now=NOW)
        assert response.base_hourly_rate == Decimal("16.00")
        assert response.created_at is not None


class TestListAndGetShifts:
    """근무 조회 테스트."""

    async def test_cafe_scopes(self, client: AsyncClient, make_shift, cafe_token):
        """카페 범위 필터: active / completed / all."""
        await make_shift(status=SHIFT_OPEN)
        await make_shift(status=SHIFT_COMPLETED)
        await make_shift(status=SHIFT_CANCELLED)

        active = await client.get(SHIFTS_URL, headers=auth_header(cafe_token))
        assert [s["status"] for s in active.json()] == [SHIFT_OPEN]
        completed = await client.get(SHIFTS_URL, params={"scope": "completed"}, headers=auth_header(cafe_token))
        assert [s["status"] for s in completed.json()] == [SHIFT_COMPLETED]
        every = await client.get(SHIFTS_URL, params={"scope": "all"}, headers=auth_header(cafe_token))
        assert len(every.json()) == 3

    async def test_invalid_scope(self, client: AsyncClient, cafe_token):
        res = await client.get(SHIFTS_URL, params={"scope": "bogus"}, headers=auth_header(cafe_token))
        assert res.status_code == 422

    async def test_cafe_sees_only_own(self, client: AsyncClient, make_shift, other_cafe, cafe_token):
        await make_shift(cafe=other_cafe)
        res = await client.get(SHIFTS_URL, headers=auth_header(cafe_token))
        assert res.json() == []

    async def test_employee_list_filters(
        self, client: AsyncClient, db: AsyncSession, make_shift, employee_user, employee2, employee_token,
    ):
        """직원 목록: open + 비차단 + 공개 대상만."""
        visible = await make_shift()
        await make_shift(status=SHIFT_PENDING_APPROVAL)
        blocked = await make_shift()
        db.add(ShiftBlock(shift_id=blocked.id, employee_id=employee_user.id))
        await db.commit()
        await make_shift(visibility="selected", visible_to=[str(employee2.id)])

        res = await client.get(SHIFTS_URL, headers=auth_header(employee_token))
        data = res.json()
        assert [s["id"] for s in data] == [str(visible.id)]
        assert "base_hourly_rate" not in data[0]
        assert data[0]["cafe_name"] == "Bean There"

    async def test_employee_get_blocked(
        self, client: AsyncClient, db: AsyncSession, make_shift, employee_user, employee_token,
    ):
        shift = await make_shift()
        db.add(ShiftBlock(shift_id=shift.id, employee_id=employee_user.id))
        await db.commit()
        res = await client.get(f"{SHIFTS_URL}/{shift.id}", headers=auth_header(employee_token))
        assert res.status_code == 403
        assert res.json()["detail"] == "You have been blocked from viewing this shift"

    async def test_employee_get_not_available(self, client: AsyncClient, make_shift, employee_token):
        shift = await make_shift(status=SHIFT_PENDING_APPROVAL)
        res = await client.get(f"{SHIFTS_URL}/{shift.id}", headers=auth_header(employee_token))
        assert res.status_code == 403
        assert res.json()["detail"] == "Shift is not available"

    async def test_employee_get_own_accepted(self, client: AsyncClient, make_shift, employee_user, employee_token):
        """수락한 근무는 accepted 상태여도 조회 가능."""
        shift = await make_shift(status=SHIFT_ACCEPTED, accepted=[employee_user])
        res = await client.get(f"{SHIFTS_URL}/{shift.id}", headers=auth_header(employee_token))
        assert res.status_code == 200
        assert res.json()["is_accepted"] is True

    async def test_other_cafe_forbidden(self, client: AsyncClient, make_shift, other_cafe, cafe_token):
        shift = await make_shift(cafe=other_cafe)
        res = await client.get(f"{SHIFTS_URL}/{shift.id}", headers=auth_header(cafe_token))
        assert res.status_code == 403

    async def test_not_found(self, client: AsyncClient, cafe_token):
        res = await client.get(f"{SHIFTS_URL}/{uuid.uuid4()}", headers=auth_header(cafe_token))
        assert res.status_code == 404
        assert res.json()["detail"] == "Shift not found"


class TestUpdateShift:
    """근무 수정 테스트."""

    async def test_rate_change_recomputes_total_keeps_fixed_fee(self, client: AsyncClient, make_shift, cafe_token):
        """시급 변경 시 합계 재계산, 고정 수수료 유지."""
        shift = await make_shift(platform_fee=Decimal("10.00"))
        res = await client.put(f"{SHIFTS_URL}/{shift.id}", json={"hourly_rate": 20}, headers=auth_header(cafe_token))
        assert res.status_code == 200
        data = res.json()
        assert data["base_hourly_rate"] == 20.0
        assert data["platform_fee"] == 10.0
        assert data["total_cost"] == 90.0

    async def test_percentage_fee_recomputed(self, client: AsyncClient, make_shift, cafe_token, monkeypatch):
        monkeypatch.setattr(settings, "FEE_MODEL", "percentage")
        shift = await make_shift(platform_fee=Decimal("5.60"))
        res = await client.put(f"{SHIFTS_URL}/{shift.id}", json={"end_time": "17:00"}, headers=auth_header(cafe_token))
        data = res.json()
        assert data["platform_fee"] == 11.2
        assert data["total_cost"] == 123.2

    async def test_cannot_reduce_below_accepted(
        self, client: AsyncClient, make_shift, employee_user, employee2, cafe_token,
    ):
        shift = await make_shift(required_employees=3, accepted=[employee_user, employee2])
        res = await client.put(
            f"{SHIFTS_URL}/{shift.id}", json={"required_employees": 1}, headers=auth_header(cafe_token)
        )
        assert res.status_code == 400
        assert res.json()["detail"] == "Cannot reduce required employees below current accepted count"

    async def test_headcount_change_rederives_status(
        self, client: AsyncClient, make_shift, employee_user, cafe_token,
    ):
        """인원 감소로 정원이 차면 accepted, 증가하면 open."""
        shift = await make_shift(required_employees=2, accepted=[employee_user])
        res = await client.put(
            f"{SHIFTS_URL}/{shift.id}", json={"required_employees": 1}, headers=auth_header(cafe_token)
        )
        assert res.json()["status"] == SHIFT_ACCEPTED
        res = await client.put(
            f"{SHIFTS_URL}/{shift.id}", json={"required_employees": 3}, headers=auth_header(cafe_token)
        )
        assert res.json()["status"] == SHIFT_OPEN

    async def test_cannot_edit_terminal(self, client: AsyncClient, make_shift, cafe_token):
        shift = await make_shift(status=SHIFT_COMPLETED)
        res = await client.put(f"{SHIFTS_URL}/{shift.id}", json={"description": "x"}, headers=auth_header(cafe_token))
        assert res.status_code == 400
        assert res.json()["detail"] == "Cannot edit completed or cancelled shift"

    async def test_rate_below_floor_on_update(self, client: AsyncClient, make_shift, cafe_token):
        shift = await make_shift()
        res = await client.put(f"{SHIFTS_URL}/{shift.id}", json={"hourly_rate": 10}, headers=auth_header(cafe_token))
        assert res.status_code == 422


class TestAdminShifts:
    """관리자 근무 관리 테스트."""

    async def test_approve_sets_employee_rate(
        self, client: AsyncClient, make_shift, admin_token, sent_notifications,
    ):
        """승인 시 open 전환 및 직원 시급 설정, 카페 알림."""
        shift = await make_shift(status=SHIFT_PENDING_APPROVAL)
        res = await client.put(
            f"/api/v1/admin/shifts/{shift.id}/approve",
            json={"employee_hourly_rate": 12.5},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 200
        data = res.json()
        assert data["status"] == SHIFT_OPEN
        assert data["employee_hourly_rate"] == 12.5
        assert sent_notifications[0][:2] == ("cafe@test.com", "shift_approved")

    async def test_approve_without_body(self, client: AsyncClient, make_shift, admin_token):
        shift = await make_shift(status=SHIFT_PENDING_APPROVAL)
        res = await client.put(f"/api/v1/admin/shifts/{shift.id}/approve", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json()["employee_hourly_rate"] is None

    async def test_approve_completed_is_noop(self, client: AsyncClient, make_shift, admin_token):
        shift = await make_shift(status=SHIFT_COMPLETED)
        res = await client.put(f"/api/v1/admin/shifts/{shift.id}/approve", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json()["status"] == SHIFT_COMPLETED

    async def test_approve_open_rejected(self, client: AsyncClient, make_shift, admin_token):
        shift = await make_shift(status=SHIFT_OPEN)
        res = await client.put(f"/api/v1/admin/shifts/{shift.id}/approve", headers=auth_header(admin_token))
        assert res.status_code == 400

    async def test_cafe_cannot_approve(self, client: AsyncClient, make_shift, cafe_token):
        shift = await make_shift(status=SHIFT_PENDING_APPROVAL)
        res = await client.put(f"/api/v1/admin/shifts/{shift.id}/approve", headers=auth_header(cafe_token))
        assert res.status_code == 403
        assert res.json()["detail"] == "Admin access required"

    async def test_admin_list_includes_block_reasons(
        self, client: AsyncClient, db: AsyncSession, make_shift, employee_user, admin_token,
    ):
        shift = await make_shift()
        db.add(ShiftBlock(shift_id=shift.id, employee_id=employee_user.id, reason="Late twice"))
        await db.commit()
        res = await client.get("/api/v1/admin/shifts", headers=auth_header(admin_token))
        blocked = res.json()[0]["blocked_employees"]
        assert blocked == [{
            "employee_id": str(employee_user.id),
            "employee_name": "Alice Barista",
            "reason": "Late twice",
        }]

    async def test_admin_update_visibility(self, client: AsyncClient, make_shift, employee_user, admin_token):
        shift = await make_shift()
        res = await client.put(f"/api/v1/admin/shifts/{shift.id}", json={
            "visibility": "selected",
            "visible_to": [str(employee_user.id)],
            "employee_hourly_rate": 11,
        }, headers=auth_header(admin_token))
        data = res.json()
        assert data["visibility"] == "selected"
        assert data["visible_to"] == [str(employee_user.id)]
        assert data["employee_hourly_rate"] == 11.0


class TestEmployeeWithdrawal:
    """직원 개인 철회 및 위약금 테스트 (service, 고정 now)."""

    async def test_withdraw_outside_window_no_penalty(self, db: AsyncSession, make_shift, employee_user):
        shift = await make_shift(status=SHIFT_ACCEPTED, accepted=[employee_user])  # 48시간 후
        result = await shift_service.cancel_shift(db, employee_user, shift.id, now=NOW)
        assert result.penalty_amount == Decimal("0.00")
        assert result.status == SHIFT_OPEN
        await db.refresh(shift)
        assert shift.accepted_count == 0
        assert shift.employee_penalty_applied is False

    async def test_late_withdraw_penalty(self, db: AsyncSession, make_shift, employee_user):
        """24시간 이내 철회: 4h x £14 x 50% = £28."""
        shift = await make_shift(
            shift_date=(NOW + timedelta(days=1)).date(), start_time="08:00", end_time="12:00",
            status=SHIFT_ACCEPTED, accepted=[employee_user],
        )
        result = await shift_service.cancel_shift(db, employee_user, shift.id, now=NOW)
        assert result.penalty_amount == Decimal("28.00")
        await db.refresh(shift)
        assert shift.employee_penalty_applied is True
        assert shift.employee_penalty_amount == Decimal("28.00")

    async def test_late_withdraw_uses_employee_rate(self, db: AsyncSession, make_shift, employee_user):
        shift = await make_shift(
            shift_date=(NOW + timedelta(days=1)).date(), start_time="08:00", end_time="12:00",
            employee_hourly_rate=Decimal("10.00"), accepted=[employee_user], status=SHIFT_ACCEPTED,
        )
        result = await shift_service.cancel_shift(db, employee_user, shift.id, now=NOW)
        assert result.penalty_amount == Decimal("20.00")

    async def test_penalties_accumulate(self, db: AsyncSession, make_shift, employee_user, employee2):
        """여러 직원의 늦은 철회는 누적."""
        shift = await make_shift(
            shift_date=(NOW + timedelta(days=1)).date(), start_time="08:00", end_time="12:00",
            required_employees=2, status=SHIFT_ACCEPTED, accepted=[employee_user, employee2],
        )
        await shift_service.cancel_shift(db, employee_user, shift.id, now=NOW)
        await shift_service.cancel_shift(db, employee2, shift.id, now=NOW)
        await db.refresh(shift)
        assert shift.employee_penalty_amount == Decimal("56.00")
        assert shift.accepted_count == 0

    async def test_same_day_post_no_penalty(self, db: AsyncSession, make_shift, employee_user):
        """게시 24시간 이내의 근무는 위약금 없음."""
        shift = await make_shift(
            shift_date=(NOW + timedelta(days=1)).date(), start_time="08:00", end_time="12:00",
            status=SHIFT_ACCEPTED, accepted=[employee_user], created_at=NOW - timedelta(hours=2),
        )
        result = await shift_service.cancel_shift(db, employee_user, shift.id, now=NOW)
        assert result.penalty_amount == Decimal("0.00")

    async def test_after_start_no_penalty(self, db: AsyncSession, make_shift, employee_user):
        """시작 이후 철회는 위약금 없음."""
        shift = await make_shift(
            shift_date=NOW.date(), start_time="08:00", end_time="12:00",
            status=SHIFT_ACCEPTED, accepted=[employee_user],
        )
        result = await shift_service.cancel_shift(db, employee_user, shift.id, now=NOW)
        assert result.penalty_amount == Decimal("0.00")

    async def test_not_accepted(self, db: AsyncSession, make_shift, employee_user):
        shift = await make_shift()
        with pytest.raises(ConflictError) as exc:
            await shift_service.cancel_shift(db, employee_user, shift.id, now=NOW)
        assert exc.value.detail == "You have not accepted this shift"

    async def test_withdraw_via_api(self, client: AsyncClient, make_shift, employee_user, employee_token):
        shift = await make_shift(status=SHIFT_ACCEPTED, accepted=[employee_user])
        res = await client.post(f"{SHIFTS_URL}/{shift.id}/cancel", headers=auth_header(employee_token))
        assert res.status_code == 200
        assert res.json()["status"] == SHIFT_OPEN

    async def test_withdraw_exactly_24h_before_start_is_late(self, db: AsyncSession, make_shift, employee_user):
        """시작 정확히 24시간 전 철회는 위약금 구간."""
        shift = await make_shift(status=SHIFT_ACCEPTED, accepted=[employee_user])
        result = await shift_service.cancel_shift(
            db, employee_user, shift.id, now=DEFAULT_START - timedelta(hours=24)
        )
        assert result.penalty_amount == Decimal("28.00")

    async def test_withdraw_just_outside_24h_no_penalty(self, db: AsyncSession, make_shift, employee_user):
        shift = await make_shift(status=SHIFT_ACCEPTED, accepted=[employee_user])
        result = await shift_service.cancel_shift(
            db, employee_user, shift.id, now=DEFAULT_START - timedelta(hours=24, minutes=1)
        )
        assert result.penalty_amount == Decimal("0.00")

    async def test_cannot_withdraw_from_completed_shift(self, db: AsyncSession, make_shift, employee_user):
        """완료된 근무의 인원과 주간 지급 대상은 유지."""
        shift = await make_shift(
            shift_date=date(2030, 6, 1), status=SHIFT_COMPLETED, accepted=[employee_user],
        )
        with pytest.raises(ConflictError) as exc:
            await shift_service.cancel_shift(db, employee_user, shift.id, now=NOW)
        assert exc.value.detail == "Cannot change staffing of a completed or cancelled shift"
        await db.rollback()

        await db.refresh(shift)
        assert shift.accepted_count == 1
        assert shift.employee_penalty_applied is False
        periods = await payment_service.list_week_payments(db)
        assert [(p.week_start, [e.amount for e in p.employees]) for p in periods] == [
            (date(2030, 5, 27), [Decimal("56.00")]),
        ]

    async def test_cannot_withdraw_from_cancelled_shift(
        self, client: AsyncClient, make_shift, employee_user, employee_token,
    ):
        shift = await make_shift(status=SHIFT_CANCELLED, accepted=[employee_user])
        res = await client.post(f"{SHIFTS_URL}/{shift.id}/cancel", headers=auth_header(employee_token))
        assert res.status_code == 400
        assert res.json()["detail"] == "Cannot change staffing of a completed or cancelled shift"


class TestCafeCancelPauseDelete:
    """카페 취소/일시중지/삭제 테스트."""

    async def test_cancel_rejects_pending_applications(
        self, client: AsyncClient, db: AsyncSession, make_shift, employee_user, cafe_token,
    ):
        shift = await make_shift()
        application = Application(shift_id=shift.id, employee_id=employee_user.id, status=APPLICATION_PENDING)
        db.add(application)
        await db.commit()

        res = await client.post(f"{SHIFTS_URL}/{shift.id}/cancel", headers=auth_header(cafe_token))
        assert res.status_code == 200
        assert res.json()["status"] == SHIFT_CANCELLED

        await db.refresh(application)
        assert application.status == APPLICATION_REJECTED
        assert application.rejection_reason == "Shift was cancelled"

    async def test_cancel_just_outside_cutoff(self, db: AsyncSession, make_shift, cafe_user, employee_user):
        """시작 24시간 1분 전 취소는 허용, 위약금 없음."""
        shift = await make_shift(status=SHIFT_ACCEPTED, accepted=[employee_user])
        result = await shift_service.cancel_shift(
            db, cafe_user, shift.id, now=DEFAULT_START - timedelta(hours=24, minutes=1)
        )
        assert result.status == SHIFT_CANCELLED
        assert result.penalty_amount == Decimal("0.00")
        await db.refresh(shift)
        assert shift.penalty_applied is False

    async def test_cancel_exactly_24h_before_start(self, db: AsyncSession, make_shift, cafe_user):
        shift = await make_shift()
        with pytest.raises(WindowExpiredError):
            await shift_service.cancel_shift(db, cafe_user, shift.id, now=DEFAULT_START - timedelta(hours=24))

    async def test_cancel_inside_cutoff(self, db: AsyncSession, make_shift, cafe_user):
        shift = await make_shift(shift_date=(NOW + timedelta(days=1)).date(), start_time="08:00")
        with pytest.raises(WindowExpiredError) as exc:
            await shift_service.cancel_shift(db, cafe_user, shift.id, now=NOW)
        assert exc.value.detail == (
            "Cannot cancel shift with less than 24 hours remaining. "
            "Please contact support if this is an emergency."
        )

    async def test_cancel_wrong_status(self, db: AsyncSession, make_shift, cafe_user):
        shift = await make_shift(status=SHIFT_PAUSED)
        with pytest.raises(ConflictError):
            await shift_service.cancel_shift(db, cafe_user, shift.id, now=NOW)

    async def test_other_cafe_cannot_cancel(self, client: AsyncClient, make_shift, other_cafe, cafe_token):
        shift = await make_shift(cafe=other_cafe)
        res = await client.post(f"{SHIFTS_URL}/{shift.id}/cancel", headers=auth_header(cafe_token))
        assert res.status_code == 403

    async def test_late_pause_with_staff_records_penalty(self, db: AsyncSession, make_shift, cafe_user, employee_user):
        """24시간 이내 일시중지 + 확정 직원: 합계의 50%."""
        shift = await make_shift(
            shift_date=(NOW + timedelta(days=1)).date(), start_time="08:00", end_time="12:00",
            status=SHIFT_ACCEPTED, accepted=[employee_user],
        )
        result = await shift_service.pause_shift(db, cafe_user, shift.id, now=NOW)
        assert result.status == SHIFT_PAUSED
        assert result.penalty_amount == Decimal("28.00")
        await db.refresh(shift)
        assert shift.penalty_applied is True
        assert shift.penalty_amount == Decimal("28.00")

    async def test_late_pause_without_staff_no_penalty(self, db: AsyncSession, make_shift, cafe_user):
        shift = await make_shift(shift_date=(NOW + timedelta(days=1)).date(), start_time="08:00")
        result = await shift_service.pause_shift(db, cafe_user, shift.id, now=NOW)
        assert result.penalty_amount == Decimal("0.00")

    async def test_early_pause_no_penalty(self, db: AsyncSession, make_shift, cafe_user, employee_user):
        shift = await make_shift(status=SHIFT_ACCEPTED, accepted=[employee_user])
        result = await shift_service.pause_shift(db, cafe_user, shift.id, now=NOW)
        assert result.penalty_amount == Decimal("0.00")

    async def test_paused_cannot_pause_again(self, client: AsyncClient, make_shift, cafe_token):
        shift = await make_shift(status=SHIFT_PAUSED)
        res = await client.post(f"{SHIFTS_URL}/{shift.id}/pause", headers=auth_header(cafe_token))
        assert res.status_code == 400

    async def test_delete_reports_penalty(self, db: AsyncSession, make_shift, cafe_user, employee_user):
        shift = await make_shift(
            shift_date=(NOW + timedelta(days=1)).date(), start_time="08:00", end_time="12:00",
            status=SHIFT_ACCEPTED, accepted=[employee_user],
        )
        result = await shift_service.delete_shift(db, cafe_user, shift.id, now=NOW)
        await db.commit()
        assert result.penalty_amount == Decimal("28.00")
        remaining = (await db.execute(select(Shift).where(Shift.id == shift.id))).scalar_one_or_none()
        assert remaining is None

    async def test_delete_via_api(self, client: AsyncClient, make_shift, cafe_token):
        shift = await make_shift()
        res = await client.delete(f"{SHIFTS_URL}/{shift.id}", headers=auth_header(cafe_token))
        assert res.status_code == 200
        res = await client.get(f"{SHIFTS_URL}/{shift.id}", headers=auth_header(cafe_token))
        assert res.status_code == 404

    async def test_cannot_delete_completed(self, client: AsyncClient, make_shift, cafe_token):
        shift = await make_shift(status=SHIFT_COMPLETED)
        res = await client.delete(f"{SHIFTS_URL}/{shift.id}", headers=auth_header(cafe_token))
        assert res.status_code == 400
        assert res.json()["detail"] == "Completed or cancelled shifts cannot be deleted"


class TestRejectAndRemoveEmployee:
    """카페의 직원 거절/제외 테스트."""

    async def test_reject_blocks_and_reopens(
        self, client: AsyncClient, db: AsyncSession, make_shift, employee_user, employee_token, cafe_token,
        sent_notifications,
    ):
        shift = await make_shift(status=SHIFT_ACCEPTED, accepted=[employee_user])
        res = await client.post(
            f"{SHIFTS_URL}/{shift.id}/reject/{employee_user.id}",
            json={"rejection_reason": "Wrong skills"},
            headers=auth_header(cafe_token),
        )
        assert res.status_code == 200
        data = res.json()
        assert data["status"] == SHIFT_OPEN
        assert data["accepted_by"] == []
        assert data["blocked_employees"][0]["reason"] == "Wrong skills"

        application = (await db.execute(
            select(Application).where(Application.shift_id == shift.id)
        )).scalar_one()
        assert application.status == APPLICATION_REJECTED
        assert application.rejection_reason == "Wrong skills"
        assert sent_notifications[-1][:2] == ("alice@test.com", "employee_rejected")

        again = await client.post(f"/api/v1/app/shifts/{shift.id}/accept", headers=auth_header(employee_token))
        assert again.status_code == 403

    async def test_reject_requires_reason(self, client: AsyncClient, make_shift, employee_user, cafe_token):
        shift = await make_shift(status=SHIFT_ACCEPTED, accepted=[employee_user])
        res = await client.post(
            f"{SHIFTS_URL}/{shift.id}/reject/{employee_user.id}", json={}, headers=auth_header(cafe_token)
        )
        assert res.status_code == 422

    async def test_reject_not_accepted(self, client: AsyncClient, make_shift, employee_user, cafe_token):
        shift = await make_shift()
        res = await client.post(
            f"{SHIFTS_URL}/{shift.id}/reject/{employee_user.id}",
            json={"rejection_reason": "x"},
            headers=auth_header(cafe_token),
        )
        assert res.status_code == 400
        assert res.json()["detail"] == "Employee has not accepted this shift"

    async def test_remove_without_block(self, client: AsyncClient, make_shift, employee_user, employee_token, cafe_token):
        shift = await make_shift(status=SHIFT_ACCEPTED, accepted=[employee_user])
        res = await client.post(
            f"{SHIFTS_URL}/{shift.id}/remove-employee/{employee_user.id}",
            json={"block": False},
            headers=auth_header(cafe_token),
        )
        assert res.status_code == 200
        assert res.json()["blocked_employees"] == []
        again = await client.post(f"/api/v1/app/shifts/{shift.id}/accept", headers=auth_header(employee_token))
        assert again.status_code == 200

    async def test_remove_with_block(self, client: AsyncClient, make_shift, employee_user, cafe_token):
        shift = await make_shift(status=SHIFT_ACCEPTED, accepted=[employee_user])
        res = await client.post(
            f"{SHIFTS_URL}/{shift.id}/remove-employee/{employee_user.id}",
            json={"block": True, "reason": "Double booked"},
            headers=auth_header(cafe_token),
        )
        assert res.json()["blocked_employees"][0]["reason"] == "Double booked"

    async def test_completed_shift_staff_cannot_be_rejected(
        self, client: AsyncClient, db: AsyncSession, make_shift, employee_user, cafe_token,
    ):
        """완료된 근무는 거절/제외 불가, 확정 인원 유지."""
        shift = await make_shift(
            shift_date=date(2030, 6, 1), status=SHIFT_COMPLETED, accepted=[employee_user],
        )
        rejected = await client.post(
            f"{SHIFTS_URL}/{shift.id}/reject/{employee_user.id}",
            json={"rejection_reason": "No-show"},
            headers=auth_header(cafe_token),
        )
        removed = await client.post(
            f"{SHIFTS_URL}/{shift.id}/remove-employee/{employee_user.id}",
            json={"block": True},
            headers=auth_header(cafe_token),
        )
        for res in (rejected, removed):
            assert res.status_code == 400
            assert res.json()["detail"] == "Cannot change staffing of a completed or cancelled shift"

        await db.refresh(shift)
        assert shift.accepted_count == 1
        blocks = (await db.execute(select(ShiftBlock).where(ShiftBlock.shift_id == shift.id))).scalars().all()
        assert blocks == []

    async def test_cancelled_shift_staff_cannot_be_removed(
        self, db: AsyncSession, make_shift, employee_user, cafe_user,
    ):
        shift = await make_shift(status=SHIFT_CANCELLED, accepted=[employee_user])
        with pytest.raises(ConflictError):
            await shift_service.remove_employee(db, cafe_user, shift.id, employee_user.id, RemoveEmployeeRequest())


class TestManualCompletion:
    """수동 완료 테스트 (승인형 청구 방식)."""

    async def test_rejected_in_prepaid_mode(self, client: AsyncClient, make_shift, cafe_token):
        shift = await make_shift(status=SHIFT_ACCEPTED)
        res = await client.post(f"{SHIFTS_URL}/{shift.id}/complete", headers=auth_header(cafe_token))
        assert res.status_code == 400
        assert res.json()["detail"] == "Shifts are completed automatically after they end"

    async def test_before_end_rejected(self, db: AsyncSession, make_shift, cafe_user, monkeypatch):
        monkeypatch.setattr(settings, "INVOICING_MODE", "approval")
        shift = await make_shift(payment_proof="payment-proofs/x.png")
        with pytest.raises(WindowExpiredError):
            await shift_service.complete_shift(db, cafe_user, shift.id, now=NOW)

    async def test_after_payment_window_rejected(self, db: AsyncSession, make_shift, cafe_user, monkeypatch):
        monkeypatch.setattr(settings, "INVOICING_MODE", "approval")
        shift = await make_shift(
            shift_date=(NOW - timedelta(days=3)).date(), payment_proof="payment-proofs/x.png",
        )
        with pytest.raises(WindowExpiredError) as exc:
            await shift_service.complete_shift(db, cafe_user, shift.id, now=NOW)
        assert exc.value.detail.startswith("Payment window closed.")

    async def test_proof_required(self, db: AsyncSession, make_shift, cafe_user, monkeypatch):
        monkeypatch.setattr(settings, "INVOICING_MODE", "approval")
        shift = await make_shift(shift_date=(NOW - timedelta(days=1)).date())
        with pytest.raises(ValidationError):
            await shift_service.complete_shift(db, cafe_user, shift.id, now=NOW)

    async def test_completion_creates_draft_invoice(
        self, db: AsyncSession, make_shift, cafe_user, employee_user, monkeypatch,
    ):
        monkeypatch.setattr(settings, "INVOICING_MODE", "approval")
        shift = await make_shift(
            shift_date=(NOW - timedelta(days=1)).date(), status=SHIFT_ACCEPTED,
            accepted=[employee_user], payment_proof="payment-proofs/x.png",
        )
        response = await shift_service.complete_shift(db, cafe_user, shift.id, now=NOW)
        await db.commit()
        assert response.status == SHIFT_COMPLETED
        invoice = (await db.execute(select(Invoice).where(Invoice.shift_id == shift.id))).scalar_one()
        assert invoice.status == INVOICE_DRAFT
        assert invoice.total_amount == Decimal("56.00")

    async def test_completion_upload_via_api(
        self, client: AsyncClient, make_shift, employee_user, cafe_token, monkeypatch,
    ):
        """multipart 증빙과 함께 완료 (종료 후 48시간 이내)."""
        monkeypatch.setattr(settings, "INVOICING_MODE", "approval")
        shift = await make_shift(
            shift_date=date.today() - timedelta(days=1), start_time="00:00", end_time="01:00",
            status=SHIFT_ACCEPTED, accepted=[employee_user],
        )
        res = await client.post(
            f"{SHIFTS_URL}/{shift.id}/complete",
            files={"payment_proof": ("receipt.png", io.BytesIO(b"\x89PNG fake"), "image/png")},
            headers=auth_header(cafe_token),
        )
        assert res.status_code == 200
        data = res.json()
        assert data["status"] == SHIFT_COMPLETED
        assert data["payment_proof"].startswith("payment-proofs/")
