"""근무 서비스 — 근무 수명주기 상태 머신.

Shift Service — Owns the shift status field and every legal transition:

    pending_approval → open → accepted → completed
    open/accepted → cancelled | paused

Pricing comes from app.utils.pricing with a PricingConfig resolved once per
operation; staffing changes go through staffing_service. Every time-gated
rule takes an optional `now` so boundaries can be exercised exactly.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.application import APPLICATION_ACCEPTED, APPLICATION_REJECTED, APPLICATION_WITHDRAWN, Application
from app.models.invoice import INVOICE_DRAFT
from app.models.shift import (
    SHIFT_ACCEPTED, SHIFT_CANCELLED, SHIFT_COMPLETED, SHIFT_OPEN, SHIFT_PAUSED,
    SHIFT_PENDING_APPROVAL, STAFFABLE_STATUSES, TERMINAL_STATUSES, VISIBILITY_ALL,
    VISIBILITY_SELECTED, Shift, ShiftBlock,
)
from app.models.user import ROLE_ADMIN, ROLE_CAFE, ROLE_EMPLOYEE, User
from app.repositories.application_repository import application_repository
from app.repositories.assignment_repository import (
    shift_assignment_repository,
    shift_block_repository,
)
from app.repositories.shift_repository import shift_repository
from app.repositories.user_repository import user_repository
from app.schemas.shift import (
    AdminShiftUpdate, BlockedEmployeeResponse, EmployeeShiftResponse, RemoveEmployeeRequest,
    ShiftActionResponse, ShiftApproveRequest, ShiftCreate, ShiftLocation, ShiftResponse,
    ShiftUpdate,
)
from app.services.invoice_service import invoice_service
from app.services.notification_service import notification_service, shift_params
from app.services.platform_service import platform_service
from app.services.staffing_service import staffing_service
from app.services.storage_service import storage_service
from app.utils.exceptions import (
    AuthorizationError, ConflictError, NotFoundError, ValidationError, WindowExpiredError,
)
from app.utils.pricing import (
    FEE_MODEL_PERCENTAGE, PricingConfig, base_amount, penalty, price_shift,
    resolve_hourly_rate, round2, shift_hours,
)
from app.utils.shift_time import as_utc, local_datetime, local_today, utcnow

logger = logging.getLogger(__name__)

# 카페 목록 범위 — Café list scopes
SCOPE_STATUSES: dict[str, tuple[str, ...] | None] = {
    "active": (SHIFT_PENDING_APPROVAL, SHIFT_OPEN, SHIFT_ACCEPTED, SHIFT_PAUSED),
    "completed": (SHIFT_COMPLETED,),
    "all": None,
}

_LOCATION_FIELDS: tuple[str, ...] = ("address", "latitude", "longitude", "place_id")


def hours_until_start(shift: Shift, now: datetime) -> float:
    """근무 시작까지 남은 시간(시간 단위, 음수 가능) — Hours until the shift starts."""
    start_at: datetime = local_datetime(shift.date, shift.start_time)
    return (start_at - as_utc(now)).total_seconds() / 3600


def is_same_day_post(shift: Shift, now: datetime) -> bool:
    """게시 후 24시간이 지나지 않은 근무 — Posted less than 24 hours before now."""
    return as_utc(now) - as_utc(shift.created_at) < timedelta(hours=24)


def in_late_window(shift: Shift, now: datetime) -> bool:
    """위약금 적용 구간 — Within the late-cancellation cutoff and not a same-day post."""
    return (
        hours_until_start(shift, now) <= settings.CANCELLATION_CUTOFF_HOURS
        and not is_same_day_post(shift, now)
    )


class ShiftService:
    """근무 수명주기 비즈니스 로직을 처리하는 서비스.

    Service handling the shift lifecycle.
    """

    # ------------------------------------------------------------------
    # 응답 변환 — Response builders
    # ------------------------------------------------------------------

    def _location(self, shift: Shift) -> ShiftLocation | None:
        if all(getattr(shift, f) is None for f in _LOCATION_FIELDS):
            return None
        return ShiftLocation(
            address=shift.address,
            latitude=shift.latitude,
            longitude=shift.longitude,
            place_id=shift.place_id,
        )

    async def build_responses(self, db: AsyncSession, shifts: list[Shift]) -> list[ShiftResponse]:
        """카페/관리자용 응답 목록을 만듭니다.

        Build café/admin responses, resolving accepted employees, blocks and
        names in batched queries.
        """
        shift_ids: list[UUID] = [s.id for s in shifts]
        accepted: dict[UUID, list[UUID]] = await shift_assignment_repository.get_employee_ids_by_shifts(db, shift_ids)
        blocks: dict[UUID, list[ShiftBlock]] = await shift_block_repository.get_by_shifts(db, shift_ids)

        user_ids: set[UUID] = {s.cafe_id for s in shifts}
        user_ids.update(b.employee_id for items in blocks.values() for b in items)
        users: dict[UUID, User] = await user_repository.get_by_ids(db, list(user_ids))

        def name(user_id: UUID) -> str | None:
            user: User | None = users.get(user_id)
            return user.display_name if user else None

        responses: list[ShiftResponse] = []
        for shift in shifts:
            responses.append(ShiftResponse(
                id=str(shift.id),
                cafe_id=str(shift.cafe_id),
                cafe_name=name(shift.cafe_id),
                date=shift.date,
                start_time=shift.start_time,
                end_time=shift.end_time,
                hours=round2(shift_hours(shift.start_time, shift.end_time)),
                required_employees=shift.required_employees,
                accepted_count=shift.accepted_count,
                accepted_by=[str(e) for e in accepted.get(shift.id, [])],
                blocked_employees=[
                    BlockedEmployeeResponse(
                        employee_id=str(b.employee_id),
                        employee_name=name(b.employee_id),
                        reason=b.reason,
                    )
                    for b in blocks.get(shift.id, [])
                ],
                description=shift.description,
                status=shift.status,
                base_hourly_rate=round2(shift.base_hourly_rate),
                employee_hourly_rate=(
                    round2(shift.employee_hourly_rate) if shift.employee_hourly_rate is not None else None
                ),
                platform_fee=round2(shift.platform_fee),
                total_cost=round2(shift.total_cost),
                penalty_applied=bool(shift.penalty_applied),
                penalty_amount=round2(shift.penalty_amount),
                employee_penalty_applied=bool(shift.employee_penalty_applied),
                employee_penalty_amount=round2(shift.employee_penalty_amount),
                location=self._location(shift),
                payment_proof=shift.payment_proof,
                visibility=shift.visibility,
                visible_to=[str(v) for v in (shift.visible_to or [])],
                created_at=shift.created_at,
            ))
        return responses

    async def build_response(self, db: AsyncSession, shift: Shift) -> ShiftResponse:
        return (await self.build_responses(db, [shift]))[0]

    def to_employee_response(
        self,
        shift: Shift,
        cafe_name: str | None,
        is_accepted: bool,
    ) -> EmployeeShiftResponse:
        """직원용 응답 — 카페 시급/수수료는 숨기고 직원 시급만 노출.

        Employee-facing view exposing only the effective employee rate.
        """
        hours: Decimal = shift_hours(shift.start_time, shift.end_time)
        rate: Decimal = round2(shift.effective_employee_rate)
        return EmployeeShiftResponse(
            id=str(shift.id),
            cafe_id=str(shift.cafe_id),
            cafe_name=cafe_name,
            date=shift.date,
            start_time=shift.start_time,
            end_time=shift.end_time,
            hours=round2(hours),
            required_employees=shift.required_employees,
            accepted_count=shift.accepted_count,
            is_accepted=is_accepted,
            description=shift.description,
            status=shift.status,
            hourly_rate=rate,
            expected_earnings=round2(hours * rate),
            location=self._location(shift),
        )

    async def build_employee_responses(
        self,
        db: AsyncSession,
        shifts: list[Shift],
        employee_id: UUID,
    ) -> list[EmployeeShiftResponse]:
        accepted: dict[UUID, list[UUID]] = await shift_assignment_repository.get_employee_ids_by_shifts(
            db, [s.id for s in shifts]
        )
        cafes: dict[UUID, User] = await user_repository.get_by_ids(db, [s.cafe_id for s in shifts])
        return [
            self.to_employee_response(
                s,
                cafes[s.cafe_id].display_name if s.cafe_id in cafes else None,
                employee_id in accepted.get(s.id, []),
            )
            for s in shifts
        ]

    # ------------------------------------------------------------------
    # 조회 헬퍼 — Lookup helpers
    # ------------------------------------------------------------------

    async def get_shift_or_404(self, db: AsyncSession, shift_id: UUID) -> Shift:
        shift: Shift | None = await shift_repository.get_by_id(db, shift_id)
        if shift is None:
            raise NotFoundError("Shift not found")
        return shift

    async def get_owned_shift(self, db: AsyncSession, cafe: User, shift_id: UUID) -> Shift:
        """카페 소유 근무 조회 — Load a shift owned by the café.

        Raises:
            NotFoundError: 근무 없음 (Shift not found)
            AuthorizationError: 다른 카페의 근무 (Shift belongs to another café)
        """
        shift: Shift = await self.get_shift_or_404(db, shift_id)
        if shift.cafe_id != cafe.id:
            raise AuthorizationError("Not authorized")
        return shift

    # ------------------------------------------------------------------
    # 생성/조회/수정 — Create, read, update
    # ------------------------------------------------------------------

    async def create_shift(
        self,
        db: AsyncSession,
        cafe: User,
        data: ShiftCreate,
        now: datetime | None = None,
    ) -> ShiftResponse:
        """새 근무를 게시합니다 (관리자 승인 대기 상태).

        Post a new shift in pending_approval status.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            cafe: 게시 카페 (Posting café)
            data: 근무 생성 데이터 (Shift creation data)
            now: 기준 시각, 테스트용 (Reference time)

        Returns:
            ShiftResponse: 생성된 근무 (Created shift)

        Raises:
            ValidationError: 시간 형식 오류, 종료 <= 시작, 최저 시급 미만
                             (Bad times, overnight shift, or rate below the tier floor)
            WindowExpiredError: 최소 게시 선행 시간 미달 (Inside the minimum lead time)
        """
        now = now or utcnow()
        config: PricingConfig = await platform_service.get_pricing_config(db)

        shift_hours(data.start_time, data.end_time)
        start_at: datetime = local_datetime(data.date, data.start_time)
        lead_hours: float = (start_at - as_utc(now)).total_seconds() / 3600
        if lead_hours < config.minimum_hours_before_shift:
            raise WindowExpiredError(
                f"Shift must start at least {config.minimum_hours_before_shift} hours from now"
            )

        rate: Decimal = resolve_hourly_rate(config, data.hourly_rate, lead_hours)
        previous_count: int = await shift_repository.count_by_cafe(db, cafe.id)
        cost = price_shift(
            config, data.start_time, data.end_time, rate, data.required_employees, previous_count
        )

        location: dict[str, Any] = data.location.model_dump() if data.location else {}
        shift: Shift = await shift_repository.create(db, {
            "cafe_id": cafe.id,
            "date": data.date,
            "start_time": data.start_time,
            "end_time": data.end_time,
            "required_employees": data.required_employees,
            "accepted_count": 0,
            "description": data.description,
            "status": SHIFT_PENDING_APPROVAL,
            "base_hourly_rate": rate,
            "platform_fee": cost.platform_fee,
            "total_cost": cost.total,
            "visibility": data.visibility,
            "visible_to": list(data.visible_to) if data.visibility == VISIBILITY_SELECTED else [],
            "created_at": as_utc(now),
            **location,
        })
        logger.info(
            "Shift %s created by café %s (%s %s-%s, rate=%s, fee=%s)",
            shift.id, cafe.id, shift.date, shift.start_time, shift.end_time, rate, cost.platform_fee,
        )
        return await self.build_response(db, shift)

    async def list_shifts(
        self,
        db: AsyncSession,
        user: User,
        scope: str = "active",
        now: datetime | None = None,
    ) -> list[ShiftResponse] | list[EmployeeShiftResponse]:
        """근무 목록 — 카페는 자신의 근무, 직원은 지원 가능한 근무.

        List shifts: a café sees its own shifts filtered by scope; an employee
        sees upcoming open shifts that are neither blocked nor hidden from them.
        """
        if user.role == ROLE_EMPLOYEE:
            candidates: list[Shift] = await shift_repository.get_open_not_blocked(
                db, user.id, local_today(now)
            )
            visible: list[Shift] = [s for s in candidates if staffing_service.is_visible_to(s, user.id)]
            return await self.build_employee_responses(db, visible, user.id)

        if scope not in SCOPE_STATUSES:
            raise ValidationError("scope must be one of: active, completed, all", field="scope")
        shifts: list[Shift] = await shift_repository.get_by_cafe(db, user.id, SCOPE_STATUSES[scope])
        return await self.build_responses(db, shifts)

    async def list_all_shifts(
        self,
        db: AsyncSession,
        status: str | None = None,
        cafe_id: UUID | None = None,
    ) -> list[ShiftResponse]:
        """관리자용 전체 근무 목록 — All shifts with blocked employees and reasons."""
        shifts: list[Shift] = await shift_repository.get_filtered(db, status, cafe_id)
        return await self.build_responses(db, shifts)

    async def get_shift(
        self,
        db: AsyncSession,
        user: User,
        shift_id: UUID,
    ) -> ShiftResponse | EmployeeShiftResponse:
        """근무 상세 조회.

        Get a shift. Employees may only see open shifts that are visible to
        them and not blocked, plus shifts they already hold.

        Raises:
            NotFoundError: 근무 없음 (Shift not found)
            AuthorizationError: 차단, 비공개, 또는 조회 불가 상태
                                (Blocked, not on the allow-list, or not available)
        """
        shift: Shift = await self.get_shift_or_404(db, shift_id)

        if user.role == ROLE_EMPLOYEE:
            if await shift_block_repository.is_blocked(db, shift.id, user.id):
                raise AuthorizationError("You have been blocked from viewing this shift")
            if not staffing_service.is_visible_to(shift, user.id):
                raise AuthorizationError("This shift is not visible to you")
            is_accepted: bool = await shift_assignment_repository.is_assigned(db, shift.id, user.id)
            if shift.status != SHIFT_OPEN and not is_accepted:
                raise AuthorizationError("Shift is not available")
            return (await self.build_employee_responses(db, [shift], user.id))[0]

        if user.role == ROLE_CAFE and shift.cafe_id != user.id:
            raise AuthorizationError("Not authorized")
        return await self.build_response(db, shift)

    async def _apply_update(
        self,
        db: AsyncSession,
        shift: Shift,
        update_data: dict[str, Any],
        config: PricingConfig,
    ) -> Shift:
        """수정 사항을 적용하고 비용과 상태를 다시 계산합니다.

        Apply field changes, recompute the cost fields and re-derive
        open/accepted from the headcount.
        """
        if shift.status in TERMINAL_STATUSES:
            raise ConflictError("Cannot edit completed or cancelled shift")

        required: int = update_data.get("required_employees") or shift.required_employees
        if required < shift.accepted_count:
            raise ConflictError("Cannot reduce required employees below current accepted count")

        location: dict[str, Any] | None = update_data.pop("location", None)
        if location is not None:
            update_data.update({f: location.get(f) for f in _LOCATION_FIELDS})
        if "hourly_rate" in update_data:
            rate = update_data.pop("hourly_rate")
            if rate is not None:
                update_data["base_hourly_rate"] = round2(rate)

        for field, value in update_data.items():
            if value is None and field in (
                "date", "start_time", "end_time", "required_employees", "visibility", "visible_to",
            ):
                continue
            setattr(shift, field, value)

        if shift.visibility == VISIBILITY_SELECTED and not shift.visible_to:
            raise ValidationError(
                "visible_to must list at least one employee when visibility is 'selected'",
                field="visible_to",
            )
        if shift.visibility == VISIBILITY_ALL:
            shift.visible_to = []

        # 비용 재계산 — 고정 수수료는 생성 시 값 유지
        hours: Decimal = shift_hours(shift.start_time, shift.end_time)
        base: Decimal = base_amount(hours, shift.base_hourly_rate, shift.required_employees)
        fee: Decimal = round2(shift.platform_fee)
        if config.fee_model == FEE_MODEL_PERCENTAGE:
            fee = penalty(base, config.platform_fee_percentage)
        shift.platform_fee = fee
        shift.total_cost = base + fee

        if shift.status in STAFFABLE_STATUSES:
            shift.status = SHIFT_ACCEPTED if shift.accepted_count >= shift.required_employees else SHIFT_OPEN

        await db.flush()
        await db.refresh(shift)
        return shift

    async def update_shift(
        self,
        db: AsyncSession,
        cafe: User,
        shift_id: UUID,
        data: ShiftUpdate,
        now: datetime | None = None,
    ) -> ShiftResponse:
        """카페의 근무 수정 — 새 시급은 최저 시급 이상이어야 함.

        Update a shift owned by the café. A new custom rate is checked
        against the tier floor for the (possibly new) start time.
        """
        now = now or utcnow()
        shift: Shift = await self.get_owned_shift(db, cafe, shift_id)
        config: PricingConfig = await platform_service.get_pricing_config(db)
        update_data: dict[str, Any] = data.model_dump(exclude_unset=True)

        if update_data.get("hourly_rate") is not None:
            start_at: datetime = local_datetime(
                update_data.get("date") or shift.date,
                update_data.get("start_time") or shift.start_time,
            )
            lead_hours: float = (start_at - as_utc(now)).total_seconds() / 3600
            update_data["hourly_rate"] = resolve_hourly_rate(config, update_data["hourly_rate"], lead_hours)

        shift = await self._apply_update(db, shift, update_data, config)
        logger.info("Shift %s updated by café %s: %s", shift.id, cafe.id, sorted(update_data))
        return await self.build_response(db, shift)

    async def admin_update_shift(
        self,
        db: AsyncSession,
        shift_id: UUID,
        data: AdminShiftUpdate,
    ) -> ShiftResponse:
        """관리자 근무 수정 — 시급, 공개 범위, 시간, 인원, 설명."""
        shift: Shift = await self.get_shift_or_404(db, shift_id)
        config: PricingConfig = await platform_service.get_pricing_config(db)
        update_data: dict[str, Any] = data.model_dump(exclude_unset=True)
        if "employee_hourly_rate" in update_data and update_data["employee_hourly_rate"] is not None:
            update_data["employee_hourly_rate"] = round2(update_data["employee_hourly_rate"])
        if update_data.get("visible_to") is not None:
            update_data["visible_to"] = list(update_data["visible_to"])
        shift = await self._apply_update(db, shift, update_data, config)
        return await self.build_response(db, shift)

    async def approve_shift(
        self,
        db: AsyncSession,
        shift_id: UUID,
        data: ShiftApproveRequest,
    ) -> ShiftResponse:
        """관리자 승인 — pending_approval → open.

        Approve a pending shift, optionally setting the employee-facing rate.
        Approving an already completed shift is acknowledged without change.

        Raises:
            ConflictError: 승인 대기 또는 완료 상태가 아님 (Not pending approval or completed)
        """
        shift: Shift = await self.get_shift_or_404(db, shift_id)
        if shift.status == SHIFT_COMPLETED:
            return await self.build_response(db, shift)
        if shift.status != SHIFT_PENDING_APPROVAL:
            raise ConflictError("Only pending-approval or completed shifts can be approved")

        if data.employee_hourly_rate is not None:
            shift.employee_hourly_rate = round2(data.employee_hourly_rate)
        shift.status = SHIFT_OPEN
        await db.flush()
        await db.refresh(shift)
        logger.info("Shift %s approved (employee rate=%s)", shift.id, shift.employee_hourly_rate)

        cafe: User | None = await user_repository.get_by_id(db, shift.cafe_id)
        notification_service.send_after_commit(
            db, cafe.email if cafe else None, "shift_approved", shift_params(shift)
        )
        return await self.build_response(db, shift)

    async def upload_payment_proof(
        self,
        db: AsyncSession,
        cafe: User,
        shift_id: UUID,
        upload: UploadFile,
    ) -> ShiftResponse:
        """카페 결제 증빙 첨부 — Attach the café's payment proof to a shift."""
        shift: Shift = await self.get_owned_shift(db, cafe, shift_id)
        if shift.status == SHIFT_CANCELLED:
            raise ConflictError("Cannot attach payment proof to a cancelled shift")
        shift.payment_proof = await storage_service.save_upload(upload, "payment-proofs")
        await db.flush()
        await db.refresh(shift)
        return await self.build_response(db, shift)

    # ------------------------------------------------------------------
    # 인원 확정 — Staffing
    # ------------------------------------------------------------------

    async def accept_shift(self, db: AsyncSession, employee: User, shift_id: UUID) -> EmployeeShiftResponse:
        """직원의 선착순 직접 수락 — First-come-first-serve claim.

        No application record is created on this path.
        """
        shift: Shift = await self.get_shift_or_404(db, shift_id)
        shift = await staffing_service.staff_shift(db, shift, employee)
        await self.notify_if_full(db, shift)
        return (await self.build_employee_responses(db, [shift], employee.id))[0]

    async def notify_if_full(self, db: AsyncSession, shift: Shift) -> None:
        if shift.status != SHIFT_ACCEPTED:
            return
        cafe: User | None = await user_repository.get_by_id(db, shift.cafe_id)
        notification_service.send_after_commit(
            db, cafe.email if cafe else None, "shift_fully_staffed", shift_params(shift)
        )

    async def reject_employee(
        self,
        db: AsyncSession,
        cafe: User,
        shift_id: UUID,
        employee_id: UUID,
        reason: str,
        now: datetime | None = None,
    ) -> ShiftResponse:
        """카페가 확정 직원을 거절합니다 — 영구 차단.

        Reject an accepted employee: release their slot, block them from the
        shift permanently and record the reason on their application
        (creating one if they claimed directly).

        Raises:
            ConflictError: 해당 직원이 확정되지 않음 (Employee holds no slot)
        """
        now = now or utcnow()
        shift: Shift = await self.get_owned_shift(db, cafe, shift_id)
        if not await staffing_service.unstaff_shift(db, shift, employee_id):
            raise ConflictError("Employee has not accepted this shift")

        await shift_block_repository.block(db, shift.id, employee_id, reason)
        application: Application | None = await application_repository.get_for_shift_employee(
            db, shift.id, employee_id
        )
        review: dict[str, Any] = {
            "status": APPLICATION_REJECTED,
            "rejection_reason": reason,
            "reviewed_by": cafe.id,
            "reviewed_at": now,
        }
        if application is None:
            await application_repository.create(db, {"shift_id": shift.id, "employee_id": employee_id, **review})
        else:
            await application_repository.update(db, application, review)

        logger.info("Employee %s rejected from shift %s by café %s", employee_id, shift.id, cafe.id)
        employee: User | None = await user_repository.get_by_id(db, employee_id)
        notification_service.send_after_commit(
            db,
            employee.email if employee else None,
            "employee_rejected",
            {**shift_params(shift), "reason": reason},
        )
        return await self.build_response(db, shift)

    async def remove_employee(
        self,
        db: AsyncSession,
        cafe: User,
        shift_id: UUID,
        employee_id: UUID,
        data: RemoveEmployeeRequest,
    ) -> ShiftResponse:
        """카페가 확정 직원을 제외합니다 (선택적 차단).

        Remove an accepted employee, optionally blocking them, and reject any
        pending application they still have on the shift.
        """
        shift: Shift = await self.get_owned_shift(db, cafe, shift_id)
        if not await staffing_service.unstaff_shift(db, shift, employee_id):
            raise ConflictError("Employee has not accepted this shift")
        if data.block:
            await shift_block_repository.block(db, shift.id, employee_id, data.reason)
        await application_repository.reject_pending(
            db, shift.id, data.reason or "Removed from shift", cafe.id, employee_id=employee_id
        )
        logger.info(
            "Employee %s removed from shift %s by café %s (block=%s)",
            employee_id, shift.id, cafe.id, data.block,
        )
        return await self.build_response(db, shift)

    # ------------------------------------------------------------------
    # 취소/일시중지/삭제/완료 — Cancel, pause, delete, complete
    # ------------------------------------------------------------------

    async def cancel_shift(
        self,
        db: AsyncSession,
        user: User,
        shift_id: UUID,
        now: datetime | None = None,
    ) -> ShiftActionResponse:
        """근무 취소 — 직원은 개인 철회, 카페는 전체 취소.

        Employee: withdraw from the shift, with a late penalty when within the
        cutoff of the start and the shift was not a same-day post. Multiple
        late withdrawals accumulate on the shift.

        Café: cancel the whole shift; only allowed while more than the cutoff
        remains before the start, and carries no penalty.

        Raises:
            ConflictError: 확정되지 않은 직원, 취소 불가 상태 (Not accepted / wrong status)
            WindowExpiredError: 카페 취소가 24시간 이내 (Café cancel inside the cutoff)
        """
        now = now or utcnow()
        shift: Shift = await self.get_shift_or_404(db, shift_id)

        if user.role == ROLE_EMPLOYEE:
            return await self._withdraw_employee(db, shift, user, now)
        if user.role != ROLE_CAFE:
            raise AuthorizationError("Only employees and cafés can cancel shifts")
        if shift.cafe_id != user.id:
            raise AuthorizationError("Not authorized")

        if shift.status not in STAFFABLE_STATUSES:
            raise ConflictError("Only open or accepted shifts can be cancelled")
        if hours_until_start(shift, now) <= settings.CANCELLATION_CUTOFF_HOURS:
            raise WindowExpiredError(
                "Cannot cancel shift with less than 24 hours remaining. "
                "Please contact support if this is an emergency."
            )
        if not await shift_repository.transition_status(db, shift.id, STAFFABLE_STATUSES, SHIFT_CANCELLED):
            raise ConflictError("Only open or accepted shifts can be cancelled")
        await application_repository.reject_pending(db, shift.id, "Shift was cancelled", user.id)
        await db.refresh(shift)

        logger.info("Shift %s cancelled by café %s", shift.id, user.id)
        return ShiftActionResponse(message="Shift cancelled", status=shift.status)

    async def _withdraw_employee(
        self,
        db: AsyncSession,
        shift: Shift,
        employee: User,
        now: datetime,
    ) -> ShiftActionResponse:
        staffing_service.ensure_staffing_mutable(shift)
        if not await shift_assignment_repository.is_assigned(db, shift.id, employee.id):
            raise ConflictError("You have not accepted this shift")

        penalty_amount: Decimal = Decimal("0.00")
        if 0 < hours_until_start(shift, now) and in_late_window(shift, now):
            config: PricingConfig = await platform_service.get_pricing_config(db)
            expected: Decimal = shift_hours(shift.start_time, shift.end_time) * shift.effective_employee_rate
            penalty_amount = penalty(expected, config.employee_penalty_percentage)
            shift.employee_penalty_applied = True
            shift.employee_penalty_amount = round2(shift.employee_penalty_amount + penalty_amount)
            await db.flush()

        await staffing_service.unstaff_shift(db, shift, employee.id)

        application: Application | None = await application_repository.get_for_shift_employee(
            db, shift.id, employee.id
        )
        if application is not None and application.status == APPLICATION_ACCEPTED:
            await application_repository.update(db, application, {"status": APPLICATION_WITHDRAWN})

        if penalty_amount > 0:
            logger.warning(
                "Late withdrawal by employee %s from shift %s: penalty %s", employee.id, shift.id, penalty_amount
            )
        else:
            logger.info("Employee %s withdrew from shift %s", employee.id, shift.id)
        return ShiftActionResponse(
            message="You have withdrawn from this shift",
            status=shift.status,
            penalty_amount=penalty_amount,
        )

    def _cafe_penalty(self, shift: Shift, config: PricingConfig, now: datetime) -> Decimal:
        """카페 위약금 — 확정 직원이 있고 24시간 이내이며 당일 게시가 아닐 때."""
        if shift.accepted_count > 0 and in_late_window(shift, now):
            return penalty(shift.total_cost, config.cafe_penalty_percentage)
        return Decimal("0.00")

    async def pause_shift(
        self,
        db: AsyncSession,
        cafe: User,
        shift_id: UUID,
        now: datetime | None = None,
    ) -> ShiftActionResponse:
        """근무 일시중지 — 늦은 중지는 카페 위약금을 기록.

        Pause a shift. When it already has accepted employees and the pause
        happens within the cutoff (and it was not a same-day post), the café
        penalty is recorded on the shift for invoicing.
        """
        now = now or utcnow()
        shift: Shift = await self.get_owned_shift(db, cafe, shift_id)
        if shift.status not in STAFFABLE_STATUSES:
            raise ConflictError("Only open or accepted shifts can be paused")

        config: PricingConfig = await platform_service.get_pricing_config(db)
        penalty_amount: Decimal = self._cafe_penalty(shift, config, now)
        if penalty_amount > 0:
            shift.penalty_applied = True
            shift.penalty_amount = penalty_amount
            await db.flush()

        if not await shift_repository.transition_status(db, shift.id, STAFFABLE_STATUSES, SHIFT_PAUSED):
            raise ConflictError("Only open or accepted shifts can be paused")
        await db.refresh(shift)

        logger.info("Shift %s paused by café %s (penalty=%s)", shift.id, cafe.id, penalty_amount)
        return ShiftActionResponse(message="Shift paused", status=shift.status, penalty_amount=penalty_amount)

    async def delete_shift(
        self,
        db: AsyncSession,
        cafe: User,
        shift_id: UUID,
        now: datetime | None = None,
    ) -> ShiftActionResponse:
        """근무 삭제 — 위약금 규칙 적용 후 삭제.

        Delete a shift. The late-penalty rule of pause applies first and the
        resulting amount is reported; completed or cancelled shifts cannot be
        deleted.
        """
        now = now or utcnow()
        shift: Shift = await self.get_owned_shift(db, cafe, shift_id)
        if shift.status in TERMINAL_STATUSES:
            raise ConflictError("Completed or cancelled shifts cannot be deleted")

        config: PricingConfig = await platform_service.get_pricing_config(db)
        penalty_amount: Decimal = self._cafe_penalty(shift, config, now)
        if penalty_amount > 0:
            logger.warning(
                "Shift %s deleted inside the cancellation cutoff by café %s: penalty %s",
                shift.id, cafe.id, penalty_amount,
            )

        await shift_assignment_repository.delete_for_shift(db, shift.id)
        await shift_block_repository.delete_for_shift(db, shift.id)
        await application_repository.delete_for_shift(db, shift.id)
        await shift_repository.delete(db, shift)
        logger.info("Shift %s deleted by café %s", shift_id, cafe.id)
        return ShiftActionResponse(message="Shift deleted", status=None, penalty_amount=penalty_amount)

    async def complete_shift(
        self,
        db: AsyncSession,
        cafe: User,
        shift_id: UUID,
        upload: UploadFile | None = None,
        now: datetime | None = None,
    ) -> ShiftResponse:
        """카페의 수동 완료 (승인형 청구 방식 전용).

        Manual completion, available only when INVOICING_MODE is "approval".
        The shift must have ended, completion must happen within the payment
        window after the end, and a payment proof must be attached (uploaded
        now or earlier). A draft invoice is created for staffed shifts.

        Raises:
            ConflictError: 자동 완료 모드 또는 잘못된 상태 (Prepaid mode or wrong status)
            WindowExpiredError: 종료 전 또는 결제 기한 경과 (Before end or window closed)
            ValidationError: 결제 증빙 없음 (No payment proof)
        """
        if settings.INVOICING_MODE != "approval":
            raise ConflictError("Shifts are completed automatically after they end")

        now = as_utc(now or utcnow())
        shift: Shift = await self.get_owned_shift(db, cafe, shift_id)
        if shift.status not in STAFFABLE_STATUSES:
            raise ConflictError("Only open or accepted shifts can be marked complete")

        end_at: datetime = local_datetime(shift.date, shift.end_time)
        if end_at > now:
            raise WindowExpiredError("You can only complete the shift after the shift end time has passed.")
        if now - end_at > timedelta(hours=settings.PAYMENT_WINDOW_HOURS):
            raise WindowExpiredError(
                f"Payment window closed. You had {settings.PAYMENT_WINDOW_HOURS} hours after the shift end "
                "to submit payment and complete. Please contact support."
            )

        if upload is not None:
            shift.payment_proof = await storage_service.save_upload(upload, "payment-proofs")
            await db.flush()
        if not shift.payment_proof:
            raise ValidationError(
                "Payment proof (transaction receipt/screenshot) is required to complete the shift.",
                field="payment_proof",
            )

        if not await shift_repository.transition_status(db, shift.id, STAFFABLE_STATUSES, SHIFT_COMPLETED):
            raise ConflictError("Only open or accepted shifts can be marked complete")
        await db.refresh(shift)
        if shift.accepted_count > 0:
            await invoice_service.create_for_shift(db, shift, INVOICE_DRAFT, now)

        logger.info("Shift %s completed manually by café %s", shift.id, cafe.id)
        return await self.build_response(db, shift)


# 싱글턴 인스턴스 — Singleton instance
shift_service: ShiftService = ShiftService()
