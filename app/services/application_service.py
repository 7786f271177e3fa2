"""근무 지원서 서비스 — 지원/검토 경로.

Application Service — The formal application path: an employee applies, the
café accepts or rejects. Accepting stages the employee through the same
staffing operation as a direct claim.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.application import (
    APPLICATION_ACCEPTED, APPLICATION_PENDING, APPLICATION_REJECTED, APPLICATION_WITHDRAWN,
    Application,
)
from app.models.shift import SHIFT_ACCEPTED, SHIFT_OPEN, Shift
from app.models.user import User
from app.repositories.application_repository import application_repository
from app.repositories.assignment_repository import shift_block_repository
from app.repositories.shift_repository import shift_repository
from app.repositories.user_repository import user_repository
from app.schemas.application import ApplicationCreate, ApplicationResponse
from app.services.shift_service import shift_service
from app.services.staffing_service import staffing_service
from app.utils.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.utils.shift_time import utcnow

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON: str = "Application rejected"
SHIFT_FULL_REASON: str = "Shift is now full"


class ApplicationService:
    """지원서 관련 비즈니스 로직을 처리하는 서비스.

    Service handling shift applications.
    """

    async def build_responses(
        self,
        db: AsyncSession,
        applications: list[Application],
    ) -> list[ApplicationResponse]:
        shifts: dict[UUID, Shift] = {}
        for shift_id in {a.shift_id for a in applications}:
            shift: Shift | None = await shift_repository.get_by_id(db, shift_id)
            if shift is not None:
                shifts[shift_id] = shift
        employees: dict[UUID, User] = await user_repository.get_by_ids(
            db, [a.employee_id for a in applications]
        )

        responses: list[ApplicationResponse] = []
        for a in applications:
            shift = shifts.get(a.shift_id)
            employee: User | None = employees.get(a.employee_id)
            responses.append(ApplicationResponse(
                id=str(a.id),
                shift_id=str(a.shift_id),
                employee_id=str(a.employee_id),
                employee_name=employee.full_name if employee else None,
                status=a.status,
                message=a.message,
                rejection_reason=a.rejection_reason,
                reviewed_at=a.reviewed_at,
                created_at=a.created_at,
                shift_date=shift.date if shift else None,
                shift_start_time=shift.start_time if shift else None,
                shift_end_time=shift.end_time if shift else None,
                shift_status=shift.status if shift else None,
            ))
        return responses

    async def _get_application(self, db: AsyncSession, application_id: UUID) -> Application:
        application: Application | None = await application_repository.get_by_id(db, application_id)
        if application is None:
            raise NotFoundError("Application not found")
        return application

    async def _get_for_cafe(self, db: AsyncSession, cafe: User, application_id: UUID) -> tuple[Application, Shift]:
        """카페가 검토할 지원서와 근무 — Application plus its shift, owned by the café."""
        application: Application = await self._get_application(db, application_id)
        shift: Shift = await shift_service.get_shift_or_404(db, application.shift_id)
        if shift.cafe_id != cafe.id:
            raise AuthorizationError("Not authorized")
        return application, shift

    async def apply(
        self,
        db: AsyncSession,
        employee: User,
        data: ApplicationCreate,
    ) -> ApplicationResponse:
        """근무에 지원합니다.

        Apply for an open shift. One application per (shift, employee),
        enforced by a unique constraint.

        Raises:
            NotFoundError: 근무 없음 (Shift not found)
            ConflictError: 모집 중이 아님, 중복 지원 (Not open, already applied)
            AuthorizationError: 차단 또는 비공개 (Blocked or not visible)
        """
        try:
            shift_id: UUID = UUID(data.shift_id)
        except ValueError:
            raise ValidationError("Invalid shift id", field="shift_id")
        shift: Shift = await shift_service.get_shift_or_404(db, shift_id)

        if shift.status != SHIFT_OPEN:
            raise ConflictError("Shift is not available for applications")
        if await shift_block_repository.is_blocked(db, shift.id, employee.id):
            raise AuthorizationError("You have been blocked from applying to this shift")
        if not staffing_service.is_visible_to(shift, employee.id):
            raise AuthorizationError("This shift is not visible to you")
        if await application_repository.get_for_shift_employee(db, shift.id, employee.id) is not None:
            raise ConflictError("You have already applied for this shift")

        try:
            application: Application = await application_repository.create(db, {
                "shift_id": shift.id,
                "employee_id": employee.id,
                "status": APPLICATION_PENDING,
                "message": data.message,
            })
        except IntegrityError:
            await db.rollback()
            raise ConflictError("You have already applied for this shift")

        logger.info("Employee %s applied for shift %s", employee.id, shift.id)
        return (await self.build_responses(db, [application]))[0]

    async def list_mine(self, db: AsyncSession, employee: User) -> list[ApplicationResponse]:
        applications: list[Application] = await application_repository.get_by_employee(db, employee.id)
        return await self.build_responses(db, applications)

    async def list_for_shift(self, db: AsyncSession, cafe: User, shift_id: UUID) -> list[ApplicationResponse]:
        """근무의 지원서 목록 (소유 카페) — Applications for one of the café's shifts."""
        await shift_service.get_owned_shift(db, cafe, shift_id)
        applications: list[Application] = await application_repository.get_by_shift(db, shift_id)
        return await self.build_responses(db, applications)

    async def accept(
        self,
        db: AsyncSession,
        cafe: User,
        application_id: UUID,
        now: datetime | None = None,
    ) -> ApplicationResponse:
        """지원서를 수락합니다.

        Accept a pending application. The applicant is staffed through the
        shared staffing operation; when that fills the shift, every other
        pending application is rejected with "Shift is now full".

        Raises:
            ConflictError: 대기 중이 아님, 인원 충족, 일정 충돌 (Not pending, full, overlap)
            AuthorizationError: 다른 카페의 근무, 지원자 차단 (Not owner, applicant blocked)
        """
        now = now or utcnow()
        application, shift = await self._get_for_cafe(db, cafe, application_id)
        if application.status != APPLICATION_PENDING:
            raise ConflictError("Application is not pending")

        employee: User | None = await user_repository.get_by_id(db, application.employee_id)
        if employee is None:
            raise NotFoundError("Applicant not found")

        shift = await staffing_service.staff_shift(db, shift, employee)
        application = await application_repository.update(db, application, {
            "status": APPLICATION_ACCEPTED,
            "reviewed_by": cafe.id,
            "reviewed_at": now,
        })

        if shift.status == SHIFT_ACCEPTED:
            rejected: int = await application_repository.reject_pending(
                db, shift.id, SHIFT_FULL_REASON, cafe.id, exclude_id=application.id
            )
            logger.info("Shift %s is full; %d pending applications rejected", shift.id, rejected)
            await shift_service.notify_if_full(db, shift)

        return (await self.build_responses(db, [application]))[0]

    async def reject(
        self,
        db: AsyncSession,
        cafe: User,
        application_id: UUID,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> ApplicationResponse:
        """지원서를 거절합니다 — Reject a pending application."""
        application, _shift = await self._get_for_cafe(db, cafe, application_id)
        if application.status != APPLICATION_PENDING:
            raise ConflictError("Application is not pending")
        application = await application_repository.update(db, application, {
            "status": APPLICATION_REJECTED,
            "rejection_reason": reason or DEFAULT_REJECTION_REASON,
            "reviewed_by": cafe.id,
            "reviewed_at": now or utcnow(),
        })
        return (await self.build_responses(db, [application]))[0]

    async def withdraw(self, db: AsyncSession, employee: User, application_id: UUID) -> ApplicationResponse:
        """지원 철회 (대기 중일 때만) — Withdraw one's own pending application."""
        application: Application = await self._get_application(db, application_id)
        if application.employee_id != employee.id:
            raise AuthorizationError("Not authorized")
        if application.status != APPLICATION_PENDING:
            raise ConflictError("Can only withdraw pending applications")
        application = await application_repository.update(db, application, {"status": APPLICATION_WITHDRAWN})
        return (await self.build_responses(db, [application]))[0]


# 싱글턴 인스턴스 — Singleton instance
application_service: ApplicationService = ApplicationService()
