"""근무 인원 확정 서비스 — 직접 수락과 지원서 수락이 공유하는 단일 경로.

Staffing Service — the single "staff shift" operation behind both claim
paths (direct accept and application accept), so the headcount invariant
is enforced in exactly one place.

Eligibility is checked optimistically against the loaded row; the real
guarantee is the conditional UPDATE in shift_repository.claim_slot plus the
unique (shift_id, employee_id) constraint on shift_assignments.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.shift import (
    SHIFT_ACCEPTED, SHIFT_OPEN, STAFFABLE_STATUSES, TERMINAL_STATUSES, VISIBILITY_SELECTED,
    Shift, ShiftAssignment,
)
from app.models.user import User
from app.repositories.assignment_repository import (
    shift_assignment_repository,
    shift_block_repository,
)
from app.repositories.shift_repository import shift_repository
from app.utils.exceptions import AuthorizationError, ConflictError
from app.utils.shift_time import overlaps

logger = logging.getLogger(__name__)


class StaffingService:
    """근무 인원 확정/해제 서비스.

    Service that adds employees to and removes them from a shift.
    """

    def is_visible_to(self, shift: Shift, employee_id: UUID) -> bool:
        """공개 범위 확인 — Whether an allow-list shift includes the employee."""
        if shift.visibility != VISIBILITY_SELECTED:
            return True
        return str(employee_id) in {str(v) for v in (shift.visible_to or [])}

    async def find_schedule_conflict(
        self,
        db: AsyncSession,
        shift: Shift,
        employee_id: UUID,
    ) -> Shift | None:
        """같은 날짜에 시간이 겹치는 직원의 다른 근무를 찾습니다.

        Find another open/accepted shift the employee holds on the same date
        whose time window overlaps this one.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            shift: 수락하려는 근무 (Shift being claimed)
            employee_id: 직원 ID (Employee UUID)

        Returns:
            Shift | None: 겹치는 근무 또는 None (Conflicting shift or None)
        """
        same_day: list[Shift] = await shift_repository.get_for_employee(
            db, employee_id, STAFFABLE_STATUSES, on_date=shift.date
        )
        for other in same_day:
            if other.id == shift.id:
                continue
            if overlaps(shift.start_time, shift.end_time, other.start_time, other.end_time):
                return other
        return None

    async def check_eligibility(self, db: AsyncSession, shift: Shift, employee: User) -> None:
        """근무 수락 가능 여부를 확인합니다.

        Verify an employee may claim a slot on the shift.

        Raises:
            AuthorizationError: 차단되었거나 공개 대상이 아님 (Blocked or not on the allow-list)
            ConflictError: 모집 중이 아님, 이미 수락, 인원 충족, 일정 충돌
                           (Not open, already accepted, full, or schedule overlap)
        """
        if await shift_block_repository.is_blocked(db, shift.id, employee.id):
            raise AuthorizationError("You have been blocked from this shift")
        if await shift_assignment_repository.is_assigned(db, shift.id, employee.id):
            raise ConflictError("You have already accepted this shift")
        if shift.status != SHIFT_OPEN:
            if shift.status == SHIFT_ACCEPTED:
                raise ConflictError("Shift is already full")
            raise ConflictError("Shift is not available")
        if not self.is_visible_to(shift, employee.id):
            raise AuthorizationError("This shift is not visible to you")
        if shift.accepted_count >= shift.required_employees:
            raise ConflictError("Shift is already full")

        conflict: Shift | None = await self.find_schedule_conflict(db, shift, employee.id)
        if conflict is not None:
            raise ConflictError(
                "You have a conflict with an already accepted shift for this time "
                f"({conflict.date.isoformat()} {conflict.start_time}-{conflict.end_time}). "
                "Please cancel that shift first if you want to accept this one."
            )

    async def staff_shift(self, db: AsyncSession, shift: Shift, employee: User) -> Shift:
        """직원을 근무에 확정합니다.

        Give the employee one slot on the shift. Status flips to accepted when
        the last slot is taken.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            shift: 대상 근무 (Target shift)
            employee: 수락하는 직원 (Claiming employee)

        Returns:
            Shift: 갱신된 근무 (Refreshed shift)

        Raises:
            AuthorizationError: 차단 또는 비공개 (Blocked or not visible)
            ConflictError: 자리 없음, 중복 수락, 일정 충돌 (Full, duplicate, overlap)
        """
        await self.check_eligibility(db, shift, employee)

        claimed: bool = await shift_repository.claim_slot(db, shift.id)
        if not claimed:
            # 다른 요청이 마지막 자리를 먼저 가져감 — Lost the race for the last slot
            await db.refresh(shift)
            if shift.status == SHIFT_ACCEPTED or shift.accepted_count >= shift.required_employees:
                raise ConflictError("Shift is already full")
            raise ConflictError("Shift is not available")

        try:
            db.add(ShiftAssignment(shift_id=shift.id, employee_id=employee.id))
            await db.flush()
        except IntegrityError:
            # 같은 직원의 동시 요청 — the slot increment is rolled back too
            await db.rollback()
            raise ConflictError("You have already accepted this shift")

        await db.refresh(shift)
        logger.info(
            "Employee %s staffed shift %s (%d/%d)",
            employee.id, shift.id, shift.accepted_count, shift.required_employees,
        )
        return shift

    def ensure_staffing_mutable(self, shift: Shift) -> None:
        """완료/취소된 근무는 인원 변경 불가 — Terminal shifts keep their staff."""
        if shift.status in TERMINAL_STATUSES:
            raise ConflictError("Cannot change staffing of a completed or cancelled shift")

    async def unstaff_shift(self, db: AsyncSession, shift: Shift, employee_id: UUID) -> bool:
        """직원을 근무에서 해제합니다.

        Remove an employee's slot; an accepted shift returns to open.

        Returns:
            bool: 해제 여부, 확정되지 않은 직원이면 False (False if the employee held no slot)

        Raises:
            ConflictError: 완료 또는 취소된 근무 (Shift is completed or cancelled)
        """
        self.ensure_staffing_mutable(shift)
        removed: bool = await shift_assignment_repository.remove(db, shift.id, employee_id)
        if not removed:
            return False
        await shift_repository.release_slot(db, shift.id)
        await db.refresh(shift)
        logger.info(
            "Employee %s released from shift %s (%d/%d)",
            employee_id, shift.id, shift.accepted_count, shift.required_employees,
        )
        return True


# 싱글턴 인스턴스 — Singleton instance
staffing_service: StaffingService = StaffingService()
