"""직원 셀프서비스 — 내 일정, 근무 이력, 수입 요약.

Employee self-service — upcoming schedule, shift history and earnings.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.shift import SHIFT_CANCELLED, SHIFT_COMPLETED, STAFFABLE_STATUSES, Shift
from app.models.user import User
from app.repositories.shift_repository import shift_repository
from app.repositories.user_repository import user_repository
from app.schemas.employee import EarningsSummary, EmployeeHistoryItem
from app.schemas.shift import EmployeeShiftResponse
from app.services.shift_service import shift_service
from app.utils.pricing import round2, shift_hours
from app.utils.shift_time import local_today


class EmployeeService:
    """직원 셀프서비스 — Employee self-service views."""

    async def get_schedule(
        self,
        db: AsyncSession,
        employee: User,
        now: datetime | None = None,
    ) -> list[EmployeeShiftResponse]:
        """오늘 이후 확정된 근무 — Upcoming open/accepted shifts the employee holds."""
        shifts: list[Shift] = await shift_repository.get_for_employee(
            db, employee.id, STAFFABLE_STATUSES, from_date=local_today(now)
        )
        return await shift_service.build_employee_responses(db, shifts, employee.id)

    async def get_history(self, db: AsyncSession, employee: User) -> list[EmployeeHistoryItem]:
        """완료/취소된 근무 이력 — Completed and cancelled shifts, newest first."""
        shifts: list[Shift] = await shift_repository.get_for_employee(
            db, employee.id, (SHIFT_COMPLETED, SHIFT_CANCELLED)
        )
        cafes: dict[UUID, User] = await user_repository.get_by_ids(db, [s.cafe_id for s in shifts])

        items: list[EmployeeHistoryItem] = []
        for shift in reversed(shifts):
            hours: Decimal = shift_hours(shift.start_time, shift.end_time)
            rate: Decimal = round2(shift.effective_employee_rate)
            earned: Decimal = round2(hours * rate) if shift.status == SHIFT_COMPLETED else Decimal("0.00")
            cafe: User | None = cafes.get(shift.cafe_id)
            items.append(EmployeeHistoryItem(
                shift_id=str(shift.id),
                cafe_name=cafe.display_name if cafe else None,
                date=shift.date,
                start_time=shift.start_time,
                end_time=shift.end_time,
                status=shift.status,
                hours=round2(hours),
                hourly_rate=rate,
                earnings=earned,
            ))
        return items

    async def get_earnings(self, db: AsyncSession, employee: User) -> EarningsSummary:
        """수입 요약 (완료된 근무만) — Totals over completed shifts."""
        shifts: list[Shift] = await shift_repository.get_for_employee(db, employee.id, (SHIFT_COMPLETED,))
        total_hours: Decimal = Decimal("0")
        total_earnings: Decimal = Decimal("0")
        for shift in shifts:
            hours: Decimal = shift_hours(shift.start_time, shift.end_time)
            total_hours += hours
            total_earnings += round2(hours * shift.effective_employee_rate)

        count: int = len(shifts)
        return EarningsSummary(
            total_earnings=round2(total_earnings),
            total_hours=round2(total_hours),
            total_shifts=count,
            average_earnings_per_shift=round2(total_earnings / count) if count else Decimal("0.00"),
        )


# 싱글턴 인스턴스 — Singleton instance
employee_service: EmployeeService = EmployeeService()
