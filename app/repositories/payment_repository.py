"""직원 주간 지급 레포지토리.

Employee Week Payment Repository.
"""

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.payment import EmployeeWeekPayment
from app.repositories.base import BaseRepository


class WeekPaymentRepository(BaseRepository[EmployeeWeekPayment]):
    """주간 지급 테이블 레포지토리 — Repository for employee_week_payments."""

    def __init__(self) -> None:
        super().__init__(EmployeeWeekPayment)

    async def get_for_employee_week(
        self,
        db: AsyncSession,
        employee_id: UUID,
        week_start: date,
    ) -> EmployeeWeekPayment | None:
        query: Select = select(EmployeeWeekPayment).where(
            EmployeeWeekPayment.employee_id == employee_id,
            EmployeeWeekPayment.week_start == week_start,
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_weeks(
        self,
        db: AsyncSession,
        week_starts: Sequence[date],
    ) -> dict[tuple[date, UUID], EmployeeWeekPayment]:
        """주 시작일 목록의 지급 기록 — Records keyed by (week_start, employee_id)."""
        if not week_starts:
            return {}
        query: Select = select(EmployeeWeekPayment).where(
            EmployeeWeekPayment.week_start.in_(set(week_starts))
        )
        result = await db.execute(query)
        return {(p.week_start, p.employee_id): p for p in result.scalars().all()}


# 싱글턴 인스턴스 — Singleton instance
week_payment_repository: WeekPaymentRepository = WeekPaymentRepository()
