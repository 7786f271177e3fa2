"""근무 레포지토리 — 근무 조회 및 원자적 상태 갱신 쿼리.

Shift Repository — Queries for shifts, including the conditional UPDATE
statements that enforce the headcount and status invariants at the storage
layer.
"""

from datetime import date, datetime, timezone
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.shift import (
    SHIFT_ACCEPTED, SHIFT_COMPLETED, SHIFT_OPEN, Shift, ShiftAssignment, ShiftBlock,
)
from app.repositories.base import BaseRepository


class ShiftRepository(BaseRepository[Shift]):
    """근무 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the shifts table.
    """

    def __init__(self) -> None:
        super().__init__(Shift)

    async def get_by_cafe(
        self,
        db: AsyncSession,
        cafe_id: UUID,
        statuses: Sequence[str] | None = None,
    ) -> list[Shift]:
        """카페의 근무 목록을 날짜순으로 조회합니다.

        Retrieve a café's shifts ordered by date and start time.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            cafe_id: 카페 ID (Café UUID)
            statuses: 상태 필터, None이면 전체 (Status filter; None for all)

        Returns:
            list[Shift]: 근무 목록 (Shifts)
        """
        query: Select = select(Shift).where(Shift.cafe_id == cafe_id)
        if statuses:
            query = query.where(Shift.status.in_(statuses))
        query = query.order_by(Shift.date, Shift.start_time)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_filtered(
        self,
        db: AsyncSession,
        status: str | None = None,
        cafe_id: UUID | None = None,
    ) -> list[Shift]:
        """관리자용 전체 근무 조회 — All shifts for admins, newest date first."""
        query: Select = select(Shift)
        if status:
            query = query.where(Shift.status == status)
        if cafe_id:
            query = query.where(Shift.cafe_id == cafe_id)
        query = query.order_by(Shift.date.desc(), Shift.start_time)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_open_not_blocked(
        self,
        db: AsyncSession,
        employee_id: UUID,
        from_date: date,
    ) -> list[Shift]:
        """직원이 차단되지 않은 모집 중 근무를 조회합니다.

        Retrieve open shifts from from_date onward that the employee is not
        blocked from. Allow-list visibility is applied by the service.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            employee_id: 직원 ID (Employee UUID)
            from_date: 조회 시작일 (First date to include)

        Returns:
            list[Shift]: 근무 목록 (Shifts)
        """
        blocked = select(ShiftBlock.shift_id).where(ShiftBlock.employee_id == employee_id)
        query: Select = (
            select(Shift)
            .where(
                Shift.status == SHIFT_OPEN,
                Shift.date >= from_date,
                Shift.id.not_in(blocked),
            )
            .order_by(Shift.date, Shift.start_time)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_for_employee(
        self,
        db: AsyncSession,
        employee_id: UUID,
        statuses: Sequence[str],
        on_date: date | None = None,
        from_date: date | None = None,
    ) -> list[Shift]:
        """직원이 확정된 근무를 조회합니다.

        Retrieve shifts the employee holds a slot on.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            employee_id: 직원 ID (Employee UUID)
            statuses: 포함할 상태 (Statuses to include)
            on_date: 특정 날짜만 (Only this date)
            from_date: 이 날짜 이후만 (Only from this date onward)

        Returns:
            list[Shift]: 근무 목록 (Shifts ordered by date and start time)
        """
        query: Select = (
            select(Shift)
            .join(ShiftAssignment, ShiftAssignment.shift_id == Shift.id)
            .where(ShiftAssignment.employee_id == employee_id, Shift.status.in_(statuses))
        )
        if on_date is not None:
            query = query.where(Shift.date == on_date)
        if from_date is not None:
            query = query.where(Shift.date >= from_date)
        query = query.order_by(Shift.date, Shift.start_time)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_completed_with_employees(
        self,
        db: AsyncSession,
        date_from: date | None = None,
        date_to: date | None = None,
        employee_ids: Sequence[UUID] | None = None,
    ) -> list[tuple[Shift, UUID]]:
        """완료된 근무와 근무한 직원 쌍을 조회합니다.

        Retrieve (shift, employee_id) pairs for completed shifts, one pair per
        employee who held a slot.
        """
        query: Select = (
            select(Shift, ShiftAssignment.employee_id)
            .join(ShiftAssignment, ShiftAssignment.shift_id == Shift.id)
            .where(Shift.status == SHIFT_COMPLETED)
        )
        if date_from is not None:
            query = query.where(Shift.date >= date_from)
        if date_to is not None:
            query = query.where(Shift.date <= date_to)
        if employee_ids:
            query = query.where(ShiftAssignment.employee_id.in_(employee_ids))
        query = query.order_by(Shift.date, Shift.start_time)
        result = await db.execute(query)
        return [(row[0], row[1]) for row in result.all()]

    async def get_auto_complete_candidate_ids(
        self,
        db: AsyncSession,
        on_or_before: date,
    ) -> list[UUID]:
        """종료되었을 수 있는 확정 근무 ID 목록.

        IDs of accepted shifts dated on or before on_or_before; the exact
        end-time check happens per shift.
        """
        query: Select = (
            select(Shift.id)
            .where(Shift.status == SHIFT_ACCEPTED, Shift.date <= on_or_before)
            .order_by(Shift.date, Shift.end_time)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def count_by_cafe(self, db: AsyncSession, cafe_id: UUID) -> int:
        result = await db.execute(select(func.count()).select_from(Shift).where(Shift.cafe_id == cafe_id))
        return result.scalar() or 0

    async def claim_slot(self, db: AsyncSession, shift_id: UUID) -> bool:
        """빈 자리가 있을 때만 확정 인원을 1 증가시킵니다.

        Atomically take one slot: increments accepted_count only while the
        shift is open and below capacity, flipping status to accepted when the
        last slot is taken. Concurrent claimants for the last slot are
        serialised by the database; the loser updates zero rows.

        Returns:
            bool: 자리 확보 여부 (Whether a slot was taken)
        """
        stmt = (
            update(Shift)
            .where(
                Shift.id == shift_id,
                Shift.status == SHIFT_OPEN,
                Shift.accepted_count < Shift.required_employees,
            )
            .values(
                accepted_count=Shift.accepted_count + 1,
                status=case(
                    (Shift.accepted_count + 1 >= Shift.required_employees, SHIFT_ACCEPTED),
                    else_=SHIFT_OPEN,
                ),
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        return result.rowcount == 1

    async def release_slot(self, db: AsyncSession, shift_id: UUID) -> bool:
        """확정 인원을 1 감소시키고 가득 찬 근무를 다시 모집 상태로 돌립니다.

        Atomically give back one slot; an accepted shift drops back to open.
        Other statuses are left unchanged.
        """
        stmt = (
            update(Shift)
            .where(Shift.id == shift_id, Shift.accepted_count > 0)
            .values(
                accepted_count=Shift.accepted_count - 1,
                status=case(
                    (Shift.status == SHIFT_ACCEPTED, SHIFT_OPEN),
                    else_=Shift.status,
                ),
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        return result.rowcount == 1

    async def transition_status(
        self,
        db: AsyncSession,
        shift_id: UUID,
        from_statuses: Sequence[str],
        to_status: str,
    ) -> bool:
        """현재 상태가 from_statuses일 때만 상태를 변경합니다.

        Conditional status transition; returns False when another actor
        already moved the shift.
        """
        stmt = (
            update(Shift)
            .where(Shift.id == shift_id, Shift.status.in_(from_statuses))
            .values(status=to_status, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        return result.rowcount == 1


# 싱글턴 인스턴스 — Singleton instance
shift_repository: ShiftRepository = ShiftRepository()
