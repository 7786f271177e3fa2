"""근무 확정/차단 레포지토리.

Shift assignment and block repositories — the accepted-employee and
blocked-employee lists of a shift.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.shift import ShiftAssignment, ShiftBlock
from app.repositories.base import BaseRepository


class ShiftAssignmentRepository(BaseRepository[ShiftAssignment]):
    """근무 확정 직원 레포지토리 — Accepted-employee rows."""

    def __init__(self) -> None:
        super().__init__(ShiftAssignment)

    async def get_employee_ids_by_shifts(
        self,
        db: AsyncSession,
        shift_ids: Sequence[UUID],
    ) -> dict[UUID, list[UUID]]:
        """여러 근무의 확정 직원을 한 번에 조회 — Accepted employees for many shifts."""
        mapping: dict[UUID, list[UUID]] = {shift_id: [] for shift_id in shift_ids}
        if not shift_ids:
            return mapping
        query: Select = (
            select(ShiftAssignment.shift_id, ShiftAssignment.employee_id)
            .where(ShiftAssignment.shift_id.in_(shift_ids))
            .order_by(ShiftAssignment.created_at)
        )
        result = await db.execute(query)
        for shift_id, employee_id in result.all():
            mapping.setdefault(shift_id, []).append(employee_id)
        return mapping

    async def is_assigned(self, db: AsyncSession, shift_id: UUID, employee_id: UUID) -> bool:
        return await self.exists(db, {"shift_id": shift_id, "employee_id": employee_id})

    async def remove(self, db: AsyncSession, shift_id: UUID, employee_id: UUID) -> bool:
        """확정 행 삭제 — Delete the assignment row; False if there was none."""
        result = await db.execute(
            delete(ShiftAssignment).where(
                ShiftAssignment.shift_id == shift_id,
                ShiftAssignment.employee_id == employee_id,
            )
        )
        return result.rowcount == 1

    async def delete_for_shift(self, db: AsyncSession, shift_id: UUID) -> None:
        await db.execute(delete(ShiftAssignment).where(ShiftAssignment.shift_id == shift_id))


class ShiftBlockRepository(BaseRepository[ShiftBlock]):
    """근무 차단 직원 레포지토리 — Blocked-employee rows."""

    def __init__(self) -> None:
        super().__init__(ShiftBlock)

    async def get_by_shift(self, db: AsyncSession, shift_id: UUID) -> list[ShiftBlock]:
        result = await db.execute(
            select(ShiftBlock).where(ShiftBlock.shift_id == shift_id).order_by(ShiftBlock.created_at)
        )
        return list(result.scalars().all())

    async def get_by_shifts(
        self,
        db: AsyncSession,
        shift_ids: Sequence[UUID],
    ) -> dict[UUID, list[ShiftBlock]]:
        mapping: dict[UUID, list[ShiftBlock]] = {shift_id: [] for shift_id in shift_ids}
        if not shift_ids:
            return mapping
        result = await db.execute(
            select(ShiftBlock).where(ShiftBlock.shift_id.in_(shift_ids)).order_by(ShiftBlock.created_at)
        )
        for block in result.scalars().all():
            mapping.setdefault(block.shift_id, []).append(block)
        return mapping

    async def is_blocked(self, db: AsyncSession, shift_id: UUID, employee_id: UUID) -> bool:
        return await self.exists(db, {"shift_id": shift_id, "employee_id": employee_id})

    async def block(
        self,
        db: AsyncSession,
        shift_id: UUID,
        employee_id: UUID,
        reason: str | None,
    ) -> ShiftBlock:
        """차단 추가 또는 사유 갱신 — Add a block, or refresh the reason of an existing one."""
        result = await db.execute(
            select(ShiftBlock).where(ShiftBlock.shift_id == shift_id, ShiftBlock.employee_id == employee_id)
        )
        existing: ShiftBlock | None = result.scalar_one_or_none()
        if existing is not None:
            if reason:
                existing.reason = reason
                await db.flush()
            return existing
        return await self.create(db, {"shift_id": shift_id, "employee_id": employee_id, "reason": reason})

    async def delete_for_shift(self, db: AsyncSession, shift_id: UUID) -> None:
        await db.execute(delete(ShiftBlock).where(ShiftBlock.shift_id == shift_id))


# 싱글턴 인스턴스 — Singleton instances
shift_assignment_repository: ShiftAssignmentRepository = ShiftAssignmentRepository()
shift_block_repository: ShiftBlockRepository = ShiftBlockRepository()
