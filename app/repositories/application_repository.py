"""근무 지원서 레포지토리.

Application Repository — Queries for shift applications.
"""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.application import APPLICATION_PENDING, APPLICATION_REJECTED, Application
from app.repositories.base import BaseRepository


class ApplicationRepository(BaseRepository[Application]):
    """지원서 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the applications table.
    """

    def __init__(self) -> None:
        super().__init__(Application)

    async def get_for_shift_employee(
        self,
        db: AsyncSession,
        shift_id: UUID,
        employee_id: UUID,
    ) -> Application | None:
        query: Select = select(Application).where(
            Application.shift_id == shift_id,
            Application.employee_id == employee_id,
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_shift(self, db: AsyncSession, shift_id: UUID) -> list[Application]:
        query: Select = (
            select(Application)
            .where(Application.shift_id == shift_id)
            .order_by(Application.created_at)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_by_employee(self, db: AsyncSession, employee_id: UUID) -> list[Application]:
        query: Select = (
            select(Application)
            .where(Application.employee_id == employee_id)
            .order_by(Application.created_at.desc())
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def reject_pending(
        self,
        db: AsyncSession,
        shift_id: UUID,
        reason: str,
        reviewer_id: UUID | None,
        employee_id: UUID | None = None,
        exclude_id: UUID | None = None,
    ) -> int:
        """근무의 대기 중 지원서를 일괄 거절합니다.

        Bulk-reject pending applications for a shift.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            shift_id: 근무 ID (Shift UUID)
            reason: 거절 사유 (Rejection reason)
            reviewer_id: 검토자 ID (Reviewer UUID)
            employee_id: 특정 직원만 (Only this employee's application)
            exclude_id: 제외할 지원서 (Application to leave untouched)

        Returns:
            int: 거절된 지원서 수 (Number of rejected applications)
        """
        now: datetime = datetime.now(timezone.utc)
        stmt = update(Application).where(
            Application.shift_id == shift_id,
            Application.status == APPLICATION_PENDING,
        )
        if employee_id is not None:
            stmt = stmt.where(Application.employee_id == employee_id)
        if exclude_id is not None:
            stmt = stmt.where(Application.id != exclude_id)
        stmt = stmt.values(
            status=APPLICATION_REJECTED,
            rejection_reason=reason,
            reviewed_by=reviewer_id,
            reviewed_at=now,
            updated_at=now,
        ).execution_options(synchronize_session=False)
        result = await db.execute(stmt)
        return result.rowcount

    async def delete_for_shift(self, db: AsyncSession, shift_id: UUID) -> None:
        for application in await self.get_by_shift(db, shift_id):
            await db.delete(application)


# 싱글턴 인스턴스 — Singleton instance
application_repository: ApplicationRepository = ApplicationRepository()
