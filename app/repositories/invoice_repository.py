"""인보이스 레포지토리.

Invoice Repository — Queries for café invoices.
"""

from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.invoice import INVOICE_DRAFT, Invoice
from app.repositories.base import BaseRepository


class InvoiceRepository(BaseRepository[Invoice]):
    """인보이스 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the invoices table.
    """

    def __init__(self) -> None:
        super().__init__(Invoice)

    async def get_by_shift(self, db: AsyncSession, shift_id: UUID) -> Invoice | None:
        result = await db.execute(select(Invoice).where(Invoice.shift_id == shift_id))
        return result.scalar_one_or_none()

    async def get_for_cafe(self, db: AsyncSession, cafe_id: UUID) -> list[Invoice]:
        """카페 인보이스 목록 — 초안(draft)은 제외.

        A café's invoices, newest first. Drafts are internal until approved.
        """
        query: Select = (
            select(Invoice)
            .where(Invoice.cafe_id == cafe_id, Invoice.status != INVOICE_DRAFT)
            .order_by(Invoice.created_at.desc())
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_filtered(
        self,
        db: AsyncSession,
        status: str | None = None,
        cafe_id: UUID | None = None,
    ) -> list[Invoice]:
        query: Select = select(Invoice)
        if status:
            query = query.where(Invoice.status == status)
        if cafe_id:
            query = query.where(Invoice.cafe_id == cafe_id)
        query = query.order_by(Invoice.created_at.desc())
        result = await db.execute(query)
        return list(result.scalars().all())


# 싱글턴 인스턴스 — Singleton instance
invoice_repository: InvoiceRepository = InvoiceRepository()
