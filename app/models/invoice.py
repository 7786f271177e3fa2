"""인보이스 SQLAlchemy ORM 모델 정의.

Invoice SQLAlchemy ORM model definition.
One invoice per completed shift, billed from the café to the platform.
Shift details are snapshotted at generation time.

Tables:
    - invoices: 카페 청구서 (Café-facing billing records)
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# 인보이스 상태 — Invoice statuses
INVOICE_DRAFT: str = "draft"
INVOICE_APPROVED: str = "approved"
INVOICE_PENDING_VERIFICATION: str = "pending_verification"
INVOICE_PAID: str = "paid"


class Invoice(Base):
    """인보이스 모델 — 완료된 근무의 청구서.

    Invoice model. total_amount = base_amount + platform_fee + penalty_amount
    and is recomputed whenever one of the components changes.

    Status flow (approval mode): draft → approved → pending_verification → paid.
    In prepaid mode invoices are created directly as paid.

    Constraints:
        shift_id unique: 근무당 인보이스 1건 (At most one invoice per shift)
        invoice_number unique
    """

    __tablename__ = "invoices"

    # 인보이스 고유 식별자 — Invoice unique identifier
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 인보이스 번호 — INV-<epoch ms>-<shift id 끝 6자리>
    invoice_number: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    # 카페 FK — Billed café
    cafe_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # 근무 FK — Source shift (unique: 근무당 1건)
    shift_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False, unique=True)

    # 근무 스냅샷 — Shift snapshot at generation time
    shift_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    hours: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    employees_count: Mapped[int] = mapped_column(Integer, nullable=False)
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # 금액 — Amounts
    base_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    platform_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    penalty_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # 상태 — draft | approved | pending_verification | paid
    status: Mapped[str] = mapped_column(String(30), nullable=False, default=INVOICE_DRAFT)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # 결제 증빙 — Payment proof submitted by the café
    payment_proof: Mapped[str | None] = mapped_column(String(500), nullable=True)
    payment_proof_submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    payment_proof_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 증빙 반려 — Rejection metadata for resubmission
    payment_proof_rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    payment_proof_rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
