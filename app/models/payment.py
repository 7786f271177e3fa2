"""직원 주간 지급 SQLAlchemy ORM 모델 정의.

Employee weekly payment SQLAlchemy ORM model definition.
Platform → employee settlement, independent of café invoices.

Tables:
    - employee_week_payments: 직원별 주간 지급 기록 (One row per employee per ISO week)
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from sqlalchemy import JSON, Date, DateTime, ForeignKey, Numeric, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# 지급 상태 — Payment statuses
PAYMENT_PENDING: str = "pending"
PAYMENT_PAID: str = "paid"


class EmployeeWeekPayment(Base):
    """직원 주간 지급 모델.

    Weekly settlement record. amount is the sum of hours x effective rate over
    the employee's completed shifts in the week, recomputed when marked paid.

    Constraints:
        uq_week_payment_employee_week: 직원당 주 1건 (One record per employee and week)
    """

    __tablename__ = "employee_week_payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 직원 FK — Paid employee
    employee_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # 주 시작일 — Monday of the ISO week (시각 정보 없음, date only)
    week_start: Mapped[date] = mapped_column(Date, nullable=False)
    # 지급 금액 — Aggregate amount
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    # 포함 근무 — Contributing shift UUID strings (감사용, for auditability)
    shift_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    # 상태 — pending | paid
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=PAYMENT_PENDING)
    payment_proof: Mapped[str | None] = mapped_column(String(500), nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 지급 처리 관리자 — Admin who marked the week paid
    paid_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("employee_id", "week_start", name="uq_week_payment_employee_week"),
    )
