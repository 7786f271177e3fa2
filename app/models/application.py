"""근무 지원서 SQLAlchemy ORM 모델 정의.

Application SQLAlchemy ORM model definition.
The formal application path runs alongside direct accept; both end in the
same shift_assignments row.

Tables:
    - applications: 근무 지원서 (One application per employee per shift)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Text, DateTime, ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# 지원 상태 — Application statuses
APPLICATION_PENDING: str = "pending"
APPLICATION_ACCEPTED: str = "accepted"
APPLICATION_REJECTED: str = "rejected"
APPLICATION_WITHDRAWN: str = "withdrawn"


class Application(Base):
    """근무 지원서 모델.

    Application model — an employee's formal request to work a shift.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        shift_id: 대상 근무 FK (Target shift)
        employee_id: 지원 직원 FK (Applying employee)
        status: 상태 (pending | accepted | rejected | withdrawn)
        message: 지원 메시지 (Optional cover message)
        reviewed_by: 검토자 FK (Reviewing café or admin)
        reviewed_at: 검토 일시 (Review timestamp)
        rejection_reason: 거절 사유 (Rejection reason)

    Constraints:
        uq_application_shift_employee: 근무당 직원 1건 (One application per shift and employee)
    """

    __tablename__ = "applications"

    # 지원서 고유 식별자 — Application unique identifier
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 대상 근무 FK — Target shift (CASCADE)
    shift_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False)
    # 지원 직원 FK — Applying employee
    employee_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # 상태 — pending | accepted | rejected | withdrawn
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=APPLICATION_PENDING)
    # 지원 메시지 — Optional cover message
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 검토자 — Reviewer (SET NULL: 검토자 삭제 시 유지)
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 지원 일시 — Applied at (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("shift_id", "employee_id", name="uq_application_shift_employee"),
        Index("ix_applications_employee", "employee_id"),
    )
