"""근무(시프트) 관련 SQLAlchemy ORM 모델 정의.

Shift SQLAlchemy ORM model definitions.
A shift is posted by a café, approved by an admin, claimed by employees,
and finally completed or cancelled.

Tables:
    - shifts: 근무 게시물 (Posted shifts with pricing and penalty fields)
    - shift_assignments: 근무 확정 직원 (Employees who accepted a shift)
    - shift_blocks: 근무별 차단 직원 (Employees permanently excluded from a shift)

Status flow:
    pending_approval → open → accepted → completed
    open/accepted → cancelled | paused
"""

import datetime as dt
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import (
    JSON, Boolean, CheckConstraint, Date, DateTime, Float, ForeignKey, Index,
    Integer, Numeric, String, Text, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# 근무 상태 — Shift statuses
SHIFT_PENDING_APPROVAL: str = "pending_approval"
SHIFT_OPEN: str = "open"
SHIFT_ACCEPTED: str = "accepted"
SHIFT_COMPLETED: str = "completed"
SHIFT_CANCELLED: str = "cancelled"
SHIFT_PAUSED: str = "paused"

# 인원 모집 중인 상태 — Statuses in which the headcount can still change
STAFFABLE_STATUSES: tuple[str, ...] = (SHIFT_OPEN, SHIFT_ACCEPTED)
# 종료 상태 — Terminal statuses
TERMINAL_STATUSES: tuple[str, ...] = (SHIFT_COMPLETED, SHIFT_CANCELLED)

# 공개 범위 — Visibility modes
VISIBILITY_ALL: str = "all"
VISIBILITY_SELECTED: str = "selected"


class Shift(Base):
    """근무 모델 — 카페가 게시한 시간제 근무.

    Shift model — an hourly shift posted by a café.

    Cost fields are always derived from (rate, duration, headcount, fee) and
    recomputed whenever one of those inputs changes. accepted_count mirrors
    the number of shift_assignments rows and is the column the atomic claim
    update is conditioned on.

    Constraints:
        ck_shift_accepted_count: 0 <= accepted_count <= required_employees
        ck_shift_required_employees: required_employees >= 1
    """

    __tablename__ = "shifts"

    # 근무 고유 식별자 — Shift unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 게시 카페 FK — Posting café
    cafe_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # 근무 날짜 — Local calendar date
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    # 시작/종료 시각 — Local "HH:MM" (자정 넘김 미지원, no overnight wrap)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    # 필요 인원 — Required headcount
    required_employees: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # 확정 인원 — Accepted headcount (shift_assignments 행 수와 동일)
    accepted_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 상태 — pending_approval | open | accepted | completed | cancelled | paused
    status: Mapped[str] = mapped_column(String(30), nullable=False, default=SHIFT_PENDING_APPROVAL)

    # 카페 시급 — Café-facing base hourly rate
    base_hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    # 직원 시급 — Admin-set employee-facing rate (있으면 기본 시급 대신 사용)
    employee_hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    # 플랫폼 수수료 — Platform fee fixed at creation
    platform_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    # 총 비용 — base + fee
    total_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))

    # 카페 위약금 — Café-side late-cancellation penalty
    penalty_applied: Mapped[bool] = mapped_column(Boolean, default=False)
    penalty_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    # 직원 위약금 — Employee-side penalty, accumulated across late withdrawals
    employee_penalty_applied: Mapped[bool] = mapped_column(Boolean, default=False)
    employee_penalty_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))

    # 위치 — Optional geolocation
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    place_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # 결제 증빙 — Storage reference of the café's payment proof
    payment_proof: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # 공개 범위 — all | selected (visible_to: 허용 직원 UUID 문자열 목록)
    visibility: Mapped[str] = mapped_column(String(20), nullable=False, default=VISIBILITY_ALL)
    visible_to: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # 생성 일시 — Record creation timestamp (UTC, 당일 게시 판단 기준)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint(
            "accepted_count >= 0 AND accepted_count <= required_employees",
            name="ck_shift_accepted_count",
        ),
        CheckConstraint("required_employees >= 1", name="ck_shift_required_employees"),
        Index("ix_shifts_status_date", "status", "date"),
        Index("ix_shifts_cafe", "cafe_id"),
    )

    @property
    def effective_employee_rate(self) -> Decimal:
        """직원에게 적용되는 시급 — Employee rate if set, else the base rate."""
        if self.employee_hourly_rate is not None:
            return self.employee_hourly_rate
        return self.base_hourly_rate


class ShiftAssignment(Base):
    """근무 확정 모델 — 근무를 수락한 직원.

    Shift assignment — one row per employee holding a slot on a shift.

    Constraints:
        uq_shift_assignment: 근무당 직원 1회 (One slot per employee per shift)
    """

    __tablename__ = "shift_assignments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 근무 FK — Parent shift (CASCADE)
    shift_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False)
    # 직원 FK — Employee holding the slot
    employee_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # 수락 일시 — When the slot was claimed (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("shift_id", "employee_id", name="uq_shift_assignment"),
        Index("ix_shift_assignments_employee", "employee_id"),
    )


class ShiftBlock(Base):
    """근무 차단 모델 — 카페가 거절한 직원의 영구 제외.

    Shift block — a permanent per-shift exclusion created when a café rejects
    or removes an employee.

    Constraints:
        uq_shift_block: 근무당 직원 1회 (One block per employee per shift)
    """

    __tablename__ = "shift_blocks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shift_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False)
    employee_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # 차단 사유 — Rejection reason shown to admins
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("shift_id", "employee_id", name="uq_shift_block"),
    )
