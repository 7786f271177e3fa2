"""플랫폼 설정 SQLAlchemy ORM 모델 정의.

Platform configuration SQLAlchemy ORM model definition.
A single row keyed "platform". Every pricing column is nullable: NULL means
"use settings.DEFAULT_*".

Tables:
    - platform_configs: 플랫폼 설정 (Fee schedule, tier floors, lead time, bank details)
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import JSON, DateTime, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# 싱글턴 키 — Singleton row key
PLATFORM_CONFIG_KEY: str = "platform"


class PlatformConfig(Base):
    """플랫폼 설정 모델 — 단일 행.

    Platform configuration singleton row.
    """

    __tablename__ = "platform_configs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 싱글턴 키 — Always "platform"
    key: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, default=PLATFORM_CONFIG_KEY)

    # 수수료 — Fee schedule
    platform_fee_per_shift: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    free_shifts_per_cafe: Mapped[int | None] = mapped_column(Integer, nullable=True)
    platform_fee_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)

    # 게시 규칙 — Posting rules
    minimum_hours_before_shift: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tier_floor_under_12h: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    tier_floor_12_to_24h: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    tier_floor_24h_plus: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    # 위약금 — Penalty percentages
    cafe_penalty_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    employee_penalty_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    # 직원 표시 단가 차감 비율 — Employee price deduction shown in apps
    employee_price_deduction_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)

    # 입금 계좌 — Bank details cafés pay into (type: uk_sort_code_account | iban | ach)
    bank_details: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    updated_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
