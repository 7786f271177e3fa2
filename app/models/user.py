"""사용자 관련 SQLAlchemy ORM 모델 정의.

User SQLAlchemy ORM model definition.
Accounts are provisioned by the external identity service; this table keeps
only what the marketplace needs: role, approval status and contact details.

Tables:
    - users: 사용자 계정 (admin / employee / cafe accounts)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# 역할 — Roles
ROLE_ADMIN: str = "admin"
ROLE_EMPLOYEE: str = "employee"
ROLE_CAFE: str = "cafe"

# 승인 상태 — Approval statuses
APPROVAL_PENDING: str = "pending"
APPROVAL_APPROVED: str = "approved"
APPROVAL_REJECTED: str = "rejected"


class User(Base):
    """사용자 모델 — 관리자, 직원, 카페 계정.

    User model — admin, employee or café account.
    Only approved employees and cafés may use the marketplace.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        email: 이메일 (Email address, unique)
        full_name: 실명 (Full display name)
        shop_name: 카페 상호 (Café shop name, cafés only)
        role: 역할 (admin | employee | cafe)
        approval_status: 승인 상태 (pending | approved | rejected)
        is_active: 활성 상태 (Active status, soft-delete pattern)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — User unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 이메일 — Email address (알림 발송 대상, notification target)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    # 실명 — User's full display name
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 카페 상호 — Café shop name (직원/관리자는 NULL)
    shop_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 역할 — admin | employee | cafe
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    # 승인 상태 — pending | approved | rejected
    approval_status: Mapped[str] = mapped_column(String(20), nullable=False, default=APPROVAL_PENDING)
    # 활성 상태 — Whether the user account is active
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    @property
    def display_name(self) -> str:
        return self.shop_name or self.full_name
