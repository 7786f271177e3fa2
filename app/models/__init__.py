"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
test schema creation.

Modules:
    user: 사용자 (Admin, employee and café accounts)
    shift: 근무, 확정 직원, 차단 직원 (Shifts, assignments, blocks)
    application: 근무 지원서 (Shift applications)
    invoice: 카페 인보이스 (Café invoices)
    payment: 직원 주간 지급 (Employee weekly payments)
    platform: 플랫폼 설정 (Platform configuration)
"""

from app.models.user import User
from app.models.shift import Shift, ShiftAssignment, ShiftBlock
from app.models.application import Application
from app.models.invoice import Invoice
from app.models.payment import EmployeeWeekPayment
from app.models.platform import PlatformConfig

__all__ = [
    "User",
    "Shift", "ShiftAssignment", "ShiftBlock",
    "Application",
    "Invoice",
    "EmployeeWeekPayment",
    "PlatformConfig",
]
