"""직원 주간 지급 Pydantic 스키마 정의.

Employee weekly payment schema definitions.
"""

from datetime import date, datetime

from pydantic import BaseModel

from app.schemas.common import Money


class EmployeeWeekSummary(BaseModel):
    """주간 직원별 지급 요약 — One employee's totals for a week."""

    employee_id: str
    employee_name: str | None = None
    employee_email: str | None = None
    shift_count: int
    total_hours: Money
    amount: Money
    shift_ids: list[str]
    status: str  # pending | paid
    paid_at: datetime | None = None
    payment_proof: str | None = None


class WeekPaymentPeriod(BaseModel):
    """주간 지급 기간 — One ISO week (Monday to Sunday)."""

    week_start: date
    week_end: date
    total_amount: Money
    employees: list[EmployeeWeekSummary]


class WeekPaymentResponse(BaseModel):
    """지급 처리된 주간 기록 — A stored weekly payment record."""

    id: str
    employee_id: str
    week_start: date
    amount: Money
    shift_ids: list[str]
    status: str
    payment_proof: str | None = None
    paid_at: datetime | None = None
    paid_by: str | None = None
