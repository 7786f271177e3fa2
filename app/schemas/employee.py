"""직원 셀프서비스 Pydantic 스키마 정의.

Employee self-service schema definitions (schedule, history, earnings).
"""

from datetime import date

from pydantic import BaseModel

from app.schemas.common import Money


class EmployeeHistoryItem(BaseModel):
    """근무 이력 항목 — A completed or cancelled shift with earnings."""

    shift_id: str
    cafe_name: str | None = None
    date: date
    start_time: str
    end_time: str
    status: str
    hours: Money
    hourly_rate: Money
    earnings: Money


class EarningsSummary(BaseModel):
    """수입 요약 — Totals over completed shifts."""

    total_earnings: Money
    total_hours: Money
    total_shifts: int
    average_earnings_per_shift: Money
