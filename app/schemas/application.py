"""근무 지원서 Pydantic 스키마 정의.

Application Pydantic request/response schema definitions.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


class ApplicationCreate(BaseModel):
    """지원서 생성 요청 — Apply for a shift."""

    shift_id: str  # 대상 근무 UUID (Target shift UUID)
    message: str | None = Field(default=None, max_length=2000)


class ApplicationReject(BaseModel):
    """지원서 거절 요청 — Optional reason, defaults to "Application rejected"."""

    reason: str | None = Field(default=None, max_length=1000)


class ApplicationResponse(BaseModel):
    """지원서 응답 스키마.

    Application response schema with a short shift summary.
    """

    id: str
    shift_id: str
    employee_id: str
    employee_name: str | None = None
    status: str
    message: str | None = None
    rejection_reason: str | None = None
    reviewed_at: datetime | None = None
    created_at: datetime
    shift_date: date | None = None
    shift_start_time: str | None = None
    shift_end_time: str | None = None
    shift_status: str | None = None
