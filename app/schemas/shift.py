"""근무 관련 Pydantic 요청/응답 스키마 정의.

Shift Pydantic request/response schema definitions.
Café and admin views expose the full pricing breakdown; the employee view
exposes only the employee-facing hourly rate.
"""

import datetime as dt
from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from app.schemas.common import Money
from app.utils.shift_time import HHMM_PATTERN


class ShiftLocation(BaseModel):
    """근무 위치 — Optional shift geolocation."""

    address: str | None = None  # 주소 (Street address)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    place_id: str | None = None  # 지도 장소 ID (Maps place id)


class ShiftCreate(BaseModel):
    """근무 생성 요청 스키마.

    Shift creation request schema (cafés only).

    Attributes:
        date: 근무 날짜 (Local shift date)
        start_time: 시작 "HH:MM" (Start time of day)
        end_time: 종료 "HH:MM", 시작보다 늦어야 함 (End time of day, after start)
        required_employees: 필요 인원 (Required headcount)
        hourly_rate: 시급, 생략 시 최저 시급 적용 (Custom rate; defaults to the tier floor)
        description: 설명 (Free-text description)
        location: 위치 (Optional location)
        visibility: 공개 범위 (all | selected)
        visible_to: 공개 직원 목록 (Allow-list when visibility is "selected")
    """

    date: date
    start_time: str = Field(pattern=HHMM_PATTERN)
    end_time: str = Field(pattern=HHMM_PATTERN)
    required_employees: int = Field(default=1, ge=1, le=100)
    hourly_rate: Decimal | None = Field(default=None, gt=0)
    description: str | None = None
    location: ShiftLocation | None = None
    visibility: Literal["all", "selected"] = "all"
    visible_to: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_visibility(self) -> "ShiftCreate":
        if self.visibility == "selected" and not self.visible_to:
            raise ValueError("visible_to must list at least one employee when visibility is 'selected'")
        return self


class ShiftUpdate(BaseModel):
    """근무 수정 요청 스키마 (부분 업데이트, 카페용).

    Shift update request schema (partial update by the owning café).
    """

    date: dt.date | None = None
    start_time: str | None = Field(default=None, pattern=HHMM_PATTERN)
    end_time: str | None = Field(default=None, pattern=HHMM_PATTERN)
    required_employees: int | None = Field(default=None, ge=1, le=100)
    hourly_rate: Decimal | None = Field(default=None, gt=0)
    description: str | None = None
    location: ShiftLocation | None = None


class AdminShiftUpdate(ShiftUpdate):
    """관리자 근무 수정 스키마 — 직원 시급과 공개 범위까지 수정 가능.

    Admin shift update: additionally sets the employee rate and visibility.
    """

    employee_hourly_rate: Decimal | None = Field(default=None, ge=0)
    visibility: Literal["all", "selected"] | None = None
    visible_to: list[str] | None = None


class ShiftApproveRequest(BaseModel):
    """근무 승인 요청 — 직원 시급을 함께 지정할 수 있음.

    Shift approval request; the admin may set the employee-facing rate.
    """

    employee_hourly_rate: Decimal | None = Field(default=None, ge=0)


class RejectEmployeeRequest(BaseModel):
    """확정 직원 거절 요청 — Reject an accepted employee."""

    rejection_reason: str = Field(min_length=1, max_length=1000)


class RemoveEmployeeRequest(BaseModel):
    """확정 직원 제외 요청 — Remove an accepted employee, optionally blocking them."""

    block: bool = False
    reason: str | None = None


class BlockedEmployeeResponse(BaseModel):
    """차단 직원 응답 — Blocked employee with the recorded reason."""

    employee_id: str
    employee_name: str | None = None
    reason: str | None = None


class ShiftResponse(BaseModel):
    """근무 응답 스키마 (카페/관리자용).

    Shift response schema for cafés and admins, with the pricing breakdown.
    """

    id: str
    cafe_id: str
    cafe_name: str | None = None
    date: date
    start_time: str
    end_time: str
    hours: Money
    required_employees: int
    accepted_count: int
    accepted_by: list[str]
    blocked_employees: list[BlockedEmployeeResponse] = []
    description: str | None = None
    status: str
    base_hourly_rate: Money
    employee_hourly_rate: Money | None = None
    platform_fee: Money
    total_cost: Money
    penalty_applied: bool
    penalty_amount: Money
    employee_penalty_applied: bool
    employee_penalty_amount: Money
    location: ShiftLocation | None = None
    payment_proof: str | None = None
    visibility: str
    visible_to: list[str] = []
    created_at: datetime


class EmployeeShiftResponse(BaseModel):
    """근무 응답 스키마 (직원용) — 카페 시급과 수수료는 노출하지 않음.

    Employee-facing shift view; hourly_rate is the effective employee rate.
    """

    id: str
    cafe_id: str
    cafe_name: str | None = None
    date: date
    start_time: str
    end_time: str
    hours: Money
    required_employees: int
    accepted_count: int
    is_accepted: bool = False
    description: str | None = None
    status: str
    hourly_rate: Money
    expected_earnings: Money
    location: ShiftLocation | None = None


class ShiftActionResponse(BaseModel):
    """근무 상태 변경 결과 — Result of a cancel/pause/delete/withdraw action.

    Attributes:
        message: 결과 메시지 (Outcome message)
        status: 변경 후 근무 상태, 삭제 시 None (Shift status afterwards)
        penalty_amount: 이번 작업으로 기록된 위약금 (Penalty recorded by this action)
    """

    message: str
    status: str | None = None
    penalty_amount: Money = Decimal("0.00")
