"""인보이스 Pydantic 스키마 정의.

Invoice Pydantic request/response schema definitions.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.schemas.common import Money


class InvoiceGenerateRequest(BaseModel):
    """인보이스 생성 요청 — Generate the invoice of a completed shift."""

    shift_id: str


class InvoiceAdminUpdate(BaseModel):
    """관리자 인보이스 수정 — 합계는 자동 재계산.

    Admin invoice adjustment; the total is recomputed.
    """

    platform_fee: Decimal | None = Field(default=None, ge=0)
    penalty_amount: Decimal | None = Field(default=None, ge=0)


class RejectProofRequest(BaseModel):
    """결제 증빙 반려 요청 — Reject a submitted payment proof."""

    reason: str = Field(min_length=1, max_length=1000)


class InvoiceResponse(BaseModel):
    """인보이스 응답 스키마.

    Invoice response schema.
    """

    id: str
    invoice_number: str
    cafe_id: str
    cafe_name: str | None = None
    shift_id: str
    shift_date: date
    start_time: str
    end_time: str
    hours: Money
    employees_count: int
    hourly_rate: Money
    base_amount: Money
    platform_fee: Money
    penalty_amount: Money
    total_amount: Money
    status: str
    approved_at: datetime | None = None
    paid_at: datetime | None = None
    payment_proof: str | None = None
    payment_proof_submitted_at: datetime | None = None
    payment_proof_notes: str | None = None
    payment_proof_rejection_reason: str | None = None
    payment_proof_rejected_at: datetime | None = None
    created_at: datetime
