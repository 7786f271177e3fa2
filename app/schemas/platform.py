"""플랫폼 설정 Pydantic 스키마 정의.

Platform configuration schema definitions, including bank detail
validation per account type.
"""

import re
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from app.schemas.common import Money


class PlatformConfigResponse(BaseModel):
    """적용 중인 플랫폼 설정 — Effective configuration (stored values merged with defaults)."""

    fee_model: str
    platform_fee_per_shift: Money
    free_shifts_per_cafe: int
    platform_fee_percentage: Money
    minimum_hours_before_shift: int
    tier_floor_under_12h: Money
    tier_floor_12_to_24h: Money
    tier_floor_24h_plus: Money
    cafe_penalty_percentage: Money
    employee_penalty_percentage: Money
    employee_price_deduction_percentage: Money


class PlatformConfigUpdate(BaseModel):
    """플랫폼 설정 수정 (부분 업데이트) — Partial update; null resets a key to its default."""

    platform_fee_per_shift: Decimal | None = Field(default=None, ge=0)
    free_shifts_per_cafe: int | None = Field(default=None, ge=0)
    platform_fee_percentage: Decimal | None = Field(default=None, ge=0, le=100)
    minimum_hours_before_shift: int | None = Field(default=None, ge=0)
    tier_floor_under_12h: Decimal | None = Field(default=None, ge=0)
    tier_floor_12_to_24h: Decimal | None = Field(default=None, ge=0)
    tier_floor_24h_plus: Decimal | None = Field(default=None, ge=0)
    cafe_penalty_percentage: Decimal | None = Field(default=None, ge=0, le=100)
    employee_penalty_percentage: Decimal | None = Field(default=None, ge=0, le=100)
    employee_price_deduction_percentage: Decimal | None = Field(default=None, ge=0, le=100)


class ShiftPricingResponse(BaseModel):
    """근무 게시 가격 정보 (카페용) — Pricing rules shown to cafés when posting."""

    minimum_hours_before_shift: int
    tier_floor_under_12h: Money
    tier_floor_12_to_24h: Money
    tier_floor_24h_plus: Money
    fee_model: str
    platform_fee_per_shift: Money
    free_shifts_per_cafe: int
    platform_fee_percentage: Money


class PublicConfigResponse(BaseModel):
    """앱 공개 설정 — Values exposed to every approved user."""

    employee_price_deduction_percentage: Money


_DIGITS = re.compile(r"^\d+$")
_IBAN = re.compile(r"^[A-Z]{2}\d{2}[A-Z0-9]{11,30}$")


class BankDetails(BaseModel):
    """플랫폼 입금 계좌 정보.

    Platform bank details. Required fields depend on type:
        uk_sort_code_account: sort_code (6 digits) + account_number (8 digits)
        iban: iban (15-34 characters)
        ach: routing_number (9 digits) + account_number (4-17 digits)
    """

    type: Literal["uk_sort_code_account", "iban", "ach"]
    account_name: str = Field(min_length=1, max_length=200)
    bank_name: str | None = None
    sort_code: str | None = None
    account_number: str | None = None
    iban: str | None = None
    bic: str | None = None
    routing_number: str | None = None

    @model_validator(mode="after")
    def _check_account_fields(self) -> "BankDetails":
        if self.type == "uk_sort_code_account":
            sort_code = (self.sort_code or "").replace("-", "").replace(" ", "")
            if len(sort_code) != 6 or not _DIGITS.match(sort_code):
                raise ValueError("Sort code must be 6 digits")
            if not self.account_number or len(self.account_number) != 8 or not _DIGITS.match(self.account_number):
                raise ValueError("Account number must be 8 digits")
            self.sort_code = sort_code
        elif self.type == "iban":
            iban = (self.iban or "").replace(" ", "").upper()
            if not 15 <= len(iban) <= 34 or not _IBAN.match(iban):
                raise ValueError("IBAN must be 15-34 characters")
            self.iban = iban
        else:
            if not self.routing_number or len(self.routing_number) != 9 or not _DIGITS.match(self.routing_number):
                raise ValueError("Routing number must be 9 digits")
            if not self.account_number or not 4 <= len(self.account_number) <= 17 or not _DIGITS.match(self.account_number):
                raise ValueError("Account number must be 4-17 digits")
        return self
