"""근무 가격 엔진 — 순수 함수 모음.

Shift pricing engine. Pure, stateless functions over "HH:MM" strings,
rates and headcounts. Configuration arrives as a PricingConfig value object
resolved once per operation, so every function here is deterministic.

All monetary outputs are Decimal rounded half-up to the cent.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from app.utils.exceptions import ValidationError
from app.utils.shift_time import is_valid_hhmm, to_minutes

CENT: Decimal = Decimal("0.01")
HUNDRED: Decimal = Decimal("100")

# 수수료 방식 — Fee models
FEE_MODEL_FIXED: str = "fixed"
FEE_MODEL_PERCENTAGE: str = "percentage"


@dataclass(frozen=True)
class PricingConfig:
    """가격 계산에 필요한 설정 값 객체.

    Immutable pricing configuration. Built by platform_service from the
    platform_configs row with settings.DEFAULT_* fallbacks.

    Attributes:
        fee_model: 수수료 방식 ("fixed" | "percentage")
        platform_fee_per_shift: 고정 수수료 (Flat fee per shift)
        free_shifts_per_cafe: 수수료 면제 근무 수 (Fee-free shifts per café)
        platform_fee_percentage: 비율 수수료 (Fee percent of base amount)
        minimum_hours_before_shift: 최소 게시 선행 시간 (Minimum lead time in hours)
        tier_floor_under_12h: 12시간 미만 최저 시급 (Floor when posted <12h ahead)
        tier_floor_12_to_24h: 12~24시간 최저 시급 (Floor when posted 12-24h ahead)
        tier_floor_24h_plus: 24시간 이상 최저 시급 (Floor when posted >=24h ahead)
        cafe_penalty_percentage: 카페 위약금 비율 (Café-side penalty percent)
        employee_penalty_percentage: 직원 위약금 비율 (Employee-side penalty percent)
        employee_price_deduction_percentage: 직원 표시 단가 차감 비율
    """

    fee_model: str = FEE_MODEL_FIXED
    platform_fee_per_shift: Decimal = Decimal("10")
    free_shifts_per_cafe: int = 2
    platform_fee_percentage: Decimal = Decimal("10")
    minimum_hours_before_shift: int = 3
    tier_floor_under_12h: Decimal = Decimal("17")
    tier_floor_12_to_24h: Decimal = Decimal("16")
    tier_floor_24h_plus: Decimal = Decimal("14")
    cafe_penalty_percentage: Decimal = Decimal("50")
    employee_penalty_percentage: Decimal = Decimal("50")
    employee_price_deduction_percentage: Decimal = Decimal("25")


@dataclass(frozen=True)
class ShiftCost:
    """근무 비용 계산 결과 — Result of a cost calculation."""

    hours: Decimal
    base_amount: Decimal
    platform_fee: Decimal
    total: Decimal


def round2(value: Decimal | int | float | str) -> Decimal:
    """센트 단위 반올림 (ROUND_HALF_UP) — Round half-up to 2 decimal places."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def shift_hours(start_time: str, end_time: str) -> Decimal:
    """근무 시간(시간 단위)을 계산합니다.

    Duration in hours = (end minutes - start minutes) / 60.
    Shifts crossing midnight are not supported: end must be later than start
    on the same calendar day.

    Raises:
        ValidationError: 형식 오류 또는 종료 <= 시작 (Malformed time or end <= start)
    """
    if not is_valid_hhmm(start_time):
        raise ValidationError("Start time must be in HH:MM format", field="start_time")
    if not is_valid_hhmm(end_time):
        raise ValidationError("End time must be in HH:MM format", field="end_time")
    minutes: int = to_minutes(end_time) - to_minutes(start_time)
    if minutes <= 0:
        raise ValidationError("End time must be after start time", field="end_time")
    return Decimal(minutes) / Decimal(60)


def base_amount(hours: Decimal, hourly_rate: Decimal, headcount: int) -> Decimal:
    return round2(hours * Decimal(hourly_rate) * headcount)


def calculate_shift_cost(
    start_time: str,
    end_time: str,
    hourly_rate: Decimal,
    fee_percent: Decimal,
    headcount: int,
) -> ShiftCost:
    """비율 수수료 모델의 근무 비용 — Percentage fee model.

    base = hours x rate x headcount, fee = base x fee_percent / 100,
    total = base + fee.
    """
    hours: Decimal = shift_hours(start_time, end_time)
    base: Decimal = base_amount(hours, hourly_rate, headcount)
    fee: Decimal = round2(base * Decimal(fee_percent) / HUNDRED)
    return ShiftCost(hours=hours, base_amount=base, platform_fee=fee, total=base + fee)


def calculate_fixed_fee_cost(
    start_time: str,
    end_time: str,
    hourly_rate: Decimal,
    headcount: int,
    fixed_fee: Decimal,
) -> ShiftCost:
    """고정 수수료 모델의 근무 비용 — Fixed fee model, independent of duration and headcount."""
    hours: Decimal = shift_hours(start_time, end_time)
    base: Decimal = base_amount(hours, hourly_rate, headcount)
    fee: Decimal = round2(fixed_fee)
    return ShiftCost(hours=hours, base_amount=base, platform_fee=fee, total=base + fee)


def fixed_platform_fee(config: PricingConfig, previous_shift_count: int) -> Decimal:
    """카페의 첫 N개 근무는 수수료 면제 — First N shifts per café are fee-free."""
    if previous_shift_count < config.free_shifts_per_cafe:
        return Decimal("0.00")
    return round2(config.platform_fee_per_shift)


def price_shift(
    config: PricingConfig,
    start_time: str,
    end_time: str,
    hourly_rate: Decimal,
    headcount: int,
    previous_shift_count: int,
) -> ShiftCost:
    """설정된 수수료 방식으로 근무 비용을 계산합니다.

    Price a new shift using the configured fee model.

    Args:
        config: 가격 설정 (Pricing configuration)
        start_time: 시작 "HH:MM" (Start time of day)
        end_time: 종료 "HH:MM" (End time of day)
        hourly_rate: 카페 시급 (Café-facing hourly rate)
        headcount: 필요 인원 (Required employees)
        previous_shift_count: 이 카페가 이미 게시한 근무 수 (Shifts the café already posted)

    Returns:
        ShiftCost: 시간, 기본금액, 수수료, 합계 (Hours, base, fee, total)
    """
    if config.fee_model == FEE_MODEL_PERCENTAGE:
        return calculate_shift_cost(
            start_time, end_time, hourly_rate, config.platform_fee_percentage, headcount
        )
    return calculate_fixed_fee_cost(
        start_time, end_time, hourly_rate, headcount,
        fixed_platform_fee(config, previous_shift_count),
    )


def penalty(amount: Decimal, penalty_percent: Decimal) -> Decimal:
    """위약금 = round2(amount x percent / 100) — Penalty on an amount."""
    return round2(Decimal(amount) * Decimal(penalty_percent) / HUNDRED)


def tier_floor(config: PricingConfig, hours_until_start: float) -> Decimal:
    """게시 시점 기준 최저 시급.

    Minimum base rate for a shift posted hours_until_start ahead of its start.
    Less notice costs more: <12h highest floor, 12-24h middle, >=24h lowest.
    """
    if hours_until_start >= 24:
        return round2(config.tier_floor_24h_plus)
    if hours_until_start >= 12:
        return round2(config.tier_floor_12_to_24h)
    return round2(config.tier_floor_under_12h)


def resolve_hourly_rate(
    config: PricingConfig,
    requested_rate: Decimal | None,
    hours_until_start: float,
) -> Decimal:
    """요청 시급을 검증하고 기본값을 적용합니다.

    Validate a café's custom rate against the tier floor, or default to the
    floor when no rate was given.

    Raises:
        ValidationError: 시급이 최저 시급보다 낮을 때 (Rate below the tier floor)
    """
    floor: Decimal = tier_floor(config, hours_until_start)
    if requested_rate is None:
        return floor
    rate: Decimal = round2(requested_rate)
    if rate < floor:
        raise ValidationError(
            f"Price per hour cannot be less than £{floor} (minimum for this posting time).",
            field="hourly_rate",
        )
    return rate
