"""가격 엔진 및 시간 헬퍼 단위 테스트.

Pricing engine and shift-time helper unit tests (pure functions).
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from app.utils.exceptions import ValidationError
from app.utils.pricing import (
    PricingConfig,
    calculate_fixed_fee_cost,
    calculate_shift_cost,
    fixed_platform_fee,
    penalty,
    price_shift,
    resolve_hourly_rate,
    round2,
    shift_hours,
    tier_floor,
)
from app.utils.shift_time import local_datetime, overlaps, week_start

CONFIG = PricingConfig()


class TestShiftHours:
    """근무 시간 계산 테스트."""

    def test_whole_hours(self):
        """09:00-17:00은 8시간."""
        assert shift_hours("09:00", "17:00") == Decimal(8)

    def test_partial_hours(self):
        """분 단위 근무 시간은 소수로 계산."""
        assert shift_hours("09:15", "10:00") == Decimal(45) / Decimal(60)

    def test_end_before_start_rejected(self):
        """자정을 넘는 근무는 거부."""
        with pytest.raises(ValidationError) as exc:
            shift_hours("22:00", "02:00")
        assert exc.value.detail[0]["msg"] == "End time must be after start time"

    def test_equal_times_rejected(self):
        """시작과 종료가 같으면 거부."""
        with pytest.raises(ValidationError):
            shift_hours("09:00", "09:00")

    def test_malformed_time_rejected(self):
        """HH:MM 형식이 아니면 거부."""
        with pytest.raises(ValidationError):
            shift_hours("9:00", "17:00")


class TestShiftCost:
    """근무 비용 계산 테스트."""

    def test_percentage_model(self):
        """비율 수수료: 8h x £10 x 2명 = 160, 수수료 10% = 16."""
        cost = calculate_shift_cost("09:00", "17:00", Decimal("10"), Decimal("10"), 2)
        assert cost.base_amount == Decimal("160.00")
        assert cost.platform_fee == Decimal("16.00")
        assert cost.total == Decimal("176.00")

    def test_percentage_fee_rounds_half_up(self):
        """수수료는 센트 단위 반올림 (half-up)."""
        # 1.5h x 14.35 = 21.525 → 21.53; 10% = 2.153 → 2.15
        cost = calculate_shift_cost("09:00", "10:30", Decimal("14.35"), Decimal("10"), 1)
        assert cost.base_amount == Decimal("21.53")
        assert cost.platform_fee == Decimal("2.15")

    def test_fixed_model_ignores_duration_and_headcount(self):
        """고정 수수료는 시간과 인원에 무관."""
        short = calculate_fixed_fee_cost("09:00", "10:00", Decimal("14"), 1, Decimal("10"))
        long = calculate_fixed_fee_cost("09:00", "17:00", Decimal("14"), 5, Decimal("10"))
        assert short.platform_fee == long.platform_fee == Decimal("10.00")
        assert long.total == Decimal("570.00")

    def test_first_shifts_are_fee_free(self):
        """카페의 첫 2개 근무는 수수료 면제."""
        assert fixed_platform_fee(CONFIG, 0) == Decimal("0.00")
        assert fixed_platform_fee(CONFIG, 1) == Decimal("0.00")
        assert fixed_platform_fee(CONFIG, 2) == Decimal("10.00")

    def test_price_shift_uses_configured_model(self):
        """price_shift는 설정된 수수료 방식을 따름."""
        fixed = price_shift(CONFIG, "09:00", "13:00", Decimal("15"), 1, 5)
        assert fixed.platform_fee == Decimal("10.00")
        assert fixed.total == Decimal("70.00")

        percent = PricingConfig(fee_model="percentage", platform_fee_percentage=Decimal("20"))
        cost = price_shift(percent, "09:00", "13:00", Decimal("15"), 1, 0)
        assert cost.platform_fee == Decimal("12.00")
        assert cost.total == Decimal("72.00")

    def test_penalty(self):
        """위약금 = 금액 x 비율 / 100."""
        assert penalty(Decimal("70.00"), Decimal("50")) == Decimal("35.00")
        assert penalty(Decimal("0.05"), Decimal("50")) == Decimal("0.03")

    def test_round2(self):
        assert round2("2.675") == Decimal("2.68")
        assert round2(3) == Decimal("3.00")


class TestTierFloor:
    """게시 시점별 최저 시급 테스트."""

    @pytest.mark.parametrize("hours,expected", [
        (3, Decimal("17.00")),
        (11.99, Decimal("17.00")),
        (12, Decimal("16.00")),
        (23.5, Decimal("16.00")),
        (24, Decimal("14.00")),
        (200, Decimal("14.00")),
    ])
    def test_tier_boundaries(self, hours, expected):
        """12시간/24시간 경계."""
        assert tier_floor(CONFIG, hours) == expected

    def test_default_rate_is_floor(self):
        """시급 미지정 시 최저 시급 적용."""
        assert resolve_hourly_rate(CONFIG, None, 30) == Decimal("14.00")

    def test_rate_below_floor_rejected(self):
        """최저 시급 미만은 거부 — 메시지에 최저 금액 포함."""
        with pytest.raises(ValidationError) as exc:
            resolve_hourly_rate(CONFIG, Decimal("15"), 6)
        assert exc.value.detail[0]["msg"] == (
            "Price per hour cannot be less than £17.00 (minimum for this posting time)."
        )
        assert exc.value.detail[0]["loc"][-1] == "hourly_rate"

    def test_rate_at_floor_accepted(self):
        assert resolve_hourly_rate(CONFIG, Decimal("16"), 13) == Decimal("16.00")


class TestShiftTime:
    """시간 헬퍼 테스트."""

    def test_overlaps(self):
        """겹침 판정 — 끝과 시작이 맞닿으면 겹치지 않음."""
        assert overlaps("09:00", "13:00", "12:00", "15:00")
        assert overlaps("09:00", "17:00", "10:00", "11:00")
        assert not overlaps("09:00", "13:00", "13:00", "15:00")

    def test_week_start(self):
        """주의 월요일 — Monday of the ISO week."""
        assert week_start(date(2030, 6, 9)) == date(2030, 6, 3)  # 일요일 → 월요일
        assert week_start(date(2030, 6, 3)) == date(2030, 6, 3)

    def test_local_datetime_utc(self):
        """UTC 설정에서는 현지 시각이 그대로 UTC."""
        assert local_datetime(date(2030, 6, 3), "09:30") == datetime(2030, 6, 3, 9, 30, tzinfo=timezone.utc)

    def test_local_datetime_london_summer_time(self, monkeypatch):
        """런던 여름 시간(BST)은 UTC+1."""
        from app.config import settings
        monkeypatch.setattr(settings, "TIMEZONE", "Europe/London")
        assert local_datetime(date(2030, 6, 3), "09:30") == datetime(2030, 6, 3, 8, 30, tzinfo=timezone.utc)
