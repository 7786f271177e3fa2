"""플랫폼 설정 서비스 — 가격 설정 해석 및 관리자 설정 변경.

Platform Service — Resolves the effective PricingConfig for an operation
and manages the singleton platform configuration row.
"""

import logging
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.platform import PlatformConfig
from app.repositories.platform_config_repository import platform_config_repository
from app.schemas.platform import (
    BankDetails,
    PlatformConfigResponse,
    PlatformConfigUpdate,
    PublicConfigResponse,
    ShiftPricingResponse,
)
from app.utils.exceptions import NotFoundError
from app.utils.pricing import PricingConfig

logger = logging.getLogger(__name__)


def _pick(stored: Any, default: Any) -> Any:
    return default if stored is None else stored


class PlatformService:
    """플랫폼 설정 관련 비즈니스 로직을 처리하는 서비스.

    Service handling platform configuration.
    """

    def build_pricing_config(self, row: PlatformConfig | None) -> PricingConfig:
        """저장된 설정과 기본값을 병합해 PricingConfig를 만듭니다.

        Merge the stored row with settings.DEFAULT_* into a PricingConfig.

        Args:
            row: 플랫폼 설정 행, 없으면 None (Stored row or None)

        Returns:
            PricingConfig: 불변 가격 설정 (Immutable pricing configuration)
        """
        return PricingConfig(
            fee_model=settings.FEE_MODEL,
            platform_fee_per_shift=Decimal(_pick(row and row.platform_fee_per_shift, settings.DEFAULT_PLATFORM_FEE_PER_SHIFT)),
            free_shifts_per_cafe=int(_pick(row and row.free_shifts_per_cafe, settings.DEFAULT_FREE_SHIFTS_PER_CAFE)),
            platform_fee_percentage=Decimal(_pick(row and row.platform_fee_percentage, settings.DEFAULT_PLATFORM_FEE_PERCENTAGE)),
            minimum_hours_before_shift=int(_pick(row and row.minimum_hours_before_shift, settings.DEFAULT_MINIMUM_HOURS_BEFORE_SHIFT)),
            tier_floor_under_12h=Decimal(_pick(row and row.tier_floor_under_12h, settings.DEFAULT_TIER_FLOOR_UNDER_12H)),
            tier_floor_12_to_24h=Decimal(_pick(row and row.tier_floor_12_to_24h, settings.DEFAULT_TIER_FLOOR_12_TO_24H)),
            tier_floor_24h_plus=Decimal(_pick(row and row.tier_floor_24h_plus, settings.DEFAULT_TIER_FLOOR_24H_PLUS)),
            cafe_penalty_percentage=Decimal(_pick(row and row.cafe_penalty_percentage, settings.DEFAULT_CAFE_PENALTY_PERCENTAGE)),
            employee_penalty_percentage=Decimal(_pick(row and row.employee_penalty_percentage, settings.DEFAULT_EMPLOYEE_PENALTY_PERCENTAGE)),
            employee_price_deduction_percentage=Decimal(
                _pick(row and row.employee_price_deduction_percentage, settings.DEFAULT_EMPLOYEE_PRICE_DEDUCTION_PERCENTAGE)
            ),
        )

    async def get_pricing_config(self, db: AsyncSession) -> PricingConfig:
        """현재 작업에 적용할 가격 설정 — Resolve the config once per operation."""
        row: PlatformConfig | None = await platform_config_repository.get_current(db)
        return self.build_pricing_config(row)

    def _to_response(self, config: PricingConfig) -> PlatformConfigResponse:
        return PlatformConfigResponse(
            fee_model=config.fee_model,
            platform_fee_per_shift=config.platform_fee_per_shift,
            free_shifts_per_cafe=config.free_shifts_per_cafe,
            platform_fee_percentage=config.platform_fee_percentage,
            minimum_hours_before_shift=config.minimum_hours_before_shift,
            tier_floor_under_12h=config.tier_floor_under_12h,
            tier_floor_12_to_24h=config.tier_floor_12_to_24h,
            tier_floor_24h_plus=config.tier_floor_24h_plus,
            cafe_penalty_percentage=config.cafe_penalty_percentage,
            employee_penalty_percentage=config.employee_penalty_percentage,
            employee_price_deduction_percentage=config.employee_price_deduction_percentage,
        )

    async def get_config(self, db: AsyncSession) -> PlatformConfigResponse:
        return self._to_response(await self.get_pricing_config(db))

    async def update_config(
        self,
        db: AsyncSession,
        admin_id: UUID,
        data: PlatformConfigUpdate,
    ) -> PlatformConfigResponse:
        """플랫폼 설정을 수정합니다.

        Update the platform configuration. Only keys present in the request
        are changed; an explicit null resets the key to its default.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            admin_id: 수정한 관리자 ID (Admin UUID)
            data: 수정 데이터 (Partial update)

        Returns:
            PlatformConfigResponse: 적용 중인 설정 (Effective configuration)
        """
        row: PlatformConfig = await platform_config_repository.get_or_create(db)
        update_data: dict[str, Any] = data.model_dump(exclude_unset=True)
        update_data["updated_by"] = admin_id
        row = await platform_config_repository.update(db, row, update_data)
        logger.info("Platform config updated by %s: %s", admin_id, sorted(update_data))
        return self._to_response(self.build_pricing_config(row))

    async def get_shift_pricing(self, db: AsyncSession) -> ShiftPricingResponse:
        config: PricingConfig = await self.get_pricing_config(db)
        return ShiftPricingResponse(
            minimum_hours_before_shift=config.minimum_hours_before_shift,
            tier_floor_under_12h=config.tier_floor_under_12h,
            tier_floor_12_to_24h=config.tier_floor_12_to_24h,
            tier_floor_24h_plus=config.tier_floor_24h_plus,
            fee_model=config.fee_model,
            platform_fee_per_shift=config.platform_fee_per_shift,
            free_shifts_per_cafe=config.free_shifts_per_cafe,
            platform_fee_percentage=config.platform_fee_percentage,
        )

    async def get_public_config(self, db: AsyncSession) -> PublicConfigResponse:
        config: PricingConfig = await self.get_pricing_config(db)
        return PublicConfigResponse(
            employee_price_deduction_percentage=config.employee_price_deduction_percentage,
        )

    async def get_bank_details(self, db: AsyncSession) -> BankDetails:
        row: PlatformConfig | None = await platform_config_repository.get_current(db)
        if row is None or not row.bank_details:
            raise NotFoundError("Platform bank details have not been configured")
        return BankDetails.model_validate(row.bank_details)

    async def update_bank_details(
        self,
        db: AsyncSession,
        admin_id: UUID,
        data: BankDetails,
    ) -> BankDetails:
        row: PlatformConfig = await platform_config_repository.get_or_create(db)
        await platform_config_repository.update(
            db, row, {"bank_details": data.model_dump(exclude_none=True), "updated_by": admin_id}
        )
        logger.info("Platform bank details updated by %s (type=%s)", admin_id, data.type)
        return data


# 싱글턴 인스턴스 — Singleton instance
platform_service: PlatformService = PlatformService()
