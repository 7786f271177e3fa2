"""앱 플랫폼 라우터 — 가격 정책, 공개 설정, 입금 계좌.

App Platform Router — Pricing policy for cafés, public configuration and
the platform's bank details.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_cafe, require_member
from app.database import get_db
from app.models.user import User
from app.schemas.platform import BankDetails, PublicConfigResponse, ShiftPricingResponse
from app.services.platform_service import platform_service

router: APIRouter = APIRouter()


@router.get("/shift-pricing", response_model=ShiftPricingResponse)
async def get_shift_pricing(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_cafe)],
) -> ShiftPricingResponse:
    """근무 가격 정책 — Lead time, tier floors and fee schedule."""
    return await platform_service.get_shift_pricing(db)


@router.get("/config", response_model=PublicConfigResponse)
async def get_public_config(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> PublicConfigResponse:
    return await platform_service.get_public_config(db)


@router.get("/bank-details", response_model=BankDetails)
async def get_bank_details(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> BankDetails:
    """플랫폼 입금 계좌 — Bank details cafés pay into."""
    return await platform_service.get_bank_details(db)
